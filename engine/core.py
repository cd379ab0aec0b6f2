import logging
import os
from dataclasses import dataclass, field
from datetime import datetime

from mutagen import MutagenError

from engine.errors import ArchiveError, ExtractionError
from engine.formatting import (
    format_date,
    format_duration,
    format_number,
    format_size,
    seconds_to_clock,
    value_or_unknown,
)
from engine.logs import log_success
from engine.naming import (
    create_output_folder,
    fallback_title,
    find_thumbnail,
    find_video_file,
    resolve_output_file,
    sanitize_filename,
    strip_url_fragments,
)
from engine.validators import validate_url
from metadata.report import write_report
from metadata.tagger import apply_source_tags


@dataclass
class VideoMetadata:
    title: str
    duration: str | None = None
    uploader: str | None = None
    view_count: str | None = None
    upload_date: str | None = None
    description: str = ""
    video_id: str | None = None
    title_is_fallback: bool = False

    @property
    def formatted_duration(self):
        return format_duration(self.duration)

    @property
    def formatted_views(self):
        return format_number(self.view_count)

    @property
    def formatted_date(self):
        return format_date(self.upload_date)


@dataclass
class Artifacts:
    folder: str | None = None
    audio_file: str | None = None
    thumbnail_file: str | None = None
    video_file: str | None = None
    report_file: str | None = None
    archive_file: str | None = None


@dataclass
class StageOutcome:
    stage: str
    ok: bool
    message: str = ""
    path: str | None = None


@dataclass
class RunResult:
    config: object
    metadata: VideoMetadata | None = None
    artifacts: Artifacts = field(default_factory=Artifacts)
    outcomes: list[StageOutcome] = field(default_factory=list)
    stem: str | None = None
    finished_at: datetime | None = None
    ok: bool = False

    @property
    def warnings(self):
        return [outcome for outcome in self.outcomes if not outcome.ok]

    def record(self, stage, ok, message="", path=None):
        outcome = StageOutcome(stage=stage, ok=ok, message=message, path=path)
        self.outcomes.append(outcome)
        if ok:
            log_success(message)
        else:
            logging.warning(message)
        return outcome


# ------------------------------------------------------------------
# Metadata
# ------------------------------------------------------------------

def _title_looks_broken(title):
    return not title or "ERROR" in title or "http" in title


def _first_lines(text, count):
    if not text:
        return ""
    return "\n".join(str(text).splitlines()[:count])


def _as_text(value):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def fetch_video_metadata(url, source, *, description_lines=5, now=None):
    logging.info("Fetching video information for %s", url)
    info = source.fetch_info(url) or {}
    title = _as_text(info.get("title"))

    if _title_looks_broken(title):
        logging.warning("Failed to fetch title directly, trying alternative method...")
        title = _as_text(source.render_template(url, "%(title)s"))

    title_is_fallback = False
    if not title or "http" in title:
        title = fallback_title(now)
        title_is_fallback = True
        logging.warning("Failed to fetch video information. Using fallback title %s", title)

    title = strip_url_fragments(title)
    if not title:
        title = fallback_title(now)
        title_is_fallback = True

    duration = _as_text(info.get("duration_string")) or seconds_to_clock(info.get("duration"))
    meta = VideoMetadata(
        title=title,
        duration=duration,
        uploader=_as_text(info.get("uploader")) or _as_text(info.get("channel")),
        view_count=_as_text(info.get("view_count")),
        upload_date=_as_text(info.get("upload_date")),
        description=_first_lines(info.get("description"), description_lines),
        video_id=_as_text(info.get("id")),
        title_is_fallback=title_is_fallback,
    )
    _log_video_metadata(meta)
    return meta


def _log_video_metadata(meta):
    lines = [
        "VIDEO METADATA:",
        "┌──────────────────────────────────────────────",
        f"│ Title: {meta.title}",
        f"│ Duration: {value_or_unknown(meta.duration)}",
        f"│ Uploader: {value_or_unknown(meta.uploader)}",
        f"│ Views: {value_or_unknown(meta.view_count)}",
        f"│ Upload Date: {value_or_unknown(meta.upload_date)}",
    ]
    if meta.description:
        lines.append("│ Description (first lines):")
        lines.extend(f"│   {line}" for line in meta.description.splitlines())
    lines.append("└──────────────────────────────────────────────")
    logging.info("\n".join(lines))


# ------------------------------------------------------------------
# Pipeline stages
# ------------------------------------------------------------------

def check_dependencies(extractor):
    for tool, version in extractor.check_available():
        logging.info("%s version: %s", tool, version)


def _file_size(path):
    try:
        return os.path.getsize(path)
    except OSError:
        return None


def download_audio(config, extractor, folder, stem):
    logging.info("Output: %s", os.path.join(folder, f"{stem}.{config.audio_format}"))
    if config.embed_metadata:
        logging.info("Audio metadata will be embedded (title, artist, thumbnail)")
    else:
        logging.info("Audio metadata embedding disabled")
    logging.info("Starting download and conversion...")
    extractor.extract_audio(
        config.url,
        folder,
        stem,
        audio_format=config.audio_format,
        quality=config.quality,
        embed_metadata=config.embed_metadata,
    )
    audio_file = resolve_output_file(folder, stem, config.audio_format)
    if not audio_file:
        raise ExtractionError(
            f"Download reported success but no {config.audio_format} file for {stem} was found in {folder}"
        )
    log_success(
        "Download completed: %s (Size: %s)",
        audio_file,
        format_size(_file_size(audio_file)),
    )
    return audio_file


def fetch_thumbnail(result, extractor, title):
    folder = result.artifacts.folder
    logging.info("Downloading thumbnail...")
    if not extractor.fetch_thumbnail(result.config.url, folder):
        return result.record("thumbnail", False, "Thumbnail not available or download failed")
    found = find_thumbnail(folder)
    if not found or os.path.abspath(found) == os.path.abspath(result.artifacts.audio_file or ""):
        return result.record("thumbnail", False, "Thumbnail not available or download failed")
    final_name = os.path.join(folder, f"{sanitize_filename(f'{title}_thumbnail')}.png")
    try:
        os.replace(found, final_name)
    except OSError as exc:
        return result.record("thumbnail", False, f"Thumbnail rename failed: {exc}")
    result.artifacts.thumbnail_file = final_name
    return result.record("thumbnail", True, f"Thumbnail downloaded: {os.path.basename(final_name)}", final_name)


def tag_audio(result):
    audio_file = result.artifacts.audio_file
    try:
        changed = apply_source_tags(audio_file, result.metadata, result.config.url)
    except (MutagenError, OSError) as exc:
        return result.record("tags", False, f"Source tagging failed for {os.path.basename(audio_file)}: {exc}")
    if changed:
        return result.record("tags", True, "Source tags written to audio file", audio_file)
    return result.record("tags", True, "Audio tags already complete", audio_file)


def fetch_video(result, extractor):
    folder = result.artifacts.folder
    logging.info("Downloading video file...")
    if extractor.fetch_video(result.config.url, folder, result.stem):
        video_file = find_video_file(folder, result.stem, result.config.audio_format)
        if video_file:
            result.artifacts.video_file = video_file
            return result.record(
                "video",
                True,
                f"Video downloaded: {os.path.basename(video_file)} (Size: {format_size(_file_size(video_file))})",
                video_file,
            )
    return result.record("video", False, "Video download failed")


def create_report(result):
    try:
        report_file = write_report(result)
    except OSError as exc:
        return result.record("report", False, f"Metadata file could not be written: {exc}")
    result.artifacts.report_file = report_file
    return result.record("report", True, f"Metadata file created: {os.path.basename(report_file)}", report_file)


def compress_folder(result, archiver):
    logging.info("Compressing output folder...")
    try:
        archive_path = archiver.archive(result.artifacts.folder)
    except ArchiveError as exc:
        return result.record("archive", False, exc.message)
    result.artifacts.archive_file = archive_path
    return result.record(
        "archive",
        True,
        f"Folder compressed: {os.path.basename(archive_path)} (Size: {format_size(_file_size(archive_path))})",
        archive_path,
    )


def _log_summary(result):
    audio_file = result.artifacts.audio_file
    lines = [
        "AUDIO FILE CREATED:",
        "┌──────────────────────────────────────────────",
        f"│ File: {os.path.basename(audio_file)}",
        f"│ Size: {format_size(_file_size(audio_file))}",
        f"│ Format: {result.config.audio_format}",
        f"│ Quality: {result.config.quality}kbps",
        f"│ Location: {result.artifacts.folder}",
        "└──────────────────────────────────────────────",
    ]
    logging.info("\n".join(lines))
    for outcome in result.warnings:
        logging.warning("Completed with warning (%s): %s", outcome.stage, outcome.message)


# ------------------------------------------------------------------
# Main pipeline
# ------------------------------------------------------------------

def run_download(config, *, metadata_source, extractor, archiver=None, now=None):
    """Run one download end to end.

    Validation, dependency checks, folder creation and the audio extraction
    raise on failure; everything after that only records warnings.
    """
    result = RunResult(config=config)
    validate_url(config.url)
    check_dependencies(extractor)

    meta = fetch_video_metadata(
        config.url,
        metadata_source,
        description_lines=config.description_lines,
        now=now,
    )
    result.metadata = meta

    title_token = sanitize_filename(meta.title) or sanitize_filename(fallback_title(now))
    folder = create_output_folder(title_token, config.output_dir)
    result.artifacts.folder = folder
    logging.info("Created output folder: %s", os.path.basename(folder))

    result.stem = sanitize_filename(title_token, add_timestamp=True, now=now)
    result.artifacts.audio_file = download_audio(config, extractor, folder, result.stem)
    result.ok = True

    fetch_thumbnail(result, extractor, title_token)
    if config.embed_metadata:
        tag_audio(result)
    if config.keep_video:
        fetch_video(result, extractor)
    result.finished_at = now or datetime.now()
    create_report(result)
    if config.compress:
        if archiver is None:
            result.record("archive", False, "No archiver configured, skipping compression")
        else:
            compress_folder(result, archiver)

    _log_summary(result)
    return result
