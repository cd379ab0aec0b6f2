import logging
import os
import shutil
import subprocess

from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError, PostProcessingError, parse_bytes
from yt_dlp.version import __version__ as YTDLP_VERSION

from engine.adapters import MediaExtractor, MetadataSource
from engine.errors import DependencyMissing, ExtractionError

REQUIRED_BINARIES = ("ffmpeg", "ffprobe")
_NO_THUMBNAIL_EMBED = {"wav"}
_PROGRESS_STEP = 10


def _base_opts():
    return {
        "quiet": True,
        "no_warnings": True,
        "noplaylist": True,
        "logger": logging.getLogger("yt_dlp"),
    }


def _build_audio_postprocessors(audio_format, quality, embed_metadata):
    postprocessors = [{
        "key": "FFmpegExtractAudio",
        "preferredcodec": audio_format,
        "preferredquality": str(quality),
    }]
    if embed_metadata:
        postprocessors.append({"key": "FFmpegMetadata"})
        if audio_format not in _NO_THUMBNAIL_EMBED:
            postprocessors.append({"key": "EmbedThumbnail"})
    return postprocessors


def build_ytdlp_opts(context):
    """Translate one of our operations into YoutubeDL params."""
    opts = _base_opts()
    operation = context.get("operation")

    if operation == "metadata":
        opts["skip_download"] = True
        opts["ignore_no_formats_error"] = True
        return opts

    opts["overwrites"] = False
    progress_hook = context.get("progress_hook")
    if progress_hook:
        opts["progress_hooks"] = [progress_hook]

    if operation == "thumbnail":
        opts["skip_download"] = True
        opts["writethumbnail"] = True
        opts["outtmpl"] = os.path.join(context["folder"], "thumbnail")
        opts["postprocessors"] = [{
            "key": "FFmpegThumbnailsConvertor",
            "format": "png",
            "when": "before_dl",
        }]
        return opts

    opts["outtmpl"] = os.path.join(context["folder"], f"{context['stem']}.%(ext)s")
    opts["concurrent_fragment_downloads"] = context.get("concurrent_fragments", 5)
    rate = parse_bytes(str(context.get("throttled_rate") or "100K"))
    if rate:
        opts["throttledratelimit"] = rate

    if operation == "video":
        opts["format"] = f"best[height<={context.get('video_max_height', 1080)}]"
        return opts

    audio_format = context["audio_format"]
    embed_metadata = bool(context.get("embed_metadata"))
    opts["format"] = "bestaudio/best"
    opts["postprocessors"] = _build_audio_postprocessors(
        audio_format,
        context["quality"],
        embed_metadata,
    )
    opts["addmetadata"] = embed_metadata
    opts["writethumbnail"] = embed_metadata and audio_format not in _NO_THUMBNAIL_EMBED
    return opts


def make_progress_hook(label):
    """Log download progress one line at a time, every 10 percent."""
    state = {"last": -_PROGRESS_STEP}

    def progress_hook(data):
        status = data.get("status")
        if status == "downloading":
            total = data.get("total_bytes") or data.get("total_bytes_estimate")
            downloaded = data.get("downloaded_bytes")
            if not total or downloaded is None:
                return
            percent = int((downloaded / total) * 100)
            if percent - state["last"] < _PROGRESS_STEP:
                return
            state["last"] = percent
            speed = data.get("speed")
            eta = data.get("eta")
            logging.info(
                "[%s] %3d%% of %s bytes (speed=%s, eta=%s)",
                label,
                percent,
                int(total),
                f"{int(speed)}B/s" if speed else "-",
                f"{int(eta)}s" if eta is not None else "-",
            )
        elif status == "finished":
            state["last"] = -_PROGRESS_STEP
            logging.info("[%s] download finished, post-processing", label)

    return progress_hook


def probe_binary_version(path):
    try:
        probe = subprocess.run(
            [path, "-version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
            text=True,
        )
    except OSError:
        return None
    first = (probe.stdout or "").splitlines()[:1]
    if not first:
        return None
    return " ".join(first[0].split()[:3])


class YtDlpMetadataSource(MetadataSource):
    source_name = "yt-dlp"

    def fetch_info(self, url):
        opts = build_ytdlp_opts({"operation": "metadata"})
        try:
            with YoutubeDL(opts) as ydl:
                info = ydl.extract_info(url, download=False)
                return ydl.sanitize_info(info) if info else None
        except DownloadError as exc:
            logging.warning("yt-dlp metadata query failed for %s: %s", url, exc)
            return None

    def render_template(self, url, template):
        opts = build_ytdlp_opts({"operation": "metadata"})
        try:
            with YoutubeDL(opts) as ydl:
                info = ydl.extract_info(url, download=False, process=False)
                if not info:
                    return None
                rendered = ydl.evaluate_outtmpl(template, info)
        except DownloadError as exc:
            logging.warning("yt-dlp template query failed for %s: %s", url, exc)
            return None
        rendered = (rendered or "").strip()
        if rendered in {"", "NA"}:
            return None
        return rendered


class YtDlpExtractor(MediaExtractor):
    source_name = "yt-dlp"

    def __init__(self, *, concurrent_fragments=5, throttled_rate="100K", video_max_height=1080):
        self.concurrent_fragments = concurrent_fragments
        self.throttled_rate = throttled_rate
        self.video_max_height = video_max_height

    def check_available(self):
        found = [("yt-dlp", YTDLP_VERSION)]
        missing = []
        for tool in REQUIRED_BINARIES:
            path = shutil.which(tool)
            if not path:
                missing.append(tool)
                continue
            found.append((tool, probe_binary_version(path) or "unknown"))
        if missing:
            raise DependencyMissing(missing)
        return found

    def _context(self, operation, folder, stem=None, **extra):
        context = {
            "operation": operation,
            "folder": folder,
            "stem": stem,
            "concurrent_fragments": self.concurrent_fragments,
            "throttled_rate": self.throttled_rate,
            "video_max_height": self.video_max_height,
            "progress_hook": make_progress_hook(operation),
        }
        context.update(extra)
        return context

    def _run(self, opts, url):
        with YoutubeDL(opts) as ydl:
            return ydl.download([url])

    def extract_audio(self, url, folder, stem, *, audio_format, quality, embed_metadata):
        opts = build_ytdlp_opts(self._context(
            "audio",
            folder,
            stem,
            audio_format=audio_format,
            quality=quality,
            embed_metadata=embed_metadata,
        ))
        try:
            retcode = self._run(opts, url)
        except (DownloadError, PostProcessingError, OSError) as exc:
            raise ExtractionError(f"Download failed: {exc}") from exc
        if retcode:
            raise ExtractionError(f"Download failed: yt-dlp exited with code {retcode}")

    def fetch_thumbnail(self, url, folder):
        opts = build_ytdlp_opts(self._context("thumbnail", folder))
        try:
            return not self._run(opts, url)
        except (DownloadError, PostProcessingError, OSError) as exc:
            logging.warning("Thumbnail fetch failed: %s", exc)
            return False

    def fetch_video(self, url, folder, stem):
        opts = build_ytdlp_opts(self._context("video", folder, stem))
        try:
            return not self._run(opts, url)
        except (DownloadError, PostProcessingError, OSError) as exc:
            logging.warning("Video fetch failed: %s", exc)
            return False
