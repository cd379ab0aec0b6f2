import os
from datetime import datetime

from engine.formatting import format_size, seconds_to_clock, value_or_unknown
from engine.naming import list_folder_files
from metadata.audio_info import read_audio_info

REPORT_NAME = "metadata.md"
TOOL_NAME = "ytgrab"


def _file_size(path):
    if not path or not os.path.isfile(path):
        return None
    return os.path.getsize(path)


def _audio_lines(result):
    config = result.config
    lines = [
        f"- **Format**: {config.audio_format}",
        f"- **Quality**: {config.quality}kbps",
        f"- **Metadata Embedded**: {'Yes' if config.embed_metadata else 'No'}",
        f"- **File Size**: {format_size(_file_size(result.artifacts.audio_file))}",
    ]
    info = read_audio_info(result.artifacts.audio_file) if result.artifacts.audio_file else None
    if info:
        if info.get("length_seconds") is not None:
            lines.append(f"- **Detected Length**: {seconds_to_clock(info['length_seconds'])}")
        if info.get("bitrate_kbps"):
            lines.append(f"- **Detected Bitrate**: {info['bitrate_kbps']}kbps")
        if info.get("sample_rate"):
            lines.append(f"- **Sample Rate**: {info['sample_rate']}Hz")
    return lines


def render_report(result, *, files=None):
    meta = result.metadata
    video_size = _file_size(result.artifacts.video_file)
    processed_at = (result.finished_at or datetime.now()).astimezone().isoformat(timespec="seconds")

    lines = [
        "# YouTube Audio Download Metadata",
        "",
        "## Video Information",
        f"- **Title**: {meta.title}",
        f"- **Duration**: {meta.formatted_duration}",
        f"- **Uploader**: {value_or_unknown(meta.uploader)}",
        f"- **Views**: {meta.formatted_views}",
        f"- **Upload Date**: {meta.formatted_date}",
        f"- **URL**: {result.config.url}",
        "",
        "## Audio Settings",
        *_audio_lines(result),
        "",
        "## Video File",
        f"- **File Size**: {format_size(video_size)}" if video_size is not None else "- **Status**: Not downloaded",
        "",
    ]
    if meta.description:
        lines.extend(["## Description", ""])
        lines.extend(f"> {line}" if line else ">" for line in meta.description.splitlines())
        lines.append("")
    lines.extend([
        "## Processing Information",
        f"- **Download Date**: {processed_at}",
        f"- **Processing Script**: {TOOL_NAME}",
        "",
        "## Files in this folder",
    ])
    lines.extend(f"- `{name}`" for name in (files or []))
    return "\n".join(lines) + "\n"


def write_report(result):
    """Write metadata.md into the output folder and return its path."""
    folder = result.artifacts.folder
    report_path = os.path.join(folder, REPORT_NAME)
    files = list_folder_files(folder)
    if REPORT_NAME not in files:
        files = sorted(files + [REPORT_NAME])
    with open(report_path, "w", encoding="utf-8") as f:
        f.write(render_report(result, files=files))
    return report_path
