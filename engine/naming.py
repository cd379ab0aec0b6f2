import glob
import os
import re
import time
import unicodedata
from datetime import datetime

from engine.errors import FilesystemError
from engine.formatting import month_name, ordinal_suffix, weekday_name
from engine.paths import is_writable_dir

FOLDER_PREFIX = "audio__"
_UNSAFE_RE = re.compile(r"[^a-z0-9]+")
_URL_SCRAPS = (
    (re.compile(r"https?://"), ""),
    (re.compile(r"www\."), ""),
    (re.compile(r"youtube\.com"), ""),
    (re.compile(r"watch\?v="), ""),
    (re.compile(r"&.*"), ""),
)
# Files we never treat as the downloaded video.
_NON_VIDEO_EXTS = {".png", ".md", ".part", ".ytdl", ".zip", ".jpg", ".jpeg", ".webp"}


# ------------------------------------------------------------------
# Filename helpers
# ------------------------------------------------------------------

def _str_clean(text):
    if not text:
        return ""
    text = unicodedata.normalize("NFKD", str(text))
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.lower()
    return _UNSAFE_RE.sub("_", text).strip("_")


def timestamp_suffix(now=None):
    """Human readable stamp such as 'wed-2025-jan-15th-at-14-03-09hrs'."""
    now = now or datetime.now()
    day = f"{now.day}{ordinal_suffix(now.day)}"
    stamp = f"{weekday_name(now)}-{now.year}-{month_name(now)}-{day}-at-{now:%H-%M-%S}hrs"
    return stamp.lower()


def sanitize_filename(text, add_timestamp=False, now=None):
    """Map arbitrary text onto a lowercase `[a-z0-9_]` token.

    Runs of anything else (reserved characters, whitespace, punctuation)
    collapse into a single underscore; accents are folded to ASCII first.
    """
    cleaned = _str_clean(text)
    if add_timestamp:
        cleaned = _str_clean(f"{cleaned}_{timestamp_suffix(now)}")
    return cleaned


def fallback_title(now=None):
    seconds = int(now.timestamp()) if now else int(time.time())
    return f"youtube_video_{seconds}"


def strip_url_fragments(title):
    """Drop URL scraps that sometimes leak into titles reported by yt-dlp."""
    if not title:
        return ""
    for pattern, repl in _URL_SCRAPS:
        title = pattern.sub(repl, title)
    return title.strip()


# ------------------------------------------------------------------
# Output layout
# ------------------------------------------------------------------

def output_folder_name(title_token):
    return f"{FOLDER_PREFIX}{title_token}"


def create_output_folder(title_token, output_dir):
    full_path = os.path.abspath(os.path.join(output_dir, output_folder_name(title_token)))
    try:
        os.makedirs(full_path, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(f"Cannot create output folder: {full_path} ({exc})") from exc
    if not is_writable_dir(full_path):
        raise FilesystemError(f"Output folder is not writable: {full_path}")
    return full_path


# ------------------------------------------------------------------
# Output discovery
# ------------------------------------------------------------------

def _files_matching(folder, pattern):
    matches = [
        path for path in glob.glob(os.path.join(glob.escape(folder), pattern))
        if os.path.isfile(path)
    ]
    return sorted(matches)


def resolve_output_file(folder, stem, ext):
    """Find the file yt-dlp produced for `stem`.

    The exact `<stem>.<ext>` path wins; otherwise the first `*<stem>*.<ext>`
    inside `folder` (never below it). Returns None when nothing matches.
    """
    expected = os.path.join(folder, f"{stem}.{ext}")
    if os.path.isfile(expected):
        return expected
    matches = _files_matching(folder, f"*{glob.escape(stem)}*.{ext}")
    return matches[0] if matches else None


def find_thumbnail(folder, prefix="thumbnail"):
    """Thumbnail written as `<prefix>.<ext>`; other files sharing the prefix are ignored."""
    matches = _files_matching(folder, f"{glob.escape(prefix)}.*")
    for path in matches:
        if path.lower().endswith(".png"):
            return path
    return matches[0] if matches else None


def find_video_file(folder, stem, audio_format):
    excluded = set(_NON_VIDEO_EXTS)
    excluded.add(f".{audio_format}")
    for path in _files_matching(folder, f"*{glob.escape(stem)}*"):
        if os.path.splitext(path)[1].lower() not in excluded:
            return path
    return None


def list_folder_files(folder):
    return sorted(
        name for name in os.listdir(folder)
        if os.path.isfile(os.path.join(folder, name))
    )
