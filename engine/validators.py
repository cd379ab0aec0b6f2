from engine.errors import InvalidInput, UsageError

MAX_QUALITY = 512
AUDIO_FORMATS = ("mp3", "m4a", "flac", "wav", "opus")

# Substrings that identify the URL shapes we hand to yt-dlp.
YOUTUBE_URL_PATTERNS = (
    "https://www.youtube.com/watch?v=",
    "https://youtube.com/watch?v=",
    "https://youtu.be/",
    "https://www.youtube.com/embed/",
    "https://music.youtube.com/watch?v=",
    "https://www.youtube.com/playlist?list=",
)


def is_supported_url(url):
    if not url or not isinstance(url, str):
        return False
    return any(pattern in url for pattern in YOUTUBE_URL_PATTERNS)


def validate_url(url):
    if not url:
        raise InvalidInput("YouTube URL is required")
    if not is_supported_url(url):
        raise InvalidInput(f"Invalid YouTube URL: {url}")
    return url


def parse_quality(value):
    """Audio quality in kbps: a plain non-negative integer no larger than 512."""
    if isinstance(value, bool):
        raise UsageError(f"Invalid quality: {value}. Must be a number <= {MAX_QUALITY}")
    if isinstance(value, int):
        quality = value
    else:
        text = str(value) if value is not None else ""
        if not text.isdigit() or not text.isascii():
            raise UsageError(f"Invalid quality: {value}. Must be a number <= {MAX_QUALITY}")
        quality = int(text)
    if quality < 0 or quality > MAX_QUALITY:
        raise UsageError(f"Invalid quality: {value}. Must be a number <= {MAX_QUALITY}")
    return quality


def parse_format(value):
    if value not in AUDIO_FORMATS:
        raise UsageError(f"Unsupported format: {value}. Use: {', '.join(AUDIO_FORMATS)}")
    return value
