class GrabberError(Exception):
    """Base class for failures that end a run with a non-zero exit code."""

    exit_code = 1

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class UsageError(GrabberError):
    """Bad or missing command-line input."""


class InvalidInput(GrabberError):
    """Target identifier does not look like a supported YouTube URL."""


class DependencyMissing(GrabberError):
    def __init__(self, missing, hint=None):
        self.missing = list(missing)
        self.hint = hint or f"Install using: brew install {' '.join(self.missing)}"
        super().__init__(f"Missing required tools: {', '.join(self.missing)}")


class FilesystemError(GrabberError):
    """Output directories could not be created or written."""


class ExtractionError(GrabberError):
    """yt-dlp failed or left no output file we could locate."""


class ArchiveError(GrabberError):
    """Compression failed. Never fatal; the pipeline downgrades it to a warning."""
