import platform
import shutil
from importlib.metadata import PackageNotFoundError, version

from yt_dlp.version import __version__ as YTDLP_VERSION

APP_NAME = "ytgrab"


def get_app_version():
    try:
        return version(APP_NAME)
    except PackageNotFoundError:
        return "0+local"


def get_runtime_info():
    return {
        "app": APP_NAME,
        "version": get_app_version(),
        "yt_dlp": YTDLP_VERSION,
        "python": platform.python_version(),
        "ffmpeg": shutil.which("ffmpeg"),
        "ffprobe": shutil.which("ffprobe"),
    }
