import logging
import os
import sys
from datetime import datetime

from engine.paths import ensure_dir

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_RESET = "\033[0m"
_LEVEL_COLORS = {
    "DEBUG": "\033[0;34m",
    "INFO": "\033[0;34m",
    "SUCCESS": "\033[0;32m",
    "WARNING": "\033[1;33m",
    "ERROR": "\033[0;31m",
    "CRITICAL": "\033[0;31m",
}
_FILE_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
_TIME_FORMAT = "%H:%M:%S"


class ConsoleFormatter(logging.Formatter):
    """`[LEVEL] [HH:MM:SS] message`, with the level tag colored on a tty."""

    def __init__(self, use_color=True):
        super().__init__(datefmt=_TIME_FORMAT)
        self.use_color = use_color

    def format(self, record):
        level = record.levelname
        tag = f"[{level}]"
        if self.use_color:
            tag = f"{_LEVEL_COLORS.get(level, '')}{tag}{_RESET}"
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{tag} [{self.formatTime(record, self.datefmt)}] {message}"


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level):
        super().__init__()
        self.max_level = max_level

    def filter(self, record):
        return record.levelno < self.max_level


def log_success(msg, *args):
    logging.log(SUCCESS, msg, *args)


def log_file_name(now=None):
    now = now or datetime.now()
    stamp = f"{now.year}-{now.month}-{now.day}-T{now:%H-%M-%S}"
    return f"ytgrab_{stamp}.log"


def _remove_installed_handlers(root):
    for handler in list(root.handlers):
        if getattr(handler, "_ytgrab_handler", False):
            root.removeHandler(handler)
            handler.close()


def _open_log_file(log_dir, now):
    ensure_dir(log_dir)
    log_path = os.path.join(log_dir, log_file_name(now))
    with open(log_path, "a", encoding="utf-8") as f:
        f.write(f"YouTube Audio Grabber Log - Started at {(now or datetime.now()).ctime()}\n")
        f.write(f"Script: {os.path.basename(sys.argv[0]) or 'ytgrab'}\n")
        f.write(f"Log file: {log_path}\n")
        f.write("=" * 42 + "\n")
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_TIME_FORMAT))
    file_handler.setLevel(logging.INFO)
    file_handler._ytgrab_handler = True
    return log_path, file_handler


def setup_logging(log_dir, *, now=None, console=True, use_color=None):
    """Attach the run log file and the console handlers to the root logger.

    Returns the path of the log file for this run, or None when the log
    file could not be created and only the console is logging.
    """
    root = logging.getLogger("")
    _remove_installed_handlers(root)
    root.setLevel(logging.INFO)

    if console:
        if use_color is None:
            use_color = sys.stderr.isatty()
        out = logging.StreamHandler(sys.stdout)
        out.setFormatter(ConsoleFormatter(use_color=use_color))
        out.setLevel(logging.INFO)
        out.addFilter(_MaxLevelFilter(logging.WARNING))
        out._ytgrab_handler = True
        err = logging.StreamHandler(sys.stderr)
        err.setFormatter(ConsoleFormatter(use_color=use_color))
        err.setLevel(logging.WARNING)
        err._ytgrab_handler = True
        root.addHandler(out)
        root.addHandler(err)

    # yt-dlp chatter is debug-level noise unless it warns.
    logging.getLogger("yt_dlp").setLevel(logging.WARNING)

    try:
        log_path, file_handler = _open_log_file(log_dir, now)
    except OSError as exc:
        logging.warning("Cannot write log file in %s (%s); logging to console only", log_dir, exc)
        return None
    root.addHandler(file_handler)
    return log_path


def shutdown_logging():
    _remove_installed_handlers(logging.getLogger(""))
