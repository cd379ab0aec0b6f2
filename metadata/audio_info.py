import logging

from mutagen import File as MutagenFile
from mutagen import MutagenError


def read_audio_info(file_path):
    """Stream details for the report; None when mutagen cannot parse the file."""
    try:
        audio = MutagenFile(file_path)
    except (MutagenError, OSError) as exc:
        logging.warning("Could not inspect audio file %s: %s", file_path, exc)
        return None
    if not audio or not audio.info:
        return None
    info = audio.info
    length = getattr(info, "length", None)
    bitrate = getattr(info, "bitrate", None)
    sample_rate = getattr(info, "sample_rate", None)
    return {
        "length_seconds": int(round(length)) if length else None,
        "bitrate_kbps": int(round(bitrate / 1000)) if bitrate else None,
        "sample_rate": sample_rate or None,
        "channels": getattr(info, "channels", None),
    }
