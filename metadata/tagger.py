import logging
import os

from mutagen import File as MutagenFile
from mutagen.id3 import ID3, ID3NoHeaderError, TDRC, TIT2, TPE1, TXXX
from mutagen.mp4 import MP4


def source_tags(meta, url):
    """Tag values derived from the fetched video metadata."""
    upload_date = meta.upload_date or ""
    year = ""
    if len(upload_date) == 8 and upload_date.isdigit():
        year = f"{upload_date[0:4]}-{upload_date[4:6]}-{upload_date[6:8]}"
    return {
        "title": meta.title,
        "artist": meta.uploader,
        "date": year,
        "source": "YouTube",
        "source_url": url,
    }


def apply_source_tags(file_path, meta, url):
    """Fill tags yt-dlp left empty. Existing values are never overwritten.

    Returns True when the file was modified.
    """
    tags = source_tags(meta, url)
    ext = os.path.splitext(file_path)[1].lower()
    if ext == ".mp3":
        return _apply_id3_tags(file_path, tags)
    if ext in {".m4a", ".mp4"}:
        return _apply_mp4_tags(file_path, tags)
    if ext == ".wav":
        logging.info("Skipping source tags for wav output: %s", os.path.basename(file_path))
        return False
    return _apply_generic_tags(file_path, tags)


def _apply_id3_tags(file_path, tags):
    try:
        audio = ID3(file_path)
    except ID3NoHeaderError:
        audio = ID3()
    changed = False
    changed |= _set_id3_text(audio, "TIT2", TIT2, tags.get("title"))
    changed |= _set_id3_text(audio, "TPE1", TPE1, tags.get("artist"))
    changed |= _set_id3_text(audio, "TDRC", TDRC, tags.get("date"))
    changed |= _set_id3_txxx(audio, "SOURCE", tags.get("source"))
    changed |= _set_id3_txxx(audio, "SOURCE_URL", tags.get("source_url"))
    if changed:
        audio.save(file_path)
    return changed


def _apply_mp4_tags(file_path, tags):
    audio = MP4(file_path)
    if audio.tags is None:
        audio.add_tags()
    mp4_tags = audio.tags
    changed = False
    changed |= _set_mp4_value(mp4_tags, "\xa9nam", tags.get("title"))
    changed |= _set_mp4_value(mp4_tags, "\xa9ART", tags.get("artist"))
    changed |= _set_mp4_value(mp4_tags, "\xa9day", tags.get("date"))
    changed |= _set_mp4_freeform(mp4_tags, "SOURCE", tags.get("source"))
    changed |= _set_mp4_freeform(mp4_tags, "SOURCE_URL", tags.get("source_url"))
    if changed:
        audio.save()
    return changed


def _apply_generic_tags(file_path, tags):
    audio = MutagenFile(file_path)
    if not audio:
        logging.warning("Source tagging skipped: unsupported file %s", file_path)
        return False
    if audio.tags is None:
        audio.add_tags()
    changed = False
    changed |= _set_generic(audio.tags, "title", tags.get("title"))
    changed |= _set_generic(audio.tags, "artist", tags.get("artist"))
    changed |= _set_generic(audio.tags, "date", tags.get("date"))
    changed |= _set_generic(audio.tags, "source", tags.get("source"))
    changed |= _set_generic(audio.tags, "source_url", tags.get("source_url"))
    if changed:
        audio.save()
    return changed


def _set_id3_text(audio, frame_id, frame_cls, value):
    if _missing(value) or audio.getall(frame_id):
        return False
    audio.add(frame_cls(encoding=3, text=[str(value)]))
    return True


def _set_id3_txxx(audio, desc, value):
    if _missing(value):
        return False
    for frame in audio.getall("TXXX"):
        if frame.desc == desc:
            return False
    audio.add(TXXX(encoding=3, desc=desc, text=[str(value)]))
    return True


def _set_mp4_value(tags, key, value):
    if _missing(value) or key in tags:
        return False
    tags[key] = [str(value)]
    return True


def _set_mp4_freeform(tags, key, value):
    atom = f"----:com.apple.iTunes:{key}"
    if _missing(value) or atom in tags:
        return False
    tags[atom] = [str(value).encode("utf-8")]
    return True


def _set_generic(tags, key, value):
    if _missing(value):
        return False
    if key in tags and tags.get(key):
        return False
    tags[key] = [str(value)]
    return True


def _missing(value):
    return value is None or value == "" or value == "Unknown"
