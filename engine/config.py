import json
import os
from dataclasses import dataclass

from engine.errors import UsageError
from engine.validators import AUDIO_FORMATS, MAX_QUALITY, parse_format, parse_quality

DEFAULT_QUALITY = 192
DEFAULT_FORMAT = "mp3"

DEFAULT_CONFIG = {
    "output_dir": ".",
    "quality": DEFAULT_QUALITY,
    "audio_format": DEFAULT_FORMAT,
    "embed_metadata": True,
    "keep_video": False,
    "compress": False,
    "concurrent_fragments": 5,
    "throttled_rate": "100K",
    "video_max_height": 1080,
    "description_lines": 5,
}

_BOOL_KEYS = ("embed_metadata", "keep_video", "compress")
_POSITIVE_INT_KEYS = ("concurrent_fragments", "video_max_height", "description_lines")


@dataclass(frozen=True)
class RunConfig:
    url: str
    output_dir: str = "."
    quality: int = DEFAULT_QUALITY
    audio_format: str = DEFAULT_FORMAT
    embed_metadata: bool = True
    keep_video: bool = False
    compress: bool = False
    concurrent_fragments: int = 5
    throttled_rate: str = "100K"
    video_max_height: int = 1080
    description_lines: int = 5

    def __post_init__(self):
        parse_quality(self.quality)
        parse_format(self.audio_format)


def load_config(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as exc:
        raise UsageError(f"Config file not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise UsageError(f"Config file could not be read: {path} ({exc})") from exc


def validate_config(config):
    errors = []
    if not isinstance(config, dict):
        return ["config must be a JSON object"]

    unknown = sorted(set(config) - set(DEFAULT_CONFIG))
    for key in unknown:
        errors.append(f"unknown config key: {key}")
    for key in DEFAULT_CONFIG:
        if key in config and config[key] is None:
            errors.append(f"{key} must not be null")

    output_dir = config.get("output_dir")
    if output_dir is not None and not isinstance(output_dir, str):
        errors.append("output_dir must be a string")

    quality = config.get("quality")
    if quality is not None:
        if not isinstance(quality, int) or isinstance(quality, bool):
            errors.append("quality must be an integer")
        elif quality < 0 or quality > MAX_QUALITY:
            errors.append(f"quality must be between 0 and {MAX_QUALITY}")

    audio_format = config.get("audio_format")
    if audio_format is not None and audio_format not in AUDIO_FORMATS:
        errors.append(f"audio_format must be one of: {', '.join(AUDIO_FORMATS)}")

    for key in _BOOL_KEYS:
        value = config.get(key)
        if value is not None and not isinstance(value, bool):
            errors.append(f"{key} must be true/false")

    for key in _POSITIVE_INT_KEYS:
        value = config.get(key)
        if value is None:
            continue
        if not isinstance(value, int) or isinstance(value, bool):
            errors.append(f"{key} must be an integer")
        elif value < 1:
            errors.append(f"{key} must be >= 1")

    rate = config.get("throttled_rate")
    if rate is not None and not isinstance(rate, (str, int)):
        errors.append("throttled_rate must be a string like '100K' or a byte count")

    return errors


def merge_config(file_config):
    merged = dict(DEFAULT_CONFIG)
    if file_config:
        errors = validate_config(file_config)
        if errors:
            raise UsageError("Invalid config: " + "; ".join(errors))
        merged.update(file_config)
    return merged


def build_run_config(args, file_config=None):
    """CLI values win over the config file, which wins over the defaults."""
    merged = merge_config(file_config)
    output_dir = args.output if args.output is not None else merged["output_dir"]
    quality = args.quality if args.quality is not None else merged["quality"]
    audio_format = args.format if args.format is not None else merged["audio_format"]
    embed_metadata = merged["embed_metadata"] and not args.no_metadata
    return RunConfig(
        url=args.url,
        output_dir=os.path.expanduser(output_dir),
        quality=parse_quality(quality),
        audio_format=parse_format(audio_format),
        embed_metadata=embed_metadata,
        keep_video=args.keep_video or merged["keep_video"],
        compress=args.compress or merged["compress"],
        concurrent_fragments=merged["concurrent_fragments"],
        throttled_rate=str(merged["throttled_rate"]),
        video_max_height=merged["video_max_height"],
        description_lines=merged["description_lines"],
    )
