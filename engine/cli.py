import argparse
import json
import logging
import sys

from engine.archive import ZipArchiver
from engine.config import DEFAULT_QUALITY, build_run_config, load_config
from engine.core import run_download
from engine.errors import DependencyMissing, GrabberError, InvalidInput, UsageError
from engine.logs import log_success, setup_logging, shutdown_logging
from engine.paths import LOG_DIR, resolve_config_path
from engine.runtime import APP_NAME, get_runtime_info
from engine.validators import AUDIO_FORMATS, validate_url
from engine.ytdlp import YtDlpExtractor, YtDlpMetadataSource

_EPILOG = f"""\
examples:
  {APP_NAME} https://www.youtube.com/watch?v=VIDEO_ID
  {APP_NAME} -o ~/Music -q 320 -f flac https://youtu.be/VIDEO_ID
  {APP_NAME} --no-metadata -q 256 --keep-video --compress https://www.youtube.com/watch?v=VIDEO_ID

quality notes:
  128kbps - good quality, small file size
  192kbps - great quality (recommended)
  320kbps - excellent quality, larger files
"""


class GrabberArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def build_parser():
    parser = GrabberArgumentParser(
        prog=APP_NAME,
        description="Download a YouTube video and convert it to an audio file using yt-dlp.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("url", nargs="?", metavar="YOUTUBE_URL", help="Video URL to download.")
    parser.add_argument("-o", "--output", metavar="DIR", help="Output directory (default: current directory).")
    parser.add_argument("-q", "--quality", metavar="NUM", help=f"Audio quality in kbps, at most 512 (default: {DEFAULT_QUALITY}).")
    parser.add_argument("-f", "--format", choices=AUDIO_FORMATS, metavar="FORMAT",
                        help=f"Audio format: {', '.join(AUDIO_FORMATS)} (default: mp3).")
    parser.add_argument("--no-metadata", action="store_true", help="Skip embedding metadata.")
    parser.add_argument("--keep-video", action="store_true", help="Keep the original video file in the output folder.")
    parser.add_argument("--compress", action="store_true", help="Compress the output folder to a zip file.")
    parser.add_argument("--config", metavar="PATH", help="JSON file with default settings.")
    parser.add_argument("--version", action="store_true", help="Show version info and exit.")
    parser.add_argument("-h", "--help", action="store_true", help="Show this help message and exit.")
    return parser


def _log_arguments(config):
    logging.info("YouTube URL: %s", config.url)
    logging.info("Output directory: %s", config.output_dir)
    logging.info("Audio quality: %skbps", config.quality)
    logging.info("Audio format: %s", config.audio_format)
    if not config.embed_metadata:
        logging.info("Metadata embedding disabled")
    if config.keep_video:
        logging.info("Video file will be kept in output folder")
    if config.compress:
        logging.info("Output folder will be compressed")


def _parse(parser, argv):
    args = parser.parse_args(argv)
    if args.help or args.version:
        return args, None
    config_path = resolve_config_path(args.config)
    file_config = load_config(config_path) if config_path else None
    if not args.url:
        raise UsageError("YouTube URL is required")
    config = build_run_config(args, file_config)
    validate_url(config.url)
    return args, config


def main(argv=None, *, metadata_source=None, extractor=None, archiver=None, log_dir=None):
    parser = build_parser()
    try:
        log_path = setup_logging(log_dir or LOG_DIR)
        logging.info("Starting YouTube audio grabber...")
        if log_path:
            logging.info("Log file: %s", log_path)
        try:
            args, config = _parse(parser, argv)
        except (UsageError, InvalidInput) as exc:
            logging.error(exc.message)
            parser.print_usage(sys.stderr)
            return exc.exit_code

        if args.help:
            parser.print_help()
            return 0
        if args.version:
            print(json.dumps(get_runtime_info(), indent=2))
            return 0

        _log_arguments(config)
        if extractor is None:
            extractor = YtDlpExtractor(
                concurrent_fragments=config.concurrent_fragments,
                throttled_rate=config.throttled_rate,
                video_max_height=config.video_max_height,
            )
        try:
            result = run_download(
                config,
                metadata_source=metadata_source or YtDlpMetadataSource(),
                extractor=extractor,
                archiver=archiver or ZipArchiver(),
            )
        except DependencyMissing as exc:
            logging.error(exc.message)
            logging.info(exc.hint)
            return exc.exit_code
        except GrabberError as exc:
            logging.error(exc.message)
            return exc.exit_code

        if result.warnings:
            log_success("Script execution completed with %d warning(s)", len(result.warnings))
        else:
            log_success("Script execution completed successfully!")
        return 0
    finally:
        shutdown_logging()


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
