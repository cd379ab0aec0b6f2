#!/usr/bin/env python3
"""
Download a YouTube video and convert it to audio with yt-dlp and ffmpeg.
- Output lands in an `audio__<title>` folder with a metadata.md report.
- Optional thumbnail, original video and zip archive of the folder.
- One timestamped log file per run, beside this script by default.
"""

import os
import sys

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from engine.cli import main


if __name__ == "__main__":
    sys.exit(main())
