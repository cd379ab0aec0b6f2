import logging
import os
import shutil

from engine.adapters import Archiver
from engine.errors import ArchiveError


class ZipArchiver(Archiver):
    archive_format = "zip"

    def archive(self, folder):
        folder = os.path.abspath(folder)
        if not os.path.isdir(folder):
            raise ArchiveError(f"Nothing to compress: {folder} is not a directory")
        formats = {name for name, _desc in shutil.get_archive_formats()}
        if self.archive_format not in formats:
            raise ArchiveError(f"{self.archive_format} support not available, skipping compression")
        parent, name = os.path.split(folder)
        try:
            archive_path = shutil.make_archive(
                folder,
                self.archive_format,
                root_dir=parent,
                base_dir=name,
            )
        except (OSError, ValueError) as exc:
            raise ArchiveError(f"Compression failed: {exc}") from exc
        logging.info("Archive written: %s", archive_path)
        return archive_path
