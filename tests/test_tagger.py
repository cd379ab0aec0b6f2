import os
import tempfile
import unittest

from mutagen.id3 import ID3, TIT2

from engine.core import VideoMetadata
from metadata.tagger import apply_source_tags, source_tags

URL = "https://youtu.be/abc123"


class TaggerTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.meta = VideoMetadata(title="My Song", uploader="Some Channel", upload_date="20250115")

    def tearDown(self):
        self.tmpdir.cleanup()

    def _write(self, name, data=b"\0" * 64):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, "wb") as f:
            f.write(data)
        return path

    def test_source_tags(self):
        tags = source_tags(self.meta, URL)
        self.assertEqual(tags["title"], "My Song")
        self.assertEqual(tags["artist"], "Some Channel")
        self.assertEqual(tags["date"], "2025-01-15")
        self.assertEqual(tags["source"], "YouTube")
        self.assertEqual(tags["source_url"], URL)

    def test_malformed_upload_date_gives_empty_date(self):
        meta = VideoMetadata(title="x", upload_date="2025")
        self.assertEqual(source_tags(meta, URL)["date"], "")

    def test_wav_is_skipped(self):
        path = self._write("song.wav")
        self.assertFalse(apply_source_tags(path, self.meta, URL))

    def test_id3_fills_missing_without_overwriting(self):
        path = self._write("song.mp3")
        existing = ID3()
        existing.add(TIT2(encoding=3, text=["Original Title"]))
        existing.save(path)

        self.assertTrue(apply_source_tags(path, self.meta, URL))
        tags = ID3(path)
        self.assertEqual(str(tags["TIT2"]), "Original Title")
        self.assertEqual(str(tags["TPE1"]), "Some Channel")
        descs = {frame.desc: str(frame) for frame in tags.getall("TXXX")}
        self.assertEqual(descs["SOURCE_URL"], URL)

        self.assertFalse(apply_source_tags(path, self.meta, URL))

    def test_unknown_values_are_not_written(self):
        path = self._write("song.mp3")
        meta = VideoMetadata(title="My Song", uploader="Unknown")
        apply_source_tags(path, meta, URL)
        self.assertEqual(ID3(path).getall("TPE1"), [])
