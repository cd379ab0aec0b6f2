import logging
import os
import unittest
from unittest import mock

from engine.errors import DependencyMissing, ExtractionError
from engine.ytdlp import YtDlpExtractor, build_ytdlp_opts, make_progress_hook


def _audio_context(**overrides):
    context = {
        "operation": "audio",
        "folder": "/out/audio__song",
        "stem": "song_stamp",
        "audio_format": "mp3",
        "quality": 192,
        "embed_metadata": True,
        "concurrent_fragments": 5,
        "throttled_rate": "100K",
    }
    context.update(overrides)
    return context


class YtDlpOptionTests(unittest.TestCase):
    def test_audio_options(self):
        opts = build_ytdlp_opts(_audio_context())
        self.assertEqual(opts["format"], "bestaudio/best")
        self.assertEqual(opts["outtmpl"], os.path.join("/out/audio__song", "song_stamp.%(ext)s"))
        self.assertFalse(opts["overwrites"])
        self.assertTrue(opts["noplaylist"])
        self.assertEqual(opts["concurrent_fragment_downloads"], 5)
        self.assertEqual(opts["throttledratelimit"], 100 * 1024)
        keys = [pp["key"] for pp in opts["postprocessors"]]
        self.assertEqual(keys, ["FFmpegExtractAudio", "FFmpegMetadata", "EmbedThumbnail"])
        extract = opts["postprocessors"][0]
        self.assertEqual(extract["preferredcodec"], "mp3")
        self.assertEqual(extract["preferredquality"], "192")
        self.assertTrue(opts["writethumbnail"])
        self.assertTrue(opts["addmetadata"])

    def test_metadata_embedding_disabled(self):
        opts = build_ytdlp_opts(_audio_context(embed_metadata=False, audio_format="flac"))
        self.assertEqual([pp["key"] for pp in opts["postprocessors"]], ["FFmpegExtractAudio"])
        self.assertFalse(opts["writethumbnail"])
        self.assertFalse(opts["addmetadata"])

    def test_wav_skips_cover_art(self):
        opts = build_ytdlp_opts(_audio_context(audio_format="wav"))
        self.assertEqual([pp["key"] for pp in opts["postprocessors"]], ["FFmpegExtractAudio", "FFmpegMetadata"])
        self.assertFalse(opts["writethumbnail"])

    def test_thumbnail_and_video_options(self):
        thumb = build_ytdlp_opts({"operation": "thumbnail", "folder": "/out"})
        self.assertTrue(thumb["skip_download"])
        self.assertTrue(thumb["writethumbnail"])
        self.assertEqual(thumb["outtmpl"], os.path.join("/out", "thumbnail"))
        self.assertEqual(thumb["postprocessors"][0]["format"], "png")

        video = build_ytdlp_opts({
            "operation": "video",
            "folder": "/out",
            "stem": "song_stamp",
            "video_max_height": 720,
        })
        self.assertEqual(video["format"], "best[height<=720]")
        self.assertTrue(video["noplaylist"])
        self.assertFalse(video["overwrites"])

    def test_metadata_options_skip_download(self):
        opts = build_ytdlp_opts({"operation": "metadata"})
        self.assertTrue(opts["skip_download"])
        self.assertNotIn("postprocessors", opts)

    def test_progress_hook_logs_in_steps(self):
        hook = make_progress_hook("audio")
        with self.assertLogs(level=logging.INFO) as captured:
            for done in (0, 5, 10, 55, 100):
                hook({"status": "downloading", "total_bytes": 100, "downloaded_bytes": done})
            hook({"status": "finished"})
        progress = [line for line in captured.output if "[audio]" in line]
        self.assertEqual(len(progress), 5)


class YtDlpExtractorTests(unittest.TestCase):
    def test_missing_binaries(self):
        with mock.patch("engine.ytdlp.shutil.which", return_value=None):
            with self.assertRaises(DependencyMissing) as ctx:
                YtDlpExtractor().check_available()
        self.assertEqual(ctx.exception.missing, ["ffmpeg", "ffprobe"])
        self.assertIn("ffmpeg", ctx.exception.hint)

    def test_nonzero_return_code_is_extraction_error(self):
        extractor = YtDlpExtractor()
        with mock.patch.object(YtDlpExtractor, "_run", return_value=1):
            with self.assertRaises(ExtractionError):
                extractor.extract_audio(
                    "https://youtu.be/abc",
                    "/tmp",
                    "stem",
                    audio_format="mp3",
                    quality=192,
                    embed_metadata=False,
                )
