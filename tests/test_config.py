import argparse
import json
import os
import tempfile
import unittest

from engine.config import RunConfig, build_run_config, load_config, validate_config
from engine.errors import UsageError

URL = "https://youtu.be/abc123"


def _args(**overrides):
    values = {
        "url": URL,
        "output": None,
        "quality": None,
        "format": None,
        "no_metadata": False,
        "keep_video": False,
        "compress": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class ConfigTests(unittest.TestCase):
    def test_defaults(self):
        config = build_run_config(_args())
        self.assertEqual(config.output_dir, ".")
        self.assertEqual(config.quality, 192)
        self.assertEqual(config.audio_format, "mp3")
        self.assertTrue(config.embed_metadata)
        self.assertFalse(config.keep_video)
        self.assertFalse(config.compress)
        self.assertEqual(config.concurrent_fragments, 5)
        self.assertEqual(config.throttled_rate, "100K")

    def test_cli_wins_over_file(self):
        file_config = {"quality": 128, "audio_format": "flac", "keep_video": True}
        config = build_run_config(_args(quality="320", no_metadata=True), file_config)
        self.assertEqual(config.quality, 320)
        self.assertEqual(config.audio_format, "flac")
        self.assertTrue(config.keep_video)
        self.assertFalse(config.embed_metadata)

    def test_run_config_is_frozen(self):
        config = RunConfig(url=URL)
        with self.assertRaises(Exception):
            config.quality = 1

    def test_run_config_rejects_bad_values(self):
        with self.assertRaises(UsageError):
            RunConfig(url=URL, quality=999)
        with self.assertRaises(UsageError):
            RunConfig(url=URL, audio_format="ogg")

    def test_validate_config(self):
        self.assertEqual(validate_config({"quality": 256, "compress": True}), [])
        errors = validate_config({
            "quality": 900,
            "audio_format": "aac",
            "compress": "yes",
            "concurrent_fragments": 0,
            "bogus": 1,
        })
        self.assertIn("unknown config key: bogus", errors)
        self.assertIn("quality must be between 0 and 512", errors)
        self.assertIn("compress must be true/false", errors)
        self.assertIn("concurrent_fragments must be >= 1", errors)
        self.assertEqual(len(errors), 5)
        self.assertEqual(validate_config([]), ["config must be a JSON object"])

    def test_invalid_file_config_is_usage_error(self):
        with self.assertRaises(UsageError):
            build_run_config(_args(), {"quality": "loud"})

    def test_null_values_are_rejected(self):
        errors = validate_config({"output_dir": None, "video_max_height": None})
        self.assertEqual(errors, ["output_dir must not be null", "video_max_height must not be null"])
        with self.assertRaises(UsageError):
            build_run_config(_args(), {"output_dir": None})

    def test_load_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                json.dump({"quality": 256}, f)
            self.assertEqual(load_config(path), {"quality": 256})
            with self.assertRaises(UsageError):
                load_config(os.path.join(tmpdir, "missing.json"))
