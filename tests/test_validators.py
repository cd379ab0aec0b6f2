import unittest

from engine.errors import InvalidInput, UsageError
from engine.validators import is_supported_url, parse_format, parse_quality, validate_url


class UrlValidationTests(unittest.TestCase):
    def test_accepts_known_shapes(self):
        urls = [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtube.com/watch?v=dQw4w9WgXcQ&t=42",
            "https://youtu.be/abc123",
            "https://www.youtube.com/embed/abc123",
            "https://music.youtube.com/watch?v=abc123",
            "https://www.youtube.com/playlist?list=PL123",
        ]
        for url in urls:
            self.assertTrue(is_supported_url(url), url)
            self.assertEqual(validate_url(url), url)

    def test_rejects_other_hosts(self):
        for url in ["https://vimeo.com/123", "youtu.be/abc", "http://youtu.be/abc", "", None]:
            self.assertFalse(is_supported_url(url), url)

    def test_validate_url_raises(self):
        with self.assertRaises(InvalidInput):
            validate_url("https://vimeo.com/123")
        with self.assertRaises(InvalidInput):
            validate_url("")


class OptionParsingTests(unittest.TestCase):
    def test_quality_bounds(self):
        self.assertEqual(parse_quality("192"), 192)
        self.assertEqual(parse_quality("512"), 512)
        self.assertEqual(parse_quality("0"), 0)
        self.assertEqual(parse_quality(320), 320)
        for bad in ["513", "999", "-1", "12.5", "abc", "", " 192 ", "192\n", None, True]:
            with self.assertRaises(UsageError):
                parse_quality(bad)

    def test_format_enum(self):
        for fmt in ["mp3", "m4a", "flac", "wav", "opus"]:
            self.assertEqual(parse_format(fmt), fmt)
        for bad in ["ogg", "MP3", "", None]:
            with self.assertRaises(UsageError):
                parse_format(bad)
