class MetadataSource:
    source_name = ""

    def fetch_info(self, url):
        """Full info dict for `url`, or None when the query fails."""
        return None

    def render_template(self, url, template):
        """Evaluate a yt-dlp output template such as '%(title)s' for `url`."""
        return None


class MediaExtractor:
    source_name = ""

    def check_available(self):
        """Raise DependencyMissing if a required tool is absent.

        Returns a list of (tool, version) pairs for the tools that were found.
        """
        return []

    def extract_audio(self, url, folder, stem, *, audio_format, quality, embed_metadata):
        raise NotImplementedError

    def fetch_thumbnail(self, url, folder):
        return False

    def fetch_video(self, url, folder, stem):
        return False


class Archiver:
    archive_format = ""

    def archive(self, folder):
        """Compress `folder` into a sibling archive and return its path."""
        raise NotImplementedError
