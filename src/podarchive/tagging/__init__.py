"""Audio metadata tagging."""

from podarchive.tagging.writer import TagWriter, detect_image_mime

__all__ = ["TagWriter", "detect_image_mime"]
