"""Media classification by file extension."""

from pathlib import PurePosixPath
from typing import Literal

IMAGE_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}

VIDEO_TYPES = {
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
}


def classify_media(filename: str) -> str | None:
    """MIME type for a supported image/video filename, None for anything else.

    None means "skip this file", never an error. Matching is case-insensitive.
    """
    ext = PurePosixPath(filename).suffix.lower()
    return IMAGE_TYPES.get(ext) or VIDEO_TYPES.get(ext)


def media_kind(mime_type: str) -> Literal["image", "video"]:
    return "image" if mime_type.startswith("image/") else "video"
