"""Image and URL utilities for the media pipeline."""

import posixpath
from typing import Optional
from urllib.parse import quote, urlparse

from .exceptions import NoURLError
from .models import MediaItem

VIDEO_EXTENSIONS = frozenset({".mp4", ".mov", ".m4v", ".webm", ".avi", ".mkv", ".3gp"})

# quote() leaves these literal; "_" separates the fields of a variant file name.
_EXTRA_ESCAPES = {".": "%2E", "_": "%5F", "~": "%7E"}


def select_source_url(item: MediaItem) -> str:
    """
    Pick the URL to fetch for a media item.

    The thumbnail wins when present, so videos are processed through their
    still image. Falls back to the media URL.

    Args:
        item: Media item to inspect

    Returns:
        URL to fetch

    Raises:
        NoURLError: If the item has neither URL
    """
    if item.thumbnail_url and item.thumbnail_url.strip():
        return item.thumbnail_url.strip()
    if item.source_url and item.source_url.strip():
        return item.source_url.strip()
    raise NoURLError(f"No URL available for media {item.id}", media_id=item.id)


def url_extension(url: str) -> str:
    """Lower-cased extension of the URL path, ignoring query and fragment."""
    path = urlparse(url).path
    return posixpath.splitext(path)[1].lower()


def is_non_image_url(url: str) -> bool:
    """True when the URL points at a video container by extension."""
    return url_extension(url) in VIDEO_EXTENSIONS


def should_skip(item: MediaItem, url: str) -> bool:
    """
    Decide whether an item is non-image content that must be skipped.

    Args:
        item: Media item being processed
        url: URL chosen by ``select_source_url``

    Returns:
        True for video content without an image fallback
    """
    if is_non_image_url(url):
        return True
    # A VIDEO record whose media URL carries no extension is still a video.
    selected_media_url = url == (item.source_url or "").strip()
    return selected_media_url and (item.media_type or "").upper() == "VIDEO"


def derive_height(source_width: int, source_height: int, target_width: int) -> int:
    """
    Height that preserves the aspect ratio at ``target_width``.

    Rounds half up and never returns less than one pixel.
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f"Invalid source dimensions: {source_width}x{source_height}")
    return max(1, int(target_width * source_height / source_width + 0.5))


def encode_name_component(value: str) -> str:
    """
    Reversibly encode a media id or variant name for use inside a file name.

    Every character outside ``[A-Za-z0-9-]`` is percent-encoded (UTF-8), so
    distinct values never share an encoding, the result contains no path
    separator, and ``urllib.parse.unquote`` recovers the original.
    """
    encoded = quote(value, safe="")
    for char, escape in _EXTRA_ESCAPES.items():
        encoded = encoded.replace(char, escape)
    return encoded


def variant_file_name(
    media_id: str, target_width: int, variant_name: str, extension: Optional[str] = "webp"
) -> str:
    """
    Deterministic file name for one variant of a media item.

    Args:
        media_id: Media identifier
        target_width: Configured variant width
        variant_name: Configured variant name
        extension: File extension without the dot

    Returns:
        ``<media_id>_<width>w_<name>.<ext>`` with both identifiers encoded
        by ``encode_name_component``; the mapping is injective
    """
    base = (
        f"{encode_name_component(media_id)}_{target_width}w_"
        f"{encode_name_component(variant_name)}"
    )
    if extension:
        return f"{base}.{extension.lstrip('.')}"
    return base
