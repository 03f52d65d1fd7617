"""Custom exceptions for the media pipeline."""

from __future__ import annotations


class MediaPipelineError(Exception):
    """Base exception for all media pipeline errors."""


class ItemProcessingError(MediaPipelineError):
    """Error confined to a single media item; never aborts the batch."""

    kind = "processing"

    def __init__(self, message: str, media_id: str = "") -> None:
        super().__init__(message)
        self.media_id = media_id


class NoURLError(ItemProcessingError):
    """Item has neither a thumbnail nor a media URL."""

    kind = "no_url"


class DownloadError(ItemProcessingError):
    """Transport failure or non-success status while fetching source bytes."""

    kind = "download"

    def __init__(
        self, message: str, media_id: str = "", status_code: int | None = None
    ) -> None:
        super().__init__(message, media_id)
        self.status_code = status_code


class DecodeError(ItemProcessingError):
    """Fetched bytes are not a decodable image."""

    kind = "decode"


class EncodeError(ItemProcessingError):
    """Resize or encode failed for one or more variants."""

    kind = "encode"


class WriteError(ItemProcessingError):
    """An encoded variant could not be written to the storage root."""

    kind = "write"


class StorageError(MediaPipelineError):
    """Storage root creation or manifest write failed; fatal to the batch."""


class ConfigurationError(MediaPipelineError):
    """Error raised for invalid configuration options."""
