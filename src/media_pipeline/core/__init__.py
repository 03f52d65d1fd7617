"""Core utilities and shared components for the media pipeline."""

from .logging_config import get_logger, setup_logger
from .exceptions import (
    MediaPipelineError,
    ItemProcessingError,
    NoURLError,
    DownloadError,
    DecodeError,
    EncodeError,
    WriteError,
    StorageError,
    ConfigurationError,
)
from .models import (
    DEFAULT_VARIANT_SPECS,
    BatchOutcome,
    ImageVariant,
    ItemResult,
    ItemStatus,
    MediaItem,
    MediaManifestEntry,
    PipelineConfig,
    VariantSpec,
)
from .codec import PillowImageCodec
from .fetchers import HttpFetcher, S3Fetcher, SchemeRoutingFetcher
from .manifest import ManifestWriter

__all__ = [
    "setup_logger",
    "get_logger",
    "MediaPipelineError",
    "ItemProcessingError",
    "NoURLError",
    "DownloadError",
    "DecodeError",
    "EncodeError",
    "WriteError",
    "StorageError",
    "ConfigurationError",
    "DEFAULT_VARIANT_SPECS",
    "BatchOutcome",
    "ImageVariant",
    "ItemResult",
    "ItemStatus",
    "MediaItem",
    "MediaManifestEntry",
    "PipelineConfig",
    "VariantSpec",
    "PillowImageCodec",
    "HttpFetcher",
    "S3Fetcher",
    "SchemeRoutingFetcher",
    "ManifestWriter",
]
