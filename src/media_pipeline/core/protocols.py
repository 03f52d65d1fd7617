"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Protocol, Sequence

from PIL import Image

from .models import ItemResult, MediaItem, VariantSpec


class FetcherProtocol(Protocol):
    """Retrieves raw bytes for one source URL."""

    def fetch(self, url: str) -> bytes:
        """Fetch the body at ``url`` or raise DownloadError."""
        ...


class ImageCodecProtocol(Protocol):
    """Decode, resize and encode capability consumed by the pipeline."""

    extension: str

    def decode(self, data: bytes) -> Image.Image:
        """Decode raw bytes to an image or raise DecodeError."""
        ...

    def resize(self, image: Image.Image, width: int) -> Image.Image:
        """Resize to ``width`` preserving aspect ratio or raise EncodeError."""
        ...

    def encode(self, image: Image.Image) -> bytes:
        """Encode to the output format or raise EncodeError."""
        ...


class S3ClientProtocol(Protocol):
    """Subset of the S3 client used by the S3 fetcher."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...


class ItemProcessor(ABC):
    """Abstract per-item processor."""

    @abstractmethod
    def process(
        self, item: MediaItem, variant_specs: Sequence[VariantSpec], storage_root: Path
    ) -> ItemResult:
        """Process a single media item."""
        ...


class BatchProcessFunction(Protocol):
    """Signature shared by the concurrency strategies in ``processors``."""

    def __call__(
        self,
        items: Sequence[MediaItem],
        processor: ItemProcessor,
        variant_specs: Sequence[VariantSpec],
        storage_root: Path,
        max_concurrency: int,
    ) -> List[ItemResult]:
        ...
