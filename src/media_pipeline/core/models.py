"""Shared data models for the media pipeline."""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MediaItem(BaseModel):
    """A remote media reference to be transcoded.

    Field aliases follow the JSON written by the media API client, so raw
    records can be loaded with ``MediaItem.model_validate(record)``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    source_url: str = Field(default="", alias="media_url")
    thumbnail_url: Optional[str] = None
    timestamp: str = ""
    media_type: Optional[str] = None
    permalink: Optional[str] = None


class VariantSpec(BaseModel):
    """A configured (name, target width) pair. Height is always derived."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    target_width: int = Field(gt=0)


DEFAULT_VARIANT_SPECS: List[VariantSpec] = [
    VariantSpec(name="large", target_width=1024),
    VariantSpec(name="medium", target_width=768),
    VariantSpec(name="small", target_width=384),
    VariantSpec(name="thumb", target_width=256),
]


class ImageVariant(BaseModel):
    """One resized and encoded output of a media item."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    width: int
    height: int


class MediaManifestEntry(BaseModel):
    """Manifest record for one processed media item."""

    media_id: str
    timestamp: str
    versions: Dict[str, ImageVariant] = Field(default_factory=dict)


class ItemStatus(str, Enum):
    """Outcome of processing a single media item."""

    PROCESSED = "processed"
    SKIPPED = "skipped"
    FAILED = "failed"


class ItemResult(BaseModel):
    """Result of processing a single media item."""

    media_id: str
    status: ItemStatus = ItemStatus.FAILED
    versions: Dict[str, ImageVariant] = Field(default_factory=dict)
    error: str = ""
    error_kind: Optional[str] = None
    processing_time: float = 0.0

    @property
    def variants(self) -> List[ImageVariant]:
        """Produced variants in configured order."""
        return list(self.versions.values())


class BatchOutcome(BaseModel):
    """Aggregate result of one pipeline run."""

    processed_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    entries: List[MediaManifestEntry] = Field(default_factory=list)
    failures: Dict[str, str] = Field(default_factory=dict)
    processing_time: float = 0.0

    @property
    def total_count(self) -> int:
        return self.processed_count + self.skipped_count + self.failed_count


class PipelineConfig(BaseModel):
    """Configuration for a pipeline run."""

    storage_root: Path = Path("output/media")
    output_dir: Path = Path("output")
    variant_specs: List[VariantSpec] = Field(
        default_factory=lambda: list(DEFAULT_VARIANT_SPECS), min_length=1
    )
    max_concurrency: int = Field(default=8, ge=1)
    manifest_filename: str = "converted_media.json"
    output_format: str = "WEBP"
    quality: int = Field(default=80, ge=1, le=100)
    partial_variants: bool = False
    request_timeout: float = Field(default=30.0, gt=0)
    debug: bool = False

    @field_validator("variant_specs")
    @classmethod
    def _unique_variant_names(cls, specs: List[VariantSpec]) -> List[VariantSpec]:
        names = [spec.name for spec in specs]
        if len(names) != len(set(names)):
            raise ValueError(f"Variant names must be unique: {names}")
        return specs
