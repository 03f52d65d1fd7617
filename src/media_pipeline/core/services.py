"""Service implementations for the media transcoding pipeline."""

import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from PIL import Image

from .error_handling import BatchOperationContextManager
from .exceptions import (
    ConfigurationError,
    EncodeError,
    ItemProcessingError,
    StorageError,
    WriteError,
)
from .image_utils import select_source_url, should_skip, variant_file_name
from .manifest import ManifestWriter
from .models import (
    BatchOutcome,
    ImageVariant,
    ItemResult,
    ItemStatus,
    MediaItem,
    MediaManifestEntry,
    PipelineConfig,
    VariantSpec,
)
from .observability import LogContext, MetricsCollector, PerformanceMetrics
from .protocols import (
    BatchProcessFunction,
    FetcherProtocol,
    ImageCodecProtocol,
    ItemProcessor,
    LoggerProtocol,
)
from .timestamps import sort_newest_first
from ..processors import select_batch_processor


@dataclass(frozen=True)
class RenderedVariant:
    """An encoded variant held in memory until it is written."""

    spec: VariantSpec
    variant: ImageVariant
    data: bytes


class VariantGenerator:
    """Produces one resized, encoded variant per (image, VariantSpec)."""

    def __init__(self, codec: ImageCodecProtocol):
        self._codec = codec

    def render(self, image: Image.Image, spec: VariantSpec, media_id: str) -> RenderedVariant:
        """Resize and encode without touching the filesystem."""
        resized = self._codec.resize(image, spec.target_width)
        data = self._codec.encode(resized)
        file_name = variant_file_name(
            media_id, spec.target_width, spec.name, self._codec.extension
        )
        variant = ImageVariant(file_name=file_name, width=resized.width, height=resized.height)
        return RenderedVariant(spec=spec, variant=variant, data=data)

    def write(self, rendered: RenderedVariant, storage_root: Path) -> ImageVariant:
        """Write an encoded variant atomically under its deterministic name."""
        dest = Path(storage_root) / rendered.variant.file_name
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=dest.parent, prefix=f".{dest.name}.", suffix=".tmp", delete=False
            ) as f:
                tmp_name = f.name
                f.write(rendered.data)
            os.replace(tmp_name, dest)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise WriteError(f"Failed to write {dest}: {e}") from e
        return rendered.variant

    def generate(
        self, image: Image.Image, spec: VariantSpec, media_id: str, storage_root: Path
    ) -> ImageVariant:
        """Render and write a single variant."""
        return self.write(self.render(image, spec, media_id), storage_root)


class ItemProcessingService(ItemProcessor):
    """Processes one media item: classify, fetch, decode, render, write."""

    def __init__(
        self,
        fetcher: FetcherProtocol,
        codec: ImageCodecProtocol,
        logger: LoggerProtocol,
        partial_variants: bool = False,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._fetcher = fetcher
        self._codec = codec
        self._variant_generator = VariantGenerator(codec)
        self._logger = logger
        self._partial_variants = partial_variants
        self._metrics_collector = metrics_collector

    def process(
        self, item: MediaItem, variant_specs: Sequence[VariantSpec], storage_root: Path
    ) -> ItemResult:
        """
        Process a single media item with full error isolation.

        Per-item errors are converted into a failed ItemResult here and never
        propagate. A skipped item is a valid, non-error outcome.
        """
        start_time = time.time()
        log_context = LogContext(
            correlation_id=f"media_{item.id}",
            operation="process_item",
            component="item_processing_service",
        ).with_metadata(media_id=item.id)

        result = ItemResult(media_id=item.id)

        try:
            url = select_source_url(item)

            if should_skip(item, url):
                result.status = ItemStatus.SKIPPED
                self._logger.info("Skipping non-image media", log_context, url=url)
                return result

            self._logger.debug("Downloading media", log_context.with_operation("download"), url=url)
            data = self._fetcher.fetch(url)

            self._logger.debug("Decoding image", log_context.with_operation("decode"))
            image = self._codec.decode(data)

            rendered = self._render_variants(item, image, variant_specs, log_context)

            write_context = log_context.with_operation("write_variants")
            versions: Dict[str, ImageVariant] = {}
            for variant in rendered:
                versions[variant.spec.name] = self._variant_generator.write(variant, storage_root)
                self._logger.debug(
                    f"Created {variant.variant.file_name} "
                    f"({variant.variant.width}x{variant.variant.height})",
                    write_context,
                )

            result.versions = versions
            result.status = ItemStatus.PROCESSED
            self._logger.info(
                "Successfully processed media", log_context, variants=len(versions)
            )

        except ItemProcessingError as e:
            result.status = ItemStatus.FAILED
            result.error = str(e)
            result.error_kind = e.kind
            error_context = log_context.with_metadata(error_kind=e.kind, error=str(e))
            self._logger.error("Media processing failed", error_context)

        finally:
            result.processing_time = time.time() - start_time
            if self._metrics_collector:
                self._metrics_collector.record_metric(
                    PerformanceMetrics(
                        operation="process_item",
                        start_time=start_time,
                        end_time=start_time + result.processing_time,
                        success=result.status is not ItemStatus.FAILED,
                        error_message=result.error or None,
                        metadata={"media_id": item.id, "status": result.status.value},
                    )
                )

        return result

    def _render_variants(
        self,
        item: MediaItem,
        image: Image.Image,
        variant_specs: Sequence[VariantSpec],
        log_context: LogContext,
    ) -> List[RenderedVariant]:
        """Render every configured variant in order before anything is written."""
        render_context = log_context.with_operation("render_variants")
        rendered: List[RenderedVariant] = []

        for spec in variant_specs:
            try:
                rendered.append(self._variant_generator.render(image, spec, item.id))
            except EncodeError as e:
                if not self._partial_variants:
                    raise EncodeError(f"Variant '{spec.name}' failed: {e}", media_id=item.id) from e
                self._logger.warning(
                    f"Dropping variant '{spec.name}'", render_context, error=str(e)
                )

        if not rendered:
            raise EncodeError(f"No variants could be produced for media {item.id}", media_id=item.id)
        return rendered


def validate_variant_specs(variant_specs: Sequence[VariantSpec]) -> None:
    """Reject empty spec lists and duplicate variant names."""
    if not variant_specs:
        raise ConfigurationError("At least one variant spec is required")
    names = [spec.name for spec in variant_specs]
    if len(names) != len(set(names)):
        raise ConfigurationError(f"Variant names must be unique: {names}")


class PipelineCoordinator:
    """Bounded fan-out over media items, fan-in of results, ordered manifest."""

    def __init__(
        self,
        processor: ItemProcessor,
        writer: ManifestWriter,
        logger: LoggerProtocol,
        process_batch_fn: Optional[BatchProcessFunction] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._processor = processor
        self._writer = writer
        self._logger = logger
        self._process_batch_fn = process_batch_fn
        self._metrics_collector = metrics_collector

    def run(
        self,
        items: Sequence[MediaItem],
        variant_specs: Sequence[VariantSpec],
        storage_root: Path,
        max_concurrency: int,
    ) -> BatchOutcome:
        """
        Process every item and aggregate the results.

        Raises:
            ConfigurationError: For invalid concurrency or variant specs
            StorageError: If the storage root cannot be created
        """
        if max_concurrency < 1:
            raise ConfigurationError(f"max_concurrency must be >= 1, got {max_concurrency}")
        validate_variant_specs(variant_specs)

        storage_root = Path(storage_root)
        try:
            storage_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create storage root {storage_root}: {e}") from e

        start_time = time.time()
        process_batch = self._process_batch_fn or select_batch_processor(max_concurrency)
        self._logger.info(
            f"Processing {len(items)} media items",
            max_concurrency=max_concurrency,
            variants=len(variant_specs),
        )

        outcome = BatchOutcome()
        entries: List[MediaManifestEntry] = []

        with BatchOperationContextManager(
            operation_name=f"Media batch of {len(items)} items"
        ) as batch_manager:
            results = process_batch(
                items, self._processor, variant_specs, storage_root, max_concurrency
            )

            # results are in input order, which keeps the sort below deterministic
            for item, result in zip(items, results):
                if result.status is ItemStatus.PROCESSED and result.versions:
                    entries.append(
                        MediaManifestEntry(
                            media_id=item.id,
                            timestamp=item.timestamp,
                            versions=result.versions,
                        )
                    )
                    outcome.processed_count += 1
                elif result.status is ItemStatus.SKIPPED:
                    outcome.skipped_count += 1
                else:
                    outcome.failed_count += 1
                    error = result.error or "No variants produced"
                    outcome.failures[item.id] = error
                    batch_manager.add_error(error_message=error, item_identifier=item.id)

        outcome.entries = sort_newest_first(entries)
        outcome.processing_time = time.time() - start_time

        self._logger.info(
            "Media processing complete",
            processed=outcome.processed_count,
            skipped=outcome.skipped_count,
            failed=outcome.failed_count,
            seconds=f"{outcome.processing_time:.2f}",
        )
        if self._metrics_collector:
            summary = self._metrics_collector.get_summary("process_item")
            if summary:
                self._logger.debug(
                    "Item timing",
                    avg_ms=f"{summary['avg_duration'] * 1000:.1f}",
                    max_ms=f"{summary['max_duration'] * 1000:.1f}",
                )
        return outcome

    def write_manifest(self, outcome: BatchOutcome, output_dir: Path) -> Path:
        """Hand the ordered outcome to the manifest writer."""
        return self._writer.write(outcome, output_dir)

    def process_all(self, items: Sequence[MediaItem], config: PipelineConfig) -> BatchOutcome:
        """Run the batch with ``config`` and write the manifest."""
        outcome = self.run(
            items, config.variant_specs, config.storage_root, config.max_concurrency
        )
        self.write_manifest(outcome, config.output_dir)
        return outcome
