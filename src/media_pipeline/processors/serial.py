"""Serial processor implementation - processes media items one by one."""

from pathlib import Path
from typing import List, Sequence

from ..core.logging_config import get_logger
from ..core.models import ItemResult, ItemStatus, MediaItem, VariantSpec
from ..core.protocols import ItemProcessor

logger = get_logger("media-pipeline.processor")


def process_batch(
    items: Sequence[MediaItem],
    processor: ItemProcessor,
    variant_specs: Sequence[VariantSpec],
    storage_root: Path,
    max_concurrency: int = 1,
) -> List[ItemResult]:
    """
    Processes media items serially, one by one, in the current thread.

    Args:
        items: Media items to process.
        processor: Item processor applied to each item.
        variant_specs: Ordered variant configuration.
        storage_root: Directory receiving variant files.
        max_concurrency: Ignored; present for signature compatibility.

    Returns:
        One `ItemResult` per item, in input order.
    """
    results = []

    for item in items:
        try:
            result = processor.process(item, variant_specs, storage_root)
        except Exception as e:
            logger.error(f"[{item.id}] Unexpected processing error: {e}", exc_info=True)
            result = ItemResult(
                media_id=item.id,
                status=ItemStatus.FAILED,
                error=str(e),
                error_kind="unexpected",
            )
        results.append(result)

    return results
