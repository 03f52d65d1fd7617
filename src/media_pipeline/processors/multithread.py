"""Multithreaded processor implementation - bounded thread pool fan-out."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Sequence

from ..core.logging_config import get_logger
from ..core.models import ItemResult, ItemStatus, MediaItem, VariantSpec
from ..core.protocols import ItemProcessor

logger = get_logger("media-pipeline.processor")


def process_batch(
    items: Sequence[MediaItem],
    processor: ItemProcessor,
    variant_specs: Sequence[VariantSpec],
    storage_root: Path,
    max_concurrency: int,
) -> List[ItemResult]:
    """
    Process media items on a pool of at most ``max_concurrency`` threads.

    Workers only return results; this thread is the single consumer that
    drains completed futures, so no shared collection is written concurrently.

    Args:
        items: Media items to process
        processor: Item processor applied to each item
        variant_specs: Ordered variant configuration
        storage_root: Directory receiving variant files
        max_concurrency: Maximum number of items in flight

    Returns:
        One result per item, in input order
    """
    if not items:
        return []

    results: List[Optional[ItemResult]] = [None] * len(items)

    with ThreadPoolExecutor(
        max_workers=max_concurrency, thread_name_prefix="media-worker"
    ) as executor:
        future_to_index = {
            executor.submit(processor.process, item, variant_specs, storage_root): index
            for index, item in enumerate(items)
        }

        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                results[index] = future.result()
            except Exception as e:
                # Unexpected errors still only fail their own item
                item = items[index]
                logger.error(f"[{item.id}] Unexpected worker error: {e}", exc_info=True)
                results[index] = ItemResult(
                    media_id=item.id,
                    status=ItemStatus.FAILED,
                    error=str(e),
                    error_kind="unexpected",
                )

    return results  # type: ignore[return-value]
