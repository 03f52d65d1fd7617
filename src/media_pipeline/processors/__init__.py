"""Media item processors with different concurrency strategies."""

from .serial import process_batch as serial_process_batch
from .multithread import process_batch as multithread_process_batch


def select_batch_processor(max_concurrency: int):
    """Serial processing for a concurrency of one, a thread pool otherwise."""
    if max_concurrency <= 1:
        return serial_process_batch
    return multithread_process_batch


__all__ = [
    "serial_process_batch",
    "multithread_process_batch",
    "select_batch_processor",
]
