"""
Parallel execution with progress tracking.

Used by batch jobs such as the metadata feed sync, where each item is
independent and one failure must not stop the run.
"""

import logging
import sys
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, TypeVar

from tqdm import tqdm

from editor_finder.utils.stats import ExecutionStats

logger = logging.getLogger(__name__)

T = TypeVar("T")  # Input type
R = TypeVar("R")  # Result type


def execute_parallel(
    items: Iterable[T],
    worker_func: Callable[[T], R],
    max_workers: int = 4,
    desc: str = "Processing",
    unit: str = "item",
    show_progress: bool = True,
    error_handler: Callable[[T, Exception], None] | None = None,
    stats: ExecutionStats | None = None,
    progress_postfix: Callable[[], dict[str, Any]] | None = None,
) -> list[tuple[T, R | None, Exception | None]]:
    """
    Run ``worker_func`` over ``items`` on a thread pool.

    Args:
        items: Items to process
        worker_func: Called once per item
        max_workers: Pool size
        desc: Progress bar description
        unit: Progress bar unit name
        show_progress: Draw a tqdm bar on stderr
        error_handler: Called with (item, exception) when a worker raises;
            the default logs at DEBUG
        stats: Optional counters; "failed" is bumped on every error
        progress_postfix: Optional callback producing the bar's postfix

    Returns:
        (item, result, exception) per item, in completion order
    """
    items_list = list(items)
    if not items_list:
        return []

    results: list[tuple[T, R | None, Exception | None]] = []
    progress_bar = (
        tqdm(total=len(items_list), desc=desc, unit=unit, file=sys.stderr, dynamic_ncols=True)
        if show_progress
        else None
    )

    try:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_item = {executor.submit(worker_func, item): item for item in items_list}
            for future in as_completed(future_to_item):
                item = future_to_item[future]
                result = None
                error = None
                try:
                    result = future.result()
                except Exception as e:
                    error = e
                    if error_handler:
                        error_handler(item, e)
                    else:
                        logger.debug(f"Error processing {item}: {e}")
                    if stats:
                        stats.increment("failed")
                results.append((item, result, error))
                if progress_bar:
                    if progress_postfix:
                        progress_bar.set_postfix(progress_postfix())
                    progress_bar.update(1)
    finally:
        if progress_bar:
            progress_bar.close()

    return results
