"""Concurrency and merge helpers shared by the provider implementations.

Composite operations fan out several backend calls and join them. Each call
gets its own result slot holding either its return value or the exception it
raised; the error policy is applied after the join by the reducers below:

- primary(): the sub-query is required, its error is raised
- secondary(): the sub-query is best-effort, its error becomes a default
- run_in_batches(): every item is attempted, the first error is returned
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence, TypeVar

from .models import SearchResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Maximum number of concurrent per-item favorite requests
FAVORITE_BATCH_SIZE = 5


async def gather_slots(*aws: Awaitable[Any]) -> List[Any]:
    """Run awaitables concurrently and wait for all of them.

    Args:
        *aws: Awaitables to run

    Returns:
        One slot per awaitable, in argument order: its result, or the
        exception it raised
    """
    return list(await asyncio.gather(*aws, return_exceptions=True))


def primary(slot: Any) -> Any:
    """Unwrap a required sub-query result, raising its error."""
    if isinstance(slot, BaseException):
        raise slot
    return slot


def secondary(slot: Any, default: T, label: str) -> Any:
    """Unwrap a best-effort sub-query result.

    Args:
        slot: Result slot from gather_slots()
        default: Value used when the sub-query failed
        label: Sub-query name for the log message

    Returns:
        The slot's result, or default if the sub-query raised an Exception

    Raises:
        BaseException: If the slot holds a non-Exception error such as
            asyncio.CancelledError
    """
    if isinstance(slot, BaseException) and not isinstance(slot, Exception):
        raise slot
    if isinstance(slot, Exception):
        logger.warning(f"{label} query failed, continuing without it: {slot}")
        return default
    return slot


def batched(items: Sequence[T], size: int) -> List[Sequence[T]]:
    """Split items into consecutive batches of at most size items."""
    return [items[i:i + size] for i in range(0, len(items), size)]


async def run_in_batches(
    items: Sequence[T],
    action: Callable[[T], Awaitable[Any]],
    batch_size: int = FAVORITE_BATCH_SIZE,
) -> Optional[BaseException]:
    """Apply action to every item, batch_size items at a time.

    Batches run strictly one after another; the items of a batch run
    concurrently. Processing never stops early.

    Args:
        items: Items to process, in order
        action: Coroutine function called once per item
        batch_size: Maximum number of concurrent calls

    Returns:
        The first error seen (lowest batch, then lowest position in the
        batch), or None if every call succeeded
    """
    first_error: Optional[BaseException] = None
    for number, batch in enumerate(batched(items, batch_size)):
        slots = await gather_slots(*(action(item) for item in batch))
        for item, slot in zip(batch, slots):
            if not isinstance(slot, BaseException):
                continue
            if first_error is None:
                first_error = slot
            else:
                logger.warning(f"Dropping additional error for {item} in batch {number}: {slot}")
    return first_error


def query_terms(query: str) -> List[str]:
    """Lowercased whitespace-separated terms of a search query."""
    return query.lower().split()


def all_terms_match(name: str, terms: Iterable[str]) -> bool:
    """Check that every term is a substring of name.

    name and terms must already be lowercased.
    """
    return all(term in name for term in terms)


def filter_by_terms(items: Iterable[T], terms: List[str], name_of: Callable[[T], str]) -> List[T]:
    """Keep the items whose name contains every query term, case-insensitively."""
    return [item for item in items if all_terms_match((name_of(item) or "").lower(), terms)]


def rank_results(results: List[SearchResult], terms: List[str]) -> List[SearchResult]:
    """Order merged search results by relevance.

    Results keep their merge order (albums, artists, tracks, playlists,
    genres); no relevance ranking is applied.
    """
    return results


def finalize_results(results: List[SearchResult], terms: List[str], max_results: int) -> List[SearchResult]:
    """Rank merged results and truncate them to max_results."""
    ranked = rank_results(results, terms)
    if len(ranked) > max_results:
        ranked = ranked[:max_results]
    return ranked
