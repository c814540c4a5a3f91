"""
Sequential task runner shared by the batch resizer and the merge engine.

Items are processed strictly one after another so at most one decoded image
is in flight and progress is reported in a deterministic order. A progress
callback receives ``(completed, total)`` after every item, and an optional
cancellation token is checked at every item boundary.

Error policies:
    abort: the first failing item stops the run with BatchAbortedError
    skip: failing items are recorded and the run continues
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from IE_Libs.constants import ERROR_POLICY_ABORT, ERROR_POLICY_SKIP
from IE_Libs.errors import BatchAbortedError, ImageEditError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ProgressCallback = Callable[[int, int], None]

# Failures that belong to a single item (unreadable or unencodable data).
ITEM_ERRORS = (ImageEditError, OSError)


class CancellationToken:
    """Cooperative cancellation flag checked between items."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class ItemFailure:
    """A single item that failed under the 'skip' policy."""
    index: int
    name: str
    error: Exception


@dataclass
class TaskResult(Generic[R]):
    """Outputs of a sequential run, in input order."""
    results: List[R] = field(default_factory=list)
    failures: List[ItemFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.results)


def validate_error_policy(policy: str) -> str:
    policy = str(policy).strip().lower()
    if policy not in (ERROR_POLICY_ABORT, ERROR_POLICY_SKIP):
        raise ValueError(
            f"Unknown error policy: {policy}. "
            f"Valid policies: {ERROR_POLICY_ABORT}, {ERROR_POLICY_SKIP}"
        )
    return policy


def run_sequential(
    items: Sequence[T],
    worker: Callable[[T], R],
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    error_policy: str = ERROR_POLICY_ABORT,
    describe: Callable[[T], str] = str,
) -> TaskResult[R]:
    """
    Run ``worker`` over ``items`` one at a time.

    Args:
        items: Items to process, in order
        worker: Callable producing one result per item
        progress: Called with (completed, total) after every item
        cancel_token: Checked before every item
        error_policy: 'abort' (default) or 'skip'
        describe: Returns a display name for an item (used in logs and errors)

    Returns:
        TaskResult with the per-item results and any skipped failures

    Raises:
        BatchAbortedError: On the first item failure under 'abort', or on cancellation
    """
    policy = validate_error_policy(error_policy)
    total = len(items)
    result: TaskResult[R] = TaskResult()

    for index, item in enumerate(items):
        if cancel_token is not None and cancel_token.cancelled:
            raise BatchAbortedError("Cancelled", completed=index, total=total)

        name = describe(item)
        try:
            output = worker(item)
        except ITEM_ERRORS as e:
            if policy == ERROR_POLICY_ABORT:
                raise BatchAbortedError(
                    f"Item {index + 1} ({name}) failed: {e}",
                    completed=index,
                    total=total,
                ) from e
            logger.warning(f"Skipping item {index + 1} ({name}): {e}")
            result.failures.append(ItemFailure(index=index, name=name, error=e))
        else:
            result.results.append(output)

        logger.debug(f"Processed {index + 1}/{total}: {name}")
        if progress is not None:
            progress(index + 1, total)

    return result
