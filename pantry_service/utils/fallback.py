"""Ordered fallback over a list of attempts.

Both pipelines follow the same shape: try candidates left to right, stop at the
first success, and decide per failure whether the next candidate is worth
trying. The recipe search continues through every query; the receipt parser
only continues past "model not available" failures.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Generic, Iterable, TypeVar

from pantry_service.exceptions import FallbackExhausted
from pantry_service.utils.logger import logger

T = TypeVar("T")

Attempt = tuple[str, Callable[[], Awaitable[T]]]


class AttemptStatus(str, Enum):
    """Outcome of a single provider call."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    OTHER_ERROR = "other_error"


class FailureAction(str, Enum):
    CONTINUE = "continue"
    ABORT = "abort"


@dataclass(frozen=True)
class AttemptFailure:
    label: str
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class FallbackSuccess(Generic[T]):
    value: T
    label: str
    failures: list[AttemptFailure] = field(default_factory=list)

    @property
    def attempts(self) -> int:
        """Number of attempts made, including the successful one."""
        return len(self.failures) + 1


def always_continue(_: Exception) -> FailureAction:
    return FailureAction.CONTINUE


async def first_success(
    attempts: Iterable[Attempt],
    on_failure: Callable[[Exception], FailureAction] = always_continue,
    operation: str = "Attempt",
) -> FallbackSuccess:
    """Run attempts sequentially and return the first one that does not raise.

    Args:
        attempts: (label, zero-arg coroutine factory) pairs, tried in order. Factories
            are only called when their turn comes, so nothing runs after a success.
        on_failure: Classifier deciding whether a failure lets the next attempt run
            (CONTINUE) or ends the whole fallback (ABORT). Default: always continue.
        operation: Description for logging (e.g., "Recipe search").

    Returns:
        FallbackSuccess with the winning value, its label and the failures before it.

    Raises:
        FallbackExhausted: If every attempt failed, or a failure was classified ABORT.
            ``failures`` lists every failed attempt in order.
    """
    failures: list[AttemptFailure] = []

    for label, run in attempts:
        try:
            value = await run()
        except Exception as e:
            failures.append(AttemptFailure(label=label, error=e))
            action = on_failure(e)
            logger.warning(f"{operation} failed for '{label}' ({action.value}): {e}")
            if action is FailureAction.ABORT:
                raise FallbackExhausted(failures, aborted=True) from e
            continue

        if failures:
            logger.info(f"{operation} succeeded for '{label}' after {len(failures)} failed attempt(s)")
        return FallbackSuccess(value=value, label=label, failures=failures)

    raise FallbackExhausted(failures, aborted=False)
