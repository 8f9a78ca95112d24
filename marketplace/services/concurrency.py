"""
Optimistic-concurrency retry policy.

Every read-modify-write in the engine runs inside::

    async for attempt in conflict_retrying(self.max_conflict_retries):
        with attempt:
            current = await store.load(...)
            saved = await store.compare_and_swap(current.id, current.version, mutate(current))

A ``ConcurrencyConflict`` re-runs the whole block against fresh state. Once the
attempts are exhausted the conflict is re-raised to the caller.
"""

import logging

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_random

from marketplace.domain.errors import ConcurrencyConflict
from marketplace.infra.observability.metrics import concurrency_conflicts_total

logger = logging.getLogger(__name__)

DEFAULT_CONFLICT_RETRY_ATTEMPTS = 3


def _record_conflict(retry_state: RetryCallState) -> None:
    conflict = retry_state.outcome.exception()
    concurrency_conflicts_total.labels(aggregate=conflict.aggregate).inc()
    logger.warning(f"{conflict} (attempt {retry_state.attempt_number})")


def conflict_retrying(attempts: int = DEFAULT_CONFLICT_RETRY_ATTEMPTS) -> AsyncRetrying:
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, attempts)),
        retry=retry_if_exception_type(ConcurrencyConflict),
        wait=wait_random(min=0, max=0.01),
        after=_record_conflict,
        reraise=True,
    )
