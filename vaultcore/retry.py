"""Fixed-interval retry around a fallible operation.

The executor does not decide what counts as a failure: anything the
operation raises is a failed attempt. Intermediate failures are dropped;
only the last one reaches the caller.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, TypeVar

from .errors import ExhaustedRetries, VaultError

T = TypeVar("T")


class Attempted(NamedTuple):
    value: Any
    attempt: int


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 1
    interval_ms: int = 1000

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.interval_ms < 0:
            raise ValueError(f"interval_ms must be >= 0, got {self.interval_ms}")

    def run(self, operation: Callable[[int], T],
            sleep: Callable[[float], None] = time.sleep) -> Attempted:
        """Call ``operation(1)``, ``operation(2)``, ... until one succeeds.

        The last failure is re-raised as is. A ``VaultError`` gets its
        ``attempt`` set; any other exception from a sequence that actually
        retried is wrapped in ``ExhaustedRetries``.
        """
        attempt = 1
        while True:
            try:
                return Attempted(operation(attempt), attempt)
            except Exception as e:
                if attempt < self.max_attempts:
                    sleep(self.interval_ms / 1000)
                    attempt += 1
                    continue
                if isinstance(e, VaultError):
                    e.attempt = attempt
                    raise
                if attempt > 1:
                    raise ExhaustedRetries(e, attempt) from e
                raise


def with_retries(operation: Callable[[int], T], max_attempts: int, interval_ms: int,
                 sleep: Callable[[float], None] = time.sleep) -> Attempted:
    return RetryPolicy(max_attempts, interval_ms).run(operation, sleep)
