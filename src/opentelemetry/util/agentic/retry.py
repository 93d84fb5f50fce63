# Copyright The OpenTelemetry Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Type

from opentelemetry.util.agentic.errors import (
    AgenticError,
    OperationError,
    TaskTimeoutError,
)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Decides whether a failed task attempt is retried and how long to wait.

    ``max_attempts`` counts every attempt, the first one included, and is a
    hard cap. Backoff grows exponentially from ``initial_backoff_ms`` by
    ``backoff_multiplier`` and is capped at ``max_backoff_ms``, so the delay
    never decreases from one retry to the next.
    """

    max_attempts: int = 1
    initial_backoff_ms: float = 500.0
    backoff_multiplier: float = 2.0
    max_backoff_ms: Optional[float] = None
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)
    retry_on_timeout: bool = True

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_backoff_ms < 0:
            raise ValueError("initial_backoff_ms must not be negative")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be at least 1")
        if self.max_backoff_ms is not None and self.max_backoff_ms < 0:
            raise ValueError("max_backoff_ms must not be negative")

    @classmethod
    def none(cls) -> RetryPolicy:
        """A policy that makes a single attempt."""
        return cls(max_attempts=1)

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """Checks if another attempt should follow ``attempt``."""
        if attempt >= self.max_attempts:
            return False
        if isinstance(error, TaskTimeoutError):
            return self.retry_on_timeout
        if isinstance(error, OperationError):
            error = error.error
        elif isinstance(error, AgenticError):
            return False
        return isinstance(error, self.retry_on)

    def backoff_ms(self, attempt: int) -> float:
        """Calculate the delay before the attempt following ``attempt``."""
        if attempt < 1:
            raise ValueError("attempt must be at least 1")
        delay = self.initial_backoff_ms * (
            self.backoff_multiplier ** (attempt - 1)
        )
        if self.max_backoff_ms is not None:
            delay = min(delay, self.max_backoff_ms)
        return delay


__all__ = ["RetryPolicy"]
