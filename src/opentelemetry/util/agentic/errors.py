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

"""
Errors raised by agentic tasks.

Every error carries an explicit :class:`ErrorKind` set where it is raised,
so span recording and retry decisions never have to guess the shape of a
failure. ``attempts`` is filled in by the task once the error becomes
terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from opentelemetry.util.agentic.types import ErrorKind

PathElement = Union[str, int]


@dataclass(frozen=True)
class ValidationIssue:
    path: Tuple[PathElement, ...]
    message: str

    def __str__(self) -> str:
        location = ".".join(str(part) for part in self.path) or "<root>"
        return f"{location}: {self.message}"


class AgenticError(Exception):
    kind: ErrorKind

    def __init__(self, message: str, *, attempts: int = 0):
        super().__init__(message)
        self.message = message
        self.attempts = attempts

    def __str__(self) -> str:
        if self.attempts:
            return f"{self.message} (after {self.attempts} attempt(s))"
        return self.message


class ValidationError(AgenticError, ValueError):
    """Raw task input or output does not match its schema. Never retried.

    ``stage`` is ``"input"`` or ``"output"`` once the task has tagged the
    error, and ``None`` when raised by a schema used on its own.
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        issues: Sequence[ValidationIssue] = (),
        *,
        stage: Optional[str] = None,
        attempts: int = 0,
    ):
        self.stage = stage
        self.issues = tuple(issues)
        details = "; ".join(str(issue) for issue in self.issues)
        message = f"invalid task {stage}" if stage else "validation failed"
        if details:
            message = f"{message}: {details}"
        super().__init__(message, attempts=attempts)


class TaskTimeoutError(AgenticError, TimeoutError):
    kind = ErrorKind.TIMEOUT

    def __init__(self, timeout_ms: float, *, attempts: int = 0):
        self.timeout_ms = timeout_ms
        super().__init__(
            f"task attempt exceeded {timeout_ms:g}ms", attempts=attempts
        )


class OperationError(AgenticError):
    """Wraps whatever the underlying operation raised.

    The original exception is available as ``error`` and as ``__cause__``.
    """

    kind = ErrorKind.OPERATION

    def __init__(self, error: BaseException, *, attempts: int = 0):
        self.error = error
        super().__init__(
            f"{type(error).__qualname__}: {error}", attempts=attempts
        )
        self.__cause__ = error


class TelemetryRecordingError(AgenticError):
    """A deferred span attribute producer raised.

    This is a defect in caller supplied telemetry code. It is raised before
    the span starts and is never treated as a task failure.
    """

    kind = ErrorKind.TELEMETRY

    def __init__(self, key: str, error: BaseException):
        self.key = key
        super().__init__(
            f"attribute producer for {key!r} raised "
            f"{type(error).__qualname__}: {error}"
        )
        self.__cause__ = error


__all__ = [
    "AgenticError",
    "OperationError",
    "TaskTimeoutError",
    "TelemetryRecordingError",
    "ValidationError",
    "ValidationIssue",
]
