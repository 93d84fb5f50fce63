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
Retryable, time-bounded, schema-validated tasks.

A task is a typed, async function call that may be non-deterministic, for
example an LLM call with structured input and output, an API call, a native
function call, or a sub-agent invocation.

Every call walks the states::

    PENDING -> VALIDATING -> EXECUTING -> (RETRYING -> EXECUTING)*
        -> SUCCEEDED | FAILED

Input validation failures never reach the operation and output validation
failures are never retried. Timeouts and operation errors are retried as
long as the retry policy allows it.

Usage:
    class Summarize(BaseTask[Article, Summary]):
        input_schema = as_schema(Article)
        output_schema = as_schema(Summary)

        async def _run(self, input: Article) -> Any:
            return await client.summarize(input.text)

    task = Summarize(timeout_ms=30_000).retry_config(
        RetryPolicy(max_attempts=3)
    )
    summary = await task.call({"text": "..."})
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from opentelemetry.trace import Span, SpanKind
from opentelemetry.util.agentic.attributes import (
    AGENTIC_TASK_ATTEMPT,
    AGENTIC_TASK_ATTEMPTS,
    AGENTIC_TASK_INPUT,
    AGENTIC_TASK_MAX_ATTEMPTS,
    AGENTIC_TASK_NAME,
    AGENTIC_TASK_OUTPUT,
    AGENTIC_TASK_STATE,
    AGENTIC_TASK_TIMEOUT_MS,
)
from opentelemetry.util.agentic.config import parse_env
from opentelemetry.util.agentic.errors import (
    OperationError,
    TaskTimeoutError,
    ValidationError,
)
from opentelemetry.util.agentic.retry import RetryPolicy
from opentelemetry.util.agentic.schema import (
    Schema,
    as_schema,
    validation_error_from,
)
from opentelemetry.util.agentic.telemetry import (
    TelemetryRecorder,
    get_telemetry_recorder,
)
from opentelemetry.util.agentic.types import Input, Output, TaskState
from opentelemetry.util.agentic.utils import agentic_json_dumps

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


@dataclass(frozen=True)
class TaskResult(Generic[OutputT]):
    output: OutputT
    attempts: int


class _CallState:
    """Per-call bookkeeping, never shared between calls."""

    __slots__ = ("task_name", "state", "attempts")

    def __init__(self, task_name: str):
        self.task_name = task_name
        self.state = TaskState.PENDING
        self.attempts = 0

    def transition(self, state: TaskState) -> None:
        logger.debug(
            "Task %s: %s -> %s",
            self.task_name,
            self.state.value,
            state.value,
        )
        self.state = state


class BaseTask(ABC, Generic[InputT, OutputT]):
    """
    Abstract call contract for a task.

    Subclasses provide ``input_schema``, ``output_schema`` and ``_run``.
    Configuration is fixed at construction except for the retry policy,
    which ``retry_config`` replaces in place. Each call reads the policy
    once, so replacing it does not affect calls already in flight.
    """

    span_kind: SpanKind = SpanKind.INTERNAL

    def __init__(
        self,
        *,
        name: Optional[str] = None,
        timeout_ms: Optional[float] = None,
        retry_policy: Optional[RetryPolicy] = None,
        telemetry: Optional[TelemetryRecorder] = None,
    ):
        settings = parse_env()
        if timeout_ms is None:
            timeout_ms = settings.default_timeout_ms
        if timeout_ms is not None and timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        if retry_policy is None:
            retry_policy = RetryPolicy(
                max_attempts=settings.default_max_attempts
            )
        self.name = name or type(self).__name__
        self._timeout_ms = timeout_ms
        self._retry_policy = retry_policy
        self._telemetry = telemetry

    @property
    @abstractmethod
    def input_schema(self) -> Schema[InputT]:
        """Schema the raw call input is parsed with."""

    @property
    @abstractmethod
    def output_schema(self) -> Schema[OutputT]:
        """Schema the raw operation output is parsed with."""

    @abstractmethod
    async def _run(self, input: InputT) -> Any:  # pylint: disable=redefined-builtin
        """Perform the operation once and return its raw output."""

    @property
    def timeout_ms(self) -> Optional[float]:
        return self._timeout_ms

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    @property
    def telemetry(self) -> TelemetryRecorder:
        if self._telemetry is None:
            return get_telemetry_recorder()
        return self._telemetry

    def retry_config(
        self, retry_policy: RetryPolicy
    ) -> BaseTask[InputT, OutputT]:
        """Replace the retry policy in place and return this same task."""
        self._retry_policy = retry_policy
        return self

    async def call(self, raw_input: Any = None) -> OutputT:
        """Validate ``raw_input``, run the operation and return parsed output.

        Raises ``ValidationError``, ``TaskTimeoutError`` or ``OperationError``
        annotated with the number of attempts made.
        """
        result = await self.invoke(raw_input)
        return result.output

    async def invoke(self, raw_input: Any = None) -> TaskResult[OutputT]:
        """Like ``call`` but also reports how many attempts were made."""
        policy = self._retry_policy
        telemetry = self.telemetry
        call_state = _CallState(self.name)

        async def run_call(span: Span) -> TaskResult[OutputT]:
            try:
                call_state.transition(TaskState.VALIDATING)
                parsed_input = _validate(
                    self.input_schema, raw_input, "input", attempts=0
                )
                raw_output = await self._execute(
                    parsed_input, policy, telemetry, call_state
                )
                output = _validate(
                    self.output_schema,
                    raw_output,
                    "output",
                    attempts=call_state.attempts,
                )
                call_state.transition(TaskState.SUCCEEDED)
            except BaseException:
                call_state.transition(TaskState.FAILED)
                raise
            finally:
                if span.is_recording():
                    span.set_attribute(
                        AGENTIC_TASK_ATTEMPTS, call_state.attempts
                    )
                    span.set_attribute(
                        AGENTIC_TASK_STATE, call_state.state.value
                    )

            if span.is_recording():
                span.set_attributes(
                    telemetry.convert_attributes(
                        {
                            AGENTIC_TASK_OUTPUT: Output(
                                lambda: _serialize(output)
                            )
                        },
                        include_metadata=False,
                    )
                )
            return TaskResult(output=output, attempts=call_state.attempts)

        attributes = {
            AGENTIC_TASK_NAME: self.name,
            AGENTIC_TASK_MAX_ATTEMPTS: policy.max_attempts,
            AGENTIC_TASK_TIMEOUT_MS: self._timeout_ms,
            AGENTIC_TASK_INPUT: Input(lambda: _serialize(raw_input)),
        }
        return await telemetry.record_span(
            f"task {self.name}",
            run_call,
            attributes=attributes,
            kind=self.span_kind,
        )

    async def _execute(
        self,
        parsed_input: InputT,
        policy: RetryPolicy,
        telemetry: TelemetryRecorder,
        call_state: _CallState,
    ) -> Any:
        attempt = 0
        while True:
            attempt += 1
            call_state.attempts = attempt
            call_state.transition(TaskState.EXECUTING)
            try:
                return await telemetry.record_span(
                    f"task_attempt {self.name}",
                    lambda _span: self._attempt(parsed_input),
                    attributes={
                        AGENTIC_TASK_NAME: self.name,
                        AGENTIC_TASK_ATTEMPT: attempt,
                    },
                    kind=self.span_kind,
                )
            except (TaskTimeoutError, OperationError) as error:
                error.attempts = attempt
                if not policy.should_retry(error, attempt):
                    if attempt > 1:
                        logger.warning(
                            "Task %s failed after %d attempt(s): %s",
                            self.name,
                            attempt,
                            error.message,
                        )
                    raise

                delay_ms = policy.backoff_ms(attempt)
                logger.debug(
                    "Task %s failed attempt %d/%d: %s. Retrying in %.0fms",
                    self.name,
                    attempt,
                    policy.max_attempts,
                    error.message,
                    delay_ms,
                )
                call_state.transition(TaskState.RETRYING)
                await asyncio.sleep(delay_ms / 1000)

    async def _attempt(self, parsed_input: InputT) -> Any:
        operation = asyncio.ensure_future(self._run(parsed_input))
        timeout_s = None
        if self._timeout_ms is not None:
            timeout_s = self._timeout_ms / 1000
        try:
            done, _ = await asyncio.wait({operation}, timeout=timeout_s)
        except BaseException:
            operation.cancel()
            raise

        if not done:
            # stop waiting, whatever the operation does later is ignored
            operation.cancel()
            operation.add_done_callback(_discard_result)
            raise TaskTimeoutError(self._timeout_ms)

        try:
            return operation.result()
        except Exception as exc:
            raise OperationError(exc) from exc


class FunctionTask(BaseTask[InputT, OutputT]):
    """Task backed by a plain callable, sync or async.

    Schemas may be given as schema objects, pydantic models or type hints.
    """

    def __init__(
        self,
        func: Callable[[InputT], Any],
        *,
        input_schema: Any,
        output_schema: Any,
        name: Optional[str] = None,
        timeout_ms: Optional[float] = None,
        retry_policy: Optional[RetryPolicy] = None,
        telemetry: Optional[TelemetryRecorder] = None,
    ):
        super().__init__(
            name=name or getattr(func, "__name__", None),
            timeout_ms=timeout_ms,
            retry_policy=retry_policy,
            telemetry=telemetry,
        )
        self._func = func
        self._input_schema: Schema[InputT] = as_schema(input_schema)
        self._output_schema: Schema[OutputT] = as_schema(output_schema)

    @property
    def input_schema(self) -> Schema[InputT]:
        return self._input_schema

    @property
    def output_schema(self) -> Schema[OutputT]:
        return self._output_schema

    async def _run(self, input: InputT) -> Any:  # pylint: disable=redefined-builtin
        result = self._func(input)
        if inspect.isawaitable(result):
            result = await result
        return result


def _validate(
    schema: Schema[Any], raw: Any, stage: str, *, attempts: int
) -> Any:
    try:
        return schema.parse(raw)
    except ValueError as exc:
        if not isinstance(exc, ValidationError):
            exc = validation_error_from(exc)
        raise ValidationError(
            exc.issues, stage=stage, attempts=attempts
        ) from exc


def _serialize(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        return agentic_json_dumps(value)
    except (TypeError, ValueError):
        # non-string keys or circular references
        return repr(value)


def _discard_result(operation: "asyncio.Future[Any]") -> None:
    if not operation.cancelled():
        operation.exception()


__all__ = ["BaseTask", "FunctionTask", "TaskResult"]
