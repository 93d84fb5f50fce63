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
Span recording for agentic operations.

This module exposes the `TelemetryRecorder` class, which wraps an arbitrary
unit of work in a span, applies the input/output redaction policy to the
span attributes, and guarantees that the span is ended on every exit path.

Classes:
    - TelemetryRecorder: Records operations as spans.

Functions:
    - get_telemetry_recorder: Returns a singleton `TelemetryRecorder` instance.

Usage:
    recorder = get_telemetry_recorder()

    async def summarize(span):
        return await client.complete(prompt)

    summary = await recorder.record_span(
        "summarize",
        summarize,
        attributes={
            "agentic.model": "my-model",
            # only evaluated when input recording is enabled
            "agentic.input": Input(lambda: prompt),
        },
    )
"""

from __future__ import annotations

import inspect
from types import MappingProxyType
from typing import (
    Awaitable,
    Callable,
    Mapping,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from opentelemetry.semconv.attributes import (
    error_attributes as ErrorAttributes,
)
from opentelemetry.trace import (
    Link,
    NoOpTracer,
    Span,
    SpanKind,
    Tracer,
    TracerProvider,
    get_tracer,
)
from opentelemetry.trace.status import Status, StatusCode
from opentelemetry.util.agentic.config import parse_env
from opentelemetry.util.agentic.errors import (
    AgenticError,
    TelemetryRecordingError,
)
from opentelemetry.util.agentic.types import (
    AgenticAttributes,
    AttributeProducer,
    Attributes,
    Input,
    Output,
)
from opentelemetry.util.agentic.version import __version__
from opentelemetry.util.types import AttributeValue

METADATA_PREFIX = "agentic.telemetry.metadata."
AGENTIC_ERROR_KIND = "agentic.error.kind"

T = TypeVar("T")

SpanOperation = Callable[[Span], Union[T, Awaitable[T]]]


class TelemetryRecorder:
    """
    Wraps operations in spans and records their outcome.

    When ``is_enabled`` is false a no-op tracer is installed, even if a
    tracer was supplied, so every span becomes inert while callers keep
    using the same API. The tracer is referenced, not owned.
    """

    def __init__(
        self,
        tracer: Optional[Tracer] = None,
        *,
        is_enabled: bool = True,
        record_inputs: bool = True,
        record_outputs: bool = True,
        metadata: Optional[Mapping[str, AttributeValue]] = None,
        tracer_provider: Optional[TracerProvider] = None,
    ):
        self.is_enabled = bool(is_enabled)
        if not self.is_enabled:
            self.tracer: Tracer = NoOpTracer()
        elif tracer is not None:
            self.tracer = tracer
        else:
            self.tracer = get_tracer(__name__, __version__, tracer_provider)
        self.record_inputs = bool(record_inputs)
        self.record_outputs = bool(record_outputs)
        self.metadata: Mapping[str, AttributeValue] = MappingProxyType(
            dict(metadata or {})
        )

    async def record_span(
        self,
        name: str,
        operation: SpanOperation[T],
        *,
        attributes: Optional[AgenticAttributes] = None,
        end_when_done: bool = True,
        kind: SpanKind = SpanKind.INTERNAL,
        links: Optional[Sequence[Link]] = None,
        start_time: Optional[int] = None,
    ) -> T:
        """Run ``operation`` inside a span that is current for its duration.

        ``operation`` receives the span and may return a value or an
        awaitable. On success the span is ended only when ``end_when_done``
        is true; otherwise ending it is up to the operation. On failure the
        exception is recorded, the status is set to ERROR, the span is always
        ended and the original exception is re-raised.
        """
        span_attributes = self.convert_attributes(attributes)

        with self.tracer.start_as_current_span(
            name,
            kind=kind,
            attributes=span_attributes,
            links=links,
            start_time=start_time,
            record_exception=False,
            set_status_on_exception=False,
            end_on_exit=False,
        ) as span:
            try:
                result = operation(span)
                if inspect.isawaitable(result):
                    result = await result
            except BaseException as exc:
                try:
                    _apply_error_attributes(span, exc)
                finally:
                    # errors always end the span
                    span.end()
                raise

            if end_when_done:
                span.end()
            return result

    def convert_attributes(
        self,
        attributes: Optional[AgenticAttributes] = None,
        *,
        include_metadata: bool = True,
    ) -> Attributes:
        """Flatten agentic attributes into plain span attributes.

        Input and output producers are only called when the matching
        recording flag is on. ``None`` values, including ``None`` returned
        by a producer, drop the key. Metadata is added last, with every key
        prefixed by ``agentic.telemetry.metadata.``, unless
        ``include_metadata`` is false.
        """
        converted: Attributes = {}
        for key, value in (attributes or {}).items():
            if isinstance(value, Input):
                if not self.record_inputs:
                    continue
                value = _produce(key, value.producer)
            elif isinstance(value, Output):
                if not self.record_outputs:
                    continue
                value = _produce(key, value.producer)

            if value is None:
                continue
            converted[key] = value

        if include_metadata:
            for key, value in self.metadata.items():
                converted[f"{METADATA_PREFIX}{key}"] = value
        return converted


def _produce(
    key: str, producer: AttributeProducer
) -> Optional[AttributeValue]:
    try:
        return producer()
    except Exception as exc:
        raise TelemetryRecordingError(key, exc) from exc


def _apply_error_attributes(span: Span, error: BaseException) -> None:
    """Apply exception, status and error attributes for a failed operation."""
    if isinstance(error, Exception):
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, str(error)))
    else:
        # cancellation or interpreter exit, nothing worth describing
        span.set_status(Status(StatusCode.ERROR))

    if span.is_recording():
        span.set_attribute(
            ErrorAttributes.ERROR_TYPE, type(error).__qualname__
        )
        if isinstance(error, AgenticError):
            span.set_attribute(AGENTIC_ERROR_KIND, error.kind.value)


def get_telemetry_recorder(
    tracer_provider: TracerProvider | None = None,
) -> TelemetryRecorder:
    """
    Returns a singleton TelemetryRecorder instance configured from the
    environment.
    """
    recorder: Optional[TelemetryRecorder] = getattr(
        get_telemetry_recorder, "_default_recorder", None
    )
    if recorder is None:
        settings = parse_env()
        recorder = TelemetryRecorder(
            is_enabled=settings.enabled,
            record_inputs=settings.record_inputs,
            record_outputs=settings.record_outputs,
            tracer_provider=tracer_provider,
        )
        setattr(get_telemetry_recorder, "_default_recorder", recorder)
    return recorder


__all__ = [
    "AGENTIC_ERROR_KIND",
    "METADATA_PREFIX",
    "TelemetryRecorder",
    "get_telemetry_recorder",
]
