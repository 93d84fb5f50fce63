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

import asyncio
import os
import unittest
from unittest import IsolatedAsyncioTestCase
from unittest.mock import patch

from opentelemetry import trace
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
    InMemorySpanExporter,
)
from opentelemetry.semconv.attributes import (
    error_attributes as ErrorAttributes,
)
from opentelemetry.trace import NoOpTracer
from opentelemetry.trace.status import StatusCode
from opentelemetry.util.agentic.environment_variables import (
    OTEL_INSTRUMENTATION_AGENTIC_ENABLED,
    OTEL_INSTRUMENTATION_AGENTIC_RECORD_INPUTS,
)
from opentelemetry.util.agentic.errors import (
    TaskTimeoutError,
    TelemetryRecordingError,
)
from opentelemetry.util.agentic.telemetry import (
    AGENTIC_ERROR_KIND,
    METADATA_PREFIX,
    TelemetryRecorder,
    get_telemetry_recorder,
)
from opentelemetry.util.agentic.types import Input, Output


class _Abort(BaseException):
    pass


class _Counter:
    def __init__(self, value="recorded"):
        self.calls = 0
        self.value = value

    def __call__(self):
        self.calls += 1
        return self.value


def _get_single_span(span_exporter: InMemorySpanExporter) -> ReadableSpan:
    spans = span_exporter.get_finished_spans()
    assert len(spans) == 1
    return spans[0]


class TestTelemetryRecorder(IsolatedAsyncioTestCase):
    def setUp(self):
        self.span_exporter = InMemorySpanExporter()
        self.tracer_provider = TracerProvider()
        self.tracer_provider.add_span_processor(
            SimpleSpanProcessor(self.span_exporter)
        )
        self.tracer = self.tracer_provider.get_tracer(__name__)

    def tearDown(self):
        self.span_exporter.clear()

    def _recorder(self, **kwargs) -> TelemetryRecorder:
        return TelemetryRecorder(tracer=self.tracer, **kwargs)

    async def test_success_ends_span_once_and_returns_result(self):
        recorder = self._recorder()
        result = {"answer": 42}

        async def operation(span):
            return result

        returned = await recorder.record_span("op", operation)

        self.assertIs(returned, result)
        span = _get_single_span(self.span_exporter)
        self.assertEqual(span.name, "op")
        self.assertEqual(span.status.status_code, StatusCode.UNSET)
        self.assertIsNotNone(span.end_time)

    async def test_sync_operation(self):
        recorder = self._recorder()

        returned = await recorder.record_span("op", lambda span: "ok")

        self.assertEqual(returned, "ok")
        _get_single_span(self.span_exporter)

    async def test_span_is_current_during_operation(self):
        recorder = self._recorder()

        def operation(span):
            self.assertIs(trace.get_current_span(), span)
            return span

        span = await recorder.record_span("op", operation)
        self.assertIsNot(trace.get_current_span(), span)

    async def test_failure_records_exception_and_reraises_same_error(self):
        recorder = self._recorder()
        error = ValueError("boom")

        async def operation(span):
            raise error

        with self.assertRaises(ValueError) as ctx:
            await recorder.record_span("op", operation)

        self.assertIs(ctx.exception, error)
        span = _get_single_span(self.span_exporter)
        self.assertEqual(span.status.status_code, StatusCode.ERROR)
        self.assertEqual(span.status.description, "boom")
        self.assertEqual(
            span.attributes[ErrorAttributes.ERROR_TYPE], "ValueError"
        )
        self.assertNotIn(AGENTIC_ERROR_KIND, span.attributes)
        self.assertEqual(len(span.events), 1)
        event = span.events[0]
        self.assertEqual(event.name, "exception")
        self.assertEqual(event.attributes["exception.type"], "ValueError")
        self.assertEqual(event.attributes["exception.message"], "boom")
        self.assertIn("exception.stacktrace", event.attributes)

    async def test_failure_ends_span_even_when_not_ending_on_success(self):
        recorder = self._recorder()

        async def operation(span):
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            await recorder.record_span(
                "op", operation, end_when_done=False
            )

        span = _get_single_span(self.span_exporter)
        self.assertEqual(span.status.status_code, StatusCode.ERROR)

    async def test_agentic_errors_record_their_kind(self):
        recorder = self._recorder()

        async def operation(span):
            raise TaskTimeoutError(10)

        with self.assertRaises(TaskTimeoutError):
            await recorder.record_span("op", operation)

        span = _get_single_span(self.span_exporter)
        self.assertEqual(span.attributes[AGENTIC_ERROR_KIND], "timeout")
        self.assertEqual(
            span.attributes[ErrorAttributes.ERROR_TYPE], "TaskTimeoutError"
        )

    async def test_non_exception_failure_sets_error_without_message(self):
        recorder = self._recorder()

        async def operation(span):
            raise _Abort()

        with self.assertRaises(_Abort):
            await recorder.record_span("op", operation)

        span = _get_single_span(self.span_exporter)
        self.assertEqual(span.status.status_code, StatusCode.ERROR)
        self.assertIsNone(span.status.description)
        self.assertEqual(len(span.events), 0)

    async def test_end_when_done_false_leaves_span_open(self):
        recorder = self._recorder()

        span = await recorder.record_span(
            "op", lambda span: span, end_when_done=False
        )

        self.assertEqual(len(self.span_exporter.get_finished_spans()), 0)
        span.end()
        self.assertEqual(len(self.span_exporter.get_finished_spans()), 1)

    async def test_input_producers_skipped_when_inputs_not_recorded(self):
        recorder = self._recorder(record_inputs=False)
        producer = _Counter("secret")

        result = await recorder.record_span(
            "x",
            lambda span: "ok",
            attributes={"a": Input(producer), "b": Input(producer)},
        )

        self.assertEqual(result, "ok")
        self.assertEqual(producer.calls, 0)
        span = _get_single_span(self.span_exporter)
        self.assertNotIn("a", span.attributes)
        self.assertNotIn("b", span.attributes)

    async def test_output_producers_skipped_when_outputs_not_recorded(self):
        recorder = self._recorder(record_outputs=False)
        input_producer = _Counter("question")
        output_producer = _Counter("answer")

        await recorder.record_span(
            "x",
            lambda span: "ok",
            attributes={
                "in": Input(input_producer),
                "out": Output(output_producer),
            },
        )

        self.assertEqual(input_producer.calls, 1)
        self.assertEqual(output_producer.calls, 0)
        span = _get_single_span(self.span_exporter)
        self.assertEqual(span.attributes["in"], "question")
        self.assertNotIn("out", span.attributes)

    async def test_producer_failure_raises_before_span_starts(self):
        recorder = self._recorder()
        calls = []

        def broken():
            raise KeyError("missing")

        with self.assertRaises(TelemetryRecordingError) as ctx:
            await recorder.record_span(
                "x",
                lambda span: calls.append(span),
                attributes={"a": Input(broken)},
            )

        self.assertEqual(ctx.exception.key, "a")
        self.assertIsInstance(ctx.exception.__cause__, KeyError)
        self.assertEqual(calls, [])
        self.assertEqual(len(self.span_exporter.get_finished_spans()), 0)

    async def test_disabled_recorder_is_inert(self):
        recorder = self._recorder(is_enabled=False)

        span = await recorder.record_span(
            "op", lambda span: span, attributes={"a": 1}
        )

        self.assertIsInstance(recorder.tracer, NoOpTracer)
        self.assertFalse(span.is_recording())
        self.assertEqual(len(self.span_exporter.get_finished_spans()), 0)

    async def test_disabled_recorder_still_reraises(self):
        recorder = self._recorder(is_enabled=False)

        async def operation(span):
            await asyncio.sleep(0)
            raise ValueError("boom")

        with self.assertRaises(ValueError):
            await recorder.record_span("op", operation)


class TestConvertAttributes(unittest.TestCase):
    def test_literals_and_producers_are_flattened(self):
        recorder = TelemetryRecorder(is_enabled=False)

        converted = recorder.convert_attributes(
            {
                "literal": "value",
                "number": 3,
                "in": Input(lambda: "question"),
                "out": Output(lambda: "answer"),
            }
        )

        self.assertEqual(
            converted,
            {
                "literal": "value",
                "number": 3,
                "in": "question",
                "out": "answer",
            },
        )

    def test_none_values_are_dropped(self):
        recorder = TelemetryRecorder(is_enabled=False)

        converted = recorder.convert_attributes(
            {
                "literal": None,
                "in": Input(lambda: None),
                "out": Output(lambda: None),
                "kept": False,
            }
        )

        self.assertEqual(converted, {"kept": False})

    def test_metadata_is_namespaced(self):
        recorder = TelemetryRecorder(
            is_enabled=False, metadata={"user": "u-1", "env": "prod"}
        )

        converted = recorder.convert_attributes({"user": "caller"})

        self.assertEqual(converted["user"], "caller")
        self.assertEqual(converted[f"{METADATA_PREFIX}user"], "u-1")
        self.assertEqual(converted[f"{METADATA_PREFIX}env"], "prod")
        self.assertEqual(
            METADATA_PREFIX, "agentic.telemetry.metadata."
        )

    def test_metadata_wins_over_caller_mimicking_prefix(self):
        recorder = TelemetryRecorder(
            is_enabled=False, metadata={"user": "u-1"}
        )

        converted = recorder.convert_attributes(
            {f"{METADATA_PREFIX}user": "caller"}
        )

        self.assertEqual(converted, {f"{METADATA_PREFIX}user": "u-1"})

    def test_metadata_can_be_left_out(self):
        recorder = TelemetryRecorder(
            is_enabled=False, metadata={"user": "u-1"}
        )

        converted = recorder.convert_attributes(
            {"a": 1}, include_metadata=False
        )

        self.assertEqual(converted, {"a": 1})

    def test_metadata_is_read_only(self):
        metadata = {"user": "u-1"}
        recorder = TelemetryRecorder(is_enabled=False, metadata=metadata)
        metadata["user"] = "changed"

        self.assertEqual(recorder.metadata["user"], "u-1")
        with self.assertRaises(TypeError):
            recorder.metadata["user"] = "changed"  # type: ignore[index]

    def test_empty_attributes(self):
        recorder = TelemetryRecorder(is_enabled=False)

        self.assertEqual(recorder.convert_attributes(), {})
        self.assertEqual(recorder.convert_attributes({}), {})


class TestGetTelemetryRecorder(unittest.TestCase):
    def tearDown(self):
        if hasattr(get_telemetry_recorder, "_default_recorder"):
            delattr(get_telemetry_recorder, "_default_recorder")

    def test_returns_singleton(self):
        first = get_telemetry_recorder()
        second = get_telemetry_recorder()

        self.assertIs(first, second)
        self.assertTrue(first.is_enabled)
        self.assertTrue(first.record_inputs)
        self.assertTrue(first.record_outputs)

    @patch.dict(
        os.environ,
        {
            OTEL_INSTRUMENTATION_AGENTIC_ENABLED: "false",
            OTEL_INSTRUMENTATION_AGENTIC_RECORD_INPUTS: "false",
        },
    )
    def test_configured_from_environment(self):
        recorder = get_telemetry_recorder()

        self.assertFalse(recorder.is_enabled)
        self.assertIsInstance(recorder.tracer, NoOpTracer)
        self.assertFalse(recorder.record_inputs)
        self.assertTrue(recorder.record_outputs)

    def test_injected_recorder_is_independent(self):
        injected = TelemetryRecorder(is_enabled=False)

        self.assertIsNot(get_telemetry_recorder(), injected)
