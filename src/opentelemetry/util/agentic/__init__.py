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
Tracing and resilience helpers for agentic tasks: LLM calls, API calls and
sub-agent invocations that must be observable and retried on failure.
"""

from opentelemetry.util.agentic.errors import (
    AgenticError,
    OperationError,
    TaskTimeoutError,
    TelemetryRecordingError,
    ValidationError,
    ValidationIssue,
)
from opentelemetry.util.agentic.retry import RetryPolicy
from opentelemetry.util.agentic.schema import PydanticSchema, Schema, as_schema
from opentelemetry.util.agentic.task import BaseTask, FunctionTask, TaskResult
from opentelemetry.util.agentic.telemetry import (
    TelemetryRecorder,
    get_telemetry_recorder,
)
from opentelemetry.util.agentic.types import (
    ErrorKind,
    Input,
    Output,
    TaskState,
)
from opentelemetry.util.agentic.version import __version__

__all__ = [
    "__version__",
    "AgenticError",
    "BaseTask",
    "ErrorKind",
    "FunctionTask",
    "Input",
    "OperationError",
    "Output",
    "PydanticSchema",
    "RetryPolicy",
    "Schema",
    "TaskResult",
    "TaskState",
    "TaskTimeoutError",
    "TelemetryRecorder",
    "TelemetryRecordingError",
    "ValidationError",
    "ValidationIssue",
    "as_schema",
    "get_telemetry_recorder",
]
