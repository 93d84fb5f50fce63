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

"""Span attribute names used by agentic tasks."""

AGENTIC_TASK_NAME = "agentic.task.name"
AGENTIC_TASK_INPUT = "agentic.task.input"
AGENTIC_TASK_OUTPUT = "agentic.task.output"
AGENTIC_TASK_STATE = "agentic.task.state"
AGENTIC_TASK_ATTEMPT = "agentic.task.attempt"
AGENTIC_TASK_ATTEMPTS = "agentic.task.attempts"
AGENTIC_TASK_MAX_ATTEMPTS = "agentic.task.max_attempts"
AGENTIC_TASK_TIMEOUT_MS = "agentic.task.timeout_ms"

__all__ = [
    "AGENTIC_TASK_ATTEMPT",
    "AGENTIC_TASK_ATTEMPTS",
    "AGENTIC_TASK_INPUT",
    "AGENTIC_TASK_MAX_ATTEMPTS",
    "AGENTIC_TASK_NAME",
    "AGENTIC_TASK_OUTPUT",
    "AGENTIC_TASK_STATE",
    "AGENTIC_TASK_TIMEOUT_MS",
]
