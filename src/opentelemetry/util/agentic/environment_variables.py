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

OTEL_INSTRUMENTATION_AGENTIC_ENABLED = "OTEL_INSTRUMENTATION_AGENTIC_ENABLED"
"""
.. envvar:: OTEL_INSTRUMENTATION_AGENTIC_ENABLED

Controls whether agentic task spans are recorded. When ``false`` a no-op
tracer is used. Must be one of ``true`` or ``false`` (case-insensitive).
Defaults to ``true``.
"""

OTEL_INSTRUMENTATION_AGENTIC_RECORD_INPUTS = (
    "OTEL_INSTRUMENTATION_AGENTIC_RECORD_INPUTS"
)
"""
.. envvar:: OTEL_INSTRUMENTATION_AGENTIC_RECORD_INPUTS

Controls whether task input is recorded on spans. Disable it to keep
sensitive data out of traces or to avoid serializing large payloads.
Defaults to ``true``.
"""

OTEL_INSTRUMENTATION_AGENTIC_RECORD_OUTPUTS = (
    "OTEL_INSTRUMENTATION_AGENTIC_RECORD_OUTPUTS"
)
"""
.. envvar:: OTEL_INSTRUMENTATION_AGENTIC_RECORD_OUTPUTS

Controls whether task output is recorded on spans. Defaults to ``true``.
"""

OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_TIMEOUT_MS = (
    "OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_TIMEOUT_MS"
)
"""
.. envvar:: OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_TIMEOUT_MS

Upper bound in milliseconds for a single task attempt, used by tasks that
are constructed without an explicit ``timeout_ms``. Unset means no bound.
"""

OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_MAX_ATTEMPTS = (
    "OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_MAX_ATTEMPTS"
)
"""
.. envvar:: OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_MAX_ATTEMPTS

Total number of attempts, first one included, for tasks constructed without
an explicit retry policy. Defaults to ``1``.
"""
