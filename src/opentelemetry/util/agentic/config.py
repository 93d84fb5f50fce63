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

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .environment_variables import (
    OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_MAX_ATTEMPTS,
    OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_TIMEOUT_MS,
    OTEL_INSTRUMENTATION_AGENTIC_ENABLED,
    OTEL_INSTRUMENTATION_AGENTIC_RECORD_INPUTS,
    OTEL_INSTRUMENTATION_AGENTIC_RECORD_OUTPUTS,
)

_logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Configuration for agentic tasks derived from environment variables."""

    enabled: bool = True
    record_inputs: bool = True
    record_outputs: bool = True
    default_timeout_ms: Optional[float] = None
    default_max_attempts: int = 1


def parse_env() -> Settings:
    """Parse agentic environment variables into structured settings."""

    return Settings(
        enabled=_parse_bool(OTEL_INSTRUMENTATION_AGENTIC_ENABLED, True),
        record_inputs=_parse_bool(
            OTEL_INSTRUMENTATION_AGENTIC_RECORD_INPUTS, True
        ),
        record_outputs=_parse_bool(
            OTEL_INSTRUMENTATION_AGENTIC_RECORD_OUTPUTS, True
        ),
        default_timeout_ms=_parse_timeout_ms(),
        default_max_attempts=_parse_max_attempts(),
    )


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    _logger.warning(
        "%s is not a valid option for `%s` environment variable. Must be one of true or false. Defaulting to `%s`.",
        raw,
        name,
        default,
    )
    return default


def _parse_timeout_ms() -> Optional[float]:
    raw = os.environ.get(
        OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_TIMEOUT_MS, ""
    ).strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        value = -1.0
    if value <= 0:
        _logger.warning(
            "%s is not a valid option for `%s` environment variable. Must be a positive number. Ignoring it.",
            raw,
            OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_TIMEOUT_MS,
        )
        return None
    return value


def _parse_max_attempts() -> int:
    raw = os.environ.get(
        OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_MAX_ATTEMPTS, ""
    ).strip()
    if not raw:
        return 1
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        _logger.warning(
            "%s is not a valid option for `%s` environment variable. Must be a positive integer. Defaulting to `1`.",
            raw,
            OTEL_INSTRUMENTATION_AGENTIC_DEFAULT_MAX_ATTEMPTS,
        )
        return 1
    return value


__all__ = ["Settings", "parse_env"]
