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

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Union

from typing_extensions import TypeAlias

from opentelemetry.util.types import AttributeValue


class ErrorKind(Enum):
    # Raw input or output did not match its schema.
    VALIDATION = "validation"
    # A single attempt exceeded its time bound.
    TIMEOUT = "timeout"
    # The underlying operation raised.
    OPERATION = "operation"
    # A deferred span attribute producer raised.
    TELEMETRY = "telemetry"


class TaskState(Enum):
    PENDING = "pending"
    VALIDATING = "validating"
    EXECUTING = "executing"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


AttributeProducer: TypeAlias = Callable[[], Optional[AttributeValue]]


@dataclass(frozen=True)
class Input:
    """
    Span attribute computed from task input. The producer is only called
    when the recorder has input recording enabled.
    """

    producer: AttributeProducer


@dataclass(frozen=True)
class Output:
    """
    Span attribute computed from task output. The producer is only called
    when the recorder has output recording enabled.
    """

    producer: AttributeProducer


AgenticAttributeValue = Union[AttributeValue, Input, Output, None]

AgenticAttributes: TypeAlias = Mapping[str, AgenticAttributeValue]

Attributes: TypeAlias = Dict[str, AttributeValue]
