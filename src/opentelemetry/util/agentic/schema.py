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
Schema adapters for task input and output.

A schema is anything with a ``parse(raw)`` method that returns the parsed
value or raises :class:`~opentelemetry.util.agentic.errors.ValidationError`.
Pydantic models and plain type hints are adapted with :class:`PydanticSchema`.
"""

from __future__ import annotations

from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

import pydantic

from opentelemetry.util.agentic.errors import ValidationError, ValidationIssue

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Schema(Protocol[T_co]):
    """Parses raw values.

    ``parse`` should raise :class:`ValidationError`. Tasks convert any other
    ``ValueError``, ``pydantic.ValidationError`` included, into one.
    """

    def parse(self, raw: Any) -> T_co: ...


class PydanticSchema(Generic[T]):
    """Validates raw values against a pydantic model or type hint."""

    def __init__(self, type_: Any):
        self.type = type_
        self._adapter: pydantic.TypeAdapter[T] = pydantic.TypeAdapter(type_)

    def parse(self, raw: Any) -> T:
        try:
            return self._adapter.validate_python(raw)
        except pydantic.ValidationError as exc:
            raise validation_error_from(exc) from exc

    def json_schema(self) -> dict[str, Any]:
        return self._adapter.json_schema()

    def dump_json(self, value: T) -> str:
        return self._adapter.dump_json(value).decode()

    def __repr__(self) -> str:
        return f"PydanticSchema({self.type!r})"


def validation_error_from(error: ValueError) -> ValidationError:
    """Convert a ``ValueError`` raised while parsing into a ValidationError."""
    if isinstance(error, pydantic.ValidationError):
        issues = [
            ValidationIssue(path=tuple(item["loc"]), message=item["msg"])
            for item in error.errors()
        ]
    else:
        issues = [ValidationIssue(path=(), message=str(error))]
    return ValidationError(issues)


def as_schema(value: Any) -> Schema[Any]:
    """Return ``value`` if it already is a schema, otherwise adapt it.

    Classes are always adapted, pydantic models included, even though
    ``BaseModel`` has a deprecated ``parse`` classmethod.
    """
    if not isinstance(value, type) and isinstance(value, Schema):
        return value
    return PydanticSchema(value)


__all__ = [
    "PydanticSchema",
    "Schema",
    "as_schema",
    "validation_error_from",
]
