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

import unittest
from typing import List

from pydantic import BaseModel, TypeAdapter

from opentelemetry.util.agentic.errors import ValidationError, ValidationIssue
from opentelemetry.util.agentic.schema import (
    PydanticSchema,
    Schema,
    as_schema,
    validation_error_from,
)
from opentelemetry.util.agentic.utils import agentic_json_dumps


class Item(BaseModel):
    name: str
    quantity: int


class Order(BaseModel):
    items: List[Item]


class UpperCaseSchema:
    def parse(self, raw):
        if not isinstance(raw, str):
            raise ValidationError([ValidationIssue((), "expected a string")])
        return raw.upper()


class TestPydanticSchema(unittest.TestCase):
    def test_parses_model(self):
        schema = PydanticSchema(Order)

        order = schema.parse({"items": [{"name": "tea", "quantity": "2"}]})

        self.assertEqual(order.items[0], Item(name="tea", quantity=2))

    def test_parses_type_hint(self):
        schema = PydanticSchema(List[int])

        self.assertEqual(schema.parse(["1", 2]), [1, 2])

    def test_failure_reports_paths(self):
        schema = PydanticSchema(Order)

        with self.assertRaises(ValidationError) as ctx:
            schema.parse({"items": [{"name": "tea", "quantity": "lots"}]})

        error = ctx.exception
        self.assertIsNone(error.stage)
        self.assertEqual(len(error.issues), 1)
        self.assertEqual(error.issues[0].path, ("items", 0, "quantity"))
        self.assertIn("items.0.quantity", str(error))

    def test_json_schema(self):
        schema = PydanticSchema(Item)

        self.assertEqual(
            set(schema.json_schema()["properties"]), {"name", "quantity"}
        )
        self.assertEqual(
            schema.dump_json(Item(name="tea", quantity=1)),
            '{"name":"tea","quantity":1}',
        )


class TestAsSchema(unittest.TestCase):
    def test_schema_objects_pass_through(self):
        schema = UpperCaseSchema()

        self.assertIs(as_schema(schema), schema)
        self.assertIsInstance(schema, Schema)

    def test_models_are_adapted(self):
        schema = as_schema(Item)

        self.assertIsInstance(schema, PydanticSchema)
        self.assertEqual(
            schema.parse({"name": "a", "quantity": 1}),
            Item(name="a", quantity=1),
        )


class TestValidationErrorFrom(unittest.TestCase):
    def test_plain_value_error(self):
        error = validation_error_from(ValueError("too long"))

        self.assertEqual(error.issues, (ValidationIssue((), "too long"),))
        self.assertIsNone(error.stage)

    def test_pydantic_error_keeps_locations(self):
        with self.assertRaises(ValueError) as ctx:
            TypeAdapter(Order).validate_python({"items": [{"name": "a"}]})

        error = validation_error_from(ctx.exception)

        self.assertEqual(error.issues[0].path, ("items", 0, "quantity"))
        self.assertEqual(error.issues[0].message, "Field required")


class TestJsonDumps(unittest.TestCase):
    def test_dumps_models_bytes_and_unknown_values(self):
        payload = {
            "item": Item(name="tea", quantity=1),
            "raw": b"\x00\x01",
            "other": object,
        }

        dumped = agentic_json_dumps(payload)

        self.assertIn('"item":{"name":"tea","quantity":1}', dumped)
        self.assertIn('"raw":"AAE="', dumped)
        self.assertIn("\"other\":\"<class 'object'>\"", dumped)
