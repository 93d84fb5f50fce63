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

import json
from base64 import b64encode
from dataclasses import asdict, is_dataclass
from functools import partial
from typing import Any

import pydantic


class _AgenticJsonEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:
        if isinstance(o, bytes):
            return b64encode(o).decode()
        if isinstance(o, pydantic.BaseModel):
            return o.model_dump(mode="json")
        if is_dataclass(o) and not isinstance(o, type):
            return asdict(o)
        return str(o)


agentic_json_dumps = partial(
    json.dumps, separators=(",", ":"), cls=_AgenticJsonEncoder
)
"""Should be used when recording task input and output on spans. Values that
JSON does not know about are recorded as strings. Raises ``TypeError`` for
non-string dict keys and ``ValueError`` for circular references."""
