# Copyright 2026 Firefly Software Solutions Inc.
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
"""Session serializers."""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

from kvsession.kernel.exceptions import SerializationException


@runtime_checkable
class Serializer(Protocol):
    """Turns a session mapping into backend text and back."""

    def stringify(self, value: dict[str, Any]) -> str: ...

    def parse(self, value: str) -> dict[str, Any]: ...


class JsonSerializer:
    """Default serializer: compact JSON.

    ``datetime`` values (such as ``cookie.expires``) are written as ISO-8601
    strings; anything else that JSON cannot represent is an error.
    """

    def stringify(self, value: dict[str, Any]) -> str:
        try:
            return json.dumps(value, separators=(",", ":"), default=_encode_default)
        except (TypeError, ValueError) as exc:
            raise SerializationException(f"Cannot serialize session: {exc}") from exc

    def parse(self, value: str) -> dict[str, Any]:
        try:
            decoded = json.loads(value)
        except (json.JSONDecodeError, TypeError) as exc:
            raise SerializationException(
                f"Cannot deserialize session payload: {exc}",
                context={"payload": value[:100] if isinstance(value, str) else repr(value)},
            ) from exc
        if not isinstance(decoded, dict):
            raise SerializationException(
                f"Session payload must decode to an object, got {type(decoded).__name__}",
            )
        return decoded


def _encode_default(obj: Any) -> Any:
    isoformat = getattr(obj, "isoformat", None)
    if callable(isoformat):
        return isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
