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
"""Session store and key-value backend protocols."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SessionStore(Protocol):
    """Session persistence contract consumed by session middleware.

    Sessions are plain mappings. Bulk operations (``all``, ``length``,
    ``clear``, ``ids``) cover every session under the store's namespace.
    """

    async def get(self, sid: str) -> dict[str, Any] | None: ...

    async def set(self, sid: str, session: dict[str, Any]) -> None: ...

    async def destroy(self, sid: str) -> None: ...

    async def touch(self, sid: str, session: dict[str, Any]) -> None: ...

    async def all(self) -> dict[str, dict[str, Any]]: ...

    async def length(self) -> int: ...

    async def clear(self) -> None: ...

    async def ids(self) -> list[str]: ...


@runtime_checkable
class KeyValueBackend(Protocol):
    """Uniform command surface of a Redis-like key-value backend.

    Adapters translate these calls to a concrete client library and raise
    ``BackendException`` when a command fails. Values are text; adapters
    decode ``bytes`` replies.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        """Write *value*; when *ex* is given the expiry is set atomically with it."""
        ...

    async def delete(self, *keys: str) -> int: ...

    async def expire(self, key: str, seconds: int) -> bool: ...

    async def mget(self, *keys: str) -> list[str | None]: ...

    async def scan(self, cursor: int, match: str, count: int) -> tuple[int, list[str]]:
        """Run one SCAN round, returning ``(next_cursor, keys)``; cursor 0 ends iteration."""
        ...
