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
"""Redis-backed key-value backend."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any, TypeVar

import structlog
from redis.exceptions import RedisError

from kvsession.kernel.exceptions import BackendException

_logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _text(value: Any) -> Any:
    return value.decode() if isinstance(value, bytes) else value


class RedisBackend:
    """Backend adapter that delegates to a ``redis.asyncio.Redis``-like client.

    Replies are decoded to ``str`` whether or not the client was created with
    ``decode_responses=True``. Any ``RedisError`` (connection loss, timeout,
    server error reply) is re-raised as :class:`BackendException`.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        return self._client

    async def _execute(self, command: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except RedisError as exc:
            _logger.warning("backend_command_failed", command=command, error=str(exc))
            raise BackendException(
                f"Redis {command} failed: {exc}",
                context={"command": command},
            ) from exc

    async def get(self, key: str) -> str | None:
        return _text(await self._execute("GET", self._client.get(key)))

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        await self._execute("SET", self._client.set(key, value, ex=ex))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._execute("DEL", self._client.delete(*keys)))

    async def expire(self, key: str, seconds: int) -> bool:
        return bool(await self._execute("EXPIRE", self._client.expire(key, seconds)))

    async def mget(self, *keys: str) -> list[str | None]:
        if not keys:
            return []
        values = await self._execute("MGET", self._client.mget(list(keys)))
        return [_text(value) for value in values]

    async def scan(self, cursor: int, match: str, count: int) -> tuple[int, list[str]]:
        next_cursor, keys = await self._execute(
            "SCAN", self._client.scan(cursor=cursor, match=match, count=count)
        )
        return int(next_cursor), [_text(key) for key in keys]

    async def start(self) -> None:
        """Validate connectivity by pinging Redis."""
        await self._execute("PING", self._client.ping())

    async def stop(self) -> None:
        """Close the underlying Redis connection."""
        await self._client.aclose()
