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
"""Session store over a Redis-like key-value backend."""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import structlog

from kvsession.kernel.exceptions import ConfigurationException, SerializationException
from kvsession.session.ports.outbound import KeyValueBackend
from kvsession.session.properties import SessionStoreProperties
from kvsession.session.scan import DEFAULT_SCAN_COUNT, KeyScanner
from kvsession.session.serializer import JsonSerializer, Serializer

logger = structlog.get_logger(__name__)

DEFAULT_PREFIX = "sess:"
DEFAULT_TTL = 24 * 60 * 60


def _expires_at_ms(expires: Any) -> float:
    """Epoch milliseconds of a ``cookie.expires`` value.

    Accepts a ``datetime`` (naive values are UTC), an ISO-8601 string, or a
    number of epoch milliseconds.
    """
    if isinstance(expires, str):
        try:
            expires = datetime.fromisoformat(expires)
        except ValueError as exc:
            raise SerializationException(
                f"Invalid cookie.expires value: {expires!r}",
                context={"expires": expires},
            ) from exc
    if isinstance(expires, datetime):
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return expires.timestamp() * 1000
    if isinstance(expires, (int, float)) and not isinstance(expires, bool):
        return float(expires)
    raise SerializationException(
        f"Unsupported cookie.expires type: {type(expires).__name__}",
        context={"expires": repr(expires)},
    )


def session_ttl(session: dict[str, Any] | None, default_ttl: int, now: float | None = None) -> int:
    """Seconds a session should live in the backend.

    With a ``cookie.expires`` timestamp the TTL is the remaining time rounded
    up to whole seconds. It is negative for a session that has already
    expired. Without one, *default_ttl* applies.

    Args:
        session: The session mapping.
        default_ttl: Store-wide TTL in seconds.
        now: Current epoch time in seconds; defaults to ``time.time()``.
    """
    cookie = session.get("cookie") if isinstance(session, dict) else None
    expires = cookie.get("expires") if isinstance(cookie, dict) else None
    if not expires:
        return default_ttl
    now_ms = (time.time() if now is None else now) * 1000
    return math.ceil((_expires_at_ms(expires) - now_ms) / 1000)


class KeyValueSessionStore:
    """Session store that keeps each session under ``prefix + sid``.

    Implements the :class:`~kvsession.session.ports.outbound.SessionStore`
    protocol. Per-session calls map to a single backend command; bulk calls
    first enumerate the namespace with a :class:`KeyScanner`.

    Args:
        backend: Key-value backend adapter.
        prefix: Key namespace. ``None`` selects ``"sess:"``; an empty string
            is honoured.
        serializer: Session serializer, JSON by default.
        ttl: Default TTL in seconds for sessions without ``cookie.expires``.
            ``None`` or ``0`` selects one day.
        disable_ttl: Write sessions without expiry. Also disables ``touch``.
        disable_touch: Make ``touch`` a no-op.
        scan_count: ``COUNT`` hint for each SCAN round.
        clock: Returns the current epoch time in seconds.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        prefix: str | None = None,
        serializer: Serializer | None = None,
        ttl: int | None = None,
        disable_ttl: bool = False,
        disable_touch: bool = False,
        scan_count: int = DEFAULT_SCAN_COUNT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl is not None and ttl < 0:
            raise ConfigurationException("ttl must be a non-negative number of seconds", context={"ttl": ttl})
        if scan_count <= 0:
            raise ConfigurationException("scan_count must be positive", context={"scan_count": scan_count})

        self._backend = backend
        self._prefix = DEFAULT_PREFIX if prefix is None else prefix
        self._serializer: Serializer = serializer or JsonSerializer()
        self._ttl = int(ttl) if ttl else DEFAULT_TTL
        self._disable_ttl = disable_ttl
        self._disable_touch = disable_touch
        self._scanner = KeyScanner(backend, count=scan_count)
        self._clock = clock

    @classmethod
    def from_properties(
        cls,
        backend: KeyValueBackend,
        properties: SessionStoreProperties,
        serializer: Serializer | None = None,
    ) -> KeyValueSessionStore:
        """Build a store from bound ``kvsession.store.*`` properties."""
        return cls(
            backend,
            prefix=properties.prefix,
            serializer=serializer,
            ttl=properties.ttl,
            disable_ttl=properties.disable_ttl,
            disable_touch=properties.disable_touch,
            scan_count=properties.scan_count,
        )

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def ttl(self) -> int:
        return self._ttl

    @property
    def disable_ttl(self) -> bool:
        return self._disable_ttl

    @property
    def disable_touch(self) -> bool:
        return self._disable_touch

    def _key(self, sid: str) -> str:
        return f"{self._prefix}{sid}"

    def _sid(self, key: str) -> str:
        return key[len(self._prefix):]

    def get_ttl(self, session: dict[str, Any] | None) -> int:
        """TTL in seconds for *session*; negative when it has already expired."""
        return session_ttl(session, self._ttl, now=self._clock())

    async def _all_keys(self) -> list[str]:
        return await self._scanner.scan_prefix(self._prefix)

    async def get(self, sid: str) -> dict[str, Any] | None:
        """Return the stored session, or ``None`` when it is absent or expired."""
        raw = await self._backend.get(self._key(sid))
        if not raw:
            return None
        return self._serializer.parse(raw)

    async def set(self, sid: str, session: dict[str, Any]) -> None:
        """Store *session*, expiring it with its cookie or after the default TTL.

        A session whose cookie has already expired is deleted instead of
        written, since backends reject negative expirations.
        """
        key = self._key(sid)
        value = self._serializer.stringify(session)

        if self._disable_ttl:
            await self._backend.set(key, value)
            return

        ttl = self.get_ttl(session)
        # A cookie that expired under a second ago rounds up to 0 and is still
        # sent as EX 0, which the backend rejects.
        if ttl < 0:
            logger.debug("session_expired_on_write", key=key, ttl=ttl)
            await self._backend.delete(key)
            return

        await self._backend.set(key, value, ex=ttl)

    async def destroy(self, sid: str) -> None:
        """Delete a session. Deleting an absent session is not an error."""
        await self._backend.delete(self._key(sid))

    async def touch(self, sid: str, session: dict[str, Any]) -> None:
        """Reset the session's expiry without rewriting its value."""
        if self._disable_ttl or self._disable_touch:
            return
        await self._backend.expire(self._key(sid), self.get_ttl(session))

    async def clear(self) -> None:
        """Delete every session under the prefix in one batch."""
        keys = await self._all_keys()
        if keys:
            await self._backend.delete(*keys)

    async def length(self) -> int:
        """Number of keys under the prefix."""
        return len(await self._all_keys())

    async def ids(self) -> list[str]:
        """Session ids under the prefix, in scan order."""
        return [self._sid(key) for key in await self._all_keys()]

    async def all(self) -> dict[str, dict[str, Any]]:
        """Every session under the prefix, keyed by session id.

        Keys deleted between the scan and the fetch are skipped. A payload
        that cannot be parsed fails the whole call.
        """
        keys = await self._all_keys()
        if not keys:
            return {}

        values = await self._backend.mget(*keys)
        sessions: dict[str, dict[str, Any]] = {}
        for key, raw in zip(keys, values):
            if not raw:
                continue
            sessions[self._sid(key)] = self._serializer.parse(raw)
        return sessions
