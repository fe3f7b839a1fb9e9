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
"""In-memory key-value backend with TTL-based expiry and cursor scanning."""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import Callable
from functools import lru_cache

from kvsession.kernel.exceptions import BackendException


@lru_cache(maxsize=128)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a Redis-style glob into a regex.

    Supports ``*``, ``?``, ``[abc]``, ``[^abc]``, ``[a-z]`` and backslash
    escapes, both outside and inside brackets. A trailing lone backslash
    matches itself.
    """
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "\\" and i + 1 < n:
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if ch == "*":
            out.append(".*")
        elif ch == "?":
            out.append(".")
        elif ch == "[":
            j = i + 1
            negate = j < n and pattern[j] == "^"
            if negate:
                j += 1
            members: list[str] = []
            while j < n and pattern[j] != "]":
                if pattern[j] == "\\" and j + 1 < n:
                    members.append(re.escape(pattern[j + 1]))
                    j += 2
                elif j + 2 < n and pattern[j + 1] == "-" and pattern[j + 2] != "]":
                    lo, hi = sorted((pattern[j], pattern[j + 2]))
                    members.append(f"{re.escape(lo)}-{re.escape(hi)}")
                    j += 3
                else:
                    members.append(re.escape(pattern[j]))
                    j += 1
            i = j
            if members:
                out.append(f"[{'^' if negate else ''}{''.join(members)}]")
            else:
                out.append("." if negate else "(?!)")
        else:
            out.append(re.escape(ch))
        i += 1
    return re.compile("".join(out), re.DOTALL)


class InMemoryBackend:
    """Process-local backend following Redis command semantics.

    Suitable for development, tests and single-process applications. Keys
    expire lazily on access. ``scan`` cursors are per-key insertion
    sequence numbers, so a key that exists for the whole iteration is
    always reported, while keys added or removed mid-scan may or may not be.

    Args:
        clock: Monotonic clock in seconds used for expiry.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._store: dict[str, tuple[str, float | None]] = {}
        self._seq: dict[str, int] = {}
        self._next_seq = 1
        self._clock = clock
        self._lock = asyncio.Lock()

    def _live(self, key: str) -> tuple[str, float | None] | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            self._remove(key)
            return None
        return entry

    def _remove(self, key: str) -> bool:
        self._seq.pop(key, None)
        return self._store.pop(key, None) is not None

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._live(key)
            return entry[0] if entry is not None else None

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        if ex is not None and ex <= 0:
            raise BackendException("invalid expire time in 'set' command", context={"command": "SET"})
        async with self._lock:
            expires_at = self._clock() + ex if ex is not None else None
            if self._live(key) is None:
                self._seq[key] = self._next_seq
                self._next_seq += 1
            self._store[key] = (value, expires_at)

    async def delete(self, *keys: str) -> int:
        async with self._lock:
            return sum(1 for key in keys if self._live(key) is not None and self._remove(key))

    async def expire(self, key: str, seconds: int) -> bool:
        async with self._lock:
            entry = self._live(key)
            if entry is None:
                return False
            if seconds <= 0:
                self._remove(key)
            else:
                self._store[key] = (entry[0], self._clock() + seconds)
            return True

    async def mget(self, *keys: str) -> list[str | None]:
        async with self._lock:
            values: list[str | None] = []
            for key in keys:
                entry = self._live(key)
                values.append(entry[0] if entry is not None else None)
            return values

    async def scan(self, cursor: int, match: str, count: int) -> tuple[int, list[str]]:
        """Examine up to *count* keys from *cursor* on, returning the ones matching *match*."""
        regex = compile_glob(match)
        async with self._lock:
            pending = sorted((seq, key) for key, seq in self._seq.items() if seq >= cursor)
            batch, rest = pending[:count], pending[count:]
            keys = [key for _, key in batch if self._live(key) is not None and regex.fullmatch(key)]
            next_cursor = rest[0][0] if rest else 0
            return next_cursor, keys

    async def ttl(self, key: str) -> int:
        """Remaining lifetime in seconds: -2 when absent, -1 when persistent."""
        async with self._lock:
            entry = self._live(key)
            if entry is None:
                return -2
            if entry[1] is None:
                return -1
            return round(entry[1] - self._clock())

    async def flushdb(self) -> None:
        async with self._lock:
            self._store.clear()
            self._seq.clear()
