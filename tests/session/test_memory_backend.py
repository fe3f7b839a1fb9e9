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
"""Tests for InMemoryBackend command semantics."""

from __future__ import annotations

import pytest

from kvsession.kernel.exceptions import BackendException
from kvsession.session.adapters.memory import InMemoryBackend, compile_glob
from kvsession.session.ports.outbound import KeyValueBackend


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def scan_all(backend: InMemoryBackend, match: str, count: int) -> tuple[list[str], int]:
    keys: list[str] = []
    cursor, rounds = 0, 0
    while True:
        cursor, batch = await backend.scan(cursor, match, count)
        keys.extend(batch)
        rounds += 1
        if cursor == 0:
            return keys, rounds


class TestCompileGlob:
    @pytest.mark.parametrize(
        ("pattern", "key", "matches"),
        [
            ("sess:*", "sess:abc", True),
            ("sess:*", "other:abc", False),
            ("h?llo", "hello", True),
            ("h?llo", "hllo", False),
            ("h[ae]llo", "hallo", True),
            ("h[ae]llo", "hillo", False),
            ("h[^e]llo", "hallo", True),
            ("h[^e]llo", "hello", False),
            ("h[a-c]llo", "hbllo", True),
            ("a\\*b", "a*b", True),
            ("a\\*b", "axb", False),
            ("a\\[1\\]*", "a[1]x", True),
            ("a\\[1\\]*", "a1x", False),
            ("a\\\\*", "a\\x", True),
            ("a\\\\*", "ax", False),
            ("trailing\\", "trailing\\", True),
        ],
    )
    def test_redis_glob_semantics(self, pattern: str, key: str, matches: bool):
        assert (compile_glob(pattern).fullmatch(key) is not None) is matches


class TestInMemoryBackend:
    def test_protocol_compliance(self):
        assert isinstance(InMemoryBackend(), KeyValueBackend)

    async def test_set_and_get(self):
        backend = InMemoryBackend()
        await backend.set("k", "v")
        assert await backend.get("k") == "v"
        assert await backend.get("missing") is None

    async def test_set_with_expiry(self):
        clock = FakeClock()
        backend = InMemoryBackend(clock=clock)
        await backend.set("k", "v", ex=10)
        assert await backend.ttl("k") == 10
        clock.advance(10)
        assert await backend.get("k") is None
        assert await backend.ttl("k") == -2

    async def test_set_without_expiry_is_persistent(self):
        backend = InMemoryBackend()
        await backend.set("k", "v")
        assert await backend.ttl("k") == -1

    async def test_set_with_non_positive_expiry_is_rejected(self):
        backend = InMemoryBackend()
        with pytest.raises(BackendException):
            await backend.set("k", "v", ex=0)

    async def test_overwrite_clears_expiry(self):
        backend = InMemoryBackend()
        await backend.set("k", "v1", ex=10)
        await backend.set("k", "v2")
        assert await backend.get("k") == "v2"
        assert await backend.ttl("k") == -1

    async def test_delete_counts_existing_keys(self):
        backend = InMemoryBackend()
        await backend.set("a", "1")
        await backend.set("b", "2")
        assert await backend.delete("a", "b", "c") == 2
        assert await backend.delete("a") == 0

    async def test_expire(self):
        clock = FakeClock()
        backend = InMemoryBackend(clock=clock)
        await backend.set("k", "v", ex=5)
        assert await backend.expire("k", 100) is True
        assert await backend.ttl("k") == 100
        assert await backend.expire("missing", 100) is False

    async def test_expire_non_positive_deletes(self):
        backend = InMemoryBackend()
        await backend.set("k", "v")
        assert await backend.expire("k", -3) is True
        assert await backend.get("k") is None

    async def test_mget_preserves_order_and_gaps(self):
        backend = InMemoryBackend()
        await backend.set("a", "1")
        await backend.set("c", "3")
        assert await backend.mget("a", "b", "c") == ["1", None, "3"]

    async def test_scan_spans_batches(self):
        backend = InMemoryBackend()
        for i in range(25):
            await backend.set(f"sess:{i}", "x")
        await backend.set("other:1", "x")
        keys, rounds = await scan_all(backend, "sess:*", 10)
        assert sorted(keys) == sorted(f"sess:{i}" for i in range(25))
        assert rounds == 3

    async def test_scan_keeps_keys_present_throughout(self):
        backend = InMemoryBackend()
        for i in range(6):
            await backend.set(f"k{i}", "x")
        cursor, first = await backend.scan(0, "*", 3)
        await backend.delete("k0")
        await backend.set("late", "x")
        keys = list(first)
        while cursor != 0:
            cursor, batch = await backend.scan(cursor, "*", 3)
            keys.extend(batch)
        assert {f"k{i}" for i in range(1, 6)} <= set(keys)

    async def test_scan_skips_expired_keys(self):
        clock = FakeClock()
        backend = InMemoryBackend(clock=clock)
        await backend.set("a", "1", ex=1)
        await backend.set("b", "2")
        clock.advance(2)
        keys, _ = await scan_all(backend, "*", 100)
        assert keys == ["b"]

    async def test_flushdb(self):
        backend = InMemoryBackend()
        await backend.set("a", "1")
        await backend.flushdb()
        assert await backend.get("a") is None
