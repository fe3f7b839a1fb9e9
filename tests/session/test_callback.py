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
"""Tests for the callback boundary."""

from __future__ import annotations

import asyncio
import gc
import weakref
from typing import Any

import pytest

from kvsession.kernel.exceptions import BackendException
from kvsession.session.adapters.memory import InMemoryBackend
from kvsession.session.callback import CallbackSessionStore, attach
from kvsession.session.store import KeyValueSessionStore


class Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[BaseException | None, Any]] = []

    def __call__(self, error: BaseException | None, result: Any) -> None:
        self.calls.append((error, result))


class TestAttach:
    async def test_success_reports_value(self):
        async def work() -> int:
            return 42

        recorder = Recorder()
        await attach(recorder)(work())
        assert recorder.calls == [(None, 42)]

    async def test_failure_reports_error(self):
        async def work() -> int:
            raise BackendException("down")

        recorder = Recorder()
        await attach(recorder)(work())
        [(error, result)] = recorder.calls
        assert isinstance(error, BackendException)
        assert result is None

    def test_requires_running_loop(self):
        async def work() -> None:
            return None

        coro = work()
        with pytest.raises(RuntimeError):
            attach(Recorder())(coro)
        coro.close()


class TestCallbackSessionStore:
    async def test_set_then_get(self):
        store = CallbackSessionStore(KeyValueSessionStore(InMemoryBackend()))
        done = Recorder()
        await store.set("u1", {"a": 1}, done)
        got = Recorder()
        await store.get("u1", got)
        assert done.calls == [(None, None)]
        assert got.calls == [(None, {"a": 1})]

    async def test_callbacks_are_optional(self):
        store = CallbackSessionStore(KeyValueSessionStore(InMemoryBackend()))
        await store.set("u1", {"a": 1})
        await store.touch("u1", {"a": 1})
        await store.destroy("u1")
        await store.clear()
        assert await store.store.get("u1") is None

    async def test_bulk_operations(self):
        store = CallbackSessionStore(KeyValueSessionStore(InMemoryBackend()))
        await asyncio.gather(store.set("a", {"n": 1}), store.set("b", {"n": 2}))
        ids, length, everything = Recorder(), Recorder(), Recorder()
        await store.ids(ids)
        await store.length(length)
        await store.all(everything)
        assert sorted(ids.calls[0][1]) == ["a", "b"]
        assert length.calls == [(None, 2)]
        assert everything.calls == [(None, {"a": {"n": 1}, "b": {"n": 2}})]

    async def test_errors_reach_the_callback(self):
        backend = InMemoryBackend()
        await backend.set("sess:bad", "not json")
        recorder = Recorder()
        await CallbackSessionStore(KeyValueSessionStore(backend)).get("bad", recorder)
        [(error, result)] = recorder.calls
        assert error is not None
        assert result is None

    async def test_stalled_task_is_not_collected(self):
        class StalledStore:
            async def destroy(self, sid: str) -> None:
                await asyncio.get_running_loop().create_future()

        ref = weakref.ref(CallbackSessionStore(StalledStore()).destroy("s"))
        await asyncio.sleep(0)
        gc.collect()
        task = ref()
        assert task is not None
        assert not task.done()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
