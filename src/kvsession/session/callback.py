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
"""Callback-style facade for hosts that expect ``callback(error, result)``.

The store itself exposes one async method per operation. Hosts written
around completion callbacks wrap it in :class:`CallbackSessionStore`; each
call schedules the coroutine on the running event loop and reports the
outcome through the callback. Errors are delivered, never swallowed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from kvsession.session.ports.outbound import SessionStore

Callback = Callable[[BaseException | None, Any], None]

# In-flight bridge tasks. The event loop only keeps weak references.
_pending: set[asyncio.Task[None]] = set()


def _noop(error: BaseException | None, result: Any) -> None:
    pass


def attach(callback: Callback) -> Callable[[Awaitable[Any]], asyncio.Task[None]]:
    """Return a function that runs an awaitable and reports it to *callback*.

    On success the callback receives ``(None, value)``; on failure
    ``(exc, None)``. Must be used from within a running event loop.
    """

    def schedule(awaitable: Awaitable[Any]) -> asyncio.Task[None]:
        async def bridge() -> None:
            try:
                value = await awaitable
            except Exception as exc:
                callback(exc, None)
                return
            callback(None, value)

        task = asyncio.get_running_loop().create_task(bridge())
        _pending.add(task)
        task.add_done_callback(_pending.discard)
        return task

    return schedule


class CallbackSessionStore:
    """Adapts an async :class:`SessionStore` to completion callbacks.

    Every method returns the scheduled ``asyncio.Task`` so callers that do
    have a loop handy can still await completion.
    """

    def __init__(self, store: SessionStore) -> None:
        self._store = store

    @property
    def store(self) -> SessionStore:
        return self._store

    def get(self, sid: str, callback: Callback) -> asyncio.Task[None]:
        return attach(callback)(self._store.get(sid))

    def set(self, sid: str, session: dict[str, Any], callback: Callback | None = None) -> asyncio.Task[None]:
        return attach(callback or _noop)(self._store.set(sid, session))

    def destroy(self, sid: str, callback: Callback | None = None) -> asyncio.Task[None]:
        return attach(callback or _noop)(self._store.destroy(sid))

    def touch(self, sid: str, session: dict[str, Any], callback: Callback | None = None) -> asyncio.Task[None]:
        return attach(callback or _noop)(self._store.touch(sid, session))

    def all(self, callback: Callback | None = None) -> asyncio.Task[None]:
        return attach(callback or _noop)(self._store.all())

    def length(self, callback: Callback | None = None) -> asyncio.Task[None]:
        return attach(callback or _noop)(self._store.length())

    def clear(self, callback: Callback | None = None) -> asyncio.Task[None]:
        return attach(callback or _noop)(self._store.clear())

    def ids(self, callback: Callback | None = None) -> asyncio.Task[None]:
        return attach(callback or _noop)(self._store.ids())
