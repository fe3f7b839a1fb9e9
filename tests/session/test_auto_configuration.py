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
"""Tests for session store auto-configuration."""

import pytest

from kvsession.core.config import Config
from kvsession.kernel.exceptions import ConfigurationException
from kvsession.session.adapters.memory import InMemoryBackend
from kvsession.session.adapters.redis import RedisBackend
from kvsession.session.auto_configuration import SessionStoreAutoConfiguration
from kvsession.session.store import KeyValueSessionStore


def config_with(**store: object) -> Config:
    return Config.from_file(None).with_overrides({"kvsession": {"store": store}})


class TestSessionStoreAutoConfiguration:
    def test_memory_backend(self):
        auto = SessionStoreAutoConfiguration(config_with(backend="memory"))
        assert isinstance(auto.backend(), InMemoryBackend)

    def test_redis_backend_from_url(self):
        auto = SessionStoreAutoConfiguration(config_with(redis={"url": "redis://cache.internal:6380/2"}))
        backend = auto.backend()
        assert isinstance(backend, RedisBackend)
        kwargs = backend.client.connection_pool.connection_kwargs
        assert kwargs["host"] == "cache.internal"
        assert kwargs["port"] == 6380
        assert kwargs["db"] == 2

    def test_unknown_backend_raises(self):
        auto = SessionStoreAutoConfiguration(config_with(backend="memcached"))
        with pytest.raises(ConfigurationException, match="memcached"):
            auto.backend()

    def test_session_store_uses_properties(self):
        auto = SessionStoreAutoConfiguration(config_with(backend="memory", prefix="shop:", ttl=600))
        store = auto.session_store()
        assert isinstance(store, KeyValueSessionStore)
        assert store.prefix == "shop:"
        assert store.ttl == 600

    def test_session_store_accepts_backend(self):
        backend = InMemoryBackend()
        store = SessionStoreAutoConfiguration(Config.from_file(None)).session_store(backend)
        assert store.prefix == "sess:"

    async def test_configured_store_round_trip(self):
        store = SessionStoreAutoConfiguration(config_with(backend="memory")).session_store()
        await store.set("u1", {"a": 1})
        assert await store.get("u1") == {"a": 1}
