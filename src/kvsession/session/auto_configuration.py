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
"""Session store auto-configuration."""

from __future__ import annotations

import structlog

from kvsession.core.config import Config
from kvsession.kernel.exceptions import ConfigurationException
from kvsession.session.ports.outbound import KeyValueBackend
from kvsession.session.properties import SessionStoreProperties
from kvsession.session.serializer import Serializer
from kvsession.session.store import KeyValueSessionStore

logger = structlog.get_logger(__name__)

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class SessionStoreAutoConfiguration:
    """Builds a wired session store from ``kvsession.store.*`` configuration."""

    def __init__(self, config: Config) -> None:
        self._config = config
        self._properties = config.bind(SessionStoreProperties)

    @property
    def properties(self) -> SessionStoreProperties:
        return self._properties

    def backend(self) -> KeyValueBackend:
        """Create the backend named by ``kvsession.store.backend``."""
        kind = self._properties.backend.strip().lower()

        if kind == "redis":
            import redis.asyncio as aioredis

            from kvsession.session.adapters.redis import RedisBackend

            url = str(self._config.get("kvsession.store.redis.url", DEFAULT_REDIS_URL))
            logger.debug("session_backend_configured", backend="redis", url=url)
            return RedisBackend(aioredis.from_url(url))  # type: ignore[no-untyped-call,unused-ignore]

        if kind == "memory":
            from kvsession.session.adapters.memory import InMemoryBackend

            logger.debug("session_backend_configured", backend="memory")
            return InMemoryBackend()

        raise ConfigurationException(
            f"Unknown session backend '{self._properties.backend}' (expected 'redis' or 'memory')",
            context={"backend": self._properties.backend},
        )

    def session_store(
        self,
        backend: KeyValueBackend | None = None,
        serializer: Serializer | None = None,
    ) -> KeyValueSessionStore:
        """Create the store, building the configured backend unless one is given."""
        return KeyValueSessionStore.from_properties(
            backend if backend is not None else self.backend(),
            self._properties,
            serializer=serializer,
        )
