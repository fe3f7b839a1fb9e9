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
"""kvsession session: session store over a Redis-like key-value backend.

Import concrete backend types from the adapter package::

    from kvsession.session.adapters.memory import InMemoryBackend
    from kvsession.session.adapters.redis import RedisBackend
"""

from kvsession.session.auto_configuration import SessionStoreAutoConfiguration
from kvsession.session.callback import CallbackSessionStore, attach
from kvsession.session.ports.outbound import KeyValueBackend, SessionStore
from kvsession.session.properties import SessionStoreProperties
from kvsession.session.scan import KeyScanner, escape_glob, prefix_pattern
from kvsession.session.serializer import JsonSerializer, Serializer
from kvsession.session.store import KeyValueSessionStore, session_ttl

__all__ = [
    "CallbackSessionStore",
    "JsonSerializer",
    "KeyScanner",
    "KeyValueBackend",
    "KeyValueSessionStore",
    "Serializer",
    "SessionStore",
    "SessionStoreAutoConfiguration",
    "SessionStoreProperties",
    "attach",
    "escape_glob",
    "prefix_pattern",
    "session_ttl",
]
