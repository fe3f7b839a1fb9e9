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
"""Cursor-based key enumeration.

Keys are discovered with repeated ``SCAN`` rounds instead of a single
``KEYS`` call so the backend is never blocked by one unbounded listing.
The result is a weakly consistent snapshot: keys written or deleted while
the scan runs may or may not appear, and a key may be reported twice.
"""

from __future__ import annotations

import structlog

from kvsession.session.ports.outbound import KeyValueBackend

logger = structlog.get_logger(__name__)

DEFAULT_SCAN_COUNT = 100

GLOB_METACHARACTERS = frozenset("\\*?[]{}()!")


def escape_glob(text: str) -> str:
    """Backslash-escape every glob metacharacter so *text* matches literally."""
    return "".join(f"\\{ch}" if ch in GLOB_METACHARACTERS else ch for ch in text)


def prefix_pattern(prefix: str) -> str:
    """MATCH pattern selecting every key that starts with *prefix*."""
    return f"{escape_glob(prefix)}*"


class KeyScanner:
    """Enumerates backend keys matching a pattern, one SCAN round at a time.

    Args:
        backend: Backend the SCAN commands are sent to.
        count: Batch size hint passed as ``COUNT``. Backends may return more
            or fewer keys per round.
    """

    def __init__(self, backend: KeyValueBackend, count: int = DEFAULT_SCAN_COUNT) -> None:
        self._backend = backend
        self._count = count

    @property
    def count(self) -> int:
        return self._count

    async def scan(self, pattern: str) -> list[str]:
        """Return every key matching *pattern*, in the order the backend reported them.

        Rounds run sequentially; each one needs the cursor returned by the
        previous round. Iteration ends when the backend returns cursor 0.
        Duplicates across rounds are passed through unchanged.
        """
        keys: list[str] = []
        cursor = 0
        rounds = 0
        while True:
            next_cursor, batch = await self._backend.scan(cursor, pattern, self._count)
            rounds += 1
            keys.extend(batch)
            cursor = int(next_cursor)
            logger.debug("scan_round", pattern=pattern, round=rounds, batch=len(batch), next_cursor=cursor)
            if cursor == 0:
                break

        logger.debug("scan_complete", pattern=pattern, rounds=rounds, keys=len(keys))
        return keys

    async def scan_prefix(self, prefix: str) -> list[str]:
        """Return every key starting with *prefix*, glob metacharacters taken literally."""
        return await self.scan(prefix_pattern(prefix))
