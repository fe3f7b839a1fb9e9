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
"""Unified exception hierarchy for kvsession.

All errors raised by the store inherit from KvSessionException, so callers
can catch one type for every failure or a specific subclass for targeted
handling.

Categories:
- InfrastructureException: backend command failures
- SerializationException: session payloads that cannot be encoded or decoded
- ConfigurationException: invalid store settings
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class KvSessionException(Exception):
    """Base exception for all kvsession errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "BACKEND_ERROR").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(KvSessionException):
    """Infrastructure failures: backend connectivity and command errors."""


class BackendException(InfrastructureException):
    """A key-value backend command failed.

    Covers connection loss, timeouts and errors reported by the backend
    itself. The original client exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        code: str | None = "BACKEND_ERROR",
        context: dict | None = None,
    ) -> None:
        super().__init__(message, code=code, context=context)


# =============================================================================
# Data Exceptions
# =============================================================================


class SerializationException(KvSessionException):
    """A session payload could not be serialized or deserialized."""

    def __init__(
        self,
        message: str,
        code: str | None = "SERIALIZATION_ERROR",
        context: dict | None = None,
    ) -> None:
        super().__init__(message, code=code, context=context)


class ConfigurationException(KvSessionException):
    """Store configuration is invalid."""

    def __init__(
        self,
        message: str,
        code: str | None = "CONFIGURATION_ERROR",
        context: dict | None = None,
    ) -> None:
        super().__init__(message, code=code, context=context)
