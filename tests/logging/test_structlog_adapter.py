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
"""Tests for StructlogAdapter."""

import logging
import sys

from kvsession.core.config import Config
from kvsession.logging.structlog_adapter import StructlogAdapter


class TestStructlogAdapterConfigure:
    def test_configure_with_packaged_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config.from_file(None))
        assert adapter._root_level == "INFO"
        assert adapter._format == "console"

    def test_configure_reads_root_level_and_format(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"kvsession": {"logging": {"format": "JSON", "level": {"root": "debug"}}}}))
        assert adapter._root_level == "DEBUG"
        assert adapter._format == "json"

    def test_configure_applies_per_module_levels(self):
        adapter = StructlogAdapter()
        config = Config({"kvsession": {"logging": {"level": {"root": "INFO", "kvsession.session.scan": "DEBUG"}}}})
        adapter.configure(config)
        assert adapter._module_levels == {"kvsession.session.scan": "DEBUG"}
        assert logging.getLogger("kvsession.session.scan").level == logging.DEBUG

    def test_records_are_written_to_stderr(self):
        StructlogAdapter().configure(Config({}))
        streams = [h.stream for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
        assert streams == [sys.stderr]


class TestStructlogAdapterLoggers:
    def test_get_logger_returns_bound_logger(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        logger = adapter.get_logger("kvsession.test")
        assert callable(getattr(logger, "info", None))
        assert callable(getattr(logger, "debug", None))

    def test_set_level(self):
        adapter = StructlogAdapter()
        adapter.set_level("kvsession.test.level", "warning")
        assert logging.getLogger("kvsession.test.level").level == logging.WARNING
