# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Pytest configuration for copilot_asset_fetch.

Adds the project root (for the package) and this directory (for the shared
test doubles in fakes.py) to sys.path so the tests run without installation.
"""

import sys
from pathlib import Path

import pytest

_tests_dir = Path(__file__).resolve().parent
for _path in (_tests_dir.parent, _tests_dir):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from fakes import MemorySink, RecordingInstaller  # noqa: E402


@pytest.fixture
def memory_sink():
    return MemorySink()


@pytest.fixture
def installer():
    return RecordingInstaller()
