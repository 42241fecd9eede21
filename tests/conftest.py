"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.

The upstream API is never contacted: tests route the shared httpx client
through ``httpx.MockTransport`` (see tests/test_fixtures/upstream_factory.py).
"""

import os
import sys

import httpx
import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures.upstream_factory import (  # noqa: E402
    RecordingUpstream,
    make_settings,
    streamed,
)

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def settings_without_key():
    return make_settings(GEMINI_API_KEY="")


# ============================================================================
# Upstream Fixtures
# ============================================================================


@pytest.fixture
def ok_upstream():
    """Upstream that streams "He" then "llo"."""
    return RecordingUpstream(lambda request: httpx.Response(200, content=streamed(b"He", b"llo")))
