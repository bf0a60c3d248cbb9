"""
Pytest Configuration

Shared fixtures for the transport suite: mapping-backed environments, a
clean process environment, and the HTTP mocking helpers.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional

import pytest

from LFSKit.HTTPTransport.env import MappingEnvironment
from tests.fixtures.http_mocking import (  # noqa: F401
    failing_transport,
    lfs_server,
)

_PROXY_VARS = (
    "HTTPS_PROXY",
    "https_proxy",
    "HTTP_PROXY",
    "http_proxy",
    "NO_PROXY",
    "no_proxy",
    "ALL_PROXY",
    "all_proxy",
)


@pytest.fixture
def make_env() -> Callable[[Optional[Mapping[str, str]]], MappingEnvironment]:
    """Build a :class:`MappingEnvironment` from a plain dict."""

    def _make(values: Optional[Mapping[str, str]] = None) -> MappingEnvironment:
        return MappingEnvironment(values or {})

    return _make


@pytest.fixture(autouse=True)
def _clean_proxy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the host's proxy variables from leaking into tests."""
    for name in _PROXY_VARS:
        monkeypatch.delenv(name, raising=False)
