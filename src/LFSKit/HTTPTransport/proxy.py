"""Proxy server resolution and NO_PROXY matching.

Resolution reads the layered environment once, with a fixed precedence:

* HTTPS proxy: ``http.proxy`` from git config when it is an ``https://`` URL,
  then ``HTTPS_PROXY``, then ``https_proxy``.
* HTTP proxy: ``http.proxy`` from git config, then ``HTTP_PROXY``, then
  ``http_proxy``.
* Bypass list: ``NO_PROXY``, then ``no_proxy``.

A later source is only consulted when every earlier one is empty.
"""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from typing import List, Optional

from .env import Environment
from .policy import PROXY_KEY

__all__ = [
    "ProxyServers",
    "get_proxy_servers",
    "parse_no_proxy",
    "should_bypass_proxy",
    "proxy_for_url",
]

_NO_PROXY_SPLIT_RE = re.compile(r"[,\s]+")


@dataclass(frozen=True)
class ProxyServers:
    """Proxy targets resolved from the environment; empty strings mean unset."""

    https_proxy: str = ""
    http_proxy: str = ""
    no_proxy: str = ""


def _first_set(env: Environment, *keys: str) -> str:
    for key in keys:
        value, _ = env.get(key)
        if value:
            return value
    return ""


def get_proxy_servers(os_env: Environment, git_env: Environment) -> ProxyServers:
    """Resolve HTTPS, HTTP and NO_PROXY settings from both environments."""
    http_proxy, _ = git_env.get(PROXY_KEY)
    https_proxy = http_proxy if http_proxy.startswith("https://") else ""

    if not https_proxy:
        https_proxy = _first_set(os_env, "HTTPS_PROXY", "https_proxy")
    if not http_proxy:
        http_proxy = _first_set(os_env, "HTTP_PROXY", "http_proxy")
    no_proxy = _first_set(os_env, "NO_PROXY", "no_proxy")

    return ProxyServers(https_proxy=https_proxy, http_proxy=http_proxy, no_proxy=no_proxy)


def _strip_port(host: str) -> str:
    if host.startswith("["):
        end = host.find("]")
        return host[1:end] if end != -1 else host[1:]
    if host.count(":") == 1:
        return host.split(":", 1)[0]
    return host


def _is_loopback(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


def parse_no_proxy(no_proxy: str) -> List[str]:
    """Split a NO_PROXY value into lower-cased, port-less patterns.

    Examples:
        >>> parse_no_proxy("example.com, .internal:8080  *")
        ['example.com', '.internal', '*']
    """
    patterns = []
    for raw in _NO_PROXY_SPLIT_RE.split(no_proxy.strip().lower()):
        if not raw:
            continue
        patterns.append(raw if raw == "*" else _strip_port(raw))
    return [pattern for pattern in patterns if pattern]


def should_bypass_proxy(host: str, no_proxy: str) -> bool:
    """Return ``True`` when requests to ``host`` must not use a proxy.

    Supports exact matches, suffix-domain matches (``example.com`` and
    ``.example.com`` both cover ``api.example.com``) and the ``*`` wildcard.
    Loopback hosts are never proxied.

    Examples:
        >>> should_bypass_proxy("api.example.com:443", "example.com")
        True
        >>> should_bypass_proxy("badexample.com", "example.com")
        False
        >>> should_bypass_proxy("anything", "*")
        True
    """
    hostname = _strip_port(host.strip().lower())
    if not hostname or _is_loopback(hostname):
        return True

    for pattern in parse_no_proxy(no_proxy):
        if pattern == "*" or hostname == pattern:
            return True
        if pattern.startswith("."):
            if hostname.endswith(pattern) or hostname == pattern[1:]:
                return True
        elif hostname.endswith("." + pattern):
            return True
    return False


def proxy_for_url(scheme: str, host: str, servers: ProxyServers) -> Optional[str]:
    """Pick the proxy URL for a request, or ``None`` to connect directly.

    HTTPS requests prefer the HTTPS proxy and fall back to the HTTP proxy.
    A proxy given without an http(s) scheme is treated as ``http://``.
    """
    proxy = servers.https_proxy if scheme == "https" else ""
    if not proxy:
        proxy = servers.http_proxy
    if not proxy or should_bypass_proxy(host, servers.no_proxy):
        return None
    if not proxy.startswith(("http://", "https://")):
        proxy = "http://" + proxy
    return proxy
