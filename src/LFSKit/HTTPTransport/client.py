# === NAVMAP v1 ===
# {
#   "module": "LFSKit.HTTPTransport.client",
#   "purpose": "Per-host HTTPX client cache and request dispatcher.",
#   "sections": [
#     {
#       "id": "hosttransportconfig",
#       "name": "HostTransportConfig",
#       "anchor": "class-hosttransportconfig",
#       "kind": "class"
#     },
#     {
#       "id": "resolve-host-config",
#       "name": "resolve_host_config",
#       "anchor": "function-resolve-host-config",
#       "kind": "function"
#     },
#     {
#       "id": "build-host-client",
#       "name": "build_host_client",
#       "anchor": "function-build-host-client",
#       "kind": "function"
#     },
#     {
#       "id": "client",
#       "name": "Client",
#       "anchor": "class-client",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Per-host HTTPX client cache and request dispatcher.

Every destination host gets its own :class:`httpx.Client`, built lazily on the
first request to that host and reused afterwards.  Each one carries:

- **Timeouts**: connect budget covering both TCP dial and TLS handshake.
- **Connection pooling**: idle connections per host bounded by
  ``lfs.concurrenttransfers``; TCP keepalive enabled where supported.
- **Proxies**: resolved once from git config and the process environment,
  skipped for hosts on the NO_PROXY list.
- **TLS**: verification disabled or custom CA roots, decided per host.

No network or TLS work happens until :meth:`Client.do` is first called for a
host.

Example:
    >>> client = Client.from_environments(OSEnvironment(), load_git_environment())
    >>> request = httpx.Request("POST", "https://git.example.com/repo.git/info/lfs/objects/batch")
    >>> response = client.do(request)  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import os
import socket
import threading
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import httpx

from . import policy
from .credentials import CommandCredentialHelper, CredentialHelper
from .decoding import handle_response
from .endpoints import EndpointFinder, GitEndpointFinder
from .env import Environment, MappingEnvironment
from .logging_config import mask_sensitive_data
from .netrc_auth import NetrcCredentials, NetrcFinder, parse_netrc
from .proxy import proxy_for_url
from .settings import ClientSettings, resolve_skip_prompt
from .tls import TLSPolicy, create_ssl_context, resolve_tls_policy

logger = logging.getLogger(__name__)

__all__ = [
    "Client",
    "HostTransportConfig",
    "resolve_host_config",
    "build_host_client",
    "request_host",
]

# Largest TCP_KEEPIDLE/TCP_KEEPINTVL value Linux accepts.
_MAX_TCP_KEEPALIVE = 32767


# ============================================================================
# Host Transport Configuration
# ============================================================================


@dataclass(frozen=True)
class HostTransportConfig:
    """Fully resolved transport settings for one host, defaults applied."""

    host: str
    dial_timeout: int
    keepalive_timeout: int
    tls_timeout: int
    concurrent_transfers: int
    https_proxy: Optional[str]
    http_proxy: Optional[str]
    tls: TLSPolicy

    @property
    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(None, connect=float(self.dial_timeout + self.tls_timeout))

    @property
    def limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_connections=None,
            max_keepalive_connections=self.concurrent_transfers,
            keepalive_expiry=float(self.keepalive_timeout),
        )

    @property
    def socket_options(self) -> List[Tuple[int, int, int]]:
        interval = min(self.keepalive_timeout, _MAX_TCP_KEEPALIVE)
        options = [(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)]
        for name in ("TCP_KEEPIDLE", "TCP_KEEPINTVL"):
            option = getattr(socket, name, None)
            if option is not None:
                options.append((socket.IPPROTO_TCP, option, interval))
        return options


def resolve_host_config(client: Client, host: str) -> HostTransportConfig:
    """Apply defaults and per-host proxy/TLS decisions for ``host``."""
    settings = client.settings
    proxies = settings.proxies
    return HostTransportConfig(
        host=host,
        dial_timeout=settings.effective_dial_timeout,
        keepalive_timeout=settings.effective_keepalive_timeout,
        tls_timeout=settings.effective_tls_timeout,
        concurrent_transfers=settings.effective_concurrent_transfers,
        https_proxy=proxy_for_url("https", host, proxies),
        http_proxy=proxy_for_url("http", host, proxies),
        tls=resolve_tls_policy(
            host,
            skip_ssl_verify=settings.skip_ssl_verify,
            git_env=client.git_env,
            os_env=client.os_env,
        ),
    )


# ============================================================================
# Client Construction
# ============================================================================


def build_host_client(
    config: HostTransportConfig, transport: Optional[httpx.BaseTransport] = None
) -> httpx.Client:
    """Create the :class:`httpx.Client` described by ``config``.

    ``transport`` replaces the network transports entirely (proxy mounts
    included); tests pass an :class:`httpx.MockTransport` here.
    """
    ssl_ctx = create_ssl_context(config.tls, config.host)
    mounts: Dict[str, httpx.BaseTransport] = {}

    if transport is None:
        transport = httpx.HTTPTransport(
            verify=ssl_ctx,
            limits=config.limits,
            socket_options=config.socket_options,
        )
        for pattern, proxy in (("https://", config.https_proxy), ("http://", config.http_proxy)):
            if proxy:
                mounts[pattern] = httpx.HTTPTransport(
                    verify=ssl_ctx,
                    limits=config.limits,
                    socket_options=config.socket_options,
                    proxy=httpx.Proxy(proxy),
                )

    client = httpx.Client(
        transport=transport,
        mounts=mounts,
        timeout=config.timeout,
        verify=ssl_ctx,
        trust_env=False,
        follow_redirects=policy.FOLLOW_REDIRECTS,
        max_redirects=policy.MAX_REDIRECTS,
        event_hooks={"request": [_on_request], "response": [_on_response]},
    )

    logger.debug(
        "HTTPX host client created",
        extra={
            "host": config.host,
            "dial_timeout": config.dial_timeout,
            "keepalive_timeout": config.keepalive_timeout,
            "tls_timeout": config.tls_timeout,
            "concurrent_transfers": config.concurrent_transfers,
            "https_proxy": config.https_proxy,
            "http_proxy": config.http_proxy,
            "tls_verify": config.tls.verify,
        },
    )
    return client


# ============================================================================
# Event Hooks (Telemetry)
# ============================================================================


def _on_request(request: httpx.Request) -> None:
    request.extensions["lfskit_t0"] = time.perf_counter()
    logger.debug(
        "HTTP request",
        extra={
            "method": request.method,
            "url": str(request.url),
            "headers": mask_sensitive_data(dict(request.headers)),
        },
    )


def _on_response(response: httpx.Response) -> None:
    request = response.request
    t0 = request.extensions.get("lfskit_t0", time.perf_counter())
    logger.debug(
        "HTTP response",
        extra={
            "method": request.method,
            "url": str(request.url),
            "status": response.status_code,
            "elapsed_ms": round((time.perf_counter() - t0) * 1000.0, 3),
        },
    )


# ============================================================================
# Client
# ============================================================================


def request_host(request: httpx.Request) -> str:
    """Return the cache key for ``request``: its ``Host`` header as sent."""
    return request.headers.get("Host") or request.url.netloc.decode("ascii")


class Client:
    """Owner of the per-host HTTPX client cache.

    Attributes:
        settings: Configuration snapshot taken at construction.
        credentials: Helper supplying auth material for requests.
        endpoints: Resolver for LFS API endpoints.
        netrc: ``.netrc`` credential lookup.
        os_env: Process-level environment.
        git_env: Git configuration; also consulted for per-host TLS settings.
    """

    def __init__(
        self,
        *,
        settings: Optional[ClientSettings] = None,
        os_env: Optional[Environment] = None,
        git_env: Optional[Environment] = None,
        credentials: Optional[CredentialHelper] = None,
        endpoints: Optional[EndpointFinder] = None,
        netrc: Optional[NetrcFinder] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.os_env: Environment = os_env if os_env is not None else MappingEnvironment()
        self.git_env: Environment = git_env if git_env is not None else MappingEnvironment()
        self.settings = settings if settings is not None else ClientSettings()
        self.credentials = credentials if credentials is not None else CommandCredentialHelper()
        self.endpoints = endpoints if endpoints is not None else GitEndpointFinder(self.git_env)
        self.netrc = netrc if netrc is not None else NetrcCredentials()

        self._transport = transport
        self._host_clients: Dict[str, httpx.Client] = {}
        self._client_lock = threading.Lock()

    @classmethod
    def from_environments(
        cls,
        os_env: Optional[Environment] = None,
        git_env: Optional[Environment] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> Client:
        """Build a client from the process environment and git configuration.

        Missing environments are replaced with empty ones.

        Raises:
            ConfigurationError: If the user's netrc file is malformed.
        """
        os_env = os_env if os_env is not None else MappingEnvironment()
        git_env = git_env if git_env is not None else MappingEnvironment()

        netrc = parse_netrc(os_env)
        settings = ClientSettings.from_environments(os_env, git_env)
        client = cls(
            settings=settings,
            os_env=os_env,
            git_env=git_env,
            credentials=CommandCredentialHelper(skip_prompt=resolve_skip_prompt(os_env)),
            endpoints=GitEndpointFinder(git_env),
            netrc=netrc,
            transport=transport,
        )
        logger.debug(
            "LFS HTTP client configured",
            extra={"settings": settings.model_dump(), "pid": os.getpid()},
        )
        return client

    @property
    def hosts(self) -> Tuple[str, ...]:
        """Hosts that currently have a cached client."""
        with self._client_lock:
            return tuple(self._host_clients)

    def http_client(self, host: str) -> httpx.Client:
        """Return the cached client for ``host``, building it on first use."""
        with self._client_lock:
            client = self._host_clients.get(host)
            if client is None:
                client = build_host_client(resolve_host_config(self, host), self._transport)
                self._host_clients[host] = client
            return client

    def do(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        """Send ``request`` through its host's client.

        Transport failures propagate unchanged.  Error statuses and malformed
        JSON bodies raise :class:`~LFSKit.HTTPTransport.errors.LFSAPIError`
        subclasses whose ``response`` attribute holds the received response.

        With ``stream=True`` a successful response is returned unread and the
        caller must close it.
        """
        response = self.http_client(request_host(request)).send(request, stream=stream)
        handle_response(response)
        return response

    def close(self) -> None:
        """Close every cached host client and empty the cache."""
        with self._client_lock:
            clients = list(self._host_clients.values())
            self._host_clients.clear()
        for client in clients:
            client.close()
        if clients:
            logger.debug("HTTPX host clients closed", extra={"count": len(clients)})

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
