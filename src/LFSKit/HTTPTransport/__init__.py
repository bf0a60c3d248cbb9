"""Per-host HTTP transport for the LFS file-transfer client.

This package provides lazily built, host-keyed HTTPX clients with:
- Proxy selection from git config and the process environment (NO_PROXY aware)
- Per-host TLS verification policy and custom CA roots
- Connection pooling and timeouts driven by ``lfs.*`` git settings
- JSON response decoding gated by content type, with LFS error mapping

Modules:
- client: host client cache and the ``Client.do`` dispatcher
- settings: immutable configuration snapshot
- proxy: proxy resolution and NO_PROXY matching
- tls: per-host certificate verification policy
- decoding: response decoding and error-status handling
- env: typed environment lookups

Example:
    >>> from LFSKit.HTTPTransport import Client, OSEnvironment, load_git_environment
    >>> client = Client.from_environments(OSEnvironment(), load_git_environment())  # doctest: +SKIP
    >>> response = client.do(httpx.Request("GET", url))  # doctest: +SKIP
"""

from LFSKit.HTTPTransport.client import Client, HostTransportConfig, resolve_host_config
from LFSKit.HTTPTransport.credentials import CommandCredentialHelper, CredentialHelper
from LFSKit.HTTPTransport.decoding import decode_response, handle_response
from LFSKit.HTTPTransport.endpoints import Endpoint, EndpointFinder, GitEndpointFinder
from LFSKit.HTTPTransport.env import (
    Environment,
    MappingEnvironment,
    OSEnvironment,
    load_git_environment,
)
from LFSKit.HTTPTransport.errors import (
    AuthError,
    ClientError,
    ConfigurationError,
    DecodeError,
    FatalError,
    LFSAPIError,
    ResponseError,
)
from LFSKit.HTTPTransport.netrc_auth import NetrcFinder, NetrcMachine, parse_netrc
from LFSKit.HTTPTransport.proxy import ProxyServers, get_proxy_servers, should_bypass_proxy
from LFSKit.HTTPTransport.settings import ClientSettings
from LFSKit.HTTPTransport.tls import TLSPolicy, resolve_tls_policy

__all__ = [
    # Client
    "Client",
    "ClientSettings",
    "HostTransportConfig",
    "resolve_host_config",
    # Environment
    "Environment",
    "MappingEnvironment",
    "OSEnvironment",
    "load_git_environment",
    # Proxies and TLS
    "ProxyServers",
    "get_proxy_servers",
    "should_bypass_proxy",
    "TLSPolicy",
    "resolve_tls_policy",
    # Responses
    "decode_response",
    "handle_response",
    # Collaborators
    "CredentialHelper",
    "CommandCredentialHelper",
    "Endpoint",
    "EndpointFinder",
    "GitEndpointFinder",
    "NetrcFinder",
    "NetrcMachine",
    "parse_netrc",
    # Errors
    "LFSAPIError",
    "ConfigurationError",
    "DecodeError",
    "ResponseError",
    "ClientError",
    "AuthError",
    "FatalError",
]
