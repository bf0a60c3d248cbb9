# === NAVMAP v1 ===
# {
#   "module": "LFSKit.HTTPTransport.settings",
#   "purpose": "Immutable configuration snapshot and per-key resolvers for the HTTP client",
#   "sections": [
#     {
#       "id": "read-int-setting",
#       "name": "read_int_setting",
#       "anchor": "function-read-int-setting",
#       "kind": "function"
#     },
#     {
#       "id": "resolve-skip-ssl-verify",
#       "name": "resolve_skip_ssl_verify",
#       "anchor": "function-resolve-skip-ssl-verify",
#       "kind": "function"
#     },
#     {
#       "id": "resolve-skip-prompt",
#       "name": "resolve_skip_prompt",
#       "anchor": "function-resolve-skip-prompt",
#       "kind": "function"
#     },
#     {
#       "id": "clientsettings",
#       "name": "ClientSettings",
#       "anchor": "class-clientsettings",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Immutable configuration snapshot for :class:`~LFSKit.HTTPTransport.client.Client`.

The snapshot is computed once from the process environment and git config.
Raw values are kept as configured (``0`` meaning unset); the ``effective_*``
properties apply the defaults from :mod:`LFSKit.HTTPTransport.policy` and are
only consulted when a host client is built.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from . import policy
from .env import Environment
from .proxy import ProxyServers, get_proxy_servers

__all__ = [
    "ClientSettings",
    "read_int_setting",
    "resolve_skip_ssl_verify",
    "resolve_skip_prompt",
]


def read_int_setting(git_env: Environment, key: str) -> int:
    """Read an integer git setting, ``0`` when absent or unparseable."""
    return git_env.get_int(key, 0)


def resolve_skip_ssl_verify(os_env: Environment, git_env: Environment) -> bool:
    """Either source can switch certificate verification off; neither can force it on."""
    return not git_env.get_bool(policy.SSL_VERIFY_KEY, True) or os_env.get_bool(
        policy.SSL_NO_VERIFY_VAR, False
    )


def resolve_skip_prompt(os_env: Environment) -> bool:
    """Credential prompting stays enabled unless ``GIT_TERMINAL_PROMPT`` is false."""
    return not os_env.get_bool(policy.TERMINAL_PROMPT_VAR, True)


def _effective(value: int, default: int) -> int:
    return value if value >= 1 else default


class ClientSettings(BaseModel):
    """Configuration snapshot shared by every host client of one :class:`Client`."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    dial_timeout: int = Field(default=0, description="TCP connect timeout (seconds, <=0 unset)")
    keepalive_timeout: int = Field(default=0, description="Keepalive interval (seconds, <=0 unset)")
    tls_timeout: int = Field(default=0, description="TLS handshake timeout (seconds, <=0 unset)")
    concurrent_transfers: int = Field(
        default=0, description="Idle connections kept per host (<=0 unset)"
    )
    skip_ssl_verify: bool = Field(default=False, description="Disable certificate checks globally")
    https_proxy: str = Field(default="", description="Proxy for https:// requests")
    http_proxy: str = Field(default="", description="Proxy for http:// requests")
    no_proxy: str = Field(default="", description="Proxy bypass list")

    @classmethod
    def from_environments(cls, os_env: Environment, git_env: Environment) -> ClientSettings:
        """Snapshot timeouts, proxies and TLS policy from both environments."""
        proxies = get_proxy_servers(os_env, git_env)
        return cls(
            dial_timeout=read_int_setting(git_env, policy.DIAL_TIMEOUT_KEY),
            keepalive_timeout=read_int_setting(git_env, policy.KEEPALIVE_KEY),
            tls_timeout=read_int_setting(git_env, policy.TLS_TIMEOUT_KEY),
            concurrent_transfers=read_int_setting(git_env, policy.CONCURRENT_TRANSFERS_KEY),
            skip_ssl_verify=resolve_skip_ssl_verify(os_env, git_env),
            https_proxy=proxies.https_proxy,
            http_proxy=proxies.http_proxy,
            no_proxy=proxies.no_proxy,
        )

    @property
    def proxies(self) -> ProxyServers:
        return ProxyServers(
            https_proxy=self.https_proxy, http_proxy=self.http_proxy, no_proxy=self.no_proxy
        )

    @property
    def effective_dial_timeout(self) -> int:
        return _effective(self.dial_timeout, policy.DEFAULT_DIAL_TIMEOUT)

    @property
    def effective_keepalive_timeout(self) -> int:
        return _effective(self.keepalive_timeout, policy.DEFAULT_KEEPALIVE_TIMEOUT)

    @property
    def effective_tls_timeout(self) -> int:
        return _effective(self.tls_timeout, policy.DEFAULT_TLS_TIMEOUT)

    @property
    def effective_concurrent_transfers(self) -> int:
        return _effective(self.concurrent_transfers, policy.DEFAULT_CONCURRENT_TRANSFERS)
