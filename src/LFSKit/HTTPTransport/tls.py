"""Per-host TLS verification policy.

For every host exactly one of two policies applies:

1. Verification disabled: any certificate is accepted.  The global
   ``skip_ssl_verify`` flag decides unless git config carries a host-scoped
   ``http.https://<host>/.sslverify`` entry, which wins in either direction.
2. Verification enabled: the certifi trust store, or instead of it any CA file or
   directory configured for the host (``http.https://<host>/.sslcainfo``,
   ``http.sslcainfo``/``GIT_SSL_CAINFO``, ``http.sslcapath``/``GIT_SSL_CAPATH``).
"""

from __future__ import annotations

import logging
import ssl
from dataclasses import dataclass
from typing import Optional

import certifi

from . import policy
from .env import Environment, parse_bool

logger = logging.getLogger(__name__)

__all__ = [
    "TLSPolicy",
    "is_cert_verification_disabled_for_host",
    "get_root_cas_for_host",
    "resolve_tls_policy",
    "create_ssl_context",
]


@dataclass(frozen=True)
class TLSPolicy:
    """TLS decision for a single host.

    ``ca_file``/``ca_path`` are only ever set when ``verify`` is ``True``.
    """

    verify: bool = True
    ca_file: Optional[str] = None
    ca_path: Optional[str] = None

    @property
    def has_custom_roots(self) -> bool:
        return bool(self.ca_file or self.ca_path)


def is_cert_verification_disabled_for_host(
    host: str, *, skip_ssl_verify: bool, git_env: Environment
) -> bool:
    """Return ``True`` when certificates presented by ``host`` must not be checked."""
    value, present = git_env.get(policy.host_config_key(host, "sslverify"))
    if present and value:
        return not parse_bool(value, True)
    return skip_ssl_verify


def _lookup(env: Environment, key: str) -> Optional[str]:
    value, _ = env.get(key)
    return value or None


def get_root_cas_for_host(
    host: str, *, git_env: Environment, os_env: Environment
) -> TLSPolicy:
    """Collect CA material configured for ``host``; an empty policy means system roots."""
    ca_file = (
        _lookup(git_env, policy.host_config_key(host, "sslcainfo"))
        or _lookup(git_env, policy.SSL_CAINFO_KEY)
        or _lookup(os_env, policy.SSL_CAINFO_VAR)
    )
    ca_path = _lookup(git_env, policy.SSL_CAPATH_KEY) or _lookup(os_env, policy.SSL_CAPATH_VAR)
    return TLSPolicy(verify=True, ca_file=ca_file, ca_path=ca_path)


def resolve_tls_policy(
    host: str, *, skip_ssl_verify: bool, git_env: Environment, os_env: Environment
) -> TLSPolicy:
    if is_cert_verification_disabled_for_host(
        host, skip_ssl_verify=skip_ssl_verify, git_env=git_env
    ):
        return TLSPolicy(verify=False)
    return get_root_cas_for_host(host, git_env=git_env, os_env=os_env)


def create_ssl_context(tls_policy: TLSPolicy, host: str = "") -> ssl.SSLContext:
    """Build the :class:`ssl.SSLContext` implementing ``tls_policy``.

    Configured CA material replaces the certifi roots rather than extending
    them.  Unreadable CA files are logged and skipped; if none load, the
    context trusts no root at all.
    """
    if not tls_policy.verify:
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        logger.warning("TLS certificate verification disabled", extra={"host": host})
        return ctx

    if not tls_policy.has_custom_roots:
        return ssl.create_default_context(cafile=certifi.where())

    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    if tls_policy.ca_file:
        try:
            ctx.load_verify_locations(cafile=tls_policy.ca_file)
        except (OSError, ssl.SSLError) as exc:
            logger.warning(
                f"Unable to load CA file {tls_policy.ca_file}: {exc}", extra={"host": host}
            )
    if tls_policy.ca_path:
        try:
            ctx.load_verify_locations(capath=tls_policy.ca_path)
        except (OSError, ssl.SSLError) as exc:
            logger.warning(
                f"Unable to load CA directory {tls_policy.ca_path}: {exc}", extra={"host": host}
            )
    return ctx
