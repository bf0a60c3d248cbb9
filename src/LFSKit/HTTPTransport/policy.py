# === NAVMAP v1 ===
# {
#   "module": "LFSKit.HTTPTransport.policy",
#   "purpose": "Transport defaults, configuration keys, and accepted media types.",
#   "sections": []
# }
# === /NAVMAP ===

"""Transport defaults, configuration keys, and accepted media types.

Configured values of zero or below mean "unset"; the defaults here are applied
when a per-host client is built, never when configuration is loaded.
"""

import re

# ============================================================================
# Defaults (applied at host client construction)
# ============================================================================

#: Maximum idle connections kept per host
DEFAULT_CONCURRENT_TRANSFERS = 3

#: TCP connect timeout (seconds)
DEFAULT_DIAL_TIMEOUT = 30

#: TCP keepalive interval and idle connection lifetime (seconds)
DEFAULT_KEEPALIVE_TIMEOUT = 1800

#: TLS handshake timeout (seconds)
DEFAULT_TLS_TIMEOUT = 30

#: Follow redirects like the standard library transports do
FOLLOW_REDIRECTS = True

#: Maximum number of redirect hops before giving up
MAX_REDIRECTS = 10


# ============================================================================
# Configuration Keys
# ============================================================================

DIAL_TIMEOUT_KEY = "lfs.dialtimeout"
KEEPALIVE_KEY = "lfs.keepalive"
TLS_TIMEOUT_KEY = "lfs.tlstimeout"
CONCURRENT_TRANSFERS_KEY = "lfs.concurrenttransfers"
SSL_VERIFY_KEY = "http.sslverify"
SSL_CAINFO_KEY = "http.sslcainfo"
SSL_CAPATH_KEY = "http.sslcapath"
PROXY_KEY = "http.proxy"

SSL_NO_VERIFY_VAR = "GIT_SSL_NO_VERIFY"
SSL_CAINFO_VAR = "GIT_SSL_CAINFO"
SSL_CAPATH_VAR = "GIT_SSL_CAPATH"
TERMINAL_PROMPT_VAR = "GIT_TERMINAL_PROMPT"


def host_config_key(host: str, name: str) -> str:
    """Return the git config key scoping ``name`` to ``https://<host>/``.

    Examples:
        >>> host_config_key("git.example.com", "sslverify")
        'http.https://git.example.com/.sslverify'
    """
    return f"http.https://{host}/.{name}"


# ============================================================================
# Media Types
# ============================================================================

#: Vendor media type for LFS API payloads, optionally followed by parameters
LFS_MEDIA_TYPE_RE = re.compile(r"\Aapplication/vnd\.git-lfs\+json(;|\Z)")

#: Generic JSON media type, optionally followed by parameters
JSON_MEDIA_TYPE_RE = re.compile(r"\Aapplication/json(;|\Z)")

LFS_MEDIA_TYPE = "application/vnd.git-lfs+json"


__all__ = [
    "DEFAULT_CONCURRENT_TRANSFERS",
    "DEFAULT_DIAL_TIMEOUT",
    "DEFAULT_KEEPALIVE_TIMEOUT",
    "DEFAULT_TLS_TIMEOUT",
    "FOLLOW_REDIRECTS",
    "MAX_REDIRECTS",
    "DIAL_TIMEOUT_KEY",
    "KEEPALIVE_KEY",
    "TLS_TIMEOUT_KEY",
    "CONCURRENT_TRANSFERS_KEY",
    "SSL_VERIFY_KEY",
    "SSL_CAINFO_KEY",
    "SSL_CAPATH_KEY",
    "PROXY_KEY",
    "SSL_NO_VERIFY_VAR",
    "SSL_CAINFO_VAR",
    "SSL_CAPATH_VAR",
    "TERMINAL_PROMPT_VAR",
    "host_config_key",
    "LFS_MEDIA_TYPE_RE",
    "JSON_MEDIA_TYPE_RE",
    "LFS_MEDIA_TYPE",
]
