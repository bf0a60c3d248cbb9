"""``.netrc`` credential lookup."""

from __future__ import annotations

import logging
import netrc
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from .env import Environment
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = ["NetrcMachine", "NetrcFinder", "NetrcCredentials", "parse_netrc"]


@dataclass(frozen=True)
class NetrcMachine:
    login: str
    account: str
    password: str


class NetrcFinder(Protocol):
    def find_machine(self, host: str) -> Optional[NetrcMachine]: ...


class NetrcCredentials:
    """:class:`NetrcFinder` over a parsed netrc file (or nothing at all)."""

    def __init__(self, parsed: Optional[netrc.netrc] = None) -> None:
        self._parsed = parsed

    def find_machine(self, host: str) -> Optional[NetrcMachine]:
        """Return credentials for ``host``, falling back to the ``default`` entry."""
        if self._parsed is None:
            return None
        entry = self._parsed.authenticators(host)
        if entry is None:
            return None
        login, account, password = entry
        return NetrcMachine(login=login or "", account=account or "", password=password or "")


def _netrc_filename() -> str:
    return "_netrc" if os.name == "nt" else ".netrc"


def parse_netrc(os_env: Environment) -> NetrcCredentials:
    """Load ``$HOME/.netrc`` (``_netrc`` on Windows).

    A missing ``HOME`` or a missing file yields empty credentials.

    Raises:
        ConfigurationError: If the file exists but cannot be parsed or read.
    """
    home, _ = os_env.get("HOME")
    if not home:
        return NetrcCredentials()

    path = Path(home) / _netrc_filename()
    if not path.is_file():
        return NetrcCredentials()

    try:
        parsed = netrc.netrc(str(path))
    except (netrc.NetrcParseError, OSError) as exc:
        raise ConfigurationError(f"Unable to parse {path}: {exc}") from exc

    logger.debug("Loaded netrc credentials", extra={"path": str(path), "hosts": len(parsed.hosts)})
    return NetrcCredentials(parsed)
