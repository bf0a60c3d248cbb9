"""Typed key/value lookups over the process environment and git configuration.

Two independent sources feed the transport: the process environment
(``GIT_SSL_NO_VERIFY``, ``HTTPS_PROXY``, ...) and the git configuration store
(``http.sslverify``, ``lfs.dialtimeout``, ...).  Both are read through the
:class:`Environment` protocol so tests can substitute plain dictionaries.

Integer and boolean lookups never raise: unparseable integers fall back to the
caller's default, and unrecognised non-empty booleans read as ``False``.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Protocol, Tuple

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    "Environment",
    "MappingEnvironment",
    "OSEnvironment",
    "parse_bool",
    "parse_int",
    "load_git_environment",
]

_TRUE_VALUES = frozenset({"true", "1", "on", "yes", "t"})
_FALSE_VALUES = frozenset({"false", "0", "off", "no", "f"})

# Optional sign followed by ASCII digits only.
_INT_RE = re.compile(r"[+-]?[0-9]+")


class Environment(Protocol):
    """Read-only typed lookup over one configuration source."""

    def get(self, key: str) -> Tuple[str, bool]: ...

    def get_int(self, key: str, default: int) -> int: ...

    def get_bool(self, key: str, default: bool) -> bool: ...

    def all(self) -> Mapping[str, str]: ...


def parse_int(value: Optional[str], default: int) -> int:
    """Parse ``value`` as a base-10 integer, returning ``default`` on any failure.

    Examples:
        >>> parse_int("42", 0)
        42
        >>> parse_int("abc", 30)
        30
        >>> parse_int(" 42 ", 30)
        30
    """
    if not value or not _INT_RE.fullmatch(value):
        return default
    return int(value)


def parse_bool(value: Optional[str], default: bool) -> bool:
    """Parse a git-style boolean.

    Empty or missing values yield ``default``.  Anything non-empty that is not
    a recognised literal yields ``False`` rather than the default.

    Examples:
        >>> parse_bool("Yes", False)
        True
        >>> parse_bool("bogus", True)
        False
        >>> parse_bool("", True)
        True
    """
    if not value:
        return default
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return False


class MappingEnvironment:
    """:class:`Environment` over a copy of a plain mapping.

    Used as the empty stand-in when no environment is supplied to the client,
    and as the environment double throughout the test suite.
    """

    def __init__(self, values: Optional[Mapping[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(values or {})

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"

    def get(self, key: str) -> Tuple[str, bool]:
        if key in self._values:
            return self._values[key], True
        return "", False

    def get_int(self, key: str, default: int) -> int:
        value, _ = self.get(key)
        return parse_int(value, default)

    def get_bool(self, key: str, default: bool) -> bool:
        value, _ = self.get(key)
        return parse_bool(value, default)

    def all(self) -> Mapping[str, str]:
        return MappingProxyType(self._values)


class OSEnvironment(MappingEnvironment):
    """Snapshot of the process environment taken at construction time."""

    def __init__(self, source: Optional[Mapping[str, str]] = None) -> None:
        super().__init__(os.environ if source is None else source)


def load_git_environment(cwd: Optional[str] = None, *, git: str = "git") -> MappingEnvironment:
    """Read ``git config --list --null`` into a :class:`MappingEnvironment`.

    Later entries override earlier ones, matching git's own precedence
    (system, global, local).

    Raises:
        ConfigurationError: If git cannot be executed or exits non-zero.
    """
    try:
        completed = subprocess.run(
            [git, "config", "--list", "--null"],
            cwd=cwd,
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ConfigurationError(f"Unable to read git configuration: {exc}") from exc

    values: Dict[str, str] = {}
    for entry in completed.stdout.decode("utf-8", errors="replace").split("\0"):
        if not entry:
            continue
        key, _, value = entry.partition("\n")
        values[key] = value
    logger.debug("Loaded git configuration", extra={"keys": len(values), "cwd": cwd})
    return MappingEnvironment(values)
