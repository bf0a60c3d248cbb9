"""Credential helper backed by ``git credential``.

Credentials travel as flat ``key=value`` mappings (``protocol``, ``host``,
``path``, ``username``, ``password``), the same format git's credential
protocol uses on stdin/stdout.
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Dict, Mapping, Protocol

from .errors import LFSAPIError

logger = logging.getLogger(__name__)

__all__ = ["Creds", "CredentialHelper", "CommandCredentialHelper", "CredentialHelperError"]

Creds = Dict[str, str]


class CredentialHelperError(LFSAPIError):
    """Raised when ``git credential`` fails."""


class CredentialHelper(Protocol):
    def fill(self, creds: Mapping[str, str]) -> Creds: ...

    def reject(self, creds: Mapping[str, str]) -> None: ...

    def approve(self, creds: Mapping[str, str]) -> None: ...


def _encode(creds: Mapping[str, str]) -> bytes:
    lines = [f"{key}={value}" for key, value in creds.items() if value]
    return ("\n".join(lines) + "\n\n").encode("utf-8")


def _decode(output: bytes) -> Creds:
    creds: Creds = {}
    for line in output.decode("utf-8", errors="replace").splitlines():
        key, sep, value = line.partition("=")
        if sep:
            creds[key] = value
    return creds


class CommandCredentialHelper:
    """Run ``git credential fill|approve|reject`` for each request.

    Attributes:
        skip_prompt: When set, git is told not to prompt on the terminal.
    """

    def __init__(self, skip_prompt: bool = False, *, git: str = "git") -> None:
        self.skip_prompt = skip_prompt
        self.git = git

    def fill(self, creds: Mapping[str, str]) -> Creds:
        return self._exec("fill", creds)

    def approve(self, creds: Mapping[str, str]) -> None:
        self._exec("approve", creds)

    def reject(self, creds: Mapping[str, str]) -> None:
        self._exec("reject", creds)

    def _exec(self, action: str, creds: Mapping[str, str]) -> Creds:
        env = dict(os.environ)
        if self.skip_prompt:
            env["GIT_TERMINAL_PROMPT"] = "0"

        logger.debug(
            "Running git credential",
            extra={"action": action, "host": creds.get("host", ""), "skip_prompt": self.skip_prompt},
        )
        try:
            completed = subprocess.run(
                [self.git, "credential", action],
                input=_encode(creds),
                capture_output=True,
                env=env,
                check=False,
            )
        except OSError as exc:
            raise CredentialHelperError(f"Unable to run git credential {action}: {exc}") from exc

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise CredentialHelperError(f"git credential {action} failed: {stderr}")
        if action != "fill":
            return {}
        return _decode(completed.stdout)
