"""LFS API endpoint lookup from git configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .env import Environment

__all__ = ["Endpoint", "EndpointFinder", "GitEndpointFinder"]


@dataclass(frozen=True)
class Endpoint:
    url: str = ""


class EndpointFinder(Protocol):
    def endpoint(self, operation: str, remote: str) -> Endpoint: ...


def _lfs_url_for_remote(url: str) -> str:
    if not url.startswith(("http://", "https://")):
        return ""
    url = url.rstrip("/")
    if not url.endswith(".git"):
        url += ".git"
    return url + "/info/lfs"


class GitEndpointFinder:
    """Resolve the LFS endpoint for a remote.

    Lookup order: ``lfs.url``, ``remote.<name>.lfspushurl`` (uploads only),
    ``remote.<name>.lfsurl``, then ``remote.<name>.url`` with ``/info/lfs``
    appended.  Only http(s) remotes can be derived; others yield an empty URL.
    """

    def __init__(self, git_env: Environment) -> None:
        self.git_env = git_env

    def _config(self, key: str) -> str:
        value, _ = self.git_env.get(key)
        return value

    def endpoint(self, operation: str, remote: str = "origin") -> Endpoint:
        url = self._config("lfs.url")
        if url:
            return Endpoint(url=url)
        if operation == "upload":
            url = self._config(f"remote.{remote}.lfspushurl")
            if url:
                return Endpoint(url=url)
        url = self._config(f"remote.{remote}.lfsurl")
        if url:
            return Endpoint(url=url)
        return Endpoint(url=_lfs_url_for_remote(self._config(f"remote.{remote}.url")))
