"""Root-of-trust verifiers.

A root verifier answers one question: does the identity registry know this
identity-state root? ``verify_root`` returns None when it does, raises
:class:`RootRejectedError` when it does not and :class:`InfrastructureError`
when the registry could not be asked.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, Protocol, runtime_checkable

import httpx

from .errors import ConfigurationError, InfrastructureError, RootRejectedError
from .settings import settings


@runtime_checkable
class RootVerifier(Protocol):
    def verify_root(self, root: str) -> None: ...


class StaticRootVerifier:
    """Accepts a fixed set of roots; handy offline and in tests."""

    def __init__(self, roots: Iterable[str]):
        self.roots = frozenset(roots)

    def verify_root(self, root: str) -> None:
        if root not in self.roots:
            raise RootRejectedError("identity state root is not known")


class HttpRootVerifier:
    """Looks roots up on the identity registry over HTTP.

    ``GET {base_url}{path}`` with the root substituted into ``path``:
    200 accepts, 404 rejects, anything else is an infrastructure failure.
    """

    def __init__(
        self,
        base_url: str | None = None,
        path: str | None = None,
        timeout: float | None = None,
        _get_func: Callable[..., httpx.Response] | None = None,
    ):
        base_url = base_url or settings.registry_url
        if not base_url:
            raise ConfigurationError("registry base URL is required (ZKV_REGISTRY_URL)")
        self.base_url = base_url.rstrip("/")
        self.path = path or settings.registry_root_path
        self.timeout = timeout if timeout is not None else settings.registry_timeout_seconds
        self._get = _get_func or httpx.get

    def verify_root(self, root: str) -> None:
        url = self.base_url + self.path.format(root=root)
        try:
            r = self._get(url, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise InfrastructureError(f"identity registry unreachable: {e}") from e
        logging.debug("Registry root lookup %s -> %s", url, r.status_code)
        if r.status_code == 200:
            return None
        if r.status_code == 404:
            raise RootRejectedError("identity state root is not known")
        raise InfrastructureError(f"identity registry returned status {r.status_code}")


__all__ = ["RootVerifier", "StaticRootVerifier", "HttpRootVerifier"]
