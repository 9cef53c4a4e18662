"""Request primitives."""

from __future__ import annotations

from typing import Any, Mapping

import msgspec

from .serialization import json_decode


class Request:
    """View of an incoming request plus the server variables the pipeline may adjust."""

    __slots__ = (
        "_body",
        "_json_cache",
        "headers",
        "method",
        "path",
        "path_params",
        "scheme",
        "server",
    )

    def __init__(
        self,
        *,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        path_params: Mapping[str, str] | None = None,
        body: bytes | None = None,
        scheme: str = "http",
        server: Mapping[str, Any] | None = None,
    ) -> None:
        self.method = method.upper()
        self.path = path
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self.path_params = dict(path_params or {})
        self.scheme = scheme.lower()
        self.server: dict[str, Any] = dict(server or {})
        self._body = body or b""
        self._json_cache: Any = msgspec.UNSET

    @property
    def is_secure(self) -> bool:
        return bool(self.server.get("HTTPS")) or self.scheme == "https"

    @property
    def resolved_scheme(self) -> str:
        return "https" if self.is_secure else self.scheme

    def mark_secure(self) -> None:
        """Flag the request as arriving over a secure transport."""

        self.server["HTTPS"] = True

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    async def json(self) -> Any:
        """Decode the JSON body using :mod:`msgspec`."""

        if self._json_cache is msgspec.UNSET:
            self._json_cache = json_decode(self._body) if self._body else None
        return self._json_cache

    def text(self) -> str:
        return self._body.decode()

    def body(self) -> bytes:
        return self._body
