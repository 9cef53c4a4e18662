"""Middleware chaining primitives and the admin pipeline composition."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Protocol, Sequence

from .http import Status
from .requests import Request
from .responses import PlainTextResponse, RedirectResponse, Response

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import AdminConfig

Handler = Callable[[Request], Awaitable[Response]]

operation_logger = logging.getLogger("praetor.operations")


class Middleware(Protocol):
    async def __call__(self, request: Request, handler: Handler) -> Response:  # pragma: no cover - protocol
        ...


class Guard(Protocol):
    """Authentication capability supplied by the admin framework."""

    def check(self, request: Request) -> bool: ...

    def attempt(self, credentials: dict[str, str]) -> bool: ...

    def logout(self) -> None: ...


class Gate(Protocol):
    """Permission capability supplied by the admin framework."""

    def allows(self, request: Request) -> bool: ...


MiddlewareCallable = Callable[[Request, Handler], Awaitable[Response]]

_PipelineKey = tuple[MiddlewareCallable, ...]
_PIPELINE_CACHE: dict[_PipelineKey, "_MiddlewarePipeline"] = {}

PERMISSION_STAGE = "admin.permission"

ROUTE_MIDDLEWARE_KEYS: tuple[str, ...] = (
    "admin.auth",
    "admin.pjax",
    "admin.log",
    "admin.permission",
    "admin.bootstrap",
    "admin.session",
    "admin.app",
)

ADMIN_GROUP: tuple[str, ...] = (
    "admin.auth",
    "admin.pjax",
    "admin.log",
    "admin.bootstrap",
    "admin.permission",
    "admin.session",
)


def compose_group(
    stages: Iterable[str],
    *,
    permission_enabled: bool,
    permission_stage: str = PERMISSION_STAGE,
) -> tuple[str, ...]:
    """Return ``stages`` in order, without the permission stage when it is disabled."""

    if permission_enabled:
        return tuple(stages)
    return tuple(stage for stage in stages if stage != permission_stage)


def middleware_groups(config: "AdminConfig") -> dict[str, tuple[str, ...]]:
    """Compose every admin middleware group for ``config``."""

    return {"admin": compose_group(ADMIN_GROUP, permission_enabled=config.permission.enable)}


def apply_middleware(middlewares: Iterable[MiddlewareCallable], endpoint: Handler) -> Handler:
    """Compose middleware into a single handler."""

    normalized = _normalize_middlewares(middlewares)
    if not normalized:
        return endpoint
    pipeline = _PIPELINE_CACHE.get(normalized)
    if pipeline is None:
        pipeline = _MiddlewarePipeline(normalized)
        _PIPELINE_CACHE[normalized] = pipeline
    return pipeline.bind(endpoint)


def _normalize_middlewares(middlewares: Iterable[MiddlewareCallable]) -> _PipelineKey:
    if isinstance(middlewares, tuple):
        return middlewares
    return tuple(middlewares)


class _MiddlewarePipeline:
    __slots__ = ("_middlewares",)

    def __init__(self, middlewares: _PipelineKey) -> None:
        self._middlewares = middlewares

    def bind(self, endpoint: Handler) -> Handler:
        return _NextHandler(self, 0, endpoint)

    async def _invoke(self, index: int, request: Request, endpoint: Handler) -> Response:
        if index >= len(self._middlewares):
            return await endpoint(request)
        middleware = self._middlewares[index]
        return await middleware(request, _NextHandler(self, index + 1, endpoint))


class _NextHandler:
    __slots__ = ("_endpoint", "_index", "_pipeline")

    def __init__(self, pipeline: _MiddlewarePipeline, index: int, endpoint: Handler) -> None:
        self._pipeline = pipeline
        self._index = index
        self._endpoint = endpoint

    async def __call__(self, request: Request) -> Response:
        return await self._pipeline._invoke(self._index, request, self._endpoint)


# ---------------------------------------------------------------------- stages
async def passthrough(request: Request, handler: Handler) -> Response:
    return await handler(request)


async def log_operation(request: Request, handler: Handler) -> Response:
    """Record each admin operation on the ``praetor.operations`` logger."""

    response = await handler(request)
    operation_logger.info("%s %s -> %s", request.method, request.path, response.status)
    return response


def authenticate(
    guard: Guard,
    *,
    prefix: str = "admin",
    excepts: Sequence[str] = (),
    redirect_to: str = "auth/login",
) -> MiddlewareCallable:
    """Redirect guests to the login page unless the path is excepted."""

    login_url = admin_url(prefix, redirect_to)

    async def middleware(request: Request, handler: Handler) -> Response:
        if _is_excepted(request, prefix, excepts) or guard.check(request):
            return await handler(request)
        return RedirectResponse(login_url)

    return middleware


def permission(gate: Gate, *, prefix: str = "admin", excepts: Sequence[str] = ()) -> MiddlewareCallable:
    """Reject requests the gate does not allow with ``403``."""

    async def middleware(request: Request, handler: Handler) -> Response:
        if _is_excepted(request, prefix, excepts) or gate.allows(request):
            return await handler(request)
        return PlainTextResponse("Permission denied", status=int(Status.FORBIDDEN))

    return middleware


def admin_url(prefix: str, path: str = "") -> str:
    parts = [part.strip("/") for part in (prefix, path) if part.strip("/")]
    return "/" + "/".join(parts)


def _is_excepted(request: Request, prefix: str, excepts: Sequence[str]) -> bool:
    path = request.path.strip("/")
    return any(path == admin_url(prefix, candidate).strip("/") for candidate in excepts)


__all__ = [
    "ADMIN_GROUP",
    "Gate",
    "Guard",
    "Handler",
    "Middleware",
    "MiddlewareCallable",
    "PERMISSION_STAGE",
    "ROUTE_MIDDLEWARE_KEYS",
    "admin_url",
    "apply_middleware",
    "authenticate",
    "compose_group",
    "log_operation",
    "middleware_groups",
    "passthrough",
    "permission",
]
