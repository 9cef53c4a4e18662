"""Host capability surface the admin bootstrapper wires into."""

from __future__ import annotations

import importlib
import inspect
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Callable, Mapping
from urllib.parse import urlsplit, urlunsplit

from .exceptions import HTTPError, RegistrationError
from .http import Status
from .middleware import apply_middleware
from .requests import Request
from .responses import HTMLResponse, JSONResponse, Response, exception_to_response
from .routing import RouteMatch, Router
from .views import ViewFinder

logger = logging.getLogger(__name__)

Factory = Callable[["Host"], Any]
Command = Callable[[], int]
RequestHook = Callable[[Request], None]


class UrlGenerator:
    """Build absolute URLs, optionally with a forced scheme."""

    def __init__(self, root: str = "http://localhost") -> None:
        self.root = root.rstrip("/")
        self.forced_scheme: str | None = None

    def force_scheme(self, scheme: str) -> None:
        self.forced_scheme = scheme

    def to(self, path: str = "") -> str:
        parts = urlsplit(self.root)
        scheme = self.forced_scheme or parts.scheme
        base = urlunsplit((scheme, parts.netloc, parts.path, "", ""))
        return f"{base}/{path.lstrip('/')}" if path else base


class Host:
    """In-process kernel: router, views, URLs, services, console commands and publishing."""

    def __init__(
        self,
        base_path: str | os.PathLike[str] = ".",
        *,
        running_in_console: bool = False,
        url_root: str = "http://localhost",
    ) -> None:
        self.base_path = Path(base_path)
        self.running_in_console = running_in_console
        self.router = Router()
        self.views = ViewFinder()
        self.urls = UrlGenerator(url_root)
        self.settings: dict[str, Any] = {}
        self.request: Request | None = None
        self._factories: dict[str, Factory] = {}
        self._instances: dict[str, Any] = {}
        self._commands: dict[str, Command] = {}
        self._publishes: dict[str, dict[Path, Path]] = {}
        self._request_hooks: list[RequestHook] = []

    # ------------------------------------------------------------------ paths
    def path(self, *parts: str | os.PathLike[str]) -> Path:
        return self.base_path.joinpath(*parts)

    def relative(self, path: str | os.PathLike[str]) -> str:
        target = Path(path)
        try:
            return str(target.relative_to(self.base_path))
        except ValueError:
            return str(target)

    # ------------------------------------------------------------------ services
    def singleton(self, key: str, factory: Factory) -> None:
        self._factories[key] = factory
        self._instances.pop(key, None)

    def bound(self, key: str) -> bool:
        return key in self._factories

    def make(self, key: str) -> Any:
        if key in self._instances:
            return self._instances[key]
        factory = self._factories.get(key)
        if factory is None:
            raise LookupError(f"No service bound for {key!r}")
        instance = factory(self)
        self._instances[key] = instance
        return instance

    # ------------------------------------------------------------------ console
    def command(self, name: str, handler: Command) -> None:
        if name in self._commands:
            raise RegistrationError(f"Command {name!r} is already registered")
        self._commands[name] = handler

    @property
    def commands(self) -> Mapping[str, Command]:
        return dict(self._commands)

    def call(self, name: str) -> int:
        handler = self._commands.get(name)
        if handler is None:
            raise LookupError(f"Command {name!r} is not defined")
        return handler()

    # ------------------------------------------------------------------ publishing
    def publishes(self, paths: Mapping[str | os.PathLike[str], str | os.PathLike[str]], tag: str) -> None:
        entries = self._publishes.setdefault(tag, {})
        for source, target in paths.items():
            entries[Path(source)] = self.path(target)

    @property
    def publish_tags(self) -> tuple[str, ...]:
        return tuple(self._publishes)

    def publish(self, tag: str, *, force: bool = False) -> list[Path]:
        """Copy the resources registered under ``tag`` and return the files written."""

        if tag not in self._publishes:
            raise LookupError(f"Nothing is published under tag {tag!r}")
        written: list[Path] = []
        for source, target in self._publishes[tag].items():
            if source.is_dir():
                pairs = [(item, target / item.relative_to(source)) for item in sorted(source.rglob("*")) if item.is_file()]
            else:
                pairs = [(source, target / source.name)]
            for origin, destination in pairs:
                if destination.exists() and not force:
                    logger.info("Skipping existing %s", destination)
                    continue
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(origin, destination)
                written.append(destination)
        return written

    # ------------------------------------------------------------------ request handling
    def on_request(self, hook: RequestHook) -> RequestHook:
        self._request_hooks.append(hook)
        return hook

    async def dispatch(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
        scheme: str = "http",
    ) -> Response:
        try:
            match = self.router.find(method, path)
        except LookupError:
            return exception_to_response(HTTPError(Status.NOT_FOUND, f"No route for {method.upper()} {path}"))
        request = Request(
            method=method,
            path=path,
            headers=headers,
            path_params=match.params,
            body=body,
            scheme=scheme,
        )
        self.request = request
        for hook in self._request_hooks:
            hook(request)

        async def endpoint_handler(req: Request) -> Response:
            return await self._call_endpoint(match, req)

        handler = apply_middleware(self.router.resolve_middleware(match.route.spec.middleware), endpoint_handler)
        try:
            return await handler(request)
        except HTTPError as exc:
            return exception_to_response(exc)

    async def _call_endpoint(self, match: RouteMatch, request: Request) -> Response:
        endpoint = match.route.spec.endpoint
        if isinstance(endpoint, str):
            endpoint = self._resolve_action(endpoint, match.route.spec.namespace)
        result = endpoint(request, **match.params)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, Response):
            return result
        if isinstance(result, str):
            return HTMLResponse(result)
        return JSONResponse(result)

    def _resolve_action(self, action: str, namespace: str | None) -> Callable[..., Any]:
        controller, _, method = action.partition("@")
        if not method:
            raise ValueError(f"Route action {action!r} must look like 'Controller@method'")
        module_name = controller
        if namespace:
            module_name = namespace.replace("\\", ".") + "." + controller
        module = importlib.import_module(module_name)
        instance = getattr(module, controller)(self)
        return getattr(instance, method)


__all__ = ["Host", "UrlGenerator"]
