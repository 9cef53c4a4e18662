"""Routing utilities."""

from __future__ import annotations

import re
import runpy
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterator, Mapping, MutableMapping, Sequence

import rure
from rure.regex import RegexObject

from .exceptions import RegistrationError
from .middleware import MiddlewareCallable

Endpoint = Callable[..., Awaitable[Any] | Any] | str


_PATH_PARAM_PATTERN = re.compile(r"{([a-zA-Z_][a-zA-Z0-9_]*)(?::([a-zA-Z_][a-zA-Z0-9_]*))?}")


@dataclass(slots=True)
class RouteSpec:
    path: str
    methods: tuple[str, ...]
    endpoint: Endpoint
    name: str | None = None
    middleware: tuple[str, ...] = ()
    namespace: str | None = None


@dataclass(slots=True)
class Route:
    spec: RouteSpec
    pattern: RegexObject
    param_names: tuple[str, ...]


@dataclass(slots=True)
class RouteMatch:
    route: Route
    params: Mapping[str, str]


@dataclass(slots=True)
class _GroupAttributes:
    prefix: str = ""
    middleware: tuple[str, ...] = ()
    namespace: str | None = None


@dataclass(slots=True)
class _GroupStack:
    frames: list[_GroupAttributes] = field(default_factory=list)

    def current(self) -> _GroupAttributes:
        return self.frames[-1] if self.frames else _GroupAttributes()


class Router:
    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._routes_by_method: dict[str, list[Route]] = {}
        self._named_routes: dict[str, str] = {}
        self._groups = _GroupStack()
        self._middleware: dict[str, MiddlewareCallable] = {}
        self._middleware_groups: dict[str, tuple[str, ...]] = {}

    # ------------------------------------------------------------------ middleware
    def alias_middleware(self, name: str, middleware: MiddlewareCallable) -> None:
        if name in self._middleware:
            raise RegistrationError(f"Middleware alias {name!r} is already registered")
        self._middleware[name] = middleware

    def middleware_group(self, name: str, aliases: Sequence[str]) -> None:
        if name in self._middleware_groups:
            raise RegistrationError(f"Middleware group {name!r} is already registered")
        self._middleware_groups[name] = tuple(aliases)

    @property
    def middleware_aliases(self) -> Mapping[str, MiddlewareCallable]:
        return MappingProxyType(self._middleware)

    @property
    def middleware_groups(self) -> Mapping[str, tuple[str, ...]]:
        return MappingProxyType(self._middleware_groups)

    def resolve_middleware(self, names: Sequence[str]) -> tuple[MiddlewareCallable, ...]:
        """Expand group names and aliases into middleware callables, keeping order."""

        resolved: list[MiddlewareCallable] = []
        for name in names:
            if name in self._middleware_groups:
                resolved.extend(self.resolve_middleware(self._middleware_groups[name]))
            elif name in self._middleware:
                resolved.append(self._middleware[name])
            else:
                raise LookupError(f"Unknown middleware {name!r}")
        return tuple(resolved)

    # ------------------------------------------------------------------ routes
    def add_route(
        self,
        path: str,
        *,
        methods: Sequence[str],
        endpoint: Endpoint,
        name: str | None = None,
        middleware: Sequence[str] = (),
    ) -> Route:
        group = self._groups.current()
        full_path = _join_paths(group.prefix, path)
        pattern, param_names = _compile_path(full_path)
        normalized_methods = tuple(dict.fromkeys(m.upper() for m in methods))
        spec = RouteSpec(
            path=full_path,
            methods=normalized_methods,
            endpoint=endpoint,
            name=name,
            middleware=group.middleware + tuple(middleware),
            namespace=group.namespace,
        )
        route = Route(spec=spec, pattern=pattern, param_names=param_names)
        self._routes.append(route)
        for method in normalized_methods:
            self._routes_by_method.setdefault(method, []).append(route)
        if name is not None:
            self._named_routes[name] = full_path
        return route

    def get(self, path: str, endpoint: Endpoint, *, name: str | None = None) -> Route:
        return self.add_route(path, methods=("GET", "HEAD"), endpoint=endpoint, name=name)

    def post(self, path: str, endpoint: Endpoint, *, name: str | None = None) -> Route:
        return self.add_route(path, methods=("POST",), endpoint=endpoint, name=name)

    def any(self, path: str, endpoint: Endpoint, *, name: str | None = None) -> Route:
        return self.add_route(path, methods=("*",), endpoint=endpoint, name=name)

    @contextmanager
    def group(
        self,
        *,
        prefix: str = "",
        middleware: Sequence[str] = (),
        namespace: str | None = None,
    ) -> Iterator["Router"]:
        """Apply ``prefix``, ``middleware`` and ``namespace`` to routes added inside the block."""

        outer = self._groups.current()
        self._groups.frames.append(
            _GroupAttributes(
                prefix=_join_paths(outer.prefix, prefix) if prefix else outer.prefix,
                middleware=outer.middleware + tuple(middleware),
                namespace=namespace if namespace is not None else outer.namespace,
            )
        )
        try:
            yield self
        finally:
            self._groups.frames.pop()

    def find(self, method: str, path: str) -> RouteMatch:
        method = method.upper()
        candidates = self._routes_by_method.get(method, []) + self._routes_by_method.get("*", [])
        for route in candidates:
            captures = route.pattern.match(path)
            if captures is None:
                continue
            params: MutableMapping[str, str] = {}
            for name in route.param_names:
                group = captures.group(name)
                if group is None:
                    continue
                params[name] = group
            return RouteMatch(route=route, params=params)
        raise LookupError(f"No route matches {method} {path}")

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    def load_routes_from(self, path: str | Path, context: Mapping[str, Any] | None = None) -> None:
        """Execute a Python routes file with this router bound as ``router``."""

        runpy.run_path(str(path), init_globals={**(context or {}), "router": self})

    def url_path_for(self, name: str, /, **params: Any) -> str:
        template = self._named_routes.get(name)
        if template is None:
            raise LookupError(f"Route {name!r} not found")
        path = template
        for key, value in params.items():
            path = path.replace(f"{{{key}}}", str(value))
        return path


def _join_paths(prefix: str, path: str) -> str:
    parts = [part.strip("/") for part in (prefix, path) if part.strip("/")]
    return "/" + "/".join(parts)


def _compile_path(path: str) -> tuple[RegexObject, tuple[str, ...]]:
    param_names: list[str] = []

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        converter = match.group(2)
        param_names.append(name)
        if converter is None:
            return f"(?P<{name}>[^/]+)"
        if converter == "path":
            return f"(?P<{name}>.*)"
        raise ValueError(f"Unsupported path converter: {converter}")

    pattern = "^" + _PATH_PARAM_PATTERN.sub(replace, path) + "$"
    return rure.compile(pattern), tuple(param_names)
