"""Admin configuration objects."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import msgspec
from msgspec import Struct, field

from .exceptions import ConfigurationError


class RouteConfig(Struct, frozen=True):
    """Routing options for the admin area."""

    prefix: str = "admin"
    namespace: str = "app.Admin.Controllers"
    middleware: tuple[str, ...] = ("admin",)


class AuthConfig(Struct, frozen=True):
    """Paths the authentication stage lets through and where it sends guests."""

    excepts: tuple[str, ...] = ("auth/login", "auth/logout")
    redirect_to: str = "auth/login"


class PermissionConfig(Struct, frozen=True):
    """Permission stage toggle and the paths it never checks."""

    enable: bool = True
    excepts: tuple[str, ...] = ("auth/login", "auth/logout")


class AdminConfig(Struct, frozen=True):
    """Typed configuration for the admin bootstrapper and installer."""

    directory: str = "app/Admin"
    route: RouteConfig = RouteConfig()
    https: bool = False
    secure: bool = False
    auth: AuthConfig = AuthConfig()
    permission: PermissionConfig = PermissionConfig()
    multi_app: dict[str, bool] = field(default_factory=dict)
    apps: dict[str, dict[str, Any]] = field(default_factory=dict)
    views: str | None = None

    @property
    def secure_transport(self) -> bool:
        """Return ``True`` when either ``https`` or ``secure`` is switched on."""

        return self.https or self.secure


ConfigSource = Mapping[str, Any] | str | os.PathLike[str] | None


def load_config(source: ConfigSource = None) -> AdminConfig:
    """Build an :class:`AdminConfig` from a mapping, a TOML file path, or defaults.

    TOML files may nest their keys under an ``[admin]`` table or keep them at the
    top level.
    """

    if source is None:
        return AdminConfig()
    if isinstance(source, Mapping):
        raw: Any = source
    else:
        path = Path(source)
        try:
            data = path.read_bytes()
        except FileNotFoundError as exc:
            raise ConfigurationError(f"Configuration file {path} does not exist") from exc
        try:
            raw = msgspec.toml.decode(data)
        except msgspec.DecodeError as exc:
            raise ConfigurationError(f"Configuration file {path} is not valid TOML: {exc}") from exc
    if isinstance(raw.get("admin"), Mapping):
        raw = raw["admin"]
    try:
        return msgspec.convert(raw, type=AdminConfig)
    except msgspec.ValidationError as exc:
        raise ConfigurationError(f"Invalid admin configuration: {exc}") from exc


def auth_overrides(config: AdminConfig) -> dict[str, Any]:
    """Return dotted ``auth.*`` settings contributed by enabled sub-applications."""

    overrides: dict[str, Any] = {}
    for app, enabled in config.multi_app.items():
        if not enabled:
            continue
        section = config.apps.get(app, {}).get("auth")
        if not section:
            continue
        overrides.update(_dot(section, "auth."))
    return overrides


def _dot(values: Mapping[str, Any], prefix: str) -> dict[str, Any]:
    flattened: dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, Mapping) and value:
            flattened.update(_dot(value, f"{prefix}{key}."))
        else:
            flattened[f"{prefix}{key}"] = value
    return flattened


__all__ = [
    "AdminConfig",
    "AuthConfig",
    "ConfigSource",
    "PermissionConfig",
    "RouteConfig",
    "auth_overrides",
    "load_config",
]
