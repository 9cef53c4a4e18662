"""Praetor: admin panel bootstrapper and scaffold installer."""

from .config import AdminConfig, AuthConfig, PermissionConfig, RouteConfig, auth_overrides, load_config
from .exceptions import ConfigurationError, HTTPError, PraetorError, RegistrationError
from .host import Host, UrlGenerator
from .installer import InstallReport, Installer, render_stub
from .metadata import __version__
from .middleware import ADMIN_GROUP, ROUTE_MIDDLEWARE_KEYS, apply_middleware, compose_group, middleware_groups
from .provider import AdminServiceProvider
from .requests import Request
from .responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse, Response
from .routing import Router
from .views import ViewFinder

__all__ = [
    "ADMIN_GROUP",
    "AdminConfig",
    "AdminServiceProvider",
    "AuthConfig",
    "ConfigurationError",
    "HTMLResponse",
    "HTTPError",
    "Host",
    "InstallReport",
    "Installer",
    "JSONResponse",
    "PermissionConfig",
    "PlainTextResponse",
    "PraetorError",
    "ROUTE_MIDDLEWARE_KEYS",
    "RedirectResponse",
    "RegistrationError",
    "Request",
    "Response",
    "RouteConfig",
    "Router",
    "UrlGenerator",
    "ViewFinder",
    "__version__",
    "apply_middleware",
    "auth_overrides",
    "compose_group",
    "load_config",
    "middleware_groups",
    "render_stub",
]
