"""View template lookup with namespaced directories."""

from __future__ import annotations

import os
from pathlib import Path

NAMESPACE_DELIMITER = "::"
EXTENSIONS: tuple[str, ...] = (".html", ".txt")


class ViewFinder:
    """Locate template files by name, keeping namespaced views apart from host views.

    ``admin::auth.login`` resolves to ``auth/login.html`` inside any directory
    registered for the ``admin`` namespace, in registration order.
    """

    def __init__(self) -> None:
        self._locations: list[Path] = []
        self._namespaces: dict[str, list[Path]] = {}

    def add_location(self, directory: str | os.PathLike[str]) -> None:
        self._locations.append(Path(directory))

    def add_namespace(self, namespace: str, directory: str | os.PathLike[str]) -> None:
        self._namespaces.setdefault(namespace, []).append(Path(directory))

    def has_namespace(self, namespace: str) -> bool:
        return namespace in self._namespaces

    def find(self, name: str) -> Path:
        if NAMESPACE_DELIMITER in name:
            namespace, _, view = name.partition(NAMESPACE_DELIMITER)
            if namespace not in self._namespaces:
                raise LookupError(f"No view namespace {namespace!r} registered")
            directories = self._namespaces[namespace]
        else:
            view = name
            directories = self._locations
        relative = Path(*view.split("."))
        for directory in directories:
            for extension in EXTENSIONS:
                candidate = directory / relative.with_name(relative.name + extension)
                if candidate.is_file():
                    return candidate
        raise LookupError(f"View {name!r} not found")

    def get(self, name: str) -> str:
        return self.find(name).read_text(encoding="utf-8")


__all__ = ["ViewFinder"]
