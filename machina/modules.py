"""
Host Module Graph.

Machines load their dependencies through a *module context*: a module of
the host application that knows how to resolve a dependency name into a
loaded value. The resolver chooses that context among the *candidates*
offered by a module graph.

Both collaborators are read-only from machina's point of view:
    - ModuleContext: ``id`` (a path), ``name`` and ``require(name)``
    - ModuleGraph: ``candidates()`` returns the contexts to choose from

Implementations:
    - ImportlibModuleContext / PackageModuleGraph: real Python modules
    - MemoryModuleContext / MemoryModuleGraph: in-memory, for testing

Usage:
    # The loaded submodules of the host's machines package
    graph = PackageModuleGraph("myapp.machines")

    # An explicit context
    context = ImportlibModuleContext.from_name("myapp.machines.weather")
    weather = context.require(".client")
"""

from __future__ import annotations

import importlib
import logging
import sys
from collections.abc import Iterable
from types import ModuleType
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class ModuleContext(Protocol):
    """Protocol for a module able to load dependencies."""

    @property
    def id(self) -> str:
        """Path identifying the module (used for likeness scoring)."""
        ...

    @property
    def name(self) -> str:
        """Display name of the module."""
        ...

    def require(self, name: str) -> Any:
        """
        Load a dependency from this module's point of view.

        Raises:
            Exception: Any failure to load ``name``
        """
        ...


class ModuleGraph(Protocol):
    """Protocol for the host graph offering candidate contexts."""

    def candidates(self) -> list[ModuleContext]:
        """Return candidate contexts, in load order."""
        ...


# =============================================================================
# Importlib Implementations
# =============================================================================


class ImportlibModuleContext:
    """
    Module context backed by a loaded Python module.

    Dependency names resolve like imports written inside that module:
    - ``".helpers"`` is relative to the module's package
    - ``"json"`` is an absolute import
    - ``"pkg.mod:attr"`` returns ``attr`` from the imported module
    """

    def __init__(self, module: ModuleType):
        self._module = module

    @classmethod
    def from_name(cls, module_name: str) -> ImportlibModuleContext:
        """Import ``module_name`` and wrap it."""
        return cls(importlib.import_module(module_name))

    @property
    def module(self) -> ModuleType:
        return self._module

    @property
    def name(self) -> str:
        return self._module.__name__

    @property
    def id(self) -> str:
        path = getattr(self._module, "__file__", None)
        if path:
            return path
        # Namespace and builtin modules have no file; use the dotted name
        return self._module.__name__.replace(".", "/") + "/__init__"

    @property
    def package(self) -> str | None:
        """Package relative imports resolve against."""
        if hasattr(self._module, "__path__"):
            return self._module.__name__
        return self._module.__package__ or None

    def require(self, name: str) -> Any:
        module_name, _, attribute = name.partition(":")

        if module_name.startswith(".") and not self.package:
            raise ImportError(
                f"Cannot import '{module_name}' relative to top-level module '{self.name}'"
            )

        loaded = importlib.import_module(module_name, package=self.package)
        logger.debug(f"[modules] Loaded '{name}' from context '{self.name}'")

        if attribute:
            return getattr(loaded, attribute)
        return loaded

    def __repr__(self) -> str:
        return f"<ImportlibModuleContext name={self.name!r}>"


class PackageModuleGraph:
    """
    Module graph made of the loaded direct submodules of a package.

    Only modules already present in ``sys.modules`` are offered; nothing is
    imported on behalf of the caller.
    """

    def __init__(self, package: str | ModuleType):
        self._package = package if isinstance(package, str) else package.__name__

    @property
    def package(self) -> str:
        return self._package

    def candidates(self) -> list[ModuleContext]:
        prefix = f"{self._package}."
        contexts: list[ModuleContext] = []

        for module_name, module in list(sys.modules.items()):
            if module is None or not module_name.startswith(prefix):
                continue
            if "." in module_name[len(prefix):]:
                continue  # Not a direct child
            contexts.append(ImportlibModuleContext(module))

        logger.debug(f"[modules] {len(contexts)} candidate(s) under '{self._package}'")
        return contexts

    def __repr__(self) -> str:
        return f"<PackageModuleGraph package={self._package!r}>"


# =============================================================================
# In-Memory Implementations
# =============================================================================


class MemoryModuleContext:
    """
    In-memory module context for testing.

    Usage:
        context = MemoryModuleContext(
            "app/machines/weather/index.py",
            exports={"http": http_client},
        )
        context.require("http")  # -> http_client
    """

    def __init__(
        self,
        id: str,
        exports: dict[str, Any] | None = None,
        *,
        name: str | None = None,
    ):
        self._id = id
        self._exports = dict(exports or {})
        self._name = name or id

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    def require(self, name: str) -> Any:
        if name not in self._exports:
            raise ModuleNotFoundError(
                f"No module named '{name}' in context '{self._name}'",
                name=name,
            )
        return self._exports[name]

    def __repr__(self) -> str:
        return f"<MemoryModuleContext id={self._id!r} exports={list(self._exports)}>"


class MemoryModuleGraph:
    """In-memory module graph for testing."""

    def __init__(self, contexts: Iterable[ModuleContext] = ()):
        self._contexts = list(contexts)

    def add(self, context: ModuleContext) -> None:
        """Append a candidate context."""
        self._contexts.append(context)

    def candidates(self) -> list[ModuleContext]:
        return list(self._contexts)

    def __len__(self) -> int:
        return len(self._contexts)
