"""
Definition Lookups.

Implementations of the DefinitionLookup protocol used by ``Machine.require``
to turn a machine name into a raw definition.

Design Principle:
    Lookups only *find* definitions. They return whatever the host stores
    (a MachineDefinition, a mapping, a module exposing definition
    attributes); ``MachineDefinition.coerce`` does the validation.

Implementations:
    - ImportlibDefinitionLookup: machines are Python modules
    - MemoryDefinitionLookup: machines registered in memory (testing)

Usage:
    # Machines are modules of myapp.machines
    lookup = ImportlibDefinitionLookup(package="myapp.machines")
    machine = Machine.require(".weather", lookup=lookup)

    # Module attribute
    machine = Machine.require("myapp.machines.weather:definition")
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class DefinitionLookup(Protocol):
    """Protocol for finding raw machine definitions by name."""

    def lookup(self, name: str) -> Any:
        """
        Return the raw definition stored under ``name``.

        Raises:
            Exception: Any failure to find ``name``
        """
        ...


class ImportlibDefinitionLookup:
    """
    Looks definitions up as importable Python modules.

    Name forms:
        - ``"pkg.machines.weather"``: the module itself (its module-level
          ``id``, ``fn``, ``inputs``... form the definition)
        - ``".weather"``: relative to ``package``
        - ``"pkg.machines.weather:definition"``: an attribute of the module

    Args:
        package: Anchor for relative names
        attribute: Attribute to prefer when the name has none
            (e.g. ``"definition"``); the module is used if it is missing
    """

    def __init__(self, package: str | None = None, *, attribute: str | None = None):
        self._package = package
        self._attribute = attribute

    def lookup(self, name: str) -> Any:
        module_name, _, attribute = name.partition(":")
        module = importlib.import_module(module_name, package=self._package)

        if attribute:
            return getattr(module, attribute)

        if self._attribute and hasattr(module, self._attribute):
            return getattr(module, self._attribute)

        logger.debug(f"[lookup] Using module '{module.__name__}' as definition")
        return module

    def __repr__(self) -> str:
        return f"<ImportlibDefinitionLookup package={self._package!r}>"


class MemoryDefinitionLookup:
    """
    In-memory definition lookup for testing.

    Usage:
        lookup = MemoryDefinitionLookup()
        lookup.register("weather", {"id": "weather", "fn": fetch})
        machine = Machine.require("weather", lookup=lookup)
    """

    def __init__(self, definitions: dict[str, Any] | None = None):
        self._definitions: dict[str, Any] = dict(definitions or {})

    def register(self, name: str, definition: Any) -> None:
        """Store ``definition`` under ``name``, replacing any previous one."""
        self._definitions[name] = definition
        logger.debug(f"[lookup] Registered definition: {name}")

    def lookup(self, name: str) -> Any:
        if name not in self._definitions:
            available = list(self._definitions)
            raise KeyError(f"Definition '{name}' not found. Available: {available}")
        return self._definitions[name]

    def clear(self) -> None:
        """Remove all definitions."""
        self._definitions.clear()

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: str) -> bool:
        return name in self._definitions
