"""
machina - Declarative units of work with injected dependencies.

A *machine* is a named computation declared with:

- **Inputs**: a schema of named, typed inputs
- **Exits**: named outcomes (success, error, custom) reported through callbacks
- **Dependencies**: a manifest of modules loaded before the body runs

Quick Start:
    >>> from machina import Machine, MachineDefinition
    >>>
    >>> def add(inputs, exits, dependencies):
    ...     exits.success(inputs["a"] + inputs["b"])
    >>>
    >>> machine = Machine(MachineDefinition(id="add", fn=add))
    >>> _ = machine.configure(
    ...     inputs={"a": 1, "b": 2},
    ...     exits={"success": print, "error": print},
    ... ).execute()
    3
"""

__version__ = "0.1.0"

from machina.definition import MachineDefinition
from machina.errors import (
    DefinitionNotFound,
    DependencyContextUnresolved,
    DependencyLoadFailed,
    ErrorCode,
    ExitNotConfigured,
    HaltError,
    InvalidDefinition,
    MachineError,
    UndeclaredExit,
)
from machina.exits import (
    Exit,
    ExitDispatcher,
    configured_exits,
    dispatch,
    handler_for,
    invoked_exits,
)
from machina.lookup import ImportlibDefinitionLookup, MemoryDefinitionLookup
from machina.machine import Machine, MachineState
from machina.modules import (
    ImportlibModuleContext,
    MemoryModuleContext,
    MemoryModuleGraph,
    PackageModuleGraph,
)
from machina.resolver import DependencyResolver, LikenessScorer
from machina.signals import CallbackSignalPolicy, DefaultSignalPolicy

__all__ = [
    "__version__",
    # Core
    "Machine",
    "MachineDefinition",
    "MachineState",
    "Exit",
    "ExitDispatcher",
    "dispatch",
    "configured_exits",
    "invoked_exits",
    "handler_for",
    # Resolution
    "DependencyResolver",
    "LikenessScorer",
    "ImportlibModuleContext",
    "PackageModuleGraph",
    "MemoryModuleContext",
    "MemoryModuleGraph",
    # Lookup
    "ImportlibDefinitionLookup",
    "MemoryDefinitionLookup",
    # Signals
    "DefaultSignalPolicy",
    "CallbackSignalPolicy",
    # Errors
    "ErrorCode",
    "MachineError",
    "DependencyContextUnresolved",
    "DependencyLoadFailed",
    "DefinitionNotFound",
    "InvalidDefinition",
    "ExitNotConfigured",
    "UndeclaredExit",
    "HaltError",
]
