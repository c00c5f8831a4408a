"""
Machine.

A Machine wraps a MachineDefinition into a runnable, single-use instance:
configured inputs, an exit dispatcher and the resolved dependencies.

Lifecycle:
    Constructed -> Configured (0..n times) -> Executed

    - Construction resolves dependencies eagerly, exactly once
    - set_inputs / set_exits / configure mutate instance state only;
      the definition is never touched
    - execute calls the body synchronously with
      (inputs, exits, dependencies) and returns the machine

    Reconfiguring after execution is allowed, but what it means for a
    body still holding the previous dispatcher is undefined.

Usage:
    machine = Machine(definition, context=ImportlibModuleContext(module))

    machine.configure(
        inputs={"city": "Pune"},
        exits={
            "success": lambda weather: print(weather),
            "error": lambda err: print("failed", err),
        },
    ).execute()

    # Built-in machines
    Machine.noop().execute({"success": done})
    Machine.halt().execute({"error": on_error})

    # Looked up by name
    machine = Machine.require("myapp.machines.weather")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from types import ModuleType
from typing import Any

from .config import MachineSettings, get_settings
from .definition import MachineDefinition, halt_definition, noop_definition
from .errors import DefinitionNotFound, UndeclaredExit
from .exits import (
    ExitDispatcher,
    ExitHandler,
    configured_exits,
    exit_key,
    undeclared_exits,
)
from .lookup import DefinitionLookup, ImportlibDefinitionLookup
from .modules import ImportlibModuleContext, ModuleContext, ModuleGraph
from .resolver import DependencyResolver, LikenessScorer
from .signals import CallbackSignalPolicy, SignalHandler, SignalPolicy
from .utils import deep_merge

logger = logging.getLogger(__name__)


class MachineState(str, Enum):
    """Lifecycle state of a Machine."""

    CONSTRUCTED = "constructed"
    CONFIGURED = "configured"
    EXECUTED = "executed"


class Machine:
    """
    Runnable instance of a machine definition.

    Args:
        definition: MachineDefinition, or anything MachineDefinition.coerce
            accepts. None builds the noop machine.
        context: Module to load dependencies from; skips guessing
        graph: Host module graph whose candidates are scored when no
            context is given
        candidates: Explicit candidate list (takes precedence over graph)
        resolver: Dependency resolver (default: LikenessScorer-based)
        signals: Error/warning policy
        on_error: Shortcut for ``signals=CallbackSignalPolicy(on_error=...)``
        on_warn: Shortcut for ``signals=CallbackSignalPolicy(on_warn=...)``
        settings: Settings (default: get_settings())

    Raises:
        InvalidDefinition: If ``definition`` cannot be coerced
        ValueError: If both ``signals`` and on_error/on_warn are given
    """

    def __init__(
        self,
        definition: MachineDefinition | Mapping[str, Any] | Any = None,
        context: ModuleContext | None = None,
        *,
        graph: ModuleGraph | None = None,
        candidates: Sequence[ModuleContext] | None = None,
        resolver: DependencyResolver | None = None,
        signals: SignalPolicy | None = None,
        on_error: SignalHandler | None = None,
        on_warn: SignalHandler | None = None,
        settings: MachineSettings | None = None,
    ):
        if definition is None:
            definition = noop_definition()

        if signals is not None and (on_error is not None or on_warn is not None):
            raise ValueError("Pass either signals or on_error/on_warn, not both")

        self._definition = MachineDefinition.coerce(definition)
        self._settings = settings if settings is not None else get_settings()
        self._signals: SignalPolicy = (
            signals if signals is not None else CallbackSignalPolicy(on_error, on_warn)
        )

        self._configured_inputs: dict[str, Any] = {}
        self._configured_exits: dict[str, ExitHandler] = {}
        self._exits = ExitDispatcher(machine_id=self._definition.id)
        self._dependencies: dict[str, Any] = {}
        self._state = MachineState.CONSTRUCTED
        self._executions = 0

        if resolver is None:
            resolver = DependencyResolver(LikenessScorer(self._settings.min_likeness_score))

        self._dependencies = resolver.resolve(
            self._definition,
            candidates=self._candidate_source(graph, candidates),
            context=context,
            on_error=self.error,
        )

    @staticmethod
    def _candidate_source(
        graph: ModuleGraph | None,
        candidates: Sequence[ModuleContext] | None,
    ) -> Sequence[ModuleContext] | Callable[[], Sequence[ModuleContext]]:
        if candidates is not None:
            return candidates
        if graph is not None:
            # Deferred so graphs are only walked when there is something to resolve
            return graph.candidates
        return ()

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def id(self) -> str:
        return self._definition.id

    @property
    def definition(self) -> MachineDefinition:
        return self._definition

    @property
    def inputs(self) -> dict[str, Any]:
        """Configured inputs (the live mapping handed to the body)."""
        return self._configured_inputs

    @property
    def exits(self) -> ExitDispatcher:
        """Current exit dispatcher."""
        return self._exits

    @property
    def dependencies(self) -> dict[str, Any]:
        """Dependencies resolved at construction."""
        return self._dependencies

    @property
    def state(self) -> MachineState:
        return self._state

    @property
    def executions(self) -> int:
        """Number of times the body has been called."""
        return self._executions

    # =========================================================================
    # Configuration
    # =========================================================================

    def set_inputs(self, inputs: Mapping[str, Any] | None) -> Machine:
        """
        Deep-merge ``inputs`` into the configured inputs.

        No validation against the definition's input schema happens here.
        """
        self._touch()
        deep_merge(self._configured_inputs, inputs)
        return self

    def set_exits(self, exits: Mapping[str, ExitHandler] | None) -> Machine:
        """
        Merge ``exits`` into the configured handlers and rebuild the dispatcher.

        Raises:
            UndeclaredExit: In strict mode, for handlers of undeclared exits
            TypeError: If a handler is not callable
        """
        exits = exits or {}

        unknown = undeclared_exits(exits, self._definition.declared_exits)
        if unknown:
            if self._settings.strict_exits:
                raise UndeclaredExit(unknown, self.id, self._definition.declared_exits)
            self.warn(
                f"Configured handler(s) for undeclared exit(s) {unknown}; "
                f"declared: {self._definition.declared_exits}"
            )

        partial = {exit_key(name): handler for name, handler in exits.items()}
        merged = deep_merge(dict(self._configured_exits), partial)
        self._exits = ExitDispatcher(merged, machine_id=self.id)
        self._configured_exits = merged
        self._touch()
        return self

    def configure(
        self,
        inputs: Mapping[str, Any] | None = None,
        exits: Mapping[str, ExitHandler] | None = None,
    ) -> Machine:
        """Apply ``exits`` then ``inputs``, whichever are given."""
        if exits:
            self.set_exits(exits)
        if inputs:
            self.set_inputs(inputs)
        return self

    def _touch(self) -> None:
        if self._state is MachineState.EXECUTED:
            logger.debug(f"[machine] Reconfiguring '{self.id}' after execution")
        self._state = MachineState.CONFIGURED

    # =========================================================================
    # Execution
    # =========================================================================

    def execute(self, exits: Mapping[str, ExitHandler] | None = None) -> Machine:
        """
        Run the body once, synchronously.

        Exceptions raised by the body or by exit handlers propagate.

        Args:
            exits: Handlers to merge in before running
        """
        if exits:
            self.set_exits(exits)

        logger.debug(
            f"[machine] Executing '{self.id}' | "
            f"inputs={list(self._configured_inputs)} | "
            f"exits={configured_exits(self._exits)}"
        )

        self._executions += 1
        self._state = MachineState.EXECUTED
        self._definition.fn(self._configured_inputs, self._exits, self._dependencies)
        return self

    exec = execute

    # =========================================================================
    # Signals
    # =========================================================================

    def error(self, *args: Any) -> Any:
        """Signal an error; raises unless the policy recovers."""
        return self._signals.on_error(self, *args)

    def warn(self, *args: Any) -> Any:
        """Signal a non-fatal warning."""
        return self._signals.on_warn(self, *args)

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def noop(cls, **kwargs: Any) -> Machine:
        """Machine whose body calls its success exit with no payload."""
        return cls(noop_definition(), **kwargs)

    @classmethod
    def halt(cls, error: Any = None, **kwargs: Any) -> Machine:
        """
        Machine whose body calls its error exit.

        Args:
            error: Error payload (default: HaltError, code E_MACHINE_HALT)
        """
        return cls(halt_definition(error), **kwargs)

    @classmethod
    def require(
        cls,
        name: str,
        lookup: DefinitionLookup | None = None,
        **kwargs: Any,
    ) -> Machine:
        """
        Look a definition up by name and wrap it in a Machine.

        When the lookup returns a module and no context is passed, that
        module becomes the dependency context.

        Args:
            name: Name understood by ``lookup``
            lookup: Definition lookup (default: ImportlibDefinitionLookup())
            **kwargs: Forwarded to the Machine constructor

        Raises:
            DefinitionNotFound: If the lookup fails
        """
        if lookup is None:
            lookup = ImportlibDefinitionLookup()

        try:
            raw = lookup.lookup(name)
        except Exception as e:
            logger.error(f"[machine] Cannot find machine '{name}': {e}")
            raise DefinitionNotFound(name, e) from e

        if isinstance(raw, ModuleType) and kwargs.get("context") is None:
            kwargs["context"] = ImportlibModuleContext(raw)

        return cls(raw, **kwargs)

    def __repr__(self) -> str:
        return (
            f"<Machine id={self.id!r} state={self._state.value} "
            f"dependencies={list(self._dependencies)}>"
        )
