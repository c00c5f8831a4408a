"""
Errors raised by machina.

Every error carries a stable ``code`` so that hosts overriding the error
signal can branch on it without matching on class names or messages.

Propagation:
    - Resolution errors (DependencyContextUnresolved, DependencyLoadFailed)
      are routed through ``Machine.error`` and only raise by default.
    - DefinitionNotFound and InvalidDefinition are raised to the caller.
    - ExitNotConfigured and UndeclaredExit are raised from the dispatcher.
    - HaltError is never raised by machina itself; it is the payload that
      halt machines hand to their ``error`` exit.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes attached to machina errors."""

    MODULE_NOT_FOUND = "MODULE_NOT_FOUND"
    EXIT_NOT_CONFIGURED = "E_EXIT_NOT_CONFIGURED"
    UNDECLARED_EXIT = "E_UNDECLARED_EXIT"
    INVALID_DEFINITION = "E_INVALID_DEFINITION"
    MACHINE_HALT = "E_MACHINE_HALT"
    MACHINE_ERROR = "E_MACHINE_ERROR"


class MachineError(Exception):
    """Base class for all machina errors."""

    code: ErrorCode = ErrorCode.MACHINE_ERROR

    def __init__(self, message: str = "", *, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging/diagnostics."""
        return {
            "error": type(self).__name__,
            "code": self.code.value,
            "message": self.message,
            "cause": repr(self.cause) if self.cause is not None else None,
        }


class DependencyContextUnresolved(MachineError):
    """No module could be chosen as the dependency context of a machine."""

    code = ErrorCode.MODULE_NOT_FOUND

    def __init__(self, machine_id: str):
        super().__init__(
            f"Cannot resolve a context module to use for requiring "
            f"dependencies of machine: '{machine_id}'"
        )
        self.machine_id = machine_id

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "machine_id": self.machine_id}


class DependencyLoadFailed(MachineError):
    """A declared dependency could not be loaded from the resolved context."""

    code = ErrorCode.MODULE_NOT_FOUND

    def __init__(
        self,
        dependency: str,
        machine_id: str,
        context_id: str,
        cause: BaseException,
    ):
        super().__init__(
            f"Cannot find module: '{dependency}', a dependency of machine: "
            f"'{machine_id}' (attempted from the machine module's context: "
            f"'{context_id}'): {cause}",
            cause=cause,
        )
        self.dependency = dependency
        self.machine_id = machine_id
        self.context_id = context_id

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "dependency": self.dependency,
            "machine_id": self.machine_id,
            "context_id": self.context_id,
        }


class DefinitionNotFound(MachineError):
    """``Machine.require`` could not look up the requested definition."""

    code = ErrorCode.MODULE_NOT_FOUND

    def __init__(self, name: str, cause: BaseException | None = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Cannot find machine: '{name}'{detail}", cause=cause)
        self.name = name

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "name": self.name}


class InvalidDefinition(MachineError):
    """A raw object could not be turned into a MachineDefinition."""

    code = ErrorCode.INVALID_DEFINITION


class ExitNotConfigured(MachineError):
    """A machine body invoked an exit with no handler and no catch-all."""

    code = ErrorCode.EXIT_NOT_CONFIGURED

    def __init__(self, exit_name: str, machine_id: str | None = None):
        where = f" of machine '{machine_id}'" if machine_id else ""
        super().__init__(f"No handler registered for exit '{exit_name}'{where}")
        self.exit_name = exit_name
        self.machine_id = machine_id

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "exit_name": self.exit_name,
            "machine_id": self.machine_id,
        }


class UndeclaredExit(MachineError):
    """A handler was configured for an exit the definition does not declare."""

    code = ErrorCode.UNDECLARED_EXIT

    def __init__(self, exit_names: list[str], machine_id: str, declared: list[str]):
        super().__init__(
            f"Machine '{machine_id}' does not declare exit(s) {exit_names}. "
            f"Declared exits: {declared}"
        )
        self.exit_names = exit_names
        self.machine_id = machine_id
        self.declared = declared


class HaltError(MachineError):
    """Default error handed to the ``error`` exit of a halt machine."""

    code = ErrorCode.MACHINE_HALT

    def __init__(self, message: str = "Executed a halt machine"):
        super().__init__(message)
