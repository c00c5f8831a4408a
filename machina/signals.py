"""
Error and warning signal policies.

A Machine never decides on its own what an error or a warning means; it
hands both to the policy it was constructed with.

Policies:
    - DefaultSignalPolicy: errors raise, warnings are logged
    - CallbackSignalPolicy: plain ``on_error`` / ``on_warn`` callables,
      each falling back to the default behaviour when omitted

Usage:
    # Recover from resolution failures instead of raising
    failures = []
    machine = Machine(definition, on_error=lambda m, err: failures.append(err))

    # Or supply a full policy
    machine = Machine(definition, signals=MyPolicy())
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

from .errors import MachineError

if TYPE_CHECKING:
    from .machine import Machine

logger = logging.getLogger(__name__)

SignalHandler = Callable[..., Any]


class SignalPolicy(Protocol):
    """Protocol for machine error/warning handling."""

    def on_error(self, machine: Machine, *args: Any) -> Any:
        """Handle an error signalled on ``machine``."""
        ...

    def on_warn(self, machine: Machine, *args: Any) -> Any:
        """Handle a warning signalled on ``machine``."""
        ...


class DefaultSignalPolicy:
    """
    Raise on error, log on warn.

    ``on_error`` raises its first argument when it is an exception and
    wraps anything else in a MachineError.
    """

    def on_error(self, machine: Machine, *args: Any) -> Any:
        err = args[0] if args else None
        if isinstance(err, BaseException):
            raise err
        raise MachineError(f"Machine '{machine.id}' signalled an error: {_format_args(args)}")

    def on_warn(self, machine: Machine, *args: Any) -> Any:
        logger.warning(f"[{machine.id}] {_format_args(args)}")


class CallbackSignalPolicy(DefaultSignalPolicy):
    """
    Policy built from optional callables.

    Each callable receives the machine followed by the signalled arguments.
    """

    def __init__(
        self,
        on_error: SignalHandler | None = None,
        on_warn: SignalHandler | None = None,
    ):
        self._on_error = on_error
        self._on_warn = on_warn

    def on_error(self, machine: Machine, *args: Any) -> Any:
        if self._on_error is None:
            return super().on_error(machine, *args)
        return self._on_error(machine, *args)

    def on_warn(self, machine: Machine, *args: Any) -> Any:
        if self._on_warn is None:
            return super().on_warn(machine, *args)
        return self._on_warn(machine, *args)


def _format_args(args: tuple[Any, ...]) -> str:
    """Join signal arguments into one human-readable line."""
    return " ".join(arg if isinstance(arg, str) else repr(arg) for arg in args)
