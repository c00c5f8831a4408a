"""
Exit Dispatcher.

The dispatcher is the ``exits`` argument a machine body receives. It offers
one callable per exit name and routes each call to the handler the caller
configured.

Calling conventions (all equivalent):
    exits.success(result)
    exits["success"](result)
    dispatch(exits, "success", result)

    # Node-style callback: error first, results after
    exits(None, result)   # -> success(result)
    exits(err)            # -> error(err)

Unconfigured exits:
    - forwarded to the catch-all handler (``Exit.CATCHALL``) as
      ``catchall(exit_name, *args, **kwargs)`` when one is configured
    - otherwise ExitNotConfigured is raised; nothing is silently dropped

The dispatcher does not enforce exactly-once invocation. It only records
which exits were requested, in order (see ``invoked_exits``).

Exit names starting with an underscore are only reachable by item access.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from functools import partial
from typing import Any

from .errors import ExitNotConfigured

logger = logging.getLogger(__name__)

ExitHandler = Callable[..., Any]


class Exit(str, Enum):
    """Builtin exit names."""

    SUCCESS = "success"
    ERROR = "error"
    CATCHALL = "*"


def exit_key(name: str | Exit) -> str:
    """Normalize an exit name or Exit member to its string key."""
    return name.value if isinstance(name, Exit) else str(name)


def undeclared_exits(names: Iterable[str | Exit], declared: Iterable[str]) -> list[str]:
    """
    Return the configured exit names missing from ``declared``.

    The catch-all key is always allowed.
    """
    allowed = set(declared) | {Exit.CATCHALL.value}
    return [key for key in map(exit_key, names) if key not in allowed]


class ExitDispatcher:
    """
    Routes exit calls from a machine body to configured handlers.

    Built once per configuration; Machine rebuilds it on every
    ``set_exits`` instead of patching it.

    Every public attribute name is an exit. Introspection lives in the
    module-level helpers (configured_exits, invoked_exits, handler_for,
    dispatch) so no exit name is shadowed by a dispatcher member.

    Args:
        handlers: Exit name -> handler
        machine_id: Owning machine, for error messages
    """

    def __init__(
        self,
        handlers: Mapping[str | Exit, ExitHandler] | None = None,
        *,
        machine_id: str | None = None,
    ):
        self._handlers: dict[str, ExitHandler] = {}
        self._machine_id = machine_id
        self._invoked: list[str] = []

        for name, handler in (handlers or {}).items():
            key = exit_key(name)
            if not callable(handler):
                raise TypeError(
                    f"Handler for exit '{key}' must be callable, got {type(handler).__name__}"
                )
            self._handlers[key] = handler

    def _dispatch(self, name: str | Exit, *args: Any, **kwargs: Any) -> Any:
        key = exit_key(name)
        self._invoked.append(key)
        if len(self._invoked) > 1:
            logger.debug(
                f"[exits] '{self._machine_id}' invoked exit '{key}' after {self._invoked[:-1]}"
            )

        handler = self._handlers.get(key)
        if handler is not None:
            return handler(*args, **kwargs)

        catchall = self._handlers.get(Exit.CATCHALL.value)
        if catchall is not None:
            logger.debug(f"[exits] Forwarding unconfigured exit '{key}' to catch-all")
            return catchall(key, *args, **kwargs)

        raise ExitNotConfigured(key, self._machine_id)

    def __call__(self, err: Any = None, *results: Any, **kwargs: Any) -> Any:
        if err is not None:
            return self._dispatch(Exit.ERROR, err)
        return self._dispatch(Exit.SUCCESS, *results, **kwargs)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        # Private and dunder lookups (copy, pickle, ...) must not become exits
        if name.startswith("_"):
            raise AttributeError(name)
        return partial(self._dispatch, name)

    def __getitem__(self, name: str | Exit) -> Callable[..., Any]:
        return partial(self._dispatch, exit_key(name))

    def __contains__(self, name: object) -> bool:
        if isinstance(name, str):
            return exit_key(name) in self._handlers
        return False

    def __repr__(self) -> str:
        return f"<ExitDispatcher machine={self._machine_id!r} exits={list(self._handlers)}>"


# =============================================================================
# Introspection
# =============================================================================


def dispatch(dispatcher: ExitDispatcher, name: str | Exit, *args: Any, **kwargs: Any) -> Any:
    """
    Invoke exit ``name`` of ``dispatcher`` with the given arguments.

    Raises:
        ExitNotConfigured: No handler and no catch-all
    """
    return dispatcher._dispatch(name, *args, **kwargs)


def configured_exits(dispatcher: ExitDispatcher) -> list[str]:
    """Names of exits with a handler (catch-all included)."""
    return list(dispatcher._handlers)


def invoked_exits(dispatcher: ExitDispatcher) -> list[str]:
    """Exit names requested so far, in call order, including failed dispatches."""
    return list(dispatcher._invoked)


def handler_for(dispatcher: ExitDispatcher, name: str | Exit) -> ExitHandler | None:
    """Return the handler configured for ``name``, without the catch-all."""
    return dispatcher._handlers.get(exit_key(name))
