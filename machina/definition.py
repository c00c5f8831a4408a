"""
Machine Definition Schema.

A MachineDefinition is the declarative half of a machine: everything needed
to build a runnable Machine, and nothing about any particular run.

Design Principle:
    Definitions are data. They are validated once, frozen, and shared;
    all per-run state (configured inputs, exit handlers, loaded
    dependencies) lives on the Machine that wraps them.

Usage:
    # Directly
    definition = MachineDefinition(
        id="fetch-weather",
        inputs={"city": {"type": "string", "required": True}},
        exits={"not_found": {"description": "Unknown city"}},
        dependencies={"json": "*"},
        fn=fetch_weather,
    )

    # From a mapping or an imported module exposing the same names
    definition = MachineDefinition.coerce(raw)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from re import Pattern
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import HaltError, InvalidDefinition

SUCCESS = "success"
ERROR = "error"

# Names read off non-mapping objects (e.g. modules) by coerce()
_DEFINITION_FIELDS = ("id", "module_name", "description", "inputs", "exits", "dependencies", "fn")


class MachineDefinition(BaseModel):
    """
    Declarative description of a unit of work.

    Attributes:
        id: Identifier, unique within a host graph
        module_name: Hint used to guess the module owning this definition
            (substring for a str, ``re.search`` for a compiled pattern).
            Falls back to ``id``.
        description: Human-readable description
        inputs: Input name -> descriptor (kept, not validated here)
        exits: Exit name -> descriptor; success/error are always implied
        dependencies: Dependency name -> opaque requirement string
        fn: Body, called as ``fn(inputs, exits, dependencies)``
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str = Field(..., description="Unique machine identifier")
    module_name: str | Pattern[str] | None = Field(
        default=None,
        description="Module-likeness hint (defaults to id)",
    )
    description: str = Field(default="", description="Human-readable description")
    inputs: dict[str, Any] = Field(default_factory=dict, description="Input schema")
    exits: dict[str, Any] = Field(default_factory=dict, description="Exit schema")
    dependencies: dict[str, str] = Field(
        default_factory=dict,
        description="Dependency manifest (name -> requirement)",
    )
    fn: Callable[..., Any] = Field(..., description="Computation body")

    @field_validator("inputs", "exits", "dependencies", mode="before")
    @classmethod
    def _default_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def hint(self) -> str | Pattern[str]:
        """Module-name hint used for likeness scoring."""
        return self.module_name if self.module_name is not None else self.id

    @property
    def declared_exits(self) -> list[str]:
        """Implicit success/error exits followed by the schema's own exits."""
        declared = [SUCCESS, ERROR]
        declared.extend(name for name in self.exits if name not in declared)
        return declared

    @classmethod
    def coerce(cls, raw: Any) -> MachineDefinition:
        """
        Build a definition from a definition, a mapping, or an object.

        Objects (typically imported modules) are read attribute by attribute
        for the field names of this model.

        Raises:
            InvalidDefinition: If ``raw`` does not describe a valid definition
        """
        if isinstance(raw, cls):
            return raw

        if isinstance(raw, Mapping):
            data = dict(raw)
        else:
            data = {name: getattr(raw, name) for name in _DEFINITION_FIELDS if hasattr(raw, name)}

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            label = data.get("id") or type(raw).__name__
            raise InvalidDefinition(f"Invalid machine definition '{label}': {e}", cause=e) from e

    def __repr__(self) -> str:
        return (
            f"<MachineDefinition id={self.id!r} exits={self.declared_exits} "
            f"dependencies={list(self.dependencies)}>"
        )


# =============================================================================
# Builtin Definitions
# =============================================================================


def noop_definition() -> MachineDefinition:
    """Definition whose body only calls its success exit."""

    def _noop(inputs, exits, dependencies):
        exits.success()

    return MachineDefinition(id="_noop", fn=_noop)


def halt_definition(error: Any = None) -> MachineDefinition:
    """
    Definition whose body only calls its error exit.

    Args:
        error: Payload for the error exit (defaults to a fresh HaltError)
    """
    if error is None:
        error = HaltError()

    def _halt(inputs, exits, dependencies):
        exits.error(error)

    return MachineDefinition(id="_halt", fn=_halt)
