"""
Machine.require Usage Examples.

Shows how hosts look machines up by name and how the dependency context
is chosen.

Architecture:
    ┌─────────────────┐      ┌──────────────────┐      ┌─────────────────┐
    │   Host code     │ ──▶  │ DefinitionLookup │ ──▶  │    Machine      │
    │ (require name)  │      │ (Importlib/Mem)  │      │ (resolve deps)  │
    └─────────────────┘      └──────────────────┘      └─────────────────┘
                                                               │
                                                               ▼
                                                       ┌──────────────────┐
                                                       │  ModuleContext   │
                                                       │ (explicit/guess) │
                                                       └──────────────────┘
"""

from machina import (
    Machine,
    MemoryDefinitionLookup,
    MemoryModuleContext,
    MemoryModuleGraph,
)


# =============================================================================
# Example 1: Memory Lookup (Testing)
# =============================================================================


def example_memory_lookup():
    """Register a definition in memory and require it by name."""
    lookup = MemoryDefinitionLookup()
    lookup.register(
        "shout",
        {
            "id": "shout",
            "fn": lambda inputs, exits, deps: exits.success(inputs["text"].upper()),
        },
    )

    machine = Machine.require("shout", lookup=lookup)
    machine.configure(inputs={"text": "hello"}, exits={"success": print}).execute()
    return machine


# =============================================================================
# Example 2: Guessing the Dependency Context
# =============================================================================


def example_guessed_context():
    """
    Let the likeness scorer pick the module that owns the machine.

    The candidate whose directory path mentions the machine's id closest
    to the file wins:

        app/machines/shout/index.py    <- chosen for id "shout"
        app/machines/whisper/index.py
    """
    graph = MemoryModuleGraph(
        [
            MemoryModuleContext("app/machines/shout/index.py", {"style": str.upper}),
            MemoryModuleContext("app/machines/whisper/index.py", {"style": str.lower}),
        ]
    )

    def shout(inputs, exits, dependencies):
        exits.success(dependencies["style"](inputs["text"]))

    machine = Machine(
        {"id": "shout", "dependencies": {"style": "*"}, "fn": shout},
        graph=graph,
    )
    machine.set_inputs({"text": "hey"}).execute({"success": print})
    return machine


# =============================================================================
# Example 3: Recovering From Resolution Errors
# =============================================================================


def example_recover_from_errors():
    """Collect resolution failures instead of raising."""
    failures = []

    Machine(
        {"id": "orphan", "dependencies": {"http": "*"}, "fn": lambda i, e, d: e.success()},
        on_error=lambda machine, err: failures.append(err),
    )

    for failure in failures:
        print(f"{failure.code.value}: {failure}")
    return failures


if __name__ == "__main__":
    example_memory_lookup()
    example_guessed_context()
    example_recover_from_errors()
