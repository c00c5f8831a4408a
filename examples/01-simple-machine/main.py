"""
Simple Machine Example.

Builds a machine from a definition, configures it and runs it.

Flow:
    MachineDefinition ──▶ Machine (resolve deps) ──▶ configure ──▶ execute
                                                                     │
                                          success / error / custom ◀─┘

Run:
    python examples/01-simple-machine/main.py
"""

from machina import Exit, Machine, MachineDefinition, MemoryModuleContext
from machina.config import configure_logging


def convert(inputs, exits, dependencies):
    """Convert an amount using the injected rates table."""
    rates = dependencies["rates"]
    currency = inputs["to"]

    if currency not in rates:
        return exits.unknown_currency(currency)

    exits.success(round(inputs["amount"] * rates[currency], 2))


CONVERT = MachineDefinition(
    id="convert-currency",
    description="Convert an amount from EUR",
    inputs={
        "amount": {"type": "number", "required": True},
        "to": {"type": "string", "required": True},
    },
    exits={"unknown_currency": {"description": "No rate for the target currency"}},
    dependencies={"rates": "*"},
    fn=convert,
)


def main():
    configure_logging("INFO")

    # The host decides where dependencies come from
    context = MemoryModuleContext(
        "examples/convert-currency/index.py",
        exports={"rates": {"USD": 1.08, "GBP": 0.85}},
    )

    machine = Machine(CONVERT, context)

    machine.configure(
        inputs={"amount": 100, "to": "USD"},
        exits={
            "success": lambda value: print(f"Converted: {value}"),
            "error": lambda err: print(f"Failed: {err}"),
            "unknown_currency": lambda code: print(f"No rate for {code}"),
        },
    ).execute()

    # Same machine, new inputs
    machine.set_inputs({"to": "JPY"}).execute()

    # Unhandled exits can be funnelled into one catch-all
    Machine.halt().execute(
        {Exit.CATCHALL: lambda name, *args: print(f"Exit '{name}' reached with {args}")}
    )


if __name__ == "__main__":
    main()
