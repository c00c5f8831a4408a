"""
Pytest configuration and fixtures for machina tests.
"""

import importlib
import sys
import textwrap
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from machina import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from machina.config import MachineSettings, get_settings  # noqa: E402
from machina.definition import MachineDefinition  # noqa: E402

SAMPLE_PACKAGE = "sample_machines"


class ExitRecorder:
    """Collects exit calls as (exit_name, args, kwargs) tuples."""

    def __init__(self):
        self.calls = []

    def handler(self, name):
        def _record(*args, **kwargs):
            self.calls.append((name, args, kwargs))

        return _record

    def handlers(self, *names):
        return {name: self.handler(name) for name in names}

    def names(self):
        return [name for name, _, _ in self.calls]


@pytest.fixture
def recorder():
    """Fresh exit recorder."""
    return ExitRecorder()


@pytest.fixture
def settings():
    """Default, non-strict settings independent of the environment."""
    return MachineSettings()


@pytest.fixture
def strict_settings():
    """Settings rejecting undeclared exits."""
    return MachineSettings(strict_exits=True)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_definition():
    """Factory for definitions with a body recording its arguments."""

    def _make(id="sample", fn=None, **fields):
        if fn is None:

            def fn(inputs, exits, dependencies):
                exits.success(inputs, dependencies)

        return MachineDefinition(id=id, fn=fn, **fields)

    return _make


@pytest.fixture
def sample_package(tmp_path, monkeypatch):
    """
    Importable package of machine modules written to a temp dir.

    sample_machines/
    ├── __init__.py
    ├── helpers.py        # GREETING = "hello"
    ├── greet.py          # module-level definition, depends on ".helpers"
    └── broken.py         # depends on a module that does not exist
    """
    package_dir = tmp_path / SAMPLE_PACKAGE
    package_dir.mkdir()
    (package_dir / "__init__.py").write_text("")
    (package_dir / "helpers.py").write_text('GREETING = "hello"\n')
    (package_dir / "greet.py").write_text(
        textwrap.dedent(
            """
            id = "greet"
            description = "Greets someone"
            inputs = {"name": {"type": "string"}}
            exits = {"empty": {"description": "No name given"}}
            dependencies = {".helpers": "*"}


            def fn(inputs, exits, dependencies):
                if not inputs.get("name"):
                    return exits.empty()
                helpers = dependencies[".helpers"]
                exits.success(f"{helpers.GREETING} {inputs['name']}")


            definition = {"id": "greet-attr", "fn": fn}
            """
        )
    )
    (package_dir / "broken.py").write_text(
        textwrap.dedent(
            """
            id = "broken"
            dependencies = {".does_not_exist": "*"}


            def fn(inputs, exits, dependencies):
                exits.success()
            """
        )
    )

    monkeypatch.syspath_prepend(str(tmp_path))
    importlib.invalidate_caches()

    yield SAMPLE_PACKAGE

    for name in list(sys.modules):
        if name == SAMPLE_PACKAGE or name.startswith(f"{SAMPLE_PACKAGE}."):
            del sys.modules[name]
