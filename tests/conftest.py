"""Pytest configuration and fixtures for actionsgen tests."""

import pytest
import yaml

from actionsgen import target
from actionsgen.ui.console import Console, set_console


@pytest.fixture(autouse=True)
def reset_console():
    """Reset the global console so CLI runs don't leak the debug flag."""
    set_console(Console())
    yield
    set_console(Console())


@pytest.fixture
def targets():
    """A small target graph: Pack and Test both depend on Compile."""
    return [
        target("Restore"),
        target("Compile", needs=["Restore"]),
        target("Test", needs=["Compile"], artifacts=["output/test-results/*.trx"]),
        target("Pack", needs=["Compile"], artifacts=["output/packages/*.nupkg", "output/packages/*.snupkg"]),
        target("Publish", needs=["Pack", "Test"]),
    ]


@pytest.fixture
def read_workflow():
    """Parse a generated workflow file back into plain data."""
    def _read(path):
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    return _read
