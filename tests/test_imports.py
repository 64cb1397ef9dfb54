"""Smoke tests: every public module imports cleanly."""

import importlib

import pytest

MODULES = [
    "bookit.config",
    "bookit.engine",
    "bookit.errors",
    "bookit.logging_context",
    "bookit.utils",
    "bookit.notifications.templates",
    "bookit.scheduling",
    "bookit.scheduling.availability",
    "bookit.scheduling.overlap",
    "bookit.scheduling.reminders",
    "bookit.scheduling.resolver",
    "bookit.scheduling.slots",
    "bookit.scheduling.transitions",
    "bookit.schemas.booking_schema",
    "bookit.schemas.business_schema",
    "bookit.schemas.schedule_schema",
    "bookit.store",
    "bookit.store.memory",
    "bookit.store.seed",
    "bookit.tools",
    "bookit.tools.dispatch",
    "bookit.tools.selection",
    "main",
]


@pytest.mark.parametrize("name", MODULES)
def test_module_imports(name):
    assert importlib.import_module(name) is not None
