"""
Unit Tests

Tests for individual components in isolation. External commands are never
executed: managers run against ``FakeGateway`` and a virtual-clock
``ManualScheduler`` from ``tests.unit.fakes``.

Run via command line:
    pytest

Or run specific test module:
    pytest tests/unit/test_<module_name>.py
"""

from unittest import TestCase  # noqa: F401
