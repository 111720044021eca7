"""Pytest fixtures shared across all tests."""

from __future__ import annotations

import pytest

from calc_history.core.engine import Calculator


@pytest.fixture
def calc() -> Calculator:
    """A calculator starting at 100."""
    return Calculator(100)


@pytest.fixture
def rewound_calc() -> Calculator:
    """100 → (+5) 105 → (*2) 210, then one step undone (value 105, cursor 1)."""
    c = Calculator(100)
    c.operate("+", 5)
    c.operate("*", 2)
    c.undo(1)
    return c
