"""Tests for the Calculator engine (operate / undo / redo)."""

from __future__ import annotations

import logging
import sys

import pytest

from calc_history.core.commands import build_command
from calc_history.core.engine import Calculator
from calc_history.core.errors import (
    CalculatorError,
    DivisionByZero,
    InvalidCount,
    InvalidOperand,
    InvalidOperator,
    IrreversibleOperation,
    NonFiniteResult,
)
from calc_history.core.models import HistoryEntry


def _snapshot(c: Calculator):
    return c.value, c.cursor, c.history


def _fail(value):
    raise NonFiniteResult("boom", value)


class TestOperate:
    def test_operate_returns_new_value(self, calc):
        assert calc.operate("+", 5) == 105
        assert calc.value == 105
        assert calc.cursor == 1
        assert calc.history_length == 1

    def test_default_initial_value_is_zero(self):
        assert Calculator().value == 0

    def test_operations_chain(self, calc):
        calc.operate("+", 5)
        calc.operate("*", 2)
        calc.operate("-", 10)
        assert calc.operate("/", 4) == 50
        assert calc.cursor == 4

    def test_invalid_operator_rejected(self, calc):
        calc.operate("+", 5)
        before = _snapshot(calc)
        with pytest.raises(InvalidOperator):
            calc.operate("%", 1)
        assert _snapshot(calc) == before

    def test_division_by_zero_rejected(self, calc):
        calc.operate("+", 5)
        before = _snapshot(calc)
        with pytest.raises(DivisionByZero):
            calc.operate("/", 0)
        assert _snapshot(calc) == before

    def test_multiply_by_zero_rejected(self, calc):
        with pytest.raises(IrreversibleOperation):
            calc.operate("*", 0)
        assert calc.value == 100
        assert calc.history_length == 0

    def test_rejected_operation_keeps_redo_history(self, rewound_calc):
        with pytest.raises(CalculatorError):
            rewound_calc.operate("%", 1)
        assert rewound_calc.can_redo
        assert rewound_calc.redo(1) == 210

    def test_invalid_initial_value(self):
        with pytest.raises(InvalidOperand):
            Calculator(float("nan"))

    def test_overflowing_operation_rejected(self):
        calc = Calculator(1e308)
        calc.operate("+", 1)
        before = _snapshot(calc)
        with pytest.raises(NonFiniteResult):
            calc.operate("*", 10)
        assert _snapshot(calc) == before

    @pytest.mark.parametrize("divisor", [3, 7])
    def test_operation_whose_inverse_overflows_rejected(self, divisor):
        calc = Calculator(sys.float_info.max)
        with pytest.raises(IrreversibleOperation):
            calc.operate("/", divisor)
        assert calc.value == sys.float_info.max
        assert calc.history_length == 0
        assert calc.undo(1) == sys.float_info.max

    def test_product_underflowing_to_zero_rejected(self):
        calc = Calculator(1)
        calc.operate("*", 1e-200)
        with pytest.raises(IrreversibleOperation):
            calc.operate("*", 1e-200)
        assert calc.cursor == 1
        assert calc.undo(1) == 1

    def test_multiply_zero_value_is_allowed(self):
        calc = Calculator(0)
        assert calc.operate("*", 3) == 0
        assert calc.undo(1) == 0


class TestUndoRedo:
    def test_round_trip(self, calc):
        calc.operate("+", 5)
        assert calc.value == 105
        assert calc.undo(1) == 100
        assert calc.cursor == 0

    def test_sequence_round_trip(self, calc):
        ops = [("+", 7), ("*", 3), ("-", 1), ("/", 2), ("+", 11)]
        for symbol, operand in ops:
            calc.operate(symbol, operand)
        assert calc.undo(len(ops)) == 100

    def test_redo_reverses_undo(self, calc):
        calc.operate("+", 5)
        calc.operate("*", 2)
        assert calc.value == 210
        assert calc.undo(2) == 100
        assert calc.redo(2) == 210
        assert calc.cursor == 2

    @pytest.mark.parametrize("k", [0, 1, 2, 3])
    def test_undo_k_then_redo_k_restores_state(self, calc, k):
        for symbol, operand in [("+", 5), ("*", 2), ("-", 10)]:
            calc.operate(symbol, operand)
        before = (calc.value, calc.cursor)
        calc.undo(k)
        assert calc.cursor == 3 - k
        calc.redo(k)
        assert (calc.value, calc.cursor) == before

    def test_undo_applies_most_recent_first(self, calc):
        calc.operate("+", 5)   # 105
        calc.operate("*", 2)   # 210
        # Undoing in chronological order would give (210 - 5) / 2 = 102.5
        assert calc.undo(2) == 100

    def test_redo_applies_oldest_first(self, calc):
        calc.operate("+", 5)
        calc.operate("*", 2)
        calc.undo(2)
        # Redoing in reverse order would give 100 * 2 + 5 = 205
        assert calc.redo(2) == 210

    def test_single_step_default(self, calc):
        calc.operate("+", 5)
        calc.operate("+", 5)
        assert calc.undo() == 105
        assert calc.redo() == 110

    def test_large_counts_are_clamped(self, calc):
        calc.operate("+", 5)
        calc.operate("*", 2)
        assert calc.undo(1000) == 100
        assert calc.cursor == 0
        assert calc.redo(1000) == 210
        assert calc.cursor == calc.history_length == 2

    def test_undo_noop_at_start(self, calc):
        assert calc.undo(3) == 100
        calc.operate("+", 1)
        calc.undo(1)
        before = _snapshot(calc)
        assert calc.undo(5) == 100
        assert _snapshot(calc) == before

    def test_redo_noop_at_end(self, calc):
        calc.operate("+", 1)
        before = _snapshot(calc)
        assert calc.redo(5) == 101
        assert _snapshot(calc) == before

    def test_negative_count_rejected(self, calc):
        calc.operate("+", 1)
        with pytest.raises(InvalidCount):
            calc.undo(-1)
        assert calc.cursor == 1

    def test_failed_undo_batch_changes_nothing(self, calc):
        calc._history.record(
            HistoryEntry(command=build_command("+", 1), run=lambda v: v + 1, undo=_fail)
        )
        calc.operate("+", 5)
        before = (calc.value, calc.cursor)
        # The most recent step succeeds, the second one fails.
        with pytest.raises(NonFiniteResult):
            calc.undo(2)
        assert (calc.value, calc.cursor) == before
        assert calc.undo(1) == 100

    def test_failed_redo_batch_changes_nothing(self, calc):
        calc.operate("+", 5)
        calc._history.record(
            HistoryEntry(command=build_command("+", 1), run=_fail, undo=lambda v: v)
        )
        calc.undo(2)
        assert (calc.value, calc.cursor) == (100, 0)
        with pytest.raises(NonFiniteResult):
            calc.redo(2)
        assert (calc.value, calc.cursor) == (100, 0)
        assert calc.redo(1) == 105


class TestTruncation:
    def test_new_operation_after_rewind_discards_future(self, rewound_calc):
        assert rewound_calc.value == 105
        assert rewound_calc.operate("-", 3) == 102
        assert [e.description for e in rewound_calc.history] == ["+ 5", "- 3"]
        assert rewound_calc.cursor == 2
        assert rewound_calc.redo(1) == 102
        assert rewound_calc.cursor == 2

    def test_truncation_then_full_undo(self, rewound_calc):
        rewound_calc.operate("-", 3)
        assert rewound_calc.undo(10) == 100

    def test_operate_from_fully_rewound(self, calc):
        calc.operate("+", 1)
        calc.operate("+", 2)
        calc.undo(2)
        calc.operate("*", 3)
        assert calc.history_length == 1
        assert calc.value == 300


class TestCursorBounds:
    def test_cursor_stays_in_range(self, calc):
        calls = [
            ("operate", "+", 1), ("undo", 4), ("redo", 9), ("operate", "*", 2),
            ("undo", 1), ("operate", "-", 3), ("redo", 2), ("undo", 7), ("redo", 1),
        ]
        for name, *args in calls:
            getattr(calc, name)(*args)
            assert 0 <= calc.cursor <= calc.history_length


class TestStateAndReset:
    def test_state_snapshot(self, rewound_calc):
        state = rewound_calc.state()
        assert state.value == 105
        assert state.cursor == 1
        assert state.history_length == 2
        assert state.can_undo and state.can_redo
        assert state.undo_description == "+ 5"
        assert state.redo_description == "* 2"
        assert state.to_dict()["value"] == 105

    def test_command_index_alias(self, rewound_calc):
        assert rewound_calc.command_index == rewound_calc.cursor == 1

    def test_reset_to_initial_value(self, rewound_calc):
        assert rewound_calc.reset() == 100
        assert rewound_calc.history_length == 0
        assert not rewound_calc.can_undo

    def test_reset_to_given_value(self, calc):
        calc.operate("+", 1)
        assert calc.reset(42) == 42
        assert calc.undo(1) == 42

    def test_invalid_reset_value_keeps_state(self, rewound_calc):
        with pytest.raises(InvalidOperand):
            rewound_calc.reset("abc")
        assert rewound_calc.history_length == 2


class TestLogging:
    def test_operate_is_traced(self, calc, caplog):
        with caplog.at_level(logging.DEBUG, logger="calc_history"):
            calc.operate("+", 5)
        assert "executing 100 + 5 & history count => 0" in caplog.text
        assert "Current value = 105" in caplog.text
