"""Calculator: the command history engine.

The engine owns the accumulator value and the command log. Callers only go
through ``operate``, ``undo`` and ``redo`` and observe the result through the
read-only properties or a ``state()`` snapshot.

Usage::

    calc = Calculator(100)
    calc.operate("+", 5)   # 105
    calc.operate("*", 2)   # 210
    calc.undo(2)           # 100
    calc.redo(1)           # 105
"""

from __future__ import annotations

import logging

from calc_history.core.commands import ArithmeticCommand, build_command, check_number
from calc_history.core.errors import IrreversibleOperation, NonFiniteResult
from calc_history.core.history import CommandHistory
from calc_history.core.models import CalculatorState, HistoryEntry, Number, Operator

_log = logging.getLogger(__name__)


class Calculator:
    """Single-writer accumulator with undo/redo over a command log.

    Not thread-safe: callers serialise calls (the web layer holds one lock
    per session).
    """

    def __init__(self, initial_value: Number = 0) -> None:
        self._initial_value = check_number(initial_value)
        self._value = self._initial_value
        self._history = CommandHistory()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def operate(self, operator: Operator | str, operand: Number) -> Number:
        """Apply ``value <operator> operand`` and record it.

        Any redoable entries left by a previous ``undo`` are discarded.

        Raises:
            CalculatorError: the operation was rejected; nothing changed.
            IrreversibleOperation: the result could not be undone exactly.
        """
        command = build_command(operator, operand)
        _log.debug(
            "executing %s %s & history count => %d",
            self._value, command.description, len(self._history),
        )
        entry = HistoryEntry.for_command(command)
        new_value = entry.run(self._value)
        self._check_reversible(command, new_value)

        self._history.record(entry)
        self._value = new_value
        _log.debug("Current value = %s", self._value)
        return self._value

    def _check_reversible(self, command: ArithmeticCommand, new_value: Number) -> None:
        """Reject a command whose inverse cannot bring *new_value* back.

        Near the float limits the inverse overflows, and a product that
        underflows to zero has lost the value altogether.
        """
        try:
            command.inverse(new_value)
        except NonFiniteResult:
            raise IrreversibleOperation(command.description) from None
        if (
            command.operator in (Operator.MUL, Operator.DIV)
            and new_value == 0
            and self._value != 0
        ):
            raise IrreversibleOperation(command.description)

    def undo(self, count: int = 1) -> Number:
        """Undo up to *count* entries, most recent first.

        Counts larger than the applied history are clamped.
        """
        steps = self._history.undo_steps(count)
        if not steps:
            return self._value

        value = self._value
        for entry in steps:
            value = entry.undo(value)

        self._value = value
        self._history.commit_undo(len(steps))
        _log.debug("Undid %d of %d requested; current value = %s", len(steps), count, value)
        return self._value

    def redo(self, count: int = 1) -> Number:
        """Redo up to *count* undone entries, oldest first.

        Counts larger than the undone history are clamped.
        """
        steps = self._history.redo_steps(count)
        if not steps:
            return self._value

        value = self._value
        for entry in steps:
            value = entry.run(value)

        self._value = value
        self._history.commit_redo(len(steps))
        _log.debug("Redid %d of %d requested; current value = %s", len(steps), count, value)
        return self._value

    def reset(self, value: Number | None = None) -> Number:
        """Drop the whole history and restart from *value* (or the initial value)."""
        new_value = self._initial_value if value is None else check_number(value)
        self._history.clear()
        self._value = new_value
        _log.debug("Reset; current value = %s", self._value)
        return self._value

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def value(self) -> Number:
        return self._value

    @property
    def cursor(self) -> int:
        """Number of history entries currently applied."""
        return self._history.cursor

    command_index = cursor

    @property
    def history_length(self) -> int:
        return len(self._history)

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return self._history.entries

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def state(self) -> CalculatorState:
        return CalculatorState(
            value=self._value,
            cursor=self._history.cursor,
            history_length=len(self._history),
            can_undo=self._history.can_undo,
            can_redo=self._history.can_redo,
            undo_description=self._history.undo_description,
            redo_description=self._history.redo_description,
        )
