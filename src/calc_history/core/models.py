"""Core data model.

Keep this module free of side-effects so it can be used from the engine, the
web layer and tests alike.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Union

from calc_history.core.errors import InvalidOperator

if TYPE_CHECKING:
    from calc_history.core.commands import Command

Number = Union[int, float]


# ---------------------------------------------------------------------------
# Operator
# ---------------------------------------------------------------------------


class Operator(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @classmethod
    def parse(cls, symbol: "Operator | str") -> "Operator":
        """Return the member for *symbol*; raise InvalidOperator otherwise."""
        if isinstance(symbol, cls):
            return symbol
        try:
            return cls(symbol)
        except ValueError:
            raise InvalidOperator(symbol) from None

    @property
    def inverse(self) -> "Operator":
        return _INVERSES[self]


_INVERSES = {
    Operator.ADD: Operator.SUB,
    Operator.SUB: Operator.ADD,
    Operator.MUL: Operator.DIV,
    Operator.DIV: Operator.MUL,
}


# ---------------------------------------------------------------------------
# History entry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HistoryEntry:
    """One executed command in the log.

    ``run`` re-applies the command and ``undo`` reverses it. Both take the
    current value and return the new one.
    """

    command: "Command"
    run: Callable[[Number], Number]
    undo: Callable[[Number], Number]

    @classmethod
    def for_command(cls, command: "Command") -> "HistoryEntry":
        return cls(command=command, run=command.forward, undo=command.inverse)

    @property
    def description(self) -> str:
        return self.command.description


# ---------------------------------------------------------------------------
# Read-only snapshot for presentation layers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CalculatorState:
    value: Number
    cursor: int  # number of applied entries (commandIndex)
    history_length: int
    can_undo: bool
    can_redo: bool
    undo_description: str | None = None
    redo_description: str | None = None

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "cursor": self.cursor,
            "history_length": self.history_length,
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
            "undo_description": self.undo_description,
            "redo_description": self.redo_description,
        }
