"""Command pattern for undoable arithmetic.

Every change to the accumulator goes through a Command so that the history
cursor stays consistent with the value. A command only holds its operator and
operand: forward and inverse receive the current value when they run.
"""

from __future__ import annotations

import math
import numbers
import operator as _op
from abc import ABC, abstractmethod
from typing import Any, Callable

from calc_history.core.errors import (
    DivisionByZero,
    InvalidOperand,
    IrreversibleOperation,
    NonFiniteResult,
)
from calc_history.core.models import Number, Operator

_APPLY: dict[Operator, Callable[[Number, Number], Number]] = {
    Operator.ADD: _op.add,
    Operator.SUB: _op.sub,
    Operator.MUL: _op.mul,
    Operator.DIV: _op.truediv,
}


class Command(ABC):
    """Abstract base for all reversible commands."""

    @abstractmethod
    def forward(self, value: Number) -> Number: ...

    @abstractmethod
    def inverse(self, value: Number) -> Number: ...

    @property
    @abstractmethod
    def description(self) -> str: ...


class ArithmeticCommand(Command):
    """Apply ``value <operator> operand``; the inverse uses the inverse operator."""

    def __init__(self, operator: Operator, operand: Number) -> None:
        self._operator = operator
        self._operand = operand

    @property
    def operator(self) -> Operator:
        return self._operator

    @property
    def operand(self) -> Number:
        return self._operand

    def forward(self, value: Number) -> Number:
        return self._apply(self._operator, value)

    def inverse(self, value: Number) -> Number:
        return self._apply(self._operator.inverse, value)

    def _apply(self, operator: Operator, value: Number) -> Number:
        try:
            result = _APPLY[operator](value, self._operand)
            finite = math.isfinite(result)
        except OverflowError:
            finite = False
        if not finite:
            raise NonFiniteResult(f"{operator.value} {self._operand}", value)
        return result

    @property
    def description(self) -> str:
        return f"{self._operator.value} {self._operand}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArithmeticCommand):
            return NotImplemented
        return (self._operator, self._operand) == (other._operator, other._operand)

    def __hash__(self) -> int:
        return hash((self._operator, self._operand))

    def __repr__(self) -> str:
        return f"ArithmeticCommand({self._operator.value!r}, {self._operand!r})"


def check_number(value: object) -> Number:
    """Return *value* if it is a finite real number; raise InvalidOperand otherwise."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidOperand(value)
    try:
        finite = math.isfinite(value)
    except OverflowError:
        finite = False
    if not finite:
        raise InvalidOperand(value)
    return value


def coerce_number(raw: Any) -> Any:
    """Turn a numeric string ("5", "2.5", "1e3") into an int or float.

    Anything else is returned unchanged for ``check_number`` to accept or reject.
    """
    if isinstance(raw, str):
        text = raw.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return raw
    return raw


def build_command(operator: Operator | str, operand: Number) -> ArithmeticCommand:
    """Validate *operator* and *operand* and return the matching command.

    Raises:
        InvalidOperator: operator is not one of ``+ - * /``.
        InvalidOperand: operand is not a finite real number.
        DivisionByZero: ``/`` with a zero operand.
        IrreversibleOperation: ``*`` with a zero operand.
    """
    op = Operator.parse(operator)
    check_number(operand)
    if operand == 0:
        if op is Operator.DIV:
            raise DivisionByZero()
        if op is Operator.MUL:
            raise IrreversibleOperation(f"{op.value} {operand}")
    return ArithmeticCommand(op, operand)
