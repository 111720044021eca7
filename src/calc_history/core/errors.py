"""Errors raised by the calculator core.

Every error is raised before the engine touches its state, so a caller that
catches one can keep using the same engine.
"""

from __future__ import annotations


class CalculatorError(ValueError):
    """Base class for rejected calculator operations."""


class InvalidOperator(CalculatorError):
    def __init__(self, operator: object) -> None:
        super().__init__(f"Operator {operator!r} is not supported")
        self.operator = operator


class InvalidOperand(CalculatorError):
    def __init__(self, operand: object) -> None:
        super().__init__(f"Operand {operand!r} is not a finite number")
        self.operand = operand


class DivisionByZero(CalculatorError):
    def __init__(self) -> None:
        super().__init__("Division by zero")


class IrreversibleOperation(CalculatorError):
    """Multiplying by zero loses the value, so it cannot be undone."""

    def __init__(self, description: str) -> None:
        super().__init__(f"Operation {description!r} cannot be undone")
        self.description = description


class NonFiniteResult(CalculatorError):
    def __init__(self, description: str, value: float) -> None:
        super().__init__(f"Operation {description!r} on {value!r} does not give a finite number")
        self.description = description
        self.value = value


class InvalidCount(CalculatorError):
    def __init__(self, count: object) -> None:
        super().__init__(f"Step count must be a non-negative integer, got {count!r}")
        self.count = count
