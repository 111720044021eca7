"""calc-history: an arithmetic accumulator with undo/redo."""

__version__ = "0.1.0"
