from __future__ import annotations

from typing import Optional


class BrainfuckError(Exception):
    """Base class for every failure raised while loading or running a program."""


class FileLoadError(BrainfuckError):
    def __init__(self, filename: str) -> None:
        super().__init__(f"cannot load file '{filename}'")
        self.filename = filename


class StructureError(BrainfuckError):
    """Raised when loop brackets are unbalanced.

    ``side`` is ``"open"`` for a '[' that is never closed and ``"close"`` for a
    ']' with nothing to close. ``offset`` is the character offset of the
    offending bracket in the source.
    """

    def __init__(
        self,
        reason: str,
        *,
        side: str,
        offset: int,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        location = f"offset {offset}"
        if line is not None and column is not None:
            location = f"line {line}, column {column}"
        super().__init__(f"{reason} ({location})")
        self.reason = reason
        self.side = side
        self.offset = offset
        self.line = line
        self.column = column


class InputError(BrainfuckError):
    pass


class InvariantViolation(BrainfuckError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"BUG! internal invariant violated: {reason}")
        self.reason = reason


__all__ = [
    "BrainfuckError",
    "FileLoadError",
    "InputError",
    "InvariantViolation",
    "StructureError",
]
