from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List


class TokenKind(str, Enum):
    DECREMENT = "-"
    INCREMENT = "+"
    MOVE_RIGHT = ">"
    MOVE_LEFT = "<"
    INPUT = ","
    OUTPUT = "."
    LOOP_OPEN = "["
    LOOP_CLOSE = "]"
    COMMENT = "comment"


_SYNTAX = {
    kind.value: kind for kind in TokenKind if kind is not TokenKind.COMMENT
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    char: str


def lex(source: str) -> List[Token]:
    """Classify every character of ``source``; nothing is dropped or merged."""
    return [Token(_SYNTAX.get(char, TokenKind.COMMENT), char) for char in source]


__all__ = ["Token", "TokenKind", "lex"]
