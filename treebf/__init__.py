from .errors import BrainfuckError, FileLoadError, InputError, InvariantViolation, StructureError
from .evaluator import Evaluator, MachineState
from .lexer import Token, TokenKind, lex
from .parser import Block, Comment, Delta, Move, Program, Read, Write, parse, parse_source
from .streams import BufferSink, BytesSource

__all__ = [
    "Block",
    "BrainfuckError",
    "BufferSink",
    "BytesSource",
    "Comment",
    "Delta",
    "Evaluator",
    "FileLoadError",
    "InputError",
    "InvariantViolation",
    "MachineState",
    "Move",
    "Program",
    "Read",
    "StructureError",
    "Token",
    "TokenKind",
    "Write",
    "lex",
    "parse",
    "parse_source",
]
