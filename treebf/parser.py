from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple

from .errors import InvariantViolation, StructureError
from .lexer import Token, TokenKind, lex


# === Nodes ===


class Node:
    pass


@dataclass
class Comment(Node):
    text: str


@dataclass
class Delta(Node):
    """Net change to the current cell; positive for increments."""

    amount: int


@dataclass
class Move(Node):
    """Net pointer displacement; positive moves right."""

    amount: int


@dataclass
class Read(Node):
    pass


@dataclass
class Write(Node):
    pass


@dataclass
class Block(Node):
    """Loop body stored as the half-open range ``start:stop`` of the arena."""

    start: int
    stop: int


@dataclass
class Program:
    arena: List[Node] = field(default_factory=list)
    root_start: int = 0
    root_stop: int = 0

    def indices(self, block: Block) -> range:
        return range(block.start, block.stop)

    def body(self, block: Block) -> List[Node]:
        return self.arena[block.start:block.stop]

    def nodes(self) -> List[Node]:
        return self.arena[self.root_start:self.root_stop]

    def walk(self) -> Iterator[Node]:
        """Yield every node in source order, descending into loop bodies."""
        stack: List[Iterator[int]] = [iter(range(self.root_start, self.root_stop))]
        while stack:
            index = next(stack[-1], None)
            if index is None:
                stack.pop()
                continue
            node = self.arena[index]
            yield node
            if isinstance(node, Block):
                stack.append(iter(self.indices(node)))

    def to_tree(self) -> List[Dict[str, Any]]:
        root: List[Dict[str, Any]] = []
        stack: List[Tuple[Iterator[int], List[Dict[str, Any]]]] = [
            (iter(range(self.root_start, self.root_stop)), root)
        ]
        while stack:
            position, rendered = stack[-1]
            index = next(position, None)
            if index is None:
                stack.pop()
                continue
            node = self.arena[index]
            if isinstance(node, Block):
                body: List[Dict[str, Any]] = []
                rendered.append({"kind": "block", "body": body})
                stack.append((iter(self.indices(node)), body))
            else:
                rendered.append(_describe(node))
        return root

    def flatten(self) -> List[Dict[str, Any]]:
        """Describe the arena entry by entry; blocks refer to their body by range."""
        return [
            {"kind": "block", "start": node.start, "stop": node.stop}
            if isinstance(node, Block)
            else _describe(node)
            for node in self.arena
        ]


def _describe(node: Node) -> Dict[str, Any]:
    if isinstance(node, Comment):
        return {"kind": "comment", "text": node.text}
    if isinstance(node, Delta):
        return {"kind": "delta", "amount": node.amount}
    if isinstance(node, Move):
        return {"kind": "move", "amount": node.amount}
    if isinstance(node, Read):
        return {"kind": "read"}
    if isinstance(node, Write):
        return {"kind": "write"}
    raise InvariantViolation(f"unknown node type {type(node).__name__}")


# === Parser ===


def parse(tokens: List[Token]) -> Program:
    """Build a ``Program`` from ``tokens``, coalescing adjacent homogeneous operations.

    Runs of ``+``/``-`` collapse into a single ``Delta`` and runs of ``<``/``>``
    into a single ``Move``, each holding the net value. ``,`` and ``.`` are never
    merged because every one of them is an observable I/O operation. Raises
    ``StructureError`` when a bracket is unmatched.
    """
    arena: List[Node] = []
    spans: List[List[Node]] = [[]]
    # (offset, line, column) of each '[' still open
    opens: List[Tuple[int, int, int]] = []
    line, column = 1, 1

    for offset, token in enumerate(tokens):
        span = spans[-1]
        last = span[-1] if span else None
        kind = token.kind

        if kind is TokenKind.COMMENT:
            if isinstance(last, Comment):
                last.text += token.char
            else:
                span.append(Comment(token.char))
        elif kind is TokenKind.INCREMENT or kind is TokenKind.DECREMENT:
            step = 1 if kind is TokenKind.INCREMENT else -1
            if isinstance(last, Delta):
                last.amount += step
            else:
                span.append(Delta(step))
        elif kind is TokenKind.MOVE_RIGHT or kind is TokenKind.MOVE_LEFT:
            step = 1 if kind is TokenKind.MOVE_RIGHT else -1
            if isinstance(last, Move):
                last.amount += step
            else:
                span.append(Move(step))
        elif kind is TokenKind.INPUT:
            span.append(Read())
        elif kind is TokenKind.OUTPUT:
            span.append(Write())
        elif kind is TokenKind.LOOP_OPEN:
            spans.append([])
            opens.append((offset, line, column))
        elif kind is TokenKind.LOOP_CLOSE:
            if len(spans) == 1:
                raise StructureError(
                    "found ']' without a matching '['",
                    side="close",
                    offset=offset,
                    line=line,
                    column=column,
                )
            body = spans.pop()
            opens.pop()
            start, stop = _lay_out(arena, body)
            spans[-1].append(Block(start, stop))
        else:
            raise InvariantViolation(f"unhandled token kind {kind!r}")

        if token.char == "\n":
            line, column = line + 1, 1
        else:
            column += 1

    if len(spans) > 1:
        offset, open_line, open_column = opens[-1]
        raise StructureError(
            "found '[' that was not closed with a matching ']'",
            side="open",
            offset=offset,
            line=open_line,
            column=open_column,
        )
    if not spans:
        raise InvariantViolation("expecting the span stack to hold the root span at end of parsing")

    root_start, root_stop = _lay_out(arena, spans[0])
    return Program(arena=arena, root_start=root_start, root_stop=root_stop)


def parse_source(source: str) -> Program:
    return parse(lex(source))


def _lay_out(arena: List[Node], span: List[Node]) -> Tuple[int, int]:
    start = len(arena)
    arena.extend(span)
    return start, len(arena)


__all__ = [
    "Block",
    "Comment",
    "Delta",
    "Move",
    "Node",
    "Program",
    "Read",
    "Write",
    "parse",
    "parse_source",
]
