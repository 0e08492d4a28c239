from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import InvariantViolation
from .parser import Block, Comment, Delta, Move, Node, Program, Read, Write
from .streams import ByteSink, ByteSource


logger = logging.getLogger(__name__)


@dataclass
class MachineState:
    """Tape, pointer and step counter for one program run.

    Cells at non-negative indices live in ``right``; cell ``-n`` lives at
    ``left[n]``, so ``left[0]`` never backs a real cell.
    """

    counter: int = 0
    pointer: int = 0
    right: bytearray = field(default_factory=lambda: bytearray(1))
    left: bytearray = field(default_factory=lambda: bytearray(1))

    def _half(self) -> tuple[bytearray, int]:
        if self.pointer < 0:
            half, index = self.left, -self.pointer
        else:
            half, index = self.right, self.pointer
        if index >= len(half):
            raise InvariantViolation(
                f"cell {self.pointer} is not backed by the tape (sizes {len(self.left)} {len(self.right)})"
            )
        return half, index

    @property
    def current(self) -> int:
        half, index = self._half()
        return half[index]

    @current.setter
    def current(self, value: int) -> None:
        half, index = self._half()
        half[index] = value

    def cell(self, index: int) -> int:
        """Value of any cell; cells never visited read as zero."""
        if index < 0:
            half, offset = self.left, -index
        else:
            half, offset = self.right, index
        return half[offset] if offset < len(half) else 0

    def grow(self) -> None:
        if self.pointer < 0:
            while -self.pointer >= len(self.left):
                self.left.append(0)
        else:
            while self.pointer >= len(self.right):
                self.right.append(0)


@dataclass
class Evaluator:
    source: ByteSource
    sink: ByteSink

    def run(self, program: Program, state: Optional[MachineState] = None) -> MachineState:
        state = state if state is not None else MachineState()
        state = self._eval_range(state, program, range(program.root_start, program.root_stop))
        self.sink.flush()
        logger.debug(
            "evaluation finished: counter=%d pointer=%d memory=%d/%d",
            state.counter,
            state.pointer,
            len(state.left),
            len(state.right),
        )
        return state

    def eval_nodes(self, state: MachineState, program: Program, nodes: Iterable[Node]) -> MachineState:
        for node in nodes:
            state = self.eval_node(state, program, node)
        return state

    def eval_node(self, state: MachineState, program: Program, node: Node) -> MachineState:
        if isinstance(node, Comment):
            return state

        state.counter += 1
        if isinstance(node, Delta):
            state.current = (state.current + node.amount) % 256
        elif isinstance(node, Move):
            state.pointer += node.amount
            state.grow()
        elif isinstance(node, Read):
            # a prompt written before the read must be visible to whoever answers it
            self.sink.flush()
            state.current = self.source.read_byte()
        elif isinstance(node, Write):
            self.sink.write_byte(state.current)
        elif isinstance(node, Block):
            if state.current != 0:
                state = self._eval_range(state, program, program.indices(node), node)
        else:
            raise InvariantViolation(f"unknown node type {type(node).__name__}")
        return state

    def _eval_range(
        self,
        state: MachineState,
        program: Program,
        indices: range,
        block: Optional[Block] = None,
    ) -> MachineState:
        """Evaluate ``indices`` in order, repeating them while ``block`` guards them.

        Nested loops are kept on an explicit stack of frames, so nesting depth is
        not bounded by the interpreter's recursion limit.
        """
        arena = program.arena
        frames: List[Tuple[Iterator[int], Optional[Block]]] = [(iter(indices), block)]
        while frames:
            position, guard = frames[-1]
            index = next(position, None)
            if index is None:
                frames.pop()
                if guard is not None and state.current != 0:
                    frames.append((iter(program.indices(guard)), guard))
                continue

            node = arena[index]
            if isinstance(node, Block):
                state.counter += 1
                if state.current != 0:
                    frames.append((iter(program.indices(node)), node))
            else:
                state = self.eval_node(state, program, node)
        return state


__all__ = ["Evaluator", "MachineState"]
