from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .evaluator import MachineState


_UNITS = (
    (1.0, "s"),
    (1e-3, "ms"),
    (1e-6, "µs"),
)


@dataclass
class RunReport:
    filename: str
    state: Optional[MachineState] = None
    marks: List[Tuple[str, float]] = field(default_factory=list)

    def mark(self, phase: str) -> None:
        self.marks.append((phase, time.perf_counter()))

    def timings(self) -> List[Tuple[str, float]]:
        """Elapsed seconds of every phase, measured from the previous mark."""
        return [
            (phase, end - start)
            for (_, start), (phase, end) in zip(self.marks, self.marks[1:])
        ]


def format_duration(seconds: float) -> str:
    for scale, unit in _UNITS:
        if seconds >= scale:
            return f"{seconds / scale:.2f}{unit}"
    return f"{seconds / 1e-9:.2f}ns"


def format_report(report: RunReport) -> str:
    lines: List[str] = []
    if report.state is not None:
        state = report.state
        lines.append("State:")
        lines.append(f"  counter: {state.counter}")
        lines.append(f"  memory: {len(state.left)} {len(state.right)}")
    lines.append("Timings:")
    for phase, elapsed in report.timings():
        lines.append(f"  {phase}: {format_duration(elapsed)}")
    return "\n".join(lines)


__all__ = ["RunReport", "format_duration", "format_report"]
