from __future__ import annotations

import threading
import time
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from treebf.errors import InputError, StructureError
from treebf.evaluator import Evaluator
from treebf.parser import Program, parse_source
from treebf.streams import BufferSink, BytesSource


class ParseRequest(BaseModel):
    code: str = ""


class ParseResponse(BaseModel):
    arena: List[Dict[str, Any]]
    root_start: int
    root_stop: int
    node_count: int


class RunRequest(BaseModel):
    code: str = ""
    input: str = Field(default="", description="Program input, encoded as UTF-8")


class RunResponse(BaseModel):
    output: str
    output_bytes: List[int]
    counter: int
    pointer: int
    tape_left: int
    tape_right: int
    elapsed: float


def _parse_or_422(code: str) -> Program:
    try:
        return parse_source(code)
    except StructureError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc


def create_app(run_lock: Optional[threading.Lock] = None) -> FastAPI:
    # one program in flight per process; sync endpoints run on a thread pool
    lock = run_lock or threading.Lock()
    app = FastAPI(title="treebf playground API", version="0.1.0")

    @app.post("/api/parse", response_model=ParseResponse)
    def parse_program(payload: ParseRequest) -> ParseResponse:
        program = _parse_or_422(payload.code)
        return ParseResponse(
            arena=program.flatten(),
            root_start=program.root_start,
            root_stop=program.root_stop,
            node_count=len(program.arena),
        )

    @app.post("/api/run", response_model=RunResponse)
    def run_program(payload: RunRequest) -> RunResponse:
        program = _parse_or_422(payload.code)
        sink = BufferSink()
        evaluator = Evaluator(source=BytesSource(payload.input.encode("utf-8")), sink=sink)

        with lock:
            started = time.perf_counter()
            try:
                state = evaluator.run(program)
            except InputError as exc:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=str(exc),
                ) from exc
            elapsed = time.perf_counter() - started

        output = sink.getvalue()
        return RunResponse(
            output=output.decode("latin-1"),
            output_bytes=list(output),
            counter=state.counter,
            pointer=state.pointer,
            tape_left=len(state.left),
            tape_right=len(state.right),
            elapsed=elapsed,
        )

    return app


__all__ = ["create_app"]
