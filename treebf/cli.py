from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

from .errors import BrainfuckError, FileLoadError
from .evaluator import Evaluator
from .lexer import lex
from .parser import parse
from .report import RunReport, format_report
from .streams import ByteSink, ByteSource, BytesSource, StreamSink, StreamSource


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FAILURE = 2


class UsageError(Exception):
    pass


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise UsageError(f"{message} (see --help)")


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="treebf", description="Brainfuck tree-walking interpreter")
    parser.add_argument("files", nargs="+", help="Brainfuck source files, run in the given order")
    parser.add_argument(
        "-r",
        "--report",
        action="store_true",
        help="Print the final machine state and phase timings of each file to stderr",
    )
    parser.add_argument(
        "--input",
        help="Input supplied to ',' instead of standard input (encoded as UTF-8)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log pipeline phases to stderr",
    )
    return parser


def _read_source(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileLoadError(path) from exc


def run_file(path: str, evaluator: Evaluator) -> RunReport:
    report = RunReport(filename=path)
    report.mark("start")

    source_text = _read_source(path)
    report.mark("read")
    logger.debug("loaded %s (%d characters)", path, len(source_text))

    tokens = lex(source_text)
    report.mark("lex")
    logger.debug("lexed %d tokens", len(tokens))

    program = parse(tokens)
    report.mark("parse")
    logger.debug("parsed %d nodes", len(program.arena))

    report.state = evaluator.run(program)
    report.mark("eval")
    return report


def run(
    files: List[str],
    *,
    source: ByteSource,
    sink: ByteSink,
    with_report: bool = False,
) -> None:
    evaluator = Evaluator(source=source, sink=sink)
    for path in files:
        report = run_file(path, evaluator)
        if with_report:
            print(format_report(report), file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    try:
        args = _build_parser().parse_args(argv)
    except UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.input is not None:
        source: ByteSource = BytesSource(args.input.encode("utf-8"))
    else:
        source = StreamSource(sys.stdin.buffer)
    sink = StreamSink(sys.stdout.buffer)

    try:
        run(args.files, source=source, sink=sink, with_report=args.report)
    except BrainfuckError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        sink.flush()

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
