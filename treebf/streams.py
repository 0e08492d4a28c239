from __future__ import annotations

from typing import BinaryIO, Iterable, Protocol

from .errors import InputError


class ByteSource(Protocol):
    def read_byte(self) -> int:
        ...


class ByteSink(Protocol):
    def write_byte(self, value: int) -> None:
        ...

    def flush(self) -> None:
        ...


class BytesSource:
    """Serves a fixed sequence of bytes, then fails like an exhausted stream."""

    def __init__(self, data: Iterable[int] = b"") -> None:
        self._data = bytes(data)
        self._position = 0

    def read_byte(self) -> int:
        if self._position >= len(self._data):
            raise InputError("cannot read input: end of input reached")
        value = self._data[self._position]
        self._position += 1
        return value


class StreamSource:
    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def read_byte(self) -> int:
        try:
            chunk = self._stream.read(1)
        except (OSError, ValueError) as exc:
            raise InputError(f"cannot read input: {exc}") from exc
        if not chunk:
            raise InputError("cannot read input: end of input reached")
        return chunk[0]


class BufferSink:
    def __init__(self) -> None:
        self.buffer = bytearray()

    def write_byte(self, value: int) -> None:
        self.buffer.append(value)

    def flush(self) -> None:
        pass

    def getvalue(self) -> bytes:
        return bytes(self.buffer)


class StreamSink:
    def __init__(self, stream: BinaryIO, buffer_size: int = 4096) -> None:
        self._stream = stream
        self._pending = bytearray()
        self._buffer_size = buffer_size

    def write_byte(self, value: int) -> None:
        self._pending.append(value)
        if value == 0x0A or len(self._pending) >= self._buffer_size:
            self.flush()

    def flush(self) -> None:
        if self._pending:
            self._stream.write(bytes(self._pending))
            self._pending.clear()
        self._stream.flush()


__all__ = [
    "BufferSink",
    "ByteSink",
    "ByteSource",
    "BytesSource",
    "StreamSink",
    "StreamSource",
]
