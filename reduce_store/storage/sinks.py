"""Response sinks that artifacts are transmitted into."""

from __future__ import annotations

from typing import BinaryIO, Protocol


class ResponseSink(Protocol):
    def transmit_file(self, path: str) -> None:
        """Send the file at ``path``; raise ``FileNotFoundError`` when it is absent."""
        ...


class BufferSink:
    def __init__(self) -> None:
        self.content: bytes | None = None
        self.path: str | None = None

    def transmit_file(self, path: str) -> None:
        with open(path, "rb") as handle:
            self.content = handle.read()
        self.path = path


class StreamSink:
    def __init__(self, stream: BinaryIO, chunk_size: int = 64 * 1024) -> None:
        self.stream = stream
        self.chunk_size = chunk_size

    def transmit_file(self, path: str) -> None:
        with open(path, "rb") as handle:
            for chunk in iter(lambda: handle.read(self.chunk_size), b""):
                self.stream.write(chunk)
