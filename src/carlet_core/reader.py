from __future__ import annotations

from typing import BinaryIO, Protocol

from .protocol import BUF_SIZE


class Sink(Protocol):
    def write(self, data: bytes) -> int | None: ...


class PeekableReader:
    """Forward-only cursor over a binary stream with bounded look-ahead.

    - peek(n) returns up to n bytes without consuming them. It keeps reading
      until n bytes are buffered, so a short peek only happens at end-of-stream.
    - discard/copy consume bytes. copy returns a short count only at
      end-of-stream; any other failure propagates from the underlying stream.
    """

    def __init__(self, stream: BinaryIO, buffer_size: int = BUF_SIZE):
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self._stream = stream
        self._buffer_size = buffer_size
        self._buf = bytearray()
        self._eof = False

    @property
    def exhausted(self) -> bool:
        return self._eof and not self._buf

    def _fill(self, want: int) -> None:
        while len(self._buf) < want and not self._eof:
            chunk = self._stream.read(max(want - len(self._buf), self._buffer_size - len(self._buf)))
            if not chunk:
                self._eof = True
                return
            self._buf += chunk

    def peek(self, n: int) -> bytes:
        self._fill(n)
        return bytes(self._buf[:n])

    def copy(self, sink: Sink, n: int) -> int:
        """Copy up to n bytes into sink. Returns the number of bytes copied."""
        copied = 0
        while copied < n:
            self._fill(min(n - copied, self._buffer_size))
            if not self._buf:
                break
            take = min(n - copied, len(self._buf))
            sink.write(bytes(self._buf[:take]))
            del self._buf[:take]
            copied += take
        return copied

    def discard(self, n: int) -> int:
        discarded = 0
        while discarded < n:
            self._fill(min(n - discarded, self._buffer_size))
            if not self._buf:
                break
            take = min(n - discarded, len(self._buf))
            del self._buf[:take]
            discarded += take
        return discarded
