from __future__ import annotations

from typing import BinaryIO
from warnings import warn

from carlet_core.errors import FrameTooLarge, MalformedHeader, StreamIOError, UndecodableVarint
from carlet_core.protocol import BUF_SIZE, MAX_BLOCK_SIZE, VARINT_SIZE
from carlet_core.reader import PeekableReader, Sink
from carlet_core.varint import decode_uvarint


class FrameSplitter:
    """Walks a CAR stream one whole frame at a time.

    - strip_header() discards the stream header without interpreting it.
    - fill_shard() copies whole frames into a sink until a byte target is met.
    - offset is the absolute stream position, used only in error messages.
    """

    def __init__(
        self,
        stream: BinaryIO,
        max_frame_size: int = MAX_BLOCK_SIZE,
        buffer_size: int = BUF_SIZE,
    ):
        self.reader = PeekableReader(stream, buffer_size)
        self.max_frame_size = max_frame_size
        self.offset = 0
        self.frame_count = 0
        self.torn_tail = False

    def _peek(self, n: int) -> bytes:
        try:
            return self.reader.peek(n)
        except OSError as e:
            raise StreamIOError(f"unexpected read error ({e})", self.offset) from e

    def at_end(self) -> bool:
        """True once the input is exhausted (blocks until that is known)."""
        return self.torn_tail or not self._peek(1)

    def strip_header(self) -> int:
        """Consume the stream header. Returns the offset of the first frame."""
        maybe_header_len = self._peek(VARINT_SIZE)
        if not maybe_header_len:
            raise MalformedHeader("failed to read header: empty stream", self.offset)

        try:
            hdr_len, vi_len = decode_uvarint(maybe_header_len)
        except UndecodableVarint as e:
            raise MalformedHeader(f"unexpected header prefix: {e}", self.offset) from e
        if hdr_len <= 0:
            raise MalformedHeader(
                f"unexpected header len = {hdr_len}, varint len = {vi_len}", self.offset
            )

        # Ignoring header decoding for now
        want = vi_len + hdr_len
        try:
            consumed = self.reader.discard(want)
        except OSError as e:
            raise StreamIOError(f"failed to discard header ({e})", self.offset) from e
        self.offset += consumed
        if consumed < want:
            raise MalformedHeader(
                f"truncated header: expected {want} bytes, stream ended after {consumed}",
                self.offset,
            )
        return self.offset

    def next_frame(self) -> tuple[int, int] | None:
        """Decode the next frame prefix without consuming it.

        Returns (varint width, payload length), or None at end-of-stream.
        """
        maybe_next_frame_len = self._peek(VARINT_SIZE)
        if not maybe_next_frame_len:
            return None

        # A car file with trailing garbage behind it fails here
        frame_len, vi_len = decode_uvarint(maybe_next_frame_len, self.offset)
        if frame_len > self.max_frame_size:
            raise FrameTooLarge(
                f"aborting car stream parse: unexpectedly large frame length of {frame_len} bytes",
                self.offset,
            )
        return vi_len, frame_len

    def fill_shard(self, sink: Sink, target_size: int) -> int:
        """Copy whole frames into sink until target_size bytes or end-of-stream.

        The target is only checked between frames, so a shard always holds at
        least one frame and overshoots by at most one. Returns bytes copied.
        """
        carlet_len = 0
        while carlet_len < target_size:
            frame = self.next_frame()
            if frame is None:
                break
            vi_len, frame_len = frame
            want = vi_len + frame_len

            start = self.offset
            try:
                actual = self.reader.copy(sink, want)
            except OSError as e:
                raise StreamIOError(f"unexpected error copying frame ({e})", start) from e
            self.offset += actual
            carlet_len += actual
            self.frame_count += 1

            if actual < want:
                # Only the final frame may be short, and only at true end-of-stream
                self.torn_tail = True
                warn(f"Torn final frame at offset {start}: expected {want} bytes, got {actual}")
                break
        return carlet_len
