"""Error types for carlet."""
from __future__ import annotations


class CarletError(Exception):
    """Base exception for carlet errors.

    Carries the absolute stream offset at which the problem was detected.
    """

    def __init__(self, message: str, offset: int | None = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} at offset {offset}"
        super().__init__(message)


class FormatError(CarletError, ValueError):
    """Input does not conform to the CAR framing."""
    pass


class MalformedHeader(FormatError):
    """The stream header prefix is absent, zero or truncated."""
    pass


class UndecodableVarint(FormatError):
    """A frame length prefix could not be decoded (usually trailing garbage)."""
    pass


class FrameTooLarge(FormatError):
    """A frame length prefix exceeds MAX_BLOCK_SIZE."""
    pass


class StreamIOError(CarletError):
    """Read, create, write or close failure other than clean end-of-stream."""
    pass


class RenameError(StreamIOError):
    """A finalized shard could not be moved to its commitment-bearing name."""
    pass


class DigestError(CarletError):
    """The piece commitment accumulator was used outside its invariants."""
    pass


class IdentifierEncodingError(CarletError):
    """A raw commitment could not be wrapped into (or out of) a CID."""
    pass
