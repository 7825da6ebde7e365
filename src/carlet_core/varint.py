"""Unsigned LEB128 length prefixes, as used by CAR framing."""
from __future__ import annotations

from multiformats import varint

from .errors import UndecodableVarint
from .protocol import VARINT_SIZE


def decode_uvarint(buf: bytes, offset: int | None = None) -> tuple[int, int]:
    """Decode the varint at the start of buf.

    Returns (value, width). Bytes after the varint are ignored. Non-minimal
    encodings such as b"\\x80\\x00" are accepted; a prefix that does not end
    within VARINT_SIZE bytes or overflows 64 bits is not.
    """
    n = 0
    shift = 0
    for i, val in enumerate(buf[:VARINT_SIZE]):
        if val < 0x80:
            if i == VARINT_SIZE - 1 and val > 1:
                raise UndecodableVarint("undecodable varint (overflows 64 bits)", offset)
            return n | (val << shift), i + 1
        n |= (val & 0x7F) << shift
        shift += 7

    if len(buf) >= VARINT_SIZE:
        raise UndecodableVarint(f"undecodable varint (longer than {VARINT_SIZE} bytes)", offset)
    raise UndecodableVarint(f"undecodable varint (unterminated after {len(buf)} bytes)", offset)


def encode_uvarint(value: int) -> bytes:
    return varint.encode(value)
