"""Streaming piece commitment (commP) accumulator.

Input bytes are Fr32-padded (every 127 bytes become four 254-bit field
elements in 128 bytes) and reduced with a binary sha256-trunc254 Merkle tree.
The tree is zero-padded on the right up to the next power of two.

Only the right spine of the tree is kept in memory, so arbitrarily large
shards can be folded in with constant state.
"""
from __future__ import annotations

import enum
import hashlib

from .errors import DigestError
from .protocol import (
    FR32_IN,
    FR32_OUT,
    MAX_LAYERS,
    MAX_PIECE_PAYLOAD,
    MIN_PIECE_PAYLOAD,
    NODE_SIZE,
)

_FR32_MASK = (1 << 254) - 1


def trunc254(digest: bytes) -> bytes:
    """Clear the top two bits so the node is a valid BLS12-381 field element."""
    return digest[:-1] + bytes([digest[-1] & 0x3F])


def node_hash(left: bytes, right: bytes) -> bytes:
    h = hashlib.sha256()
    h.update(left)
    h.update(right)
    return trunc254(h.digest())


def _zero_comms(layers: int) -> list[bytes]:
    out = [bytes(NODE_SIZE)]
    for _ in range(layers):
        out.append(node_hash(out[-1], out[-1]))
    return out


# ZERO_COMMS[i] is the root of an all-zero subtree with 2**i leaves
ZERO_COMMS = _zero_comms(MAX_LAYERS)


def fr32_pad(block: bytes) -> bytes:
    """Expand 127 bytes into 128, inserting two zero bits every 254 bits."""
    if len(block) != FR32_IN:
        raise ValueError(f"fr32 blocks are {FR32_IN} bytes, got {len(block)}")
    n = int.from_bytes(block, "little")
    return b"".join(
        ((n >> (254 * i)) & _FR32_MASK).to_bytes(NODE_SIZE, "little") for i in range(4)
    )


def padded_piece_size(payload_size: int) -> int:
    quads = -(-payload_size // FR32_IN)
    padded = max(quads, 1) * FR32_OUT
    return 1 << (padded - 1).bit_length()


class State(enum.Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    FINALIZED = "finalized"


class CommPAccumulator:
    """write() bytes, finalize() -> (commP, padded size), reset(), repeat.

    State moves IDLE -> ACCUMULATING on the first write, to FINALIZED on
    finalize(), and back to IDLE on reset(). Writing to or finalizing a
    FINALIZED accumulator is a DigestError.
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.state = State.IDLE
        self.size = 0
        self._carry = bytearray()
        # _layers[i] holds a left node at height i waiting for its right sibling
        self._layers: list[bytes | None] = []

    def write(self, data: bytes) -> int:
        if self.state is State.FINALIZED:
            raise DigestError("write after finalize without reset")
        if self.size + len(data) > MAX_PIECE_PAYLOAD:
            raise DigestError(
                f"piece payload would exceed {MAX_PIECE_PAYLOAD} bytes (have {self.size})"
            )
        self.state = State.ACCUMULATING
        self.size += len(data)

        self._carry += data
        full = len(self._carry) - len(self._carry) % FR32_IN
        for pos in range(0, full, FR32_IN):
            self._push_quad(fr32_pad(bytes(self._carry[pos:pos + FR32_IN])))
        del self._carry[:full]
        return len(data)

    def _push_quad(self, padded: bytes) -> None:
        for pos in range(0, FR32_OUT, NODE_SIZE):
            self._push_leaf(padded[pos:pos + NODE_SIZE])

    def _push_leaf(self, node: bytes) -> None:
        height = 0
        while True:
            if height == len(self._layers):
                self._layers.append(None)
            left = self._layers[height]
            if left is None:
                self._layers[height] = node
                return
            self._layers[height] = None
            node = node_hash(left, node)
            height += 1

    def finalize(self) -> tuple[bytes, int]:
        if self.state is State.FINALIZED:
            raise DigestError("finalize called twice without reset")
        if self.size < MIN_PIECE_PAYLOAD:
            raise DigestError(
                f"commP is not defined for inputs shorter than {MIN_PIECE_PAYLOAD} bytes "
                f"(got {self.size})"
            )

        if self._carry:
            tail = bytes(self._carry) + bytes(FR32_IN - len(self._carry))
            self._carry.clear()
            self._push_quad(fr32_pad(tail))

        padded = padded_piece_size(self.size)
        depth = (padded // NODE_SIZE).bit_length() - 1
        if len(self._layers) > depth + 1:
            raise DigestError(
                f"tree height {len(self._layers) - 1} exceeds padded depth {depth}"
            )

        node: bytes | None = None
        for height in range(depth):
            left = self._layers[height] if height < len(self._layers) else None
            if left is not None:
                node = node_hash(left, node if node is not None else ZERO_COMMS[height])
            elif node is not None:
                node = node_hash(node, ZERO_COMMS[height])
        if node is None and depth < len(self._layers):
            node = self._layers[depth]
        if node is None:
            raise DigestError("accumulator holds no nodes")

        self.state = State.FINALIZED
        return node, padded


def compute_commp(data: bytes) -> tuple[bytes, int]:
    """One-shot commP over data."""
    acc = CommPAccumulator()
    acc.write(data)
    return acc.finalize()
