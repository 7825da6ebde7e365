"""carlet core - CAR framing, piece commitments and identifiers."""
from .commp import CommPAccumulator, compute_commp
from .ids import cid_to_commitment, commitment_to_cid
from .protocol import MAX_BLOCK_SIZE, NUL_ROOT_CAR_HEADER, SHARD_HEADER
from .reader import PeekableReader
from .varint import decode_uvarint, encode_uvarint

__all__ = [
    "CommPAccumulator",
    "compute_commp",
    "cid_to_commitment",
    "commitment_to_cid",
    "MAX_BLOCK_SIZE",
    "NUL_ROOT_CAR_HEADER",
    "SHARD_HEADER",
    "PeekableReader",
    "decode_uvarint",
    "encode_uvarint",
]
