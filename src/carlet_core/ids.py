"""carlet - piece commitment identifiers."""
from __future__ import annotations

from multiformats import CID, multihash

from .errors import IdentifierEncodingError
from .protocol import COMMP_CODEC, COMMP_HASH, NODE_SIZE


def commitment_to_cid(raw: bytes) -> CID:
    """Wrap a raw 32-byte commP into a CIDv1 (fil-commitment-unsealed)."""
    if len(raw) != NODE_SIZE:
        raise IdentifierEncodingError(f"commitments must be {NODE_SIZE} bytes, got {len(raw)}")
    try:
        mh = multihash.wrap(bytes(raw), COMMP_HASH)
        return CID("base32", 1, COMMP_CODEC, mh)
    except (KeyError, ValueError) as e:
        raise IdentifierEncodingError(f"failed to encode piece CID: {e}") from e


def cid_to_commitment(cid: CID | str) -> bytes:
    """Inverse of commitment_to_cid."""
    try:
        if isinstance(cid, str):
            cid = CID.decode(cid)
        codec, hashfun, raw = cid.codec.name, cid.hashfun.name, bytes(cid.raw_digest)
    except (KeyError, ValueError, TypeError) as e:
        raise IdentifierEncodingError(f"not a CID: {cid!r} ({e})") from e

    if codec != COMMP_CODEC or hashfun != COMMP_HASH:
        raise IdentifierEncodingError(f"not a piece CID: codec={codec} hash={hashfun}")
    if len(raw) != NODE_SIZE:
        raise IdentifierEncodingError(f"piece CID digest is {len(raw)} bytes, expected {NODE_SIZE}")
    return raw
