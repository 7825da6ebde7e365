import hashlib
import random
import sys
from pathlib import Path

import cbor2
from multiformats import CID, multihash

from carlet_core.varint import encode_uvarint

# --- CONFIGURATION ---
DEFAULT_BLOCKS = 64
DEFAULT_BLOCK_SIZE = 1000
DEFAULT_SEED = 0


def raw_cid(data: bytes) -> bytes:
    """CIDv1, raw codec, sha2-256."""
    digest = multihash.wrap(hashlib.sha256(data).digest(), "sha2-256")
    return bytes(CID("base32", 1, "raw", digest))


def frame(payload: bytes) -> bytes:
    return encode_uvarint(len(payload)) + payload


def car_header(root: bytes) -> bytes:
    # {"roots": [root], "version": 1}; root is tag 42 over \x00 + binary CID
    return cbor2.dumps({"roots": [cbor2.CBORTag(42, b"\x00" + root)], "version": 1})


def generate_car(out_path, blocks=DEFAULT_BLOCKS, block_size=DEFAULT_BLOCK_SIZE, seed=DEFAULT_SEED):
    rng = random.Random(seed)
    payloads = []
    for _ in range(blocks):
        # Vary sizes so shard boundaries land at odd offsets
        size = rng.randint(max(1, block_size // 2), block_size)
        payloads.append(rng.randbytes(size))

    cids = [raw_cid(p) for p in payloads]
    root = cids[0] if cids else raw_cid(b"")

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "wb") as f:
        f.write(frame(car_header(root)))
        for c, p in zip(cids, payloads):
            f.write(frame(c + p))

    print(f"GENERATED: {out} ({blocks} blocks)")
    return out


if __name__ == "__main__":
    # Usage:
    #   python tools/make_car.py OUT.car [--blocks N] [--block-size BYTES] [--seed S]

    args = [a for a in sys.argv[1:] if a]

    def pop_int(arg_list: list[str], flag: str, default: int) -> tuple[int, list[str]]:
        """Remove an integer option from an argv-style list."""
        if flag not in arg_list:
            return default, arg_list
        i = arg_list.index(flag)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{flag} requires a value")
        return int(arg_list[i + 1]), arg_list[:i] + arg_list[i + 2:]

    blocks, args = pop_int(args, "--blocks", DEFAULT_BLOCKS)
    block_size, args = pop_int(args, "--block-size", DEFAULT_BLOCK_SIZE)
    seed, args = pop_int(args, "--seed", DEFAULT_SEED)

    if len(args) != 1:
        print("Usage: make_car.py OUT.car [--blocks N] [--block-size BYTES] [--seed S]")
        raise SystemExit(2)

    generate_car(args[0], blocks=blocks, block_size=block_size, seed=seed)
