import io
import random

import pytest

from carlet_core.protocol import SHARD_HEADER_LEN
from carlet_core.varint import encode_uvarint

# Stands in for a real CAR header; the splitter never interprets it
SOURCE_HEADER = b"\xa2eroots\x80gversion\x01"


def frame(payload: bytes) -> bytes:
    return encode_uvarint(len(payload)) + payload


def car_bytes(payloads, header=SOURCE_HEADER) -> bytes:
    return frame(header) + b"".join(frame(p) for p in payloads)


def shard_frames(data: bytes) -> bytes:
    """Strip the synthesized header off a shard."""
    return data[SHARD_HEADER_LEN:]


class TrickleStream(io.RawIOBase):
    """Returns at most `step` bytes per read, like a slow pipe."""

    def __init__(self, data: bytes, step: int = 1):
        self._data = memoryview(data)
        self._pos = 0
        self._step = step

    def readable(self):
        return True

    def read(self, n=-1):
        if n is None or n < 0:
            n = len(self._data) - self._pos
        n = min(n, self._step)
        out = bytes(self._data[self._pos:self._pos + n])
        self._pos += len(out)
        return out


@pytest.fixture
def make_car():
    return car_bytes


@pytest.fixture
def random_payloads():
    def _make(count, low=1, high=3000, seed=7):
        rng = random.Random(seed)
        return [rng.randbytes(rng.randint(low, high)) for _ in range(count)]
    return _make
