"""carlet - split a CAR stream into smaller CARs, optionally computing commP."""
from __future__ import annotations

import contextlib
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from multiformats import CID

from carlet_core.commp import CommPAccumulator
from carlet_core.errors import (
    DigestError,
    IdentifierEncodingError,
    RenameError,
    StreamIOError,
)
from carlet_core.ids import commitment_to_cid
from carlet_core.protocol import BUF_SIZE, SHARD_HEADER
from carlet_core.reader import Sink

from .splitter import FrameSplitter


@dataclass(frozen=True)
class CarFile:
    name: str
    commp: CID
    padded_size: int


class MultiSink:
    """Broadcasts every write to all targets, in order."""

    def __init__(self, *targets: Sink):
        self.targets = targets

    def write(self, data: bytes) -> int:
        for target in self.targets:
            target.write(data)
        return len(data)


class ShardWriter:
    """One open shard: the provisional file plus the optional accumulator.

    The canonical header goes to the file on open. The accumulator is seeded
    separately by its owner, so frame bytes are the only thing fanned out here.
    """

    def __init__(
        self,
        path: Path,
        accumulator: CommPAccumulator | None = None,
        offset: int | None = None,
    ):
        self.path = path
        self.offset = offset
        try:
            self.file = open(path, "wb")
        except OSError as e:
            raise StreamIOError(f"failed to create file {path} ({e})", offset) from e
        try:
            self.file.write(SHARD_HEADER)
        except OSError as e:
            with contextlib.suppress(OSError):
                self.file.close()
            raise StreamIOError(f"failed to write empty header to {path} ({e})", offset) from e

        targets: list[Sink] = [self.file]
        if accumulator is not None:
            targets.append(accumulator)
        self.sink = MultiSink(*targets)

    def close(self) -> None:
        try:
            self.file.close()
        except OSError as e:
            raise StreamIOError(f"failed to close {self.path} ({e})", self.offset) from e

    def __enter__(self) -> ShardWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            # Already failing; the original error wins
            with contextlib.suppress(OSError):
                self.file.close()


class CarSplitter:
    """Single pass over one CAR stream, one open shard at a time.

    Plain mode leaves shards at <prefix><N>.car and lists them in `written`.
    With commp=True each shard is renamed to <prefix><piece CID>.car and
    described by a CarFile in `results`. Both lists keep whatever was
    finished before an error.
    """

    def __init__(
        self,
        stream: BinaryIO,
        target_size: int,
        name_prefix: str | Path,
        commp: bool = False,
        buffer_size: int = BUF_SIZE,
    ):
        if target_size <= 0:
            raise ValueError(f"target size must be positive, got {target_size}")
        self.frames = FrameSplitter(stream, buffer_size=buffer_size)
        self.target_size = target_size
        self.name_prefix = str(name_prefix)
        self.accumulator = CommPAccumulator() if commp else None
        self.written: list[Path] = []
        self.results: list[CarFile] = []

    def shard_path(self, index: int) -> Path:
        return Path(f"{self.name_prefix}{index}.car")

    def run(self) -> None:
        self.frames.strip_header()
        if self.accumulator is not None:
            self._reseed()

        index = 0
        while not self.frames.at_end():
            self._write_shard(index)
            index += 1

    def _reseed(self) -> None:
        self.accumulator.reset()
        self.accumulator.write(SHARD_HEADER)

    def _write_shard(self, index: int) -> None:
        path = self.shard_path(index)
        print(f"Writing file: {path}")
        with ShardWriter(path, self.accumulator, self.frames.offset) as shard:
            try:
                self.frames.fill_shard(shard.sink, self.target_size)
            except DigestError as e:
                raise DigestError(f"{path}: {e}", self.frames.offset) from e
            shard.offset = self.frames.offset

        if self.accumulator is None:
            self.written.append(path)
            return

        self.results.append(self._finalize(path))
        if not self.frames.at_end():
            self._reseed()

    def _finalize(self, path: Path) -> CarFile:
        offset = self.frames.offset
        try:
            raw_commp, padded_size = self.accumulator.finalize()
        except DigestError as e:
            raise DigestError(f"failed to compute commP for {path}: {e}", offset) from e
        try:
            comm_cid = commitment_to_cid(raw_commp)
        except IdentifierEncodingError as e:
            raise IdentifierEncodingError(f"{path}: {e}", offset) from e

        new_path = Path(f"{self.name_prefix}{comm_cid}.car")
        if new_path.exists():
            raise RenameError(f"failed to rename {path} to {new_path}: target exists", offset)
        try:
            path.rename(new_path)
        except OSError as e:
            raise RenameError(f"failed to rename {path} to {new_path} ({e})", offset) from e

        return CarFile(name=str(new_path), commp=comm_cid, padded_size=padded_size)


def split_car(stream: BinaryIO, target_size: int, name_prefix: str | Path) -> list[Path]:
    """Split a CAR stream into CARs of roughly target_size bytes."""
    splitter = CarSplitter(stream, target_size, name_prefix)
    splitter.run()
    return splitter.written


def split_and_commp(stream: BinaryIO, target_size: int, name_prefix: str | Path) -> list[CarFile]:
    """Split a CAR stream and compute each shard's piece commitment on the way."""
    splitter = CarSplitter(stream, target_size, name_prefix, commp=True)
    splitter.run()
    return splitter.results
