"""carlet - CAR stream splitter."""
from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

import click

from carlet_core.protocol import DEFAULT_TARGET_SIZE
from carlet_split.manifest import DEFAULT_MANIFEST, write_manifest
from carlet_split.shards import split_and_commp, split_car


def _stdin() -> BinaryIO:
    return click.get_binary_stream("stdin")


@click.group()
def main() -> None:
    """Split CAR streams read from stdin into smaller CARs."""


@main.command("split")
@click.option(
    "--size", "-s",
    type=click.IntRange(min=1),
    default=DEFAULT_TARGET_SIZE,
    show_default=True,
    help="Target size in bytes to chunk CARs to.",
)
@click.option("--output", "-o", default="", help="Output name prefix for car files.")
def split_cmd(size: int, output: str) -> None:
    """Split a CAR read from stdin into CARs of roughly SIZE bytes."""
    try:
        split_car(_stdin(), size, output)
    except Exception as e:
        # Fail closed, with a single-line reason.
        print(f"FATAL: {e}")
        raise SystemExit(1)


@click.command("split-and-commp")
@click.option(
    "--size", "-s",
    type=click.IntRange(min=1),
    required=True,
    help="Target size in bytes to chunk CARs to.",
)
@click.option("--output", "-o", required=True, help="Output name prefix for car files.")
@click.option(
    "--metadata", "-m",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_MANIFEST,
    show_default=True,
    help="Metadata CSV file name.",
)
def split_and_commp_cmd(size: int, output: str, metadata: Path) -> None:
    """Split CAR and calculate commP."""
    try:
        car_files = split_and_commp(_stdin(), size, output)
        write_manifest(metadata, car_files, output)
    except Exception as e:
        print(f"FATAL: {e}")
        raise SystemExit(1)

    print(f"PASS: {len(car_files)} car files, metadata at {metadata}")


main.add_command(split_and_commp_cmd)
main.add_command(split_and_commp_cmd, name="sac")


if __name__ == "__main__":
    main()
