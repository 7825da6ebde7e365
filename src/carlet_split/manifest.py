"""CSV manifest for split-and-commp runs."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

import pandas as pd

from .shards import CarFile

MANIFEST_COLUMNS = ["timestamp", "filename prefix", "car file", "piece cid", "padded piece size"]

DEFAULT_MANIFEST = "__metadata.csv"


def rfc3339_now() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def write_manifest(
    path: Path,
    car_files: Iterable[CarFile],
    name_prefix: str,
    timestamp: str | None = None,
) -> None:
    """One row per shard, in stream order."""
    rows = [
        {
            "timestamp": timestamp or rfc3339_now(),
            "filename prefix": name_prefix,
            "car file": cf.name,
            "piece cid": str(cf.commp),
            "padded piece size": int(cf.padded_size),
        }
        for cf in car_files
    ]
    df = pd.DataFrame(rows, columns=MANIFEST_COLUMNS)
    df.to_csv(path, index=False)


def read_manifest(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path, dtype={"filename prefix": str, "car file": str, "piece cid": str})
    missing = [c for c in MANIFEST_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"manifest {path} is missing columns: {', '.join(missing)}")

    blank = [c for c in MANIFEST_COLUMNS if df[c].isna().any()]
    if blank:
        raise ValueError(f"manifest {path} has empty cells in: {', '.join(blank)}")

    try:
        sizes = pd.to_numeric(df["padded piece size"], errors="raise")
    except (ValueError, TypeError) as e:
        raise ValueError(f"manifest {path} has a non-numeric padded piece size ({e})") from e
    if not pd.api.types.is_integer_dtype(sizes):
        raise ValueError(f"manifest {path} has a non-integer padded piece size")
    df["padded piece size"] = sizes
    return df
