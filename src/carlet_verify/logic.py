import re
import warnings
from pathlib import Path

from carlet_core.commp import CommPAccumulator
from carlet_core.errors import CarletError
from carlet_core.ids import cid_to_commitment, commitment_to_cid
from carlet_core.protocol import SHARD_HEADER, SHARD_HEADER_LEN
from carlet_split.manifest import read_manifest
from carlet_split.splitter import FrameSplitter
from .const import ERRORS

# base32 CIDv1 fil-commitment-unsealed strings all start with "baga"
PIECE_CID_RE = re.compile(r"(baga[a-z2-7]+)\.car$")

def _fail(errors: list) -> dict:
    return {"status": "FAIL", "error_count": len(errors), "errors": errors}

def _err(code: str, **extra) -> dict:
    return {"code": code, "message": ERRORS[code], **extra}

def piece_cid_from_name(path: Path) -> str | None:
    m = PIECE_CID_RE.search(path.name)
    return m.group(1) if m else None

def verify_shard(path: Path) -> dict:
    errors = []
    if not path.is_file():
        errors.append(_err("E_LAYOUT_MISSING", path=str(path)))
        return _fail(errors)

    acc = CommPAccumulator()
    with open(path, "rb") as f:
        head = f.read(SHARD_HEADER_LEN)
        if head != SHARD_HEADER:
            errors.append(_err("E_HEADER", path=str(path)))
            return _fail(errors)
        acc.write(head)

        frames = FrameSplitter(f)
        frames.offset = SHARD_HEADER_LEN
        try:
            with warnings.catch_warnings():
                # A torn tail is reported below as E_TORN_FRAME
                warnings.simplefilter("ignore")
                frames.fill_shard(acc, path.stat().st_size + 1)
        except CarletError as e:
            errors.append(_err("E_FRAME", path=str(path), detail=str(e)))
            return _fail(errors)

    if frames.torn_tail:
        errors.append(_err("E_TORN_FRAME", path=str(path), offset=frames.offset))
        return _fail(errors)
    if frames.frame_count == 0:
        errors.append(_err("E_EMPTY_SHARD", path=str(path)))
        return _fail(errors)

    report = {"status": "PASS", "error_count": 0, "errors": [], "frames": frames.frame_count}

    # Provisional <prefix><N>.car names carry no commitment to check against
    claimed = piece_cid_from_name(path)
    if claimed is None:
        return report

    try:
        expected = cid_to_commitment(claimed)
    except CarletError as e:
        errors.append(_err("E_PIECE_CID", path=str(path), detail=str(e)))
        return _fail(errors)

    try:
        raw, padded_size = acc.finalize()
    except CarletError as e:
        errors.append(_err("E_COMMP", path=str(path), detail=str(e)))
        return _fail(errors)

    if raw != expected:
        errors.append(_err(
            "E_COMMP_MISMATCH",
            path=str(path),
            expected=claimed,
            computed=str(commitment_to_cid(raw)),
        ))
        return _fail(errors)

    report["piece_cid"] = claimed
    report["padded_piece_size"] = padded_size
    return report

def verify_manifest(manifest_path: Path) -> dict:
    errors = []
    if not manifest_path.is_file():
        errors.append(_err("E_LAYOUT_MISSING", path=str(manifest_path)))
        return _fail(errors)

    try:
        df = read_manifest(manifest_path)
    except (OSError, ValueError) as e:
        # pandas parser errors are ValueErrors
        errors.append(_err("E_MANIFEST_CSV", detail=str(e)))
        return _fail(errors)

    for row in df.itertuples(index=False):
        car_file, piece_cid, padded_size = row[2], row[3], int(row[4])
        p = Path(car_file)
        # Names are written relative to where the split ran; fall back to the manifest's directory.
        if not p.is_absolute() and not p.exists():
            p = manifest_path.parent / p

        result = verify_shard(p)
        if result["status"] != "PASS":
            errors.extend(result["errors"])
            continue
        if result.get("piece_cid") != piece_cid or result.get("padded_piece_size") != padded_size:
            errors.append(_err(
                "E_MANIFEST_MISMATCH",
                path=str(p),
                manifest={"piece cid": piece_cid, "padded piece size": padded_size},
                shard={
                    "piece cid": result.get("piece_cid"),
                    "padded piece size": result.get("padded_piece_size"),
                },
            ))

    if errors:
        return _fail(errors)
    return {"status": "PASS", "error_count": 0, "errors": [], "shards": len(df)}
