import json
from pathlib import Path
import click
from .logic import verify_manifest, verify_shard

def _emit(result: dict) -> None:
    click.echo(json.dumps(result, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    if result["status"] != "PASS":
        raise SystemExit(1)

@click.group()
def main():
    pass

@main.command("shard")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
def shard_cmd(path: Path):
    _emit(verify_shard(path))

@main.command("manifest")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
def manifest_cmd(path: Path):
    _emit(verify_manifest(path))

if __name__ == "__main__":
    main()
