import sys
from pathlib import Path

# Every byte has the continuation bit set, so no varint can end inside it.
GARBAGE = b"\xff\xfe\xfd"

def main():
    if len(sys.argv) != 2:
        print("Usage: append_garbage.py <file.car>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    size = p.stat().st_size
    with open(p, "ab") as f:
        f.write(GARBAGE)
    print(f"Appended {len(GARBAGE)} garbage bytes at offset {size} in {p}")

if __name__ == "__main__":
    main()
