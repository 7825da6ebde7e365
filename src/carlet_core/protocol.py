"""carlet CAR protocol constants.

Single source of truth for on-disk header bytes and frame bounds.
Keep this file stable. Splitter, accumulator and verifier must remain synchronized.
"""

# Varints are LEB128; peek this many bytes to be sure a full prefix is visible
VARINT_SIZE = 10

# Look-ahead buffer, a whole number of 127-byte Fr32 input blocks
BUF_SIZE = (4 << 20) // 128 * 127

# Anything over ~2MiB got to be a mistake
MAX_BLOCK_SIZE = 2 << 20  # 2 MiB

# Default shard target used by `carlet split`
DEFAULT_TARGET_SIZE = 1024 * 1024

# 25 bytes of DAG-CBOR: {"roots": [nul-identity CID], "version": 1}
NUL_ROOT_CAR_HEADER = (
    b"\xA2"                      # map with 2 keys
    b"\x65" b"roots"             # text key, length 5
    b"\x81"                      # 1 element array
    b"\xD8\x2A"                  # tag 42
    b"\x45"                      # bytes, length 5
    b"\x00\x01\x55\x00\x00"      # \x00 multibase prefix + CIDv1 raw identity, empty digest
    b"\x67" b"version"           # text key, length 7
    b"\x01"                      # 1
)

# What every shard starts with: varint(25) || header
SHARD_HEADER = b"\x19" + NUL_ROOT_CAR_HEADER
SHARD_HEADER_LEN = len(SHARD_HEADER)

# Piece commitment bounds (Fr32: 127 input bytes expand to 128)
FR32_IN = 127
FR32_OUT = 128
NODE_SIZE = 32
MIN_PIECE_PAYLOAD = 65
MAX_LAYERS = 31
MAX_PIECE_PAYLOAD = (1 << (MAX_LAYERS + 5)) // FR32_OUT * FR32_IN

# Multicodec names for the piece CID
COMMP_CODEC = "fil-commitment-unsealed"
COMMP_HASH = "sha2-256-trunc254-padded"
