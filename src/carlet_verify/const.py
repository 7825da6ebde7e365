ERRORS = {
  "E_LAYOUT_MISSING": "Required file missing",
  "E_HEADER": "Shard does not start with the canonical nul-root header",
  "E_FRAME": "Shard frames do not parse",
  "E_TORN_FRAME": "Shard ends in the middle of a frame",
  "E_EMPTY_SHARD": "Shard holds no frames",
  "E_PIECE_CID": "File name does not embed a valid piece CID",
  "E_COMMP": "Piece commitment could not be computed",
  "E_COMMP_MISMATCH": "Piece commitment does not match the file name",
  "E_MANIFEST_CSV": "Manifest CSV invalid",
  "E_MANIFEST_MISMATCH": "Manifest row does not match the shard",
}
