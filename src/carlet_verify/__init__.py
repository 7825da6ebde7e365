"""carlet verify - check shards and manifests against their piece CIDs."""
