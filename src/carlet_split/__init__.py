"""carlet split - stream CARs into shards, optionally with piece commitments."""
from .shards import CarFile, CarSplitter, split_and_commp, split_car

__all__ = ["CarFile", "CarSplitter", "split_and_commp", "split_car"]
