from .engine import MergeResult, merge_saves, merge_vehicles_and_upgrades
from .helpers import merge_dictionaries

__all__ = [
    "MergeResult",
    "merge_saves",
    "merge_vehicles_and_upgrades",
    "merge_dictionaries",
]
