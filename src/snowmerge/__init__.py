"""
snowmerge: merge the progress of two SnowRunner saves.

This package provides headless logic for combining save files including:
- Save document model and codec for ``CompleteSave*.dat`` files
- Map data file classification (fog of war and vehicle state per region)
- A policy-driven merge engine with optional per-map scoping
- Discovery of visited maps for tagging stored saves
- Assembly of the merged save and its map data into a zip archive

Web or storage layers should import and compose these services.
"""
from .archive import OutputBundle, assemble_output
from .errors import (
    InvalidSave,
    InvalidSaveSlot,
    SaveFormatError,
    SaveMergerError,
    StructurallyInvalidArchive,
)
from .maps import discover_maps, map_id_from_level
from .merge import MergeResult, merge_dictionaries, merge_saves
from .options import ALL_EXCEPT_GARAGE_CONTENTS, ALL_OPTIONS, MergeOption
from .request import MergeRequest
from .save import ProfileSnapshot, SaveDocument, decode_save, encode_save
from .service import MergeOutcome, MergeService
from .storage import SaveDirectory

__version__ = "0.1.0"

__all__ = [
    "ALL_EXCEPT_GARAGE_CONTENTS",
    "ALL_OPTIONS",
    "InvalidSave",
    "InvalidSaveSlot",
    "MergeOption",
    "MergeOutcome",
    "MergeRequest",
    "MergeResult",
    "MergeService",
    "OutputBundle",
    "ProfileSnapshot",
    "SaveDirectory",
    "SaveDocument",
    "SaveFormatError",
    "SaveMergerError",
    "StructurallyInvalidArchive",
    "assemble_output",
    "decode_save",
    "discover_maps",
    "encode_save",
    "map_id_from_level",
    "merge_dictionaries",
    "merge_saves",
]
