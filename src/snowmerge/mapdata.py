"""Per-slot map data files that accompany a save.

Next to ``CompleteSave<n>.dat`` the game keeps one binary file per visited
region and kind: ``fog_*.dat`` (fog of war) and ``sts_*.dat`` (vehicles left
in the world). Files of slots 1-3 carry a ``<n>_`` prefix, slot 0 has none.
The contents are never read here; files are selected and renamed by name.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Collection, Iterable, List, Optional

from .maps import map_id_from_level
from .save.codec import save_key

FOG = "fog"
STS = "sts"
MAP_DATA_KINDS = (FOG, STS)

MIN_MAP_DATA_FILES = 2

_SAVE_FILE_PATTERN = re.compile(r"CompleteSave([1-3]?)\.dat")


def slot_prefix(slot: int) -> str:
    return f"{slot}_" if slot > 0 else ""


def save_file_name(slot: int) -> str:
    return f"{save_key(slot)}.dat"


def _map_data_pattern(slot: int) -> "re.Pattern[str]":
    return re.compile(rf"{re.escape(slot_prefix(slot))}(fog|sts)_(.*)\.dat")


@dataclass(frozen=True)
class MapDataFile:
    name: str
    slot: int
    kind: str
    suffix: str
    map_id: Optional[str] = None

    def renamed(self, output_slot: int) -> str:
        """File name of this file when written for ``output_slot``."""
        return f"{slot_prefix(output_slot)}{self.name[len(slot_prefix(self.slot)):]}"


def classify(name: str, slot: int) -> Optional[MapDataFile]:
    """Return the map data description of ``name`` for ``slot``, if it is one."""
    match = _map_data_pattern(slot).fullmatch(name)
    if match is None:
        return None
    kind, suffix = match.group(1), match.group(2)
    return MapDataFile(name=name, slot=slot, kind=kind, suffix=suffix, map_id=map_id_from_level(suffix))


def list_map_data(
    names: Iterable[str],
    slot: int,
    kinds: Optional[Collection[str]] = None,
    map_scope: Optional[Collection[str]] = None,
) -> List[MapDataFile]:
    """Classify ``names`` and keep the map data files of ``slot``.

    ``kinds`` restricts to fog or sts files; a non-empty ``map_scope`` keeps
    only files whose map identifier is listed (case-insensitive).
    """
    scope = {m.upper() for m in map_scope} if map_scope else None
    found = []
    for name in sorted(names):
        entry = classify(name, slot)
        if entry is None:
            continue
        if kinds is not None and entry.kind not in kinds:
            continue
        if scope is not None and entry.map_id not in scope:
            continue
        found.append(entry)
    return found


def validate_save_contents(names: Collection[str], slot: int, min_map_files: int = MIN_MAP_DATA_FILES) -> bool:
    """A save is usable only with its primary file and some map data next to it."""
    if save_file_name(slot) not in names:
        return False
    return len(list_map_data(names, slot)) >= min_map_files


def detect_save_slots(names: Iterable[str]) -> List[int]:
    """Slots whose primary save file is among ``names``.

    Returns an empty list when no map data file of any slot is present, since
    such an upload cannot be a complete save.
    """
    names = list(names)
    has_map_data = any(re.fullmatch(r"([1-3]_)?(fog|sts)_.*\.dat", name) for name in names)
    if not has_map_data:
        return []
    slots = []
    for name in names:
        match = _SAVE_FILE_PATTERN.fullmatch(name)
        if match is not None:
            slots.append(int(match.group(1) or 0))
    return sorted(set(slots))
