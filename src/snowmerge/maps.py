"""Map identifiers and the key conventions that tie save data to a map.

Internal level keys look like ``level_us_01_02`` (region tag, map number,
region number) and map to the identifier ``US_01``. Objective identifiers are
upper-case and start with the map identifier (``US_01_...``). Both the merge
engine's scope filters and the discovery extractor go through this module so
that they always agree on which map a key belongs to.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional, Set

LEVEL_PATTERN = re.compile(r"level_([A-Za-z0-9]+)_([A-Za-z0-9]+)_(\d+)")


def map_id_from_level(key: str) -> Optional[str]:
    """Return ``<TAG>_<ID>`` for a level key, or None if it does not look like one."""
    match = LEVEL_PATTERN.search(key)
    if match is None:
        return None
    return f"{match.group(1)}_{match.group(2)}".upper()


def discover_maps(visited_levels: Iterable[str]) -> Set[str]:
    """Derive the set of map identifiers from a profile's visited levels."""
    found: Set[str] = set()
    for level in visited_levels:
        map_id = map_id_from_level(level)
        if map_id is not None:
            found.add(map_id)
    return found


def level_prefix(map_id: str) -> str:
    return f"level_{map_id.lower()}_"


def objective_prefix(map_id: str) -> str:
    return f"{map_id.upper()}_"


def matches_region(region: str, map_id: str) -> bool:
    # Region names are free-form, so this one is case-insensitive.
    return region.casefold().startswith(map_id.casefold())


def normalize_scope(map_scope: Optional[Iterable[str]]) -> List[str]:
    """Strip blanks and case-insensitive duplicates, keeping the caller's order."""
    scope: List[str] = []
    seen = set()
    for map_id in map_scope or ():
        map_id = map_id.strip()
        if map_id and map_id.upper() not in seen:
            seen.add(map_id.upper())
            scope.append(map_id)
    return scope
