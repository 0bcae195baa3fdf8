"""Per-kind merge primitives.

Each helper copies data from ``source`` into ``target`` for one profile field
and returns how many entries it inserted or changed. The source profile is
never modified; values taken from it are deep-copied.
"""
from __future__ import annotations

import copy
from typing import Any, Callable, Dict, Mapping

from ..errors import SaveFormatError
from ..save.models import ProfileField, ProfileSnapshot

KeyFilter = Callable[[Any], bool]


def accept_all(key: Any) -> bool:
    return True


def merge_dictionaries(primary: Mapping[str, Any], secondary: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``secondary`` into a copy of ``primary``.

    Keys missing from ``primary`` are inserted, nested mappings present on
    both sides are merged recursively, anything else is overwritten by
    ``secondary``.
    """
    merged = dict(primary)
    for key, value in (secondary or {}).items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_dictionaries(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def merge_mapping(
    target: ProfileSnapshot,
    source: ProfileSnapshot,
    fld: ProfileField,
    accept: KeyFilter = accept_all,
    *,
    overwrite: bool = True,
) -> int:
    picked = {k: v for k, v in source.mapping(fld).items() if accept(k)}
    if not picked:
        return 0
    out = target.mapping(fld, create=True)
    changed = 0
    for key, value in picked.items():
        if not overwrite and key in out:
            continue
        out[key] = copy.deepcopy(value)
        changed += 1
    return changed


def union_set(
    target: ProfileSnapshot,
    source: ProfileSnapshot,
    fld: ProfileField,
    accept: KeyFilter = accept_all,
) -> int:
    members = {m for m in source.id_set(fld) if accept(m)}
    if not members:
        return 0
    out = target.id_set(fld, create=True)
    added = len(members - out)
    out |= members
    return added


def union_flags(target: ProfileSnapshot, source: ProfileSnapshot, fld: ProfileField) -> int:
    """Every flag set in ``source`` ends up set in ``target``."""
    raised = [key for key, value in source.mapping(fld).items() if value]
    if not raised:
        return 0
    out = target.mapping(fld, create=True)
    changed = 0
    for key in raised:
        if out.get(key) is not True:
            out[key] = True
            changed += 1
    return changed


def merge_levels(target: ProfileSnapshot, source: ProfileSnapshot, fld: ProfileField) -> int:
    """Merge ``structure -> (upgrade -> level)`` trees, keeping the higher level."""
    levels = source.mapping(fld)
    if not levels:
        return 0
    out = target.mapping(fld, create=True)
    changed = 0
    for structure_id, upgrades in levels.items():
        if not isinstance(upgrades, dict):
            raise SaveFormatError(f"{fld.name}.{structure_id} must be an object")
        current = out.get(structure_id)
        if current is None:
            out[structure_id] = dict(upgrades)
            changed += len(upgrades)
            continue
        if not isinstance(current, dict):
            raise SaveFormatError(f"{fld.name}.{structure_id} must be an object")
        for upgrade_id, level in upgrades.items():
            if upgrade_id not in current or level > current[upgrade_id]:
                current[upgrade_id] = level
                changed += 1
    return changed
