from __future__ import annotations

import copy
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..maps import level_prefix, matches_region, normalize_scope, objective_prefix
from ..options import MergeOption
from ..save import models as m
from ..save.models import FieldKind, ProfileField, ProfileSnapshot, SaveDocument, check_slot
from .helpers import (
    KeyFilter,
    accept_all,
    merge_dictionaries,
    merge_levels,
    merge_mapping,
    union_flags,
    union_set,
)

logger = logging.getLogger(__name__)


class Prefix(Enum):
    """Which form of a map identifier a field's keys start with."""

    LEVEL = "level"  # level_us_01_..., ordinal
    OBJECTIVE = "objective"  # US_01_..., ordinal
    REGION = "region"  # raw map id, case-insensitive


@dataclass(frozen=True)
class FieldRule:
    field: ProfileField
    prefix: Prefix
    insert_only: bool = False


MISSION_RULES: Tuple[FieldRule, ...] = (
    FieldRule(m.CARGO_LOADING_COUNTS, Prefix.LEVEL),
    FieldRule(m.DISCOVERED_OBJECTIVES, Prefix.OBJECTIVE),
    FieldRule(m.OBJECTIVE_STATES, Prefix.OBJECTIVE),
    FieldRule(m.CARGO_REMOVED_ON_RESTART, Prefix.OBJECTIVE),
    FieldRule(m.HIDDEN_CARGOES, Prefix.OBJECTIVE),
    FieldRule(m.CONTEST_TIMES, Prefix.OBJECTIVE, insert_only=True),
    FieldRule(m.CONTEST_LAST_TIMES, Prefix.OBJECTIVE, insert_only=True),
    FieldRule(m.FINISHED_OBJECTIVES, Prefix.OBJECTIVE),
)

# Applied when either mission or map progress is merged.
EXPLORATION_RULES: Tuple[FieldRule, ...] = (
    FieldRule(m.VISITED_LEVELS, Prefix.LEVEL),
    FieldRule(m.KNOWN_REGIONS, Prefix.REGION),
)

MAP_RULES: Tuple[FieldRule, ...] = (
    FieldRule(m.WATCH_POINTS, Prefix.LEVEL),
    FieldRule(m.LEVEL_GARAGE_STATUSES, Prefix.LEVEL),
    FieldRule(m.DISCOVERED_OBJECTS, Prefix.OBJECTIVE),
    FieldRule(m.UPGRADABLE_GARAGES, Prefix.LEVEL),
)

GARAGE_RULES: Tuple[FieldRule, ...] = (
    FieldRule(m.GARAGES_DATA, Prefix.LEVEL),
)


@dataclass
class MergeResult:
    success: bool
    document: Optional[SaveDocument] = None
    code: str = "OK"  # OK | INVALID_SAVE
    message: str = ""
    changes: Dict[str, int] = field(default_factory=dict)


def enabled_rules(options: Iterable[MergeOption]) -> List[FieldRule]:
    options = frozenset(options)
    rules: List[FieldRule] = []
    if MergeOption.MISSION_PROGRESS in options:
        rules.extend(MISSION_RULES)
    if MergeOption.MISSION_PROGRESS in options or MergeOption.MAP_PROGRESS in options:
        rules.extend(EXPLORATION_RULES)
    if MergeOption.MAP_PROGRESS in options:
        rules.extend(MAP_RULES)
    if MergeOption.GARAGE_CONTENTS in options:
        rules.extend(GARAGE_RULES)
    return rules


def scope_filter(prefix: Prefix, map_id: str) -> KeyFilter:
    """Key filter selecting the entries of ``map_id`` for a field keyed by ``prefix``."""
    if prefix is Prefix.REGION:
        return lambda key: matches_region(str(key), map_id)
    start = level_prefix(map_id) if prefix is Prefix.LEVEL else objective_prefix(map_id)
    return lambda key: str(key).startswith(start)


def apply_rule(rule: FieldRule, target: ProfileSnapshot, source: ProfileSnapshot, accept: KeyFilter) -> int:
    if rule.field.kind is FieldKind.SET:
        return union_set(target, source, rule.field, accept)
    return merge_mapping(target, source, rule.field, accept, overwrite=not rule.insert_only)


def merge_vehicles_and_upgrades(target: ProfileSnapshot, source: ProfileSnapshot) -> Dict[str, int]:
    """Merge account-wide vehicle and upgrade unlocks.

    These are not tied to a map, so a map scope never restricts them.
    """
    changes = {
        m.UNLOCKED_ITEM_NAMES.name: union_flags(target, source, m.UNLOCKED_ITEM_NAMES),
        m.UPGRADES_GIVER_DATA.name: merge_levels(target, source, m.UPGRADES_GIVER_DATA),
        m.NEW_TRUCKS.name: union_set(target, source, m.NEW_TRUCKS),
    }
    discovered = source.mapping(m.DISCOVERED_UPGRADES)
    if discovered:
        target.put(m.DISCOVERED_UPGRADES, merge_dictionaries(target.mapping(m.DISCOVERED_UPGRADES), discovered))
    changes[m.DISCOVERED_UPGRADES.name] = len(discovered)
    return changes


def merge_saves(
    incoming: Optional[SaveDocument],
    base: Optional[SaveDocument],
    output_slot: int,
    options: Iterable[MergeOption],
    map_scope: Optional[Sequence[str]] = None,
) -> MergeResult:
    """Merge the progress of ``base`` into a copy of ``incoming``.

    Only the categories in ``options`` are carried over. With a non-empty
    ``map_scope`` every map-bound field is restricted to the keys of the
    listed maps. Neither input document is modified; the merged copy keeps
    the incoming ``kind`` and gets ``saveId`` set to ``output_slot``.
    """
    check_slot(output_slot)
    if incoming is None or base is None or not incoming.is_mergeable or not base.is_mergeable:
        logger.warning("Refusing to merge: incoming or stored save has no profile")
        return MergeResult(success=False, code="INVALID_SAVE", message="Save is invalid")

    options = frozenset(options)
    scope = normalize_scope(map_scope)
    merged = copy.deepcopy(incoming)
    target, source = merged.profile, base.profile
    changes: Counter = Counter()

    rules = enabled_rules(options)
    if scope:
        for map_id in scope:
            for rule in rules:
                changes[rule.field.name] += apply_rule(rule, target, source, scope_filter(rule.prefix, map_id))
    else:
        for rule in rules:
            changes[rule.field.name] += apply_rule(rule, target, source, accept_all)

    if MergeOption.DISCOVERED_VEHICLES_UPGRADES in options:
        changes.update(merge_vehicles_and_upgrades(target, source))

    target.put(m.SAVE_ID, output_slot)
    merged.slot = output_slot

    logger.info(
        "Merged %d entries into slot %d (options=%s, maps=%s)",
        sum(changes.values()),
        output_slot,
        sorted(o.value for o in options),
        scope or "all",
    )
    logger.debug("Merge changes per field: %s", dict(changes))
    return MergeResult(success=True, document=merged, changes=dict(changes))
