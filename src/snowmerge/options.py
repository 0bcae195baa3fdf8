from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Iterable, Union


class MergeOption(str, Enum):
    """Independent progress categories a merge can carry over from the base save."""

    MISSION_PROGRESS = "mission_progress"
    MAP_PROGRESS = "map_progress"
    DISCOVERED_VEHICLES_UPGRADES = "discovered_vehicles_upgrades"
    GARAGE_CONTENTS = "garage_contents"
    VEHICLES_IN_WORLD = "vehicles_in_world"


MergeOptions = FrozenSet[MergeOption]

ALL_OPTIONS: MergeOptions = frozenset(MergeOption)
ALL_EXCEPT_GARAGE_CONTENTS: MergeOptions = ALL_OPTIONS - {MergeOption.GARAGE_CONTENTS}

# Bit layout of the web client's option mask. Bit 1 (contest times) is accepted
# but has no category of its own: contest times travel with mission progress.
_CONTEST_TIMES_BIT = 1 << 1
_BITS = {
    MergeOption.MISSION_PROGRESS: 1 << 0,
    MergeOption.MAP_PROGRESS: 1 << 2,
    MergeOption.DISCOVERED_VEHICLES_UPGRADES: (1 << 3) | (1 << 4),
    MergeOption.GARAGE_CONTENTS: 1 << 5,
    MergeOption.VEHICLES_IN_WORLD: 1 << 6,
}
_KNOWN_BITS = _CONTEST_TIMES_BIT | sum(_BITS.values())


def options_from_bitmask(mask: int) -> MergeOptions:
    """Decode the client's integer option mask into a set of options."""
    if mask < 0 or mask & ~_KNOWN_BITS:
        raise ValueError(f"Unknown merge option bits in mask {mask}")
    return frozenset(opt for opt, bits in _BITS.items() if mask & bits)


def options_to_bitmask(options: Iterable[MergeOption]) -> int:
    mask = 0
    for opt in options:
        mask |= _BITS[MergeOption(opt)]
    return mask


def parse_options(values: Iterable[Union[str, MergeOption]]) -> MergeOptions:
    """Parse option names (case and dash insensitive), e.g. ``map-progress``.

    The special names ``all`` and ``all_except_garage_contents`` expand to the
    matching aliases.
    """
    parsed = set()
    for value in values:
        if isinstance(value, MergeOption):
            parsed.add(value)
            continue
        name = str(value).strip().lower().replace("-", "_")
        if not name:
            continue
        if name == "all":
            parsed.update(ALL_OPTIONS)
        elif name == "all_except_garage_contents":
            parsed.update(ALL_EXCEPT_GARAGE_CONTENTS)
        else:
            try:
                parsed.add(MergeOption(name))
            except ValueError as exc:
                raise ValueError(f"Unknown merge option: {value!r}") from exc
    return frozenset(parsed)
