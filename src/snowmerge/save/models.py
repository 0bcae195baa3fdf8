from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Set, Tuple

from ..errors import InvalidSaveSlot, SaveFormatError

VERSION_KEY = "cfg_version"
SAVE_SLOTS = range(4)


def check_slot(slot: Any) -> int:
    """Return ``slot`` if it names one of the game's save slots, else raise."""
    if isinstance(slot, bool) or not isinstance(slot, int) or slot not in SAVE_SLOTS:
        raise InvalidSaveSlot(slot)
    return slot


class FieldKind(Enum):
    """How a profile field is reconciled during a merge."""

    SCALAR = "scalar"  # copied wholesale or left alone
    MAPPING = "mapping"  # key -> value
    SET = "set"  # identifiers, stored as a JSON array
    FLAGS = "flags"  # key -> bool
    LEVELS = "levels"  # structure id -> (upgrade id -> level)
    BLOB = "blob"  # opaque, passed through


@dataclass(frozen=True)
class ProfileField:
    path: Tuple[str, ...]
    kind: FieldKind

    @property
    def name(self) -> str:
        return ".".join(self.path)


def _field(path: str, kind: FieldKind) -> ProfileField:
    return ProfileField(tuple(path.split(".")), kind)


SAVE_ID = _field("saveId", FieldKind.SCALAR)

CARGO_LOADING_COUNTS = _field("cargoLoadingCounts", FieldKind.MAPPING)
DISCOVERED_OBJECTIVES = _field("discoveredObjectives", FieldKind.SET)
OBJECTIVE_STATES = _field("objectiveStates", FieldKind.MAPPING)
CARGO_REMOVED_ON_RESTART = _field("savedCargoNeedToBeRemovedOnRestart", FieldKind.MAPPING)
HIDDEN_CARGOES = _field("hiddenCargoes", FieldKind.MAPPING)
CONTEST_TIMES = _field("persistentProfileData.contestTimes", FieldKind.MAPPING)
CONTEST_LAST_TIMES = _field("persistentProfileData.contestLastTimes", FieldKind.MAPPING)
FINISHED_OBJECTIVES = _field("finishedObjs", FieldKind.SET)

VISITED_LEVELS = _field("visitedLevels", FieldKind.SET)
KNOWN_REGIONS = _field("persistentProfileData.knownRegions", FieldKind.SET)

WATCH_POINTS = _field("watchPointsData.data", FieldKind.MAPPING)
LEVEL_GARAGE_STATUSES = _field("levelGarageStatuses", FieldKind.MAPPING)
DISCOVERED_OBJECTS = _field("discoveredObjects", FieldKind.SET)
UPGRADABLE_GARAGES = _field("upgradableGarages", FieldKind.MAPPING)

UNLOCKED_ITEM_NAMES = _field("persistentProfileData.unlockedItemNames", FieldKind.FLAGS)
UPGRADES_GIVER_DATA = _field("upgradesGiverData", FieldKind.LEVELS)
NEW_TRUCKS = _field("persistentProfileData.newTrucks", FieldKind.SET)
DISCOVERED_UPGRADES = _field("persistentProfileData.discoveredUpgrades", FieldKind.MAPPING)

GARAGES_DATA = _field("garagesData", FieldKind.MAPPING)

PROFILE_FIELDS: Tuple[ProfileField, ...] = (
    SAVE_ID,
    CARGO_LOADING_COUNTS,
    DISCOVERED_OBJECTIVES,
    OBJECTIVE_STATES,
    CARGO_REMOVED_ON_RESTART,
    HIDDEN_CARGOES,
    CONTEST_TIMES,
    CONTEST_LAST_TIMES,
    FINISHED_OBJECTIVES,
    VISITED_LEVELS,
    KNOWN_REGIONS,
    WATCH_POINTS,
    LEVEL_GARAGE_STATUSES,
    DISCOVERED_OBJECTS,
    UPGRADABLE_GARAGES,
    UNLOCKED_ITEM_NAMES,
    UPGRADES_GIVER_DATA,
    NEW_TRUCKS,
    DISCOVERED_UPGRADES,
    GARAGES_DATA,
)

_SET_FIELDS = tuple(f for f in PROFILE_FIELDS if f.kind is FieldKind.SET)
_MAPPING_KINDS = (FieldKind.MAPPING, FieldKind.FLAGS, FieldKind.LEVELS)


@dataclass
class ProfileSnapshot:
    """The progress record of one save (``SslValue`` on disk).

    Values are kept as the decoded JSON tree. Fields declared as SET are held
    as Python sets; everything the schema does not name is an opaque blob
    that survives a merge untouched.
    """

    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.data, dict):
            raise SaveFormatError("Profile snapshot must be a JSON object")
        for fld in _SET_FIELDS:
            value = self.get(fld)
            if value is None or isinstance(value, set):
                continue
            if not isinstance(value, (list, tuple)):
                raise SaveFormatError(f"Field {fld.name} must be an array, got {type(value).__name__}")
            self.put(fld, set(value))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProfileSnapshot":
        """Build a snapshot from a decoded profile without sharing its containers."""
        return cls(copy.deepcopy(data))

    def to_dict(self) -> Dict[str, Any]:
        return _plain(self.data)

    def get(self, fld: ProfileField) -> Any:
        node: Any = self.data
        for part in fld.path:
            if not isinstance(node, dict):
                return None
            node = node.get(part)
        return node

    def put(self, fld: ProfileField, value: Any) -> None:
        self._parent(fld)[fld.path[-1]] = value

    def mapping(self, fld: ProfileField, *, create: bool = False) -> Dict[str, Any]:
        """Return the mapping stored at ``fld``.

        A missing field reads as an empty mapping; with ``create`` the empty
        mapping is attached to the profile so writes to it stick.
        """
        if fld.kind not in _MAPPING_KINDS:
            raise TypeError(f"{fld.name} is not a mapping field")
        value = self.get(fld)
        if value is None:
            value = {}
            if create:
                self.put(fld, value)
        elif not isinstance(value, dict):
            raise SaveFormatError(f"Field {fld.name} must be an object, got {type(value).__name__}")
        return value

    def id_set(self, fld: ProfileField, *, create: bool = False) -> Set[str]:
        if fld.kind is not FieldKind.SET:
            raise TypeError(f"{fld.name} is not a set field")
        value = self.get(fld)
        if value is None:
            value = set()
            if create:
                self.put(fld, value)
        elif not isinstance(value, set):
            raise SaveFormatError(f"Field {fld.name} must be a set, got {type(value).__name__}")
        return value

    def _parent(self, fld: ProfileField) -> Dict[str, Any]:
        node = self.data
        for part in fld.path[:-1]:
            child = node.get(part)
            if child is None:
                child = node[part] = {}
            elif not isinstance(child, dict):
                raise SaveFormatError(f"Field {part} must be an object, got {type(child).__name__}")
            node = child
        return node


def _plain(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


@dataclass
class SaveDocument:
    """One parsed save slot: the ``SslType`` discriminator plus the profile.

    ``extras`` holds the other top-level entries of the save file (such as
    ``cfg_version``) exactly as they were read.
    """

    kind: str
    profile: Optional[ProfileSnapshot]
    slot: int = 0
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def version(self) -> Any:
        return self.extras.get(VERSION_KEY)

    @property
    def is_mergeable(self) -> bool:
        return self.profile is not None
