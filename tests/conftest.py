import copy
import json
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from snowmerge.save import document_from_dict, save_key  # noqa: E402

_EMPTY_PROFILE: Dict[str, Any] = {
    "saveId": 0,
    "lastLoadedLevel": "level_us_01_01",
    "gameTime": 12.5,
    "isHardMode": False,
    "cargoLoadingCounts": {},
    "discoveredObjectives": [],
    "objectiveStates": {},
    "savedCargoNeedToBeRemovedOnRestart": {},
    "hiddenCargoes": {},
    "finishedObjs": [],
    "visitedLevels": [],
    "watchPointsData": {"data": {}},
    "levelGarageStatuses": {},
    "discoveredObjects": [],
    "upgradableGarages": {},
    "upgradesGiverData": {},
    "garagesData": {},
    "persistentProfileData": {
        "money": 1000,
        "rank": 3,
        "contestTimes": {},
        "contestLastTimes": {},
        "knownRegions": [],
        "unlockedItemNames": {},
        "newTrucks": [],
        "discoveredUpgrades": {},
    },
}


def build_profile(fields: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return a profile dict; dotted keys in ``fields`` address nested entries."""
    profile = copy.deepcopy(_EMPTY_PROFILE)
    for path, value in (fields or {}).items():
        node = profile
        parts = path.split(".")
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return profile


def build_save(fields: Optional[Dict[str, Any]] = None, slot: int = 0, kind: str = "CompleteSave") -> Dict[str, Any]:
    return {
        save_key(slot): {"SslType": kind, "SslValue": build_profile(fields)},
        "cfg_version": 7,
    }


def build_document(fields: Optional[Dict[str, Any]] = None, slot: int = 0, kind: str = "CompleteSave"):
    return document_from_dict(build_save(fields, slot, kind), slot)


def write_save_folder(
    path: Path,
    fields: Optional[Dict[str, Any]] = None,
    slot: int = 0,
    map_files: Iterable[str] = (),
    cfg_version: int = 7,
) -> Path:
    """Write a save folder the way the game lays it out (NUL-terminated JSON)."""
    path.mkdir(parents=True, exist_ok=True)
    data = build_save(fields, slot)
    data["cfg_version"] = cfg_version
    name = f"{save_key(slot)}.dat"
    (path / name).write_text(json.dumps(data) + "\x00", encoding="utf-8")
    for file_name in map_files:
        (path / file_name).write_bytes(f"{path.name}:{file_name}".encode("utf-8"))
    return path


@pytest.fixture()
def make_document():
    return build_document


@pytest.fixture()
def save_folder():
    return write_save_folder


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the user's real settings file and environment out of tests."""
    user_settings = tmp_path / "user_config" / "settings.yaml"
    monkeypatch.setattr("snowmerge.config.settings.default_user_settings_path", lambda: user_settings)
    monkeypatch.delenv("SNOWMERGE_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SNOWMERGE_MAX_ARCHIVE_SIZE", raising=False)
    return user_settings
