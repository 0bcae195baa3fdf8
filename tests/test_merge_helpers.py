import pytest

from snowmerge.errors import SaveFormatError
from snowmerge.merge.helpers import merge_dictionaries, merge_levels, merge_mapping, union_flags, union_set
from snowmerge.save.models import (
    CONTEST_TIMES,
    GARAGES_DATA,
    UNLOCKED_ITEM_NAMES,
    UPGRADES_GIVER_DATA,
    VISITED_LEVELS,
    ProfileSnapshot,
)


def snapshot(data):
    return ProfileSnapshot.from_dict(data)


def test_merge_dictionaries_recurses_and_overwrites():
    primary = {"a": {"x": 1, "y": 2}, "b": 1}
    secondary = {"a": {"y": 3, "z": 4}, "b": {"nested": True}, "c": [1]}

    merged = merge_dictionaries(primary, secondary)

    assert merged == {"a": {"x": 1, "y": 3, "z": 4}, "b": {"nested": True}, "c": [1]}
    assert primary == {"a": {"x": 1, "y": 2}, "b": 1}
    merged["c"].append(2)
    assert secondary["c"] == [1]


def test_merge_mapping_overwrites_selected_keys():
    target = snapshot({"garagesData": {"level_us_01_01": "old", "level_us_02_01": "keep"}})
    source = snapshot({"garagesData": {"level_us_01_01": "new", "level_ru_02_01": "skip"}})

    changed = merge_mapping(target, source, GARAGES_DATA, lambda k: k.startswith("level_us_"))

    assert changed == 1
    assert target.mapping(GARAGES_DATA) == {"level_us_01_01": "new", "level_us_02_01": "keep"}


def test_merge_mapping_insert_only_keeps_existing_values():
    target = snapshot({"persistentProfileData": {"contestTimes": {"A": 100}}})
    source = snapshot({"persistentProfileData": {"contestTimes": {"A": 50, "B": 70}}})

    changed = merge_mapping(target, source, CONTEST_TIMES, overwrite=False)

    assert changed == 1
    assert target.mapping(CONTEST_TIMES) == {"A": 100, "B": 70}


def test_merge_mapping_does_not_create_empty_fields():
    target = snapshot({})
    source = snapshot({"garagesData": {"level_ru_02_01": 1}})

    assert merge_mapping(target, source, GARAGES_DATA, lambda k: False) == 0
    assert "garagesData" not in target.data


def test_union_set_counts_new_members():
    target = snapshot({"visitedLevels": ["level_us_01_01"]})
    source = snapshot({"visitedLevels": ["level_us_01_01", "level_us_01_02"]})

    assert union_set(target, source, VISITED_LEVELS) == 1
    assert target.id_set(VISITED_LEVELS) == {"level_us_01_01", "level_us_01_02"}


def test_union_flags_only_raises_flags():
    target = snapshot({"persistentProfileData": {"unlockedItemNames": {"a": False, "b": True}}})
    source = snapshot({"persistentProfileData": {"unlockedItemNames": {"a": True, "b": False, "c": False}}})

    assert union_flags(target, source, UNLOCKED_ITEM_NAMES) == 1
    assert target.mapping(UNLOCKED_ITEM_NAMES) == {"a": True, "b": True}


def test_merge_levels_keeps_the_higher_level():
    target = snapshot({"upgradesGiverData": {"g1": {"u1": 3, "u2": 0}}})
    source = snapshot({"upgradesGiverData": {"g1": {"u1": 1, "u2": 2}, "g2": {"u3": 1}}})

    merge_levels(target, source, UPGRADES_GIVER_DATA)

    assert target.mapping(UPGRADES_GIVER_DATA) == {"g1": {"u1": 3, "u2": 2}, "g2": {"u3": 1}}


def test_merge_levels_rejects_non_object_structures():
    target = snapshot({"upgradesGiverData": {"g1": 5}})
    source = snapshot({"upgradesGiverData": {"g1": {"u1": 1}}})

    with pytest.raises(SaveFormatError):
        merge_levels(target, source, UPGRADES_GIVER_DATA)
