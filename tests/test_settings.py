import logging

import pytest
import yaml

from snowmerge.config import MergerSettings
from snowmerge.options import ALL_EXCEPT_GARAGE_CONTENTS, MergeOption


def test_packaged_defaults():
    settings = MergerSettings.load()

    assert settings.default_options == ALL_EXCEPT_GARAGE_CONTENTS
    assert settings.merge.default_output_slot == 0
    assert settings.archive.max_archive_size == 50 * 1024 * 1024
    assert settings.archive.min_map_files == 2
    assert settings.log_level == logging.INFO


def test_user_file_overrides_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        yaml.safe_dump({"merge": {"default_options": ["garage_contents"]}, "logging": {"level": "debug"}}),
        encoding="utf-8",
    )

    settings = MergerSettings.load(user_path=path)

    assert settings.default_options == {MergeOption.GARAGE_CONTENTS}
    assert settings.log_level == logging.DEBUG
    assert settings.archive.min_map_files == 2


def test_default_user_path_is_consulted(isolated_settings):
    isolated_settings.parent.mkdir(parents=True)
    isolated_settings.write_text("merge:\n  default_output_slot: 3\n", encoding="utf-8")

    assert MergerSettings.load().merge.default_output_slot == 3


def test_missing_user_file_falls_back(tmp_path):
    settings = MergerSettings.load(user_path=tmp_path / "absent.yaml")

    assert settings.merge.default_output_slot == 0


def test_environment_wins(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text("archive:\n  max_archive_size: 100\n", encoding="utf-8")
    monkeypatch.setenv("SNOWMERGE_MAX_ARCHIVE_SIZE", "2048")
    monkeypatch.setenv("SNOWMERGE_LOG_LEVEL", "WARNING")

    settings = MergerSettings.load(user_path=path)

    assert settings.archive.max_archive_size == 2048
    assert settings.log_level == logging.WARNING


def test_non_integer_size_in_environment_is_ignored(monkeypatch):
    monkeypatch.setenv("SNOWMERGE_MAX_ARCHIVE_SIZE", "lots")

    assert MergerSettings.load().archive.max_archive_size == 50 * 1024 * 1024


@pytest.mark.parametrize(
    "overlay",
    [
        {"merge": {"default_options": ["free_trucks"]}},
        {"archive": {"max_archive_size": 0}},
        {"archive": {"min_map_files": -1}},
    ],
)
def test_invalid_values_are_rejected(tmp_path, overlay):
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump(overlay), encoding="utf-8")

    with pytest.raises(ValueError):
        MergerSettings.load(user_path=path)


def test_save_then_load(tmp_path):
    settings = MergerSettings()
    settings.merge.default_output_slot = 2
    settings.archive.min_map_files = 1
    path = tmp_path / "nested" / "settings.yaml"

    settings.save(path)
    loaded = MergerSettings.load(user_path=path)

    assert loaded.merge.default_output_slot == 2
    assert loaded.archive.min_map_files == 1
