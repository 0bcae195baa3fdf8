import zipfile

import pytest

from snowmerge import cli

FILES = ["fog_level_us_01_01.dat", "sts_level_us_01_01.dat"]


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda default_level: None)


def test_merge_writes_archive(tmp_path, save_folder, capsys):
    incoming = save_folder(tmp_path / "incoming", map_files=FILES)
    base = save_folder(tmp_path / "base", {"visitedLevels": ["level_us_01_01"]}, 1, ["1_" + f for f in FILES])
    out = tmp_path / "merged.zip"

    code = cli.main(
        [
            "merge",
            str(incoming),
            str(base),
            "--base-slot",
            "1",
            "--output-slot",
            "3",
            "--option",
            "map-progress",
            "--map",
            "US_01",
            "--out",
            str(out),
        ]
    )

    assert code == cli.EXIT_OK
    with zipfile.ZipFile(out) as archive:
        assert sorted(archive.namelist()) == [
            "3_fog_level_us_01_01.dat",
            "3_sts_level_us_01_01.dat",
            "CompleteSave3.dat",
        ]
    assert "merged.zip" in capsys.readouterr().out


def test_maps_lists_visited_maps(tmp_path, save_folder, capsys):
    save = save_folder(
        tmp_path / "save", {"visitedLevels": ["level_ru_02_01", "level_us_01_03"]}, map_files=FILES
    )

    assert cli.main(["maps", str(save)]) == cli.EXIT_OK
    assert capsys.readouterr().out.split() == ["RU_02", "US_01"]


def test_check_reports_incomplete_save(tmp_path, save_folder):
    save = save_folder(tmp_path / "save", map_files=FILES[:1])

    assert cli.main(["check", str(save)]) == cli.EXIT_REJECTED


def test_invalid_slot_is_rejected(tmp_path, save_folder):
    save = save_folder(tmp_path / "save", map_files=FILES)

    assert cli.main(["check", str(save), "--slot", "5"]) == cli.EXIT_REJECTED
    assert cli.main(["check", str(save)]) == cli.EXIT_OK


def test_unknown_option_is_rejected(tmp_path, save_folder):
    save = save_folder(tmp_path / "save", map_files=FILES)

    code = cli.main(["merge", str(save), str(save), "--option", "teleport", "--out", str(tmp_path / "o.zip")])

    assert code == cli.EXIT_REJECTED
