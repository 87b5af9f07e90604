from pathlib import Path

import pytest

from tidalrunner.dirt import DirtSampleMap, default_dirt_samples_dir, scan_wav_files_map


@pytest.fixture
def samples(tmp_path):
    root = tmp_path / "Dirt-Samples"
    (root / "bd" / "deep").mkdir(parents=True)
    (root / "sn").mkdir()
    (root / "empty").mkdir()
    for rel in ["bd/a.wav", "bd/BD1.WAV", "bd/notes.txt", "bd/deep/y.wav",
                "sn/x.wav", "stray.wav", "empty/readme.md"]:
        (root / rel).write_bytes(b"RIFF")
    return root


def test_scan_wav_files_map(samples):
    result = {k: sorted(v) for k, v in scan_wav_files_map(samples).items()}
    assert result == {
        Path(""): ["stray.wav"],
        Path("bd"): ["BD1.WAV", "a.wav"],
        Path("bd/deep"): ["y.wav"],
        Path("sn"): ["x.wav"],
    }


def test_scan_missing_root_is_empty(tmp_path):
    assert scan_wav_files_map(tmp_path / "none") == {}


def test_from_dir_banks_sorted_and_nonempty(samples):
    dirt = DirtSampleMap.from_dir(samples)
    assert list(dirt.bank_to_files) == ["bd", "sn"]
    assert dirt.bank_to_files["bd"] == sorted(["a.wav", "BD1.WAV"])
    assert dirt.bank_to_files["sn"] == ["x.wav"]


def test_index_and_filename_round_trip(samples):
    dirt = DirtSampleMap.from_dir(samples)
    for bank, files in dirt.bank_to_files.items():
        for idx, name in enumerate(files):
            assert dirt.index_of(bank, name) == idx
            assert dirt.filename_of(bank, idx) == name


def test_lookups_for_missing_entries(samples):
    dirt = DirtSampleMap.from_dir(samples)
    assert dirt.index_of("bd", "notes.txt") is None
    assert dirt.index_of("hh", "a.wav") is None
    assert dirt.filename_of("bd", 2) is None
    assert dirt.filename_of("bd", -1) is None
    assert dirt.filename_of("empty", 0) is None


def test_from_missing_dir_is_empty(tmp_path):
    dirt = DirtSampleMap.from_dir(tmp_path / "none")
    assert dirt.bank_to_files == {}
    assert dirt.file_index == {}


def _point_home(monkeypatch, tmp_path):
    for name in ("HOME", "USERPROFILE", "LOCALAPPDATA"):
        monkeypatch.setenv(name, str(tmp_path))


def test_default_dirt_samples_dir_found(monkeypatch, tmp_path):
    _point_home(monkeypatch, tmp_path)
    expected = tmp_path / "SuperCollider" / "downloaded-quarks" / "Dirt-Samples"
    expected.mkdir(parents=True)
    assert default_dirt_samples_dir() == expected


def test_default_dirt_samples_dir_missing(monkeypatch, tmp_path):
    _point_home(monkeypatch, tmp_path)
    assert default_dirt_samples_dir() is None