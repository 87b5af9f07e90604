import shutil
import subprocess
import zipfile
from pathlib import Path

import pytest

from tidalrunner.sc3_plugins import (
    copy_sc3_plugins,
    download_sc3_plugins,
    extract_zip,
    install_sc3_plugins,
    is_sc3_plugins_installed,
)


def make_zip(path: Path) -> Path:
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("SC3plugins/", "")
        archive.writestr("SC3plugins/Ugens/plugin.scx", b"binary")
        archive.writestr("readme.txt", "notes")
    return path


@pytest.fixture
def home(tmp_path, monkeypatch):
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home_dir)
    return home_dir


@pytest.fixture
def gh_present(monkeypatch):
    monkeypatch.setattr(shutil, "which", lambda name, *a, **k: "/usr/bin/gh" if name == "gh" else None)


@pytest.fixture
def gh_calls(monkeypatch):
    calls = []

    def fake_run(args, check=False, **kwargs):
        calls.append(list(args))
        target = Path(args[args.index("--dir") + 1])
        make_zip(target / "sc3-plugins-Windows-64bit.zip")
        return subprocess.CompletedProcess(args, 0)

    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


def test_extract_zip(tmp_path):
    archive = make_zip(tmp_path / "a.zip")
    out = tmp_path / "out"
    extract_zip(archive, out)
    assert (out / "SC3plugins" / "Ugens" / "plugin.scx").read_bytes() == b"binary"
    assert (out / "readme.txt").read_text() == "notes"


def test_extract_missing_zip(tmp_path):
    with pytest.raises(FileNotFoundError):
        extract_zip(tmp_path / "absent.zip", tmp_path / "out")


def test_copy_replaces_existing_and_skips_files(tmp_path):
    extracted = tmp_path / "extracted"
    (extracted / "Plug").mkdir(parents=True)
    (extracted / "Plug" / "new.scx").write_text("new")
    (extracted / "loose.txt").write_text("x")
    dest = tmp_path / "dest"
    (dest / "Plug").mkdir(parents=True)
    (dest / "Plug" / "old.scx").write_text("old")
    copy_sc3_plugins(extracted, dest)
    assert sorted(p.name for p in (dest / "Plug").iterdir()) == ["new.scx"]
    assert not (dest / "loose.txt").exists()
    assert not (extracted / "Plug").exists()


def test_download_finds_zip(tmp_path, gh_present, gh_calls):
    found = download_sc3_plugins(tmp_path / "dl")
    assert found.name.endswith("Windows-64bit.zip")
    assert gh_calls[0][1:5] == ["release", "download", "--repo", "supercollider/sc3-plugins"]
    assert "--clobber" in gh_calls[0]


def test_download_failure(tmp_path, gh_present, monkeypatch):
    monkeypatch.setattr(subprocess, "run", lambda args, check=False, **k: subprocess.CompletedProcess(args, 1))
    with pytest.raises(OSError, match="Failed to download sc3-plugins"):
        download_sc3_plugins(tmp_path / "dl")


def test_download_without_zip(tmp_path, gh_present, monkeypatch):
    monkeypatch.setattr(subprocess, "run", lambda args, check=False, **k: subprocess.CompletedProcess(args, 0))
    with pytest.raises(FileNotFoundError):
        download_sc3_plugins(tmp_path / "dl")


def test_download_without_gh(tmp_path, monkeypatch):
    monkeypatch.setattr(shutil, "which", lambda name, *a, **k: None)
    monkeypatch.setattr(subprocess, "run", lambda args, check=False, **k: subprocess.CompletedProcess(args, 1))
    with pytest.raises(OSError, match="gh CLI is not installed"):
        download_sc3_plugins(tmp_path / "dl")


def test_not_installed_when_missing_or_empty(home):
    assert is_sc3_plugins_installed() is False
    plugins = home / "AppData" / "Local" / "SuperCollider" / "Extensions" / "sc3-plugins"
    plugins.mkdir(parents=True)
    assert is_sc3_plugins_installed() is False
    (plugins / "x").mkdir()
    assert is_sc3_plugins_installed() is True


def test_install_end_to_end(tmp_path, home, gh_present, gh_calls, monkeypatch):
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    install_sc3_plugins()
    plugins = home / "AppData" / "Local" / "SuperCollider" / "Extensions" / "sc3-plugins"
    assert (plugins / "SC3plugins" / "Ugens" / "plugin.scx").read_bytes() == b"binary"
    assert is_sc3_plugins_installed() is True
    assert not (work / "tmp_gh").exists()


def test_install_failure_cleans_up(tmp_path, home, gh_present, monkeypatch):
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.setattr(subprocess, "run", lambda args, check=False, **k: subprocess.CompletedProcess(args, 1))
    with pytest.raises(OSError):
        install_sc3_plugins()
    assert not (work / "tmp_gh").exists()