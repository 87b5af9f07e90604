import subprocess
from pathlib import Path

import pytest

from tidalrunner import looper
from tidalrunner.looper import (
    LooperInstallError,
    ensure_tidallooper_in_user_extensions,
    ensure_tidallooper_quark_installed,
    get_sc_user_plugins_dir,
)


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    return tmp_path


@pytest.fixture
def git_calls(monkeypatch):
    calls = []

    def fake_run(args, check=False, **kwargs):
        calls.append(list(args))
        Path(args[-1]).mkdir(parents=True)
        return subprocess.CompletedProcess(args, 0)

    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


def failing_run(args, check=False, **kwargs):
    return subprocess.CompletedProcess(args, 128)


def missing_git(args, check=False, **kwargs):
    raise FileNotFoundError("git")


def test_plugins_dir_under_home(home):
    assert get_sc_user_plugins_dir() == home / "AppData" / "Local" / "SuperCollider" / "Extensions"


def test_extensions_clone(home, git_calls, monkeypatch):
    monkeypatch.setenv(looper.LOOPER_URL_ENV, "https://git.example.com/looper.git")
    assert ensure_tidallooper_in_user_extensions() is True
    target = get_sc_user_plugins_dir() / "tidal-looper"
    assert git_calls == [
        ["git", "clone", "https://git.example.com/looper.git", str(target)]
    ]
    assert target.is_dir()


def test_extensions_already_present(home, git_calls):
    (get_sc_user_plugins_dir() / "tidal-looper").mkdir(parents=True)
    assert ensure_tidallooper_in_user_extensions() is False
    assert git_calls == []


def test_extensions_clone_failure(home, monkeypatch):
    monkeypatch.setattr(subprocess, "run", failing_run)
    with pytest.raises(LooperInstallError, match="Extensions"):
        ensure_tidallooper_in_user_extensions()


def test_extensions_git_missing(home, monkeypatch):
    monkeypatch.setattr(subprocess, "run", missing_git)
    with pytest.raises(LooperInstallError):
        ensure_tidallooper_in_user_extensions()


def test_quark_clone(home, git_calls):
    assert ensure_tidallooper_quark_installed() is True
    target = home / ".local" / "share" / "SuperCollider" / "Quarks" / "TidalLooper"
    assert git_calls[0][-1] == str(target)
    assert target.is_dir()


def test_quark_already_present(home, git_calls):
    (home / ".local" / "share" / "SuperCollider" / "Quarks" / "TidalLooper").mkdir(parents=True)
    assert ensure_tidallooper_quark_installed() is False
    assert git_calls == []


def test_quark_clone_failure(home, monkeypatch):
    monkeypatch.setattr(subprocess, "run", failing_run)
    with pytest.raises(LooperInstallError, match="Quark"):
        ensure_tidallooper_quark_installed()