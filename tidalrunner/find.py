"""Locate the external tools the Tidal stack depends on."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Optional, Union

import semver

SUPERCOLLIDER_PREFIX = "SuperCollider-"
DEFAULT_PROGRAM_FILES = r"C:\Program Files"

GH_FALLBACK = r"C:\Program Files\GitHub CLI\gh.exe"
GHCI_FALLBACK = r"C:\ghcup\bin\ghci.exe"
GHCUP_FALLBACK = r"C:\ghcup\bin\ghcup.exe"
CABAL_FALLBACK = r"C:\ghcup\bin\cabal.exe"


def _locate(name: str, fallback: str) -> Optional[Path]:
    found = shutil.which(name)
    if found:
        return Path(found)
    candidate = Path(fallback)
    return candidate if candidate.exists() else None


def _program_files() -> str:
    return os.environ.get("ProgramFiles", DEFAULT_PROGRAM_FILES)


def latest_supercollider(
    program_files: Union[str, os.PathLike], exe_name: str
) -> Optional[Path]:
    """Return exe_name inside the newest SuperCollider-<semver> directory."""
    best: Optional[tuple] = None
    try:
        with os.scandir(program_files) as entries:
            candidates = [(entry.name, entry.path) for entry in entries]
    except OSError:
        return None
    for name, path in candidates:
        if not name.startswith(SUPERCOLLIDER_PREFIX):
            continue
        try:
            version = semver.Version.parse(name[len(SUPERCOLLIDER_PREFIX):])
        except (ValueError, TypeError):
            continue
        exe_path = Path(path) / exe_name
        if exe_path.exists() and (best is None or version > best[0]):
            best = (version, exe_path)
    return best[1] if best else None


def find_gh() -> Optional[Path]:
    return _locate("gh", GH_FALLBACK)


def find_ghci() -> Optional[Path]:
    return _locate("ghci", GHCI_FALLBACK)


def find_supercollider() -> Optional[Path]:
    """Find sclang on PATH or in the newest SuperCollider install."""
    found = shutil.which("sclang")
    if found:
        return Path(found)
    return latest_supercollider(_program_files(), "sclang.exe")


def find_supercollider_scsynth() -> Optional[Path]:
    """Find scsynth on PATH or in the newest SuperCollider install."""
    found = shutil.which("scsynth")
    if found:
        return Path(found)
    return latest_supercollider(_program_files(), "scsynth.exe")


def find_ghcup() -> Optional[Path]:
    return _locate("ghcup", GHCUP_FALLBACK)


def find_cabal() -> Optional[Path]:
    return _locate("cabal", CABAL_FALLBACK)


def find_tools_set_env_path() -> bool:
    """Put the SuperCollider directory at the front of PATH; True if PATH changed."""
    sclang = find_supercollider()
    if sclang is None:
        return False
    sc_dir = str(sclang.parent)
    path_var = os.environ.get("PATH", "")
    entries = path_var.split(os.pathsep) if path_var else []
    if any(entry.lower() == sc_dir.lower() for entry in entries):
        return False
    os.environ["PATH"] = os.pathsep.join([sc_dir, *entries])
    return True