"""Install the TidalLooper extension for SuperCollider with git."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional

EXTENSIONS_SUBDIR = Path("AppData") / "Local" / "SuperCollider" / "Extensions"
QUARKS_SUBDIR = Path(".local") / "share" / "SuperCollider" / "Quarks"
LOOPER_URL_ENV = "TIDAL_LOOPER_URL"
DEFAULT_LOOPER_URL = "https://git.example.com/tidal-looper.git"


class LooperInstallError(RuntimeError):
    """Raised when TidalLooper cannot be installed."""


def _looper_url() -> str:
    return os.environ.get(LOOPER_URL_ENV, DEFAULT_LOOPER_URL)


def _home(message: str) -> Path:
    try:
        return Path.home()
    except RuntimeError as exc:
        raise LooperInstallError(message) from exc


def _clone(target: Path) -> bool:
    try:
        result = subprocess.run(
            ["git", "clone", _looper_url(), str(target)], check=False
        )
    except OSError:
        return False
    return result.returncode == 0


def ensure_tidallooper_quark_installed() -> bool:
    """Clone TidalLooper into the Quarks directory.

    Returns True if it was cloned, False if it was already present.
    """
    looper_dir = _home("Could not determine home directory") / QUARKS_SUBDIR / "TidalLooper"
    if looper_dir.exists():
        return False
    print("TidalLooper Quark not found, attempting to clone...")
    if not _clone(looper_dir):
        raise LooperInstallError(
            "Failed to clone TidalLooper Quark. "
            "Please install manually if you need live looping."
        )
    return True


def get_sc_user_plugins_dir() -> Optional[Path]:
    """Return the SuperCollider user Extensions directory."""
    try:
        return Path.home() / EXTENSIONS_SUBDIR
    except RuntimeError:
        return None


def ensure_tidallooper_in_user_extensions() -> bool:
    """Clone TidalLooper into the user Extensions directory.

    Returns True if it was cloned, False if it was already present.
    """
    extensions = _home("Could not find home directory") / EXTENSIONS_SUBDIR
    looper_dir = extensions / "tidal-looper"
    if looper_dir.exists():
        return False
    print("TidalLooper not found in Extensions, attempting to clone...")
    try:
        extensions.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise LooperInstallError(f"Failed to create Extensions dir: {exc}") from exc
    if not _clone(looper_dir):
        raise LooperInstallError(
            "Failed to clone TidalLooper into Extensions. "
            "Please install manually if you need live looping."
        )
    return True