"""Download and install the sc3-plugins release for SuperCollider."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import zipfile
from pathlib import Path
from typing import Optional, Union

from tidalrunner.install import ensure_gh_installed

PathLike = Union[str, os.PathLike]

RELEASE_REPO = "supercollider/sc3-plugins"
ZIP_SUFFIX = "Windows-64bit.zip"
TMP_DIR = "tmp_gh"
PLUGINS_SUBDIR = Path("AppData") / "Local" / "SuperCollider" / "Extensions" / "sc3-plugins"


def _plugins_dir() -> Optional[Path]:
    try:
        return Path.home() / PLUGINS_SUBDIR
    except RuntimeError:
        return None


def download_sc3_plugins(tmp_dir: PathLike) -> Path:
    """Download the latest Windows release zip into tmp_dir and return its path."""
    tmp = Path(tmp_dir)
    tmp.mkdir(parents=True, exist_ok=True)
    gh = ensure_gh_installed()
    if gh is None:
        raise OSError("gh CLI is not installed")
    result = subprocess.run(
        [
            str(gh),
            "release",
            "download",
            "--repo",
            RELEASE_REPO,
            "--pattern",
            f"*{ZIP_SUFFIX}",
            "--dir",
            str(tmp),
            "--clobber",
        ],
        check=False,
    )
    if result.returncode != 0:
        raise OSError("Failed to download sc3-plugins")
    for entry in tmp.iterdir():
        if entry.name.endswith(ZIP_SUFFIX):
            return entry
    raise FileNotFoundError("Zip file not found")


def extract_zip(zip_path: PathLike, extract_to: PathLike) -> None:
    """Extract every member of the archive below extract_to."""
    target = Path(extract_to)
    with zipfile.ZipFile(zip_path) as archive:
        target.mkdir(parents=True, exist_ok=True)
        for member in archive.infolist():
            out_path = target / member.filename
            if member.is_dir():
                out_path.mkdir(parents=True, exist_ok=True)
                continue
            out_path.parent.mkdir(parents=True, exist_ok=True)
            with archive.open(member) as src, open(out_path, "wb") as dst:
                shutil.copyfileobj(src, dst)


def copy_sc3_plugins(extracted_dir: PathLike, sc_user_plugins_dir: PathLike) -> None:
    """Move each extracted plugin directory into the user plugins directory."""
    dest_root = Path(sc_user_plugins_dir)
    dest_root.mkdir(parents=True, exist_ok=True)
    for entry in Path(extracted_dir).iterdir():
        if not entry.is_dir():
            continue
        dest = dest_root / entry.name
        if dest.exists():
            shutil.rmtree(dest)
        shutil.move(str(entry), str(dest))


def install_sc3_plugins() -> None:
    """Download, extract and install sc3-plugins; the temp directory is always removed."""
    plugins_dir = _plugins_dir()
    if plugins_dir is None:
        raise OSError("Could not find home directory")
    try:
        zip_path = download_sc3_plugins(TMP_DIR)
        extract_to = Path(TMP_DIR) / "extracted"
        extract_zip(zip_path, extract_to)
        copy_sc3_plugins(extract_to, plugins_dir)
    finally:
        try:
            shutil.rmtree(TMP_DIR)
        except OSError as exc:
            print(f"Warning: failed to remove temp dir {TMP_DIR}: {exc}", file=sys.stderr)
    print("sc3-plugins installed successfully.")


def is_sc3_plugins_installed() -> bool:
    """True when the sc3-plugins directory exists and is not empty."""
    plugins_dir = _plugins_dir()
    if plugins_dir is None or not plugins_dir.is_dir():
        return False
    try:
        return any(plugins_dir.iterdir())
    except OSError:
        return False