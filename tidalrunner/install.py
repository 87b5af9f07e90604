"""Locate the external tools, installing them through winget or ghcup when absent."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional

from tidalrunner.find import find_cabal, find_gh, find_ghcup, find_supercollider

GH_INSTALL_COMMAND = (
    "Start-Process winget -ArgumentList 'install --id=GitHub.cli -e "
    "--accept-source-agreements --accept-package-agreements' -Verb RunAs -Wait"
)

SUPERCOLLIDER_INSTALL_COMMAND = (
    "Start-Process winget -ArgumentList 'install --id=SuperCollider.SuperCollider -e "
    "--accept-source-agreements --accept-package-agreements' -Verb RunAs -Wait"
)

GHCUP_BOOTSTRAP_SCRIPT = (
    "Set-ExecutionPolicy Bypass -Scope Process -Force; "
    "[System.Net.ServicePointManager]::SecurityProtocol = "
    "[System.Net.ServicePointManager]::SecurityProtocol -bor 3072; "
    "& ([ScriptBlock]::Create((Invoke-WebRequest "
    "https://www.haskell.org/ghcup/sh/bootstrap-haskell.ps1 -UseBasicParsing))) "
    "-Interactive -DisableCurl"
)


def _run_powershell(command: str) -> bool:
    """Run a PowerShell command; True when it exits successfully."""
    try:
        result = subprocess.run(["powershell", "-Command", command], check=False)
    except OSError:
        return False
    return result.returncode == 0


def _ghcup_install_command() -> str:
    escaped = GHCUP_BOOTSTRAP_SCRIPT.replace("'", "''")
    return f"Start-Process powershell -Verb runAs -ArgumentList '{escaped}'"


def ensure_gh_installed() -> Optional[Path]:
    """Return the GitHub CLI, installing it with winget if needed."""
    found = find_gh()
    if found is not None:
        return found
    if not _run_powershell(GH_INSTALL_COMMAND):
        return None
    return find_gh()


def ensure_supercollider_installed() -> Optional[Path]:
    """Return sclang, installing SuperCollider with winget if needed."""
    found = find_supercollider()
    if found is not None:
        return found
    if not _run_powershell(SUPERCOLLIDER_INSTALL_COMMAND):
        return None
    return find_supercollider()


def ensure_ghcup_installed() -> Optional[Path]:
    """Return ghcup, running the elevated bootstrap script if needed."""
    found = find_ghcup()
    if found is not None:
        return found
    if not _run_powershell(_ghcup_install_command()):
        return None
    return find_ghcup()


def ensure_cabal_installed() -> Optional[Path]:
    """Return cabal, installing ghcup (which brings cabal) if needed."""
    found = find_cabal()
    if found is not None:
        return found
    ensure_ghcup_installed()
    return find_cabal()