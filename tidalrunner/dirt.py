"""Scan Dirt-Samples banks and map sample names to SuperDirt indices."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

PathLike = Union[str, os.PathLike]


def _is_wav(name: str) -> bool:
    return Path(name).suffix.lower() == ".wav"


def scan_wav_files_map(root: PathLike) -> Dict[Path, List[str]]:
    """Map each directory below root (relative to it) to the .wav files it holds."""
    base = Path(root)
    found: Dict[Path, List[str]] = {}

    def walk(directory: Path) -> None:
        try:
            with os.scandir(directory) as entries:
                items = list(entries)
        except OSError:
            return
        for entry in items:
            if entry.is_dir():
                walk(Path(entry.path))
            elif _is_wav(entry.name):
                rel_dir = directory.relative_to(base)
                found.setdefault(rel_dir, []).append(entry.name)

    walk(base)
    return found


@dataclass
class DirtSampleMap:
    """Sorted sample file names per bank, with lookup by name or index."""

    bank_to_files: Dict[str, List[str]] = field(default_factory=dict)
    file_index: Dict[Tuple[str, str], int] = field(default_factory=dict)

    @classmethod
    def from_dir(cls, root: PathLike) -> "DirtSampleMap":
        """Build the map from the bank folders directly under root."""
        banks: Dict[str, List[str]] = {}
        try:
            with os.scandir(root) as entries:
                bank_dirs = [(e.name, e.path) for e in entries if e.is_dir()]
        except OSError:
            bank_dirs = []
        for bank, path in bank_dirs:
            try:
                with os.scandir(path) as files:
                    names = sorted(f.name for f in files if _is_wav(f.name))
            except OSError:
                names = []
            if names:
                banks[bank] = names
        bank_to_files = {bank: banks[bank] for bank in sorted(banks)}
        file_index = {
            (bank, name): idx
            for bank, names in bank_to_files.items()
            for idx, name in enumerate(names)
        }
        return cls(bank_to_files, file_index)

    def index_of(self, bank: str, filename: str) -> Optional[int]:
        return self.file_index.get((bank, filename))

    def filename_of(self, bank: str, index: int) -> Optional[str]:
        files = self.bank_to_files.get(bank)
        if files is None or not 0 <= index < len(files):
            return None
        return files[index]


def default_dirt_samples_dir() -> Optional[Path]:
    """Return the user's Dirt-Samples directory if it exists."""
    if sys.platform == "win32":
        local = os.environ.get("LOCALAPPDATA")
        if not local:
            return None
        base = Path(local)
    else:
        try:
            base = Path.home()
        except RuntimeError:
            return None
    path = base / "SuperCollider" / "downloaded-quarks" / "Dirt-Samples"
    return path if path.exists() else None