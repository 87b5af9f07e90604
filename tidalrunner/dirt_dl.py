"""Install and remove extra SuperDirt sample sets selected by folder prefix."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class Repo:
    """A git repository holding sample folders under its dirt/ directory."""

    name: str
    url: str
    branch: str
    dir_prefixes: Tuple[str, ...]


REPO_ST = Repo(
    name="uxn-st",
    url=os.environ.get("TCRS_UXN_ST_URL", "https://git.example.com/uxn-st.git"),
    branch="dirt",
    dir_prefixes=("11_st", "22_st"),
)

REPO_AKWF = Repo(
    name="uxn-akwf",
    url=os.environ.get("TCRS_UXN_AKWF_URL", "https://git.example.com/uxn-akwf.git"),
    branch="dirt",
    dir_prefixes=("akwf_",),
)

AKWF_PREFIX = "akwf_"
STATUS_LIST_LIMIT = 8

HELP = """tcrs_dirt_dl — install/remove uxn-st (Dirt-Samples) & uxn-akwf (downloaded-quarks/akwf)

USAGE:
  tcrs_dirt_dl <command> [--dest-samples <path>] [--dest-akwf <path>]

COMMANDS:
  install            Install 22_st (uxn-st) into Dirt-Samples AND akwf_* into downloaded-quarks/akwf
  install-st         Install uxn-st (22_st* only)
  install-st-11      Install uxn-st (11_st* only)
  install-st-all     Install uxn-st (both 11_st* and 22_st*)
  install-akwf       Install uxn-akwf (akwf_*) into downloaded-quarks/akwf
  remove             Remove 11_st*, 22_st*, and akwf folder
  remove-st          Remove both 11_st* and 22_st*
  remove-st-22       Remove 22_st* only
  remove-st-11       Remove 11_st* only
  remove-akwf        Remove akwf folder
  status             Show installed sets
"""


def _home() -> Path:
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    return Path(home) if home else Path(".")


def _local_app_data() -> Optional[Path]:
    if sys.platform == "win32":
        local = os.environ.get("LOCALAPPDATA")
        if local is not None:
            return Path(local)
    return None


def default_dirt_samples_dir() -> Path:
    local = _local_app_data()
    if local is not None:
        return local / "SuperCollider" / "downloaded-quarks" / "Dirt-Samples"
    return _home() / "Dirt-Samples"


def default_quarks_root() -> Path:
    local = _local_app_data()
    if local is not None:
        return local / "SuperCollider" / "downloaded-quarks"
    return _home() / "SuperCollider" / "downloaded-quarks"


def copy_tree(src: PathLike, dst: PathLike) -> None:
    """Copy the directory tree src into dst, merging with what is there."""
    shutil.copytree(src, dst, dirs_exist_ok=True)


def _temp_dir() -> Path:
    here = Path(tempfile.gettempdir()) / "tcrs_dirt_dl"
    here.mkdir(parents=True, exist_ok=True)
    return here


def _clone_dirt(repo: Repo) -> Path:
    """Shallow-clone the repo into a fresh temp directory; return (tmp, tmp/dirt)."""
    tmp = _temp_dir() / f"{repo.name}_dl"
    if tmp.exists():
        shutil.rmtree(tmp, ignore_errors=True)
    tmp.mkdir(parents=True, exist_ok=True)
    print(f"→ Cloning {repo.url} (branch {repo.branch}) …")
    result = subprocess.run(
        [
            "git",
            "clone",
            "--branch",
            repo.branch,
            "--single-branch",
            "--depth",
            "1",
            repo.url,
            str(tmp),
        ],
        check=False,
    )
    if result.returncode != 0:
        raise OSError("git clone failed")
    src_dirt = tmp / "dirt"
    if not src_dirt.is_dir():
        raise FileNotFoundError(f"no 'dirt/' directory in cloned repo: {src_dirt}")
    return tmp


def _copy_new(entry: os.DirEntry, dst: Path, allow_files: bool) -> None:
    if entry.is_dir(follow_symlinks=False):
        if dst.exists():
            print(f"= exists, skipping  {dst}")
        else:
            print(f"+ add dir          {dst}")
            copy_tree(entry.path, dst)
    elif allow_files and entry.is_file(follow_symlinks=False):
        if dst.exists():
            print(f"= exists, skipping  {dst}")
        else:
            print(f"+ add file         {dst}")
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(entry.path, dst)


def install_repo_filtered(
    repo: Repo, dest: PathLike, only_prefixes: Optional[Sequence[str]] = None
) -> None:
    """Copy the repo's dirt/ entries whose names start with a wanted prefix."""
    dest = Path(dest)
    dest.mkdir(parents=True, exist_ok=True)
    tmp = _clone_dirt(repo)
    wanted = tuple(only_prefixes if only_prefixes is not None else repo.dir_prefixes)
    with os.scandir(tmp / "dirt") as entries:
        items = list(entries)
    for entry in items:
        if entry.name.startswith(wanted):
            _copy_new(entry, dest / entry.name, allow_files=True)
    shutil.rmtree(tmp, ignore_errors=True)


def install_akwf(repo: Repo, akwf_root: PathLike) -> None:
    """Copy only the akwf_* directories of the repo's dirt/ into akwf_root."""
    akwf_root = Path(akwf_root)
    akwf_root.mkdir(parents=True, exist_ok=True)
    tmp = _clone_dirt(repo)
    with os.scandir(tmp / "dirt") as entries:
        items = list(entries)
    for entry in items:
        if entry.name.startswith(AKWF_PREFIX):
            _copy_new(entry, akwf_root / entry.name, allow_files=False)
    shutil.rmtree(tmp, ignore_errors=True)


def remove_repo_filtered(
    repo: Repo, dest: PathLike, only_prefixes: Optional[Sequence[str]] = None
) -> None:
    """Delete the entries of dest whose names start with a wanted prefix."""
    dest = Path(dest)
    wanted = tuple(only_prefixes if only_prefixes is not None else repo.dir_prefixes)
    if not dest.is_dir():
        print(f"(dest not found: {dest})")
        return
    removed_any = False
    with os.scandir(dest) as entries:
        items = list(entries)
    for entry in items:
        if not entry.name.startswith(wanted):
            continue
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            print(f"- remove dir       {path}")
            shutil.rmtree(path)
        else:
            print(f"- remove file      {path}")
            path.unlink()
        removed_any = True
    if not removed_any:
        print(f"(no matching '{repo.name}' items to remove in {dest})")


def remove_akwf_root(akwf_root: PathLike) -> None:
    akwf_root = Path(akwf_root)
    if akwf_root.exists():
        print(f"- remove akwf root {akwf_root}")
        shutil.rmtree(akwf_root)
    else:
        print(f"(akwf root not found: {akwf_root})")


def count_by_prefixes(dest: PathLike, prefixes: Sequence[str]) -> Tuple[int, List[str]]:
    """Count the directories in dest whose names start with one of prefixes."""
    dest = Path(dest)
    if not dest.is_dir():
        return 0, []
    wanted = tuple(prefixes)
    try:
        with os.scandir(dest) as entries:
            names = sorted(
                e.name
                for e in entries
                if e.is_dir(follow_symlinks=False) and e.name.startswith(wanted)
            )
    except OSError:
        names = []
    return len(names), names


def _print_listing(names: List[str]) -> None:
    for name in names[:STATUS_LIST_LIMIT]:
        print(f"    - {name}")
    if len(names) > STATUS_LIST_LIMIT:
        print(f"    … and {len(names) - STATUS_LIST_LIMIT} more")


def status(samples_root: PathLike, akwf_root: PathLike) -> None:
    """Print which sample sets are installed."""
    st_11, st_11_list = count_by_prefixes(samples_root, ["11_st"])
    st_22, st_22_list = count_by_prefixes(samples_root, ["22_st"])
    akwf_count, _ = count_by_prefixes(akwf_root, [AKWF_PREFIX])
    print(f"Dirt-Samples: {samples_root}")
    print(f"  uxn-st  11_st* : {st_11} folders")
    _print_listing(st_11_list)
    print(f"  uxn-st  22_st* : {st_22} folders")
    _print_listing(st_22_list)
    print(f"AKWF root: {akwf_root}")
    print(f"  akwf_* folders : {akwf_count}")


def _git_available() -> bool:
    try:
        result = subprocess.run(
            ["git", "--version"], stdout=subprocess.DEVNULL, check=False
        )
    except OSError:
        return False
    return result.returncode == 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or any(a in ("-h", "--help") for a in args):
        print(HELP, file=sys.stderr)
        return 0

    dest_samples: Optional[Path] = None
    dest_akwf: Optional[Path] = None
    remaining: List[str] = []
    it = iter(args)
    for arg in it:
        if arg in ("--dest", "--dest-samples", "--dest-akwf"):
            value = next(it, None)
            if value is None:
                print(f"{arg} requires a path", file=sys.stderr)
                return 2
            if arg == "--dest-akwf":
                dest_akwf = Path(value)
            else:
                dest_samples = Path(value)
        else:
            remaining.append(arg)

    cmd = remaining[0] if remaining else ""
    samples_root = dest_samples if dest_samples is not None else default_dirt_samples_dir()
    akwf_root = dest_akwf if dest_akwf is not None else default_quarks_root() / "akwf"

    needs_git = {"install", "install-st", "install-st-22", "install-st-11", "install-st-all", "install-akwf"}
    actions = {
        "install": lambda: (
            install_repo_filtered(REPO_ST, samples_root, ["22_st"]),
            install_akwf(REPO_AKWF, akwf_root),
            print(f"✅ Installed 22_st* into {samples_root}\n✅ Installed akwf_* into {akwf_root}"),
        ),
        "install-st": lambda: install_repo_filtered(REPO_ST, samples_root, ["22_st"]),
        "install-st-22": lambda: install_repo_filtered(REPO_ST, samples_root, ["22_st"]),
        "install-st-11": lambda: install_repo_filtered(REPO_ST, samples_root, ["11_st"]),
        "install-st-all": lambda: install_repo_filtered(REPO_ST, samples_root, ["11_st", "22_st"]),
        "install-akwf": lambda: install_akwf(REPO_AKWF, akwf_root),
        "remove": lambda: (
            remove_repo_filtered(REPO_ST, samples_root, ["11_st", "22_st"]),
            remove_akwf_root(akwf_root),
        ),
        "remove-st": lambda: remove_repo_filtered(REPO_ST, samples_root, ["11_st", "22_st"]),
        "remove-st-22": lambda: remove_repo_filtered(REPO_ST, samples_root, ["22_st"]),
        "remove-st-11": lambda: remove_repo_filtered(REPO_ST, samples_root, ["11_st"]),
        "remove-akwf": lambda: remove_akwf_root(akwf_root),
        "status": lambda: status(samples_root, akwf_root),
    }

    action = actions.get(cmd)
    if action is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        print(HELP, file=sys.stderr)
        return 2
    if cmd in needs_git and not _git_available():
        print("git not found. Please install Git and ensure it’s on PATH.", file=sys.stderr)
        return 1
    try:
        action()
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())