"""Start-up checks and toolchain preparation for the Tidal runner."""

from __future__ import annotations

import os
import socket
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Set, Tuple

import psutil

from tidalrunner.install import ensure_cabal_installed, ensure_ghcup_installed

MAIN_OSC_PORT = 57126
SUPERDIRT_PORT = 57120
CREATE_NO_WINDOW = 0x08000000
SERVER_MODULE = "tidalrunner.server"

_GHCUP_STEPS = (
    (("install", "ghc"), "Failed to install GHC with ghcup."),
    (("install", "cabal"), "Failed to install Cabal with ghcup."),
    (("set", "ghc"), "Failed to set GHC as default with ghcup."),
    (("set", "cabal"), "Failed to set Cabal as default with ghcup."),
)


class BootstrapError(RuntimeError):
    """Raised when the runner cannot start; carries the process exit code."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@dataclass(frozen=True)
class LaunchOptions:
    """Command-line options of the runner."""

    force_kill: bool = False
    spawn: bool = False
    args: Tuple[str, ...] = ()


def parse_args(argv: Optional[Sequence[str]] = None) -> LaunchOptions:
    """Pick out -f/--force and --spawn; everything else is passed through."""
    raw = sys.argv[1:] if argv is None else argv
    force_kill = False
    spawn = False
    rest: List[str] = []
    for arg in raw:
        if arg in ("-f", "--force"):
            force_kill = True
        elif arg == "--spawn":
            spawn = True
        else:
            rest.append(arg)
    return LaunchOptions(force_kill=force_kill, spawn=spawn, args=tuple(rest))


def find_running_ghci() -> List[psutil.Process]:
    """Return GHCi processes that look like a running Tidal backend.

    On Windows only GHCi processes whose command line mentions the SuperDirt
    port or BootTidal.hs count; elsewhere every GHCi process does.
    """
    windows = sys.platform == "win32"
    wanted = "ghci.exe" if windows else "ghci"
    found = []
    for proc in psutil.process_iter(["name", "cmdline"]):
        info = proc.info
        name = (info.get("name") or "").lower()
        if wanted not in name:
            continue
        if windows:
            cmdline = " ".join(info.get("cmdline") or []).lower()
            if str(SUPERDIRT_PORT) not in cmdline and "boottidal.hs" not in cmdline:
                continue
        found.append(proc)
    return found


def _kill(proc: psutil.Process) -> None:
    try:
        proc.kill()
    except psutil.Error:
        if sys.platform == "win32":
            subprocess.run(
                ["taskkill", "/PID", str(proc.pid), "/F"],
                capture_output=True,
                check=False,
            )


def _port_free(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def check_existing_instances(force_kill: bool) -> List[int]:
    """Refuse to start beside a running backend, or kill it when forced.

    Returns the PIDs that were killed.
    """
    running = find_running_ghci()
    killed: List[int] = []
    if running and not force_kill:
        if sys.platform == "win32":
            message = (
                "A GHCi process (likely TidalCycles) is already running. "
                "Use -f or --force to kill it."
            )
        else:
            message = (
                "A GHCi process is already running. TidalCycles backend may "
                "already be active. Use -f or --force to kill it."
            )
        raise BootstrapError(message, exit_code=100)
    for proc in running:
        print(f"Killing GHCi process with PID {proc.pid}...", file=sys.stderr)
        _kill(proc)
        killed.append(proc.pid)
    if killed:
        time.sleep(0.5)
    if not _port_free("127.0.0.1", MAIN_OSC_PORT):
        raise BootstrapError(
            "Another instance of the Tidal runner is already running "
            f"(port {MAIN_OSC_PORT} in use).",
            exit_code=100,
        )
    return killed


def spawn_background(args: Sequence[str]) -> subprocess.Popen:
    """Start the runner detached from this terminal with the given arguments."""
    command = [sys.executable, "-m", SERVER_MODULE, *args]
    if sys.platform == "win32":
        proc = subprocess.Popen(command, creationflags=CREATE_NO_WINDOW, close_fds=True)
    else:
        proc = subprocess.Popen(
            ["nohup", *command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    print("Spawned in background. Exiting foreground process.")
    return proc


def _run(command: List[str], **kwargs) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(command, check=False, **kwargs)
    except OSError as exc:
        raise BootstrapError(f"could not run {command[0]}: {exc}") from exc


def install_toolchain() -> Path:
    """Install GHC, cabal and the tidal library; return the cabal executable."""
    ghcup = ensure_ghcup_installed()
    if ghcup is None:
        raise BootstrapError("ghcup is not installed and could not be installed automatically.")
    for step, failure in _GHCUP_STEPS:
        if _run([str(ghcup), *step]).returncode != 0:
            raise BootstrapError(failure)

    cabal = ensure_cabal_installed()
    if cabal is None:
        raise BootstrapError("cabal is not installed and could not be installed automatically.")
    if _run([str(cabal), "update"]).returncode != 0:
        raise BootstrapError("Failed to update cabal package list.")

    listing = _run(
        [str(cabal), "list", "--installed", "tidal"],
        capture_output=True,
        text=True,
        errors="replace",
    )
    output = listing.stdout or ""
    print(f"Cabal installed packages:\n{output}")
    if "tidal" in output:
        print("tidal is already installed.")
        return cabal

    print("Installing tidal with cabal (this may take a while)...")
    result = _run(
        [str(cabal), "v1-install", "tidal", "--force-reinstalls", "--verbose"],
        capture_output=True,
        text=True,
        errors="replace",
    )
    print(f"cabal install tidal output:\n{result.stdout or ''}\n{result.stderr or ''}")
    if result.returncode != 0:
        print("Failed to install tidal with cabal.", file=sys.stderr)
    return cabal


def _pids_on_port(port: int) -> Set[int]:
    try:
        connections = psutil.net_connections(kind="udp")
    except (psutil.Error, OSError):
        return set()
    return {
        conn.pid
        for conn in connections
        if conn.pid and conn.laddr and conn.laddr.port == port
    }


def _kill_tree(pid: int) -> None:
    try:
        proc = psutil.Process(pid)
        children = proc.children(recursive=True)
    except psutil.Error:
        return
    for child in (*children, proc):
        try:
            child.kill()
        except psutil.Error:
            pass


def _kill_other_instances() -> None:
    own = os.getpid()
    for proc in psutil.process_iter(["cmdline"]):
        cmdline = " ".join(proc.info.get("cmdline") or [])
        if proc.pid != own and SERVER_MODULE in cmdline:
            print(f"Killing other runner process with PID {proc.pid}...")
            _kill_tree(proc.pid)


def free_port(port: int, attempts: int = 7) -> bool:
    """Kill whatever holds the UDP port until it can be bound; True when free."""
    last_pid: Optional[int] = None
    for attempt in range(attempts):
        pids = _pids_on_port(port)
        for pid in sorted(pids):
            last_pid = pid
            print(
                f"Killing process with PID {pid} using port {port}... "
                f"(attempt {attempt + 1})"
            )
            _kill_tree(pid)
        _kill_other_instances()
        if _port_free("0.0.0.0", port):
            return True
        if pids:
            print(f"Waiting for port {port} to be released...")
        else:
            print(f"Port {port} is still in use, but no process found to kill.")
        time.sleep(0.7 + attempt * 0.3)
    if last_pid is not None:
        print(f"Final force kill attempt for PID {last_pid}...")
        _kill_tree(last_pid)
        time.sleep(2)
        if _port_free("0.0.0.0", port):
            return True
    raise BootstrapError(
        f"Could not free up port {port} after several forceful attempts. "
        "You may need to reboot or kill the process manually."
    )