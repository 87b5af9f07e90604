import socket
import subprocess
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest import mock

import pytest

from tidalrunner import bootstrap
from tidalrunner.bootstrap import (
    MAIN_OSC_PORT,
    BootstrapError,
    LaunchOptions,
    check_existing_instances,
    find_running_ghci,
    free_port,
    install_toolchain,
    parse_args,
    spawn_background,
)

GHCI_NAME = "ghci.exe" if sys.platform == "win32" else "ghci"


class FakeProc:
    def __init__(self, pid, name, cmdline, on_kill=None):
        self.pid = pid
        self.info = {"name": name, "cmdline": cmdline}
        self.killed = False
        self._on_kill = on_kill

    def kill(self):
        self.killed = True
        if self._on_kill:
            self._on_kill()

    def children(self, recursive=False):
        return []


def _ghci_proc(pid=4242):
    return FakeProc(pid, GHCI_NAME, ["ghci", "-ghci-script=BootTidal.hs"])


def test_parse_args_splits_flags_from_rest():
    opts = parse_args(["-f", "x", "--spawn", "y"])
    assert opts == LaunchOptions(force_kill=True, spawn=True, args=("x", "y"))


def test_parse_args_long_force_and_defaults():
    assert parse_args(["--force"]).force_kill is True
    assert parse_args([]) == LaunchOptions()


def test_find_running_ghci_filters_by_name():
    ghci = _ghci_proc()
    other = FakeProc(7, "python", ["python"])
    with mock.patch("psutil.process_iter", return_value=[ghci, other]):
        assert find_running_ghci() == [ghci]


def test_existing_ghci_without_force_raises_100():
    with mock.patch("psutil.process_iter", return_value=[_ghci_proc()]):
        with pytest.raises(BootstrapError) as info:
            check_existing_instances(False)
    assert info.value.exit_code == 100


def test_existing_ghci_with_force_is_killed():
    proc = _ghci_proc(pid=31)
    with mock.patch("psutil.process_iter", return_value=[proc]), mock.patch(
        "time.sleep"
    ):
        killed = check_existing_instances(True)
    assert killed == [31]
    assert proc.killed


def test_no_instances_returns_empty():
    with mock.patch("psutil.process_iter", return_value=[]):
        assert check_existing_instances(False) == []


def test_osc_port_in_use_raises_100():
    holder = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        try:
            holder.bind(("127.0.0.1", MAIN_OSC_PORT))
        except OSError:
            pass
        with mock.patch("psutil.process_iter", return_value=[]):
            with pytest.raises(BootstrapError) as info:
                check_existing_instances(False)
        assert info.value.exit_code == 100
    finally:
        holder.close()


def test_spawn_background_passes_args():
    with mock.patch("subprocess.Popen") as popen:
        result = spawn_background(["a", "b"])
    command = popen.call_args.args[0]
    assert command[-2:] == ["a", "b"]
    assert "tidalrunner.server" in command
    assert result is popen.return_value


def _free_udp_port():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as probe:
        probe.bind(("0.0.0.0", 0))
        return probe.getsockname()[1]


def test_free_port_when_already_free():
    port = _free_udp_port()
    with mock.patch("psutil.net_connections", return_value=[]), mock.patch(
        "psutil.process_iter", return_value=[]
    ):
        assert free_port(port, 3) is True


def test_free_port_kills_holder():
    holder = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    holder.bind(("0.0.0.0", 0))
    port = holder.getsockname()[1]
    victim = FakeProc(4242, "x", [], on_kill=holder.close)
    conn = SimpleNamespace(laddr=SimpleNamespace(ip="0.0.0.0", port=port), pid=4242)
    try:
        with mock.patch("psutil.net_connections", return_value=[conn]), mock.patch(
            "psutil.process_iter", return_value=[]
        ), mock.patch("psutil.Process", return_value=victim), mock.patch("time.sleep"):
            assert free_port(port, 3) is True
        assert victim.killed
    finally:
        holder.close()


def test_free_port_gives_up():
    holder = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    holder.bind(("0.0.0.0", 0))
    port = holder.getsockname()[1]
    try:
        with mock.patch("psutil.net_connections", return_value=[]), mock.patch(
            "psutil.process_iter", return_value=[]
        ), mock.patch("time.sleep") as sleep:
            with pytest.raises(BootstrapError):
                free_port(port, 2)
        assert sleep.call_count == 2
    finally:
        holder.close()


def _which(name):
    return f"/opt/tools/{name}"


class Recorder:
    def __init__(self, stdout="", fail=None):
        self.calls = []
        self.stdout = stdout
        self.fail = fail

    def __call__(self, command, **kwargs):
        self.calls.append(list(command))
        code = 1 if self.fail and self.fail in command else 0
        out = self.stdout if "list" in command else ""
        return subprocess.CompletedProcess(command, code, stdout=out, stderr="")


def test_install_toolchain_with_tidal_present():
    recorder = Recorder(stdout="tidal-1.9.10")
    with mock.patch("shutil.which", side_effect=_which), mock.patch(
        "subprocess.run", side_effect=recorder
    ):
        cabal = install_toolchain()
    ghcup = str(Path(_which("ghcup")))
    assert cabal == Path(_which("cabal"))
    assert recorder.calls[:4] == [
        [ghcup, "install", "ghc"],
        [ghcup, "install", "cabal"],
        [ghcup, "set", "ghc"],
        [ghcup, "set", "cabal"],
    ]
    assert not any("v1-install" in call for call in recorder.calls)


def test_install_toolchain_installs_tidal_when_missing():
    recorder = Recorder(stdout="", fail="v1-install")
    with mock.patch("shutil.which", side_effect=_which), mock.patch(
        "subprocess.run", side_effect=recorder
    ):
        cabal = install_toolchain()
    assert cabal == Path(_which("cabal"))
    assert recorder.calls[-1][1:] == ["v1-install", "tidal", "--force-reinstalls", "--verbose"]


def test_install_toolchain_ghc_failure():
    recorder = Recorder(fail="ghc")
    with mock.patch("shutil.which", side_effect=_which), mock.patch(
        "subprocess.run", side_effect=recorder
    ):
        with pytest.raises(BootstrapError, match="Failed to install GHC with ghcup."):
            install_toolchain()


def test_install_toolchain_without_ghcup():
    failed = subprocess.CompletedProcess([], 1)
    with mock.patch("shutil.which", return_value=None), mock.patch(
        "subprocess.run", return_value=failed
    ), mock.patch.object(bootstrap.Path, "exists", return_value=False):
        with pytest.raises(BootstrapError, match="ghcup is not installed"):
            install_toolchain()