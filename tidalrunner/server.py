"""Run SuperCollider, SuperDirt and a GHCi Tidal session behind an OSC control port."""

from __future__ import annotations

import os
import queue
import socket
import subprocess
import sys
import threading
from pathlib import Path
from typing import IO, Optional, Sequence, Union

from tidalrunner.bootstrap import (
    MAIN_OSC_PORT,
    SUPERDIRT_PORT,
    BootstrapError,
    check_existing_instances,
    free_port,
    install_toolchain,
    parse_args,
    spawn_background,
)
from tidalrunner.find import find_ghci, find_tools_set_env_path
from tidalrunner.install import ensure_supercollider_installed
from tidalrunner.looper import LooperInstallError, ensure_tidallooper_in_user_extensions
from tidalrunner.osc import OscError, decode_message
from tidalrunner.sc3_plugins import install_sc3_plugins, is_sc3_plugins_installed

STARTUP_FILE = "startup.scd"
BOOT_TIDAL_FILE = "BootTidal.hs"
TIDAL_ADDRESS = "/tidal"
BUFFER_SIZE = 2048

_LOOPER_PLACEHOLDER = "@LOOPER_PATH@"

_STARTUP_TEMPLATE = """
(
"[DEBUG] startup.scd begin".postln;
s.options.numBuffers = 16384;
s.options.memSize = 131072;
s.options.maxNodes = 1024;
s.options.maxSynthDefs = 1024;
s.options.numWireBufs = 128;
// Install the TidalLooper Quark from the user Extensions dir if it is missing
if((Quarks.installed.select(_.name == "TidalLooper")).isEmpty) {
    Quarks.install("@LOOPER_PATH@");
};
if (SuperDirt.notNil) {
    "[DEBUG] SuperDirt is present".postln;
    s.reboot { s.waitForBoot {
        "[DEBUG] Server booted, starting SuperDirt".postln;
        ~dirt = SuperDirt(2, s);
        ~looper = TidalLooper(~dirt);
        ~dirt.loadSoundFiles;
        ~dirt.start(57120, 0 ! 12);
        ~d1 = ~dirt.orbits[0];
        ~superdirtPath = Quarks.folder +/+ "SuperDirt";
        this.executeFile(~superdirtPath +/+ "library" +/+ "default-synths-extra.scd");
        this.executeFile(~superdirtPath +/+ "library" +/+ "default-effects-extra.scd");

        // OSC code evaluation handler
        (
        ~oscEval = OSCFunc({ |msg, time, addr, recvPort|
            var code = msg[1];
            if (code.isString or: { code.isKindOf(Symbol) }) {
                code.asString.interpret;
            } {
                ("OSC /eval: code is not a String or Symbol: " ++ code.class).postln;
            }
        }, '/eval', nil);
        );
        "[DEBUG] SuperDirt started".postln;
    };
    };
} {
    "[DEBUG] SuperDirt not found, installing...".postln;
    Quarks.install("SuperDirt");
    thisProcess.recompile;
    "SuperDirt installed. Please restart SuperCollider.".postln;
    0.exit;
}
)
"""

BOOT_TIDAL = """:set -fno-warn-orphans -Wno-type-defaults -XMultiParamTypeClasses -XOverloadedStrings
:set prompt ""
:set prompt-cont ""

import Sound.Tidal.Boot

default (Rational, Integer, Double, Pattern String)

tidalInst <- mkTidal

instance Tidally where tidal = tidalInst

:set prompt "tidal> "
:set prompt-cont ""
"""


def looper_extension_path(username: Optional[str] = None) -> str:
    """Return the TidalLooper directory in the user's Extensions, with forward slashes."""
    if username is None:
        username = os.environ.get("USERNAME", "User")
    path = f"C:/Users/{username}/AppData/Local/SuperCollider/Extensions/tidal-looper"
    return path.replace("\\", "/")


def startup_script(looper_path: str) -> str:
    """Return the sclang start-up script that boots SuperDirt."""
    return _STARTUP_TEMPLATE.replace(_LOOPER_PLACEHOLDER, looper_path)


def _pump(stream: IO[str], prefix: str) -> None:
    for line in stream:
        print(f"{prefix} {line}", end="")


def _start_pump(stream: Optional[IO[str]], prefix: str) -> Optional[threading.Thread]:
    if stream is None:
        return None
    thread = threading.Thread(target=_pump, args=(stream, prefix), daemon=True)
    thread.start()
    return thread


def launch_supercollider(sclang: Union[str, os.PathLike]) -> subprocess.Popen:
    """Start sclang on the start-up script, echoing its output in the background."""
    proc = subprocess.Popen(
        [str(sclang), STARTUP_FILE],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        errors="replace",
    )
    _start_pump(proc.stdout, "[SuperCollider stdout]")
    _start_pump(proc.stderr, "[SuperCollider stderr]")
    threading.Thread(target=proc.wait, daemon=True).start()
    return proc


def run_tidal(code_queue: "queue.Queue[Optional[str]]") -> Optional[int]:
    """Run GHCi with the Tidal boot script, feeding it code from the queue.

    A None in the queue ends the session. Returns GHCi's exit code, or None
    when GHCi cannot be found.
    """
    ghci = find_ghci()
    if ghci is None:
        print("ghci is not installed or not found in PATH.", file=sys.stderr)
        return None
    boot = Path(BOOT_TIDAL_FILE)
    boot.write_text(BOOT_TIDAL, encoding="utf-8")
    try:
        proc = subprocess.Popen(
            [str(ghci), f"-ghci-script={BOOT_TIDAL_FILE}"],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
        readers = [
            _start_pump(proc.stdout, "[Tidal stdout]"),
            _start_pump(proc.stderr, "[Tidal stderr]"),
        ]
        stdin = proc.stdin
        for code in iter(code_queue.get, None):
            try:
                stdin.write(f"{code}\n")
                stdin.flush()
            except (BrokenPipeError, OSError, ValueError):
                pass
        try:
            stdin.close()
        except OSError:
            pass
        for reader in readers:
            if reader is not None:
                reader.join()
        return proc.wait()
    finally:
        try:
            boot.unlink()
        except OSError:
            pass


def serve_osc(sock: socket.socket, code_queue: "queue.Queue[Optional[str]]") -> int:
    """Forward the string of every /tidal message to the queue.

    Returns the number of messages forwarded once the socket is closed or
    times out.
    """
    forwarded = 0
    while True:
        try:
            data, _addr = sock.recvfrom(BUFFER_SIZE)
        except OSError:
            return forwarded
        try:
            message = decode_message(data)
        except OscError:
            continue
        if message.address != TIDAL_ADDRESS or not message.args:
            continue
        code = message.args[0]
        if not isinstance(code, str):
            continue
        print(f"[OSC] Received Tidal code: {code}")
        code_queue.put(code)
        forwarded += 1


def _ensure_sc3_plugins() -> None:
    if is_sc3_plugins_installed():
        print("sc3-plugins are already installed.")
        return
    print("Installing sc3-plugins...")
    install_sc3_plugins()


def _ensure_looper() -> None:
    try:
        cloned = ensure_tidallooper_in_user_extensions()
    except LooperInstallError as exc:
        print(f"[WARN] {exc}", file=sys.stderr)
        return
    if cloned:
        print("TidalLooper Quark cloned successfully to user Extensions dir.")
    else:
        print("TidalLooper Quark already present in user Extensions dir.")


def _bind_osc() -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind(("0.0.0.0", MAIN_OSC_PORT))
        return sock
    except OSError as exc:
        if sys.platform != "win32":
            sock.close()
            raise BootstrapError(f"could not bind UDP socket: {exc}") from exc
    print(
        f"Port {MAIN_OSC_PORT} is in use, attempting to kill process using it "
        "(Windows only)..."
    )
    free_port(MAIN_OSC_PORT, 1)
    try:
        sock.bind(("0.0.0.0", MAIN_OSC_PORT))
    except OSError as exc:
        sock.close()
        raise BootstrapError(
            "could not bind UDP socket after killing process"
        ) from exc
    return sock


def _serve(sclang: Path, looper_path: str) -> int:
    startup = Path(STARTUP_FILE)
    startup.write_text(startup_script(looper_path), encoding="utf-8")
    code_queue: "queue.Queue[Optional[str]]" = queue.Queue()
    sc_proc: Optional[subprocess.Popen] = None
    try:
        sc_proc = launch_supercollider(sclang)
        print("SuperCollider launched in background..")
        threading.Thread(target=run_tidal, args=(code_queue,), daemon=True).start()
        with _bind_osc() as sock:
            print(
                f"OSC Tidal server listening on udp://0.0.0.0:{MAIN_OSC_PORT} "
                "(send /tidal <string>)"
            )
            serve_osc(sock, code_queue)
        return 0
    except KeyboardInterrupt:
        print("\nCtrl+C received, killing all child processes...")
        if sc_proc is not None and sc_proc.poll() is None:
            sc_proc.kill()
        return 1
    finally:
        code_queue.put(None)
        try:
            startup.unlink()
        except OSError:
            pass


def main(argv: Optional[Sequence[str]] = None) -> int:
    options = parse_args(argv)
    try:
        check_existing_instances(options.force_kill)
        if options.spawn:
            spawn_background(options.args)
            return 0
        install_toolchain()
        sclang = ensure_supercollider_installed()
        if sclang is None:
            raise BootstrapError(
                "SuperCollider (sclang) is not installed and could not be "
                "installed automatically."
            )
        find_tools_set_env_path()
        _ensure_sc3_plugins()
        _ensure_looper()
        looper_path = looper_extension_path()
        print(f"TidalLooper path: {looper_path}")
        if sys.platform == "win32":
            free_port(SUPERDIRT_PORT)
        return _serve(sclang, looper_path)
    except BootstrapError as exc:
        print(exc, file=sys.stderr)
        return exc.exit_code
    except KeyboardInterrupt:
        print("\nCtrl+C received, exiting.")
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())