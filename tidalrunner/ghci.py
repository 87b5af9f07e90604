"""Boot Tidal in GHCi and play a short scripted set of patterns."""

from __future__ import annotations

import os
import subprocess
import sys
import time
from typing import Optional, Sequence, Union

from tidalrunner.find import find_ghci

BOOT_LINES = (
    "import Sound.Tidal.Context\n",
    'tidal <- startTidal (superdirtTarget {oLatency = 0.1, oAddress = "127.0.0.1", '
    "oPort = 57120}) (defaultConfig {cFrameTimespan = 1/20})\n",
    "let d1 = streamReplace tidal 1\n",
    "let d2 = streamReplace tidal 2\n",
    "let d3 = streamReplace tidal 3\n",
    "let d4 = streamReplace tidal 4\n",
    "let d5 = streamReplace tidal 5\n",
    "let d6 = streamReplace tidal 6\n",
    "let d7 = streamReplace tidal 7\n",
    "let d8 = streamReplace tidal 8\n",
    ':set prompt ""\n',
    "cps 0.9\n",
    "-- ready\n",
)

BOOT_LINE_DELAY = 0.3
BOOT_SETTLE = 2.0

# Each pattern with the time to let it play before the next one.
SCRIPT = (
    ('d1 $ sound "bd sn cp*2 [~ bd/2]"\n', 5.0),
    ('d1 $ sound "bd sn cp*2 [~ bd/3]"\n', 8.0),
    ('d1 $ sound "cp future*4"\n', 8.0),
    ('d1 $ sound "bd*2 [[~ lt] sn:3] lt:1 [ht mt*2]"\n', 8.0),
)


def run_ghci(ghci: Union[str, os.PathLike]) -> Optional[int]:
    """Start GHCi with tidal, boot it, play the script, then wait for GHCi to exit.

    Returns GHCi's exit code, or None when interrupted with Ctrl+C.
    """
    proc = subprocess.Popen(
        [str(ghci), "-package", "tidal", "-XOverloadedStrings"],
        stdin=subprocess.PIPE,
        text=True,
    )
    try:
        stdin = proc.stdin
        if stdin is not None:
            for line in BOOT_LINES:
                stdin.write(line)
                stdin.flush()
                time.sleep(BOOT_LINE_DELAY)
            time.sleep(BOOT_SETTLE)
            for pattern, wait in SCRIPT:
                stdin.write(pattern)
                stdin.flush()
                time.sleep(wait)
        print("TidalCycles is running. Press Ctrl+C to exit.")
        status = proc.wait()
    except KeyboardInterrupt:
        print("Ctrl+C received, exiting.")
        return None
    print(f"ghci exited with status: {status}")
    return status


def main(argv: Optional[Sequence[str]] = None) -> int:
    ghci = find_ghci()
    if ghci is None:
        print("ghci is not installed or not found in PATH.", file=sys.stderr)
        return 1
    try:
        run_ghci(ghci)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())