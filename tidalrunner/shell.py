"""Interactive shell that sends typed Tidal code to the runner's OSC port."""

from __future__ import annotations

import argparse
import socket
import sys
from typing import IO, List, Optional, Sequence, Tuple

from tidalrunner.osc import send

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 57126
TIDAL_ADDRESS = "/tidal"
SAMPLE_PATTERN = 'd1 $ s "bd sn" # gain "0.8" # orbit "0"'
PROMPT = "Enter Tidal code (or 'quit'): "


def run_shell(
    sock: socket.socket,
    target: Tuple[str, int],
    input_stream: IO[str],
    output: IO[str],
) -> List[str]:
    """Send a sample pattern, then every non-empty input line, until 'quit' or end of input.

    Returns the code strings that were sent, in order.
    """
    where = f"{target[0]}:{target[1]}"
    print(
        f"TidalCycles OSC interactive shell (custom OSC server on {target[1]}). "
        "Type 'quit' to exit.",
        file=output,
    )
    print(
        'Type any TidalCycles code or pattern (e.g. d1 $ s "bd sn"), or a command '
        "like hush, and press Enter.",
        file=output,
    )
    print("Your input will be sent exactly as typed to the OSC server.", file=output)

    sent: List[str] = []

    def deliver(code: str) -> None:
        send(sock, target, TIDAL_ADDRESS, [code])
        sent.append(code)
        print(f"[debug] Sent to {where}: {TIDAL_ADDRESS} -> {code}", file=output)

    deliver(SAMPLE_PATTERN)
    while True:
        output.write(PROMPT)
        output.flush()
        line = input_stream.readline()
        if not line:
            break
        code = line.strip()
        if code.lower() == "quit":
            break
        if code:
            deliver(code)
    return sent


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Send Tidal code to the runner over OSC.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    options = parser.parse_args(argv)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("0.0.0.0", 0))
        try:
            run_shell(sock, (options.host, options.port), sys.stdin, sys.stdout)
        except OSError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())