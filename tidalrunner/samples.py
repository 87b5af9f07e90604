"""Trigger every Dirt-Samples bank on SuperDirt, one sample after another."""

from __future__ import annotations

import argparse
import socket
import sys
import time
from pathlib import Path
from typing import Iterator, Optional, Sequence, Tuple

from tidalrunner.dirt import DirtSampleMap, default_dirt_samples_dir
from tidalrunner.osc import send

DEFAULT_HOST = "127.0.0.1"
SUPERDIRT_PORT = 57120
DIRT_PLAY_ADDRESS = "/dirt/play"
DEFAULT_DELAY = 0.8


def sample_triggers(
    dirt_map: DirtSampleMap, play_all: bool
) -> Iterator[Tuple[str, int, str]]:
    """Yield (bank, index, filename) for the first or for every sample of each bank."""
    for bank, files in dirt_map.bank_to_files.items():
        if play_all:
            for index, name in enumerate(files):
                yield bank, index, name
        elif files:
            yield bank, 0, files[0]


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Audition Dirt-Samples banks on SuperDirt.")
    parser.add_argument("--dir", type=Path, default=None, help="Dirt-Samples directory")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=SUPERDIRT_PORT)
    parser.add_argument("--delay", type=float, default=DEFAULT_DELAY)
    options = parser.parse_args(argv)

    dirt_dir = options.dir if options.dir is not None else default_dirt_samples_dir()
    if dirt_dir is None:
        print("Could not find Dirt-Samples directory", file=sys.stderr)
        return 1
    print(f"Using Dirt-Samples dir: {dirt_dir}")

    dirt_map = DirtSampleMap.from_dir(dirt_dir)
    if not dirt_map.bank_to_files:
        print("No sample banks found.")
        return 0

    print(
        "Would you like to play only the first sample in each bank, "
        "or all samples in all banks?"
    )
    print("Enter 1 for first sample only, 2 for all samples:")
    sys.stdout.write("> ")
    sys.stdout.flush()
    play_all = sys.stdin.readline().strip() in ("2", "all")

    target = (options.host, options.port)
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.bind(("0.0.0.0", 0))
            for bank, index, name in sample_triggers(dirt_map, play_all):
                print(f"Triggering SuperDirt: bank='{bank}', index={index}, file={name}")
                send(sock, target, DIRT_PLAY_ADDRESS, ["s", bank, "n", index, "orbit", 0])
                time.sleep(options.delay)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 1
    print("Done iterating sample banks.")
    return 0


if __name__ == "__main__":
    sys.exit(main())