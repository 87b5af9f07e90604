"""Send a tour of Dirt-Samples patterns to the runner's OSC control port."""

from __future__ import annotations

import argparse
import socket
import sys
import time
from typing import Iterable, List, Optional, Sequence, Tuple

from tidalrunner.osc import send

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 57126
DEFAULT_DELAY = 2.0
TIDAL_ADDRESS = "/tidal"

PATTERNS: Tuple[str, ...] = (
    # ab: nice subtle drum sounds
    'd1 $ slow 2 $ s "ab" <| n (run 12)',
    # ade: various long samples
    'd1 $ s "ade" <| n (run 10) # cut 1',
    # ades2: short quiet noisy sounds
    'd1 $ s "ades2" <| n (run 9) # gain 1.3',
    # ades3: short noisy sounds, lowish pitch
    'd1 $ s "ades3" <| n (run 7)',
    # ades4: short high pitched sounds
    'd1 $ s "ades4" <| n (run 6)',
    # amencutup
    'd1 $ slow 2 $ s "amencutup" <| n (shuffle 8 $ run 32) # speed "{1,2,3}%8"',
    # armora: low pitched noise
    'd1 $ slow 4 $ s "armora" <| n (run 7)',
    # arp: two synth notes, low and high
    'd1 $ s "arp" <| n (run 2)',
    # superpiano: C major scale
    'd1 $ slow 4 $ s "superpiano" <| n "c d f g a c6 d6 f6 g6 a6 c7"',
    # arpy
    'd1 $ s "arpy" <| up "c d e f g a b c6"',
    'd1 $ s "arpy"',
    # baa: sheep sounds
    'd1 $ slow 4 $ s "baa" <| n (run 7)',
    'd1 $ slow 4 $ s "baa2" <| n (run 7)',
    # bass: four short bass sounds
    'd1 $ slow 2 $ s "bass" <| n (run 4)',
    'd1 $ s "bass0" <| n (run 3)',
    'd1 $ slow 8 $ s "bass1" <| n (run 30)',
    'd1 $ s "bass2" <| n "[ 0 .. 4 ]"',
    'd1 $ slow 4 $ s "bass3!44" # n (run 11)',
    'd1 $ slow 4 $ s "bassdm" <| n (run 24)',
    'd1 $ s "bassfoo" <| n (run 3)',
    'd1 $ slow 4 $ s "bd" <| n (run 24)',
    'd1 $ s "bend" <| n (run 4)',
    'd1 $ s "bin" <| n (run 2)',
    'd1 $ slow 4 $ s "birds" <| n (run 10)',
    'd1 $ slow 2 $ s "birds3" <| n (run 19)',
    'd1 $ s "bleep" <| n (run 13)',
    'd1 $ s "blip" <| n (run 13)',
    'd1 $ slow 2 $ s "bottle" <| n (run 13)',
    'd1 $ s "can" <| n (run 16) # speed "0.125 1!15"',
    'd1 $ s "casio" <| n (run 3)',
    'd1 $ fast 2 $ s "casio" <| n "1 2 3 2" # speed 0.25 # cut 1',
    'd1 $ s "cb"',
    'd1 $ s "chin" <| n (run 4) # gain 2',
    'd1 $ s "circus" <| n (run 3)',
    'd1 $ s "clak" <| n (run 2) # gain 2',
    'd1 $ s "click" <| n (run 4)',
    'd1 $ s "e" <| n (run 8)',
    'd1 $ slow 2 $ s "east" <| n (run 9)',
    'd1 $ slow 4 $ s "em2" <| n (run 6)',
    'd1 $ s "feel" <| n (run 7)',
    'd1 $ slow 2 $ s "feelfx" <| n (run 8)',
    'd1 $ slow 16 $ s "fm" <| n (run 17)',
    'd1 $ slow 2 $ s "gab" <| n (run 10)',
    'd1 $ s "gabba" <| n (run 4)',
    'd1 $ s "gabbaloud" <| n (run 4)',
    'd1 $ s "glitch" <| n (run 8)',
    'd1 $ s "glitch2" <| n (run 8)',
    'd1 $ slow 4 $ s "gtr" <| n (run 3)',
    'd1 $ s "h" <| n (run 7)',
    'd1 $ slow 8 $ s "hand" <| n (run 17)',
    'd1 $ s "hardkick" <| n (run 6)',
    'd1 $ s "haw" <| n (run 6)',
    'd1 $ s "hc" <| n (run 6)',
    'd1 $ s "hmm"',
    'd1 $ every 2 (fast 2) $ s "hoover" <| n (shuffle 6 $ run 6)',
    'd1 $ s "house" <| n (run 8)',
    'd1 $ s "if" <| n (run 5)',
    'd1 $ slow 2 $  s "industrial" <| n (run 32)',
    'd1 $ s "jazz" <| n (run 8)',
    'd1 $ slow 8 $ s "jungbass" <| n (run 20)',
    'd1 $ s "jungle" <| n (run 13)',
    'd1 $ slow 4 $ s "juno" <| n (run 12)',
    'd1 $ slow 4 $ s "jvbass" <| n (run 13)',
    'd1 $ slow 4 $ s "koy" <| n 1',
    'd1 $ slow 4 $ s "kurt" <| n (run 7)',
    'd1 $ slow 2 $ s "latibro" <| n (run 8)',
    'd1 $ slow 4 $ s "lighter" <| n (run 33)',
    'd1 $ s "linnhats" <| n (run 6)',
    'd1 $ s "mash" <| n (run 2)',
    'd1 $ s "mash2" <| n (run 4)',
    'd1 $ s "metal" <| n (run 10)',
    'd1 $ s "metal" <| n (run 10) # up (-24)',
    'd1 $ s "miniyeah" <| n (run 4) # up (-24)',
    'd1 $ slow 8 $ s "moog" <| n (run 7)',
    'd1 $ s "mouth" <| n (run 15)',
    'd1 $ s "msg" <| n (run 9)',
    'd1 $ s "noise2" <| n (run 8)',
    'd1 $ s "notes" <| n (run 15)',
    'd1 $ slow 4 $ s "numbers" <| n (run 9)',
    'd1 $ s "off"',
    'd1 $ s "peri" <| n (run 15)',
    'd1 $ s "popkick" <| n (run 10)',
    'd1 $ slow 4 $ s "print" <| n (run 11)',
    'd1 $ s "sine" <| n (run 6)',
    'd1 $ slow 4 $ s "stab" <| n (run 23)',
    'd1 $ s "stomp" <| n (run 10)',
    'd1 $ slow 8 $ s "tabla" <| n (run 26)',
    'd1 $ slow 8 $ s "tabla2" <| n (run 46)',
    'd1 $ s "v" <| n (run 6)',
    'd1 $ s "voodoo" <| n (run 5)',
    'd1 $ s "xmas"',
    'd1 $ slow 2 $ s "yeah" <| n (run 31)',
    "hush",
)


def send_patterns(
    sock: socket.socket,
    target: Tuple[str, int],
    patterns: Iterable[str] = PATTERNS,
    delay: float = DEFAULT_DELAY,
) -> List[str]:
    """Send each pattern as a /tidal message, pausing delay seconds after each.

    Returns the patterns sent, in order.
    """
    sent: List[str] = []
    for number, pattern in enumerate(patterns, start=1):
        send(sock, target, TIDAL_ADDRESS, [pattern])
        sent.append(pattern)
        print(f"Sent pattern {number}: {pattern}")
        time.sleep(delay)
    return sent


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Play a tour of Tidal sample patterns.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--delay", type=float, default=DEFAULT_DELAY)
    options = parser.parse_args(argv)
    target = (options.host, options.port)
    print(f"Sending Tidal patterns to {options.host}:{options.port}")
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.bind(("0.0.0.0", 0))
            send_patterns(sock, target, PATTERNS, options.delay)
    except OSError as exc:
        print(f"could not send OSC message: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 1
    print("Done sending patterns.")
    return 0


if __name__ == "__main__":
    sys.exit(main())