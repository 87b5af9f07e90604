"""Small OSC demos that drive SuperDirt and SuperCollider directly."""

from __future__ import annotations

import argparse
import itertools
import socket
import sys
import time
from typing import List, Optional, Sequence, Tuple

from tidalrunner.osc import OscArg, send

DEFAULT_HOST = "127.0.0.1"
SUPERDIRT_PORT = 57120
DIRT_PLAY_ADDRESS = "/dirt/play"
EVAL_ADDRESS = "/eval"
DIRT_PATTERN = ("bd", "sn")

SUPERPIANO_CODE = r"""(
        // Play a C major chord using the 'superpiano' SynthDef (as Tidal does)
        [60, 64, 67, 72].do { |midi|
            Synth(\superpiano, [\freq, midi.midicps, \amp, 0.2, \sustain, 1.5]);
        };
    )"""

PITCHSHIFT_CODE = r"""{
        var sig, shifted;
        sig = WhiteNoise.ar(0.2);
        // PitchShift is from sc3-plugins
        shifted = PitchShift.ar(sig, 0.2, 2.0, 0, 0.01);
        Out.ar(0, [sig, shifted]);
    }.play;
    """

SC3_STOP_CODE = r"s.defaultGroup.set(\gate, 0); s.freeAll;"

AUTO_STOP_CODE = r"""{
        var snare, bdrum, hihat, env;
        var tempo = 4;
        tempo = Impulse.ar(tempo); // for a drunk drummer replace Impulse with Dust !!!
        snare = WhiteNoise.ar(Decay2.ar(PulseDivider.ar(tempo, 4, 2), 0.005, 0.5));
        bdrum = SinOsc.ar(Line.ar(120,60, 1), 0, Decay2.ar(PulseDivider.ar(tempo, 4, 0), 0.005, 0.5));
        hihat = HPF.ar(WhiteNoise.ar(1), 10000) * Decay2.ar(tempo, 0.005, 0.5);
        // Envelope: 4 seconds duration, doneAction: 2 auto-frees the synth
        env = EnvGen.kr(Env.linen(0.01, 4, 0.1), doneAction: 2);
        Out.ar(0, (snare + bdrum + hihat) * 0.4 * env ! 2)
    }.play; // This synth will stop itself after 4 seconds
    """

MANUAL_STOP_CODE = "s = { SinOsc.ar(SinOsc.kr([1, 3]).exprange(100, 2e3), 0, 0.2) }.play;"
FREE_CODE = "s.free;"


def dirt_play_args(sample: str) -> List[OscArg]:
    """Return the /dirt/play arguments that play sample on orbit 0 at gain 0.8."""
    return ["s", sample, "gain", 0.8, "orbit", 0]


def _target_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=SUPERDIRT_PORT)
    return parser


def _udp_socket() -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("0.0.0.0", 0))
    return sock


def dirt_play_main(argv: Optional[Sequence[str]] = None) -> int:
    """Alternate bd and sn on SuperDirt until interrupted or count is reached."""
    parser = _target_parser("Play an alternating bd/sn pattern on SuperDirt.")
    parser.add_argument("--count", type=int, default=None)
    parser.add_argument("--delay", type=float, default=0.5)
    options = parser.parse_args(argv)
    target = (options.host, options.port)
    samples = itertools.cycle(DIRT_PATTERN)
    if options.count is not None:
        samples = itertools.islice(samples, options.count)
    try:
        with _udp_socket() as sock:
            for sample in samples:
                send(sock, target, DIRT_PLAY_ADDRESS, dirt_play_args(sample))
                print(f"Sent: {sample}")
                time.sleep(options.delay)
    except KeyboardInterrupt:
        return 0
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def _eval_sequence(
    steps: Sequence[Tuple[str, str, Optional[str], float]],
    stop_code: str,
    argv: Optional[Sequence[str]],
    description: str,
) -> int:
    options = _target_parser(description).parse_args(argv)
    target = (options.host, options.port)
    try:
        with _udp_socket() as sock:
            for label, code, wait_note, wait in steps:
                print(f"Sending /eval OSC message to SuperCollider ({label}):")
                print(code)
                send(sock, target, EVAL_ADDRESS, [code])
                if wait_note:
                    print(wait_note)
                time.sleep(wait)
            send(sock, target, EVAL_ADDRESS, [stop_code])
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print("Sent stop command to SuperCollider.")
    print("Done.")
    return 0


def sc3plugins_eval_main(argv: Optional[Sequence[str]] = None) -> int:
    """Play the SuperPiano and PitchShift sc3-plugins examples, then free all nodes."""
    steps = [
        (
            "sc3-plugins SuperPiano example",
            SUPERPIANO_CODE,
            "Waiting 7 seconds to hear SuperPiano...",
            7.0,
        ),
        (
            "sc3-plugins PitchShift example",
            PITCHSHIFT_CODE,
            "Waiting 6 seconds to hear PitchShift...",
            6.0,
        ),
    ]
    return _eval_sequence(steps, SC3_STOP_CODE, argv, "Demonstrate sc3-plugins via /eval.")


def osc_eval_main(argv: Optional[Sequence[str]] = None) -> int:
    """Play a self-stopping drum pattern and a sine drone, then free the drone."""
    steps = [
        (
            "auto-stop drum pattern",
            AUTO_STOP_CODE,
            "Waiting 3 seconds for auto-stop drum pattern...",
            3.0,
        ),
        (
            "manual stop example",
            MANUAL_STOP_CODE,
            "Waiting 10 seconds for sound to play...",
            10.0,
        ),
    ]
    return _eval_sequence(steps, FREE_CODE, argv, "Evaluate SuperCollider code via /eval.")


if __name__ == "__main__":
    sys.exit(dirt_play_main())