"""Open Sound Control 1.0 message encoding and decoding."""

from __future__ import annotations

import socket
import struct
from dataclasses import dataclass
from typing import Iterable, Tuple, Union

OscArg = Union[str, int, float, bytes, bool]

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class OscError(ValueError):
    """Raised when an OSC message cannot be encoded or decoded."""


@dataclass(frozen=True)
class OscMessage:
    """A single OSC message: an address pattern and its arguments."""

    address: str
    args: Tuple[OscArg, ...] = ()

    def encode(self) -> bytes:
        return encode_message(self.address, self.args)


def _pad_to_word(data: bytes) -> bytes:
    return data + b"\x00" * (-len(data) % 4)


def _encode_string(text: str) -> bytes:
    return _pad_to_word(text.encode("utf-8") + b"\x00")


def _encode_arg(arg: object) -> Tuple[str, bytes]:
    if isinstance(arg, bool):
        return ("T" if arg else "F"), b""
    if isinstance(arg, int):
        if not _INT32_MIN <= arg <= _INT32_MAX:
            raise OscError(f"integer {arg} does not fit in 32 bits")
        return "i", struct.pack(">i", arg)
    if isinstance(arg, float):
        try:
            return "f", struct.pack(">f", arg)
        except OverflowError as exc:
            raise OscError(f"float {arg} does not fit in 32 bits") from exc
    if isinstance(arg, str):
        return "s", _encode_string(arg)
    if isinstance(arg, (bytes, bytearray)):
        blob = bytes(arg)
        return "b", struct.pack(">i", len(blob)) + _pad_to_word(blob)
    raise OscError(f"unsupported OSC argument type: {type(arg).__name__}")


def encode_message(address: str, args: Iterable[OscArg] = ()) -> bytes:
    """Encode an OSC message to its wire form."""
    tags = [","]
    payload = []
    for arg in args:
        tag, data = _encode_arg(arg)
        tags.append(tag)
        payload.append(data)
    return _encode_string(address) + _encode_string("".join(tags)) + b"".join(payload)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    @property
    def exhausted(self) -> bool:
        return self.offset >= len(self.data)

    def take(self, count: int) -> bytes:
        end = self.offset + count
        if end > len(self.data):
            raise OscError("message is truncated")
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def string(self) -> str:
        end = self.data.find(b"\x00", self.offset)
        if end < 0:
            raise OscError("unterminated OSC string")
        raw = self.data[self.offset:end]
        padded_end = end + 1 + (-(end + 1 - self.offset) % 4)
        if padded_end > len(self.data):
            raise OscError("OSC string is not padded")
        self.offset = padded_end
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise OscError("OSC string is not valid UTF-8") from exc

    def blob(self) -> bytes:
        (size,) = struct.unpack(">i", self.take(4))
        if size < 0:
            raise OscError("negative blob size")
        data = self.take(size)
        self.take(-size % 4)
        return data


def decode_message(data: bytes) -> OscMessage:
    """Decode a single OSC message; bundles are rejected."""
    if data.startswith(b"#bundle"):
        raise OscError("OSC bundles are not supported")
    reader = _Reader(bytes(data))
    address = reader.string()
    if not address.startswith("/"):
        raise OscError(f"invalid OSC address: {address!r}")
    if reader.exhausted:
        return OscMessage(address)
    tags = reader.string()
    if not tags.startswith(","):
        raise OscError("missing OSC type tag string")
    args = []
    for tag in tags[1:]:
        if tag == "i":
            args.append(struct.unpack(">i", reader.take(4))[0])
        elif tag == "h":
            args.append(struct.unpack(">q", reader.take(8))[0])
        elif tag == "f":
            args.append(struct.unpack(">f", reader.take(4))[0])
        elif tag == "d":
            args.append(struct.unpack(">d", reader.take(8))[0])
        elif tag == "s":
            args.append(reader.string())
        elif tag == "b":
            args.append(reader.blob())
        elif tag == "T":
            args.append(True)
        elif tag == "F":
            args.append(False)
        else:
            raise OscError(f"unsupported OSC type tag: {tag!r}")
    return OscMessage(address, tuple(args))


def send(
    sock: socket.socket,
    target: Tuple[str, int],
    address: str,
    args: Iterable[OscArg] = (),
) -> int:
    """Encode a message and send it as one datagram; returns bytes sent."""
    return sock.sendto(encode_message(address, args), target)