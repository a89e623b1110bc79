# nodes/packet.py
"""
Textual packet format shared by nodes and the dispatcher:

    [SSS.mmm] RandomValue: R - Payload: P

SSS = elapsed seconds, zero-padded to at least 3 digits
mmm = elapsed milliseconds remainder, exactly 3 digits
R   = non-negative random tag
P   = raw payload (must not contain the delimiters)
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Union

PACKET_RE = re.compile(r"\[(\d+)\.(\d{3})\] RandomValue: (.+) - Payload: (.+)", re.DOTALL)


@dataclass(frozen=True)
class Packet:
    elapsed_ms: int
    random_tag: int
    payload: str

    def encode(self) -> str:
        return encode_packet(self.elapsed_ms, self.random_tag, self.payload)


@dataclass(frozen=True)
class DecodedPacket:
    elapsed_ms: int
    timestamp: str     # "SSS.mmm" exactly as it appeared on the wire
    random_tag: str
    payload: str


@dataclass(frozen=True)
class DecodeError:
    text: str
    reason: str = "invalid packet format"


def encode_packet(elapsed_ms: int, random_tag: int, payload: str) -> str:
    elapsed_ms = int(elapsed_ms)
    if elapsed_ms < 0:
        raise ValueError(f"elapsed_ms must be >= 0, got {elapsed_ms}")
    seconds, millis = divmod(elapsed_ms, 1000)
    return f"[{seconds:03d}.{millis:03d}] RandomValue: {abs(int(random_tag))} - Payload: {payload}"


def decode_packet(text: str) -> Union[DecodedPacket, DecodeError]:
    """
    Parse a packet produced by encode_packet.
    Never raises: anything that does not match comes back as DecodeError.
    """
    if not isinstance(text, str):
        return DecodeError(text=repr(text), reason="packet is not text")
    m = PACKET_RE.fullmatch(text)
    if m is None:
        return DecodeError(text=text)
    seconds, millis, tag, payload = m.groups()
    return DecodedPacket(
        elapsed_ms=int(seconds) * 1000 + int(millis),
        timestamp=f"{seconds}.{millis}",
        random_tag=tag,
        payload=payload,
    )
