"""RTP packet parsing and reassembly of RTP carried over TCP."""

from __future__ import annotations

import struct
from collections.abc import Hashable
from dataclasses import dataclass, field

_HEADER_LENGTH = 12


@dataclass
class RtpPacket:
    """A parsed RTP packet."""

    version: int
    padding: bool
    extension: bool
    marker: bool
    payload_type: int
    sequence_number: int
    timestamp: int
    ssrc: int
    csrc: list[int] = field(default_factory=list)
    extension_profile: int = 0
    extension_payload: bytes = b""
    payload: bytes = b""

    @classmethod
    def unmarshal(cls, data: bytes) -> "RtpPacket":
        """Parse raw bytes; raises ValueError if they do not hold a packet."""
        raw = bytes(data)
        if len(raw) < _HEADER_LENGTH:
            raise ValueError("RTP header size insufficient")
        first, second, seq, ts, ssrc = struct.unpack_from(">BBHII", raw)
        version = first >> 6
        padding = bool(first & 0x20)
        has_extension = bool(first & 0x10)
        csrc_count = first & 0x0F
        offset = _HEADER_LENGTH + 4 * csrc_count
        if len(raw) < offset:
            raise ValueError("RTP header size insufficient for CSRC list")
        csrc = list(struct.unpack_from(f">{csrc_count}I", raw, _HEADER_LENGTH))

        profile = 0
        ext_payload = b""
        if has_extension:
            if len(raw) < offset + 4:
                raise ValueError("RTP header size insufficient for extension")
            profile, words = struct.unpack_from(">HH", raw, offset)
            offset += 4
            end = offset + 4 * words
            if len(raw) < end:
                raise ValueError("RTP header size insufficient for extension")
            ext_payload = raw[offset:end]
            offset = end

        payload = raw[offset:]
        if padding:
            if not payload:
                raise ValueError("RTP padding set on empty payload")
            pad_len = payload[-1]
            if pad_len == 0 or pad_len > len(payload):
                raise ValueError("RTP padding length exceeds payload")
            payload = payload[:-pad_len]

        return cls(
            version=version,
            padding=padding,
            extension=has_extension,
            marker=bool(second & 0x80),
            payload_type=second & 0x7F,
            sequence_number=seq,
            timestamp=ts,
            ssrc=ssrc,
            csrc=csrc,
            extension_profile=profile,
            extension_payload=ext_payload,
            payload=payload,
        )


class TcpRtpBuffer:
    """Per-connection buffers that split a TCP byte stream into RTP packets.

    Each packet on the wire is a 2-byte big-endian length followed by that
    many bytes of RTP data.
    """

    _LENGTH_FIELD = 2
    _MIN_FRAME = _LENGTH_FIELD + _HEADER_LENGTH

    def __init__(self) -> None:
        self._buffers: dict[tuple[Hashable, Hashable], bytearray] = {}

    def fresh_data(self, local_addr: Hashable, remote_addr: Hashable, data: bytes) -> list[bytes]:
        """Append data for a connection and return every complete packet."""
        buffer = self._buffers.setdefault((local_addr, remote_addr), bytearray())
        buffer += data
        return list(self._split(buffer))

    @classmethod
    def _split(cls, buffer: bytearray):
        while len(buffer) >= cls._MIN_FRAME:
            size = int.from_bytes(buffer[: cls._LENGTH_FIELD], "big")
            end = cls._LENGTH_FIELD + size
            if len(buffer) < end:
                break
            frame = bytes(buffer[cls._LENGTH_FIELD : end])
            del buffer[:end]
            yield frame

    def remove_map(self, local_addr: Hashable, remote_addr: Hashable) -> None:
        """Forget any buffered bytes for a connection."""
        self._buffers.pop((local_addr, remote_addr), None)