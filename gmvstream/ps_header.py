"""Parsing of MPEG program stream pack headers, system headers and stream maps."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from typing import BinaryIO

from gmvstream.mode import StreamError

PS_PACK_START_CODE = 0x000001BA
PS_SYS_START_CODE = 0x000001BB
PS_SYS_MAP_START_CODE = 0x000001BC


class PsParseError(StreamError):
    """Raised when program stream data is truncated or malformed."""


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        got = 0 if data is None else len(data)
        raise PsParseError(f"unexpected end of data: wanted {size} bytes, got {got}")
    return bytes(data)


def _read_u8(stream: BinaryIO) -> int:
    return _read_exact(stream, 1)[0]


def _read_u16(stream: BinaryIO) -> int:
    return struct.unpack(">H", _read_exact(stream, 2))[0]


def _read_u32(stream: BinaryIO) -> int:
    return struct.unpack(">I", _read_exact(stream, 4))[0]


@dataclass(frozen=True)
class PsHeader:
    """A pack header, read from just after its 0x000001BA start code."""

    system_clock_reference: bytes
    program_mux_rate: bytes
    stuffing_length: int
    stuffing: bytes
    start_code: int = PS_PACK_START_CODE

    @classmethod
    def parse(cls, stream: BinaryIO) -> "PsHeader":
        scr = _read_exact(stream, 6)
        mux_rate = _read_exact(stream, 3)
        stuffing_length = _read_u8(stream) & 0b0000_0111
        stuffing = _read_exact(stream, stuffing_length) if stuffing_length else b""
        return cls(scr, mux_rate, stuffing_length, stuffing)


@dataclass(frozen=True)
class PsStream:
    """One elementary stream entry of a system header."""

    stream_id: int
    p_std: bytes


@dataclass(frozen=True)
class PsSysHeader:
    """A system header, read from just after its 0x000001BB start code."""

    length: int
    rate_audio_video_band_flag: bytes
    streams: list[PsStream] = field(default_factory=list)
    start_code: int = PS_SYS_START_CODE

    @classmethod
    def parse(cls, stream: BinaryIO) -> "PsSysHeader":
        length = _read_u16(stream)
        end = stream.tell() + length
        flags = _read_exact(stream, 6)
        streams: list[PsStream] = []
        while stream.tell() < end:
            stream_id = _read_u8(stream)
            if stream_id >> 7 != 1:
                break
            streams.append(PsStream(stream_id, _read_exact(stream, 2)))
        stream.seek(end, io.SEEK_SET)
        return cls(length, flags, streams)


@dataclass(frozen=True)
class EsInfo:
    """Elementary stream description from a program stream map."""

    stream_type: int
    es_info_length: int
    descriptor: bytes

    @classmethod
    def parse(cls, stream: BinaryIO) -> tuple[int, "EsInfo"]:
        """Return the elementary stream id together with its description."""
        stream_type = _read_u8(stream)
        es_id = _read_u8(stream)
        length = _read_u16(stream)
        descriptor = _read_exact(stream, length)
        return es_id, cls(stream_type, length, descriptor)


@dataclass(frozen=True)
class PsSysMap:
    """A program stream map, read starting at its 0x000001BC start code."""

    start_code: int
    map_length: int
    indicator_version: int
    reserved_marker: int
    ps_info_length: int
    ps_info_descriptor: bytes
    es_map_length: int
    es_map: dict[int, EsInfo]
    crc_32: int

    @classmethod
    def parse(cls, stream: BinaryIO) -> "PsSysMap":
        start_code = _read_u32(stream)
        if start_code != PS_SYS_MAP_START_CODE:
            raise PsParseError("invalid ps_sys_map_start_code")
        map_length = _read_u16(stream)
        indicator_version = _read_u8(stream)
        reserved_marker = _read_u8(stream)
        ps_info_length = _read_u16(stream)
        ps_info_descriptor = _read_exact(stream, ps_info_length)
        es_map_length = _read_u16(stream)
        end = stream.tell() + es_map_length
        es_map: dict[int, EsInfo] = {}
        while stream.tell() < end:
            es_id, info = EsInfo.parse(stream)
            es_map[es_id] = info
        crc_32 = _read_u32(stream)
        return cls(
            start_code,
            map_length,
            indicator_version,
            reserved_marker,
            ps_info_length,
            ps_info_descriptor,
            es_map_length,
            es_map,
            crc_32,
        )