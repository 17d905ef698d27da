"""PES packet reading and reassembly of H.264 video from an MPEG program stream."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from gmvstream.mode import UNSUPPORTED_MEDIA_CODE, Media, StreamError
from gmvstream.ps_header import (
    PS_SYS_START_CODE,
    PsHeader,
    PsParseError,
    PsSysHeader,
    PsSysMap,
)

log = logging.getLogger(__name__)

PS_START_CODE_PREFIX = b"\x00\x00\x01\xba"
SPLIT_START_CODE_PREFIX = b"\x00\x00\x01"
# Smallest PES header: start code prefix, stream id and length field.
PS_BASE_LEN = 6
# Buffered bytes that force parsing even without an RTP marker.
BUFFER_SIZE = 1024 * 1024
H264_STREAM_TYPE = 0x1B

_VIDEO_IDS = range(0xE0, 0xF0)
_AUDIO_IDS = range(0xC0, 0xE0)

_PROGRAM_STREAM_MAP = 0xBC
_PADDING_STREAM = 0xBE
_PRIVATE_STREAM_2 = 0xBF
_ECM_STREAM = 0xF0
_EMM_STREAM = 0xF1
_PROGRAM_STREAM_DIRECTORY = 0xFF
_DATA_ONLY_IDS = frozenset(
    {_PROGRAM_STREAM_MAP, _PRIVATE_STREAM_2, _ECM_STREAM, _EMM_STREAM, _PROGRAM_STREAM_DIRECTORY}
)


def _read_exact(stream: io.BytesIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise PsParseError(f"unexpected end of data: wanted {size} bytes, got {len(data)}")
    return data


def _read_u8(stream: io.BytesIO) -> int:
    return _read_exact(stream, 1)[0]


def _buffer_size(stream: io.BytesIO) -> int:
    with stream.getbuffer() as view:
        return view.nbytes


def _is_audio_or_video(stream_id: int) -> bool:
    return stream_id in _VIDEO_IDS or stream_id in _AUDIO_IDS


def _find_all(data: bytes, pattern: bytes, start: int = 0) -> Iterator[int]:
    index = data.find(pattern, start)
    while index != -1:
        yield index
        index = data.find(pattern, index + len(pattern))


class PesKind(Enum):
    """How the body of a PES packet is laid out."""

    PTS_DTS = "pts_dts"
    DATA = "data"
    PADDING = "padding"


@dataclass(frozen=True)
class PesPacket:
    """A PES packet; flags and header_data are set only for the PTS_DTS kind."""

    stream_id: int
    packet_len: int
    kind: PesKind
    payload: bytes
    flags: bytes = b""
    header_data: bytes = b""

    @classmethod
    def packet_length(cls, stream: io.BytesIO) -> int:
        """Read the length field after a start code and stream id.

        Returns 0 when the field cannot be read, or when the packet runs past
        the buffered data, in which case the stream is moved back to the
        packet's start code. A length of 0 or 0xFFFF means the packet runs up
        to the next audio or video start code.
        """
        raw = stream.read(2)
        if len(raw) < 2:
            stream.seek(-len(raw), io.SEEK_CUR)
            return 0
        length = int.from_bytes(raw, "big")
        pos = stream.tell()
        size = _buffer_size(stream)
        if pos + length > size:
            stream.seek(max(pos - PS_BASE_LEN, 0), io.SEEK_SET)
            return 0
        if length in (0, 0xFFFF):
            data = stream.getvalue()
            for index in _find_all(data, SPLIT_START_CODE_PREFIX, pos):
                ident = index + len(SPLIT_START_CODE_PREFIX)
                if ident < len(data) and _is_audio_or_video(data[ident]):
                    return index - pos
        return length

    @classmethod
    def read_video(cls, stream: io.BytesIO, stream_id: int) -> "PesPacket | None":
        """Read a packet body after its stream id; None if it is not complete."""
        length = cls.packet_length(stream)
        if length == 0:
            return None
        if stream_id == _PADDING_STREAM:
            return cls(stream_id, length, PesKind.PADDING, _read_exact(stream, length))
        if stream_id in _DATA_ONLY_IDS:
            return cls(stream_id, length, PesKind.DATA, _read_exact(stream, length))
        flags = _read_exact(stream, 2)
        header_len = _read_u8(stream)
        header_data = _read_exact(stream, header_len)
        payload_len = length - header_len - 3
        if payload_len < 0:
            raise PsParseError("PES header longer than its packet")
        payload = _read_exact(stream, payload_len)
        return cls(stream_id, length, PesKind.PTS_DTS, payload, flags, header_data)

    @classmethod
    def skip_audio(cls, stream: io.BytesIO) -> None:
        """Step over an audio packet body without reading it."""
        remain = cls.packet_length(stream)
        if remain:
            stream.seek(remain, io.SEEK_CUR)


class PsPacket:
    """Collects RTP payloads of a program stream and extracts H.264 data."""

    def __init__(self) -> None:
        self.header: PsHeader | None = None
        self.sys_header: PsSysHeader | None = None
        self.sys_map: PsSysMap | None = None
        self.video_codec: Media | None = None
        self._buffer = bytearray()

    def feed(self, payload: bytes, marker: bool) -> bytes | None:
        """Add an RTP payload; on a marker or a full buffer, parse what is held.

        Returns the H.264 elementary stream data found, or None. Raises
        StreamError for a stream missing from the stream map, and StreamError
        with code UNSUPPORTED_MEDIA_CODE for an unsupported stream type.
        """
        self._buffer += payload
        if not marker and len(self._buffer) <= BUFFER_SIZE:
            return None
        data = bytes(self._buffer)
        stream = io.BytesIO(data)
        packets: list[PesPacket] = []
        for start in _find_all(data, PS_START_CODE_PREFIX):
            if start != stream.tell():
                log.warning(
                    "PS buffer with start code position: %d, cursor index: %d, discarding %d bytes",
                    start, stream.tell(), start - stream.tell(),
                )
            if not self._read_headers(stream, start):
                continue
            if self._split(stream, len(data), packets):
                break
        consumed = stream.tell()
        if consumed == 0:
            log.warning("PS buffer without start code, discarding %d bytes", len(self._buffer))
            self._buffer.clear()
        else:
            del self._buffer[:consumed]
        return self._elementary_payload(packets)

    def _read_headers(self, stream: io.BytesIO, start: int) -> bool:
        stream.seek(start + len(PS_START_CODE_PREFIX), io.SEEK_SET)
        try:
            self.header = PsHeader.parse(stream)
            code = int.from_bytes(_read_exact(stream, 4), "big")
            if code == PS_SYS_START_CODE:
                sys_header = PsSysHeader.parse(stream)
                sys_map = PsSysMap.parse(stream)
                self.sys_header = sys_header
                self.sys_map = sys_map
            else:
                stream.seek(-4, io.SEEK_CUR)
        except StreamError as err:
            log.warning("bad PS header: %s", err)
            return False
        return True

    @staticmethod
    def _split(stream: io.BytesIO, size: int, packets: list[PesPacket]) -> bool:
        """Read PES packets; True when an incomplete packet stops the scan."""
        limit = size - PS_BASE_LEN
        try:
            while stream.tell() < limit:
                stream.seek(3, io.SEEK_CUR)
                ident = _read_u8(stream)
                if ident in _VIDEO_IDS:
                    packet = PesPacket.read_video(stream, ident)
                    if packet is None:
                        return True
                    packets.append(packet)
                elif ident in _AUDIO_IDS:
                    PesPacket.skip_audio(stream)
                else:
                    raise PsParseError(f"invalid data: ident is {ident}")
        except StreamError as err:
            log.warning("%s", err)
        return False

    def _elementary_payload(self, packets: list[PesPacket]) -> bytes | None:
        if self.sys_map is None:
            return None
        out = bytearray()
        for packet in packets:
            info = self.sys_map.es_map.get(packet.stream_id)
            if info is None:
                raise StreamError("stream id in es not found in ps sys map")
            if info.stream_type != H264_STREAM_TYPE:
                raise StreamError(
                    f"unsupported stream type: {info.stream_type}", code=UNSUPPORTED_MEDIA_CODE
                )
            if self.video_codec is None:
                self.video_codec = Media.H264
            if packet.kind is not PesKind.PADDING:
                out += packet.payload
        if len(out) > 4 and self.video_codec is Media.H264:
            return bytes(out)
        return None