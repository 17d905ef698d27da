"""FLV container structures for H.264 video."""

from __future__ import annotations

import struct
from dataclasses import dataclass, fields
from enum import IntEnum

from gmvstream import amf0

_U8 = 0xFF
_U16 = 0xFFFF
_U32 = 0xFFFFFFFF


def _check(value: int, limit: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer")
    if not 0 <= value <= limit:
        raise ValueError(f"{name} out of range")
    return value


@dataclass(frozen=True)
class FlvHeader:
    """The 9-byte FLV file header."""

    flags: int
    version: int = 0x01
    header_length: int = 9

    @classmethod
    def build(cls, video: bool, audio: bool) -> "FlvHeader":
        if video and audio:
            flags = 0b0000_0101
        elif audio:
            flags = 0b0000_0100
        elif video:
            flags = 0b0000_0001
        else:
            raise ValueError("FLV header flags must name at least one media type")
        return cls(flags)

    def to_bytes(self) -> bytes:
        """Header followed by the initial zero previous-tag-size."""
        return b"FLV" + struct.pack(">BBII", self.version, self.flags, self.header_length, 0)

    @classmethod
    def header_and_previous_tag_size0(cls, video: bool, audio: bool) -> tuple[bytes, bytes]:
        return cls.build(video, audio).to_bytes(), PreviousTagSize.zero()


@dataclass(frozen=True)
class PreviousTagSize:
    """Size of the tag that precedes it, as a 32-bit big-endian value."""

    value: int

    def __post_init__(self) -> None:
        _check(self.value, _U32, "previous tag size")

    def to_bytes(self) -> bytes:
        return struct.pack(">I", self.value)

    @classmethod
    def zero(cls) -> bytes:
        return bytes(4)


class TagType(IntEnum):
    AUDIO = 8
    VIDEO = 9
    SCRIPT = 18


@dataclass(frozen=True)
class TagHeader:
    """The 11-byte header that opens every FLV tag."""

    tag_type: TagType
    data_size: int
    timestamp: int

    @classmethod
    def build(cls, tag_type: TagType, ts: int, data_size: int) -> "TagHeader":
        _check(ts, _U32, "timestamp")
        _check(data_size, _U32, "data size")
        return cls(TagType(tag_type), data_size & 0xFFFFFF, ts)

    def to_bytes(self) -> bytes:
        size = self.data_size.to_bytes(4, "big")[1:]
        ts = self.timestamp.to_bytes(4, "big")
        return bytes((int(self.tag_type),)) + size + ts[1:] + ts[:1] + bytes(3)


@dataclass
class ScriptMetaData:
    """onMetaData properties; unset fields are left out."""

    duration: float | None = None
    width: float | None = None
    height: float | None = None
    videodatarate: float | None = None
    framerate: float | None = None
    videocodecid: float | None = None
    audiodatarate: float | None = None
    audiosamplerate: float | None = None
    audiosamplesize: float | None = None
    stereo: bool | None = None
    audiocodecid: float | None = None
    filesize: float | None = None

    def to_bytes(self) -> bytes:
        entries = []
        for item in fields(self):
            value = getattr(self, item.name)
            if value is None:
                continue
            if item.name == "stereo":
                entries.append((item.name, bool(value)))
            else:
                entries.append((item.name, float(value)))
        return amf0.encode_string("onMetaData") + amf0.encode_ecma_array(entries)


@dataclass
class ScriptTag:
    """A script tag: header plus onMetaData body."""

    tag_header: TagHeader
    metadata: ScriptMetaData

    def to_bytes(self) -> bytes:
        return self.tag_header.to_bytes() + self.metadata.to_bytes()


@dataclass(frozen=True)
class AvcDecoderConfigurationRecord:
    """AVC sequence header built from one SPS and one PPS NAL unit."""

    sps: bytes
    pps: bytes
    configuration_version: int = 1

    @classmethod
    def build(cls, sps: bytes, pps: bytes) -> "AvcDecoderConfigurationRecord":
        sps = bytes(sps)
        pps = bytes(pps)
        if len(sps) < 4:
            raise ValueError("SPS must hold at least 4 bytes")
        if len(sps) > _U16 or len(pps) > _U16:
            raise ValueError("parameter set longer than 65535 bytes")
        return cls(sps, pps)

    @property
    def profile_indication(self) -> int:
        return self.sps[1]

    @property
    def profile_compatibility(self) -> int:
        return self.sps[2]

    @property
    def level_indication(self) -> int:
        return self.sps[3]

    def to_bytes(self) -> bytes:
        return (
            bytes((
                self.configuration_version,
                self.profile_indication,
                self.profile_compatibility,
                self.level_indication,
                0xFF,
                0xE1,
            ))
            + struct.pack(">H", len(self.sps))
            + self.sps
            + bytes((1,))
            + struct.pack(">H", len(self.pps))
            + self.pps
        )


@dataclass(frozen=True)
class VideoTagDataFirst:
    """The first video tag body, carrying the decoder configuration."""

    record: AvcDecoderConfigurationRecord
    frame_type_codec_id: int = 0x17
    avc_packet_type: int = 0

    @classmethod
    def build(cls, record: AvcDecoderConfigurationRecord) -> "VideoTagDataFirst":
        return cls(record)

    def to_bytes(self) -> bytes:
        return bytes((self.frame_type_codec_id, self.avc_packet_type)) + bytes(3) + self.record.to_bytes()


@dataclass(frozen=True)
class VideoTagData:
    """A video tag body holding NAL units."""

    frame_type_codec_id: int
    avc_packet_type: int
    composition_time_offset: int
    data: bytes

    def __post_init__(self) -> None:
        _check(self.frame_type_codec_id, _U8, "frame type / codec id")
        _check(self.avc_packet_type, _U8, "AVC packet type")
        _check(self.composition_time_offset, _U32, "composition time offset")

    def to_bytes(self) -> bytes:
        cts = self.composition_time_offset.to_bytes(4, "big")[1:]
        return bytes((self.frame_type_codec_id, self.avc_packet_type)) + cts + bytes(self.data)