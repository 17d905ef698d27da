"""Shared constants, response envelopes and media descriptors."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

# Uniform response timeout, in milliseconds.
TIME_OUT = 8000
HALF_TIME_OUT = 4000
# Capacity of the data channels.
BUFFER_SIZE = 64
AV_IO_CTX_BUFFER_SIZE = 1024 * 4

# Hook callback paths.
STREAM_IN = "/stream/in"
STREAM_IDLE = "/stream/idle"
ON_PLAY = "/on/play"
OFF_PLAY = "/off/play"
END_RECORD = "/end/record"
STREAM_INPUT_TIMEOUT = "/stream/input/timeout"

# Error code raised when a stream carries a payload type that is not supported.
UNSUPPORTED_MEDIA_CODE = 10010


class StreamError(Exception):
    """A stream-handling failure, optionally tagged with a business code."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


@dataclass
class ResMsg:
    """JSON response envelope: a status code, a message and optional data."""

    code: int
    msg: str
    data: Any = None

    @classmethod
    def build_success(cls) -> "ResMsg":
        return cls(200, "success")

    @classmethod
    def build_failed(cls) -> "ResMsg":
        return cls(500, "failed")

    @classmethod
    def build_failed_by_msg(cls, msg: str) -> "ResMsg":
        return cls(500, msg)

    @classmethod
    def define_res(cls, code: int, msg: str) -> "ResMsg":
        return cls(code, msg)

    @classmethod
    def build_success_data(cls, data: Any) -> "ResMsg":
        return cls(200, "success", data)

    def to_json(self) -> str:
        """Serialize to compact JSON; raises StreamError if data cannot be encoded."""
        try:
            return json.dumps(
                {"code": self.code, "msg": self.msg, "data": self.data},
                ensure_ascii=False,
                separators=(",", ":"),
            )
        except (TypeError, ValueError) as exc:
            raise StreamError(f"cannot serialize response: {exc}") from exc


class Media(Enum):
    """Media carried in an RTP stream."""

    PS = "PS"
    H264 = "H264"

    @classmethod
    def build(cls, ident: str) -> "Media":
        try:
            return cls(ident)
        except ValueError:
            raise StreamError(f"unsupported media type: {ident}") from None


class PlayType(Enum):
    """Output container requested by a player."""

    FLV = "Flv"
    HLS = "Hls"


@dataclass
class HlsPiece:
    """HLS segment settings: duration in seconds and whether the stream is live."""

    duration: int = 0
    live: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.duration, bool) or not isinstance(self.duration, int):
            raise ValueError("duration must be an integer")
        if not 0 <= self.duration <= 0xFF:
            raise ValueError("duration must fit in one byte")
        if not isinstance(self.live, bool):
            raise ValueError("live must be a boolean")

    def to_dict(self) -> dict[str, Any]:
        return {"duration": self.duration, "live": self.live}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HlsPiece":
        missing = [key for key in ("duration", "live") if key not in data]
        if missing:
            raise ValueError(f"missing field(s): {', '.join(missing)}")
        return cls(duration=data["duration"], live=data["live"])