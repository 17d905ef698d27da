"""Configuration sections for the stream server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping


class ConfigError(ValueError):
    """Raised when a configuration section is malformed or inconsistent."""


def _section(data: Mapping[str, Any] | None, prefix: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    section = data.get(prefix)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"section '{prefix}' must be a mapping")
    return section


def _bool(section: Mapping[str, Any], name: str, default: bool) -> bool:
    value = section.get(name, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{name}' must be a boolean")
    return value


def _int(section: Mapping[str, Any], name: str, default: int, low: int, high: int) -> int:
    value = section.get(name, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{name}' must be an integer")
    if not low <= value <= high:
        raise ConfigError(f"'{name}' must be between {low} and {high}")
    return value


def _str(section: Mapping[str, Any], name: str, default: str) -> str:
    value = section.get(name, default)
    if not isinstance(value, str):
        raise ConfigError(f"'{name}' must be a string")
    return value


@dataclass(frozen=True)
class StreamConf:
    """Stream output settings, read from the ``stream`` section."""

    PREFIX: ClassVar[str] = "stream"

    expires: int = 6
    flv: bool = True
    hls: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "StreamConf":
        """Build from a whole configuration document and validate it."""
        section = _section(data, cls.PREFIX)
        conf = cls(
            expires=_int(section, "expires", 6, -(2**31), 2**31 - 1),
            flv=_bool(section, "flv", True),
            hls=_bool(section, "hls", True),
        )
        conf.check()
        return conf

    def check(self) -> None:
        if not self.hls and not self.flv:
            raise ConfigError("HLS and FLV are both disabled; enable at least one media output")


@dataclass(frozen=True)
class ServerConf:
    """Server identity and listening ports, read from the ``server`` section."""

    PREFIX: ClassVar[str] = "server"

    name: str = "stream-node-1"
    rtp_port: int = 18568
    rtcp_port: int = 18569
    http_port: int = 18570
    hook_uri: str = "http://127.0.0.1:18567"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "ServerConf":
        """Build from a whole configuration document."""
        section = _section(data, cls.PREFIX)
        defaults = cls()
        return cls(
            name=_str(section, "name", defaults.name),
            rtp_port=_int(section, "rtp_port", defaults.rtp_port, 0, 0xFFFF),
            rtcp_port=_int(section, "rtcp_port", defaults.rtcp_port, 0, 0xFFFF),
            http_port=_int(section, "http_port", defaults.http_port, 0, 0xFFFF),
            hook_uri=_str(section, "hook_uri", defaults.hook_uri),
        )