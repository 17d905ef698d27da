"""Reordering of RTP packets by sequence number before they are parsed."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from gmvstream.mode import UNSUPPORTED_MEDIA_CODE, StreamError

_BUFFER_SIZE = 32
# Half of the 16-bit sequence space: larger backward jumps mean wrap-around.
_ROUND_SIZE = 32767


class ChannelClosed(Exception):
    """Raised when the packet source is exhausted."""


class DemuxContext:
    """Buffers packets in a small ring and hands them out in sequence order.

    The reorder window starts at 1 and grows (up to 16) when gaps are seen,
    shrinking again when delivery is smooth.
    """

    def __init__(self, ssrc: int, packets: Iterable[Any]) -> None:
        self.ssrc = ssrc
        self._packets = iter(packets)
        self._last_sn = 0
        self._queue: list[Any] = [None] * _BUFFER_SIZE
        self._count = 0
        self.window = 1

    def demux_packet(self, parser: Callable[[Any], None]) -> None:
        """Read packets as needed and pass the next one in order to parser.

        A StreamError from parser is ignored unless it signals an unsupported
        media type, which is re-raised. ChannelClosed is raised when the
        source runs out.
        """
        self._fill()
        index = self._last_sn % _BUFFER_SIZE
        for probes in range(_BUFFER_SIZE):
            index = (index + 1) % _BUFFER_SIZE
            pkt = self._queue[index]
            if pkt is None:
                continue
            self._queue[index] = None
            self._count -= 1
            self._last_sn = pkt.sequence_number
            try:
                parser(pkt)
            except StreamError as err:
                if err.code == UNSUPPORTED_MEDIA_CODE:
                    raise
            if self._count <= self.window:
                if probes > self.window + 2:
                    if self.window in (1, 2, 4, 8):
                        self.window *= 2
                elif probes == self.window and self.window in (8, 16):
                    self.window //= 2
                break

    def _fill(self) -> None:
        while True:
            try:
                pkt = next(self._packets)
            except StopIteration:
                raise ChannelClosed(f"ssrc {self.ssrc}: RTP channel closed") from None
            seq = pkt.sequence_number
            last = self._last_sn
            if seq > last or (last - seq) & 0xFFFF > _ROUND_SIZE or last == 0:
                slot = seq % _BUFFER_SIZE
                if self._queue[slot] is None:
                    self._count += 1
                self._queue[slot] = pkt
                if self._count >= self.window * 2 - 1:
                    break