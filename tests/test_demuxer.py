import pytest

from gmvstream.demuxer import ChannelClosed, DemuxContext
from gmvstream.mode import UNSUPPORTED_MEDIA_CODE, StreamError
from gmvstream.rtp import RtpPacket


def pkt(seq):
    return RtpPacket(
        version=2, padding=False, extension=False, marker=False,
        payload_type=96, sequence_number=seq, timestamp=0, ssrc=1,
    )


def drain(ctx, parser):
    with pytest.raises(ChannelClosed):
        while True:
            ctx.demux_packet(parser)


def test_in_order_delivery():
    seqs = [1, 2, 3, 4, 5]
    ctx = DemuxContext(1, [pkt(s) for s in seqs])
    seen = []
    drain(ctx, lambda p: seen.append(p.sequence_number))
    assert seen == seqs


def test_empty_source_closes():
    ctx = DemuxContext(9, [])
    with pytest.raises(ChannelClosed):
        ctx.demux_packet(lambda p: None)


def test_stale_packet_dropped():
    ctx = DemuxContext(1, [pkt(s) for s in [1, 3, 2]])
    seen = []
    drain(ctx, lambda p: seen.append(p.sequence_number))
    assert 2 not in seen
    assert seen == sorted(seen)


def test_sequence_wrap_around():
    seqs = [65535, 0, 1, 2, 3, 4, 5]
    ctx = DemuxContext(1, [pkt(s) for s in seqs])
    seen = []
    drain(ctx, lambda p: seen.append(p.sequence_number))
    assert seen == [65535, 0, 1, 2, 3]
    assert ctx.window == 2


def test_unsupported_media_error_propagates():
    ctx = DemuxContext(1, [pkt(1), pkt(2)])

    def parser(p):
        raise StreamError("unsupported", code=UNSUPPORTED_MEDIA_CODE)

    with pytest.raises(StreamError) as info:
        ctx.demux_packet(parser)
    assert info.value.code == UNSUPPORTED_MEDIA_CODE


def test_other_errors_are_swallowed():
    ctx = DemuxContext(1, [pkt(1), pkt(2)])
    seen = []

    def parser(p):
        seen.append(p.sequence_number)
        raise StreamError("transient", code=1)

    ctx.demux_packet(parser)
    ctx.demux_packet(parser)
    assert seen == [1, 2]
    assert ctx.window == 1
    with pytest.raises(ChannelClosed):
        ctx.demux_packet(parser)
    assert seen == [1, 2]