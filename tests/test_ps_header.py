import io

import pytest

from gmvstream.mode import StreamError
from gmvstream.ps_header import (
    EsInfo,
    PsHeader,
    PsParseError,
    PsStream,
    PsSysHeader,
    PsSysMap,
)

SYS_MAP = bytes([
    0x00, 0x00, 0x01, 0xbc, 0x00, 0x3f, 0xc2, 0x01, 0x00, 0x00, 0x00, 0x35,
    0x1b, 0xe0, 0x00, 0x28, 0x01, 0x42, 0xc0, 0x1e, 0xff, 0xe1, 0x00, 0x18, 0x67, 0x42, 0xc0,
    0x1e, 0xda, 0x01, 0xe0, 0x08, 0x9f, 0x96, 0x10, 0x00, 0x00, 0x03, 0x00, 0x10, 0x00, 0x00,
    0x03, 0x03, 0x20, 0xf1, 0x62, 0xea, 0x01, 0x00, 0x05, 0x68, 0xce, 0x0f, 0x2c, 0x80, 0x0f,
    0xc0, 0x00, 0x05, 0x11, 0x90, 0x56, 0xe5, 0x00, 0x1e, 0xb3, 0x9f, 0x92, 0x00, 0x00, 0x01, 0xe0,
])

SYS_HEADER_2 = bytes([
    0x00, 0x00, 0x01, 0xbb, 0x00, 0x12, 0x81, 0x2f, 0x81, 0x04, 0xe1, 0x7f, 0xe0, 0xe0, 0x80,
    0xc0, 0xc0, 0x08, 0xbd, 0xe0, 0x80, 0xbf, 0xe0, 0x80,
])


def test_parse_ps_header():
    data = bytes([0x00, 0x00, 0x01, 0xba, 0x44, 0xf0, 0x4f, 0x69, 0x64, 0x01, 0x02, 0x5f,
                  0x03, 0xfe, 0xff, 0xff, 0x00, 0x01, 0x11, 0x0c])
    stream = io.BytesIO(data)
    header = PsHeader.parse(stream)
    assert header.stuffing[-1] == 0x02
    assert header.stuffing_length == 1
    assert stream.tell() == 11


def test_parse_ps_header_after_start_code():
    data = bytes([0x44, 0xf0, 0x4f, 0x69, 0x64, 0x01, 0x02, 0x5f, 0x03, 0xf8, 0xaa])
    stream = io.BytesIO(data)
    header = PsHeader.parse(stream)
    assert header.system_clock_reference == data[:6]
    assert header.program_mux_rate == data[6:9]
    assert header.stuffing == b""
    assert stream.tell() == 10


def test_parse_ps_header_truncated_stuffing():
    data = bytes([0x44, 0xf0, 0x4f, 0x69, 0x64, 0x01, 0x02, 0x5f, 0x03, 0xfe, 0xff])
    with pytest.raises(PsParseError):
        PsHeader.parse(io.BytesIO(data))


def test_parse_ps_sys_header_zero_length():
    data = bytes([0x00, 0x00, 0x01, 0xBB, 0x00, 0x09, 0x81, 0x86, 0xA1, 0x05, 0xE1,
                  0x7E, 0xE0, 0xE8, 0x00])
    stream = io.BytesIO(data)
    header = PsSysHeader.parse(stream)
    assert header.streams == []
    assert header.length == 0
    assert stream.tell() == 2


def test_parse_ps_sys_header_after_start_code():
    stream = io.BytesIO(SYS_HEADER_2[4:])
    header = PsSysHeader.parse(stream)
    assert header.length == 0x12
    assert [s.stream_id for s in header.streams] == [0xe0, 0xc0, 0xbd, 0xbf]
    assert header.streams[1].p_std == b"\xc0\x08"
    assert stream.tell() == 20


def test_parse_ps_sys_map():
    stream = io.BytesIO(SYS_MAP)
    sys_map = PsSysMap.parse(stream)
    assert sys_map.map_length == 0x3f
    assert sys_map.ps_info_length == 0
    assert sys_map.es_map_length == 0x35
    assert set(sys_map.es_map) == {0xe0, 0xc0}
    assert sys_map.es_map[0xe0].stream_type == 0x1b
    assert sys_map.es_map[0xe0].es_info_length == 40
    assert sys_map.es_map[0xc0] == EsInfo(0x0f, 5, bytes([0x11, 0x90, 0x56, 0xe5, 0x00]))
    assert sys_map.crc_32 == 0x1EB39F92
    assert stream.tell() == 69


def test_parse_ps_sys_map_bad_start_code():
    data = bytearray(SYS_MAP)
    data[3] = 0xbb
    with pytest.raises(PsParseError):
        PsSysMap.parse(io.BytesIO(bytes(data)))


def test_parse_ps_sys_map_truncated_is_stream_error():
    with pytest.raises(StreamError):
        PsSysMap.parse(io.BytesIO(SYS_MAP[:40]))


def test_es_info_parse():
    stream = io.BytesIO(bytes([0x1b, 0xe0, 0x00, 0x02, 0xaa, 0xbb, 0xcc]))
    es_id, info = EsInfo.parse(stream)
    assert es_id == 0xe0
    assert info == EsInfo(0x1b, 2, b"\xaa\xbb")
    assert stream.tell() == 6