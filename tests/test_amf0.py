import struct

import pytest

from gmvstream.amf0 import (
    encode,
    encode_boolean,
    encode_ecma_array,
    encode_number,
    encode_string,
)


@pytest.mark.parametrize("value", [0.0, 1.5, -7.25, 123.0, 1e300, 25])
def test_number_round_trip(value):
    encoded = encode_number(value)
    assert len(encoded) == 9
    assert struct.unpack(">d", encoded[1:])[0] == float(value)


def test_number_wire_bytes_for_1920():
    assert encode_number(1920.0)[1:] == bytes([0x40, 0x9E, 0, 0, 0, 0, 0, 0])


def test_number_rejects_bool():
    with pytest.raises(TypeError):
        encode_number(True)


def test_boolean_flag_byte():
    on = encode_boolean(True)
    off = encode_boolean(False)
    assert len(on) == 2 and len(off) == 2
    assert on[0] == off[0]
    assert on[1] == 1 and off[1] == 0


def test_string_on_metadata():
    assert encode_string("onMetaData") == b"\x02\x00\x0aonMetaData"


def test_string_length_is_utf8_byte_count():
    text = "中文字幕"
    encoded = encode_string(text)
    raw = text.encode("utf-8")
    assert int.from_bytes(encoded[1:3], "big") == len(raw)
    assert encoded[3:] == raw


def test_long_string_uses_four_byte_length():
    text = "a" * 70000
    encoded = encode_string(text)
    assert encoded[0] != encode_string("a")[0]
    assert int.from_bytes(encoded[1:5], "big") == len(text)
    assert len(encoded) == 5 + len(text)


def test_ecma_array_layout():
    encoded = encode_ecma_array([("duration", 123.0)])
    assert encoded[0] == 0x08
    assert int.from_bytes(encoded[1:5], "big") == 1
    assert encoded.endswith(b"\x00\x00\x09")
    key = len("duration").to_bytes(2, "big") + b"duration"
    assert encoded[5:5 + len(key)] == key
    assert encoded[5 + len(key):-3] == encode_number(123.0)


def test_empty_ecma_array():
    encoded = encode_ecma_array([])
    assert len(encoded) == 8
    assert int.from_bytes(encoded[1:5], "big") == 0
    assert encoded.endswith(b"\x00\x00\x09")


def test_ecma_array_preserves_order():
    first = encode_ecma_array([("a", 1.0), ("b", True)])
    second = encode_ecma_array([("b", True), ("a", 1.0)])
    assert first != second
    assert sorted(first) == sorted(second)


def test_ecma_array_key_too_long():
    with pytest.raises(ValueError):
        encode_ecma_array([("k" * 70000, 1.0)])


def test_encode_dispatch():
    assert encode(True) == encode_boolean(True)
    assert encode(3) == encode_number(3.0)
    assert encode("x") == encode_string("x")
    assert encode({"a": 1.0}) == encode_ecma_array([("a", 1.0)])


def test_encode_unsupported_type():
    with pytest.raises(TypeError):
        encode(object())