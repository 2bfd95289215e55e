from __future__ import annotations

import io

import pytest

from tinyvg.errors import MalformedVarint, ParseError, UnexpectedEof
from tinyvg.reader import PrimitiveReader


def _reader(data: bytes, **kwargs) -> PrimitiveReader:
    return PrimitiveReader(io.BytesIO(data), **kwargs)


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x00", 0),
        (b"\x7f", 127),
        (b"\x80\x01", 128),
        (b"\xff\xff\x03", 0xFFFF),
        (b"\xe5\x8e\x26", 624485),
    ],
)
def test_varint_values(data: bytes, expected: int) -> None:
    reader = _reader(data)
    assert reader.read_varint() == expected
    assert reader.offset == len(data)


def test_varint_longer_than_limit_is_malformed() -> None:
    reader = _reader(b"\x00\x80\x80\x01", max_varint_bytes=2)
    assert reader.read_varint() == 0
    with pytest.raises(MalformedVarint) as excinfo:
        reader.read_varint()
    assert excinfo.value.offset == 1


def test_truncated_varint_is_eof() -> None:
    with pytest.raises(UnexpectedEof):
        _reader(b"\x80\x80").read_varint()


def test_fixed_width_integers_are_little_endian() -> None:
    reader = _reader(b"\x34\x12" + b"\xff\xff" + b"\x78\x56\x34\x12" + b"\x80" + b"\xfe\xff\xff\xff")
    assert reader.read_u16() == 0x1234
    assert reader.read_i16() == -1
    assert reader.read_u32() == 0x12345678
    assert reader.read_i8() == -128
    assert reader.read_i32() == -2
    assert reader.offset == 13


def test_read_f32() -> None:
    reader = _reader(b"\x00\x00\x80\x3f")
    assert reader.read_f32() == pytest.approx(1.0)


def test_short_read_reports_offset() -> None:
    reader = _reader(b"\x01\x02\x03")
    reader.read_u8()
    with pytest.raises(UnexpectedEof) as excinfo:
        reader.read_u32()
    assert excinfo.value.offset == 1
    assert "0x1" in str(excinfo.value)
    assert isinstance(excinfo.value, ParseError)
    assert isinstance(excinfo.value, ValueError)


def test_read_remaining_consumes_everything() -> None:
    reader = _reader(b"\x01abc")
    reader.read_u8()
    assert reader.read_remaining() == b"abc"
    assert reader.read_remaining() == b""
    assert reader.offset == 4


def test_max_varint_bytes_must_be_positive() -> None:
    with pytest.raises(ValueError):
        _reader(b"", max_varint_bytes=0)
