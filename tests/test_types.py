import pytest
from hypothesis import given
from hypothesis import strategies as st

from noproto.reader import ByteReader
from noproto.types import (
    BOOL,
    BYTES,
    INT8,
    INT16,
    INT32,
    INT64,
    STRING,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    BytesCodec,
    IntCodec,
    Repeated,
    StringCodec,
)
from noproto.wire import ReadError, WireType
from noproto.writer import ByteWriter

INT_CODECS = [UINT8, UINT16, UINT32, UINT64, INT8, INT16, INT32, INT64]


def _encode(codec, value):
    writer = ByteWriter()
    codec.write_raw(writer, value)
    return writer.bytes()


def _decode(codec, data):
    reader = ByteReader(data)
    value = codec.read_raw(reader)
    assert reader.eof()
    return value


@pytest.mark.parametrize("codec", INT_CODECS)
@given(data=st.data())
def test_int_round_trip(codec, data):
    value = data.draw(st.integers(min_value=codec.min_value, max_value=codec.max_value))
    assert _decode(codec, _encode(codec, value)) == value


@pytest.mark.parametrize("codec", INT_CODECS)
def test_int_write_out_of_range(codec):
    with pytest.raises(ValueError):
        _encode(codec, codec.max_value + 1)
    with pytest.raises(ValueError):
        _encode(codec, codec.min_value - 1)


def test_narrow_unsigned_rejects_wide_value():
    with pytest.raises(ReadError):
        _decode(UINT8, _encode(UINT32, 256))
    with pytest.raises(ReadError):
        _decode(UINT16, _encode(UINT32, 2**16))


def test_narrow_signed_rejects_wide_value():
    with pytest.raises(ReadError):
        _decode(INT8, _encode(INT32, 200))
    with pytest.raises(ReadError):
        _decode(INT16, _encode(INT32, -(2**15) - 1))


@given(st.integers(min_value=-(2**31), max_value=2**31 - 1))
def test_int32_and_int64_share_encoding(value):
    assert _encode(INT32, value) == _encode(INT64, value)


@given(st.integers(min_value=0, max_value=2**32 - 1))
def test_uint32_and_uint64_share_encoding(value):
    assert _encode(UINT32, value) == _encode(UINT64, value)


def test_int_codec_rejects_odd_width():
    with pytest.raises(ValueError):
        IntCodec(12)


def test_bool_encoding():
    assert _encode(BOOL, True) == b"\x01"
    assert _decode(BOOL, _encode(BOOL, True)) is True
    assert _decode(BOOL, _encode(BOOL, False)) is False


def test_bool_rejects_other_values():
    with pytest.raises(ReadError):
        _decode(BOOL, _encode(UINT32, 2))


@given(st.text())
def test_string_round_trip(text):
    assert _decode(STRING, _encode(STRING, text)) == text


def test_string_rejects_invalid_utf8():
    with pytest.raises(ReadError):
        _decode(STRING, b"\xff\xfe")


def test_string_capacity_counts_bytes():
    codec = StringCodec(2)
    assert _decode(codec, "é".encode()) == "é"
    assert _decode(codec, b"ab") == "ab"
    with pytest.raises(ReadError):
        _decode(codec, "éa".encode())


@given(st.binary())
def test_bytes_round_trip(data):
    assert _decode(BYTES, _encode(BYTES, data)) == data


def test_bytes_capacity():
    codec = BytesCodec(3)
    assert _decode(codec, b"abc") == b"abc"
    with pytest.raises(ReadError):
        _decode(codec, b"abcd")


@pytest.mark.parametrize("codec", [BOOL, UINT32, INT64, STRING, BYTES])
def test_default_round_trips(codec):
    value = codec.default()
    assert _decode(codec, _encode(codec, value)) == value
    assert not value


@pytest.mark.parametrize(
    "codec, value, wire_type",
    [
        (BOOL, True, WireType.VARINT),
        (INT16, -3, WireType.VARINT),
        (STRING, "x", WireType.LENGTH_DELIMITED),
        (BYTES, b"x", WireType.LENGTH_DELIMITED),
    ],
)
def test_field_wire_type(codec, value, wire_type):
    writer = ByteWriter()
    writer.write_field(9, codec, value)
    [field] = ByteReader(writer.bytes()).read_fields()
    assert field.wire_type is wire_type
    assert field.read(codec) == value


def test_repeated_append_and_iter():
    repeated = Repeated(UINT32, capacity=2)
    values = repeated.default()
    repeated.append(values, 4)
    repeated.append(values, 5)
    with pytest.raises(ReadError):
        repeated.append(values, 6)
    assert list(repeated.iter(values)) == [4, 5]


def test_repeated_default_is_fresh():
    repeated = Repeated(STRING)
    first = repeated.default()
    first.append("a")
    assert repeated.default() == []