import pytest
from hypothesis import given
from hypothesis import strategies as st

from noproto.reader import ByteReader
from noproto.types import STRING, UINT32, Repeated
from noproto.wire import WireType, WriteError
from noproto.writer import ByteWriter


def test_varuint_known_encoding():
    writer = ByteWriter()
    writer.write_varuint32(300)
    assert writer.bytes() == b"\xac\x02"


def test_zigzag_minus_one():
    writer = ByteWriter()
    writer.write_varint32(-1)
    assert writer.bytes() == b"\x01"


@pytest.mark.parametrize("value", range(-64, 64))
def test_small_signed_values_take_one_byte(value):
    writer = ByteWriter()
    writer.write_varint64(value)
    assert writer.pos == 1


def test_write_beyond_capacity():
    writer = ByteWriter(1)
    with pytest.raises(WriteError):
        writer.write(b"ab")
    assert writer.pos == 0
    assert writer.bytes() == b""


def test_write_exactly_fills_capacity():
    writer = ByteWriter(2)
    writer.write(b"ab")
    assert writer.bytes() == b"ab"
    with pytest.raises(WriteError):
        writer.write_u8(0)


def test_varuint_partially_fits():
    writer = ByteWriter(1)
    with pytest.raises(WriteError):
        writer.write_varuint32(300)


@pytest.mark.parametrize("value", [-1, 2**32])
def test_varuint32_out_of_range(value):
    with pytest.raises(ValueError):
        ByteWriter().write_varuint32(value)


def test_varint32_out_of_range():
    with pytest.raises(ValueError):
        ByteWriter().write_varint32(2**31)


def test_negative_capacity_rejected():
    with pytest.raises(ValueError):
        ByteWriter(-1)


def test_length_delimited_inserts_header():
    writer = ByteWriter()
    writer.write(b"x")
    writer.write_length_delimited(lambda inner: inner.write(b"abc"))
    assert writer.bytes() == b"x\x03abc"


def test_length_delimited_header_must_fit():
    writer = ByteWriter(3)
    with pytest.raises(WriteError):
        writer.write_length_delimited(lambda inner: inner.write(b"abc"))


@given(st.binary(max_size=400))
def test_length_delimited_round_trip(payload):
    writer = ByteWriter()
    writer.write_length_delimited(lambda inner: inner.write(payload))
    reader = ByteReader(writer.bytes())
    assert reader.read_varslice() == payload
    assert reader.eof()


def test_write_field_string():
    writer = ByteWriter()
    writer.write_field(1, STRING, "hi")
    assert writer.bytes() == b"\x0a\x02hi"


@given(st.integers(min_value=1, max_value=2**29 - 1), st.integers(min_value=0, max_value=2**32 - 1))
def test_write_field_round_trip(tag, value):
    writer = ByteWriter()
    writer.write_field(tag, UINT32, value)
    [field] = ByteReader(writer.bytes()).read_fields()
    assert field.tag == tag
    assert field.wire_type is WireType.VARINT
    assert field.read(UINT32) == value


def test_write_repeated():
    writer = ByteWriter()
    writer.write_repeated(3, Repeated(UINT32), [1, 2, 3])
    fields = list(ByteReader(writer.bytes()).read_fields())
    assert [f.tag for f in fields] == [3, 3, 3]
    assert [f.read(UINT32) for f in fields] == [1, 2, 3]


def test_write_optional():
    absent = ByteWriter()
    absent.write_optional(2, STRING, None)
    assert absent.bytes() == b""

    present = ByteWriter()
    present.write_optional(2, STRING, "")
    direct = ByteWriter()
    direct.write_field(2, STRING, "")
    assert present.bytes() == direct.bytes()
    assert present.pos > 0