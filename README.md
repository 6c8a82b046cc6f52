# noproto

A small protocol buffers library with no dependencies. You declare messages
as Python dataclasses. You can encode them into a buffer of fixed capacity,
and encoding fails if the output does not fit.

Two wire types are supported: varint and length-delimited. The scalar codecs
cover booleans, signed and unsigned integers of 8, 16, 32 and 64 bits,
UTF-8 strings and raw bytes. Fields can be single, repeated, optional or part
of a oneof. Enumerations and nested messages are supported.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Declaring messages

```python
import enum

from noproto.message import (
    Kind, MessageCodec, OneofCodec, Variant, enumeration, field, message, read, write,
)
from noproto.types import INT32, STRING, IntCodec, Repeated, StringCodec


@enumeration
class Color(enum.Enum):
    RED = 0
    GREEN = 1
    BLUE = 2


@message
class Point:
    x: int = field(IntCodec(32, signed=True), tag=1)
    y: int = field(IntCodec(32, signed=True), tag=2)


@message
class Shape:
    name: str = field(StringCodec(32), tag=1)
    color: Color = field(Color, tag=2)
    points: list = field(Repeated(MessageCodec(Point), 8), tag=3)
    label: str | None = field(STRING, tag=4, kind=Kind.OPTIONAL)
    extra: Variant | None = field(
        OneofCodec(text=(5, STRING), number=(6, INT32)), tags=[5, 6]
    )


shape = Shape(
    name="triangle",
    color=Color.BLUE,
    points=[Point(x=0, y=0), Point(x=3, y=-4)],
    extra=Variant("number", 7),
)
data = write(shape, 128)
assert read(Shape, data) == shape
```

`field()` takes a codec, a class decorated with `@message`, or an Enum
decorated with `@enumeration`. Passing `kind=Kind.REPEATED` with a plain codec
wraps it in an unbounded `Repeated`. A `Repeated` codec implies the repeated
kind, and a `OneofCodec` implies the oneof kind. Single and repeated fields
default to the codec's default value: `0`, `False`, `""`, `b""`, an empty list,
the first enumeration member, or a new instance of the message. Optional and
oneof fields default to `None` and are not written while they are `None`.

Fields are written in tag order. A oneof is placed by its lowest tag.
Duplicate tags in a message or a oneof raise `ValueError`.

## Encoding and decoding

- `write(msg, capacity=None)` returns the encoded bytes. It raises
  `noproto.wire.WriteError` if the message does not fit in `capacity` bytes.
  With no capacity, the output is unbounded.
- `read(cls, data)` decodes a message. It raises `noproto.wire.ReadError` on
  truncated data or an unsupported wire type. It also raises it on a wire type
  that does not match the field, invalid UTF-8, out-of-range integers, a bool
  other than 0 or 1, an unknown enumeration value, or a string, bytes or
  repeated field over its capacity. Fields with unknown tags are skipped.
- Writing a value that its codec cannot represent raises `ValueError`, for
  example an integer out of range or an unknown oneof variant name.

Signed integers use zigzag encoding. When a 32-bit varint is read, only its
low 32 bits are kept. Longer encodings, such as a negative int32 sent as
64 bits, are therefore accepted.

## Lower-level access

`noproto.writer.ByteWriter` and `noproto.reader.ByteReader` expose the wire
primitives:

- little-endian `u8`/`u16`/`u32`/`u64` values
- unsigned and zigzag-signed varints
- length-delimited sections (`ByteWriter.write_length_delimited`)
- field headers (`ByteWriter.write_field`)
- iteration over the fields of a message (`ByteReader.read_fields()`, which
  yields `FieldReader` objects with `tag`, `data` and `wire_type`)

`noproto.wire.Codec` is the abstract base for writing your own codecs. A codec
needs `wire_type`, `write_raw`, `read_raw` and `default`.

## Limitations

The library does not handle the fixed 32-bit and 64-bit wire types, groups,
maps, or `.proto` files. It does not generate code. Messages are declared in
Python only.