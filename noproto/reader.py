"""Decoding of protobuf wire data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from .wire import Codec, ReadError, WireType


def _zigzag_decode(value: int) -> int:
    return (value >> 1) ^ -(value & 1)


class ByteReader:
    """Consumes bytes from the front of a buffer."""

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def inner(self) -> bytes:
        """Return the bytes not yet consumed."""
        return self._data[self._pos:]

    def eof(self) -> bool:
        """Return True when every byte has been consumed."""
        return self._pos >= len(self._data)

    def read(self, n: int) -> bytes:
        """Consume and return exactly ``n`` bytes."""
        if n < 0:
            raise ValueError(f"cannot read a negative number of bytes: {n}")
        end = self._pos + n
        if end > len(self._data):
            raise ReadError(f"need {n} bytes, only {len(self._data) - self._pos} left")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def read_u8(self) -> int:
        """Consume one byte."""
        return self.read(1)[0]

    def read_u16(self) -> int:
        """Consume a little-endian u16."""
        return int.from_bytes(self.read(2), "little")

    def read_u32(self) -> int:
        """Consume a little-endian u32."""
        return int.from_bytes(self.read(4), "little")

    def read_u64(self) -> int:
        """Consume a little-endian u64."""
        return int.from_bytes(self.read(8), "little")

    def read_slice(self, length: int) -> bytes:
        """Consume ``length`` bytes."""
        return self.read(length)

    def read_to_end(self) -> bytes:
        """Consume and return all remaining bytes."""
        rest = self._data[self._pos:]
        self._pos = len(self._data)
        return rest

    def read_varslice(self) -> bytes:
        """Consume a varint length followed by that many bytes."""
        return self.read_slice(self.read_varuint32())

    def read_varuint_bytes(self) -> bytes:
        """Consume the raw bytes of one varint, terminator included."""
        for length, byte in enumerate(self._data[self._pos:], 1):
            if not byte & 0x80:
                return self.read(length)
        raise ReadError("unterminated varint")

    def _read_varuint(self, bits: int) -> int:
        result = 0
        shift = 0
        while True:
            byte = self.read_u8()
            # Longer varints occur in practice (negative int32 sent as 64 bits);
            # excess high bits are dropped.
            if shift < bits:
                result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result & ((1 << bits) - 1)
            shift += 7

    def read_varuint32(self) -> int:
        """Consume a varint, keeping its low 32 bits."""
        return self._read_varuint(32)

    def read_varint32(self) -> int:
        """Consume a zigzag-encoded i32."""
        return _zigzag_decode(self.read_varuint32())

    def read_varuint64(self) -> int:
        """Consume a varint, keeping its low 64 bits."""
        return self._read_varuint(64)

    def read_varint64(self) -> int:
        """Consume a zigzag-encoded i64."""
        return _zigzag_decode(self.read_varuint64())

    def read_fields(self) -> Iterator[FieldReader]:
        """Yield the fields of a message until the buffer is exhausted."""
        while not self.eof():
            header = self.read_varuint32()
            try:
                wire_type = WireType(header & 0b111)
            except ValueError:
                raise ReadError(f"unsupported wire type {header & 0b111}") from None
            if wire_type is WireType.VARINT:
                data = self.read_varuint_bytes()
            else:
                data = self.read_varslice()
            yield FieldReader(header >> 3, data, wire_type)


@dataclass(frozen=True)
class FieldReader:
    """One field of a message: its tag, wire type and raw payload."""

    tag: int
    data: bytes
    wire_type: WireType

    def _check(self, codec: Codec) -> None:
        if self.wire_type != codec.wire_type:
            raise ReadError(
                f"field {self.tag} has wire type {self.wire_type.name}, "
                f"expected {codec.wire_type.name}"
            )

    def read(self, codec: Codec) -> Any:
        """Decode the payload with ``codec``."""
        self._check(codec)
        return codec.read_raw(ByteReader(self.data))

    def read_repeated(self, repeated: Any, values: list) -> None:
        """Decode the payload and append it to ``values``."""
        repeated.append(values, self.read(repeated.codec))

    def read_optional(self, codec: Codec) -> Any:
        """Decode the payload of an optional field."""
        return self.read(codec)

    def read_oneof_variant(self, codec: Codec) -> Any:
        """Decode the payload of one variant of a oneof."""
        return self.read(codec)