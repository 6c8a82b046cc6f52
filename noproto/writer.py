"""Encoding of protobuf wire data."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from .wire import Codec, WireType, WriteError

_U32_MASK = (1 << 32) - 1
_U64_MASK = (1 << 64) - 1


class ByteWriter:
    """Appends bytes to a buffer of optional fixed capacity."""

    __slots__ = ("_buf", "_capacity")

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None and capacity < 0:
            raise ValueError(f"capacity must not be negative: {capacity}")
        self._buf = bytearray()
        self._capacity = capacity

    @property
    def capacity(self) -> int | None:
        """Maximum number of bytes, or None when unbounded."""
        return self._capacity

    @property
    def pos(self) -> int:
        """Number of bytes written so far."""
        return len(self._buf)

    def _room(self) -> float:
        if self._capacity is None:
            return float("inf")
        return self._capacity - len(self._buf)

    def bytes(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._buf)

    def write(self, data: bytes) -> None:
        """Append ``data``, or raise WriteError if it does not fit."""
        if len(data) > self._room():
            raise WriteError(f"{len(data)} bytes do not fit in the buffer")
        self._buf += data

    def write_u8(self, value: int) -> None:
        """Append one byte."""
        self.write(value.to_bytes(1, "little"))

    def write_u16(self, value: int) -> None:
        """Append a little-endian u16."""
        self.write(value.to_bytes(2, "little"))

    def write_u32(self, value: int) -> None:
        """Append a little-endian u32."""
        self.write(value.to_bytes(4, "little"))

    def write_u64(self, value: int) -> None:
        """Append a little-endian u64."""
        self.write(value.to_bytes(8, "little"))

    def _write_varuint(self, value: int, bits: int) -> None:
        if not 0 <= value < (1 << bits):
            raise ValueError(f"{value} is out of range for an unsigned {bits}-bit varint")
        while True:
            part = value & 0x7F
            value >>= 7
            if value:
                self.write_u8(part | 0x80)
            else:
                self.write_u8(part)
                return

    def write_varuint32(self, value: int) -> None:
        """Append a varint-encoded u32."""
        self._write_varuint(value, 32)

    def write_varuint64(self, value: int) -> None:
        """Append a varint-encoded u64."""
        self._write_varuint(value, 64)

    def write_varint32(self, value: int) -> None:
        """Append a zigzag-encoded i32."""
        if not -(1 << 31) <= value < (1 << 31):
            raise ValueError(f"{value} is out of range for a signed 32-bit varint")
        self.write_varuint32(((value << 1) ^ (value >> 31)) & _U32_MASK)

    def write_varint64(self, value: int) -> None:
        """Append a zigzag-encoded i64."""
        if not -(1 << 63) <= value < (1 << 63):
            raise ValueError(f"{value} is out of range for a signed 64-bit varint")
        self.write_varuint64(((value << 1) ^ (value >> 63)) & _U64_MASK)

    def write_length_delimited(self, fn: Callable[[ByteWriter], None]) -> None:
        """Run ``fn`` to write a payload, then put its varint length in front."""
        start = len(self._buf)
        fn(self)
        header = ByteWriter()
        header.write_varuint32(len(self._buf) - start)
        prefix = header.bytes()
        if len(prefix) > self._room():
            raise WriteError("length header does not fit in the buffer")
        self._buf[start:start] = prefix

    def write_field(self, tag: int, codec: Codec, value: Any) -> None:
        """Append a field header and the value encoded with ``codec``."""
        self.write_varuint32(((tag << 3) | codec.wire_type) & _U32_MASK)
        if codec.wire_type is WireType.LENGTH_DELIMITED:
            self.write_length_delimited(lambda w: codec.write_raw(w, value))
        else:
            codec.write_raw(self, value)

    def write_repeated(self, tag: int, repeated: Any, values: Iterable[Any]) -> None:
        """Append one field per item of ``values``."""
        for item in repeated.iter(values):
            self.write_field(tag, repeated.codec, item)

    def write_optional(self, tag: int, codec: Codec, value: Any) -> None:
        """Append the field unless ``value`` is None."""
        if value is not None:
            self.write_field(tag, codec, value)