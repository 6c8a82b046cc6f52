"""Codecs for the scalar protobuf types and for repeated fields."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterable, Iterator

from .reader import ByteReader
from .wire import Codec, ReadError, WireType
from .writer import ByteWriter


@dataclass(frozen=True)
class BoolCodec(Codec):
    """A bool encoded as a varint 0 or 1."""

    wire_type: ClassVar[WireType] = WireType.VARINT

    def write_raw(self, writer: ByteWriter, value: bool) -> None:
        writer.write_varuint32(int(bool(value)))

    def read_raw(self, reader: ByteReader) -> bool:
        raw = reader.read_varuint32()
        if raw == 0:
            return False
        if raw == 1:
            return True
        raise ReadError(f"invalid bool value {raw}")

    def default(self) -> bool:
        return False


@dataclass(frozen=True)
class IntCodec(Codec):
    """A fixed-width integer; signed values use zigzag encoding."""

    bits: int = 32
    signed: bool = False

    wire_type: ClassVar[WireType] = WireType.VARINT

    def __post_init__(self) -> None:
        if self.bits not in (8, 16, 32, 64):
            raise ValueError(f"unsupported integer width: {self.bits}")

    @property
    def min_value(self) -> int:
        """Smallest representable value."""
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        """Largest representable value."""
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    def write_raw(self, writer: ByteWriter, value: int) -> None:
        if not self.min_value <= value <= self.max_value:
            raise ValueError(f"{value} does not fit in {self}")
        if self.bits == 64:
            if self.signed:
                writer.write_varint64(value)
            else:
                writer.write_varuint64(value)
        elif self.signed:
            writer.write_varint32(value)
        else:
            writer.write_varuint32(value)

    def read_raw(self, reader: ByteReader) -> int:
        if self.bits == 64:
            raw = reader.read_varint64() if self.signed else reader.read_varuint64()
        else:
            raw = reader.read_varint32() if self.signed else reader.read_varuint32()
        if not self.min_value <= raw <= self.max_value:
            raise ReadError(f"{raw} does not fit in {self}")
        return raw

    def default(self) -> int:
        return 0


@dataclass(frozen=True)
class StringCodec(Codec):
    """UTF-8 text, optionally limited to ``capacity`` encoded bytes."""

    capacity: int | None = None

    wire_type: ClassVar[WireType] = WireType.LENGTH_DELIMITED

    def write_raw(self, writer: ByteWriter, value: str) -> None:
        writer.write(value.encode("utf-8"))

    def read_raw(self, reader: ByteReader) -> str:
        data = reader.read_to_end()
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ReadError("string is not valid UTF-8") from exc
        if self.capacity is not None and len(data) > self.capacity:
            raise ReadError(f"string of {len(data)} bytes exceeds capacity {self.capacity}")
        return text

    def default(self) -> str:
        return ""


@dataclass(frozen=True)
class BytesCodec(Codec):
    """Raw bytes, optionally limited to ``capacity``."""

    capacity: int | None = None

    wire_type: ClassVar[WireType] = WireType.LENGTH_DELIMITED

    def write_raw(self, writer: ByteWriter, value: bytes) -> None:
        writer.write(bytes(value))

    def read_raw(self, reader: ByteReader) -> bytes:
        data = reader.read_to_end()
        if self.capacity is not None and len(data) > self.capacity:
            raise ReadError(f"{len(data)} bytes exceed capacity {self.capacity}")
        return data

    def default(self) -> bytes:
        return b""


@dataclass(frozen=True)
class Repeated:
    """A repeated field of ``codec`` values, optionally limited in count."""

    codec: Codec
    capacity: int | None = None

    def append(self, values: list, item: object) -> None:
        """Append ``item``, raising ReadError when the list is full."""
        if self.capacity is not None and len(values) >= self.capacity:
            raise ReadError(f"repeated field holds at most {self.capacity} items")
        values.append(item)

    def iter(self, values: Iterable[object]) -> Iterator[object]:
        """Iterate over the items to be written."""
        return iter(values)

    def default(self) -> list:
        """Return a new empty list."""
        return []


BOOL = BoolCodec()
UINT8 = IntCodec(8, False)
UINT16 = IntCodec(16, False)
UINT32 = IntCodec(32, False)
UINT64 = IntCodec(64, False)
INT8 = IntCodec(8, True)
INT16 = IntCodec(16, True)
INT32 = IntCodec(32, True)
INT64 = IntCodec(64, True)
STRING = StringCodec()
BYTES = BytesCodec()