"""Declarative protobuf messages, enumerations and oneofs built on dataclasses."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable

from .reader import ByteReader, FieldReader
from .types import Repeated
from .wire import Codec, ReadError, WireType
from .writer import ByteWriter

_CODEC_ATTR = "__noproto_codec__"
_METADATA_KEY = "noproto"
_U32_LIMIT = 1 << 32


class Kind(str, enum.Enum):
    """How a message field holds its values."""

    SINGLE = "single"
    REPEATED = "repeated"
    OPTIONAL = "optional"
    ONEOF = "oneof"


@dataclass(frozen=True)
class FieldSpec:
    """The protobuf description of one message field."""

    codec: Any
    kind: Kind
    tags: tuple[int, ...]

    @property
    def tag(self) -> int:
        """The tag used when writing the field."""
        return self.tags[0]


@dataclass(frozen=True)
class Variant:
    """The occupied variant of a oneof: its name and its value."""

    name: str
    value: Any


def _check_tag(tag: Any) -> int:
    if isinstance(tag, bool) or not isinstance(tag, int) or not 0 <= tag < _U32_LIMIT:
        raise ValueError(f"invalid tag: {tag!r}")
    return tag


def _resolve(codec: Any) -> Any:
    """Turn a codec, a message class or an enumeration class into its codec."""
    if isinstance(codec, (Codec, Repeated, OneofCodec)):
        return codec
    found = getattr(codec, _CODEC_ATTR, None)
    if isinstance(found, Codec):
        return found
    raise TypeError(f"{codec!r} is not a codec, message or enumeration")


def field(
    codec: Any,
    *,
    tag: int | None = None,
    tags: Iterable[int] | None = None,
    kind: Kind | str | None = None,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
) -> Any:
    """Declare a message field; use as the default of a class attribute."""
    resolved = _resolve(codec)
    if kind is None:
        if isinstance(resolved, Repeated):
            kind = Kind.REPEATED
        elif isinstance(resolved, OneofCodec):
            kind = Kind.ONEOF
        else:
            kind = Kind.SINGLE
    else:
        kind = Kind(kind)

    if kind is Kind.REPEATED and not isinstance(resolved, Repeated):
        if isinstance(resolved, OneofCodec):
            raise TypeError("a oneof cannot be repeated")
        resolved = Repeated(resolved)

    if kind is Kind.ONEOF:
        if not isinstance(resolved, OneofCodec):
            raise TypeError("a oneof field needs a OneofCodec")
        if tag is not None:
            raise ValueError("tag must not be set in oneof; use tags")
        if tags is None:
            raise ValueError("missing tags in oneof")
        tag_tuple = tuple(_check_tag(t) for t in tags)
        if not tag_tuple:
            raise ValueError("a oneof needs at least one tag")
    else:
        if isinstance(resolved, OneofCodec):
            raise TypeError("a OneofCodec can only be used by a oneof field")
        if isinstance(resolved, Repeated) and kind is not Kind.REPEATED:
            raise TypeError(f"a repeated codec cannot be used by a {kind.value} field")
        if tag is None:
            raise ValueError("missing tag")
        tag_tuple = (_check_tag(tag),)

    spec = FieldSpec(resolved, kind, tag_tuple)
    if default is dataclasses.MISSING and default_factory is dataclasses.MISSING:
        if kind in (Kind.SINGLE, Kind.REPEATED):
            default_factory = resolved.default
        else:
            default = None
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={_METADATA_KEY: spec},
    )


class MessageCodec(Codec):
    """Codec for a class decorated with :func:`message`."""

    wire_type: ClassVar[WireType] = WireType.LENGTH_DELIMITED

    def __init__(self, cls: type) -> None:
        specs: list[tuple[str, FieldSpec]] = []
        for dc_field in dataclasses.fields(cls):
            spec = dc_field.metadata.get(_METADATA_KEY)
            if not isinstance(spec, FieldSpec):
                raise ValueError(
                    f"invalid message field {cls.__name__}.{dc_field.name}: missing tag"
                )
            specs.append((dc_field.name, spec))
        # Fields are written in tag order.
        specs.sort(key=lambda item: min(item[1].tags))

        by_tag: dict[int, tuple[str, FieldSpec]] = {}
        for name, spec in specs:
            for tag in spec.tags:
                if tag in by_tag:
                    raise ValueError(f"message {cls.__name__} has fields with duplicate tags")
                by_tag[tag] = (name, spec)

        self._cls = cls
        self._fields = tuple(specs)
        self._by_tag = by_tag

    @property
    def cls(self) -> type:
        """The message class."""
        return self._cls

    @property
    def fields(self) -> tuple[tuple[str, FieldSpec], ...]:
        """Field names and specs in tag order."""
        return self._fields

    def write_raw(self, writer: ByteWriter, value: Any) -> None:
        for name, spec in self._fields:
            item = getattr(value, name)
            if spec.kind is Kind.SINGLE:
                writer.write_field(spec.tag, spec.codec, item)
            elif spec.kind is Kind.REPEATED:
                writer.write_repeated(spec.tag, spec.codec, item)
            elif spec.kind is Kind.OPTIONAL:
                writer.write_optional(spec.tag, spec.codec, item)
            else:
                spec.codec.write_raw(writer, item)

    def read_raw(self, reader: ByteReader) -> Any:
        msg = self.default()
        for field_reader in reader.read_fields():
            entry = self._by_tag.get(field_reader.tag)
            if entry is None:
                continue
            name, spec = entry
            if spec.kind is Kind.SINGLE:
                setattr(msg, name, field_reader.read(spec.codec))
            elif spec.kind is Kind.REPEATED:
                field_reader.read_repeated(spec.codec, getattr(msg, name))
            elif spec.kind is Kind.OPTIONAL:
                setattr(msg, name, field_reader.read_optional(spec.codec))
            else:
                setattr(msg, name, spec.codec.read_raw(field_reader))
        return msg

    def default(self) -> Any:
        return self._cls()


def message(cls: type) -> type:
    """Class decorator making ``cls`` a dataclass that encodes as a protobuf message."""
    if not isinstance(cls, type):
        raise TypeError(f"message must be applied to a class, not {cls!r}")
    if issubclass(cls, enum.Enum):
        raise TypeError("message can not be applied to an enum")
    if "__dataclass_fields__" not in cls.__dict__:
        cls = dataclasses.dataclass(cls)
    setattr(cls, _CODEC_ATTR, MessageCodec(cls))
    return cls


class EnumCodec(Codec):
    """Codec for an enumeration whose member values are u32 integers."""

    wire_type: ClassVar[WireType] = WireType.VARINT

    def __init__(self, enum_cls: type) -> None:
        if not (isinstance(enum_cls, type) and issubclass(enum_cls, enum.Enum)):
            raise TypeError(f"{enum_cls!r} is not an Enum class")
        members = list(enum_cls)
        if not members:
            raise ValueError("enumeration must have at least one member")
        for member in members:
            value = member.value
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < _U32_LIMIT:
                raise ValueError(f"enumeration member {member!r} needs an unsigned 32-bit value")
        self._enum = enum_cls
        self._default = members[0]

    def write_raw(self, writer: ByteWriter, value: Any) -> None:
        writer.write_varuint32(self._enum(value).value)

    def read_raw(self, reader: ByteReader) -> Any:
        raw = reader.read_varuint32()
        try:
            return self._enum(raw)
        except ValueError:
            raise ReadError(f"{raw} is not a value of {self._enum.__name__}") from None

    def default(self) -> Any:
        return self._default


def enumeration(cls: type) -> type:
    """Class decorator making an Enum encodable as a protobuf enumeration."""
    setattr(cls, _CODEC_ATTR, EnumCodec(cls))
    return cls


class OneofCodec:
    """A set of named variants, each with its own tag and codec."""

    def __init__(self, **variants: tuple[int, Any]) -> None:
        self._by_name: dict[str, tuple[int, Codec]] = {}
        self._by_tag: dict[int, tuple[str, Codec]] = {}
        for name, (tag, codec) in variants.items():
            tag = _check_tag(tag)
            resolved = _resolve(codec)
            if not isinstance(resolved, Codec):
                raise TypeError(f"variant {name} needs a plain codec")
            if tag in self._by_tag:
                raise ValueError(f"oneof variants have duplicate tags: {tag}")
            self._by_name[name] = (tag, resolved)
            self._by_tag[tag] = (name, resolved)

    @property
    def tags(self) -> tuple[int, ...]:
        """The tags of all variants, in declaration order."""
        return tuple(self._by_tag)

    def write_raw(self, writer: ByteWriter, value: Variant | None) -> None:
        """Write the occupied variant as a field, or nothing for None."""
        if value is None:
            return
        if not isinstance(value, Variant):
            raise TypeError(f"oneof value must be a Variant, not {value!r}")
        try:
            tag, codec = self._by_name[value.name]
        except KeyError:
            raise ValueError(f"unknown oneof variant {value.name!r}") from None
        writer.write_field(tag, codec, value.value)

    def read_raw(self, field_reader: FieldReader) -> Variant:
        """Decode the variant that ``field_reader`` holds."""
        try:
            name, codec = self._by_tag[field_reader.tag]
        except KeyError:
            raise ReadError(f"tag {field_reader.tag} is not a variant of this oneof") from None
        return Variant(name, field_reader.read_oneof_variant(codec))


def write(msg: Any, capacity: int | None = None) -> bytes:
    """Serialize a message, raising WriteError if it exceeds ``capacity`` bytes."""
    codec = getattr(type(msg), _CODEC_ATTR, None)
    if not isinstance(codec, MessageCodec):
        raise TypeError(f"{type(msg).__name__} is not a message")
    writer = ByteWriter(capacity)
    codec.write_raw(writer, msg)
    return writer.bytes()


def read(cls: Any, data: bytes) -> Any:
    """Deserialize a message of class ``cls`` from ``data``."""
    codec = _resolve(cls)
    if not isinstance(codec, Codec):
        raise TypeError(f"{cls!r} cannot be read on its own")
    return codec.read_raw(ByteReader(data))