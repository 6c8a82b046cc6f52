"""Wire-level definitions shared by the reader, the writer and the codecs."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from .reader import ByteReader
    from .writer import ByteWriter


class WireType(enum.IntEnum):
    """Wire type of a field, as stored in the low three bits of its header."""

    VARINT = 0
    LENGTH_DELIMITED = 2


class ReadError(Exception):
    """Raised when input cannot be decoded."""


class WriteError(Exception):
    """Raised when output does not fit into the writer's capacity."""


class Codec(ABC):
    """Encodes and decodes values of one protobuf type."""

    wire_type: ClassVar[WireType]

    @abstractmethod
    def write_raw(self, writer: ByteWriter, value: Any) -> None:
        """Serialize ``value`` without a field header."""

    @abstractmethod
    def read_raw(self, reader: ByteReader) -> Any:
        """Deserialize a value from the whole of ``reader``."""

    @abstractmethod
    def default(self) -> Any:
        """Return the value a field holds when it is absent."""