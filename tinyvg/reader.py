from __future__ import annotations

import struct
from typing import BinaryIO

from .errors import MalformedVarint, UnexpectedEof

DEFAULT_MAX_VARINT_BYTES = 10

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_I8 = struct.Struct("<b")
_I16 = struct.Struct("<h")
_I32 = struct.Struct("<i")
_F32 = struct.Struct("<f")


class PrimitiveReader:
    """
    Sequential little-endian reader over a binary stream.

    ``offset`` counts the bytes consumed so far and is attached to every error
    so a failure can be located in the source file. The reader never seeks, so
    it works on pipes and sockets as well as files.
    """

    def __init__(self, stream: BinaryIO, *, max_varint_bytes: int = DEFAULT_MAX_VARINT_BYTES) -> None:
        if max_varint_bytes < 1:
            raise ValueError("max_varint_bytes must be at least 1")
        self._stream = stream
        self.max_varint_bytes = max_varint_bytes
        self.offset = 0

    def read_bytes(self, count: int) -> bytes:
        if count < 0:
            raise ValueError("count must be non-negative")
        if count == 0:
            return b""
        data = self._stream.read(count)
        if data is None or len(data) < count:
            available = 0 if data is None else len(data)
            raise UnexpectedEof(
                f"needed {count} byte(s) but only {available} remain",
                offset=self.offset,
            )
        self.offset += count
        return data

    def read_remaining(self) -> bytes:
        data = self._stream.read() or b""
        self.offset += len(data)
        return data

    def read_u8(self) -> int:
        return self.read_bytes(1)[0]

    def read_u16(self) -> int:
        return _U16.unpack(self.read_bytes(2))[0]

    def read_u32(self) -> int:
        return _U32.unpack(self.read_bytes(4))[0]

    def read_i8(self) -> int:
        return _I8.unpack(self.read_bytes(1))[0]

    def read_i16(self) -> int:
        return _I16.unpack(self.read_bytes(2))[0]

    def read_i32(self) -> int:
        return _I32.unpack(self.read_bytes(4))[0]

    def read_f32(self) -> float:
        return _F32.unpack(self.read_bytes(4))[0]

    def read_varint(self) -> int:
        start = self.offset
        value = 0
        for index in range(self.max_varint_bytes):
            byte = self.read_u8()
            value |= (byte & 0x7F) << (7 * index)
            if (byte & 0x80) == 0:
                return value
        raise MalformedVarint(
            f"varint not terminated within {self.max_varint_bytes} bytes",
            offset=start,
        )
