"""Helpers that assemble synthetic TinyVG byte streams for the tests."""

from __future__ import annotations

import struct
from typing import Iterable, Sequence, Tuple

MAGIC = b"\x72\x56"
END = b"\x00"

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)

_SIZE_FORMATS = {0: "<H", 1: "<B", 2: "<I"}
_UNIT_FORMATS = {0: "<h", 1: "<b", 2: "<i"}


def varint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def header(
    width: int = 16,
    height: int = 16,
    *,
    scale: int = 0,
    encoding: int = 0,
    coord_range: int = 0,
    version: int = 1,
) -> bytes:
    flags = scale | (encoding << 4) | (coord_range << 6)
    size_format = _SIZE_FORMATS[coord_range]
    return MAGIC + bytes([version, flags]) + struct.pack(size_format, width) + struct.pack(size_format, height)


def rgba8_table(colors: Sequence[Tuple[int, int, int, int]]) -> bytes:
    return varint(len(colors)) + b"".join(bytes(color) for color in colors)


def tag(command_id: int, style_kind: int = 0) -> bytes:
    return bytes([command_id | (style_kind << 6)])


class Units:
    """Encodes document-space values as raw units for one scale / coordinate range."""

    def __init__(self, scale: int = 0, coord_range: int = 0) -> None:
        self.scale = scale
        self.format = _UNIT_FORMATS[coord_range]

    def unit(self, value: float) -> bytes:
        return struct.pack(self.format, int(round(value * (1 << self.scale))))

    def point(self, x: float, y: float) -> bytes:
        return self.unit(x) + self.unit(y)

    def points(self, pairs: Iterable[Tuple[float, float]]) -> bytes:
        return b"".join(self.point(x, y) for x, y in pairs)


U = Units()


def document(
    body: bytes = b"",
    *,
    width: int = 16,
    height: int = 16,
    scale: int = 0,
    coord_range: int = 0,
    colors: Sequence[Tuple[int, int, int, int]] = (RED,),
    trailer: bytes = b"",
) -> bytes:
    return (
        header(width, height, scale=scale, coord_range=coord_range)
        + rgba8_table(colors)
        + body
        + END
        + trailer
    )


def full_rect(color_index: int = 0, size: int = 16) -> bytes:
    """fill_rectangles with one rectangle covering ``size`` x ``size``."""

    return tag(2) + varint(0) + varint(color_index) + U.unit(0) + U.unit(0) + U.unit(size) + U.unit(size)
