"""
Binary TinyVG decoder.

Layout (little endian throughout):

    u8[2]   magic 0x72 0x56
    u8      version (only 1 is understood)
    u8      flags: scale (bits 0-3), color encoding (bits 4-5),
            coordinate range (bits 6-7)
    uN      width, uN height   (N = 2/1/4 bytes for default/reduced/enhanced)
    varint  color count, followed by the color records
    ...     command stream terminated by command id 0
    ...     optional trailer bytes, kept verbatim

Coordinates ("units") are signed integers of the coordinate range's width,
divided by 2**scale. Geometry counts are stored minus one.
"""

from __future__ import annotations

import enum
import io
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, List, Tuple, Type, TypeVar, Union

from .errors import ColorIndexOutOfRange, CountLimitExceeded, InvalidEnumValue, InvalidMagic, UnsupportedVersion
from .format import (
    MAGIC,
    SUPPORTED_VERSION,
    ArcCircle,
    ArcEllipse,
    ClosePath,
    Color,
    ColorEncoding,
    Command,
    CommandId,
    CoordinateRange,
    CubicBezier,
    Document,
    DrawLineLoop,
    DrawLinePath,
    DrawLines,
    DrawLineStrip,
    FillPath,
    FillPolygon,
    FillRectangles,
    FlatColor,
    Header,
    HorizontalLine,
    Line,
    LinearGradient,
    LineSegment,
    OutlineFillPath,
    OutlineFillPolygon,
    OutlineFillRectangles,
    Path as VectorPath,
    PathSegment,
    Point,
    QuadraticBezier,
    RadialGradient,
    Rect,
    SegmentKind,
    Style,
    StyleKind,
    SubPath,
    VerticalLine,
)
from .logging import DecodeTraceLogger
from .reader import DEFAULT_MAX_VARINT_BYTES, PrimitiveReader

DEFAULT_MAX_COUNT = 1 << 20

SEGMENT_KIND_MASK = 0x07
SEGMENT_LINE_WIDTH_FLAG = 0x10
SEGMENT_RESERVED_MASK = 0xFF & ~(SEGMENT_KIND_MASK | SEGMENT_LINE_WIDTH_FLAG)
ARC_LARGE_FLAG = 0x01
ARC_SWEEP_FLAG = 0x02

_FILL_COMMANDS = (CommandId.FILL_POLYGON, CommandId.FILL_RECTANGLES, CommandId.FILL_PATH)
_DRAW_COMMANDS = (
    CommandId.DRAW_LINES,
    CommandId.DRAW_LINE_LOOP,
    CommandId.DRAW_LINE_STRIP,
    CommandId.DRAW_LINE_PATH,
)

E = TypeVar("E", bound=enum.IntEnum)
Source = Union[bytes, bytearray, memoryview, BinaryIO]


@dataclass(frozen=True)
class DecodeLimits:
    max_varint_bytes: int = DEFAULT_MAX_VARINT_BYTES
    max_count: int = DEFAULT_MAX_COUNT


class Decoder:
    """
    Decode one TinyVG document from a binary stream.

    ``decode_header`` and ``decode_commands`` may be called separately (the
    header alone is enough to size an output surface); ``decode`` runs the
    whole pipeline and returns the immutable ``Document``.
    """

    def __init__(
        self,
        stream: BinaryIO,
        *,
        limits: DecodeLimits | None = None,
        trace: DecodeTraceLogger | None = None,
    ) -> None:
        self.limits = limits or DecodeLimits()
        self.reader = PrimitiveReader(stream, max_varint_bytes=self.limits.max_varint_bytes)
        self.trace = trace
        self.header: Header | None = None
        self.color_table: Tuple[Color, ...] = ()
        self._read_raw_unit: Callable[[], int] = self.reader.read_i16

    # Header and color table

    def decode_header(self) -> Header:
        reader = self.reader
        magic = reader.read_bytes(len(MAGIC))
        if magic != MAGIC:
            raise InvalidMagic(f"expected magic {MAGIC.hex()} but found {magic.hex()}", offset=0)
        version_offset = reader.offset
        version = reader.read_u8()
        if version != SUPPORTED_VERSION:
            raise UnsupportedVersion(f"version {version} is not supported", offset=version_offset)
        flags_offset = reader.offset
        flags = reader.read_u8()
        scale = flags & 0x0F
        color_encoding = _enum_value(ColorEncoding, (flags >> 4) & 0x03, "color encoding", flags_offset)
        coordinate_range = _enum_value(CoordinateRange, (flags >> 6) & 0x03, "coordinate range", flags_offset)

        read_size = {
            CoordinateRange.REDUCED: reader.read_u8,
            CoordinateRange.DEFAULT: reader.read_u16,
            CoordinateRange.ENHANCED: reader.read_u32,
        }[coordinate_range]
        width = read_size()
        height = read_size()
        self._read_raw_unit = {
            CoordinateRange.REDUCED: reader.read_i8,
            CoordinateRange.DEFAULT: reader.read_i16,
            CoordinateRange.ENHANCED: reader.read_i32,
        }[coordinate_range]

        self.header = Header(
            version=version,
            scale=scale,
            coordinate_range=coordinate_range,
            color_encoding=color_encoding,
            width=width,
            height=height,
        )
        self._trace(0, "header", f"{width}x{height} scale={scale} {color_encoding.name} {coordinate_range.name}")
        return self.header

    def decode_color_table(self) -> Tuple[Color, ...]:
        header = self._require_header()
        offset = self.reader.offset
        count = self.reader.read_varint()
        self._check_count(count, "color", offset)
        read_color = {
            ColorEncoding.RGBA8888: self._read_rgba8888,
            ColorEncoding.RGB565: self._read_rgb565,
            ColorEncoding.RGBAF32: self._read_rgbaf32,
        }[header.color_encoding]
        self.color_table = tuple(read_color() for _ in range(count))
        self._trace(offset, "color_table", f"count={count}")
        return self.color_table

    def _read_rgba8888(self) -> Color:
        r, g, b, a = self.reader.read_bytes(4)
        return Color(r / 255.0, g / 255.0, b / 255.0, a / 255.0)

    def _read_rgb565(self) -> Color:
        rgb = self.reader.read_u16()
        return Color(
            (rgb & 0x001F) / 31.0,
            ((rgb & 0x07E0) >> 5) / 63.0,
            ((rgb & 0xF800) >> 11) / 31.0,
            1.0,
        )

    def _read_rgbaf32(self) -> Color:
        reader = self.reader
        return Color(reader.read_f32(), reader.read_f32(), reader.read_f32(), reader.read_f32())

    # Command stream

    def decode_commands(self) -> Tuple[Command, ...]:
        self._require_header()
        commands: List[Command] = []
        while True:
            command = self._decode_command()
            if command is None:
                break
            commands.append(command)
        return tuple(commands)

    def decode(self) -> Document:
        header = self.decode_header()
        color_table = self.decode_color_table()
        commands = self.decode_commands()
        trailer = self.reader.read_remaining()
        return Document(header=header, color_table=color_table, commands=commands, trailer=trailer)

    def _decode_command(self) -> Command | None:
        offset = self.reader.offset
        tag = self.reader.read_u8()
        command_id = _enum_value(CommandId, tag & 0x3F, "command id", offset)
        if command_id is CommandId.END_OF_DOCUMENT:
            self._trace(offset, "end_of_document")
            return None
        style_kind = _enum_value(StyleKind, tag >> 6, "style kind", offset)

        command: Command
        if command_id in _FILL_COMMANDS:
            count = self._read_count("geometry")
            style = self._read_style(style_kind)
            if command_id is CommandId.FILL_POLYGON:
                command = FillPolygon(style=style, points=self._read_points(count))
            elif command_id is CommandId.FILL_RECTANGLES:
                command = FillRectangles(style=style, rectangles=self._read_rects(count))
            else:
                command = FillPath(style=style, path=self._read_path(count))
        elif command_id in _DRAW_COMMANDS:
            count = self._read_count("geometry")
            style = self._read_style(style_kind)
            line_width = self._read_unit()
            if command_id is CommandId.DRAW_LINES:
                lines = tuple(LineSegment(self._read_point(), self._read_point()) for _ in range(count))
                command = DrawLines(style=style, line_width=line_width, lines=lines)
            elif command_id is CommandId.DRAW_LINE_LOOP:
                command = DrawLineLoop(style=style, line_width=line_width, points=self._read_points(count))
            elif command_id is CommandId.DRAW_LINE_STRIP:
                command = DrawLineStrip(style=style, line_width=line_width, points=self._read_points(count))
            else:
                command = DrawLinePath(style=style, line_width=line_width, path=self._read_path(count))
        else:
            packed_offset = self.reader.offset
            packed = self.reader.read_u8()
            count = (packed & 0x3F) + 1
            self._check_count(count, "geometry", packed_offset)
            line_kind = _enum_value(StyleKind, packed >> 6, "line style kind", packed_offset)
            fill_style = self._read_style(style_kind)
            line_style = self._read_style(line_kind)
            line_width = self._read_unit()
            if command_id is CommandId.OUTLINE_FILL_POLYGON:
                command = OutlineFillPolygon(
                    fill_style=fill_style,
                    line_style=line_style,
                    line_width=line_width,
                    points=self._read_points(count),
                )
            elif command_id is CommandId.OUTLINE_FILL_RECTANGLES:
                command = OutlineFillRectangles(
                    fill_style=fill_style,
                    line_style=line_style,
                    line_width=line_width,
                    rectangles=self._read_rects(count),
                )
            else:
                command = OutlineFillPath(
                    fill_style=fill_style,
                    line_style=line_style,
                    line_width=line_width,
                    path=self._read_path(count),
                )

        self._trace(offset, command_id.name.lower(), f"style={style_kind.name.lower()} count={count}")
        return command

    def _read_style(self, kind: StyleKind) -> Style:
        if kind is StyleKind.FLAT:
            return FlatColor(color_index=self._read_color_index())
        point_0 = self._read_point()
        point_1 = self._read_point()
        color_index_0 = self._read_color_index()
        color_index_1 = self._read_color_index()
        gradient = LinearGradient if kind is StyleKind.LINEAR else RadialGradient
        return gradient(
            point_0=point_0,
            point_1=point_1,
            color_index_0=color_index_0,
            color_index_1=color_index_1,
        )

    def _read_color_index(self) -> int:
        offset = self.reader.offset
        index = self.reader.read_varint()
        if index >= len(self.color_table):
            raise ColorIndexOutOfRange(
                f"color index {index} but the color table holds {len(self.color_table)} entries",
                offset=offset,
            )
        return index

    # Geometry

    def _read_unit(self) -> float:
        return self._read_raw_unit() / self._require_header().unit_divisor

    def _read_point(self) -> Point:
        x = self._read_unit()
        y = self._read_unit()
        return Point(x, y)

    def _read_points(self, count: int) -> Tuple[Point, ...]:
        return tuple(self._read_point() for _ in range(count))

    def _read_rects(self, count: int) -> Tuple[Rect, ...]:
        rects: List[Rect] = []
        for _ in range(count):
            x = self._read_unit()
            y = self._read_unit()
            width = self._read_unit()
            height = self._read_unit()
            rects.append(Rect(x, y, width, height))
        return tuple(rects)

    def _read_path(self, sub_path_count: int) -> VectorPath:
        node_counts = [self._read_count("path node") for _ in range(sub_path_count)]
        sub_paths: List[SubPath] = []
        for node_count in node_counts:
            start = self._read_point()
            segments = tuple(self._read_segment() for _ in range(node_count))
            sub_paths.append(SubPath(start=start, segments=segments))
        return tuple(sub_paths)

    def _read_segment(self) -> PathSegment:
        offset = self.reader.offset
        tag = self.reader.read_u8()
        if tag & SEGMENT_RESERVED_MASK:
            raise InvalidEnumValue(f"path node tag 0x{tag:02X} sets reserved bits", offset=offset)
        kind = SegmentKind(tag & SEGMENT_KIND_MASK)
        line_width = self._read_unit() if tag & SEGMENT_LINE_WIDTH_FLAG else None

        if kind is SegmentKind.LINE:
            return Line(to=self._read_point(), line_width=line_width)
        if kind is SegmentKind.HORIZONTAL_LINE:
            return HorizontalLine(x=self._read_unit(), line_width=line_width)
        if kind is SegmentKind.VERTICAL_LINE:
            return VerticalLine(y=self._read_unit(), line_width=line_width)
        if kind is SegmentKind.CUBIC_BEZIER:
            control_0 = self._read_point()
            control_1 = self._read_point()
            return CubicBezier(control_0=control_0, control_1=control_1, to=self._read_point(), line_width=line_width)
        if kind is SegmentKind.ARC_CIRCLE:
            flags = self.reader.read_u8()
            radius = self._read_unit()
            return ArcCircle(
                radius=radius,
                large_arc=bool(flags & ARC_LARGE_FLAG),
                sweep=bool(flags & ARC_SWEEP_FLAG),
                to=self._read_point(),
                line_width=line_width,
            )
        if kind is SegmentKind.ARC_ELLIPSE:
            flags = self.reader.read_u8()
            radius_x = self._read_unit()
            radius_y = self._read_unit()
            rotation = self._read_unit()
            return ArcEllipse(
                radius_x=radius_x,
                radius_y=radius_y,
                rotation=rotation,
                large_arc=bool(flags & ARC_LARGE_FLAG),
                sweep=bool(flags & ARC_SWEEP_FLAG),
                to=self._read_point(),
                line_width=line_width,
            )
        if kind is SegmentKind.CLOSE_PATH:
            return ClosePath(line_width=line_width)
        control = self._read_point()
        return QuadraticBezier(control=control, to=self._read_point(), line_width=line_width)

    # Helpers

    def _read_count(self, what: str) -> int:
        offset = self.reader.offset
        count = self.reader.read_varint() + 1
        self._check_count(count, what, offset)
        return count

    def _check_count(self, count: int, what: str, offset: int) -> None:
        if count > self.limits.max_count:
            raise CountLimitExceeded(
                f"{what} count {count} exceeds the limit of {self.limits.max_count}",
                offset=offset,
            )

    def _require_header(self) -> Header:
        if self.header is None:
            raise RuntimeError("decode_header() must run before the rest of the document")
        return self.header

    def _trace(self, offset: int, kind: str, detail: str = "") -> None:
        if self.trace is not None:
            self.trace.record(offset=offset, kind=kind, detail=detail)


def _enum_value(enum_type: Type[E], raw: int, what: str, offset: int) -> E:
    try:
        return enum_type(raw)
    except ValueError:
        raise InvalidEnumValue(f"invalid {what} {raw}", offset=offset) from None


def decode(
    source: Source,
    *,
    limits: DecodeLimits | None = None,
    trace: DecodeTraceLogger | None = None,
) -> Document:
    """Decode a TinyVG document from bytes or a readable binary stream."""

    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(bytes(source))
    return Decoder(source, limits=limits, trace=trace).decode()


def decode_file(
    path: Path,
    *,
    limits: DecodeLimits | None = None,
    trace: DecodeTraceLogger | None = None,
) -> Document:
    with Path(path).open("rb") as handle:
        return decode(handle, limits=limits, trace=trace)
