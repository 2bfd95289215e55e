"""
In-memory representation of a decoded TinyVG image.

Every type here is a frozen dataclass holding tuples, so a decoded
``Document`` is an immutable tree that can be shared freely between threads
and compared structurally.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional, Tuple, Union

if TYPE_CHECKING:
    from .context import DrawingContext
    from .raster import PixelBuffer
    from .render import RenderOptions

MAGIC = b"\x72\x56"
SUPPORTED_VERSION = 1


class CoordinateRange(enum.IntEnum):
    DEFAULT = 0
    REDUCED = 1
    ENHANCED = 2

    @property
    def byte_width(self) -> int:
        return {CoordinateRange.DEFAULT: 2, CoordinateRange.REDUCED: 1, CoordinateRange.ENHANCED: 4}[self]


class ColorEncoding(enum.IntEnum):
    RGBA8888 = 0
    RGB565 = 1
    RGBAF32 = 2

    @property
    def record_size(self) -> int:
        return {ColorEncoding.RGBA8888: 4, ColorEncoding.RGB565: 2, ColorEncoding.RGBAF32: 16}[self]


class StyleKind(enum.IntEnum):
    FLAT = 0
    LINEAR = 1
    RADIAL = 2


class CommandId(enum.IntEnum):
    END_OF_DOCUMENT = 0
    FILL_POLYGON = 1
    FILL_RECTANGLES = 2
    FILL_PATH = 3
    DRAW_LINES = 4
    DRAW_LINE_LOOP = 5
    DRAW_LINE_STRIP = 6
    DRAW_LINE_PATH = 7
    OUTLINE_FILL_POLYGON = 8
    OUTLINE_FILL_RECTANGLES = 9
    OUTLINE_FILL_PATH = 10


class SegmentKind(enum.IntEnum):
    LINE = 0
    HORIZONTAL_LINE = 1
    VERTICAL_LINE = 2
    CUBIC_BEZIER = 3
    ARC_CIRCLE = 4
    ARC_ELLIPSE = 5
    CLOSE_PATH = 6
    QUADRATIC_BEZIER = 7


@dataclass(frozen=True)
class Header:
    version: int
    scale: int
    coordinate_range: CoordinateRange
    color_encoding: ColorEncoding
    width: int
    height: int

    @property
    def unit_divisor(self) -> int:
        return 1 << self.scale


def _channel_to_u8(value: float) -> int:
    # RGBAF32 tables may hold NaN or infinities.
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return 255 if value > 0 else 0
    return max(0, min(255, int(round(value * 255.0))))


@dataclass(frozen=True)
class Color:
    r: float
    g: float
    b: float
    a: float = 1.0

    def to_rgba8(self) -> Tuple[int, int, int, int]:
        return tuple(_channel_to_u8(c) for c in (self.r, self.g, self.b, self.a))  # type: ignore[return-value]


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def corners(self) -> Tuple[Point, Point, Point, Point]:
        right = self.x + self.width
        bottom = self.y + self.height
        return (
            Point(self.x, self.y),
            Point(right, self.y),
            Point(right, bottom),
            Point(self.x, bottom),
        )


@dataclass(frozen=True)
class LineSegment:
    start: Point
    end: Point


# Styles


@dataclass(frozen=True)
class FlatColor:
    color_index: int

    @property
    def color_indices(self) -> Tuple[int, ...]:
        return (self.color_index,)


@dataclass(frozen=True)
class LinearGradient:
    point_0: Point
    point_1: Point
    color_index_0: int
    color_index_1: int

    @property
    def color_indices(self) -> Tuple[int, ...]:
        return (self.color_index_0, self.color_index_1)


@dataclass(frozen=True)
class RadialGradient:
    point_0: Point
    point_1: Point
    color_index_0: int
    color_index_1: int

    @property
    def color_indices(self) -> Tuple[int, ...]:
        return (self.color_index_0, self.color_index_1)


Style = Union[FlatColor, LinearGradient, RadialGradient]


# Path nodes. ``line_width`` is set when the node changes the stroke width.


@dataclass(frozen=True)
class Line:
    to: Point
    line_width: Optional[float] = None


@dataclass(frozen=True)
class HorizontalLine:
    x: float
    line_width: Optional[float] = None


@dataclass(frozen=True)
class VerticalLine:
    y: float
    line_width: Optional[float] = None


@dataclass(frozen=True)
class CubicBezier:
    control_0: Point
    control_1: Point
    to: Point
    line_width: Optional[float] = None


@dataclass(frozen=True)
class QuadraticBezier:
    control: Point
    to: Point
    line_width: Optional[float] = None


@dataclass(frozen=True)
class ArcCircle:
    radius: float
    large_arc: bool
    sweep: bool
    to: Point
    line_width: Optional[float] = None


@dataclass(frozen=True)
class ArcEllipse:
    radius_x: float
    radius_y: float
    rotation: float
    large_arc: bool
    sweep: bool
    to: Point
    line_width: Optional[float] = None


@dataclass(frozen=True)
class ClosePath:
    line_width: Optional[float] = None


PathSegment = Union[
    Line,
    HorizontalLine,
    VerticalLine,
    CubicBezier,
    QuadraticBezier,
    ArcCircle,
    ArcEllipse,
    ClosePath,
]


@dataclass(frozen=True)
class SubPath:
    start: Point
    segments: Tuple[PathSegment, ...]


Path = Tuple[SubPath, ...]


# Commands


@dataclass(frozen=True)
class FillPolygon:
    style: Style
    points: Tuple[Point, ...]

    @property
    def styles(self) -> Tuple[Style, ...]:
        return (self.style,)


@dataclass(frozen=True)
class FillRectangles:
    style: Style
    rectangles: Tuple[Rect, ...]

    @property
    def styles(self) -> Tuple[Style, ...]:
        return (self.style,)


@dataclass(frozen=True)
class FillPath:
    style: Style
    path: Path

    @property
    def styles(self) -> Tuple[Style, ...]:
        return (self.style,)


@dataclass(frozen=True)
class DrawLines:
    style: Style
    line_width: float
    lines: Tuple[LineSegment, ...]

    @property
    def styles(self) -> Tuple[Style, ...]:
        return (self.style,)


@dataclass(frozen=True)
class DrawLineLoop:
    style: Style
    line_width: float
    points: Tuple[Point, ...]

    @property
    def styles(self) -> Tuple[Style, ...]:
        return (self.style,)


@dataclass(frozen=True)
class DrawLineStrip:
    style: Style
    line_width: float
    points: Tuple[Point, ...]

    @property
    def styles(self) -> Tuple[Style, ...]:
        return (self.style,)


@dataclass(frozen=True)
class DrawLinePath:
    style: Style
    line_width: float
    path: Path

    @property
    def styles(self) -> Tuple[Style, ...]:
        return (self.style,)


@dataclass(frozen=True)
class OutlineFillPolygon:
    fill_style: Style
    line_style: Style
    line_width: float
    points: Tuple[Point, ...]

    @property
    def styles(self) -> Tuple[Style, ...]:
        return (self.fill_style, self.line_style)


@dataclass(frozen=True)
class OutlineFillRectangles:
    fill_style: Style
    line_style: Style
    line_width: float
    rectangles: Tuple[Rect, ...]

    @property
    def styles(self) -> Tuple[Style, ...]:
        return (self.fill_style, self.line_style)


@dataclass(frozen=True)
class OutlineFillPath:
    fill_style: Style
    line_style: Style
    line_width: float
    path: Path

    @property
    def styles(self) -> Tuple[Style, ...]:
        return (self.fill_style, self.line_style)


Command = Union[
    FillPolygon,
    FillRectangles,
    FillPath,
    DrawLines,
    DrawLineLoop,
    DrawLineStrip,
    DrawLinePath,
    OutlineFillPolygon,
    OutlineFillRectangles,
    OutlineFillPath,
]


@dataclass(frozen=True)
class Document:
    header: Header
    color_table: Tuple[Color, ...]
    commands: Tuple[Command, ...]
    trailer: bytes = b""

    def color_indices(self) -> Iterator[int]:
        for command in self.commands:
            for style in command.styles:
                yield from style.color_indices

    def render(self, context: "DrawingContext", options: "RenderOptions | None" = None) -> None:
        from .render import Renderer

        Renderer(options).render(self, context)

    def render_to_raster(
        self,
        width_px: int | None = None,
        height_px: int | None = None,
        options: "RenderOptions | None" = None,
    ) -> "PixelBuffer":
        from .render import render_to_raster

        return render_to_raster(self, width_px, height_px, options=options)

    def to_text(self) -> str:
        from .text_format import to_text

        return to_text(self)
