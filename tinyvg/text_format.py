"""
Human-readable dump of a document in the parenthesized TinyVG text notation:

    (tvg 1
      (24 24 1/32 u8888 default)
      (
        (1.000 0.000 0.000)
      )
      (
        (
          fill_path
          (flat 0)
          (
            (12 2)
            (
              (line - 12 22)
              (close -)
            )
          )
        )
      )
    )
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .format import (
    ArcCircle,
    ArcEllipse,
    ClosePath,
    Color,
    ColorEncoding,
    Command,
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
    HorizontalLine,
    Line,
    LinearGradient,
    OutlineFillPath,
    OutlineFillPolygon,
    OutlineFillRectangles,
    Path,
    PathSegment,
    Point,
    QuadraticBezier,
    Rect,
    Style,
    VerticalLine,
)

ENCODING_NAMES = {
    ColorEncoding.RGBA8888: "u8888",
    ColorEncoding.RGB565: "u565",
    ColorEncoding.RGBAF32: "f32",
}
RANGE_NAMES = {
    CoordinateRange.DEFAULT: "default",
    CoordinateRange.REDUCED: "reduced",
    CoordinateRange.ENHANCED: "enhanced",
}


def _num(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _point(point: Point) -> str:
    return f"{_num(point.x)} {_num(point.y)}"


def _width(line_width: Optional[float]) -> str:
    return "-" if line_width is None else _num(line_width)


def _color(color: Color) -> str:
    text = f"{color.r:.3f} {color.g:.3f} {color.b:.3f}"
    if color.a != 1.0:
        text += f" {color.a:.3f}"
    return text


def _style(style: Style) -> str:
    if isinstance(style, FlatColor):
        return f"(flat {style.color_index})"
    name = "linear" if isinstance(style, LinearGradient) else "radial"
    return (
        f"({name} ({_point(style.point_0)}) ({_point(style.point_1)}) "
        f"{style.color_index_0} {style.color_index_1})"
    )


def _segment(segment: PathSegment) -> str:
    width = _width(segment.line_width)
    if isinstance(segment, Line):
        return f"(line {width} {_point(segment.to)})"
    if isinstance(segment, HorizontalLine):
        return f"(horiz {width} {_num(segment.x)})"
    if isinstance(segment, VerticalLine):
        return f"(vert {width} {_num(segment.y)})"
    if isinstance(segment, CubicBezier):
        return (
            f"(bezier {width} ({_point(segment.control_0)}) ({_point(segment.control_1)}) "
            f"({_point(segment.to)}))"
        )
    if isinstance(segment, QuadraticBezier):
        return f"(quadratic_bezier {width} ({_point(segment.control)}) ({_point(segment.to)}))"
    if isinstance(segment, ArcCircle):
        return (
            f"(arc_circle {width} {_num(segment.radius)} {str(segment.large_arc).lower()} "
            f"{str(segment.sweep).lower()} ({_point(segment.to)}))"
        )
    if isinstance(segment, ArcEllipse):
        return (
            f"(arc_ellipse {width} {_num(segment.radius_x)} {_num(segment.radius_y)} {_num(segment.rotation)} "
            f"{str(segment.large_arc).lower()} {str(segment.sweep).lower()} ({_point(segment.to)}))"
        )
    if isinstance(segment, ClosePath):
        return f"(close {width})"
    raise TypeError(f"unsupported path segment {segment!r}")


class _Writer:
    def __init__(self) -> None:
        self.lines: List[str] = []

    def line(self, depth: int, text: str) -> None:
        self.lines.append("  " * depth + text)

    def block(self, depth: int, items: Sequence[str]) -> None:
        self.line(depth, "(")
        for item in items:
            self.line(depth + 1, item)
        self.line(depth, ")")

    def path(self, depth: int, path: Path) -> None:
        self.line(depth, "(")
        for sub_path in path:
            self.line(depth + 1, f"({_point(sub_path.start)})")
            self.block(depth + 1, [_segment(segment) for segment in sub_path.segments])
        self.line(depth, ")")


def _points(points: Sequence[Point]) -> List[str]:
    return [f"({_point(point)})" for point in points]


def _rects(rects: Sequence[Rect]) -> List[str]:
    return [f"({_num(r.x)} {_num(r.y)} {_num(r.width)} {_num(r.height)})" for r in rects]


def _command(writer: _Writer, depth: int, command: Command) -> None:
    writer.line(depth, "(")
    body = depth + 1
    if isinstance(command, FillPolygon):
        writer.line(body, "fill_polygon")
        writer.line(body, _style(command.style))
        writer.block(body, _points(command.points))
    elif isinstance(command, FillRectangles):
        writer.line(body, "fill_rectangles")
        writer.line(body, _style(command.style))
        writer.block(body, _rects(command.rectangles))
    elif isinstance(command, FillPath):
        writer.line(body, "fill_path")
        writer.line(body, _style(command.style))
        writer.path(body, command.path)
    elif isinstance(command, DrawLines):
        writer.line(body, "draw_lines")
        writer.line(body, _style(command.style))
        writer.line(body, _num(command.line_width))
        writer.block(body, [f"(({_point(ln.start)}) ({_point(ln.end)}))" for ln in command.lines])
    elif isinstance(command, (DrawLineLoop, DrawLineStrip)):
        writer.line(body, "draw_line_loop" if isinstance(command, DrawLineLoop) else "draw_line_strip")
        writer.line(body, _style(command.style))
        writer.line(body, _num(command.line_width))
        writer.block(body, _points(command.points))
    elif isinstance(command, DrawLinePath):
        writer.line(body, "draw_line_path")
        writer.line(body, _style(command.style))
        writer.line(body, _num(command.line_width))
        writer.path(body, command.path)
    elif isinstance(command, (OutlineFillPolygon, OutlineFillRectangles, OutlineFillPath)):
        if isinstance(command, OutlineFillPolygon):
            writer.line(body, "outline_fill_polygon")
        elif isinstance(command, OutlineFillRectangles):
            writer.line(body, "outline_fill_rectangles")
        else:
            writer.line(body, "outline_fill_path")
        writer.line(body, _style(command.fill_style))
        writer.line(body, _style(command.line_style))
        writer.line(body, _num(command.line_width))
        if isinstance(command, OutlineFillPolygon):
            writer.block(body, _points(command.points))
        elif isinstance(command, OutlineFillRectangles):
            writer.block(body, _rects(command.rectangles))
        else:
            writer.path(body, command.path)
    else:
        raise TypeError(f"unsupported command {command!r}")
    writer.line(depth, ")")


def to_text(document: Document) -> str:
    header = document.header
    writer = _Writer()
    writer.line(0, f"(tvg {header.version}")
    writer.line(
        1,
        f"({header.width} {header.height} 1/{header.unit_divisor} "
        f"{ENCODING_NAMES[header.color_encoding]} {RANGE_NAMES[header.coordinate_range]})",
    )
    writer.block(1, [f"({_color(color)})" for color in document.color_table])
    writer.line(1, "(")
    for command in document.commands:
        _command(writer, 2, command)
    writer.line(1, ")")
    writer.line(0, ")")
    return "\n".join(writer.lines) + "\n"
