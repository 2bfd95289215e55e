"""
Walk a decoded ``Document`` and drive a ``DrawingContext``.

Commands are issued strictly in stream order, each wrapped in
``save_state``/``restore_state`` so no path or paint leaks into the next
command. The renderer keeps no state besides its options, so one instance can
render the same document from several threads against separate contexts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .context import DrawingContext
from .errors import CanvasTooLarge, ContextFailure, RenderError
from .format import (
    ArcCircle,
    ArcEllipse,
    ClosePath,
    Color,
    Command,
    CubicBezier,
    Document,
    DrawLineLoop,
    DrawLinePath,
    DrawLines,
    DrawLineStrip,
    FillPath,
    FillPolygon,
    FillRectangles,
    HorizontalLine,
    Line,
    OutlineFillPath,
    OutlineFillPolygon,
    OutlineFillRectangles,
    Path,
    PathSegment,
    Point,
    QuadraticBezier,
    Rect,
    VerticalLine,
)
from .paint import Paint, resolve_style
from .raster import PixelBuffer, RasterContext

# Maximum deviation, in output pixels, between a curve and its flattened polyline.
DEFAULT_TOLERANCE = 0.25
# Working canvas cap, counted after supersampling (4096 x 4096).
DEFAULT_MAX_PIXELS = 1 << 24


@dataclass(frozen=True)
class RenderOptions:
    tolerance: float = DEFAULT_TOLERANCE
    supersample: int = 1
    background: Color | None = None
    max_pixels: int | None = DEFAULT_MAX_PIXELS

    def __post_init__(self) -> None:
        if self.tolerance <= 0:
            raise ValueError("tolerance must be positive")
        if self.supersample < 1:
            raise ValueError("supersample must be at least 1")
        if self.max_pixels is not None and self.max_pixels < 1:
            raise ValueError("max_pixels must be positive or None")


class Renderer:
    def __init__(self, options: RenderOptions | None = None) -> None:
        self.options = options or RenderOptions()

    def render(self, document: Document, context: DrawingContext) -> None:
        for index, command in enumerate(document.commands):
            try:
                self._render_command(command, document.color_table, context)
            except RenderError:
                raise
            except Exception as exc:
                raise ContextFailure(
                    f"drawing context failed on command #{index} ({type(command).__name__}): {exc}"
                ) from exc

    def _render_command(self, command: Command, color_table: Sequence[Color], context: DrawingContext) -> None:
        context.save_state()
        try:
            _draw_command(command, color_table, context)
        finally:
            context.restore_state()


def _draw_command(command: Command, color_table: Sequence[Color], context: DrawingContext) -> None:
    if isinstance(command, FillPolygon):
        _trace_polyline(context, command.points, closed=True)
        _fill(context, resolve_style(command.style, color_table))
    elif isinstance(command, FillRectangles):
        _trace_rectangles(context, command.rectangles)
        _fill(context, resolve_style(command.style, color_table))
    elif isinstance(command, FillPath):
        _trace_path(context, command.path)
        _fill(context, resolve_style(command.style, color_table))
    elif isinstance(command, DrawLines):
        for line in command.lines:
            context.move_to(line.start)
            context.line_to(line.end)
        _stroke(context, resolve_style(command.style, color_table), command.line_width)
    elif isinstance(command, DrawLineLoop):
        _trace_polyline(context, command.points, closed=True)
        _stroke(context, resolve_style(command.style, color_table), command.line_width)
    elif isinstance(command, DrawLineStrip):
        _trace_polyline(context, command.points, closed=False)
        _stroke(context, resolve_style(command.style, color_table), command.line_width)
    elif isinstance(command, DrawLinePath):
        _stroke_path_runs(context, command.path, resolve_style(command.style, color_table), command.line_width)
    elif isinstance(command, OutlineFillPolygon):
        _trace_polyline(context, command.points, closed=True)
        _fill(context, resolve_style(command.fill_style, color_table))
        _stroke(context, resolve_style(command.line_style, color_table), command.line_width)
    elif isinstance(command, OutlineFillRectangles):
        _trace_rectangles(context, command.rectangles)
        _fill(context, resolve_style(command.fill_style, color_table))
        _stroke(context, resolve_style(command.line_style, color_table), command.line_width)
    elif isinstance(command, OutlineFillPath):
        _trace_path(context, command.path)
        _fill(context, resolve_style(command.fill_style, color_table))
        _stroke(context, resolve_style(command.line_style, color_table), command.line_width)
    else:
        raise RenderError(f"unsupported command {command!r}")


def _fill(context: DrawingContext, paint: Paint) -> None:
    context.set_fill(paint)
    context.fill()


def _stroke(context: DrawingContext, paint: Paint, width: float) -> None:
    context.set_stroke(paint, width)
    context.stroke()


def _trace_polyline(context: DrawingContext, points: Sequence[Point], *, closed: bool) -> None:
    if not points:
        return
    context.move_to(points[0])
    for point in points[1:]:
        context.line_to(point)
    if closed:
        context.close_path()


def _trace_rectangles(context: DrawingContext, rectangles: Sequence[Rect]) -> None:
    for rect in rectangles:
        _trace_polyline(context, rect.corners(), closed=True)


def _emit_segment(context: DrawingContext, segment: PathSegment, cursor: Point, start: Point) -> Point:
    """Issue the context call for one path node and return the new cursor."""

    if isinstance(segment, Line):
        context.line_to(segment.to)
        return segment.to
    if isinstance(segment, HorizontalLine):
        target = Point(segment.x, cursor.y)
        context.line_to(target)
        return target
    if isinstance(segment, VerticalLine):
        target = Point(cursor.x, segment.y)
        context.line_to(target)
        return target
    if isinstance(segment, CubicBezier):
        context.cubic_to(segment.control_0, segment.control_1, segment.to)
        return segment.to
    if isinstance(segment, QuadraticBezier):
        context.quadratic_to(segment.control, segment.to)
        return segment.to
    if isinstance(segment, ArcCircle):
        context.arc_to(segment.radius, segment.radius, 0.0, segment.large_arc, segment.sweep, segment.to)
        return segment.to
    if isinstance(segment, ArcEllipse):
        context.arc_to(
            segment.radius_x,
            segment.radius_y,
            segment.rotation,
            segment.large_arc,
            segment.sweep,
            segment.to,
        )
        return segment.to
    if isinstance(segment, ClosePath):
        context.close_path()
        return start
    raise RenderError(f"unsupported path segment {segment!r}")


def _trace_path(context: DrawingContext, path: Path) -> None:
    for sub_path in path:
        cursor = sub_path.start
        context.move_to(cursor)
        for segment in sub_path.segments:
            cursor = _emit_segment(context, segment, cursor, sub_path.start)


def _stroke_path_runs(context: DrawingContext, path: Path, paint: Paint, width: float) -> None:
    """
    Stroke a path whose nodes may change the line width. Each width change
    strokes what was traced so far and restarts the path at the cursor.
    """

    context.set_stroke(paint, width)
    for sub_path in path:
        start = cursor = sub_path.start
        context.move_to(start)
        split = False
        for segment in sub_path.segments:
            if segment.line_width is not None and segment.line_width != width:
                context.stroke()
                context.restore_state()
                context.save_state()
                width = segment.line_width
                context.set_stroke(paint, width)
                context.move_to(cursor)
                split = True
            if split and isinstance(segment, ClosePath):
                # The sub-path was restarted, so closing must draw back to its real start.
                context.line_to(start)
                cursor = start
                continue
            cursor = _emit_segment(context, segment, cursor, start)
    context.stroke()


def render_to_raster(
    document: Document,
    width_px: int | None = None,
    height_px: int | None = None,
    *,
    options: RenderOptions | None = None,
) -> PixelBuffer:
    """
    Render into a fresh ``RasterContext`` of ``width_px`` x ``height_px``.

    Missing dimensions default to the header size; when only one is given the
    other keeps the document's aspect ratio.

    Raises ``CanvasTooLarge`` before allocating when the supersampled canvas
    exceeds ``options.max_pixels``.
    """

    options = options or RenderOptions()
    header = document.header
    if width_px is None and height_px is None:
        width_px, height_px = header.width, header.height
    elif height_px is None:
        height_px = round(header.height * width_px / header.width) if header.width else width_px
    elif width_px is None:
        width_px = round(header.width * height_px / header.height) if header.height else height_px
    if width_px < 0 or height_px < 0:
        raise ValueError("raster size must be non-negative")
    if options.max_pixels is not None:
        working = width_px * height_px * options.supersample ** 2
        if working > options.max_pixels:
            raise CanvasTooLarge(
                f"{width_px}x{height_px} at supersample {options.supersample} needs {working} pixels, "
                f"limit is {options.max_pixels}"
            )

    scale_x = width_px / header.width if header.width else 1.0
    scale_y = height_px / header.height if header.height else 1.0
    context = RasterContext(
        width_px,
        height_px,
        scale_x=scale_x,
        scale_y=scale_y,
        tolerance=options.tolerance,
        supersample=options.supersample,
        background=options.background,
    )
    Renderer(options).render(document, context)
    return context.to_pixel_buffer()
