"""
Pillow-backed raster drawing context and PNG encoder.

Paths are kept in document coordinates and flattened to polylines; painting
builds a coverage mask (nonzero winding sampled at pixel centers for fills,
``ImageDraw`` lines for strokes), evaluates the paint per pixel with numpy
and composites the result onto the canvas with ``Image.alpha_composite``.
"""

from __future__ import annotations

import io
import math
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np
from PIL import Image, ImageDraw

from .context import DrawingContext
from .errors import ContextFailure, RasterEncodingFailure
from .format import Color, Point
from .geometry import XY, flatten_arc, flatten_cubic, flatten_quadratic
from .paint import LinearGradientPaint, Paint, RadialGradientPaint, SolidPaint

TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """RGBA8 pixels, row-major, shaped ``(height, width, 4)``."""

    width: int
    height: int
    pixels: np.ndarray

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        r, g, b, a = (int(v) for v in self.pixels[y, x])
        return r, g, b, a

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def is_uniform(self) -> bool:
        if self.pixels.size == 0:
            return True
        return bool((self.pixels == self.pixels[0, 0]).all())

    def is_blank(self) -> bool:
        return not self.pixels[..., 3].any()


@dataclass
class _SubPath:
    points: List[XY]
    closed: bool = False


@dataclass
class _GraphicsState:
    fill: Paint | None = None
    stroke: Paint | None = None
    stroke_width: float = 1.0
    sub_paths: List[_SubPath] = field(default_factory=list)

    def clone(self) -> "_GraphicsState":
        return _GraphicsState(
            fill=self.fill,
            stroke=self.stroke,
            stroke_width=self.stroke_width,
            sub_paths=[_SubPath(list(sp.points), sp.closed) for sp in self.sub_paths],
        )


class RasterContext(DrawingContext):
    def __init__(
        self,
        width: int,
        height: int,
        *,
        scale_x: float = 1.0,
        scale_y: float = 1.0,
        tolerance: float = 0.25,
        supersample: int = 1,
        background: Color | None = None,
    ) -> None:
        if supersample < 1:
            raise ValueError("supersample must be at least 1")
        if tolerance <= 0:
            raise ValueError("tolerance must be positive")
        self.width = width
        self.height = height
        self._supersample = supersample
        self._scale_x = scale_x * supersample
        self._scale_y = scale_y * supersample
        # Flattening happens in document space, so convert the device tolerance back.
        self._tolerance = tolerance * supersample / max(abs(self._scale_x), abs(self._scale_y), 1e-12)
        self._size = (width * supersample, height * supersample)
        fill = background.to_rgba8() if background is not None else TRANSPARENT
        self._image = Image.new("RGBA", self._size, fill)
        self._state = _GraphicsState()
        self._stack: List[_GraphicsState] = []

    # Path construction

    def _current(self) -> _SubPath:
        sub_paths = self._state.sub_paths
        if not sub_paths:
            raise ContextFailure("path operation issued before move_to()")
        current = sub_paths[-1]
        if current.closed:
            # Drawing after close_path continues from the closed sub-path's start.
            current = _SubPath([current.points[0]])
            sub_paths.append(current)
        return current

    def move_to(self, point: Point) -> None:
        self._state.sub_paths.append(_SubPath([(point.x, point.y)]))

    def line_to(self, point: Point) -> None:
        self._current().points.append((point.x, point.y))

    def cubic_to(self, control_0: Point, control_1: Point, to: Point) -> None:
        current = self._current()
        current.points.extend(
            flatten_cubic(
                current.points[-1],
                (control_0.x, control_0.y),
                (control_1.x, control_1.y),
                (to.x, to.y),
                self._tolerance,
            )
        )

    def quadratic_to(self, control: Point, to: Point) -> None:
        current = self._current()
        current.points.extend(
            flatten_quadratic(current.points[-1], (control.x, control.y), (to.x, to.y), self._tolerance)
        )

    def arc_to(
        self,
        radius_x: float,
        radius_y: float,
        rotation: float,
        large_arc: bool,
        sweep: bool,
        to: Point,
    ) -> None:
        current = self._current()
        current.points.extend(
            flatten_arc(
                current.points[-1],
                (to.x, to.y),
                radius_x,
                radius_y,
                rotation,
                large_arc,
                sweep,
                self._tolerance,
            )
        )

    def close_path(self) -> None:
        self._current().closed = True

    # Paint state

    def set_fill(self, paint: Paint) -> None:
        self._state.fill = paint

    def set_stroke(self, paint: Paint, width: float) -> None:
        self._state.stroke = paint
        self._state.stroke_width = width

    def save_state(self) -> None:
        self._stack.append(self._state.clone())

    def restore_state(self) -> None:
        if not self._stack:
            raise ContextFailure("restore_state() without a matching save_state()")
        self._state = self._stack.pop()

    # Painting

    def fill(self) -> None:
        paint = self._state.fill
        if paint is None:
            raise ContextFailure("fill() issued before set_fill()")
        coverage = self._winding(self._state.sub_paths) != 0
        self._composite(coverage.astype(np.float32), paint)

    def _winding(self, sub_paths: List[_SubPath]) -> np.ndarray:
        """
        Nonzero winding number at every pixel center. Each edge adds its
        direction (+1 downward, -1 upward) to the pixels right of where it
        crosses the row, accumulated with a running sum along x.
        """

        width, height = self._size
        crossings = np.zeros((height, width + 1), dtype=np.int32)
        for sub_path in sub_paths:
            if len(sub_path.points) < 3:
                continue
            points = self._to_device(sub_path.points)
            # Fills always close the sub-path.
            for (ax, ay), (bx, by) in zip(points, points[1:] + points[:1]):
                if ay == by:
                    continue
                first = max(int(math.ceil(min(ay, by) - 0.5)), 0)
                last = min(int(math.ceil(max(ay, by) - 0.5)), height)
                if first >= last:
                    continue
                rows = np.arange(first, last)
                xs = ax + (rows + 0.5 - ay) * (bx - ax) / (by - ay)
                cols = np.clip(np.ceil(xs - 0.5), 0, width).astype(np.intp)
                np.add.at(crossings, (rows, cols), 1 if by > ay else -1)
        return np.cumsum(crossings, axis=1)[:, :width]

    def stroke(self) -> None:
        paint = self._state.stroke
        if paint is None:
            raise ContextFailure("stroke() issued before set_stroke()")
        average_scale = (abs(self._scale_x) + abs(self._scale_y)) / 2.0
        width_px = max(1, int(round(self._state.stroke_width * average_scale)))
        layer = Image.new("L", self._size, 0)
        draw = ImageDraw.Draw(layer)
        for sub_path in self._state.sub_paths:
            points = self._to_device(sub_path.points)
            if sub_path.closed and len(points) > 2:
                points.append(points[0])
            if len(points) < 2:
                continue
            draw.line(points, fill=255, width=width_px, joint="curve")
        coverage = np.asarray(layer, dtype=np.float32) / 255.0
        self._composite(coverage, paint)

    def _to_device(self, points: List[XY]) -> List[XY]:
        sx, sy = self._scale_x, self._scale_y
        return [(x * sx, y * sy) for x, y in points]

    def _composite(self, coverage: np.ndarray, paint: Paint) -> None:
        if not coverage.any():
            return
        rgba = self._paint_pixels(paint)
        rgba[..., 3] *= coverage
        layer = Image.fromarray(np.clip(rgba * 255.0 + 0.5, 0, 255).astype(np.uint8))
        self._image = Image.alpha_composite(self._image, layer)

    def _paint_pixels(self, paint: Paint) -> np.ndarray:
        width, height = self._size
        if isinstance(paint, SolidPaint):
            rgba = np.empty((height, width, 4), dtype=np.float32)
            rgba[...] = _color_array(paint.color)
            return rgba

        ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
        xs += 0.5
        ys += 0.5
        if isinstance(paint, LinearGradientPaint):
            x0, y0 = paint.start.x * self._scale_x, paint.start.y * self._scale_y
            x1, y1 = paint.end.x * self._scale_x, paint.end.y * self._scale_y
            vx, vy = x1 - x0, y1 - y0
            denom = vx * vx + vy * vy
            if denom <= 0:
                offset = np.ones_like(xs)
            else:
                offset = ((xs - x0) * vx + (ys - y0) * vy) / denom
            return _interpolate(offset, paint.start_color, paint.end_color)
        if isinstance(paint, RadialGradientPaint):
            cx, cy = paint.center.x * self._scale_x, paint.center.y * self._scale_y
            ex, ey = paint.edge.x * self._scale_x, paint.edge.y * self._scale_y
            radius = float(np.hypot(ex - cx, ey - cy))
            if radius <= 0:
                offset = np.ones_like(xs)
            else:
                offset = np.hypot(xs - cx, ys - cy) / radius
            return _interpolate(offset, paint.inner_color, paint.outer_color)
        raise ContextFailure(f"unsupported paint {paint!r}")

    def to_image(self) -> Image.Image:
        if self._supersample == 1:
            return self._image.copy()
        return self._image.resize((self.width, self.height), Image.Resampling.BOX)

    def to_pixel_buffer(self) -> PixelBuffer:
        pixels = np.array(self.to_image(), dtype=np.uint8).reshape(self.height, self.width, 4)
        return PixelBuffer(width=self.width, height=self.height, pixels=pixels)


def _color_array(color: Color) -> np.ndarray:
    channels = np.array([color.r, color.g, color.b, color.a], dtype=np.float32)
    return np.nan_to_num(channels, nan=0.0, posinf=1.0, neginf=0.0)


def _interpolate(offset: np.ndarray, start: Color, end: Color) -> np.ndarray:
    t = np.clip(offset, 0.0, 1.0)[..., None]
    return (1.0 - t) * _color_array(start) + t * _color_array(end)


def encode_png(buffer: PixelBuffer) -> bytes:
    """Encode a pixel buffer as PNG bytes."""

    output = io.BytesIO()
    try:
        buffer.to_image().save(output, format="PNG")
    except (OSError, ValueError) as exc:
        raise RasterEncodingFailure(f"PNG encoding failed: {exc}") from exc
    return output.getvalue()
