from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .context import DrawingContext
from .errors import ContextFailure
from .format import Color, Point
from .paint import LinearGradientPaint, Paint, RadialGradientPaint, SolidPaint


def _num(value: float) -> str:
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _hex(color: Color) -> str:
    r, g, b, _ = color.to_rgba8()
    return f"#{r:02x}{g:02x}{b:02x}"


@dataclass
class _SvgState:
    fill: Paint | None = None
    stroke: Paint | None = None
    stroke_width: float = 1.0
    path: List[str] = field(default_factory=list)

    def clone(self) -> "_SvgState":
        return _SvgState(self.fill, self.stroke, self.stroke_width, list(self.path))


class SvgContext(DrawingContext):
    """
    Re-emit the drawing calls as SVG markup.

    Each ``fill`` or ``stroke`` becomes one ``<path>`` element; gradients are
    written to ``<defs>`` with ``userSpaceOnUse`` coordinates so they line up
    with the document's coordinate system.
    """

    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self._defs: List[str] = []
        self._elements: List[str] = []
        self._state = _SvgState()
        self._stack: List[_SvgState] = []

    def move_to(self, point: Point) -> None:
        self._state.path.append(f"M {_num(point.x)} {_num(point.y)}")

    def line_to(self, point: Point) -> None:
        self._state.path.append(f"L {_num(point.x)} {_num(point.y)}")

    def cubic_to(self, control_0: Point, control_1: Point, to: Point) -> None:
        self._state.path.append(
            f"C {_num(control_0.x)} {_num(control_0.y)} {_num(control_1.x)} {_num(control_1.y)} "
            f"{_num(to.x)} {_num(to.y)}"
        )

    def quadratic_to(self, control: Point, to: Point) -> None:
        self._state.path.append(f"Q {_num(control.x)} {_num(control.y)} {_num(to.x)} {_num(to.y)}")

    def arc_to(
        self,
        radius_x: float,
        radius_y: float,
        rotation: float,
        large_arc: bool,
        sweep: bool,
        to: Point,
    ) -> None:
        self._state.path.append(
            f"A {_num(radius_x)} {_num(radius_y)} {_num(rotation)} {int(large_arc)} {int(sweep)} "
            f"{_num(to.x)} {_num(to.y)}"
        )

    def close_path(self) -> None:
        self._state.path.append("Z")

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

    def fill(self) -> None:
        if self._state.fill is None:
            raise ContextFailure("fill() issued before set_fill()")
        if not self._state.path:
            return
        paint_attrs = self._paint_attrs("fill", self._state.fill)
        self._elements.append(
            f'<path d="{" ".join(self._state.path)}" {paint_attrs} fill-rule="nonzero" stroke="none"/>'
        )

    def stroke(self) -> None:
        if self._state.stroke is None:
            raise ContextFailure("stroke() issued before set_stroke()")
        if not self._state.path:
            return
        paint_attrs = self._paint_attrs("stroke", self._state.stroke)
        self._elements.append(
            f'<path d="{" ".join(self._state.path)}" fill="none" {paint_attrs} '
            f'stroke-width="{_num(self._state.stroke_width)}" stroke-linecap="round" stroke-linejoin="round"/>'
        )

    def _paint_attrs(self, prefix: str, paint: Paint) -> str:
        if isinstance(paint, SolidPaint):
            attrs = f'{prefix}="{_hex(paint.color)}"'
            if paint.color.a < 1.0:
                attrs += f' {prefix}-opacity="{_num(paint.color.a)}"'
            return attrs
        gradient_id = f"g{len(self._defs)}"
        if isinstance(paint, LinearGradientPaint):
            self._defs.append(
                f'<linearGradient id="{gradient_id}" gradientUnits="userSpaceOnUse" '
                f'x1="{_num(paint.start.x)}" y1="{_num(paint.start.y)}" '
                f'x2="{_num(paint.end.x)}" y2="{_num(paint.end.y)}">'
                f"{_stops(paint.start_color, paint.end_color)}</linearGradient>"
            )
        elif isinstance(paint, RadialGradientPaint):
            self._defs.append(
                f'<radialGradient id="{gradient_id}" gradientUnits="userSpaceOnUse" '
                f'cx="{_num(paint.center.x)}" cy="{_num(paint.center.y)}" r="{_num(paint.radius)}">'
                f"{_stops(paint.inner_color, paint.outer_color)}</radialGradient>"
            )
        else:
            raise ContextFailure(f"unsupported paint {paint!r}")
        return f'{prefix}="url(#{gradient_id})"'

    def to_svg(self) -> str:
        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(self.width)}" height="{_num(self.height)}" '
            f'viewBox="0 0 {_num(self.width)} {_num(self.height)}">'
        ]
        if self._defs:
            parts.append("<defs>")
            parts.extend(self._defs)
            parts.append("</defs>")
        parts.extend(self._elements)
        parts.append("</svg>")
        return "\n".join(parts) + "\n"


def _stops(start: Color, end: Color) -> str:
    return "".join(
        f'<stop offset="{offset}" stop-color="{_hex(color)}" stop-opacity="{_num(color.a)}"/>'
        for offset, color in (("0", start), ("1", end))
    )
