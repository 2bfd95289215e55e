from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Union

from .format import Color, FlatColor, LinearGradient, Point, RadialGradient, Style


@dataclass(frozen=True)
class SolidPaint:
    color: Color


@dataclass(frozen=True)
class LinearGradientPaint:
    start: Point
    end: Point
    start_color: Color
    end_color: Color


@dataclass(frozen=True)
class RadialGradientPaint:
    center: Point
    edge: Point
    inner_color: Color
    outer_color: Color

    @property
    def radius(self) -> float:
        return math.hypot(self.edge.x - self.center.x, self.edge.y - self.center.y)


Paint = Union[SolidPaint, LinearGradientPaint, RadialGradientPaint]


def resolve_style(style: Style, color_table: Sequence[Color]) -> Paint:
    """Look up the colors a style refers to; interpolation is left to the drawing context."""

    if isinstance(style, FlatColor):
        return SolidPaint(color_table[style.color_index])
    if isinstance(style, LinearGradient):
        return LinearGradientPaint(
            start=style.point_0,
            end=style.point_1,
            start_color=color_table[style.color_index_0],
            end_color=color_table[style.color_index_1],
        )
    if isinstance(style, RadialGradient):
        return RadialGradientPaint(
            center=style.point_0,
            edge=style.point_1,
            inner_color=color_table[style.color_index_0],
            outer_color=color_table[style.color_index_1],
        )
    raise TypeError(f"unsupported style {style!r}")
