from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Tuple

from .format import Point
from .paint import Paint


class DrawingContext(ABC):
    """
    Capability surface the renderer drives.

    The current path is part of the graphics state: ``restore_state`` drops
    any path built since the matching ``save_state``. ``fill`` and ``stroke``
    paint the current path without consuming it, so an outline-fill command
    can fill and then stroke the same geometry.
    """

    @abstractmethod
    def move_to(self, point: Point) -> None:
        raise NotImplementedError

    @abstractmethod
    def line_to(self, point: Point) -> None:
        raise NotImplementedError

    @abstractmethod
    def cubic_to(self, control_0: Point, control_1: Point, to: Point) -> None:
        raise NotImplementedError

    @abstractmethod
    def quadratic_to(self, control: Point, to: Point) -> None:
        raise NotImplementedError

    @abstractmethod
    def arc_to(
        self,
        radius_x: float,
        radius_y: float,
        rotation: float,
        large_arc: bool,
        sweep: bool,
        to: Point,
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def close_path(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_fill(self, paint: Paint) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_stroke(self, paint: Paint, width: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def fill(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def stroke(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def save_state(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def restore_state(self) -> None:
        raise NotImplementedError


class RecordingContext(DrawingContext):
    """Records every call as ``(name, *args)``; used by tests and for debugging."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []

    def names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def move_to(self, point: Point) -> None:
        self.calls.append(("move_to", point))

    def line_to(self, point: Point) -> None:
        self.calls.append(("line_to", point))

    def cubic_to(self, control_0: Point, control_1: Point, to: Point) -> None:
        self.calls.append(("cubic_to", control_0, control_1, to))

    def quadratic_to(self, control: Point, to: Point) -> None:
        self.calls.append(("quadratic_to", control, to))

    def arc_to(
        self,
        radius_x: float,
        radius_y: float,
        rotation: float,
        large_arc: bool,
        sweep: bool,
        to: Point,
    ) -> None:
        self.calls.append(("arc_to", radius_x, radius_y, rotation, large_arc, sweep, to))

    def close_path(self) -> None:
        self.calls.append(("close_path",))

    def set_fill(self, paint: Paint) -> None:
        self.calls.append(("set_fill", paint))

    def set_stroke(self, paint: Paint, width: float) -> None:
        self.calls.append(("set_stroke", paint, width))

    def fill(self) -> None:
        self.calls.append(("fill",))

    def stroke(self) -> None:
        self.calls.append(("stroke",))

    def save_state(self) -> None:
        self.calls.append(("save_state",))

    def restore_state(self) -> None:
        self.calls.append(("restore_state",))
