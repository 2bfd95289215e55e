from __future__ import annotations

import dataclasses
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from tinyvg import (
    Color,
    ContextFailure,
    LinearGradientPaint,
    Point,
    RasterContext,
    RecordingContext,
    RenderError,
    Renderer,
    RenderOptions,
    SolidPaint,
    decode,
)

from tvg_bytes import GREEN, RED, U, document, full_rect, tag, varint

RED_PAINT = SolidPaint(Color(1.0, 0.0, 0.0, 1.0))
GREEN_PAINT = SolidPaint(Color(0.0, 1.0, 0.0, 1.0))


def _record(blob: bytes) -> RecordingContext:
    context = RecordingContext()
    Renderer().render(decode(blob), context)
    return context


def test_fill_rectangles_call_sequence() -> None:
    context = _record(document(full_rect()))
    assert context.calls == [
        ("save_state",),
        ("move_to", Point(0, 0)),
        ("line_to", Point(16, 0)),
        ("line_to", Point(16, 16)),
        ("line_to", Point(0, 16)),
        ("close_path",),
        ("set_fill", RED_PAINT),
        ("fill",),
        ("restore_state",),
    ]


def test_commands_render_in_stream_order() -> None:
    body = full_rect(color_index=1) + full_rect(color_index=0)
    context = _record(document(body, colors=(RED, GREEN)))
    fills = [call[1] for call in context.calls if call[0] == "set_fill"]
    assert fills == [GREEN_PAINT, RED_PAINT]
    assert context.names().count("save_state") == 2
    assert context.names().count("restore_state") == 2


def test_outline_fills_before_stroking() -> None:
    body = tag(8) + bytes([2]) + varint(0) + varint(1) + U.unit(2) + U.points([(0, 0), (4, 0), (4, 4)])
    context = _record(document(body, colors=(RED, GREEN)))
    assert context.names() == [
        "save_state",
        "move_to",
        "line_to",
        "line_to",
        "close_path",
        "set_fill",
        "fill",
        "set_stroke",
        "stroke",
        "restore_state",
    ]
    assert ("set_fill", RED_PAINT) in context.calls
    assert ("set_stroke", GREEN_PAINT, 2.0) in context.calls


def test_draw_lines_moves_per_segment() -> None:
    body = tag(4) + varint(1) + varint(0) + U.unit(1) + U.points([(0, 0), (1, 1), (2, 2), (3, 3)])
    context = _record(document(body))
    assert context.calls[1:5] == [
        ("move_to", Point(0, 0)),
        ("line_to", Point(1, 1)),
        ("move_to", Point(2, 2)),
        ("line_to", Point(3, 3)),
    ]
    assert context.names()[-2:] == ["stroke", "restore_state"]


def test_line_strip_is_open_and_loop_is_closed() -> None:
    points = U.points([(0, 0), (4, 0), (4, 4)])
    strip = _record(document(tag(6) + varint(2) + varint(0) + U.unit(1) + points))
    loop = _record(document(tag(5) + varint(2) + varint(0) + U.unit(1) + points))
    assert "close_path" not in strip.names()
    assert "close_path" in loop.names()


def test_horizontal_and_vertical_lines_keep_the_other_coordinate() -> None:
    body = (
        tag(3)
        + varint(0)
        + varint(0)
        + varint(2)
        + U.point(1, 2)
        + b"\x01" + U.unit(5)
        + b"\x02" + U.unit(7)
        + b"\x06"
    )
    context = _record(document(body))
    assert context.calls[1:5] == [
        ("move_to", Point(1, 2)),
        ("line_to", Point(5, 2)),
        ("line_to", Point(5, 7)),
        ("close_path",),
    ]


def test_curves_and_arcs_are_forwarded() -> None:
    body = (
        tag(3)
        + varint(0)
        + varint(0)
        + varint(3)
        + U.point(0, 0)
        + b"\x03" + U.points([(1, 0), (2, 1), (2, 2)])
        + b"\x07" + U.points([(3, 3), (4, 2)])
        + b"\x04" + b"\x01" + U.unit(3) + U.point(8, 2)
        + b"\x05" + b"\x02" + U.unit(2) + U.unit(1) + U.unit(30) + U.point(8, 8)
    )
    context = _record(document(body))
    assert context.calls[2:6] == [
        ("cubic_to", Point(1, 0), Point(2, 1), Point(2, 2)),
        ("quadratic_to", Point(3, 3), Point(4, 2)),
        ("arc_to", 3.0, 3.0, 0.0, True, False, Point(8, 2)),
        ("arc_to", 2.0, 1.0, 30.0, False, True, Point(8, 8)),
    ]


def test_gradient_styles_resolve_colors() -> None:
    body = tag(1, 1) + varint(2) + U.point(0, 0) + U.point(16, 0) + varint(0) + varint(1) + U.points(
        [(0, 0), (16, 0), (16, 16)]
    )
    context = _record(document(body, colors=(RED, GREEN)))
    (paint,) = [call[1] for call in context.calls if call[0] == "set_fill"]
    assert paint == LinearGradientPaint(Point(0, 0), Point(16, 0), RED_PAINT.color, GREEN_PAINT.color)


def test_line_path_width_change_splits_the_stroke() -> None:
    body = (
        tag(7)
        + varint(0)
        + varint(0)
        + U.unit(1)
        + varint(2)
        + U.point(0, 0)
        + b"\x00" + U.point(4, 0)
        + b"\x10" + U.unit(3) + U.point(4, 4)
        + b"\x00" + U.point(0, 4)
    )
    context = _record(document(body))
    assert context.calls == [
        ("save_state",),
        ("set_stroke", RED_PAINT, 1.0),
        ("move_to", Point(0, 0)),
        ("line_to", Point(4, 0)),
        ("stroke",),
        ("restore_state",),
        ("save_state",),
        ("set_stroke", RED_PAINT, 3.0),
        ("move_to", Point(4, 0)),
        ("line_to", Point(4, 4)),
        ("line_to", Point(0, 4)),
        ("stroke",),
        ("restore_state",),
    ]


def test_line_path_without_width_changes_strokes_once() -> None:
    body = tag(7) + varint(0) + varint(0) + U.unit(2) + varint(1) + U.point(0, 0) + b"\x00" + U.point(4, 0) + b"\x06"
    context = _record(document(body))
    assert context.names().count("stroke") == 1
    assert ("set_stroke", RED_PAINT, 2.0) in context.calls


class _ExplodingContext(RecordingContext):
    def fill(self) -> None:
        raise RuntimeError("backend exploded")


def test_context_exceptions_become_context_failure() -> None:
    doc = decode(document(full_rect()))
    with pytest.raises(ContextFailure) as excinfo:
        Renderer().render(doc, _ExplodingContext())
    assert "command #0" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


class _FailingContext(RecordingContext):
    def stroke(self) -> None:
        raise ContextFailure("no strokes here")


def test_render_errors_pass_through_unchanged() -> None:
    body = tag(6) + varint(1) + varint(0) + U.unit(1) + U.points([(0, 0), (1, 1)])
    with pytest.raises(ContextFailure, match="no strokes here"):
        Renderer().render(decode(document(body)), _FailingContext())


def test_failed_command_still_restores_state() -> None:
    context = _ExplodingContext()
    with pytest.raises(ContextFailure):
        Renderer().render(decode(document(full_rect())), context)
    assert context.names()[-1] == "restore_state"
    assert context.names().count("save_state") == context.names().count("restore_state")


def test_unsupported_command_is_a_render_error() -> None:
    doc = dataclasses.replace(decode(document()), commands=("not a command",))
    context = RecordingContext()
    with pytest.raises(RenderError, match="unsupported command") as excinfo:
        Renderer().render(doc, context)
    assert not isinstance(excinfo.value, ContextFailure)
    assert context.names() == ["save_state", "restore_state"]


def test_document_render_shortcut() -> None:
    doc = decode(document(full_rect()))
    context = RecordingContext()
    doc.render(context)
    assert context.names()[-2:] == ["fill", "restore_state"]


@pytest.mark.parametrize("kwargs", [{"tolerance": 0}, {"tolerance": -1.0}, {"supersample": 0}])
def test_render_options_validation(kwargs) -> None:
    with pytest.raises(ValueError):
        RenderOptions(**kwargs)


def test_concurrent_renders_of_one_document_agree() -> None:
    body = (
        full_rect()
        + tag(3)
        + varint(0)
        + varint(1)
        + varint(1)
        + U.point(2, 8)
        + b"\x03" + U.points([(2, 0), (14, 0), (14, 8)])
        + b"\x06"
    )
    doc = decode(document(body, colors=(RED, GREEN)))
    renderer = Renderer(RenderOptions(supersample=2))

    def _render(_: int) -> np.ndarray:
        context = RasterContext(32, 32, scale_x=2.0, scale_y=2.0, supersample=2)
        renderer.render(doc, context)
        return context.to_pixel_buffer().pixels

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(_render, range(8)))
    for pixels in results[1:]:
        assert np.array_equal(pixels, results[0])
