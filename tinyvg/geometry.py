from __future__ import annotations

import math
from typing import List, Tuple

XY = Tuple[float, float]

MAX_SUBDIVISION_DEPTH = 16


def fuzzy_eq(a: float, b: float, tol: float = 1e-9) -> bool:
    return abs(a - b) <= tol


def points_match(p1: XY, p2: XY, tol: float = 1e-9) -> bool:
    return fuzzy_eq(p1[0], p2[0], tol) and fuzzy_eq(p1[1], p2[1], tol)


def _cubic_flatness_sq(p0: XY, p1: XY, p2: XY, p3: XY) -> float:
    """
    Upper bound (times 16) of the squared distance between a cubic and its chord:
    f^2 <= 1/16 (max{ux^2, vx^2} + max{uy^2, vy^2}) with
    u = 3*b1 - 2*b0 - b3 and v = 3*b2 - b0 - 2*b3.
    """

    ux = 3.0 * p1[0] - 2.0 * p0[0] - p3[0]
    uy = 3.0 * p1[1] - 2.0 * p0[1] - p3[1]
    vx = 3.0 * p2[0] - p0[0] - 2.0 * p3[0]
    vy = 3.0 * p2[1] - p0[1] - 2.0 * p3[1]
    return max(ux * ux, vx * vx) + max(uy * uy, vy * vy)


def _midpoint(a: XY, b: XY) -> XY:
    return ((a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5)


def flatten_cubic(p0: XY, p1: XY, p2: XY, p3: XY, tolerance: float) -> List[XY]:
    """Polyline approximation of a cubic bezier; excludes ``p0``, ends exactly at ``p3``."""

    if tolerance <= 0:
        raise ValueError("tolerance must be positive")
    limit = 16.0 * tolerance * tolerance
    points: List[XY] = []
    # Depth-first de Casteljau split at t=0.5, left half first.
    stack: List[Tuple[XY, XY, XY, XY, int]] = [(p0, p1, p2, p3, 0)]
    while stack:
        a, b, c, d, depth = stack.pop()
        if depth >= MAX_SUBDIVISION_DEPTH or _cubic_flatness_sq(a, b, c, d) <= limit:
            points.append(d)
            continue
        ab = _midpoint(a, b)
        bc = _midpoint(b, c)
        cd = _midpoint(c, d)
        abc = _midpoint(ab, bc)
        bcd = _midpoint(bc, cd)
        mid = _midpoint(abc, bcd)
        stack.append((mid, bcd, cd, d, depth + 1))
        stack.append((a, ab, abc, mid, depth + 1))
    points[-1] = p3
    return points


def flatten_quadratic(p0: XY, control: XY, p2: XY, tolerance: float) -> List[XY]:
    c1 = (p0[0] + 2.0 / 3.0 * (control[0] - p0[0]), p0[1] + 2.0 / 3.0 * (control[1] - p0[1]))
    c2 = (p2[0] + 2.0 / 3.0 * (control[0] - p2[0]), p2[1] + 2.0 / 3.0 * (control[1] - p2[1]))
    return flatten_cubic(p0, c1, c2, p2, tolerance)


def _angle_between(u: XY, v: XY) -> float:
    return math.atan2(u[0] * v[1] - u[1] * v[0], u[0] * v[0] + u[1] * v[1])


def arc_center_parameters(
    src: XY,
    dst: XY,
    radius_x: float,
    radius_y: float,
    rotation_deg: float,
    large_arc: bool,
    sweep: bool,
) -> Tuple[XY, float, float, float, float, float] | None:
    """
    Convert an endpoint-parameterized arc into ``(center, rx, ry, phi, eta, eta_delta)``.

    Follows the SVG implementation notes (F.6.5/F.6.6): radii too small to span
    the endpoints are scaled up. Returns ``None`` when the arc degenerates into
    a straight line (zero radius or coincident endpoints).
    """

    rx, ry = abs(radius_x), abs(radius_y)
    if rx < 1e-12 or ry < 1e-12 or points_match(src, dst):
        return None
    phi = math.radians(rotation_deg)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)

    dx = (src[0] - dst[0]) / 2.0
    dy = (src[1] - dst[1]) / 2.0
    x1 = cos_phi * dx + sin_phi * dy
    y1 = -sin_phi * dx + cos_phi * dy

    s = (x1 / rx) ** 2 + (y1 / ry) ** 2
    if s > 1.0:
        s = math.sqrt(s)
        rx *= s
        ry *= s

    denom = (rx * y1) ** 2 + (ry * x1) ** 2
    sq = math.sqrt(max(0.0, (rx * ry) ** 2 / denom - 1.0)) if denom > 0 else 0.0
    if large_arc == sweep:
        sq = -sq
    cx_ = sq * rx * y1 / ry
    cy_ = -sq * ry * x1 / rx

    cx = cos_phi * cx_ - sin_phi * cy_ + (src[0] + dst[0]) / 2.0
    cy = sin_phi * cx_ + cos_phi * cy_ + (src[1] + dst[1]) / 2.0

    v1 = ((x1 - cx_) / rx, (y1 - cy_) / ry)
    v2 = ((-x1 - cx_) / rx, (-y1 - cy_) / ry)
    eta = _angle_between((1.0, 0.0), v1)
    eta_delta = math.fmod(_angle_between(v1, v2), math.tau)
    if not sweep and eta_delta > 0:
        eta_delta -= math.tau
    elif sweep and eta_delta < 0:
        eta_delta += math.tau
    return (cx, cy), rx, ry, phi, eta, eta_delta


def flatten_arc(
    src: XY,
    dst: XY,
    radius_x: float,
    radius_y: float,
    rotation_deg: float,
    large_arc: bool,
    sweep: bool,
    tolerance: float,
) -> List[XY]:
    """Polyline approximation of an elliptical arc; excludes ``src``, ends exactly at ``dst``."""

    if tolerance <= 0:
        raise ValueError("tolerance must be positive")
    params = arc_center_parameters(src, dst, radius_x, radius_y, rotation_deg, large_arc, sweep)
    if params is None:
        return [dst]
    (cx, cy), rx, ry, phi, eta, eta_delta = params

    radius = max(rx, ry)
    if tolerance >= radius:
        step = math.pi / 2.0
    else:
        step = 2.0 * math.acos(1.0 - tolerance / radius)
    segments = max(1, int(math.ceil(abs(eta_delta) / step)))

    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    points: List[XY] = []
    for index in range(1, segments + 1):
        angle = eta + eta_delta * index / segments
        ex = rx * math.cos(angle)
        ey = ry * math.sin(angle)
        points.append((cx + cos_phi * ex - sin_phi * ey, cy + sin_phi * ex + cos_phi * ey))
    points[-1] = dst
    return points
