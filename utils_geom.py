# utils_geom.py

from PyQt5.QtCore import QPointF
import math

EPS = 1e-9


def v_add(a: QPointF, b: QPointF) -> QPointF:
    return QPointF(a.x() + b.x(), a.y() + b.y())

def v_sub(a: QPointF, b: QPointF) -> QPointF:
    return QPointF(a.x() - b.x(), a.y() - b.y())

def v_scale(a: QPointF, s: float) -> QPointF:
    return QPointF(a.x() * s, a.y() * s)

def v_len(a: QPointF) -> float:
    return math.hypot(a.x(), a.y())

def v_norm_safe(a: QPointF, fallback: QPointF = QPointF(1.0, 0.0)) -> QPointF:
    L = v_len(a)
    return fallback if L < EPS else v_scale(a, 1.0 / L)

def v_dist(a: QPointF, b: QPointF) -> float:
    return math.hypot(a.x() - b.x(), a.y() - b.y())

def v_lerp(a: QPointF, b: QPointF, t: float) -> QPointF:
    # t in [0,1]
    return QPointF(a.x() + (b.x() - a.x()) * t, a.y() + (b.y() - a.y()) * t)

def v_lerp_pts(pre: dict, post: dict, t: float) -> dict:
    # Interpolate named positions; names missing from `pre` start at their target
    return {k: v_lerp(pre.get(k, p), p, t) for k, p in post.items()}


def hash_u32(*args) -> int:
    # FNV-1a over ints/strings; stable across runs (unlike hash())
    h = 0x811C9DC5
    for a in args:
        data = a.encode("utf-8") if isinstance(a, str) else int(a).to_bytes(8, "little", signed=True)
        for byte in data:
            h ^= byte
            h = (h * 0x01000193) & 0xffffffff
    return h

def hash01(*args) -> float:
    return hash_u32(*args) / 4294967295.0


def circle_point(center: QPointF, radius: float, k: int, n: int) -> QPointF:
    # k-th of n points on a circle, starting at 12 o'clock
    theta = 2 * math.pi * k / max(1, n) - math.pi / 2
    return QPointF(center.x() + radius * math.cos(theta), center.y() + radius * math.sin(theta))

def circle_radius_for(n: int, spacing: float) -> float:
    if n < 2:
        return 0.0
    return max(spacing, spacing / (2.0 * math.sin(math.pi / n)))


def cubic_bezier_points(p0: QPointF, c1: QPointF, c2: QPointF, p1: QPointF, steps=20):
    xs = []; ys = []
    for i in range(steps + 1):
        t = i / steps
        u = 1 - t
        xs.append(u*u*u*p0.x() + 3*u*u*t*c1.x() + 3*u*t*t*c2.x() + t*t*t*p1.x())
        ys.append(u*u*u*p0.y() + 3*u*u*t*c1.y() + 3*u*t*t*c2.y() + t*t*t*p1.y())
    return xs, ys

def axis_controls(p0: QPointF, p1: QPointF, axis: str, roundness: float = 0.4):
    """
    Control points for a cubic curve forced along the layout axis:
    the curve leaves p0 and enters p1 parallel to that axis.
    """
    if axis == "vertical":
        d = (p1.y() - p0.y()) * roundness
        return QPointF(p0.x(), p0.y() + d), QPointF(p1.x(), p1.y() - d)
    d = (p1.x() - p0.x()) * roundness
    return QPointF(p0.x() + d, p0.y()), QPointF(p1.x() - d, p1.y())

def loop_points(center: QPointF, radius: float, steps=24):
    # Small circle sitting above-right of a node, for self-edges
    cx = center.x() + radius * 0.8
    cy = center.y() - radius * 0.8
    xs = []; ys = []
    for i in range(steps + 1):
        a = 2 * math.pi * i / steps
        xs.append(cx + radius * math.cos(a))
        ys.append(cy + radius * math.sin(a))
    return xs, ys

def arrow_head(tip: QPointF, tail: QPointF, size: float = 10.0, spread_deg: float = 25.0):
    """Two barb points of an arrow head at `tip`, pointing away from `tail`."""
    d = v_norm_safe(v_sub(tip, tail))
    back = v_scale(d, -size)
    s = math.radians(spread_deg)
    c, si = math.cos(s), math.sin(s)
    left = QPointF(back.x() * c - back.y() * si, back.x() * si + back.y() * c)
    right = QPointF(back.x() * c + back.y() * si, -back.x() * si + back.y() * c)
    return v_add(tip, left), v_add(tip, right)

def box_boundary_point(center: QPointF, toward: QPointF, half_w: float, half_h: float) -> QPointF:
    # Where the ray center->toward leaves an axis aligned box around center
    dx = toward.x() - center.x()
    dy = toward.y() - center.y()
    if abs(dx) < EPS and abs(dy) < EPS:
        return QPointF(center.x(), center.y())
    tx = half_w / abs(dx) if abs(dx) > EPS else math.inf
    ty = half_h / abs(dy) if abs(dy) > EPS else math.inf
    t = min(tx, ty, 1.0)
    return QPointF(center.x() + dx * t, center.y() + dy * t)
