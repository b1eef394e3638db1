"""Floor-frame rotation, bounds clamping and footprint overlap tests."""

import math
from typing import Optional, Tuple

import numpy as np

from shelfslot.models import Rect


def rotate_around(center: Tuple[float, float], point: Tuple[float, float], angle: float) -> Tuple[float, float]:
    """Rotate ``point`` around ``center`` by ``angle`` radians in the X/Z plane."""
    if not angle:
        return (float(point[0]), float(point[1]))
    c = np.asarray(center, dtype=float)
    rel = np.asarray(point, dtype=float) - c
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    rot = np.array([[cos_a, -sin_a], [sin_a, cos_a]])
    out = rot @ rel + c
    return (float(out[0]), float(out[1]))


def clamp_to_bounds(
    point: Tuple[float, float],
    box_depth: float,
    box_lateral: float,
    bounds: Optional[Rect] = None,
    floor_center: Tuple[float, float] = (0.0, 0.0),
    floor_length: float = 0.0,
    floor_width: float = 0.0,
) -> Tuple[float, float]:
    """Pull ``point`` in so the box footprint stays inside the floor.

    With ``bounds`` the footprint is kept inside that rectangle; otherwise it is
    kept within half the floor length/width of ``floor_center``.  A box larger
    than the bounds ends up flush with the max edge.  Never raises.
    """
    px, pz = float(point[0]), float(point[1])
    if bounds is not None:
        half_dx = box_depth / 2
        half_dz = box_lateral / 2
        nx = min(max(px, bounds.min_x + half_dx), bounds.max_x - half_dx)
        nz = min(max(pz, bounds.min_z + half_dz), bounds.max_z - half_dz)
        return (nx, nz)

    half_forward = floor_length / 2 - box_depth / 2
    half_lateral = floor_width / 2 - box_lateral / 2
    cx, cz = floor_center
    nx = max(min(px - cx, half_forward), -half_forward) + cx
    nz = max(min(pz - cz, half_lateral), -half_lateral) + cz
    return (nx, nz)


def footprint(center: Tuple[float, float], box_depth: float, box_lateral: float) -> Rect:
    cx, cz = center
    return Rect(
        min_x=cx - box_depth / 2, max_x=cx + box_depth / 2,
        min_z=cz - box_lateral / 2, max_z=cz + box_lateral / 2,
    )


def aabb_overlap(a: Rect, b: Rect) -> bool:
    """Strict overlap; boxes sharing an edge do not overlap."""
    return (a.min_x < b.max_x and a.max_x > b.min_x) and (a.min_z < b.max_z and a.max_z > b.min_z)


def clamp_region(region: Optional[Rect], floor_bounds: Rect, box_depth: float, box_lateral: float) -> Rect:
    """Part of ``region`` a box may be clamped into, kept inside the floor.

    On an axis where the region inside the floor is narrower than the box, the
    floor's own extent on that axis is used instead.
    """
    if region is None:
        return floor_bounds
    inner = region.intersection(floor_bounds)
    if inner.width_x >= box_depth:
        min_x, max_x = inner.min_x, inner.max_x
    else:
        min_x, max_x = floor_bounds.min_x, floor_bounds.max_x
    if inner.width_z >= box_lateral:
        min_z, max_z = inner.min_z, inner.max_z
    else:
        min_z, max_z = floor_bounds.min_z, floor_bounds.max_z
    return Rect(min_x, max_x, min_z, max_z)
