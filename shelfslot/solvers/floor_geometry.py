"""Derive a floor's local frame from what the scene layer supplies."""

import logging

from shelfslot.models import FloorDescriptor, FloorGeometry, Rect

logger = logging.getLogger("shelfslot.floor_geometry")


def _widen(lo: float, hi: float, min_extent: float):
    if hi < lo:
        lo, hi = hi, lo
    if hi - lo >= min_extent:
        return lo, hi
    mid = (lo + hi) / 2
    return mid - min_extent / 2, mid + min_extent / 2


def resolve_floor_geometry(descriptor: FloorDescriptor, config) -> FloorGeometry:
    """Build the immutable FloorGeometry for one placement pass.

    Explicit bounds win; otherwise the footprint comes from the descriptor's
    length/width (or the configured defaults) around its center.  Either way
    the rectangle is never thinner than ``config.min_floor_extent``.
    """
    min_extent = config.min_floor_extent

    if descriptor.bounds is not None:
        b = descriptor.bounds
        min_x, max_x = _widen(b.min_x, b.max_x, min_extent)
        min_z, max_z = _widen(b.min_z, b.max_z, min_extent)
        if (min_x, max_x, min_z, max_z) != (b.min_x, b.max_x, b.min_z, b.max_z):
            logger.warning("Floor %s has degenerate bounds %s, widened", descriptor.floor_index, b)
        bounds = Rect(min_x, max_x, min_z, max_z)
        center = bounds.center
        length, width = bounds.width_x, bounds.width_z
    else:
        length = descriptor.length if descriptor.length is not None else config.default_floor_length
        width = descriptor.width if descriptor.width is not None else config.default_floor_width
        if length < min_extent or width < min_extent:
            logger.warning(
                "Floor %s footprint %.3f x %.3f below minimum, using %.3f",
                descriptor.floor_index, length, width, min_extent,
            )
        length = max(length, min_extent)
        width = max(width, min_extent)
        center = descriptor.center if descriptor.center is not None else (0.0, 0.0)
        cx, cz = center
        bounds = Rect(cx - length / 2, cx + length / 2, cz - width / 2, cz + width / 2)

    base = config.floor_base_elevations.get(descriptor.floor_index, 0.0)
    next_base = config.floor_base_elevations.get(descriptor.floor_index + 1)
    if next_base is None:
        next_base = base + config.default_floor_gap

    rotation = descriptor.rotation if descriptor.rotation is not None else 0.0

    return FloorGeometry(
        floor_index=descriptor.floor_index,
        center=(float(center[0]), float(center[1])),
        bounds=bounds,
        length=length,
        width=width,
        rotation=float(rotation),
        base_elevation=base,
        next_base_elevation=next_base,
    )
