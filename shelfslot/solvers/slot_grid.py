"""Row/column slot tiling of a floor for one box type.

Rows run along X (box depth), columns along Z (box lateral width).  The grid
is centered on the type's local center and replicated on every layer that
fits in the floor's vertical gap.  Slots are emitted layer by layer, row by
row, column by column, so the first free slot is always the lowest, nearest
corner one.
"""

import logging
import math
from typing import Dict, Tuple

import numpy as np

from shelfslot.models import BoxSpec, FloorGeometry, Rect, Slot, SlotGrid

logger = logging.getLogger("shelfslot.slot_grid")

_COUNT_EPS = 1e-9
_FIT_EPS = 1e-6


def grid_dimensions(
    floor_length: float,
    floor_width: float,
    box_depth: float,
    box_lateral: float,
    spacing: float,
) -> Tuple[int, int]:
    """Return (rows, cols) for one layer, including the single extra-fit probe."""
    cols = max(1, int(math.floor((floor_width + spacing) / (box_lateral + spacing) + _COUNT_EPS)))
    rows = max(1, int(math.floor((floor_length + spacing) / (box_depth + spacing) + _COUNT_EPS)))

    step_z = box_lateral + spacing
    step_x = box_depth + spacing

    # First fit: one extra column if it fits, else one extra row
    if cols * step_z + box_lateral <= floor_width + _FIT_EPS:
        cols += 1
    elif rows * step_x + box_depth <= floor_length + _FIT_EPS:
        rows += 1
    return rows, cols


def generate_slot_grid(
    center: Tuple[float, float],
    floor_length: float,
    floor_width: float,
    box_depth: float,
    box_lateral: float,
    layers: int,
    spacing: float,
    type_tag: str = "",
) -> SlotGrid:
    """Tile the floor rectangle into ``rows * cols * layers`` slots."""
    rows, cols = grid_dimensions(floor_length, floor_width, box_depth, box_lateral, spacing)
    layers = max(1, int(layers))

    step_z = box_lateral + spacing
    step_x = box_depth + spacing
    cx, cz = center
    start_x = cx - (rows * step_x) / 2 + step_x / 2
    start_z = cz - (cols * step_z) / 2 + step_z / 2

    xs = start_x + np.arange(rows) * step_x
    zs = start_z + np.arange(cols) * step_z

    slots = [
        Slot(local_x=float(xs[r]), local_z=float(zs[c]), layer=layer, row=r, col=c)
        for layer in range(layers)
        for r in range(rows)
        for c in range(cols)
    ]

    bounds = Rect(
        min_x=float(xs[0]) - box_depth / 2,
        max_x=float(xs[-1]) + box_depth / 2,
        min_z=float(zs[0]) - box_lateral / 2,
        max_z=float(zs[-1]) + box_lateral / 2,
    )

    logger.debug(
        "Grid %s: %dx%dx%d slots (step %.3f x %.3f) around (%.3f, %.3f)",
        type_tag or "?", rows, cols, layers, step_x, step_z, cx, cz,
    )
    return SlotGrid(
        type_tag=type_tag,
        center=(cx, cz),
        slots=slots,
        bounds=bounds,
        rows=rows,
        cols=cols,
        layers=layers,
        step_x=step_x,
        step_z=step_z,
    )


def build_type_grids(geometry: FloorGeometry, registry, config) -> Dict[str, SlotGrid]:
    """One grid per registered type, each centered on its shelf sub-zone."""
    grids: Dict[str, SlotGrid] = {}
    cx, cz = geometry.center
    for tag, spec in registry.items():
        dx, dz = config.offset_for(tag)
        grids[tag] = generate_slot_grid(
            center=(cx + dx, cz + dz),
            floor_length=geometry.length,
            floor_width=geometry.width,
            box_depth=spec.depth,
            box_lateral=spec.lateral,
            layers=geometry.layer_count(spec.height),
            spacing=config.spacing,
            type_tag=tag,
        )
    return grids


def theoretical_capacity(spec: BoxSpec, floor_width: float, floor_length: float, spacing: float) -> Dict[str, int]:
    """Single-layer capacity estimate without the extra-fit probe."""
    cols = max(1, int(math.floor((floor_width + spacing) / (spec.lateral + spacing))))
    rows = max(1, int(math.floor((floor_length + spacing) / (spec.depth + spacing))))
    return {"cols": cols, "rows": rows, "total": cols * rows}
