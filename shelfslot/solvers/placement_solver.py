"""Sequential slot assignment for containers on one shelf floor.

Containers are handled strictly in input order; earlier containers get the
first choice of slots.  For each container:

  1. an explicit stored position is rotated into the floor frame, clamped and
     accepted without a collision check;
  2. otherwise the container's own type grid is scanned for the first free
     slot whose footprint does not overlap anything already placed on that
     layer;
  3. failing that the other type grids are scanned in priority order;
  4. failing that a square-grid fallback position is used.

Only UnknownBoxType is reported back to the caller; everything else degrades
to *some* position.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence, Set, Tuple

from rtree import index as rtree_index

from shelfslot.config import default_config
from shelfslot.models import (
    BoxSpec, ContainerRecord, FloorDescriptor, FloorGeometry, PlacementReport,
    PlacementResult, Rect, Slot, SlotGrid,
    SOURCE_CROSS_TYPE, SOURCE_EXPLICIT, SOURCE_FALLBACK, SOURCE_SLOT,
)
from shelfslot.solvers.box_registry import BoxSpecRegistry, UnknownBoxType
from shelfslot.solvers.floor_geometry import resolve_floor_geometry
from shelfslot.solvers.slot_grid import build_type_grids
from shelfslot.solvers.transforms import aabb_overlap, clamp_region, clamp_to_bounds, footprint, rotate_around

logger = logging.getLogger("shelfslot.placement_solver")

SlotKey = Tuple[str, int, int, int]


# ===================================================================
# Fallback layout
# ===================================================================

def fallback_position(
    index: int,
    total: int,
    center: Tuple[float, float],
    spacing: float = 0.1,
) -> Tuple[float, float]:
    """Square-grid position of last resort; may overlap in overcapacity cases."""
    per_row = max(1, int(math.ceil(math.sqrt(max(total, 0)))))
    row, col = divmod(max(index, 0), per_row)
    start_z = -((per_row - 1) * spacing) / 2
    local_z = start_z + col * spacing
    local_x = -0.08 + row * (spacing * 0.9)
    return (local_x + center[0], local_z + center[1])


# ===================================================================
# Per-pass bookkeeping
# ===================================================================

class _PlacementAccumulator:
    """Taken slot keys and placed footprints for one assign() call."""

    def __init__(self):
        self.taken: Set[SlotKey] = set()
        self.placements: List[PlacementResult] = []
        self._indexes: Dict[int, rtree_index.Index] = {}
        self._footprints: Dict[int, List[Rect]] = {}

    def collides(self, layer: int, rect: Rect) -> bool:
        idx = self._indexes.get(layer)
        if idx is None:
            return False
        placed = self._footprints[layer]
        # rtree also returns boxes that merely touch; the strict test decides
        return any(aabb_overlap(placed[i], rect) for i in idx.intersection(rect.as_tuple()))

    def add(self, result: PlacementResult, rect: Rect, slot_key: Optional[SlotKey] = None):
        layer = result.layer
        if layer not in self._indexes:
            self._indexes[layer] = rtree_index.Index()
            self._footprints[layer] = []
        self._indexes[layer].insert(len(self._footprints[layer]), rect.as_tuple())
        self._footprints[layer].append(rect)
        if slot_key is not None:
            self.taken.add(slot_key)
        self.placements.append(result)


# ===================================================================
# Slot search
# ===================================================================

def _find_free_slot(
    grid_tag: str,
    grid: SlotGrid,
    spec: BoxSpec,
    clamp_bounds: Rect,
    rotation: float,
    max_layers: int,
    acc: _PlacementAccumulator,
) -> Optional[Tuple[Slot, Tuple[float, float], SlotKey]]:
    """First untaken slot of ``grid`` where a ``spec`` box fits without overlap."""
    for slot in grid.slots:
        if slot.layer >= max_layers:
            continue
        key = (grid_tag, slot.row, slot.col, slot.layer)
        if key in acc.taken:
            continue
        world = rotate_around(grid.center, (slot.local_x, slot.local_z), rotation)
        px, pz = clamp_to_bounds(world, spec.depth, spec.lateral, clamp_bounds)
        if acc.collides(slot.layer, footprint((px, pz), spec.depth, spec.lateral)):
            continue
        return slot, (px, pz), key
    return None


# ===================================================================
# Assignment
# ===================================================================

def assign(
    containers: Sequence[ContainerRecord],
    grids: Dict[str, SlotGrid],
    geometry: FloorGeometry,
    registry: BoxSpecRegistry,
    config=None,
) -> PlacementReport:
    """Place every container; see module docstring for the search order."""
    config = config or default_config()
    floor_bounds = geometry.bounds
    rotation = geometry.rotation

    union_bounds = None
    for grid in grids.values():
        union_bounds = grid.bounds if union_bounds is None else union_bounds.union(grid.bounds)
    union_clamp = floor_bounds
    if union_bounds is not None and not union_bounds.intersection(floor_bounds).is_empty():
        union_clamp = union_bounds.intersection(floor_bounds)

    search_order = [tag for tag in config.search_order() if tag in grids]
    acc = _PlacementAccumulator()
    errors: List[Exception] = []
    total = len(containers)

    for i, c in enumerate(containers):
        try:
            spec = registry.lookup(c.box_type, container_id=c.id)
        except UnknownBoxType as e:
            logger.warning("Skipping container %s: %s", c.id, e)
            errors.append(e)
            continue
        tag = registry.normalize(c.box_type)
        elevations = geometry.base_elevation_by_layer(spec.height)
        own_grid = grids.get(tag)
        own_clamp = clamp_region(own_grid.bounds if own_grid else None, floor_bounds, spec.depth, spec.lateral)
        alt_clamp = clamp_region(union_bounds, floor_bounds, spec.depth, spec.lateral)

        # 1. Explicit position
        if c.explicit_position is not None:
            ex, ey, ez = c.explicit_position
            dx, dz = config.offset_for(tag)
            local_center = (geometry.center[0] + dx, geometry.center[1] + dz)
            world = rotate_around(local_center, (ex, ez), rotation)
            px, pz = clamp_to_bounds(world, spec.depth, spec.lateral, own_clamp)
            layer = c.explicit_layer if c.explicit_layer is not None else 0
            result = PlacementResult(c.id, (px, float(ey), pz), tag, layer, SOURCE_EXPLICIT)
            acc.add(result, footprint((px, pz), spec.depth, spec.lateral))
            continue

        # 2. Own-type grid
        found = None
        source = SOURCE_SLOT
        if own_grid is not None:
            found = _find_free_slot(tag, own_grid, spec, own_clamp, rotation, len(elevations), acc)

        # 3. Other type grids
        if found is None:
            source = SOURCE_CROSS_TYPE
            for alt in search_order:
                if alt == tag:
                    continue
                found = _find_free_slot(alt, grids[alt], spec, alt_clamp, rotation, len(elevations), acc)
                if found is not None:
                    break

        if found is not None:
            slot, (px, pz), slot_key = found
            py = elevations[slot.layer]
            result = PlacementResult(c.id, (px, py, pz), tag, slot.layer, source)
            acc.add(
                result,
                footprint((px, pz), spec.depth, spec.lateral),
                slot_key=slot_key,
            )
            continue

        # 4. Fallback
        fx, fz = fallback_position(i, total, geometry.center, config.fallback_spacing)
        world = rotate_around(geometry.center, (fx, fz), rotation)
        px, pz = clamp_to_bounds(world, spec.depth, spec.lateral, alt_clamp)
        logger.warning("No free slot for container %s (%s), using fallback position", c.id, tag)
        result = PlacementResult(c.id, (px, elevations[0], pz), tag, 0, SOURCE_FALLBACK)
        acc.add(result, footprint((px, pz), spec.depth, spec.lateral))

    logger.debug(
        "Floor %s: placed %d of %d containers (%d errors)",
        geometry.floor_index, len(acc.placements), total, len(errors),
    )
    return PlacementReport(
        placements=acc.placements,
        errors=errors,
        slot_grids=grids,
        clamp_bounds=union_clamp,
        geometry=geometry,
    )


def plan_floor(
    descriptor: FloorDescriptor,
    containers: Sequence[ContainerRecord],
    config=None,
    registry: Optional[BoxSpecRegistry] = None,
) -> PlacementReport:
    """Resolve the floor, tile it per box type and assign all containers."""
    config = config or default_config()
    registry = registry or BoxSpecRegistry.from_config(config)
    geometry = resolve_floor_geometry(descriptor, config)
    grids = build_type_grids(geometry, registry, config)
    return assign(containers, grids, geometry, registry, config)
