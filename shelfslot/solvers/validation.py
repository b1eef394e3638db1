"""Placement validation.

Checks a PlacementReport for same-layer footprint overlaps and footprints
leaving the floor rectangle.
"""

from typing import Any, Dict, Optional

from shapely.geometry import box

from shelfslot.models import FloorGeometry, PlacementReport, SOURCE_FALLBACK
from shelfslot.solvers.box_registry import BoxSpecRegistry


def _footprint_box(p, registry: BoxSpecRegistry):
    spec = registry.lookup(p.box_type, container_id=p.container_id)
    x, _, z = p.world_position
    return box(x - spec.depth / 2, z - spec.lateral / 2, x + spec.depth / 2, z + spec.lateral / 2)


def validate_placements(
    report: PlacementReport,
    registry: BoxSpecRegistry,
    geometry: Optional[FloorGeometry] = None,
    tol: float = 1e-6,
) -> Dict[str, Any]:
    """Validate one placement pass.

    Args:
        report: Output of assign() / plan_floor().
        registry: Registry used for the pass.
        geometry: Floor to check containment against (defaults to report.geometry).
        tol: Overlap area and edge tolerance.

    Returns:
        {"valid": bool, "issues": [...], "overlaps": [...],
         "fallback_overlaps": [...], "out_of_bounds": [...]}
    """
    geometry = geometry or report.geometry
    issues = []
    overlaps = []
    fallback_overlaps = []
    out_of_bounds = []

    boxes = [(p, _footprint_box(p, registry)) for p in report.placements]

    for i, (p1, b1) in enumerate(boxes):
        for p2, b2 in boxes[i + 1 :]:
            if p1.layer != p2.layer:
                continue
            area = b1.intersection(b2).area
            if area <= tol:
                continue
            entry = {
                "container1": p1.container_id,
                "container2": p2.container_id,
                "layer": p1.layer,
                "overlap_area": area,
            }
            if SOURCE_FALLBACK in (p1.source, p2.source):
                fallback_overlaps.append(entry)
            else:
                overlaps.append(entry)

    if geometry is not None:
        b = geometry.bounds
        floor_box = box(b.min_x - tol, b.min_z - tol, b.max_x + tol, b.max_z + tol)
        for p, fb in boxes:
            if not floor_box.covers(fb):
                out_of_bounds.append({
                    "container": p.container_id,
                    "footprint": tuple(fb.bounds),
                    "floor_bounds": (b.min_x, b.min_z, b.max_x, b.max_z),
                })

    if overlaps:
        issues.append("Container overlaps detected")
    if out_of_bounds:
        issues.append(f"Containers outside floor bounds: {[o['container'] for o in out_of_bounds]}")

    return {
        "valid": len(issues) == 0,
        "issues": issues,
        "overlaps": overlaps,
        "fallback_overlaps": fallback_overlaps,
        "out_of_bounds": out_of_bounds,
    }
