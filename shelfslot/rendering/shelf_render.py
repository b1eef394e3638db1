"""Top-down debug rendering of one floor layer using matplotlib.

Draws the floor rectangle, every slot center of every type grid on the
layer, and the placed container footprints colored by how they were placed.
Footprints that leave the floor bounds are outlined in red.
"""

import os
import logging

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.patches as patches

from shelfslot.models import FloorGeometry, PlacementReport
from shelfslot.solvers.box_registry import BoxSpecRegistry
from shelfslot.solvers.transforms import footprint, rotate_around

logger = logging.getLogger("shelfslot.shelf_render")

_GRID_COLORS = {"A": "#3cb44b", "B": "#4363d8", "C": "#f58231", "D": "#911eb4"}
_SOURCE_COLORS = {
    "explicit": "#42d4f4",
    "slot": "#bfef45",
    "cross_type": "#ffe119",
    "fallback": "#fabed4",
}


def render_floor_layer(
    report: PlacementReport,
    registry: BoxSpecRegistry,
    layer: int = 0,
    output_path: str = "floor_layer.png",
    geometry: FloorGeometry = None,
    dpi: int = 120,
) -> str:
    """Render one layer of a placement pass as a top-down PNG."""
    geometry = geometry or report.geometry
    if geometry is None:
        raise ValueError("render_floor_layer needs the pass geometry")

    fig, ax = plt.subplots(1, 1, figsize=(8, 8))
    b = geometry.bounds
    ax.add_patch(patches.Rectangle(
        (b.min_x, b.min_z), b.width_x, b.width_z,
        linewidth=1.5, edgecolor="#ff9900", facecolor="#ffea00", alpha=0.16,
    ))

    for tag, grid in report.slot_grids.items():
        pts = [
            rotate_around(grid.center, (s.local_x, s.local_z), geometry.rotation)
            for s in grid.slots if s.layer == layer
        ]
        if pts:
            xs, zs = zip(*pts)
            ax.scatter(xs, zs, s=8, color=_GRID_COLORS.get(tag, "#999999"), label=f"{tag} slots")

    for p in report.placements:
        if p.layer != layer:
            continue
        spec = registry.lookup(p.box_type, container_id=p.container_id)
        x, _, z = p.world_position
        fp = footprint((x, z), spec.depth, spec.lateral)
        inside = b.contains_rect(fp)
        ax.add_patch(patches.Rectangle(
            (fp.min_x, fp.min_z), fp.width_x, fp.width_z,
            linewidth=1.5 if inside else 2.5,
            edgecolor="black" if inside else "red",
            facecolor=_SOURCE_COLORS.get(p.source, "#a9a9a9"), alpha=0.6,
        ))
        ax.text(x, z, f"{p.container_id}\n{p.box_type}", ha="center", va="center", fontsize=6)

    ax.set_aspect("equal")
    ax.set_title(f"Floor {geometry.floor_index} layer {layer}: "
                 f"{sum(1 for p in report.placements if p.layer == layer)} containers")
    ax.set_xlabel("X (m)")
    ax.set_ylabel("Z (m)")
    ax.grid(True, alpha=0.3)
    ax.autoscale()
    if report.slot_grids:
        ax.legend(loc="upper right", fontsize=7)

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    fig.savefig(output_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info("Floor %s layer %d rendered to %s", geometry.floor_index, layer, output_path)
    return output_path
