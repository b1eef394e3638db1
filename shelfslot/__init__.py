"""Shelf slot allocation and placement engine."""

from shelfslot.config import PlacementConfig, config_from_env, default_config
from shelfslot.models import (
    BoxSpec, ContainerRecord, FloorDescriptor, FloorGeometry, PlacementReport,
    PlacementResult, Rect, Slot, SlotGrid,
)
from shelfslot.solvers.box_registry import BoxSpecRegistry, UnknownBoxType
from shelfslot.solvers.floor_geometry import resolve_floor_geometry
from shelfslot.solvers.placement_solver import assign, fallback_position, plan_floor
from shelfslot.solvers.slot_grid import build_type_grids, generate_slot_grid

__version__ = "0.1.0"
