"""Data models for shelf slot allocation."""

from typing import List, Optional, Dict, Tuple
from dataclasses import dataclass, field, asdict
import json
import math

SOURCE_EXPLICIT = "explicit"
SOURCE_SLOT = "slot"
SOURCE_CROSS_TYPE = "cross_type"
SOURCE_FALLBACK = "fallback"


def normalize_tag(type_tag) -> str:
    """Box type tags are matched case-insensitively as upper-case strings."""
    return str(type_tag).strip().upper()


@dataclass(frozen=True)
class BoxSpec:
    """Footprint of a container type: depth along X, lateral along Z."""
    depth: float
    lateral: float
    height: float

    def __post_init__(self):
        for name in ("depth", "lateral", "height"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"BoxSpec.{name} must be > 0, got {value}")


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle on the floor plane (X/Z)."""
    min_x: float
    max_x: float
    min_z: float
    max_z: float

    @property
    def width_x(self) -> float:
        return self.max_x - self.min_x

    @property
    def width_z(self) -> float:
        return self.max_z - self.min_z

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_z + self.max_z) / 2)

    def is_empty(self) -> bool:
        return self.max_x < self.min_x or self.max_z < self.min_z

    def union(self, other: "Rect") -> "Rect":
        return Rect(
            min(self.min_x, other.min_x), max(self.max_x, other.max_x),
            min(self.min_z, other.min_z), max(self.max_z, other.max_z),
        )

    def intersection(self, other: "Rect") -> "Rect":
        return Rect(
            max(self.min_x, other.min_x), min(self.max_x, other.max_x),
            max(self.min_z, other.min_z), min(self.max_z, other.max_z),
        )

    def contains_rect(self, other: "Rect", tol: float = 1e-6) -> bool:
        return (
            other.min_x >= self.min_x - tol and other.max_x <= self.max_x + tol
            and other.min_z >= self.min_z - tol and other.max_z <= self.max_z + tol
        )

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """(min_x, min_z, max_x, max_z), the order rtree and shapely expect."""
        return (self.min_x, self.min_z, self.max_x, self.max_z)


@dataclass
class FloorDescriptor:
    """What the scene layer knows about the selected floor."""
    floor_index: int
    bounds: Optional[Rect] = None
    length: Optional[float] = None   # along X
    width: Optional[float] = None    # along Z
    center: Optional[Tuple[float, float]] = None
    rotation: Optional[float] = None  # radians around the vertical axis


@dataclass(frozen=True)
class FloorGeometry:
    """Local frame of one floor, fixed for the duration of a placement pass."""
    floor_index: int
    center: Tuple[float, float]
    bounds: Rect
    length: float
    width: float
    rotation: float
    base_elevation: float
    next_base_elevation: float

    @property
    def vertical_gap(self) -> float:
        return max(0.0, self.next_base_elevation - self.base_elevation)

    def layer_count(self, box_height: float) -> int:
        # 1e-9 keeps exact ratios such as 0.9 / 0.45 from flooring to 1
        return max(1, int(math.floor(self.vertical_gap / box_height + 1e-9)))

    def base_elevation_by_layer(self, box_height: float) -> Dict[int, float]:
        return {
            layer: self.base_elevation + layer * box_height
            for layer in range(self.layer_count(box_height))
        }


@dataclass(frozen=True)
class Slot:
    """One candidate grid position; local_x/local_z are pre-rotation."""
    local_x: float
    local_z: float
    layer: int
    row: int
    col: int


@dataclass
class SlotGrid:
    """Tiling of one floor for one box type."""
    type_tag: str
    center: Tuple[float, float]
    slots: List[Slot]
    bounds: Rect
    rows: int
    cols: int
    layers: int
    step_x: float
    step_z: float

    @property
    def total_slots(self) -> int:
        return len(self.slots)


@dataclass(frozen=True)
class ContainerRecord:
    """A container to place; explicit_position is (x, y, z) in the floor frame."""
    id: str
    box_type: str
    explicit_position: Optional[Tuple[float, float, float]] = None
    explicit_layer: Optional[int] = None


@dataclass(frozen=True)
class PlacementResult:
    """Final world position of one container."""
    container_id: str
    world_position: Tuple[float, float, float]
    box_type: str
    layer: int
    source: str = SOURCE_SLOT


@dataclass
class PlacementReport:
    """Everything one assign() pass produced."""
    placements: List[PlacementResult] = field(default_factory=list)
    errors: List[Exception] = field(default_factory=list)
    slot_grids: Dict[str, SlotGrid] = field(default_factory=dict)
    clamp_bounds: Optional[Rect] = None
    geometry: Optional[FloorGeometry] = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise self.errors[0]


def placement_to_dict(p: PlacementResult) -> dict:
    return asdict(p)


def report_to_dict(report: PlacementReport) -> dict:
    """Convert a PlacementReport to a JSON-serializable dict."""
    return {
        "placements": [placement_to_dict(p) for p in report.placements],
        "errors": [str(e) for e in report.errors],
        "clamp_bounds": asdict(report.clamp_bounds) if report.clamp_bounds else None,
        "slot_counts": {tag: g.total_slots for tag, g in report.slot_grids.items()},
    }


def report_to_json(report: PlacementReport) -> str:
    return json.dumps(report_to_dict(report), indent=2)


def dict_to_rect(d: dict) -> Rect:
    """Accepts snake_case or the dashboard's camelCase bounds keys."""
    if "minX" in d:
        return Rect(min_x=d["minX"], max_x=d["maxX"], min_z=d["minZ"], max_z=d["maxZ"])
    return Rect(min_x=d["min_x"], max_x=d["max_x"], min_z=d["min_z"], max_z=d["max_z"])


def dict_to_floor_descriptor(d: dict) -> FloorDescriptor:
    center = d.get("center")
    return FloorDescriptor(
        floor_index=int(d["floor_index"]),
        bounds=dict_to_rect(d["bounds"]) if d.get("bounds") else None,
        length=d.get("length"),
        width=d.get("width"),
        center=tuple(center) if center is not None else None,
        rotation=d.get("rotation"),
    )
