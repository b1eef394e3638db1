"""Placement engine configuration.

The box table, per-floor base elevations and per-type grid offsets describe
the physical shelf.  They are bundled in a frozen PlacementConfig that is
passed into the engine so tests can substitute other shelf geometries.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Dict, Tuple

from shelfslot.models import BoxSpec, normalize_tag

# Dashboard shelf defaults (meters)
DEFAULT_BOX_SPECS: Dict[str, BoxSpec] = {
    "A": BoxSpec(depth=0.5, lateral=0.5, height=0.45),
    "B": BoxSpec(depth=0.75, lateral=0.75, height=0.45),
    "C": BoxSpec(depth=1.0, lateral=0.5, height=0.45),
    "D": BoxSpec(depth=0.5, lateral=0.5, height=0.8),
}

DEFAULT_FLOOR_BASE_ELEVATIONS: Dict[int, float] = {
    1: 0.28,
    2: 1.57,
    3: 2.86,
    4: 4.15,
}

# Shelf sub-zone bias of each type grid relative to the floor center (x, z)
DEFAULT_TYPE_CENTER_OFFSETS: Dict[str, Tuple[float, float]] = {
    "A": (-0.28, 0.25),
    "B": (-0.53, 0.375),
    "C": (-0.53, 0.25),
    "D": (-0.3, 0.253),
}

SEQUENTIAL_SPACING = 0.01
DEFAULT_FLOOR_LENGTH = 1.7
DEFAULT_FLOOR_WIDTH = 1.07
MIN_FLOOR_EXTENT = 0.01
DEFAULT_FLOOR_GAP = 1.2
FALLBACK_SPACING = 0.1


@dataclass(frozen=True)
class PlacementConfig:
    """Immutable shelf description injected into one placement pass."""
    box_specs: Dict[str, BoxSpec] = field(default_factory=lambda: dict(DEFAULT_BOX_SPECS))
    floor_base_elevations: Dict[int, float] = field(
        default_factory=lambda: dict(DEFAULT_FLOOR_BASE_ELEVATIONS)
    )
    type_center_offsets: Dict[str, Tuple[float, float]] = field(
        default_factory=lambda: dict(DEFAULT_TYPE_CENTER_OFFSETS)
    )
    spacing: float = SEQUENTIAL_SPACING
    default_floor_length: float = DEFAULT_FLOOR_LENGTH
    default_floor_width: float = DEFAULT_FLOOR_WIDTH
    min_floor_extent: float = MIN_FLOOR_EXTENT
    default_floor_gap: float = DEFAULT_FLOOR_GAP
    fallback_spacing: float = FALLBACK_SPACING
    cross_type_order: Tuple[str, ...] = ()

    def __post_init__(self):
        # frozen: write the normalized tables through object.__setattr__
        object.__setattr__(self, "box_specs", {normalize_tag(t): s for t, s in self.box_specs.items()})
        object.__setattr__(
            self, "type_center_offsets",
            {normalize_tag(t): tuple(o) for t, o in self.type_center_offsets.items()},
        )
        object.__setattr__(self, "cross_type_order", tuple(normalize_tag(t) for t in self.cross_type_order))
        if self.spacing < 0:
            raise ValueError(f"spacing must be >= 0, got {self.spacing}")
        if self.min_floor_extent <= 0:
            raise ValueError(f"min_floor_extent must be > 0, got {self.min_floor_extent}")
        if self.fallback_spacing <= 0:
            raise ValueError(f"fallback_spacing must be > 0, got {self.fallback_spacing}")
        for tag in self.cross_type_order:
            if tag not in self.box_specs:
                raise ValueError(f"cross_type_order names unregistered box type {tag!r}")

    def offset_for(self, type_tag: str) -> Tuple[float, float]:
        return self.type_center_offsets.get(normalize_tag(type_tag), (0.0, 0.0))

    def search_order(self) -> Tuple[str, ...]:
        """Type tags in cross-type fallback priority."""
        if self.cross_type_order:
            return tuple(self.cross_type_order)
        return tuple(self.box_specs.keys())


def default_config() -> PlacementConfig:
    return PlacementConfig()


def config_from_env(base: PlacementConfig = None) -> PlacementConfig:
    """Override scalar shelf settings from SHELFSLOT_* environment variables."""
    base = base or default_config()
    overrides = {}
    env_map = {
        "SHELFSLOT_SPACING": "spacing",
        "SHELFSLOT_FLOOR_LENGTH": "default_floor_length",
        "SHELFSLOT_FLOOR_WIDTH": "default_floor_width",
        "SHELFSLOT_FALLBACK_SPACING": "fallback_spacing",
    }
    for env_name, attr in env_map.items():
        raw = os.environ.get(env_name)
        if raw is None or raw.strip() == "":
            continue
        try:
            overrides[attr] = float(raw)
        except ValueError:
            raise ValueError(f"{env_name} must be a number, got {raw!r}") from None
    if not overrides:
        return base
    return replace(base, **overrides)
