import pytest

from shelfslot.config import PlacementConfig
from shelfslot.models import BoxSpec


@pytest.fixture
def flat_config():
    """Default box table, no per-type offsets, one layer per floor."""
    return PlacementConfig(
        type_center_offsets={"A": (0.0, 0.0), "B": (0.0, 0.0), "C": (0.0, 0.0), "D": (0.0, 0.0)},
        floor_base_elevations={1: 0.0, 2: 0.5},
    )


@pytest.fixture
def split_config():
    """Two same-size types, each with a single-slot sub-zone on a 1.0 x 0.5 floor."""
    return PlacementConfig(
        box_specs={
            "A": BoxSpec(0.5, 0.5, 0.45),
            "L": BoxSpec(0.5, 0.5, 0.45),
        },
        type_center_offsets={"A": (-0.25, 0.0), "L": (0.25, 0.0)},
        floor_base_elevations={1: 0.0, 2: 0.5},
    )
