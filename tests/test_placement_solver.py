"""Tests for sequential container placement."""
import pytest

from shelfslot.config import PlacementConfig, default_config
from shelfslot.models import (
    BoxSpec, ContainerRecord, FloorDescriptor, Rect, report_to_json,
    SOURCE_CROSS_TYPE, SOURCE_EXPLICIT, SOURCE_FALLBACK, SOURCE_SLOT,
)
from shelfslot.solvers.box_registry import BoxSpecRegistry, UnknownBoxType
from shelfslot.solvers.floor_geometry import resolve_floor_geometry
from shelfslot.solvers.placement_solver import assign, fallback_position, plan_floor
from shelfslot.solvers.slot_grid import build_type_grids
from shelfslot.solvers.transforms import clamp_region, clamp_to_bounds, rotate_around
from shelfslot.solvers.validation import validate_placements


SQUARE_FLOOR = FloorDescriptor(floor_index=1, length=1.07, width=1.07)


def _boxes(prefix, box_type, n):
    return [ContainerRecord(id=f"{prefix}{i}", box_type=box_type) for i in range(n)]


def test_simple_pack_fills_grid_in_input_order(flat_config):
    """Four A boxes on a 2x2x1 grid each get their own slot."""
    report = plan_floor(SQUARE_FLOOR, _boxes("c", "A", 4), flat_config)
    assert report.ok
    assert report.slot_grids["A"].total_slots == 4

    placed = report.placements
    assert [p.container_id for p in placed] == ["c0", "c1", "c2", "c3"]
    assert all(p.source == SOURCE_SLOT for p in placed)
    assert all(p.layer == 0 for p in placed)

    expected = [(-0.255, -0.255), (-0.255, 0.255), (0.255, -0.255), (0.255, 0.255)]
    for p, (x, z) in zip(placed, expected):
        assert p.world_position[0] == pytest.approx(x)
        assert p.world_position[1] == pytest.approx(0.0)
        assert p.world_position[2] == pytest.approx(z)

    result = validate_placements(report, BoxSpecRegistry.from_config(flat_config))
    assert result["valid"], result["issues"]


def test_overflow_goes_to_fallback(flat_config):
    """More boxes than all four grids hold: the excess uses the fallback layout."""
    registry = BoxSpecRegistry.from_config(flat_config)
    report = plan_floor(SQUARE_FLOOR, _boxes("c", "A", 12), flat_config)
    total_slots = sum(g.total_slots for g in report.slot_grids.values())
    assert total_slots == 11

    sources = [p.source for p in report.placements]
    assert len(sources) == 12
    assert sources[:4] == [SOURCE_SLOT] * 4
    assert sources[4:] == [SOURCE_FALLBACK] * 8
    for p in report.placements[4:]:
        assert p.layer == 0
        assert p.world_position[1] == pytest.approx(report.geometry.base_elevation)

    result = validate_placements(report, registry)
    assert result["out_of_bounds"] == []
    assert result["overlaps"] == []
    assert result["fallback_overlaps"]


def test_unknown_type_is_reported_and_others_still_placed(flat_config):
    containers = [
        ContainerRecord("c1", "A"),
        ContainerRecord("bad", "Z"),
        ContainerRecord("c3", "A"),
    ]
    report = plan_floor(SQUARE_FLOOR, containers, flat_config)
    assert [p.container_id for p in report.placements] == ["c1", "c3"]
    assert len(report.errors) == 1
    err = report.errors[0]
    assert isinstance(err, UnknownBoxType)
    assert err.type_tag == "Z"
    assert err.container_id == "bad"
    assert not report.ok
    with pytest.raises(UnknownBoxType):
        report.raise_for_errors()
    # c3 still gets the second slot, not the first
    assert report.placements[1].world_position[2] == pytest.approx(0.255)


def test_lowercase_type_tags_are_accepted(flat_config):
    report = plan_floor(SQUARE_FLOOR, [ContainerRecord("c1", "a")], flat_config)
    assert report.ok
    assert report.placements[0].box_type == "A"


def test_explicit_position_takes_precedence():
    """Explicit positions are rotated, clamped and never moved by other boxes."""
    config = default_config()
    registry = BoxSpecRegistry.from_config(config)
    desc = FloorDescriptor(floor_index=2, rotation=0.3)
    explicit = ContainerRecord("fixed", "A", explicit_position=(0.1, 1.8, 0.2), explicit_layer=1)
    far = ContainerRecord("far", "A", explicit_position=(5.0, 1.6, -5.0))

    report = plan_floor(desc, _boxes("c", "A", 5) + [explicit, far], config)
    geometry = report.geometry
    grid = report.slot_grids["A"]
    spec = registry.lookup("A")
    region = clamp_region(grid.bounds, geometry.bounds, spec.depth, spec.lateral)
    dx, dz = config.offset_for("A")
    local_center = (geometry.center[0] + dx, geometry.center[1] + dz)

    by_id = {p.container_id: p for p in report.placements}
    for rec in (explicit, far):
        ex, ey, ez = rec.explicit_position
        want = clamp_to_bounds(rotate_around(local_center, (ex, ez), 0.3), spec.depth, spec.lateral, region)
        got = by_id[rec.id]
        assert got.source == SOURCE_EXPLICIT
        assert got.world_position == (want[0], ey, want[1])

    assert by_id["fixed"].layer == 1
    assert by_id["far"].layer == 0

    alone = plan_floor(desc, [explicit], config)
    assert alone.placements[0].world_position == by_id["fixed"].world_position


def test_slots_avoid_explicit_footprints(flat_config):
    blocker = ContainerRecord("blk", "A", explicit_position=(-0.255, 0.0, -0.255))
    report = plan_floor(SQUARE_FLOOR, [blocker, ContainerRecord("c1", "A")], flat_config)
    c1 = report.placements[1]
    assert c1.source == SOURCE_SLOT
    assert c1.world_position[2] == pytest.approx(0.255)


def test_cross_type_fallback_uses_other_grid(split_config):
    containers = [ContainerRecord("a1", "A"), ContainerRecord("a2", "A"), ContainerRecord("l1", "L")]
    report = plan_floor(FloorDescriptor(floor_index=1, length=1.0, width=0.5), containers, split_config)
    assert report.slot_grids["A"].total_slots == 1
    assert report.slot_grids["L"].total_slots == 1

    a1, a2, l1 = report.placements
    assert a1.source == SOURCE_SLOT
    assert a1.world_position[0] == pytest.approx(-0.25)
    assert a2.source == SOURCE_CROSS_TYPE
    assert a2.box_type == "A"
    assert a2.world_position[0] == pytest.approx(0.25)
    # both sub-zones are used up
    assert l1.source == SOURCE_FALLBACK
    assert l1.world_position[0] == pytest.approx(0.01)
    assert l1.world_position[2] == pytest.approx(0.0)


def test_lowercase_config_keys_keep_offsets_and_cross_type_search():
    config = PlacementConfig(
        box_specs={"a": BoxSpec(0.5, 0.5, 0.45), "l": BoxSpec(0.5, 0.5, 0.45)},
        type_center_offsets={"a": (-0.25, 0.0), "l": (0.25, 0.0)},
        floor_base_elevations={1: 0.0, 2: 0.5},
    )
    assert config.offset_for("a") == (-0.25, 0.0)
    assert config.offset_for("L") == (0.25, 0.0)
    assert config.search_order() == ("A", "L")

    containers = [ContainerRecord("a1", "a"), ContainerRecord("a2", "A")]
    report = plan_floor(FloorDescriptor(floor_index=1, length=1.0, width=0.5), containers, config)
    assert set(report.slot_grids) == {"A", "L"}
    a1, a2 = report.placements
    assert a1.source == SOURCE_SLOT
    assert a1.world_position[0] == pytest.approx(-0.25)
    assert a2.source == SOURCE_CROSS_TYPE
    assert a2.world_position[0] == pytest.approx(0.25)


def test_tall_boxes_do_not_take_upper_layers():
    config = default_config()
    report = plan_floor(FloorDescriptor(floor_index=1), _boxes("d", "D", 8), config)
    assert all(p.layer == 0 for p in report.placements)


def test_second_layer_used_after_first_fills():
    config = default_config()
    report = plan_floor(SQUARE_FLOOR, _boxes("c", "B", 3), config)
    # B: one slot per layer, two layers on floor 1
    layers = [p.layer for p in report.placements]
    assert layers[:2] == [0, 1]
    assert report.placements[1].world_position[1] == pytest.approx(0.28 + 0.45)


def test_slot_elevation_follows_layer_table():
    config = PlacementConfig(
        type_center_offsets={"A": (0.0, 0.0)},
        floor_base_elevations={1: 0.1, 2: 1.1},
    )
    report = plan_floor(SQUARE_FLOOR, _boxes("c", "A", 5), config)
    elevations = report.geometry.base_elevation_by_layer(0.45)
    assert elevations == pytest.approx({0: 0.1, 1: 0.55})

    assert [p.layer for p in report.placements] == [0, 0, 0, 0, 1]
    for p in report.placements:
        assert p.source == SOURCE_SLOT
        assert p.world_position[1] == pytest.approx(elevations[p.layer])


def test_default_offsets_stay_inside_small_floor():
    """Sub-zone offsets push grids past a small floor's edge; boxes still stay on it."""
    config = default_config()
    registry = BoxSpecRegistry.from_config(config)
    types = ["B", "A", "C", "D", "B", "A"]
    containers = [ContainerRecord(f"c{i}", t) for i, t in enumerate(types)]
    report = plan_floor(SQUARE_FLOOR, containers, config)

    assert len(report.placements) == len(containers)
    result = validate_placements(report, registry)
    assert result["out_of_bounds"] == []
    assert result["overlaps"] == []


def test_rotated_floor_stays_in_bounds_without_overlap():
    config = default_config()
    registry = BoxSpecRegistry.from_config(config)
    desc = FloorDescriptor(floor_index=1, bounds=Rect(2.0, 3.7, -0.535, 0.535), rotation=0.4)
    types = ["A", "B", "C", "D", "A", "C", "B", "A", "D", "A", "A", "C"]
    containers = [ContainerRecord(f"c{i}", t) for i, t in enumerate(types)]
    report = plan_floor(desc, containers, config)

    assert len(report.placements) == len(containers)
    result = validate_placements(report, registry)
    assert result["out_of_bounds"] == []
    assert result["overlaps"] == []


def test_assign_is_deterministic():
    config = default_config()
    registry = BoxSpecRegistry.from_config(config)
    geometry = resolve_floor_geometry(FloorDescriptor(floor_index=3, rotation=0.2), config)
    containers = [ContainerRecord(f"c{i}", "ABCD"[i % 4]) for i in range(15)]
    containers.append(ContainerRecord("fixed", "C", explicit_position=(0.0, 3.0, 0.1)))

    first = assign(containers, build_type_grids(geometry, registry, config), geometry, registry, config)
    second = assign(containers, build_type_grids(geometry, registry, config), geometry, registry, config)
    assert first.placements == second.placements
    assert report_to_json(first) == report_to_json(second)


def test_empty_container_list(flat_config):
    report = plan_floor(SQUARE_FLOOR, [], flat_config)
    assert report.placements == []
    assert report.ok


def test_fallback_position_square_grid():
    assert fallback_position(0, 4, (0.0, 0.0)) == pytest.approx((-0.08, -0.05))
    assert fallback_position(3, 4, (0.0, 0.0)) == pytest.approx((0.01, 0.05))
    assert fallback_position(0, 1, (1.0, 2.0)) == pytest.approx((0.92, 2.0))
    # total of zero still yields a position
    assert fallback_position(0, 0, (0.0, 0.0)) == pytest.approx((-0.08, 0.0))
