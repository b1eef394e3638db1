"""Placement pass state — holds the latest pass per floor in memory."""

import logging
from typing import Dict, Optional, Sequence, Tuple
import uuid

from shelfslot.config import default_config
from shelfslot.models import ContainerRecord, FloorDescriptor, PlacementReport
from shelfslot.solvers.box_registry import BoxSpecRegistry
from shelfslot.solvers.placement_solver import plan_floor

logger = logging.getLogger("shelfslot.state")


class PlacementState:
    """In-memory store that hands out results of the current pass only.

    Every selection change runs a new pass; the previous pass for the same
    floor is dropped so its id stops resolving.
    """

    def __init__(self, config=None):
        self.config = config or default_config()
        self.registry = BoxSpecRegistry.from_config(self.config)
        self._passes: Dict[str, Tuple[int, PlacementReport]] = {}
        self._current: Dict[int, str] = {}

    def run_pass(self, descriptor: FloorDescriptor, containers: Sequence[ContainerRecord]) -> str:
        """Compute placements for one floor and return the new pass ID."""
        report = plan_floor(descriptor, containers, self.config, self.registry)
        pass_id = str(uuid.uuid4())[:8]
        previous = self._current.get(descriptor.floor_index)
        if previous is not None:
            self._passes.pop(previous, None)
            logger.debug("Pass %s superseded by %s on floor %s", previous, pass_id, descriptor.floor_index)
        self._passes[pass_id] = (descriptor.floor_index, report)
        self._current[descriptor.floor_index] = pass_id
        return pass_id

    def get_report(self, pass_id: str) -> Optional[PlacementReport]:
        entry = self._passes.get(pass_id)
        return entry[1] if entry else None

    def get_placements(self, pass_id: str):
        report = self.get_report(pass_id)
        if report is None:
            return None
        return list(report.placements)

    def current_pass(self, floor_index: int) -> Optional[str]:
        return self._current.get(floor_index)

    def is_current(self, pass_id: str) -> bool:
        return pass_id in self._passes

    def clear_floor(self, floor_index: int) -> bool:
        pass_id = self._current.pop(floor_index, None)
        if pass_id is None:
            return False
        self._passes.pop(pass_id, None)
        return True
