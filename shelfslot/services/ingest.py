"""Conversion of dashboard API records into engine inputs.

Decides once, at the data boundary, whether a container carries an explicit
stored position so the solver never re-derives it.
"""

import logging
import math
import re
from typing import Any, Dict, Iterable, List, Optional

from shelfslot.models import ContainerRecord, FloorDescriptor, dict_to_rect

logger = logging.getLogger("shelfslot.ingest")

_FLOOR_SUFFIX = re.compile(r"-F0*([0-9]+)$", re.IGNORECASE)


def parse_floor_number(floor_code: Optional[str]) -> int:
    """``SH01-F03`` -> 3; falls back to the last numeric group, then 1."""
    if not floor_code:
        return 1
    m = _FLOOR_SUFFIX.search(floor_code)
    if m:
        return int(m.group(1))
    last = floor_code.split("-")[-1]
    digits = re.sub(r"\D", "", last)
    return int(digits) if digits else 1


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(f) else f


def container_from_dict(d: Dict[str, Any]) -> ContainerRecord:
    """Build a ContainerRecord from a container API item.

    Stored positions are recorded in the shelf frame (positionX across the
    shelf, positionZ along it), so the engine position is (Z, Y, X).
    """
    container_id = d.get("containerCode") or d.get("id")
    if container_id is None:
        raise ValueError(f"Container record has no containerCode or id: {d}")

    px = _as_float(d.get("positionX"))
    py = _as_float(d.get("positionY"))
    pz = _as_float(d.get("positionZ"))
    explicit = None
    if px is not None and py is not None and pz is not None:
        explicit = (pz, py, px)
    elif any(d.get(k) is not None for k in ("positionX", "positionY", "positionZ")):
        logger.warning("Container %s has a partial or invalid stored position, ignoring it", container_id)

    layer = d.get("layer")
    return ContainerRecord(
        id=str(container_id),
        box_type=d.get("type") or "A",
        explicit_position=explicit,
        explicit_layer=int(layer) if layer is not None else None,
    )


def containers_from_dicts(items: Iterable[Dict[str, Any]]) -> List[ContainerRecord]:
    return [container_from_dict(d) for d in items]


def floor_descriptor_from_dict(d: Dict[str, Any]) -> FloorDescriptor:
    """Build a FloorDescriptor from floor API data plus scene-measured bounds."""
    if d.get("floorNumber") is not None:
        floor_index = int(d["floorNumber"])
    else:
        floor_index = parse_floor_number(d.get("floorCode"))

    rotation = d.get("rotationY")
    center = d.get("center")
    return FloorDescriptor(
        floor_index=floor_index,
        bounds=dict_to_rect(d["bounds"]) if d.get("bounds") else None,
        length=_as_float(d.get("length")),
        width=_as_float(d.get("width")),
        center=(float(center["x"]), float(center["z"])) if center else None,
        rotation=float(rotation) if isinstance(rotation, (int, float)) else None,
    )
