"""Closed table of container box types."""

from typing import Dict, Iterator, Optional, Tuple

from shelfslot.models import BoxSpec, normalize_tag


class UnknownBoxType(KeyError):
    """A container references a box type that is not registered."""

    def __init__(self, type_tag, container_id: Optional[str] = None):
        super().__init__(type_tag)
        self.type_tag = type_tag
        self.container_id = container_id

    def __str__(self):
        if self.container_id is not None:
            return f"Unknown box type {self.type_tag!r} on container {self.container_id!r}"
        return f"Unknown box type {self.type_tag!r}"


class BoxSpecRegistry:
    """Maps type tags to BoxSpecs.  Immutable once built."""

    def __init__(self, specs: Dict[str, BoxSpec]):
        if not specs:
            raise ValueError("BoxSpecRegistry needs at least one box type")
        self._specs: Dict[str, BoxSpec] = {}
        for tag, spec in specs.items():
            if not isinstance(spec, BoxSpec):
                spec = BoxSpec(*spec)
            self._specs[self.normalize(tag)] = spec

    @classmethod
    def from_config(cls, config) -> "BoxSpecRegistry":
        return cls(config.box_specs)

    @staticmethod
    def normalize(type_tag) -> str:
        return normalize_tag(type_tag)

    def lookup(self, type_tag, container_id: Optional[str] = None) -> BoxSpec:
        if type_tag is None:
            raise UnknownBoxType(type_tag, container_id)
        try:
            return self._specs[self.normalize(type_tag)]
        except KeyError:
            raise UnknownBoxType(type_tag, container_id) from None

    def __contains__(self, type_tag) -> bool:
        return type_tag is not None and self.normalize(type_tag) in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def tags(self) -> Tuple[str, ...]:
        return tuple(self._specs.keys())

    def items(self) -> Iterator[Tuple[str, BoxSpec]]:
        return iter(self._specs.items())
