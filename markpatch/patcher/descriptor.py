from __future__ import annotations

from dataclasses import dataclass

from markpatch.errors import InvalidDescriptorError


@dataclass(frozen=True)
class PatchDescriptor:
    """What to insert, where, and how to recognise that it is already there."""
    marker: str
    anchor: str
    payload: str
    # Written after the marker and after the payload
    separator: str = ""

    def __post_init__(self):
        if not self.marker:
            raise InvalidDescriptorError("marker must not be empty")
        if not self.anchor:
            raise InvalidDescriptorError("anchor must not be empty")

    @property
    def insertion(self) -> str:
        return self.marker + self.separator + self.payload + self.separator
