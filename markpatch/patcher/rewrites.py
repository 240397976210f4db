from __future__ import annotations

from typing import Tuple

from markpatch.errors import MissingAnchorError
from .descriptor import PatchDescriptor
from .report import PatchStatus


def is_patched(text: str, descriptor: PatchDescriptor) -> bool:
    return descriptor.marker in text


def find_anchor(text: str, descriptor: PatchDescriptor) -> int:
    # First occurrence wins when the anchor repeats
    return text.find(descriptor.anchor)


def splice_payload(text: str, descriptor: PatchDescriptor) -> str:
    """
    Insert marker and payload immediately before the first anchor.

    Everything from the anchor onward is kept as-is.

    Raises:
        MissingAnchorError: If the anchor does not occur in text
    """
    index = find_anchor(text, descriptor)
    if index == -1:
        raise MissingAnchorError(descriptor.anchor)
    return text[:index] + descriptor.insertion + text[index:]


def patch_text(text: str, descriptor: PatchDescriptor) -> Tuple[PatchStatus, str]:
    """
    Decide what a patch does to text without touching any file.

    Returns the status together with the resulting text, which is the
    input unchanged unless the status is PATCHED.
    """
    if is_patched(text, descriptor):
        return PatchStatus.ALREADY_PATCHED, text
    try:
        return PatchStatus.PATCHED, splice_payload(text, descriptor)
    except MissingAnchorError:
        return PatchStatus.ANCHOR_MISSING, text
