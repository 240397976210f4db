from .descriptor import PatchDescriptor
from .report import PatchResult, PatchStatus
from .rewrites import is_patched, find_anchor, splice_payload, patch_text
from .patcher import PatchJob, apply_patch, apply_patches

__all__ = [
    "PatchDescriptor",
    "PatchResult",
    "PatchStatus",
    "PatchJob",
    "is_patched",
    "find_anchor",
    "splice_payload",
    "patch_text",
    "apply_patch",
    "apply_patches",
]
