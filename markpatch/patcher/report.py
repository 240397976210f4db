from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from markpatch.errors import MissingAnchorError, MissingArtifactError


class PatchStatus(Enum):
    """Outcome of a single patch invocation."""
    ALREADY_PATCHED = "already-patched"
    PATCHED = "patched"
    ARTIFACT_MISSING = "artifact-missing"
    ANCHOR_MISSING = "anchor-missing"


@dataclass
class PatchResult:
    status: PatchStatus
    artifact_path: str
    message: str
    marker: Optional[str] = None
    anchor: Optional[str] = None
    hint: Optional[str] = None
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return self.status in (PatchStatus.PATCHED, PatchStatus.ALREADY_PATCHED)

    @property
    def changed(self) -> bool:
        return self.status == PatchStatus.PATCHED and not self.dry_run

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def raise_for_status(self) -> None:
        """Raise the matching PatcherError when the patch did not apply."""
        if self.status == PatchStatus.ARTIFACT_MISSING:
            raise MissingArtifactError(self.artifact_path, self.hint)
        if self.status == PatchStatus.ANCHOR_MISSING:
            raise MissingAnchorError(self.anchor or "", self.artifact_path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "artifact_path": self.artifact_path,
            "message": self.message,
            "ok": self.ok,
            "changed": self.changed,
            "dry_run": self.dry_run,
            "marker": self.marker,
            "anchor": self.anchor,
        }
