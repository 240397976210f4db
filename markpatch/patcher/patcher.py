from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from markpatch.errors import ArtifactIOError
from .descriptor import PatchDescriptor
from .report import PatchResult, PatchStatus
from .rewrites import patch_text

logger = logging.getLogger(__name__)

DEFAULT_HINT = "Run the upstream build step first to generate it."


@dataclass(frozen=True)
class PatchJob:
    """A descriptor bound to the artifact it applies to."""
    artifact: Path
    descriptor: PatchDescriptor
    encoding: str = "utf-8"
    hint: Optional[str] = None


def _read_text(path: Path, encoding: str) -> str:
    # newline="" keeps \r\n and lone \r exactly as found
    try:
        with open(path, "r", encoding=encoding, newline="") as f:
            return f.read()
    except (OSError, LookupError, UnicodeDecodeError) as e:
        raise ArtifactIOError(str(path), str(e)) from e


def _write_text(path: Path, text: str, encoding: str) -> None:
    try:
        with open(path, "w", encoding=encoding, newline="") as f:
            f.write(text)
    except (OSError, LookupError, UnicodeEncodeError) as e:
        raise ArtifactIOError(str(path), str(e)) from e


def apply_patch(
    artifact_path: Union[str, Path],
    descriptor: PatchDescriptor,
    encoding: str = "utf-8",
    dry_run: bool = False,
    hint: Optional[str] = None,
) -> PatchResult:
    """
    Apply descriptor to the artifact at artifact_path at most once.

    Args:
        artifact_path: File produced by an upstream build
        descriptor: Marker, anchor and payload to apply
        encoding: Text encoding used for both read and write
        dry_run: Report the outcome without writing
        hint: Corrective action shown when the artifact is missing

    Returns:
        PatchResult describing the outcome

    Raises:
        ArtifactIOError: If the artifact exists but cannot be read or written
    """
    path = Path(artifact_path)
    hint = hint or DEFAULT_HINT

    def result(status: PatchStatus, message: str) -> PatchResult:
        return PatchResult(
            status=status,
            artifact_path=str(path),
            message=message,
            marker=descriptor.marker,
            anchor=descriptor.anchor,
            hint=hint,
            dry_run=dry_run,
        )

    if not path.is_file():
        logger.debug(f"Artifact {path} does not exist")
        return result(PatchStatus.ARTIFACT_MISSING, f"File not found: {path}")

    original = _read_text(path, encoding)
    status, patched = patch_text(original, descriptor)

    if status == PatchStatus.ALREADY_PATCHED:
        logger.info(f"{path} already carries marker {descriptor.marker!r}")
        return result(status, f"{path.name} already patched, skipping.")

    if status == PatchStatus.ANCHOR_MISSING:
        logger.warning(f"Anchor {descriptor.anchor!r} not found in {path}")
        return result(status, f"Could not find {descriptor.anchor!r} in {path}.")

    if dry_run:
        return result(status, f"{path} would be patched.")

    _write_text(path, patched, encoding)
    logger.info(f"Wrote {len(patched) - len(original)} characters into {path}")
    return result(status, f"Patched {path}.")


def apply_patches(jobs: Iterable[PatchJob], dry_run: bool = False) -> List[PatchResult]:
    """Apply jobs in order, stopping after the first one that fails."""
    results: List[PatchResult] = []
    for job in jobs:
        res = apply_patch(job.artifact, job.descriptor, encoding=job.encoding, dry_run=dry_run, hint=job.hint)
        results.append(res)
        if not res.ok:
            break
    return results
