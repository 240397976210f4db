"""
Error taxonomy for patch operations.
"""

from typing import Optional


class PatcherError(Exception):
    """Base class for every failure raised by markpatch."""


class MissingArtifactError(PatcherError):
    """The artifact to patch does not exist."""

    def __init__(self, path: str, hint: Optional[str] = None):
        self.path = path
        self.hint = hint
        message = f"File not found: {path}"
        if hint:
            message = f"{message}\n{hint}"
        super().__init__(message)


class MissingAnchorError(PatcherError):
    """The artifact exists but does not contain the insertion anchor."""

    def __init__(self, anchor: str, path: Optional[str] = None):
        self.anchor = anchor
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f"Could not find {anchor!r}{where}")


class ArtifactIOError(PatcherError):
    """Reading or writing the artifact failed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"I/O failure on {path}: {reason}")


class InvalidDescriptorError(PatcherError, ValueError):
    """A patch descriptor cannot be applied safely."""


class ConfigError(PatcherError):
    """A patch configuration file could not be loaded."""
