"""
Patch configuration loading.

A configuration file is YAML (JSON works too) holding either a single job:

    artifact: .mastra/output/studio/index.html
    marker: "<!-- mastra-config-injected -->"
    anchor: "<script>"
    payload_file: studio-config.html
    separator: "\\n    "

or a ``patches:`` list of such mappings, applied in order.
"""

import codecs
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .errors import ConfigError, InvalidDescriptorError
from .patcher import PatchDescriptor, PatchJob

logger = logging.getLogger(__name__)

ROOT_ENV_VAR = "MARKPATCH_ROOT"


def get_root(root: Optional[Union[str, Path]] = None) -> Path:
    """
    Get the directory relative artifact paths resolve against.

    Args:
        root: Explicit root; wins over the environment

    Returns:
        Path: Resolved root directory
    """
    if root is None:
        root = os.environ.get(ROOT_ENV_VAR, ".")
    return Path(root).resolve()


def resolve_artifact(artifact: Union[str, Path], root: Optional[Union[str, Path]] = None) -> Path:
    path = Path(artifact).expanduser()
    if path.is_absolute():
        return path
    return get_root(root) / path


class PatchJobConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    artifact: str
    marker: str
    anchor: str
    payload: Optional[str] = None
    payload_file: Optional[str] = None
    separator: str = ""
    encoding: str = "utf-8"
    hint: Optional[str] = None

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError:
            raise ValueError(f"unknown encoding: {value}")
        return value

    @model_validator(mode="after")
    def _one_payload_source(self):
        if (self.payload is None) == (self.payload_file is None):
            raise ValueError("exactly one of 'payload' or 'payload_file' is required")
        return self


class PatchFileConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    patches: List[PatchJobConfig]


def _read_payload_file(payload_file: str, base_dir: Path, encoding: str) -> str:
    path = Path(payload_file).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    try:
        with open(path, "r", encoding=encoding, newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read payload file {path}: {e}") from e


def build_job(
    cfg: PatchJobConfig,
    base_dir: Optional[Path] = None,
    root: Optional[Union[str, Path]] = None,
) -> PatchJob:
    """Turn a validated job config into a PatchJob."""
    payload = cfg.payload
    if payload is None:
        payload = _read_payload_file(cfg.payload_file, base_dir or Path.cwd(), cfg.encoding)
    try:
        descriptor = PatchDescriptor(
            marker=cfg.marker,
            anchor=cfg.anchor,
            payload=payload,
            separator=cfg.separator,
        )
    except InvalidDescriptorError as e:
        raise ConfigError(str(e)) from e
    return PatchJob(
        artifact=resolve_artifact(cfg.artifact, root),
        descriptor=descriptor,
        encoding=cfg.encoding,
        hint=cfg.hint,
    )


def parse_jobs(
    data: Any,
    base_dir: Optional[Path] = None,
    root: Optional[Union[str, Path]] = None,
    source: str = "<config>",
) -> List[PatchJob]:
    """Validate already-loaded configuration data into jobs."""
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: expected a mapping at top level")
    try:
        if "patches" in data:
            configs = PatchFileConfig(**data).patches
        else:
            configs = [PatchJobConfig(**data)]
    except ValidationError as e:
        raise ConfigError(f"{source}: {e}") from e
    if not configs:
        raise ConfigError(f"{source}: no patches configured")
    return [build_job(cfg, base_dir=base_dir, root=root) for cfg in configs]


def load_jobs(config_path: Union[str, Path], root: Optional[Union[str, Path]] = None) -> List[PatchJob]:
    """
    Load patch jobs from a YAML or JSON file.

    Args:
        config_path: Path to the configuration file
        root: Directory relative artifact paths resolve against

    Returns:
        List of PatchJob in file order

    Raises:
        ConfigError: If the file is unreadable or invalid
    """
    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data: Dict[str, Any] = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    jobs = parse_jobs(data, base_dir=path.resolve().parent, root=root, source=str(path))
    logger.debug(f"Loaded {len(jobs)} patch job(s) from {path}")
    return jobs
