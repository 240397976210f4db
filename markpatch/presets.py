"""
Registry of built-in patch presets.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional
import logging

from .patcher import PatchDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Preset:
    name: str
    description: str
    artifact: str
    descriptor: PatchDescriptor
    hint: Optional[str] = None


MASTRA_STUDIO_SCRIPT = """<script>
  const config = {
    baseUrl: window.location.origin,
    headers: {},
    isLoading: false
  };
  localStorage.setItem('mastra-studio-config', JSON.stringify(config));
</script>"""

MASTRA_STUDIO = Preset(
    name="mastra-studio",
    description="Seed the Mastra studio config so it talks to the serving origin",
    artifact=".mastra/output/studio/index.html",
    descriptor=PatchDescriptor(
        marker="<!-- mastra-config-injected -->",
        anchor="<script>",
        payload=MASTRA_STUDIO_SCRIPT,
        separator="\n    ",
    ),
    hint='Run "pnpm mastraDev" first to generate the studio files.',
)


# Registry of all available presets
AVAILABLE_PRESETS: Dict[str, Preset] = {
    MASTRA_STUDIO.name: MASTRA_STUDIO,
}


def list_presets() -> List[Preset]:
    """List all available presets, sorted by name."""
    return [AVAILABLE_PRESETS[name] for name in sorted(AVAILABLE_PRESETS)]


def get_preset(name: str) -> Optional[Preset]:
    """Get a preset by name, ignoring case."""
    preset = AVAILABLE_PRESETS.get(name.strip().lower())
    if preset is None:
        logger.debug(f"Unknown preset: {name}")
    return preset
