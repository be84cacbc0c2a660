"""
Section definitions for team slides.

Definitions live in sections.yaml next to this module (override with the
SECTION_CONFIG_PATH environment variable) and are loaded with OmegaConf.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()
DEFAULT_SECTION_CONFIG_PATH = Path(__file__).parent / "sections.yaml"
SECTION_CONFIG_PATH = Path(os.getenv("SECTION_CONFIG_PATH", str(DEFAULT_SECTION_CONFIG_PATH)))

SECTION_KEYS = ("accomplishments", "goals", "blockers", "risks")


class CollectorVariant(Enum):
    """How a section box is collected."""

    GROUPED = "grouped"
    SIMPLE = "simple"


@dataclass(frozen=True)
class SectionSpec:
    """
    One section box to extract from a team slide.

    Attributes:
        key: ParsedTeam attribute the items are stored under
        fragment: Human-readable section title (e.g., "Goals This Period")
        separator: Fragment is truncated before this separator for matching
        variant: Grouped or simple collection
    """

    key: str
    fragment: str
    separator: str
    variant: CollectorVariant

    @property
    def match_fragment(self) -> str:
        """Truncated fragment actually searched for in box titles."""
        if not self.separator:
            return self.fragment
        return self.fragment.split(self.separator)[0]


@dataclass(frozen=True)
class SectionConfig:
    """All section definitions plus shared collection settings."""

    default_section: str
    placeholder_markers: Tuple[str, ...]
    sections: Tuple[SectionSpec, ...]

    def get(self, key: str) -> SectionSpec:
        for spec in self.sections:
            if spec.key == key:
                return spec
        raise KeyError(f"No section definition for '{key}'")


class SectionConfigRegistry:
    """
    Registry for loading and caching section configurations.

    Configs are keyed by file path so tests can load alternatives without
    clearing the default.
    """

    def __init__(self, default_path: Optional[Path] = None):
        self.default_path = default_path if default_path is not None else SECTION_CONFIG_PATH
        self._cache: Dict[Path, SectionConfig] = {}

    def get_config(self, config_path: Optional[Path] = None) -> SectionConfig:
        """
        Get a section config, loading and caching it if necessary.

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If a required section or the variant is invalid
        """
        config_path = Path(config_path) if config_path is not None else self.default_path

        if config_path in self._cache:
            return self._cache[config_path]

        if not config_path.exists():
            raise FileNotFoundError(f"Section config not found at {config_path}")

        raw = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)
        config = _build_config(raw, config_path)

        self._cache[config_path] = config
        return config

    def clear_cache(self):
        self._cache.clear()

    def is_cached(self, config_path: Path) -> bool:
        return Path(config_path) in self._cache


def _build_config(raw: dict, config_path: Path) -> SectionConfig:
    """Validate raw YAML data and convert it to a SectionConfig."""
    sections_raw = raw.get("sections") or {}

    missing = [key for key in SECTION_KEYS if key not in sections_raw]
    if missing:
        raise ValueError(f"Section config {config_path} is missing: {', '.join(missing)}")

    specs = []
    for key in SECTION_KEYS:
        entry = sections_raw[key]
        try:
            variant = CollectorVariant(entry["variant"])
        except ValueError:
            raise ValueError(
                f"Section '{key}' in {config_path} has unknown variant '{entry['variant']}'"
            )
        specs.append(
            SectionSpec(
                key=key,
                fragment=entry["fragment"],
                separator=entry.get("separator") or "",
                variant=variant,
            )
        )

    return SectionConfig(
        default_section=raw.get("default_section", "General"),
        placeholder_markers=tuple(raw.get("placeholder_markers") or ()),
        sections=tuple(specs),
    )


_registry = SectionConfigRegistry()


def get_section_config(config_path: Optional[Path] = None) -> SectionConfig:
    """Module-level accessor backed by a shared registry."""
    return _registry.get_config(config_path)
