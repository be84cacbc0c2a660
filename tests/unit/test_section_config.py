"""Unit tests for section definitions loaded from YAML."""

from pathlib import Path

import pytest

from statusdeck.contexts.ingest.section_config import (
    DEFAULT_SECTION_CONFIG_PATH,
    CollectorVariant,
    SectionConfigRegistry,
    SectionSpec,
)


@pytest.mark.unit
def test_packaged_config():
    """Packaged sections.yaml defines the four sections in slide order."""
    config = SectionConfigRegistry(DEFAULT_SECTION_CONFIG_PATH).get_config()

    assert [spec.key for spec in config.sections] == ["accomplishments", "goals", "blockers", "risks"]
    assert config.default_section == "General"
    assert "No blockers" in config.placeholder_markers

    assert config.get("accomplishments").match_fragment == "Accomplishments Last Period"
    assert config.get("blockers").match_fragment == "Blockers"
    assert config.get("risks").match_fragment == "Critical Risks"
    assert config.get("goals").variant is CollectorVariant.GROUPED
    assert config.get("risks").variant is CollectorVariant.SIMPLE


@pytest.mark.unit
def test_registry_caches():
    registry = SectionConfigRegistry(DEFAULT_SECTION_CONFIG_PATH)
    first = registry.get_config()

    assert registry.is_cached(DEFAULT_SECTION_CONFIG_PATH)
    assert registry.get_config() is first

    registry.clear_cache()
    assert not registry.is_cached(DEFAULT_SECTION_CONFIG_PATH)


@pytest.mark.unit
def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        SectionConfigRegistry(tmp_path / "sections.yaml").get_config()


@pytest.mark.unit
def test_missing_section_rejected(tmp_path):
    config_path = tmp_path / "sections.yaml"
    config_path.write_text(
        "sections:\n"
        "  accomplishments: {fragment: Done, variant: grouped}\n"
        "  goals: {fragment: Next, variant: grouped}\n"
    )
    with pytest.raises(ValueError, match="blockers"):
        SectionConfigRegistry().get_config(config_path)


@pytest.mark.unit
def test_unknown_variant_rejected(tmp_path):
    config_path = tmp_path / "sections.yaml"
    config_path.write_text(
        "sections:\n"
        + "".join(
            f"  {key}: {{fragment: {key}, variant: fancy}}\n"
            for key in ("accomplishments", "goals", "blockers", "risks")
        )
    )
    with pytest.raises(ValueError, match="fancy"):
        SectionConfigRegistry().get_config(config_path)


@pytest.mark.unit
def test_match_fragment_without_separator():
    spec = SectionSpec("goals", "Goals / Plans", "", CollectorVariant.GROUPED)
    assert spec.match_fragment == "Goals / Plans"


@pytest.mark.unit
def test_alternate_config_path_is_path_like():
    registry = SectionConfigRegistry()
    config = registry.get_config(str(DEFAULT_SECTION_CONFIG_PATH))

    assert registry.is_cached(Path(DEFAULT_SECTION_CONFIG_PATH))
    assert config.get("goals").fragment == "Goals This Period"
