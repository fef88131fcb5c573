"""Tests for the template registry."""

import pytest
from cvmaker.models.template_models import TemplateStyle
from cvmaker.services.template_registry import TemplateRegistry

TEMPLATE_IDS = [
    "europass",
    "modern-professional",
    "traditional-business",
    "creative-designer",
    "creative-minimalist",
    "creative-colorful",
    "creative-infographic",
    "creative-portfolio",
]


@pytest.fixture
def registry() -> TemplateRegistry:
    return TemplateRegistry()


def write_catalogue(tmp_path, body: str):
    path = tmp_path / "templates.yaml"
    path.write_text(body, encoding="utf-8")
    return path


def test_list_templates_in_catalogue_order(registry):
    assert [t.id for t in registry.list_templates()] == TEMPLATE_IDS


def test_list_templates_by_category(registry):
    creative = registry.list_templates("creative")

    assert len(creative) == 5
    assert all(t.category == "creative" for t in creative)
    assert len(registry.list_templates("all")) == 8


def test_get_template(registry):
    template = registry.get_template("europass")

    assert template.name == "Europass"
    assert template.category == "europass"
    assert registry.get_template("retro-90s") is None


def test_is_premium(registry):
    assert registry.is_premium("creative-designer") is True
    assert registry.is_premium("europass") is False
    assert registry.is_premium("retro-90s") is False


def test_styles_for(registry):
    """Test style tokens, with the default bundle for unknown ids."""
    assert registry.styles_for("europass").primaryColor == "#003d82"
    assert registry.styles_for("retro-90s") == TemplateStyle()


def test_layout_for_unknown_template_is_minimal(registry):
    assert registry.layout_for("europass") == "europass"
    assert registry.layout_for("creative-colorful") == "creative"
    assert registry.layout_for("modern") == "minimal"


def test_groups_skills(registry):
    assert registry.groups_skills("traditional-business") is True
    assert registry.groups_skills("modern-professional") is False
    assert registry.groups_skills("retro-90s") is False


def test_free_and_premium_templates(registry):
    assert [t.id for t in registry.free_templates()] == TEMPLATE_IDS[:3]
    assert [t.id for t in registry.premium_templates()] == TEMPLATE_IDS[3:]


def test_categories(registry):
    assert registry.categories() == ["europass", "modern", "traditional", "creative"]


def test_duplicate_template_id_is_rejected(tmp_path):
    path = write_catalogue(tmp_path, """
templates:
  - {id: plain, name: Plain, category: modern}
  - {id: plain, name: Plain again, category: modern}
""")
    with pytest.raises(ValueError, match="Duplicate template id"):
        TemplateRegistry(path)


def test_unknown_category_is_rejected(tmp_path):
    path = write_catalogue(tmp_path, """
templates:
  - {id: plain, name: Plain, category: futuristic}
""")
    with pytest.raises(ValueError, match="Invalid template catalogue"):
        TemplateRegistry(path)


def test_missing_catalogue(tmp_path):
    with pytest.raises(FileNotFoundError):
        TemplateRegistry(tmp_path / "missing.yaml")
