"""Tests for template selection and sample previews."""

import pytest
from cvmaker.exceptions import UnknownTemplateError
from cvmaker.services.template_selector import preview_template, select_template, template_cards


def test_select_template(sample_cv):
    updated = select_template(sample_cv, "creative-portfolio")

    assert updated.template == "creative-portfolio"
    assert updated.updatedAt != sample_cv.updatedAt
    assert updated.workExperience == sample_cv.workExperience
    assert sample_cv.template == "europass"


def test_select_unknown_template(sample_cv):
    with pytest.raises(UnknownTemplateError) as exc_info:
        select_template(sample_cv, "retro-90s")

    assert exc_info.value.template_id == "retro-90s"
    assert str(exc_info.value) == "Unknown template: retro-90s"


def test_preview_template_uses_sample_data():
    preview = preview_template("europass", "en")

    assert preview.template_id == "europass"
    assert preview.document.header.fullName == "Anna Bērziņa"
    assert "CURRICULUM VITAE" in preview.html


def test_preview_template_defaults_to_latvian():
    assert preview_template("modern-professional").document.locale == "lv"


def test_preview_unknown_template():
    preview = preview_template("retro-90s", "ru")

    assert preview.layout == "minimal"
    assert preview.document.sections


def test_template_cards():
    cards = template_cards()

    assert len(cards) == 8
    europass = cards[0]
    assert europass["id"] == "europass"
    assert europass["isPremium"] is False
    assert europass["supportedLocales"] == ["lv", "ru", "en"]
    assert europass["style"]["primaryColor"] == "#003d82"


def test_template_cards_by_category():
    assert [card["id"] for card in template_cards("traditional")] == ["traditional-business"]
