"""Template selection and sample-data previews for the template picker."""

from typing import Any, Dict, List, Optional
from cvmaker.exceptions import UnknownTemplateError
from cvmaker.models.cv_models import CVRecord, utc_now_iso
from cvmaker.services.cv_data_loader import CVDataLoader, get_data_loader
from cvmaker.services.preview_renderer import PreviewRenderer, RenderedPreview, get_preview_renderer
from cvmaker.services.template_registry import TemplateRegistry, get_template_registry


def select_template(
    record: CVRecord,
    template_id: str,
    registry: Optional[TemplateRegistry] = None,
) -> CVRecord:
    """
    Switch the active template of a record.

    Args:
        record: Current record
        template_id: Registered template id
        registry: Template registry. Defaults to the shared registry

    Returns:
        CVRecord: Updated copy with the new template and a fresh ``updatedAt``

    Raises:
        UnknownTemplateError: If the id is not in the registry
    """
    registry = registry or get_template_registry()
    if not registry.is_registered(template_id):
        raise UnknownTemplateError(template_id)
    return record.model_copy(update={"template": template_id, "updatedAt": utc_now_iso()})


def preview_template(
    template_id: str,
    locale: Optional[str] = None,
    renderer: Optional[PreviewRenderer] = None,
    loader: Optional[CVDataLoader] = None,
) -> RenderedPreview:
    """
    Render the bundled sample CV through a template.

    Any id can be previewed; unknown ids show the minimal layout.

    Args:
        template_id: Template id
        locale: Locale of the sample CV. Defaults to Latvian
        renderer: Preview renderer. Defaults to the shared renderer
        loader: Data loader. Defaults to the shared loader

    Returns:
        RenderedPreview: Rendered sample CV
    """
    renderer = renderer or get_preview_renderer()
    loader = loader or get_data_loader()
    sample = loader.load_sample_cv(locale) if locale else loader.load_sample_cv()
    return renderer.render(sample, template_id, locale)


def template_cards(
    category: Optional[str] = None,
    registry: Optional[TemplateRegistry] = None,
) -> List[Dict[str, Any]]:
    """
    Metadata and style tokens for the template picker grid.

    Args:
        category: Optional category filter
        registry: Template registry. Defaults to the shared registry

    Returns:
        List[Dict[str, Any]]: One card per template, in catalogue order
    """
    registry = registry or get_template_registry()
    return [
        {
            "id": template.id,
            "name": template.name,
            "description": template.description,
            "category": template.category,
            "isPremium": template.isPremium,
            "supportedLocales": [locale.value for locale in template.supportedLocales],
            "style": template.style.model_dump(),
        }
        for template in registry.list_templates(category)
    ]
