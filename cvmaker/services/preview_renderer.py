"""Service for rendering the on-screen CV preview from Jinja2 layouts."""

from pathlib import Path
from typing import Dict, Optional
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape
from loguru import logger
from pydantic import BaseModel
from cvmaker.models.cv_models import CVRecord
from cvmaker.models.document_models import RenderedDocument
from cvmaker.services.document_builder import DocumentBuilder, get_document_builder
from cvmaker.services.template_registry import DEFAULT_LAYOUT, TemplateRegistry, get_template_registry
from cvmaker.utils.locale_helpers import UI_LABELS, get_label
from cvmaker.utils.template_helpers import register_jinja_filters

# Layout name -> Jinja2 template file
DEFAULT_LAYOUTS: Dict[str, str] = {
    "europass": "preview/europass.html",
    "modern": "preview/modern.html",
    "traditional": "preview/traditional.html",
    "creative": "preview/creative.html",
    "minimal": "preview/minimal.html",
}

# Layouts that draw skill levels as dot ratings
RATING_LAYOUTS = ("modern", "creative")


class RenderedPreview(BaseModel):
    """Result of a preview render."""

    template_id: str
    layout: str
    document: RenderedDocument
    html: str


def create_environment(template_dir: Optional[Path] = None) -> Environment:
    """
    Create the Jinja2 environment shared by the preview and PDF back ends.

    Args:
        template_dir: Directory containing Jinja2 templates. Defaults to cvmaker/templates/

    Returns:
        Environment: Configured environment with the CV filters registered
    """
    if template_dir is None:
        package_dir = Path(__file__).parent.parent
        template_dir = package_dir / "templates"

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    register_jinja_filters(env)
    return env


def locale_labels(locale: str) -> Dict[str, str]:
    """All UI labels for a locale, English where a translation is missing."""
    return {key: get_label(key, locale) for key in UI_LABELS["en"]}


class PreviewRenderer:
    """Service to render CV records through the registered preview layouts."""

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        registry: Optional[TemplateRegistry] = None,
        builder: Optional[DocumentBuilder] = None,
    ):
        """
        Initialize the preview renderer.

        Args:
            template_dir: Directory containing Jinja2 templates. Defaults to cvmaker/templates/
            registry: Template registry. Defaults to the shared registry
            builder: Document builder. Defaults to the shared builder
        """
        self.env = create_environment(template_dir)
        self.registry = registry or get_template_registry()
        self.builder = builder or get_document_builder()
        self._layouts: Dict[str, str] = dict(DEFAULT_LAYOUTS)

    def register_layout(self, name: str, layout: str) -> None:
        """
        Register (or replace) a preview layout.

        Args:
            name: Layout name referenced by the template catalogue
            layout: Jinja2 template path relative to the template directory
        """
        self._layouts[name] = layout

    def layouts(self) -> Dict[str, str]:
        return dict(self._layouts)

    def resolve_layout(self, template_id: str) -> str:
        """
        Layout used for a template id.

        Unknown template ids and templates whose layout isn't registered both
        get the minimal layout.
        """
        layout = self.registry.layout_for(template_id)
        if layout not in self._layouts:
            logger.warning(f"Layout '{layout}' of template '{template_id}' is not registered, using {DEFAULT_LAYOUT}")
            return DEFAULT_LAYOUT
        return layout

    def render(
        self,
        cv: CVRecord,
        template_id: Optional[str] = None,
        locale: Optional[str] = None,
    ) -> RenderedPreview:
        """
        Render a CV record as preview HTML.

        Args:
            cv: CV record
            template_id: Template id. Defaults to the record's active template
            locale: Locale code. Defaults to the record's language

        Returns:
            RenderedPreview: Layout used, the rendered document and its HTML
        """
        template_id = template_id or cv.template
        layout = self.resolve_layout(template_id)
        document = self.builder.build(cv, locale, group_skills=self.registry.groups_skills(template_id))

        context = {
            "document": document,
            "template_id": template_id,
            "layout": layout,
            "style": self.registry.styles_for(template_id),
            "labels": locale_labels(document.locale),
            "show_rating": layout in RATING_LAYOUTS,
        }

        try:
            html = self.env.get_template(self._layouts[layout]).render(**context)
        except TemplateError as e:
            if layout == DEFAULT_LAYOUT:
                raise
            logger.warning(f"Layout '{layout}' failed for CV {cv.id}, using {DEFAULT_LAYOUT}: {e}")
            layout = DEFAULT_LAYOUT
            context["layout"] = layout
            html = self.env.get_template(self._layouts[layout]).render(**context)

        return RenderedPreview(template_id=template_id, layout=layout, document=document, html=html)


# Singleton instance
_preview_renderer: Optional[PreviewRenderer] = None


def get_preview_renderer() -> PreviewRenderer:
    """
    Get or create the preview renderer singleton.

    Returns:
        PreviewRenderer: The renderer instance
    """
    global _preview_renderer
    if _preview_renderer is None:
        _preview_renderer = PreviewRenderer()
    return _preview_renderer
