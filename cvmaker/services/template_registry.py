"""Service exposing the static template catalogue."""

import yaml
from pathlib import Path
from typing import Dict, List, Optional
from loguru import logger
from pydantic import ValidationError
from cvmaker.models.template_models import Template, TemplateStyle

DEFAULT_LAYOUT = "minimal"


class TemplateRegistry:
    """
    Catalogue of valid template ids and their metadata.

    The catalogue is loaded once from ``data/templates.yaml`` and never
    mutated afterwards.
    """

    def __init__(self, catalogue_path: Optional[Path] = None):
        """
        Initialize the registry.

        Args:
            catalogue_path: YAML catalogue file. Defaults to cvmaker/data/templates.yaml

        Raises:
            FileNotFoundError: If the catalogue file doesn't exist
            ValueError: If the catalogue is malformed or has duplicate ids
        """
        if catalogue_path is None:
            package_dir = Path(__file__).parent.parent
            catalogue_path = package_dir / "data" / "templates.yaml"

        self.catalogue_path = catalogue_path
        self._templates: Dict[str, Template] = {}

        for template in self._load(catalogue_path):
            if template.id in self._templates:
                raise ValueError(f"Duplicate template id in {catalogue_path}: {template.id}")
            self._templates[template.id] = template

        logger.debug(f"Loaded {len(self._templates)} templates from {catalogue_path}")

    @staticmethod
    def _load(catalogue_path: Path) -> List[Template]:
        if not catalogue_path.exists():
            raise FileNotFoundError(f"Template catalogue not found: {catalogue_path}")

        try:
            with open(catalogue_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML format in {catalogue_path}: {e}")

        try:
            return [Template(**entry) for entry in data.get("templates", [])]
        except (ValidationError, TypeError) as e:
            raise ValueError(f"Invalid template catalogue {catalogue_path}: {e}")

    def list_templates(self, category: Optional[str] = None) -> List[Template]:
        """
        List templates in catalogue order.

        Args:
            category: Optional category filter; None or "all" lists everything

        Returns:
            List[Template]: Matching templates
        """
        templates = list(self._templates.values())
        if category and category != "all":
            templates = [t for t in templates if t.category == category]
        return templates

    def get_template(self, template_id: str) -> Optional[Template]:
        """Template by id, or None when the id is not registered."""
        return self._templates.get(template_id)

    def is_registered(self, template_id: str) -> bool:
        return template_id in self._templates

    def is_premium(self, template_id: str) -> bool:
        """Whether a template is premium; unknown ids are not."""
        template = self.get_template(template_id)
        return bool(template and template.isPremium)

    def styles_for(self, template_id: str) -> TemplateStyle:
        """
        Style tokens of a template.

        Args:
            template_id: Template id

        Returns:
            TemplateStyle: The template's tokens, or the default bundle for unknown ids
        """
        template = self.get_template(template_id)
        return template.style if template else TemplateStyle()

    def layout_for(self, template_id: str) -> str:
        """Preview layout name of a template, ``minimal`` for unknown ids."""
        template = self.get_template(template_id)
        return template.layout if template else DEFAULT_LAYOUT

    def groups_skills(self, template_id: str) -> bool:
        template = self.get_template(template_id)
        return bool(template and template.groupSkills)

    def free_templates(self) -> List[Template]:
        return [t for t in self._templates.values() if not t.isPremium]

    def premium_templates(self) -> List[Template]:
        return [t for t in self._templates.values() if t.isPremium]

    def categories(self) -> List[str]:
        """Categories in first-seen catalogue order."""
        seen: List[str] = []
        for template in self._templates.values():
            if template.category not in seen:
                seen.append(template.category)
        return seen


# Singleton instance
_template_registry: Optional[TemplateRegistry] = None


def get_template_registry(catalogue_path: Optional[Path] = None) -> TemplateRegistry:
    """
    Get or create the template registry singleton.

    Args:
        catalogue_path: Optional catalogue file

    Returns:
        TemplateRegistry: The registry instance
    """
    global _template_registry
    if _template_registry is None:
        _template_registry = TemplateRegistry(catalogue_path)
    return _template_registry
