"""Helper functions for Jinja2 templates."""

from typing import Callable, Dict, Iterable, List, Optional, Tuple, TypeVar
from jinja2 import Environment
from cvmaker.models.template_models import TemplateStyle

T = TypeVar("T")

SKILL_RATINGS: Dict[str, int] = {
    "Beginner": 2,
    "Intermediate": 3,
    "Advanced": 4,
    "Expert": 5,
}
MAX_RATING = 5


def group_by_category(
    items: Iterable[T],
    category_of: Callable[[T], Optional[str]],
) -> List[Tuple[str, List[T]]]:
    """
    Group items by their literal category string.

    Groups keep the order in which each category is first seen and items keep
    their original order inside a group.

    Example: [a(Tool), b(Software), c(Tool)] -> [("Tool", [a, c]), ("Software", [b])]

    Args:
        items: Items to group
        category_of: Function returning an item's category

    Returns:
        List[Tuple[str, List[T]]]: (category, items) pairs
    """
    grouped: Dict[str, List[T]] = {}

    for item in items:
        category = category_of(item) or ""
        if category not in grouped:
            grouped[category] = []
        grouped[category].append(item)

    return list(grouped.items())


def skill_rating(level: Optional[str]) -> int:
    """
    Convert a skill level into a 0-5 dot rating.

    Args:
        level: Beginner/Intermediate/Advanced/Expert or None

    Returns:
        int: Number of filled dots, 0 when the level is unknown
    """
    if not level:
        return 0
    return SKILL_RATINGS.get(level, 0)


def initials(full_name: str) -> str:
    """Upper-case initials of a name ("Anna Bērziņa" -> "AB")."""
    return "".join(part[0] for part in (full_name or "").split() if part).upper()


def style_to_css_vars(style: TemplateStyle) -> str:
    """
    Render template style tokens as CSS custom properties.

    Args:
        style: Template style tokens

    Returns:
        str: Declarations for a ``:root`` rule
    """
    return (
        f"--cv-primary: {style.primaryColor}; "
        f"--cv-secondary: {style.secondaryColor}; "
        f"--cv-font: '{style.fontFamily}', Arial, sans-serif;"
    )


def rating_dots(rating: int, total: int = MAX_RATING) -> List[bool]:
    """Filled/empty flags for a dot rating row."""
    rating = max(0, min(rating, total))
    return [index < rating for index in range(total)]


def register_jinja_filters(env: Environment) -> None:
    """
    Register helper functions as Jinja2 filters and globals.

    Args:
        env: Jinja2 Environment instance
    """
    env.filters["initials"] = initials
    env.filters["rating_dots"] = rating_dots
    env.filters["css_vars"] = style_to_css_vars
