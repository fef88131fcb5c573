"""Pydantic models for the template catalogue."""

from typing import List
from pydantic import BaseModel, Field
from cvmaker.models.cv_models import Locale, TemplateCategory


class TemplateStyle(BaseModel):
    """Style tokens shown by the template selector and injected as CSS variables."""

    primaryColor: str = "#1f2937"
    secondaryColor: str = "#f9fafb"
    fontFamily: str = "Arial"
    headerStyle: str = "plain"
    sectionSpacing: str = "comfortable"
    photoPosition: str = "top-left"
    features: List[str] = Field(default_factory=list)


class Template(BaseModel):
    """Registered visual template."""

    id: str
    name: str
    description: str = ""
    category: TemplateCategory
    isPremium: bool = False
    supportedLocales: List[Locale] = Field(
        default_factory=lambda: [Locale.LV, Locale.RU, Locale.EN]
    )
    style: TemplateStyle = Field(default_factory=TemplateStyle)
    layout: str = "minimal"
    groupSkills: bool = False
