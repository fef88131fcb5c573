"""Request models for API endpoints."""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from cvmaker.models.cv_models import DEFAULT_LOCALE, Locale


class CVPreviewRequest(BaseModel):
    """Request model for rendering a CV preview."""

    cv: Dict[str, Any] = Field(
        ...,
        description="CV record as stored by the editor. Malformed sections are dropped, not rejected.",
    )
    templateId: Optional[str] = Field(
        None,
        description="Template to render with. Defaults to the record's active template; unknown ids use the minimal layout.",
        examples=["europass"],
    )
    locale: Optional[Locale] = Field(
        None,
        description="Formatting locale. Defaults to the record's language.",
        examples=["lv"],
    )


class CVExportRequest(BaseModel):
    """Request model for PDF export."""

    cv: Dict[str, Any] = Field(..., description="CV record to export")
    locale: Optional[Locale] = Field(
        None,
        description="Formatting locale. Defaults to the record's language.",
        examples=["en"],
    )


class CVCreateRequest(BaseModel):
    """Request model for starting a new CV."""

    language: Locale = Field(
        DEFAULT_LOCALE,
        description="Locale of the new CV (lv, ru or en)",
        examples=["lv"],
    )


class TemplateSelectRequest(BaseModel):
    """Request model for switching the active template of a stored CV."""

    templateId: str = Field(..., description="Registered template id", examples=["modern-professional"])


class AssistantTask(str, Enum):
    """Kinds of assistant requests."""

    GENERATE_CV = "generate_cv"
    IMPROVE_CV = "improve_cv"
    ANALYZE_CV = "analyze_cv"
    SUMMARY = "summary"
    FREE = "free"


class AssistantRequest(BaseModel):
    """Request model for the AI assistant."""

    task: AssistantTask = Field(AssistantTask.FREE, description="What the assistant should do")
    language: Locale = Field(DEFAULT_LOCALE, description="Language of the answer", examples=["lv"])
    prompt: str = Field("", description="Free text: the question, job title or extra instructions")
    cv: Optional[Dict[str, Any]] = Field(None, description="CV record the request is about")
