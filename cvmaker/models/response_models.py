"""Response models for API endpoints."""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str = Field(
        ...,
        description="Error message describing what went wrong",
        examples=["Unknown template: retro"],
    )


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Service status", examples=["ok"])


class RootResponse(BaseModel):
    """Root endpoint response model."""

    message: str = Field(..., description="API name", examples=["CV Maker API"])
    version: str = Field(..., description="API version", examples=["1.0.0"])


class AssistantResult(BaseModel):
    """Outcome of an assistant request; ``error`` is set when ``success`` is false."""

    success: bool
    content: Optional[str] = None
    error: Optional[str] = None


class AssistantHealth(BaseModel):
    """Assistant availability check result."""

    status: Literal["healthy", "unhealthy"]
    details: str
    model: Optional[str] = None


class TemplateCard(BaseModel):
    """Template picker card: metadata plus style tokens."""

    id: str = Field(..., examples=["europass"])
    name: str = Field(..., examples=["Europass"])
    description: str = ""
    category: str = Field(..., examples=["europass"])
    isPremium: bool = False
    supportedLocales: List[str] = Field(default_factory=list, examples=[["lv", "ru", "en"]])
    style: Dict[str, Any] = Field(default_factory=dict)


class AutoSaveStatus(BaseModel):
    """State of the background saver of one CV."""

    status: Literal["scheduled"] = "scheduled"
    delay: float = Field(..., description="Seconds of quiet before the record is written", examples=[2.0])
    saves: int = Field(0, description="Background saves completed")
    failures: int = Field(0, description="Background saves that failed")
    lastError: Optional[str] = Field(None, description="Message of the last failed background save")
