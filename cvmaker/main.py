"""FastAPI application for CV Maker."""

from io import BytesIO
from typing import Any, Dict, List, Optional, Tuple
from fastapi import Depends, FastAPI, HTTPException, Query, Response, status
from fastapi.responses import HTMLResponse, StreamingResponse
from loguru import logger
from pydantic import ValidationError
from cvmaker.exceptions import ExportFailure, ExportTimeoutError, RenderFailure, StorageFailure, UnknownTemplateError
from cvmaker.logging_config import setup_logging
from cvmaker.models.cv_models import CVRecord, Locale, new_cv_record, utc_now_iso
from cvmaker.models.request_models import (
    AssistantRequest,
    CVCreateRequest,
    CVExportRequest,
    CVPreviewRequest,
    TemplateSelectRequest,
)
from cvmaker.models.response_models import (
    AssistantHealth,
    AssistantResult,
    AutoSaveStatus,
    ErrorResponse,
    HealthResponse,
    RootResponse,
    TemplateCard,
)
from cvmaker.models.template_models import Template
from cvmaker.services.autosave import AutoSaver
from cvmaker.services.cv_data_loader import get_data_loader
from cvmaker.services.cv_editor import update_cv
from cvmaker.services.cv_storage import LocalCVStorage, get_cv_storage
from cvmaker.services.llm_service import AssistantService, get_assistant_service
from cvmaker.services.pdf_generator import get_pdf_generator
from cvmaker.services.preview_renderer import get_preview_renderer
from cvmaker.services.template_registry import get_template_registry
from cvmaker.services.template_selector import preview_template, select_template, template_cards

API_VERSION = "1.0.0"

setup_logging()

app = FastAPI(
    title="CV Maker API",
    description="""API for building CVs: live HTML previews, PDF export and local storage.

## Features

* **Preview**: Renders a CV record through any of the registered templates
* **PDF export**: Paginated A4 documents with the same content as the preview
* **Templates**: Europass, modern, traditional and creative layouts with sample previews
* **Storage**: Local CV records with backup export/import
* **AI assistant**: Optional drafting and review through a local Ollama model
* **Locales**: Latvian, Russian and English""",
    version=API_VERSION,
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
    },
    tags_metadata=[
        {"name": "health", "description": "Health check and status endpoints"},
        {"name": "templates", "description": "Template catalogue and sample previews"},
        {"name": "cv", "description": "CV preview and PDF export"},
        {"name": "storage", "description": "Stored CV records"},
        {"name": "assistant", "description": "AI assistant"},
    ],
)

# Initialize services
data_loader = get_data_loader()
registry = get_template_registry()
preview_renderer = get_preview_renderer()
pdf_generator = get_pdf_generator()


def cv_storage() -> LocalCVStorage:
    return get_cv_storage()


def _load_cv(raw: Dict[str, Any]) -> Tuple[CVRecord, List[str]]:
    try:
        record, issues = data_loader.load_record(raw)
    except RenderFailure as e:
        raise HTTPException(status_code=422, detail=str(e))
    for issue in issues:
        logger.warning(f"CV {record.id}: {issue}")
    return record, issues


def _get_or_404(storage: LocalCVStorage, cv_id: str) -> CVRecord:
    try:
        record = storage.load_by_id(cv_id)
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    if record is None:
        raise HTTPException(status_code=404, detail=f"CV not found: {cv_id}")
    return record


def _save(storage: LocalCVStorage, record: CVRecord) -> CVRecord:
    try:
        return storage.save(record)
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


# One debounced saver per (storage directory, CV id)
autosavers: Dict[Tuple[str, str], AutoSaver] = {}


def _autosaver(storage: LocalCVStorage, cv_id: str) -> AutoSaver:
    key = (str(storage.storage_dir), cv_id)
    if key not in autosavers:
        autosavers[key] = AutoSaver(storage)
    return autosavers[key]


async def _settle_autosave(storage: LocalCVStorage, cv_id: str, keep: bool) -> None:
    """
    Resolve a pending background save before an explicit write.

    With ``keep`` the pending version is written now, so the explicit
    operation starts from the newest edits; otherwise it is dropped because
    the explicit write supersedes it.
    """
    saver = autosavers.get((str(storage.storage_dir), cv_id))
    if saver is None:
        return
    if not keep:
        await saver.close()
        return
    try:
        await saver.flush()
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.get(
    "/",
    response_model=RootResponse,
    status_code=status.HTTP_200_OK,
    summary="Root endpoint",
    description="Returns API information including name and version",
    tags=["health"],
)
async def root():
    """
    Root endpoint.

    Returns basic API information including name and version.
    """
    return RootResponse(message="CV Maker API", version=API_VERSION)


@app.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Checks if the API service is running and healthy",
    tags=["health"],
)
async def health():
    """Return the health status of the API service."""
    return HealthResponse(status="ok")


@app.get(
    "/api/v1/templates",
    response_model=List[TemplateCard],
    summary="List templates",
    tags=["templates"],
)
async def list_templates(category: Optional[str] = Query(None, description="Category filter")):
    """List the template picker cards in catalogue order, optionally by category."""
    return template_cards(category, registry)


@app.get(
    "/api/v1/templates/{template_id}",
    response_model=Template,
    summary="Get template",
    tags=["templates"],
    responses={404: {"description": "Unknown template id", "model": ErrorResponse}},
)
async def get_template(template_id: str):
    """Return the metadata and style tokens of one template."""
    template = registry.get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Unknown template: {template_id}")
    return template


@app.get(
    "/api/v1/templates/{template_id}/preview",
    response_class=HTMLResponse,
    summary="Preview template with sample data",
    tags=["templates"],
)
async def get_template_preview(template_id: str, locale: Optional[Locale] = None):
    """
    Render the bundled sample CV through a template.

    Unknown template ids are rendered with the minimal layout.
    """
    try:
        rendered = preview_template(template_id, locale.value if locale else None)
    except (FileNotFoundError, ValueError) as e:
        raise HTTPException(status_code=500, detail=f"Error rendering sample CV: {str(e)}")
    return HTMLResponse(rendered.html, headers={"X-Template-Layout": rendered.layout})


@app.post(
    "/api/v1/cv/preview",
    response_class=HTMLResponse,
    summary="Render CV preview",
    tags=["cv"],
    responses={
        200: {
            "description": "Preview HTML",
            "headers": {
                "X-Template-Layout": {
                    "description": "Layout actually used (minimal for unknown templates)",
                    "schema": {"type": "string", "example": "europass"},
                }
            },
        },
        422: {"description": "CV record is not renderable", "model": ErrorResponse},
    },
)
async def preview_cv(request: CVPreviewRequest):
    """
    Render a CV record as preview HTML.

    Malformed sections are dropped and reported through the
    `X-Render-Issues` header instead of failing the request.
    """
    cv, issues = _load_cv(request.cv)
    locale = request.locale.value if request.locale else None
    rendered = preview_renderer.render(cv, request.templateId, locale)
    return HTMLResponse(
        rendered.html,
        headers={
            "X-Template-Layout": rendered.layout,
            "X-Render-Issues": str(len(issues) + len(rendered.document.issues)),
        },
    )


@app.post(
    "/api/v1/cv/export",
    response_class=StreamingResponse,
    summary="Export CV as PDF",
    tags=["cv"],
    responses={
        200: {
            "description": "CV PDF file",
            "content": {"application/pdf": {"schema": {"type": "string", "format": "binary"}}},
        },
        400: {"description": "First or last name missing", "model": ErrorResponse},
        500: {"description": "PDF generation failed, retry", "model": ErrorResponse},
        504: {"description": "PDF generation timed out, retry", "model": ErrorResponse},
    },
)
async def export_cv(request: CVExportRequest):
    """
    Export a CV record as a PDF download.

    **Returns:**
    - PDF file named after the person, e.g. `cv_anna_b_rzi_a.pdf`
    """
    cv, _ = _load_cv(request.cv)
    if not cv.personalInfo.firstName.strip() or not cv.personalInfo.lastName.strip():
        raise HTTPException(status_code=400, detail="First and last name are required for export")

    try:
        result = await pdf_generator.export(cv, request.locale.value if request.locale else None)
    except ExportTimeoutError as e:
        raise HTTPException(status_code=504, detail=str(e))
    except ExportFailure as e:
        raise HTTPException(status_code=500, detail=f"Error generating PDF: {e.message}")

    return StreamingResponse(
        BytesIO(result.content),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Page-Count": str(result.page_count),
        },
    )


@app.post(
    "/api/v1/cvs",
    response_model=CVRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Start a new CV",
    tags=["storage"],
)
async def create_cv(request: CVCreateRequest, storage: LocalCVStorage = Depends(cv_storage)):
    """Create and store an empty CV record."""
    return _save(storage, new_cv_record(request.language))


@app.get("/api/v1/cvs", response_model=List[CVRecord], summary="List stored CVs", tags=["storage"])
async def list_cvs(storage: LocalCVStorage = Depends(cv_storage)):
    """List stored CVs, most recently updated first."""
    try:
        return storage.list_all()
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/v1/cvs/latest", response_model=CVRecord, summary="Latest saved CV", tags=["storage"])
async def latest_cv(storage: LocalCVStorage = Depends(cv_storage)):
    """Return the most recently saved CV."""
    try:
        record = storage.load_latest()
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    if record is None:
        raise HTTPException(status_code=404, detail="No saved CV")
    return record


@app.get("/api/v1/cvs/{cv_id}", response_model=CVRecord, summary="Get stored CV", tags=["storage"])
async def get_cv(cv_id: str, storage: LocalCVStorage = Depends(cv_storage)):
    return _get_or_404(storage, cv_id)


@app.put("/api/v1/cvs/{cv_id}", response_model=CVRecord, summary="Replace stored CV", tags=["storage"])
async def put_cv(cv_id: str, record: CVRecord, storage: LocalCVStorage = Depends(cv_storage)):
    """Insert or replace a CV record; the path id wins over the body id."""
    await _settle_autosave(storage, cv_id, keep=False)
    try:
        existing = storage.load_by_id(cv_id)
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    update = {"id": cv_id, "updatedAt": utc_now_iso()}
    if existing is not None:
        update["createdAt"] = existing.createdAt
    return _save(storage, record.model_copy(update=update))


@app.patch("/api/v1/cvs/{cv_id}", response_model=CVRecord, summary="Update stored CV", tags=["storage"])
async def patch_cv(cv_id: str, changes: Dict[str, Any], storage: LocalCVStorage = Depends(cv_storage)):
    """Merge a partial update into a stored CV."""
    await _settle_autosave(storage, cv_id, keep=True)
    record = _get_or_404(storage, cv_id)
    try:
        updated = update_cv(record, changes)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _save(storage, updated)


@app.delete(
    "/api/v1/cvs/{cv_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete stored CV",
    tags=["storage"],
)
async def delete_cv(cv_id: str, storage: LocalCVStorage = Depends(cv_storage)):
    await _settle_autosave(storage, cv_id, keep=False)
    try:
        deleted = storage.delete(cv_id)
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail=f"CV not found: {cv_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.put(
    "/api/v1/cvs/{cv_id}/template",
    response_model=CVRecord,
    summary="Select template",
    tags=["storage"],
    responses={400: {"description": "Unknown template id", "model": ErrorResponse}},
)
async def put_cv_template(
    cv_id: str,
    request: TemplateSelectRequest,
    storage: LocalCVStorage = Depends(cv_storage),
):
    """Switch the active template of a stored CV."""
    await _settle_autosave(storage, cv_id, keep=True)
    record = _get_or_404(storage, cv_id)
    try:
        updated = select_template(record, request.templateId, registry)
    except UnknownTemplateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _save(storage, updated)


@app.post(
    "/api/v1/cvs/{cv_id}/autosave",
    response_model=AutoSaveStatus,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Queue a background save",
    tags=["storage"],
)
async def autosave_cv(cv_id: str, record: CVRecord, storage: LocalCVStorage = Depends(cv_storage)):
    """
    Queue the record for saving after a quiet period.

    Repeated calls within the period replace the queued version, so a burst
    of edits is written once. Failed background saves are counted in the
    response of later calls, never returned as HTTP errors.
    """
    saver = _autosaver(storage, cv_id)
    saver.schedule(record.model_copy(update={"id": cv_id, "updatedAt": utc_now_iso()}))
    return AutoSaveStatus(
        delay=saver.delay,
        saves=saver.saves,
        failures=saver.failures,
        lastError=saver.last_error,
    )


@app.post(
    "/api/v1/assistant/generate",
    response_model=AssistantResult,
    summary="Ask the AI assistant",
    tags=["assistant"],
)
async def assistant_generate(
    request: AssistantRequest,
    assistant: AssistantService = Depends(get_assistant_service),
):
    """
    Generate CV content with the local language model.

    Failures are reported in the body (`success: false`), never as HTTP errors.

    **Note:** Generation typically takes 10-60 seconds on small local models.
    """
    return await assistant.generate(request)


@app.get(
    "/api/v1/assistant/health",
    response_model=AssistantHealth,
    summary="AI assistant status",
    tags=["assistant"],
)
async def assistant_health(assistant: AssistantService = Depends(get_assistant_service)):
    return await assistant.health()
