"""Service for generating paginated PDF documents from CV records."""

import asyncio
import os
from pathlib import Path
from typing import List, Optional, Tuple
from loguru import logger
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings
from weasyprint import HTML as WeasyHTML, CSS
from cvmaker.exceptions import ExportFailure, ExportTimeoutError
from cvmaker.models.cv_models import CVRecord
from cvmaker.models.document_models import RenderedDocument
from cvmaker.services.document_builder import DocumentBuilder, get_document_builder
from cvmaker.services.preview_renderer import create_environment, locale_labels
from cvmaker.services.template_registry import TemplateRegistry, get_template_registry
from cvmaker.utils.image_helpers import PhotoError, fit_photo, is_inline_image
from cvmaker.utils.locale_helpers import build_download_file_name

PDF_TEMPLATE = "pdf/document.html"


class ExportSettings(BaseSettings):
    """PDF export configuration settings."""

    cv_export_timeout: float = float(os.getenv("CV_EXPORT_TIMEOUT", "30"))
    cv_page_size: str = os.getenv("CV_PAGE_SIZE", "A4")
    cv_page_margin: str = os.getenv("CV_PAGE_MARGIN", "18mm")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


class PageDocument:
    """
    A CV laid out on fixed-size pages.

    Attributes:
        document: Rendered document the pages were laid out from
        html: Print HTML handed to WeasyPrint
        page_size: CSS page size, e.g. "A4"
    """

    def __init__(self, document: RenderedDocument, html: str, rendered, page_size: str):
        self.document = document
        self.html = html
        self.page_size = page_size
        self._rendered = rendered

    @property
    def page_count(self) -> int:
        return len(self._rendered.pages)

    def write_pdf(self) -> bytes:
        """Serialize the laid-out pages as PDF bytes."""
        return self._rendered.write_pdf()


class ExportResult(BaseModel):
    """Downloadable PDF export."""

    filename: str
    content: bytes
    page_count: int
    issues: List[str] = Field(default_factory=list)


class PDFGenerator:
    """Service to generate PDF documents using WeasyPrint."""

    def __init__(
        self,
        settings: Optional[ExportSettings] = None,
        template_dir: Optional[Path] = None,
        registry: Optional[TemplateRegistry] = None,
        builder: Optional[DocumentBuilder] = None,
    ):
        """
        Initialize the PDF generator.

        Args:
            settings: Export settings (uses defaults if None)
            template_dir: Directory containing Jinja2 templates. Defaults to cvmaker/templates/
            registry: Template registry. Defaults to the shared registry
            builder: Document builder. Defaults to the shared builder
        """
        self.settings = settings or ExportSettings()
        self.env = create_environment(template_dir)
        self.registry = registry or get_template_registry()
        self.builder = builder or get_document_builder()

    def page_css(self) -> CSS:
        """Page geometry stylesheet (size and margins)."""
        return CSS(string=f"""
            @page {{
                size: {self.settings.cv_page_size};
                margin: {self.settings.cv_page_margin};
            }}
        """)

    def _embed_photo(self, document: RenderedDocument) -> Optional[str]:
        photo = document.header.photo
        if not photo:
            return None
        if not is_inline_image(photo):
            logger.info("Remote photo is not embedded in the PDF")
            document.issues.append("photo: remote images are not embedded")
            return None
        try:
            return fit_photo(photo)
        except PhotoError as e:
            logger.warning(f"Omitting photo from PDF: {e}")
            document.issues.append(f"photo: {e}")
            return None
        except Exception as e:
            logger.exception("Photo processing failed, omitting photo from PDF")
            document.issues.append(f"photo: could not be processed ({e})")
            return None

    def build_html(self, cv: CVRecord, locale: Optional[str] = None) -> Tuple[RenderedDocument, str]:
        """
        Build the print HTML of a CV.

        Skill grouping follows the record's active template so that the PDF
        matches the preview of that template.

        Args:
            cv: CV record
            locale: Locale code. Defaults to the record's language

        Returns:
            Tuple[RenderedDocument, str]: The rendered document and its print HTML
        """
        document = self.builder.build(cv, locale, group_skills=self.registry.groups_skills(cv.template))
        photo = self._embed_photo(document)

        template = self.env.get_template(PDF_TEMPLATE)
        html = template.render(
            document=document,
            photo=photo,
            style=self.registry.styles_for(cv.template),
            labels=locale_labels(document.locale),
        )
        return document, html

    def render_document(self, cv: CVRecord, locale: Optional[str] = None) -> PageDocument:
        """
        Lay out a CV on fixed-size pages.

        Content that overflows a page continues on the next one.

        Args:
            cv: CV record
            locale: Locale code. Defaults to the record's language

        Returns:
            PageDocument: Laid-out pages

        Raises:
            ExportFailure: If WeasyPrint cannot lay out the document
        """
        document, html = self.build_html(cv, locale)
        try:
            rendered = WeasyHTML(string=html).render(stylesheets=[self.page_css()])
        except Exception as e:
            raise ExportFailure(f"PDF layout failed: {e}") from e
        return PageDocument(document, html, rendered, self.settings.cv_page_size)

    def generate_pdf(self, cv: CVRecord, locale: Optional[str] = None) -> bytes:
        """
        Generate PDF from a CV record.

        Args:
            cv: CV record
            locale: Locale code. Defaults to the record's language

        Returns:
            bytes: PDF file as bytes
        """
        return self.render_document(cv, locale).write_pdf()

    def _render_pdf(self, cv: CVRecord, locale: Optional[str]) -> Tuple[PageDocument, bytes]:
        page_document = self.render_document(cv, locale)
        return page_document, page_document.write_pdf()

    async def export(
        self,
        cv: CVRecord,
        locale: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ExportResult:
        """
        Generate a downloadable PDF without blocking the event loop.

        Args:
            cv: CV record
            locale: Locale code. Defaults to the record's language
            timeout: Seconds before giving up. Defaults to CV_EXPORT_TIMEOUT

        Returns:
            ExportResult: File name, PDF bytes, page count and degraded-content issues

        Raises:
            ExportTimeoutError: If generation takes longer than the timeout
            ExportFailure: If generation fails for any other reason
        """
        timeout = self.settings.cv_export_timeout if timeout is None else timeout
        logger.info(f"Exporting CV {cv.id} to PDF")

        try:
            page_document, content = await asyncio.wait_for(
                asyncio.to_thread(self._render_pdf, cv, locale), timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"PDF export of CV {cv.id} timed out after {timeout:g}s")
            raise ExportTimeoutError(timeout)
        except ExportFailure:
            logger.exception(f"PDF export of CV {cv.id} failed")
            raise
        except Exception as e:
            logger.exception(f"PDF export of CV {cv.id} failed")
            raise ExportFailure(f"PDF generation failed: {e}") from e

        filename = build_download_file_name(cv.personalInfo.firstName, cv.personalInfo.lastName)
        logger.info(f"Exported CV {cv.id} as {filename} ({page_document.page_count} pages)")
        return ExportResult(
            filename=filename,
            content=content,
            page_count=page_document.page_count,
            issues=page_document.document.issues,
        )


# Singleton instance
_pdf_generator: Optional[PDFGenerator] = None


def get_pdf_generator() -> PDFGenerator:
    """
    Get or create the PDF generator singleton.

    Returns:
        PDFGenerator: The generator instance
    """
    global _pdf_generator
    if _pdf_generator is None:
        _pdf_generator = PDFGenerator()
    return _pdf_generator
