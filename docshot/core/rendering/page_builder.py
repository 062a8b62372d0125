"""
Document Builder
================

Wrap a rendered HTML fragment and its CSS into a complete HTML document for
browser capture.
"""

from typing import Any, Optional
from pathlib import Path
import jinja2

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings

logger = get_logger(__name__)


class DocumentBuildError(Exception):
    """Exception raised when the document shell cannot be rendered."""

    pass


class DocumentBuilder:
    """Jinja2-based document shell builder."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="document_builder")  # structlog.BoundLoggerBase
        self._setup_jinja2_environment()

    def _setup_jinja2_environment(self) -> None:
        """Setup Jinja2 template environment."""
        template_dir = Path(__file__).parent / "templates"
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=jinja2.select_autoescape(["html", "xml"]),
        )

    @property
    def root_id(self) -> str:
        """Element id of the content root derived from the configured selector."""
        selector = self.settings.content_root_selector
        return selector[1:] if selector.startswith("#") else "markdown-content"

    def build(
        self,
        html: str,
        css: str = "",
        base_href: Optional[str] = None,
        title: Optional[str] = None,
    ) -> str:
        """
        Build a full HTML document.

        Args:
            html: Rendered HTML fragment
            css: Stylesheet text inlined in the head
            base_href: Optional base URL for relative resources
            title: Optional document title

        Returns:
            Complete HTML document

        Raises:
            DocumentBuildError: If the template cannot be rendered
        """
        try:
            template = self.env.get_template("document.html")
            document = template.render(
                html=html,
                css=css,
                base_href=base_href,
                title=title,
                root_id=self.root_id,
            )
        except jinja2.TemplateError as e:
            raise DocumentBuildError(f"Document template failed: {e}") from e

        self.logger.debug("Document built", html_length=len(html), css_length=len(css))
        return document
