"""
Selector Resolver
=================

Resolve one or more CSS selectors to top-level element handles in document order.
"""

from typing import Any, List, Sequence, Union

from playwright.async_api import ElementHandle, Error as PlaywrightError

from docshot.config.logging import get_logger
from docshot.core.capture import scripts
from docshot.core.capture.errors import InvalidSelector, SelectorEmpty
from docshot.core.capture.session import CaptureSession

logger = get_logger(__name__)


def join_selector(selector: Union[str, Sequence[str]]) -> str:
    """Join a selector list into one CSS selector list, dropping blank entries."""
    parts = [selector] if isinstance(selector, str) else list(selector)
    return ", ".join(p.strip() for p in parts if isinstance(p, str) and p.strip())


class SelectorResolver:
    """Resolves selectors against the session's document."""

    def __init__(self, session: CaptureSession):
        self.session = session
        self.logger: Any = logger.bind(component="selector_resolver")  # structlog.BoundLoggerBase

    async def resolve(self, selector: Union[str, Sequence[str]]) -> List[ElementHandle]:
        """
        Resolve a selector to element handles.

        Matches nested inside another match are dropped so a wrapper and its
        child are never both captured.

        Args:
            selector: Selector string or list of selector strings

        Returns:
            Top-level matches in document order

        Raises:
            SelectorEmpty: If the selector is blank or matches nothing
            InvalidSelector: If the browser rejects the selector
        """
        joined = join_selector(selector)
        if not joined:
            raise SelectorEmpty("Selector is empty")

        try:
            handles = await self.session.query_all(joined)
        except PlaywrightError as e:
            raise InvalidSelector(f"Invalid selector {joined!r}: {e}") from e

        if not handles:
            raise SelectorEmpty(f"Selector {joined!r} matched no elements")

        try:
            flags = await self.session.evaluate(
                scripts.TOP_LEVEL_FLAGS, {"elements": handles, "selector": joined}
            )
        except PlaywrightError as e:
            raise InvalidSelector(f"Invalid selector {joined!r}: {e}") from e
        top_level = [handle for handle, keep in zip(handles, flags) if keep]

        self.logger.debug(
            "Selector resolved",
            selector=joined,
            matched=len(handles),
            top_level=len(top_level),
        )
        return top_level
