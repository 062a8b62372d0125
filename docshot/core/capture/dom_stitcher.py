"""
DOM Stitcher
============

Temporarily relocate selected elements into one synthetic vertical container
so they can be captured together without the content between them.

Each moved element leaves a placeholder behind; restoring replaces the
placeholders in reverse order and removes the container. The move record
lives in the page under a per-capture token.
"""

from typing import Any, AsyncGenerator, List, Optional
from contextlib import asynccontextmanager
from dataclasses import dataclass
import uuid

from playwright.async_api import ElementHandle

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.capture import scripts
from docshot.core.capture.errors import StitchContainerCreationFailed
from docshot.core.capture.session import CaptureSession
from docshot.models.schemas import ElementBox

logger = get_logger(__name__)


@dataclass
class StitchState:
    """Record of one applied stitch mutation."""

    token: str
    moved: int = 0
    restored: bool = False


class DomStitcher:
    """Applies and reverts stitch containers on the session's document."""

    def __init__(self, session: CaptureSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="dom_stitcher")  # structlog.BoundLoggerBase

    @asynccontextmanager
    async def stitch(
        self, handles: List[ElementHandle], gap: float = 0, padding: float = 0
    ) -> AsyncGenerator[StitchState, None]:
        """
        Move elements into a stitch container for the duration of the block.

        The document is restored on every exit path, including errors raised
        while the container is being built or measured.

        Args:
            handles: Top-level elements in document order
            gap: Vertical space between elements in CSS px
            padding: Padding around the container in CSS px

        Yields:
            StitchState for measuring the container

        Raises:
            StitchContainerCreationFailed: If the container could not be built
        """
        state = StitchState(token=f"docshot-stitch-{uuid.uuid4().hex}")
        try:
            applied = await self.session.evaluate(
                scripts.STITCH_APPLY,
                {
                    "elements": handles,
                    "gap": gap,
                    "padding": padding,
                    "token": state.token,
                    "rootSelector": self.settings.content_root_selector,
                },
            )
        except Exception as e:
            await self.restore(state)
            raise StitchContainerCreationFailed(f"Failed to build stitch container: {e}") from e

        if not applied:
            await self.restore(state)
            raise StitchContainerCreationFailed("No connected elements to stitch")

        state.moved = int(applied.get("moved", 0))
        self.logger.debug("Stitch container built", token=state.token, moved=state.moved)

        try:
            yield state
        finally:
            await self.restore(state)

    async def measure(self, state: StitchState) -> Optional[ElementBox]:
        """Document-relative box of the stitch container."""
        box = await self.session.evaluate(scripts.STITCH_MEASURE, state.token)
        if not box:
            return None
        return ElementBox(**box)

    async def restore(self, state: StitchState) -> None:
        """Put every moved element back; calling it again is a no-op."""
        if state.restored:
            return
        state.restored = True
        try:
            restored = await self.session.evaluate(scripts.STITCH_RESTORE, state.token)
            self.logger.debug("Stitch container removed", token=state.token, restored=restored)
        except Exception as e:
            self.logger.warning("Failed to restore stitched elements", token=state.token, error=str(e))
