"""
Unit Tests for Document Settler
===============================

Tests for the bounded asset, scroll-to-load and live render waits.
"""

import pytest
from playwright.async_api import Error as PlaywrightError

from docshot.core.capture import scripts
from docshot.core.capture.settle import DocumentSettler
from docshot.models.schemas import ScrollOptions

from tests.utils.helpers import make_request
from tests.utils.mocks import FakeCaptureSession


def quick_scroll(**overrides):
    fields = {"step_px": 500, "delay_ms": 0, "max_steps": 200, "max_time_ms": 15000}
    fields.update(overrides)
    return ScrollOptions(**fields)


class TestAssetWait:
    """Test the font and image wait."""

    @pytest.mark.asyncio
    async def test_loaded(self, fake_session, test_settings):
        assert await DocumentSettler(fake_session, test_settings).wait_for_assets() is True

    @pytest.mark.asyncio
    async def test_still_loading_proceeds(self, fake_session, test_settings):
        """Timing out inside the page reports False instead of raising."""
        fake_session.assets_loaded = False

        assert await DocumentSettler(fake_session, test_settings).wait_for_assets() is False

    @pytest.mark.asyncio
    async def test_script_error_proceeds(self, fake_session, test_settings):
        """A failing wait script is logged and ignored."""
        fake_session.fail_scripts[scripts.WAIT_FOR_ASSETS] = PlaywrightError("Execution context destroyed")

        assert await DocumentSettler(fake_session, test_settings).wait_for_assets() is False


class TestScrollToLoad:
    """Test the lazy-load scroll pass."""

    @pytest.mark.asyncio
    async def test_stops_at_bottom(self, fake_session, test_settings):
        """Scrolling ends once the maximum scroll offset is reached."""
        settler = DocumentSettler(fake_session, test_settings)

        steps = await settler.scroll_to_load(quick_scroll())

        assert steps == 3
        assert fake_session.scroll_positions == [500, 1000, 1400, 0]
        assert fake_session.scroll_y == 0

    @pytest.mark.asyncio
    async def test_stops_after_two_stalled_steps(self, fake_session, test_settings):
        """Two steps without progress end the pass."""
        fake_session.scroll_cap = 700
        settler = DocumentSettler(fake_session, test_settings)

        steps = await settler.scroll_to_load(quick_scroll())

        assert steps == 4
        assert fake_session.scroll_positions[:4] == [500, 700, 700, 700]
        assert fake_session.scroll_y == 0

    @pytest.mark.asyncio
    async def test_respects_step_budget(self, test_settings):
        """max_steps bounds the pass on a very tall document."""
        session = FakeCaptureSession(height=100000)
        settler = DocumentSettler(session, test_settings)

        assert await settler.scroll_to_load(quick_scroll(max_steps=2)) == 2
        assert session.scroll_y == 0

    @pytest.mark.asyncio
    async def test_zero_budget_only_resets(self, fake_session, test_settings):
        """A zero step budget scrolls nowhere but still returns to the top."""
        settler = DocumentSettler(fake_session, test_settings)

        assert await settler.scroll_to_load(quick_scroll(max_steps=0)) == 0
        assert fake_session.scroll_positions == [0]

    @pytest.mark.asyncio
    async def test_settle_skips_scroll_when_disabled(self, fake_session, test_settings):
        """scroll_to_load=False waits for assets only."""
        await DocumentSettler(fake_session, test_settings).settle(make_request())

        assert fake_session.evaluations == [scripts.WAIT_FOR_ASSETS]

    @pytest.mark.asyncio
    async def test_settle_scrolls_then_waits_again(self, fake_session, test_settings):
        """Scroll-to-load is followed by a second asset wait."""
        request = make_request(scroll_to_load=True, scroll=quick_scroll())

        await DocumentSettler(fake_session, test_settings).settle(request)

        assert fake_session.evaluations[0] == scripts.WAIT_FOR_ASSETS
        assert scripts.SCROLL_STEP in fake_session.evaluations
        assert fake_session.evaluations[-1] == scripts.WAIT_FOR_ASSETS


class TestLiveRenderWait:
    """Test the live render done signal."""

    @pytest.mark.asyncio
    async def test_no_flag_does_not_wait(self, fake_session, test_settings):
        """Documents without a pending flag return immediately."""
        assert await DocumentSettler(fake_session, test_settings).wait_for_live_render() is True

    @pytest.mark.asyncio
    async def test_waits_for_pending_flag(self, fake_session, test_settings):
        """A pending flag is awaited until it flips."""
        fake_session.live_pending = True

        assert await DocumentSettler(fake_session, test_settings).wait_for_live_render() is True
        assert fake_session.live_pending is False

    @pytest.mark.asyncio
    async def test_timeout_proceeds(self, fake_session, test_settings):
        """A flag that never flips times out and capture continues."""
        fake_session.live_pending = True
        fake_session.live_never_done = True

        assert await DocumentSettler(fake_session, test_settings).wait_for_live_render() is False
