"""Render service - URL to PDF using Playwright."""

import asyncio
import time
from dataclasses import dataclass

from playwright.async_api import Page

from pagesnap.config import Settings
from pagesnap.shared.errors import NavigationError, PageSnapError, RenderError
from pagesnap.shared.logging import get_logger

from .browser import BrowserAcquirer, BrowserConfig

logger = get_logger(__name__)


# Resolves with the number of images still pending when the bound expired
# (0 when every image settled). Load failures count as settled.
IMAGE_SETTLE_SCRIPT = """
async (timeoutMs) => {
    const pending = Array.from(document.images).filter((img) => !img.complete);
    if (pending.length === 0) {
        return 0;
    }
    const settled = pending.map((img) => new Promise((resolve) => {
        img.addEventListener('load', resolve, { once: true });
        img.addEventListener('error', resolve, { once: true });
    }));
    let timedOut = false;
    await Promise.race([
        Promise.all(settled),
        new Promise((resolve) => setTimeout(() => { timedOut = true; resolve(); }, timeoutMs)),
    ]);
    return timedOut ? pending.filter((img) => !img.complete).length : 0;
}
"""


# Extra time allowed on the Python side beyond the in-page bound.
IMAGE_SETTLE_GRACE_S = 0.5


@dataclass(frozen=True)
class RenderOptions:
    """Page and export parameters shared by every render."""
    viewport_width: int = 1280
    viewport_height: int = 1024
    navigation_timeout_ms: int = 30_000
    image_settle_timeout_ms: int = 10_000
    pdf_format: str = "A4"
    pdf_margin: str = "20px"

    @classmethod
    def from_settings(cls, settings: Settings) -> "RenderOptions":
        return cls(
            viewport_width=settings.viewport_width,
            viewport_height=settings.viewport_height,
            navigation_timeout_ms=settings.navigation_timeout_ms,
            image_settle_timeout_ms=settings.image_settle_timeout_ms,
            pdf_format=settings.pdf_format,
            pdf_margin=settings.pdf_margin,
        )


class RenderService:
    """Service for rendering a live URL to PDF."""

    def __init__(self, acquirer: BrowserAcquirer, options: RenderOptions | None = None) -> None:
        self.acquirer = acquirer
        self.options = options or RenderOptions()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RenderService":
        return cls(
            acquirer=BrowserAcquirer(BrowserConfig.from_settings(settings)),
            options=RenderOptions.from_settings(settings),
        )

    async def render(self, url: str) -> bytes:
        """
        Render a validated URL to PDF bytes.

        The browser session and page are closed before this returns or raises.

        Args:
            url: Absolute http(s) URL

        Returns:
            PDF bytes

        Raises:
            BrowserUnavailableError: no browser could be obtained
            NavigationError: the page could not be loaded
            RenderError: anything else that failed once a browser was held
        """
        start_time = time.monotonic()

        try:
            async with self.acquirer.acquire() as session:
                source = session.source
                async with session.page() as page:
                    pdf_bytes = await self._render_page(page, url)
        except PageSnapError:
            raise
        except Exception as e:
            logger.exception("Error generating PDF")
            raise RenderError(str(e) or type(e).__name__) from e

        duration_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(f"Generated PDF: {len(pdf_bytes)} bytes in {duration_ms}ms ({source} browser)")
        return pdf_bytes

    async def _render_page(self, page: Page, url: str) -> bytes:
        opts = self.options

        # Fixed viewport keeps pagination reproducible
        await page.set_viewport_size({
            "width": opts.viewport_width,
            "height": opts.viewport_height,
        })

        logger.info(f"Navigating to URL: {url}")
        try:
            await page.goto(url, wait_until="domcontentloaded", timeout=opts.navigation_timeout_ms)
        except Exception as e:
            reason = getattr(e, "message", None) or str(e) or "Navigation failed"
            logger.error(f"Navigation error: {reason}")
            raise NavigationError(reason) from e

        await self._wait_for_images(page)

        logger.info("Generating PDF...")
        margin = opts.pdf_margin
        pdf_options = {
            "format": opts.pdf_format,
            "print_background": True,
            "margin": {"top": margin, "right": margin, "bottom": margin, "left": margin},
        }
        return await page.pdf(**pdf_options)

    async def _wait_for_images(self, page: Page) -> None:
        """Wait for in-DOM images to settle, giving up after the configured bound."""
        timeout_ms = self.options.image_settle_timeout_ms
        if timeout_ms <= 0:
            return

        try:
            still_pending = await asyncio.wait_for(
                page.evaluate(IMAGE_SETTLE_SCRIPT, timeout_ms),
                timeout=timeout_ms / 1000 + IMAGE_SETTLE_GRACE_S,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Image wait did not return within {timeout_ms}ms; rendering anyway")
            return

        if still_pending:
            logger.warning(
                f"{still_pending} image(s) still loading after {timeout_ms}ms; rendering anyway"
            )
