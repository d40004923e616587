"""
Browser acquisition and teardown.

A BrowserSession is owned by exactly one render. It is obtained from the
remote browser endpoint when a token is configured, otherwise (or when the
remote connection fails) from a locally launched headless Chromium, and it is
always torn down when the acquire() block exits.
"""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from playwright.async_api import Browser, Page, Playwright, async_playwright

from pagesnap.config import Settings
from pagesnap.shared.errors import BrowserUnavailableError
from pagesnap.shared.logging import get_logger

logger = get_logger(__name__)

LOCAL_LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


# =============================================================================
# CONFIG
# =============================================================================

@dataclass(frozen=True)
class BrowserConfig:
    """Everything the acquirer needs, resolved up front."""
    remote_endpoint: str
    remote_token: str | None = None
    protocol_timeout_ms: int = 120_000

    @property
    def remote_enabled(self) -> bool:
        return bool(self.remote_token)

    @classmethod
    def from_settings(cls, settings: Settings) -> "BrowserConfig":
        return cls(
            remote_endpoint=settings.browserless_endpoint,
            remote_token=settings.browserless_token or None,
            protocol_timeout_ms=settings.protocol_timeout_ms,
        )


# =============================================================================
# SESSION
# =============================================================================

class BrowserSession:
    """Exclusively owned handle to a connected or launched browser."""

    def __init__(self, playwright: Playwright, browser: Browser, source: str, protocol_timeout_ms: int) -> None:
        self.playwright = playwright
        self.browser = browser
        self.source = source  # "remote" or "local"
        self.protocol_timeout_ms = protocol_timeout_ms
        self.closed = False

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Open a page that is closed when the block exits."""
        if self.closed:
            raise RuntimeError("Browser session already closed")

        page = await self.browser.new_page()
        page.set_default_timeout(self.protocol_timeout_ms)
        try:
            yield page
        finally:
            try:
                await page.close()
            except Exception as e:
                logger.warning(f"Error closing page: {e}")

    async def close(self) -> None:
        """
        Release the browser and the Playwright driver.

        Idempotent. Failures are logged and never raised so they cannot mask
        an error that is already propagating.
        """
        if self.closed:
            return
        self.closed = True

        try:
            await self.browser.close()
        except Exception as e:
            logger.error(f"Error closing {self.source} browser: {e}")

        await _stop_driver(self.playwright)


async def _stop_driver(playwright: Playwright) -> None:
    try:
        await playwright.stop()
    except Exception as e:
        logger.error(f"Error stopping Playwright driver: {e}")


# =============================================================================
# ACQUIRER
# =============================================================================

class BrowserAcquirer:
    """Obtains one BrowserSession per render: remote first, local fallback."""

    def __init__(
        self,
        config: BrowserConfig,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self.config = config
        self._playwright_factory = playwright_factory

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[BrowserSession]:
        """Yield a session and guarantee exactly one teardown on every exit path."""
        session = await self.open()
        try:
            yield session
        finally:
            await session.close()

    async def open(self) -> BrowserSession:
        """
        Start the driver and obtain a browser.

        Raises:
            BrowserUnavailableError: if no browser could be obtained. The
                driver is stopped before anything leaves this method,
                cancellation included, so nothing keeps running.
        """
        try:
            playwright = await self._playwright_factory().start()
        except Exception as e:
            logger.error(f"Failed to start Playwright driver: {e}")
            raise BrowserUnavailableError(_describe(e)) from e

        try:
            browser, source = await self._obtain_browser(playwright)
        except BaseException:
            await _stop_driver(playwright)
            raise

        return BrowserSession(playwright, browser, source, self.config.protocol_timeout_ms)

    async def _obtain_browser(self, playwright: Playwright) -> tuple[Browser, str]:
        if self.config.remote_enabled:
            browser = await self._connect_remote(playwright)
            if browser is not None:
                return browser, "remote"

        try:
            return await self._launch_local(playwright), "local"
        except Exception as e:
            logger.error(f"Failed to launch local browser: {e}")
            raise BrowserUnavailableError(_describe(e)) from e

    async def _connect_remote(self, playwright: Playwright) -> Browser | None:
        """Connect to the remote endpoint; any failure is logged and yields None."""
        endpoint = self.config.remote_endpoint
        logger.info(f"Attempting to connect to remote browser at {endpoint}...")
        try:
            browser = await playwright.chromium.connect_over_cdp(
                endpoint,
                headers={"Authorization": f"Bearer {self.config.remote_token}"},
                timeout=self.config.protocol_timeout_ms,
            )
        except Exception as e:
            logger.warning(f"Failed to connect to remote browser: {e}. Falling back to local launch.")
            return None

        logger.info("Connected to remote browser")
        return browser

    async def _launch_local(self, playwright: Playwright) -> Browser:
        logger.info("Launching local headless Chromium...")
        browser = await playwright.chromium.launch(
            headless=True,
            args=LOCAL_LAUNCH_ARGS,
            timeout=self.config.protocol_timeout_ms,
        )
        logger.info("Local browser launched")
        return browser


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__
