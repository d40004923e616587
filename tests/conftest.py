"""
Shared fixtures and in-memory Playwright fakes.

The fakes record every call so tests can assert ordering and teardown without
launching a browser.
"""

import asyncio
from collections.abc import Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pagesnap.app import build_app
from pagesnap.config import Settings, reset_settings
from pagesnap.modules.render.browser import BrowserAcquirer, BrowserConfig
from pagesnap.modules.render.router import get_service
from pagesnap.modules.render.service import RenderOptions, RenderService

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


# =============================================================================
# FAKES
# =============================================================================

class FakePage:
    def __init__(
        self,
        pdf_bytes: bytes = PDF_BYTES,
        goto_error: Exception | None = None,
        pdf_error: Exception | None = None,
        close_error: Exception | None = None,
        pending_images: int = 0,
        evaluate_delay: float = 0.0,
    ) -> None:
        self.pdf_bytes = pdf_bytes
        self.goto_error = goto_error
        self.pdf_error = pdf_error
        self.close_error = close_error
        self.pending_images = pending_images
        self.evaluate_delay = evaluate_delay
        self.calls: list[str] = []
        self.viewport: dict[str, int] | None = None
        self.default_timeout: float | None = None
        self.goto_kwargs: dict[str, Any] = {}
        self.evaluate_args: list[Any] = []
        self.pdf_options: dict[str, Any] = {}
        self.closed = False

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    async def set_viewport_size(self, viewport_size: dict[str, int]) -> None:
        self.calls.append("set_viewport_size")
        self.viewport = viewport_size

    async def goto(self, url: str, **kwargs: Any) -> None:
        self.calls.append("goto")
        self.goto_kwargs = {"url": url, **kwargs}
        if self.goto_error:
            raise self.goto_error

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        self.calls.append("evaluate")
        self.evaluate_args.append(arg)
        if self.evaluate_delay:
            await asyncio.sleep(self.evaluate_delay)
        return self.pending_images

    async def pdf(self, **options: Any) -> bytes:
        self.calls.append("pdf")
        self.pdf_options = options
        if self.pdf_error:
            raise self.pdf_error
        return self.pdf_bytes

    async def close(self) -> None:
        self.calls.append("close")
        self.closed = True
        if self.close_error:
            raise self.close_error


class FakeBrowser:
    def __init__(self, page: FakePage | None = None, close_error: Exception | None = None) -> None:
        self.page = page or FakePage()
        self.close_error = close_error
        self.close_count = 0

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    async def new_page(self) -> FakePage:
        return self.page

    async def close(self) -> None:
        self.close_count += 1
        if self.close_error:
            raise self.close_error


class FakeChromium:
    def __init__(
        self,
        local_browser: FakeBrowser,
        remote_browser: FakeBrowser,
        connect_error: BaseException | None = None,
        launch_error: BaseException | None = None,
    ) -> None:
        self.local_browser = local_browser
        self.remote_browser = remote_browser
        self.connect_error = connect_error
        self.launch_error = launch_error
        self.connect_calls: list[dict[str, Any]] = []
        self.launch_calls: list[dict[str, Any]] = []

    async def connect_over_cdp(self, endpoint_url: str, **kwargs: Any) -> FakeBrowser:
        self.connect_calls.append({"endpoint_url": endpoint_url, **kwargs})
        if self.connect_error:
            raise self.connect_error
        return self.remote_browser

    async def launch(self, **kwargs: Any) -> FakeBrowser:
        self.launch_calls.append(kwargs)
        if self.launch_error:
            raise self.launch_error
        return self.local_browser


class FakePlaywright:
    """Stands in for both async_playwright() and the started Playwright object."""

    def __init__(
        self,
        page: FakePage | None = None,
        connect_error: BaseException | None = None,
        launch_error: BaseException | None = None,
        start_error: Exception | None = None,
        stop_error: Exception | None = None,
    ) -> None:
        self.page = page or FakePage()
        self.chromium = FakeChromium(
            local_browser=FakeBrowser(self.page),
            remote_browser=FakeBrowser(self.page),
            connect_error=connect_error,
            launch_error=launch_error,
        )
        self.start_error = start_error
        self.stop_error = stop_error
        self.started = False
        self.stop_count = 0

    def __call__(self) -> "FakePlaywright":
        return self

    async def start(self) -> "FakePlaywright":
        if self.start_error:
            raise self.start_error
        self.started = True
        return self

    async def stop(self) -> None:
        self.stop_count += 1
        if self.stop_error:
            raise self.stop_error

    @property
    def local_browser(self) -> FakeBrowser:
        return self.chromium.local_browser

    @property
    def remote_browser(self) -> FakeBrowser:
        return self.chromium.remote_browser


def make_service(settings: Settings, fake: FakePlaywright) -> RenderService:
    return RenderService(
        acquirer=BrowserAcquirer(BrowserConfig.from_settings(settings), playwright_factory=fake),
        options=RenderOptions.from_settings(settings),
    )


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep host credentials and cached settings out of tests."""
    monkeypatch.delenv("BROWSERLESS_TOKEN", raising=False)
    monkeypatch.delenv("PAGESNAP_BROWSERLESS_TOKEN", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings() -> Settings:
    return Settings(browserless_token=None, image_settle_timeout_ms=500)


@pytest.fixture
def fake_playwright() -> FakePlaywright:
    return FakePlaywright()


@pytest.fixture
def app(settings: Settings, fake_playwright: FakePlaywright) -> FastAPI:
    application = build_app(settings)
    application.dependency_overrides[get_service] = lambda: make_service(settings, fake_playwright)
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
