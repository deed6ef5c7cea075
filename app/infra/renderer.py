from __future__ import annotations

import base64
import math
from contextlib import contextmanager
from enum import Enum
from typing import Generator, Optional, Protocol

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.common.print_page_options import PrintOptions
from webdriver_manager.chrome import ChromeDriverManager

from app.core.config import settings
from app.core.errors import RenderError
from app.core.logging import export_logger


class RenderMode(str, Enum):
    PNG = "png"
    PDF = "pdf"


class Renderer(Protocol):
    """Rasterizes a self-contained HTML document into PNG or PDF bytes."""

    def render(self, markup: str, mode: RenderMode) -> bytes: ...


# -----------------------------------------------------------------------------
# Page geometry (A4, 10 mm margins)
# -----------------------------------------------------------------------------

A4_WIDTH_CM = 21.0
A4_HEIGHT_CM = 29.7
PDF_MARGIN_CM = 1.0


class ChromeRenderer:
    """
    Headless Chrome driven through selenium.

    Each call launches its own browser and quits it before returning, whether
    the render succeeded or not.
    """

    def __init__(
        self,
        *,
        viewport_width: int = 1280,
        viewport_height: int = 800,
        device_scale: float = 2.0,
        page_load_timeout: int = 30,
        chrome_binary: Optional[str] = None,
        driver_path: Optional[str] = None,
    ):
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.device_scale = device_scale
        self.page_load_timeout = page_load_timeout
        self.chrome_binary = chrome_binary
        self.driver_path = driver_path

    @classmethod
    def from_settings(cls) -> ChromeRenderer:
        return cls(
            viewport_width=settings.RENDER_VIEWPORT_WIDTH,
            viewport_height=settings.RENDER_VIEWPORT_HEIGHT,
            device_scale=settings.RENDER_DEVICE_SCALE,
            page_load_timeout=settings.RENDER_PAGE_LOAD_TIMEOUT,
            chrome_binary=settings.CHROME_BINARY,
            driver_path=settings.CHROMEDRIVER_PATH,
        )

    # -------------------------------------------------------------------------
    # Browser lifecycle
    # -------------------------------------------------------------------------

    def _options(self) -> Options:
        chrome_options = Options()
        chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")
        chrome_options.add_argument("--disable-gpu")
        chrome_options.add_argument("--hide-scrollbars")
        chrome_options.add_argument(f"--window-size={self.viewport_width},{self.viewport_height}")
        chrome_options.add_experimental_option("excludeSwitches", ["enable-logging"])
        if self.chrome_binary:
            chrome_options.binary_location = self.chrome_binary
        return chrome_options

    def _service(self) -> Service:
        return Service(self.driver_path or ChromeDriverManager().install())

    def _launch(self) -> webdriver.Chrome:
        return webdriver.Chrome(service=self._service(), options=self._options())

    @contextmanager
    def browser(self) -> Generator[webdriver.Chrome, None, None]:
        driver = self._launch()
        try:
            yield driver
        finally:
            try:
                driver.quit()
            except WebDriverException as exc:
                export_logger.warning("Browser did not quit cleanly", error=str(exc))

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _load(self, driver: webdriver.Chrome, markup: str) -> None:
        driver.set_page_load_timeout(self.page_load_timeout)
        driver.get("about:blank")
        driver.execute_script(
            "document.open(); document.write(arguments[0]); document.close();",
            markup,
        )

    def _screenshot(self, driver: webdriver.Chrome) -> bytes:
        metrics = driver.execute_cdp_cmd("Page.getLayoutMetrics", {})
        content = metrics.get("cssContentSize") or metrics["contentSize"]
        height = max(self.viewport_height, math.ceil(content["height"]))
        driver.execute_cdp_cmd(
            "Emulation.setDeviceMetricsOverride",
            {
                "width": self.viewport_width,
                "height": height,
                "deviceScaleFactor": self.device_scale,
                "mobile": False,
            },
        )
        shot = driver.execute_cdp_cmd(
            "Page.captureScreenshot",
            {"format": "png", "captureBeyondViewport": True, "fromSurface": True},
        )
        return base64.b64decode(shot["data"])

    def _pdf(self, driver: webdriver.Chrome) -> bytes:
        options = PrintOptions()
        options.page_width = A4_WIDTH_CM
        options.page_height = A4_HEIGHT_CM
        options.margin_top = PDF_MARGIN_CM
        options.margin_bottom = PDF_MARGIN_CM
        options.margin_left = PDF_MARGIN_CM
        options.margin_right = PDF_MARGIN_CM
        options.background = True
        return base64.b64decode(driver.print_page(options))

    def render(self, markup: str, mode: RenderMode) -> bytes:
        mode = RenderMode(mode)
        try:
            with self.browser() as driver:
                self._load(driver, markup)
                if mode is RenderMode.PNG:
                    return self._screenshot(driver)
                return self._pdf(driver)
        except WebDriverException as exc:
            raise RenderError(f"Failed to generate {mode.value.upper()}", {"error": exc.msg or str(exc)}) from exc
