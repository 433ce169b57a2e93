"""
Browser Session Manager

Owns the single Chrome WebDriver used to query Perplexity:
- ensure()  - create lazily, reuse while the browser still answers
- dispose() - quit and forget the driver (safe to call repeatedly)

The orchestrator disposes the session after any query error so the next
run starts from a fresh browser.
"""

from typing import Callable, Optional

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.remote.webdriver import WebDriver

import config
from errors import SessionError


def build_chrome_options(headless: bool = True) -> Options:
    """Chrome flags that let a headless browser pass for a desktop one."""
    chrome_options = Options()
    if headless:
        chrome_options.add_argument('--headless')
    for argument in config.CHROME_ARGUMENTS:
        chrome_options.add_argument(argument)
    chrome_options.add_argument(f'--user-agent={config.USER_AGENT}')
    return chrome_options


def create_chrome_driver(headless: bool = True) -> WebDriver:
    driver = webdriver.Chrome(options=build_chrome_options(headless))
    driver.set_page_load_timeout(config.PAGE_LOAD_TIMEOUT)
    return driver


class SessionManager:
    """Lifecycle of the one automated browser session"""

    def __init__(
        self,
        headless: bool = config.HEADLESS,
        driver_factory: Optional[Callable[[bool], WebDriver]] = None,
    ):
        self.headless = headless
        self.driver_factory = driver_factory or create_chrome_driver
        self.driver: Optional[WebDriver] = None

    @property
    def is_active(self) -> bool:
        return self.driver is not None

    def ensure(self) -> WebDriver:
        """
        Return the live driver, creating one if needed.

        Returns:
            WebDriver ready to navigate

        Raises:
            SessionError: if Chrome could not be started
        """
        if self.driver and self._is_alive():
            return self.driver

        if self.driver:
            print("[Session] ⚠ Cached browser is not responding - recreating")
            self.dispose()

        print("[Session] Initializing browser...")
        try:
            self.driver = self.driver_factory(self.headless)
        except WebDriverException as e:
            self.driver = None
            raise SessionError(f"Failed to start browser: {e.msg or e}") from e

        print("[Session] ✓ Browser initialized successfully")
        return self.driver

    def dispose(self):
        """Quit the browser and clear the handle. No-op if there is none."""
        if not self.driver:
            return

        try:
            self.driver.quit()
            print("[Session] ✓ Closed browser")
        except Exception as e:
            print(f"[Session] ⚠ Browser did not quit cleanly: {e}")
        finally:
            self.driver = None

    def _is_alive(self) -> bool:
        """Round-trip to the browser. A crashed Chrome raises WebDriverException, a
        dead chromedriver raises urllib3 connection errors."""
        try:
            self.driver.current_url
            return True
        except Exception:
            return False
