"""
Perplexity Query Client

Workflow:
1. Navigate to Perplexity (bounded by the driver's page-load timeout)
2. Wait for the "Ask" textarea
3. Type the research prompt and press Enter
4. Poll the answer region until the text has changed from what was on the
   page before submitting, is long enough, and has stopped growing
5. Return the answer text

Navigation problems raise SessionError; an answer that never settles raises
QueryTimeoutError. Both tell the orchestrator to throw the browser away.
"""

from typing import Callable, List, Optional

from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

import config
from answer_extractor import extract_answer_text
from errors import QueryTimeoutError, SessionError


class AnswerSettled:
    """
    WebDriverWait condition: returns the answer text once it differs from
    the pre-submit baseline, reaches min_length, and has been identical for
    `stable_polls` consecutive polls. Returns False otherwise.
    """

    def __init__(self, read_answer: Callable, baseline: str, min_length: int, stable_polls: int):
        self.read_answer = read_answer
        self.baseline = baseline
        self.min_length = min_length
        self.stable_polls = stable_polls
        self.last_text = None
        self.times_seen = 0

    def __call__(self, driver):
        text = self.read_answer(driver)

        if text == self.last_text:
            self.times_seen += 1
        else:
            self.last_text = text
            self.times_seen = 1

        if text == self.baseline or len(text) < self.min_length:
            return False
        if self.times_seen < self.stable_polls:
            return False
        return text


class PerplexityClient:
    """Submits one prompt through a live browser session and reads the answer"""

    def __init__(
        self,
        url: str = config.PERPLEXITY_URL,
        input_selector: str = config.QUERY_INPUT_SELECTOR,
        answer_selectors: Optional[List[str]] = None,
        input_timeout: float = config.INPUT_WAIT_TIMEOUT,
        answer_timeout: float = config.ANSWER_WAIT_TIMEOUT,
        poll_interval: float = config.ANSWER_POLL_INTERVAL,
        stable_polls: int = config.ANSWER_STABLE_POLLS,
        min_length: int = config.MIN_RESPONSE_LENGTH,
    ):
        self.url = url
        self.input_selector = input_selector
        self.answer_selectors = answer_selectors or list(config.ANSWER_SELECTORS)
        self.input_timeout = input_timeout
        self.answer_timeout = answer_timeout
        self.poll_interval = poll_interval
        self.stable_polls = stable_polls
        self.min_length = min_length

    def query(self, driver, prompt: str) -> str:
        """
        Ask Perplexity `prompt` and return the rendered answer text.

        Raises:
            SessionError: page or query input could not be loaded
            QueryTimeoutError: answer did not settle within answer_timeout
        """
        input_box = self._open_query_page(driver)
        baseline = self.read_answer(driver)

        print("[Perplexity] Entering query...")
        input_box.send_keys(prompt)
        input_box.send_keys(Keys.RETURN)

        print("[Perplexity] Waiting for response...")
        response_text = self._wait_for_answer(driver, baseline)
        print(f"[Perplexity] ✓ Response extracted, length: {len(response_text)}")
        return response_text

    def read_answer(self, driver) -> str:
        return extract_answer_text(driver.page_source, self.answer_selectors)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _open_query_page(self, driver):
        print("[Perplexity] Navigating to Perplexity...")
        try:
            driver.get(self.url)
        except WebDriverException as e:
            raise SessionError(f"Failed to load {self.url}: {e.msg or e}") from e

        try:
            return WebDriverWait(driver, self.input_timeout).until(
                EC.presence_of_element_located((By.CSS_SELECTOR, self.input_selector))
            )
        except TimeoutException as e:
            raise SessionError(
                f"Query input '{self.input_selector}' did not appear within {self.input_timeout}s"
            ) from e

    def _wait_for_answer(self, driver, baseline: str) -> str:
        condition = AnswerSettled(self.read_answer, baseline, self.min_length, self.stable_polls)
        try:
            return WebDriverWait(driver, self.answer_timeout, poll_frequency=self.poll_interval).until(condition)
        except TimeoutException as e:
            partial = len(condition.last_text or '')
            raise QueryTimeoutError(
                f"Answer did not settle within {self.answer_timeout}s ({partial} chars rendered)"
            ) from e
