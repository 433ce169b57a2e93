"""Tests for the Perplexity query step against a fake WebDriver."""

import pytest
from selenium.common.exceptions import NoSuchElementException, WebDriverException
from selenium.webdriver.common.keys import Keys

from errors import QueryTimeoutError, SessionError
from perplexity_client import AnswerSettled, PerplexityClient

EMPTY_PAGE = "<html><body><main><textarea placeholder='Ask anything'></textarea></main></body></html>"
ANSWER_TEXT = (
    "Here are small-cap stocks discussed positively this week: "
    "Example Corp (XYZ) - market cap of $1.5 billion. "
    "Alpha Beta Co (ABCD) - market cap of $0.8 billion."
)
ANSWER_PAGE = f'<html><body><main><div class="prose">{ANSWER_TEXT}</div></main></body></html>'


class FakeElement:
    def __init__(self):
        self.keys = []

    def send_keys(self, *values):
        self.keys.extend(values)


class FakeDriver:
    """Serves page sources in order, repeating the last one."""

    def __init__(self, pages, input_present=True, get_error=None):
        self.pages = list(pages)
        self.input_present = input_present
        self.get_error = get_error
        self.visited = []
        self.input = FakeElement()

    def get(self, url):
        if self.get_error:
            raise self.get_error
        self.visited.append(url)

    def find_element(self, by, value):
        if not self.input_present:
            raise NoSuchElementException(f"no element for {value}")
        return self.input

    @property
    def page_source(self):
        if len(self.pages) > 1:
            return self.pages.pop(0)
        return self.pages[0]


def _client(**overrides):
    settings = dict(
        url="https://www.perplexity.ai/",
        input_timeout=0.2,
        answer_timeout=1.0,
        poll_interval=0.01,
        stable_polls=2,
        min_length=100,
    )
    settings.update(overrides)
    return PerplexityClient(**settings)


class TestQuery:
    def test_returns_settled_answer(self):
        driver = FakeDriver([EMPTY_PAGE, ANSWER_PAGE])
        text = _client().query(driver, "find small caps")

        assert text == ANSWER_TEXT
        assert driver.visited == ["https://www.perplexity.ai/"]
        assert driver.input.keys == ["find small caps", Keys.RETURN]

    def test_waits_for_answer_to_stop_growing(self):
        partial = f'<main><div class="prose">{ANSWER_TEXT[:110]}</div></main>'
        driver = FakeDriver([EMPTY_PAGE, partial, ANSWER_PAGE])
        assert _client().query(driver, "prompt") == ANSWER_TEXT

    def test_answer_that_never_renders_times_out(self):
        driver = FakeDriver([EMPTY_PAGE])
        with pytest.raises(QueryTimeoutError):
            _client(answer_timeout=0.1).query(driver, "prompt")

    def test_unchanged_page_is_not_an_answer(self):
        driver = FakeDriver([ANSWER_PAGE])
        with pytest.raises(QueryTimeoutError):
            _client(answer_timeout=0.1).query(driver, "prompt")

    def test_short_answer_times_out(self):
        short = '<main><div class="prose">Too short.</div></main>'
        driver = FakeDriver([EMPTY_PAGE, short])
        with pytest.raises(QueryTimeoutError):
            _client(answer_timeout=0.1).query(driver, "prompt")

    def test_navigation_failure_is_session_error(self):
        driver = FakeDriver([EMPTY_PAGE], get_error=WebDriverException("net::ERR_NAME_NOT_RESOLVED"))
        with pytest.raises(SessionError):
            _client().query(driver, "prompt")

    def test_missing_input_is_session_error(self):
        driver = FakeDriver([EMPTY_PAGE], input_present=False)
        with pytest.raises(SessionError):
            _client(input_timeout=0.05).query(driver, "prompt")


class TestAnswerSettled:
    def test_requires_consecutive_identical_reads(self):
        reads = iter(["a" * 120, "b" * 120, "b" * 120])
        condition = AnswerSettled(lambda driver: next(reads), "", min_length=100, stable_polls=2)

        assert condition(None) is False
        assert condition(None) is False
        assert condition(None) == "b" * 120

    def test_single_poll_when_stable_polls_is_one(self):
        condition = AnswerSettled(lambda driver: "a" * 120, "", min_length=100, stable_polls=1)
        assert condition(None) == "a" * 120
