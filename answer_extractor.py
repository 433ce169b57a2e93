"""
Answer Region Extraction

Pulls the AI answer text out of the rendered Perplexity page.
Selectors are tried in priority order; the first one whose matches carry
text wins, and that text is joined line by line. When none of them yield
text (markup drift), a generic paragraph scan over <main> is used.

Works on page HTML, so it runs the same against a live driver.page_source or
a saved page.
"""

from typing import List, Optional

from bs4 import BeautifulSoup, NavigableString

from config import ANSWER_SELECTORS, ANSWER_FALLBACK_SELECTOR

# Elements that start a new line when rendered
BLOCK_TAGS = ['p', 'li', 'div', 'tr', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6']


def extract_answer_text(
    html: str,
    selectors: Optional[List[str]] = None,
    fallback_selector: str = ANSWER_FALLBACK_SELECTOR,
) -> str:
    """
    Extract answer text from page HTML.

    Args:
        html: rendered page source
        selectors: CSS selectors in priority order (defaults to config.ANSWER_SELECTORS)
        fallback_selector: generic scan used when no selector matches

    Returns:
        Joined text content, or "" when nothing text-bearing was found
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, 'html.parser')
    _break_blocks(soup)

    for selector in (ANSWER_SELECTORS if selectors is None else selectors):
        text = _joined_text(soup, selector)
        if text:
            return text

    return _joined_text(soup, fallback_selector)


def _joined_text(soup: BeautifulSoup, selector: str) -> str:
    elements = soup.select(selector)
    if not elements:
        return ""
    text = '\n'.join(el.get_text() for el in elements)
    return '\n'.join(line.strip() for line in text.splitlines() if line.strip())


def _break_blocks(soup: BeautifulSoup):
    """Minified markup has no whitespace between <p>s; keep one line per block."""
    for br in soup.find_all('br'):
        br.replace_with(NavigableString('\n'))
    for block in soup.find_all(BLOCK_TAGS):
        block.insert_after(NavigableString('\n'))
