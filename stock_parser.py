"""
Stock Record Parser: unstructured answer text → validated StockRecords.

Strategy cascade:
1. Pattern matchers run in priority order, each yielding
   (ticker, company, market_cap) candidates from one prose shape
2. Candidates are validated (small-cap filter), normalized and
   deduplicated by ticker (first seen wins), up to 15 records
3. If fewer than 5 records survive, a line-by-line fallback tops
   the list up to 10 with placeholder company names

Pure: no I/O, no shared state. Never raises on odd input.

Usage:
    from stock_parser import parse_stock_data

    records = parse_stock_data(answer_text)
"""

import re
from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from config import (
    MAX_MARKET_CAP_BILLIONS, MAX_STRATEGY_RECORDS,
    FALLBACK_TRIGGER_COUNT, MAX_FALLBACK_RECORDS, COMPANY_NAME_MAX_LENGTH,
)
from schemas import StockRecord

# (ticker, company, market_cap): raw substrings straight from the text
Candidate = Tuple[str, str, str]
Matcher = Callable[[str], Iterator[Candidate]]


# ------------------------------------------------------------------
# Shared regex pieces
# ------------------------------------------------------------------
# Ticker letters are case-sensitive; only the unit word ignores case.

_CAP = r'\$([0-9.]+)\s*(?i:billion)'

_TICKER_THEN_COMPANY_RE = re.compile(
    r'\b([A-Z]{1,5})\s*\(([^)]+)\)[^$]*' + _CAP
)
_COMPANY_THEN_TICKER_RE = re.compile(
    r'([^(\n]+)\((?:[A-Z][A-Za-z]*:\s*)?([A-Z]{1,5})\)[^$]*' + _CAP
)
_TICKER_COLON_COMPANY_RE = re.compile(
    r'\b([A-Z]{1,5}):\s*([^-\n]+)-[^$]*' + _CAP
)

_LINE_TICKER_RE = re.compile(r'\b([A-Z]{2,5})\b')
_LINE_PAREN_TICKER_RE = re.compile(r'\((?:[A-Z][A-Za-z]*:\s*)?([A-Z]{2,5})\)')
_LINE_CAP_RE = re.compile(r'\$([0-9.]+)\s*billion', re.IGNORECASE)

_VALID_TICKER_RE = re.compile(r'[A-Z]{1,5}')
_BARE_TICKER_RE = re.compile(r'(?:[A-Z][A-Za-z]*:\s*)?[A-Z]{1,5}')
_PARENTHETICAL_RE = re.compile(r'\([^)]*\)')
_ENUMERATION_RE = re.compile(r'^\d+\.\s*')
_LEADING_JUNK_RE = re.compile(r'^[^\w]+')
_TRAILING_SEPARATORS = ' \t-–—:;,|*'


# ------------------------------------------------------------------
# Matchers (one prose shape each)
# ------------------------------------------------------------------

def match_ticker_then_company(text: str) -> Iterator[Candidate]:
    """XYZ (Example Corp) ... $1.5 billion

    A parenthetical that is itself a ticker ("Holding AG (XYZ)") belongs to
    the company-then-ticker shape and is skipped here.
    """
    for m in _TICKER_THEN_COMPANY_RE.finditer(text):
        if _BARE_TICKER_RE.fullmatch(m.group(2).strip()):
            continue
        yield m.group(1), m.group(2), m.group(3)


def match_company_then_ticker(text: str) -> Iterator[Candidate]:
    """Example Corp (XYZ) ... $1.5 billion  /  Example Corp (NASDAQ: XYZ) ..."""
    for m in _COMPANY_THEN_TICKER_RE.finditer(text):
        yield m.group(2), m.group(1), m.group(3)


def match_ticker_colon_company(text: str) -> Iterator[Candidate]:
    """XYZ: Example Corp - market cap $1.5 billion"""
    for m in _TICKER_COLON_COMPANY_RE.finditer(text):
        yield m.group(1), m.group(2), m.group(3)


def _line_ticker(line: str) -> Optional[str]:
    """A parenthesized ticker beats the first capitalized token ("Holding AG (XYZ)")."""
    match = _LINE_PAREN_TICKER_RE.search(line) or _LINE_TICKER_RE.search(line)
    return match.group(1) if match else None


def match_free_form_lines(text: str) -> Iterator[Candidate]:
    """
    Any line holding an uppercase 2-5 letter token and a "$X billion" token.
    Company is whatever is left once parentheticals, the cap and the ticker
    are cut out of the line.
    """
    for line in text.splitlines():
        ticker = _line_ticker(line)
        cap_match = _LINE_CAP_RE.search(line)
        if not (ticker and cap_match):
            continue

        company = _PARENTHETICAL_RE.sub('', line)
        company = _LINE_CAP_RE.sub('', company)
        company = re.sub(r'\b' + ticker + r'\b', '', company, count=1)
        yield ticker, company, cap_match.group(1)


def match_fallback_lines(text: str) -> Iterator[Candidate]:
    """Last resort: ticker + cap on one line, company unknown."""
    for line in text.splitlines():
        ticker = _line_ticker(line)
        cap_match = _LINE_CAP_RE.search(line)
        if ticker and cap_match:
            yield ticker, f"Company for {ticker}", cap_match.group(1)


# Priority order matters: structured shapes first, free-form last
STOCK_MATCHERS: List[Matcher] = [
    match_ticker_then_company,
    match_company_then_ticker,
    match_ticker_colon_company,
    match_free_form_lines,
]


# ------------------------------------------------------------------
# Validation + normalization
# ------------------------------------------------------------------

def parse_market_cap(value: str) -> Optional[float]:
    """Market cap in billions, or None if the numeral is malformed (e.g. '1.2.3')."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_ticker(ticker: str) -> str:
    return re.sub(r'[^A-Z]', '', ticker or '')


def normalize_company(company: str) -> str:
    """Strip parentheticals, '1. ' enumeration and bullets; cap at 50 chars."""
    company = _PARENTHETICAL_RE.sub('', company or '')
    company = ' '.join(company.split())
    company = _ENUMERATION_RE.sub('', company)
    company = _LEADING_JUNK_RE.sub('', company)
    company = company.rstrip(_TRAILING_SEPARATORS)
    return company[:COMPANY_NAME_MAX_LENGTH].rstrip()


def build_record(candidate: Candidate, extracted_at: str) -> Optional[StockRecord]:
    """Validate and normalize one candidate; None means rejected."""
    ticker, company, market_cap = candidate
    if not (ticker and company and market_cap):
        return None

    market_cap = market_cap.strip()
    value = parse_market_cap(market_cap)
    if value is None or value > MAX_MARKET_CAP_BILLIONS:
        return None

    ticker = normalize_ticker(ticker)
    if not _VALID_TICKER_RE.fullmatch(ticker):
        return None

    company = normalize_company(company)
    if not company:
        return None

    return StockRecord(
        ticker=ticker,
        company=company,
        market_cap=f"${market_cap}B",
        extracted_at=extracted_at,
    )


def accept_candidates(
    candidates: Iterable[Candidate],
    accepted: List[StockRecord],
    limit: int,
    extracted_at: str,
) -> List[StockRecord]:
    """
    Return accepted + every valid candidate whose ticker is not yet taken,
    stopping as soon as the list holds `limit` records. Candidates are
    consumed lazily, so matchers stop scanning once the limit is hit.
    """
    records = list(accepted)
    if len(records) >= limit:
        return records
    seen = {r.ticker for r in records}

    for candidate in candidates:
        record = build_record(candidate, extracted_at)
        if record is None or record.ticker in seen:
            continue
        seen.add(record.ticker)
        records.append(record)
        if len(records) >= limit:
            break

    return records


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------

def parse_stock_data(text: str, now: Optional[datetime] = None) -> List[StockRecord]:
    """
    Extract small-cap stock records from an answer.

    Args:
        text: rendered answer text
        now: extraction time stamped on every record (defaults to UTC now)

    Returns:
        Records in acceptance order, tickers unique
    """
    if not text:
        return []

    extracted_at = (now or datetime.now(timezone.utc)).isoformat()
    records: List[StockRecord] = []

    for matcher in STOCK_MATCHERS:
        if len(records) >= MAX_STRATEGY_RECORDS:
            break
        records = accept_candidates(matcher(text), records, MAX_STRATEGY_RECORDS, extracted_at)

    if len(records) < FALLBACK_TRIGGER_COUNT:
        records = accept_candidates(match_fallback_lines(text), records, MAX_FALLBACK_RECORDS, extracted_at)

    return records


if __name__ == "__main__":
    sample = """Here are small-cap stocks with positive sentiment:
1. Example Corp (XYZ) - market cap of $1.5 billion
2. ABCD (Alpha Beta Co) has a market cap around $0.8 billion
3. QRS: Quarry Resources - valued at $1.9 billion
4. Big Industries (BIG) - $12.4 billion
"""
    print("\nStock Parser Test")
    print("=" * 50)
    for record in parse_stock_data(sample):
        print(f"  {record.ticker:<6} {record.company:<30} {record.market_cap}")
