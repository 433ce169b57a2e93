"""
Finance Bot - Query Orchestrator

One run: ensure session → ask Perplexity → validate → parse → persist.

    Start → EnsureSession → Submit&AwaitAnswer → ValidateResponse
          → Parse → ValidateRecords → Persist → Success

Every failure becomes a RunResult(success=False); nothing propagates to the
scheduler or the HTTP handler. Errors before parsing mean the browser is in a
bad state, so the session is disposed and recreated on the next run.

Runs are serialized: a trigger that fires while another run is in progress
is rejected immediately instead of sharing the browser.

Usage:
    bot = FinanceBot()
    result = bot.run_query()
    bot.cleanup()
"""

import threading
from datetime import datetime
from typing import Callable, List, Optional

import config
from dataset_writer import DatasetWriter
from errors import ExtractionEmptyError, FinanceBotError, QueryTimeoutError
from perplexity_client import PerplexityClient
from schemas import RunResult, StockRecord
from session_manager import SessionManager
from stock_parser import parse_stock_data

RUN_IN_PROGRESS = "Run already in progress"


class FinanceBot:
    """Composes session, query client, parser and dataset writer into runs"""

    def __init__(
        self,
        session_manager: Optional[SessionManager] = None,
        client: Optional[PerplexityClient] = None,
        writer: Optional[DatasetWriter] = None,
        parser: Callable[[str], List[StockRecord]] = parse_stock_data,
        prompt: str = config.RESEARCH_PROMPT,
    ):
        self.session_manager = session_manager or SessionManager()
        self.client = client or PerplexityClient()
        self.writer = writer or DatasetWriter()
        self.parser = parser
        self.prompt = prompt
        self._run_lock = threading.Lock()

    @property
    def csv_path(self) -> str:
        return self.writer.csv_path

    def run_query(self) -> RunResult:
        """
        Execute one full run.

        Returns:
            RunResult with the written records, or the failure reason
        """
        if not self._run_lock.acquire(blocking=False):
            print("[FinanceBot] ⚠ Run already in progress - rejecting overlapping trigger")
            return RunResult.failed(RUN_IN_PROGRESS)

        try:
            return self._run_once()
        finally:
            self._run_lock.release()

    def cleanup(self):
        """Dispose the browser session (process shutdown)."""
        self.session_manager.dispose()

    # ------------------------------------------------------------------
    # Run stages
    # ------------------------------------------------------------------

    def _run_once(self) -> RunResult:
        print(f"\n{'='*60}")
        print(f"[FinanceBot] Starting query run at {datetime.now().isoformat()}")
        print(f"{'='*60}")

        # Session-bound stages: any error here poisons the browser
        try:
            response_text = self._fetch_response()
        except Exception as e:
            print(f"[FinanceBot] ✗ Query failed: {e}")
            self._discard_session()
            return RunResult.failed(str(e) or e.__class__.__name__)

        # Session-independent stages: the browser stays alive
        try:
            stocks = self._extract(response_text)
            self.writer.append(stocks)
        except FinanceBotError as e:
            print(f"[FinanceBot] ✗ {e}")
            return RunResult.failed(str(e))
        except Exception as e:
            print(f"[FinanceBot] ✗ Unexpected error after query: {e}")
            return RunResult.failed(f"Unexpected error: {e}")

        print(f"[FinanceBot] ✓ Query completed successfully ({len(stocks)} stocks)")
        return RunResult.ok(stocks)

    def _discard_session(self):
        """Dispose after a failed query; a cleanup error must not replace the run's failure."""
        try:
            self.session_manager.dispose()
        except Exception as e:
            print(f"[FinanceBot] ⚠ Session cleanup failed: {e}")

    def _fetch_response(self) -> str:
        driver = self.session_manager.ensure()
        response_text = self.client.query(driver, self.prompt)

        if not response_text or len(response_text) < config.MIN_RESPONSE_LENGTH:
            raise QueryTimeoutError(
                f"Response too short or empty ({len(response_text or '')} chars)"
            )
        return response_text

    def _extract(self, response_text: str) -> List[StockRecord]:
        print("[FinanceBot] Parsing stock data...")
        stocks = self.parser(response_text)
        print(f"[FinanceBot] Parsed {len(stocks)} stocks")

        if not stocks:
            raise ExtractionEmptyError("No stocks extracted")
        return stocks
