"""Tests for the HTTP control surface and shutdown handling."""

import signal
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

import app as server
from dataset_writer import DatasetWriter
from scheduler import QUERY_JOB_ID
from schemas import RunResult, StockRecord

NEXT_RUN = datetime(2026, 10, 19, 18, 0, tzinfo=timezone.utc)


class FakeBot:
    def __init__(self, csv_path, result=None):
        self.writer = DatasetWriter(csv_path)
        self.result = result or RunResult.failed("No stocks extracted")
        self.runs = 0

    @property
    def csv_path(self):
        return self.writer.csv_path

    def run_query(self):
        self.runs += 1
        return self.result


class FakeScheduler:
    def __init__(self, next_run=NEXT_RUN):
        self.next_run = next_run

    def get_job(self, job_id):
        if job_id == QUERY_JOB_ID and self.next_run is not None:
            return SimpleNamespace(next_run_time=self.next_run)
        return None


@pytest.fixture
def bot(tmp_path):
    return FakeBot(str(tmp_path / "finance_data.csv"))


@pytest.fixture
def client(bot):
    return server.create_app(bot, FakeScheduler()).test_client()


def _record():
    return StockRecord(ticker="XYZ", company="Example Corp", market_cap="$1.5B",
                       extracted_at="2026-10-19T12:00:00+00:00")


class TestIndex:
    def test_reports_running_and_next_run(self, client, bot):
        body = client.get('/').get_json()
        assert body == {
            'status': 'running',
            'next_run': NEXT_RUN.isoformat(),
            'csv_path': bot.csv_path,
        }

    def test_next_run_null_when_unscheduled(self, bot):
        client = server.create_app(bot, FakeScheduler(next_run=None)).test_client()
        assert client.get('/').get_json()['next_run'] is None


class TestStatus:
    def test_before_first_write(self, client):
        body = client.get('/status').get_json()
        assert body['next_scheduled_run'] == NEXT_RUN.isoformat()
        assert body['csv_exists'] is False
        assert body['last_modified'] is None

    def test_after_write(self, client, bot):
        bot.writer.append([_record()])
        body = client.get('/status').get_json()
        assert body['csv_exists'] is True
        assert body['last_modified'] is not None


class TestRunNow:
    def test_returns_failure_result(self, client, bot):
        response = client.get('/run-now')
        assert response.status_code == 200
        assert response.get_json() == {
            'success': False,
            'stock_count': 0,
            'stocks': [],
            'error': "No stocks extracted",
        }
        assert bot.runs == 1

    def test_post_returns_records(self, tmp_path):
        bot = FakeBot(str(tmp_path / "finance_data.csv"), result=RunResult.ok([_record()]))
        client = server.create_app(bot, FakeScheduler()).test_client()

        body = client.post('/run-now').get_json()
        assert body['success'] is True
        assert body['stock_count'] == 1
        assert body['stocks'][0] == {
            'ticker': "XYZ",
            'company': "Example Corp",
            'market_cap': "$1.5B",
            'extracted_at': "2026-10-19T12:00:00+00:00",
        }
        assert 'error' not in body


class TestDownloadCsv:
    def test_missing_file_is_404(self, client):
        response = client.get('/download-csv')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'CSV file not found'}

    def test_streams_file_as_attachment(self, client, bot):
        bot.writer.append([_record()])
        response = client.get('/download-csv')
        try:
            assert response.status_code == 200
            assert response.mimetype == 'text/csv'
            assert 'attachment' in response.headers['Content-Disposition']
            assert 'finance_data.csv' in response.headers['Content-Disposition']
            assert response.data.decode('utf-8').startswith('Ticker,Company Name,Market Cap,Extracted At')
        finally:
            response.close()


class TestSignalHandlers:
    def test_shutdown_stops_scheduler_and_browser(self, monkeypatch):
        handlers = {}
        monkeypatch.setattr(server.signal, 'signal', lambda signum, handler: handlers.update({signum: handler}))

        bot = MagicMock()
        scheduler = MagicMock(running=True)
        server.install_signal_handlers(bot, scheduler)
        assert set(handlers) == {signal.SIGTERM, signal.SIGINT}

        with pytest.raises(SystemExit) as exc:
            handlers[signal.SIGTERM](signal.SIGTERM, None)
        assert exc.value.code == 0
        scheduler.shutdown.assert_called_once_with(wait=False)
        bot.cleanup.assert_called_once()

    def test_stopped_scheduler_is_not_shut_down_twice(self, monkeypatch):
        handlers = {}
        monkeypatch.setattr(server.signal, 'signal', lambda signum, handler: handlers.update({signum: handler}))

        bot = MagicMock()
        scheduler = MagicMock(running=False)
        server.install_signal_handlers(bot, scheduler)

        with pytest.raises(SystemExit):
            handlers[signal.SIGINT](signal.SIGINT, None)
        scheduler.shutdown.assert_not_called()
        bot.cleanup.assert_called_once()
