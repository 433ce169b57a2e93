"""
Finance Bot Server

HTTP control surface + process entry point:
    GET  /              - liveness, next run, dataset path
    GET  /status        - next scheduled run, dataset existence and mtime
    GET  /run-now       - run a query now and return the RunResult
    GET  /download-csv  - download the dataset (404 if not written yet)

Usage:
    python app.py
"""

import os
import signal
import sys

from flask import Flask, jsonify, send_file

import config
from finance_bot import FinanceBot
from scheduler import create_scheduler, next_run_time


def _format_run_time(scheduler):
    run_time = next_run_time(scheduler)
    return run_time.isoformat() if run_time else None


def create_app(bot, scheduler) -> Flask:
    """Flask app bound to one FinanceBot and its scheduler."""
    app = Flask(__name__)

    @app.route('/')
    def index():
        """Liveness check"""
        return jsonify({
            'status': 'running',
            'next_run': _format_run_time(scheduler),
            'csv_path': bot.csv_path,
        })

    @app.route('/status')
    def status():
        """Schedule and dataset state (run failures are not reported here)"""
        return jsonify({
            'next_scheduled_run': _format_run_time(scheduler),
            'csv_exists': bot.writer.exists(),
            'last_modified': bot.writer.last_modified(),
        })

    @app.route('/run-now', methods=['GET', 'POST'])
    def run_now():
        """Trigger a query run and return its result verbatim"""
        result = bot.run_query()
        return jsonify(result.to_dict())

    @app.route('/download-csv')
    def download_csv():
        """Stream the dataset file"""
        if not bot.writer.exists():
            return jsonify({'error': 'CSV file not found'}), 404
        return send_file(
            os.path.abspath(bot.csv_path),
            mimetype='text/csv',
            as_attachment=True,
            download_name=os.path.basename(bot.csv_path),
        )

    return app


def install_signal_handlers(bot, scheduler):
    """Stop the schedule and close the browser on SIGTERM/SIGINT."""
    def shutdown(signum, frame):
        print(f"\n[Server] Received {signal.Signals(signum).name} - shutting down gracefully...")
        if scheduler.running:
            scheduler.shutdown(wait=False)
        bot.cleanup()
        sys.exit(0)

    signal.signal(signal.SIGTERM, shutdown)
    signal.signal(signal.SIGINT, shutdown)


def main():
    bot = FinanceBot()
    scheduler = create_scheduler(bot)
    scheduler.start()
    install_signal_handlers(bot, scheduler)

    app = create_app(bot, scheduler)
    print(f"[Server] Running on port {config.PORT}")
    print(f"[Server] Next scheduled run: {_format_run_time(scheduler)}")
    print("[Server] Finance bot started. Scheduled to run every 6 hours.")
    app.run(host=config.HOST, port=config.PORT, threaded=True, use_reloader=False)


if __name__ == '__main__':
    main()
