"""
Configuration file for the small-cap finance bot
Edit this file to customize the research prompt, selectors, timeouts and schedule.
Deploy-time values can be overridden from the environment (or a .env file).
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Research prompt sent to Perplexity on every run
RESEARCH_PROMPT = (
    "Search Finance websites for newly published articles, and using at least 10 sources "
    "compile a list of 10 small-cap stocks under $2 billion market cap that have been "
    "discussed with positive sentiment within the last 3 days - List the tickers, "
    "company name, and market cap"
)

# Perplexity page structure
PERPLEXITY_URL = os.getenv('PERPLEXITY_URL', 'https://www.perplexity.ai/')
QUERY_INPUT_SELECTOR = 'textarea[placeholder*="Ask"]'

# Answer region selectors, tried in order (first selector with non-empty text wins).
# Perplexity changes its markup often; add new selectors at the top.
ANSWER_SELECTORS = [
    '[data-testid="copilot-answer"]',
    '.prose',
    '[class*="answer"]',
    '[class*="response"]',
    'main div div div div p',
    'div[class*="prose"] p',
]
ANSWER_FALLBACK_SELECTOR = 'main p, main div[class*="text"]'

# Browser reliability settings
HEADLESS = os.getenv('HEADLESS', 'True') == 'True'
PAGE_LOAD_TIMEOUT = 30                  # seconds before Selenium navigation times out
INPUT_WAIT_TIMEOUT = 10                 # seconds to wait for the query textarea
ANSWER_WAIT_TIMEOUT = int(os.getenv('ANSWER_WAIT_TIMEOUT', 90))  # seconds to wait for the answer to settle
ANSWER_POLL_INTERVAL = 2                # seconds between answer region polls
ANSWER_STABLE_POLLS = 2                 # answer must be unchanged for N consecutive polls
USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)
CHROME_ARGUMENTS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
    '--disable-accelerated-2d-canvas',
    '--no-first-run',
    '--no-zygote',
    '--disable-gpu',
    '--window-size=1920,1080',
]

# Filtering Configuration
MIN_RESPONSE_LENGTH = 100        # characters; shorter answers mean the page never rendered
MAX_MARKET_CAP_BILLIONS = 2.0    # small-cap filter (inclusive)
MAX_STRATEGY_RECORDS = 15        # absolute cap on records from the pattern strategies
FALLBACK_TRIGGER_COUNT = 5       # line fallback runs when fewer records than this were found
MAX_FALLBACK_RECORDS = 10        # fallback stops once this many records exist in total
COMPANY_NAME_MAX_LENGTH = 50

# Storage Configuration
CSV_PATH = os.getenv('FINANCE_CSV_PATH', 'data/finance_data.csv')
CSV_HEADER = ['Ticker', 'Company Name', 'Market Cap', 'Extracted At']

# Schedule Configuration
SCHEDULE = {
    'hour': '*/6',                # every 6 hours, on the hour
    'minute': 0,
    'timezone': 'America/New_York',
}
INITIAL_RUN_DELAY = 5            # seconds after start-up before the first run

# Server Configuration
HOST = os.getenv('HOST', '0.0.0.0')
PORT = int(os.getenv('PORT', 3000))
