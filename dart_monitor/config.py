"""
Runtime configuration for the DART monitor.

Everything is read from the environment once at import time; edit the
defaults here or export the variables before starting the bot.
"""

import os

# =========================
# OpenDART
# =========================
DART_API_KEY = os.getenv("DART_API_KEY", "")
DART_LIST_URL = "https://opendart.fss.or.kr/api/list.json"
DART_DOCUMENT_URL = "https://opendart.fss.or.kr/api/document.xml"
DART_VIEWER_URL = "https://dart.fss.or.kr/dsaf001/main.do?rcpNo={rcept_no}"

PAGE_SIZE = 100                                        # list.json caps page_count at 100
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))  # seconds, per call
LIST_PAGE_PAUSE = float(os.getenv("LIST_PAGE_PAUSE", "0.1"))
NOTIFY_PAUSE = float(os.getenv("NOTIFY_PAUSE", "0.5"))

# =========================
# Telegram
# =========================
TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN", "")
TELEGRAM_CHAT_ID = os.getenv("TELEGRAM_CHAT_ID", "")
TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/{method}"
TELEGRAM_POLL_TIMEOUT = 30                             # long-poll seconds for getUpdates
SEND_TELEGRAM = bool(TELEGRAM_TOKEN)                   # console mode when no token

# =========================
# Scheduling
# =========================
POLL_SECONDS = float(os.getenv("POLL_SECONDS", "5"))
LIVE_SCAN_ITEMS = int(os.getenv("LIVE_SCAN_ITEMS", "10"))
SIMULATION_ITEMS = int(os.getenv("SIMULATION_ITEMS", "1000"))
SIMULATION_DAYS = int(os.getenv("SIMULATION_DAYS", "3"))
RUN_ONCE = os.getenv("RUN_ONCE", "false").lower() == "true"
SIMULATE = os.getenv("SIMULATE", "")                   # "YYYYMMDD" or "YYYYMMDD-YYYYMMDD"

# =========================
# Market hours (KRX)
# =========================
MARKET_TZ = os.getenv("MARKET_TZ", "Asia/Seoul")
MONITOR_OPEN = 830       # HHMM, live scans start
MONITOR_CLOSE = 1800     # HHMM, live scans stop (inclusive)
SESSION_OPEN = 900       # regular trading session
SESSION_CLOSE = 1530

# "skip_in_session": earnings filings are ignored by live scans while the
# regular session is open. "always": earnings filings are always evaluated.
EARNINGS_POLICY = os.getenv("EARNINGS_POLICY", "skip_in_session")

LOG_REJECTS = os.getenv("LOG_REJECTS", "true").lower() == "true"
