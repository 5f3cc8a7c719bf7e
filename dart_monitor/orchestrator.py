"""
Scan orchestration: page through the listing, gate by title, fetch the body,
extract, decide, and hand every pass to the notifier.

All I/O is awaited one call at a time. Only one scan runs per session; the
lock on ScanSession is the re-entrancy guard for the periodic timer and for
manual simulations.
"""

import asyncio
import math
from datetime import datetime

import httpx

from dart_monitor import config
from dart_monitor.classifier import classify, display_label, is_earnings_title
from dart_monitor.decision import evaluate
from dart_monitor.errors import ListingError, NotificationError
from dart_monitor.fetcher import get_document_text, usable_body
from dart_monitor.listing import fetch_listing_page
from dart_monitor.market_hours import earnings_allowed, is_market_open
from dart_monitor.models import FilingSummary, Notification


class ScanSession:
    """Monitoring state for one process: the dedup set and the on/off switch."""

    def __init__(self):
        self.seen: set[str] = set()
        self.monitoring = False
        self.scan_lock = asyncio.Lock()
        self.monitor_task: asyncio.Task | None = None

    def start(self) -> bool:
        """Arm monitoring. False if it was already on."""
        if self.monitoring:
            return False
        self.monitoring = True
        return True

    def stop(self) -> bool:
        """Disarm monitoring. A scan already in flight still runs to completion."""
        was_on = self.monitoring
        self.monitoring = False
        return was_on

    @property
    def scanning(self) -> bool:
        return self.scan_lock.locked()

    def is_seen(self, key: str) -> bool:
        return key in self.seen

    def mark_seen(self, key: str) -> None:
        self.seen.add(key)


def _clock() -> str:
    return datetime.now().strftime("%H:%M:%S")


async def collect_filings(client: httpx.AsyncClient, max_items: int,
                          begin_date: str | None = None, end_date: str | None = None) -> list[FilingSummary]:
    """Newest-first listing rows, at most max_items. A failed page keeps what came before it."""
    pages = max(1, math.ceil(max_items / config.PAGE_SIZE))
    filings: list[FilingSummary] = []
    for page_no in range(1, pages + 1):
        if page_no > 1:
            await asyncio.sleep(config.LIST_PAGE_PAUSE)
        try:
            page = await fetch_listing_page(client, page_no, begin_date=begin_date, end_date=end_date)
        except ListingError as e:
            print(f"  [Listing] ✗ {e}, stopping pagination", flush=True)
            break
        if not page:
            break
        filings.extend(page)
    return filings[:max_items]


async def scan(session: ScanSession, client: httpx.AsyncClient, *, max_items: int | None = None,
               simulation: bool = False, begin_date: str | None = None, end_date: str | None = None,
               notifier=None, now: datetime | None = None) -> list[Notification]:
    """
    One pass over the listing. Returns the notifications produced, oldest first.

    Live mode skips filings already in session.seen and adds every pass to it.
    Simulation reads and writes no dedup state and ignores the earnings policy.
    """
    max_items = max_items or (config.SIMULATION_ITEMS if simulation else config.LIVE_SCAN_ITEMS)
    filings = await collect_filings(client, max_items, begin_date, end_date)
    filings.reverse()
    allow_earnings = simulation or earnings_allowed(now)

    notifications: list[Notification] = []
    for filing in filings:
        title, corp = filing.report_title, filing.corp_name
        if not simulation and session.is_seen(filing.key):
            continue

        if not classify(title):
            if simulation and config.LOG_REJECTS:
                print(f"  [제외] [{_clock()}][{corp}] {title}", flush=True)
            continue
        if not allow_earnings and is_earnings_title(title):
            print(f"  [Skip] earnings during session: [{corp}] {title}", flush=True)
            continue

        body = usable_body(await get_document_text(client, filing.receipt_no))
        verdict = evaluate(title, True, body)
        if not verdict.passed:
            if config.LOG_REJECTS:
                print(f"  [Reject] [{corp}] {title} -> {verdict.tag}", flush=True)
            continue

        n = Notification(filing=filing, verdict=verdict, label=display_label(title, body))
        # marked before sending: a send failure is not retried
        if not simulation:
            session.mark_seen(filing.key)
        print(f"  [Pass] [{corp}] {title} -> {verdict.tag}", flush=True)

        if notifier is not None:
            if notifications:
                await asyncio.sleep(config.NOTIFY_PAUSE)
            try:
                await notifier(n)
            except NotificationError as e:
                print(f"  [Telegram] ✗ {corp} {filing.receipt_no}: {e}", flush=True)
        notifications.append(n)

    return notifications


async def live_tick(session: ScanSession, client: httpx.AsyncClient, notifier=None,
                    now: datetime | None = None) -> list[Notification]:
    """One timer tick: a live scan, unless the market is closed or a scan is still running."""
    if not is_market_open(now):
        return []
    if session.scanning:
        print(f"[{_clock()}] previous scan still running, skipping tick", flush=True)
        return []
    async with session.scan_lock:
        return await scan(session, client, notifier=notifier, now=now)


async def run_simulation(session: ScanSession, client: httpx.AsyncClient, begin_date: str,
                         end_date: str | None = None, max_items: int | None = None,
                         notifier=None) -> list[Notification]:
    """Backfill over a date or date range; waits for any running scan first."""
    async with session.scan_lock:
        return await scan(session, client, max_items=max_items, simulation=True,
                          begin_date=begin_date, end_date=end_date or begin_date, notifier=notifier)


async def monitor_loop(session: ScanSession, client: httpx.AsyncClient, notifier=None) -> None:
    print(f"[{_clock()}] monitoring started (every {config.POLL_SECONDS:g}s)", flush=True)
    while session.monitoring:
        try:
            await live_tick(session, client, notifier)
        except Exception as e:
            # a failed scan never stops the timer
            print(f"[{_clock()}] [Error] scan failed: {e}", flush=True)
        await asyncio.sleep(config.POLL_SECONDS)
    print(f"[{_clock()}] monitoring stopped", flush=True)
