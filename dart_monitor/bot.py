#!/usr/bin/env python3
"""
DART Disclosure Monitor: Telegram bot

- /on    : start live monitoring (scan every POLL_SECONDS during market hours)
- /off   : stop monitoring (a scan in flight still finishes)
- /test  : simulation over a date or date range, no dedup, no market-hours gate
- /status: monitoring state
- /help  : usage

Without TELEGRAM_TOKEN the bot cannot receive commands; it starts monitoring
right away and prints alerts to the console instead.

Run: python -m dart_monitor
Stop: Ctrl + C
"""

import asyncio
import re
from datetime import date, datetime, timedelta

import httpx

from dart_monitor import config
from dart_monitor.market_hours import is_market_open
from dart_monitor.notifier import TelegramNotifier
from dart_monitor.orchestrator import ScanSession, live_tick, monitor_loop, run_simulation

COMMAND_RE = re.compile(r"^/([a-z_]+)(\d*)(?:@\S+)?(?:\s+(.*))?$", re.IGNORECASE | re.DOTALL)
DATE_ARG = re.compile(r"^\d{8}$")

HELP_TEXT = """🔍 <b>DART 모니터링 봇 사용법</b>

🚀 <code>/on</code> : 실시간 모니터링 시작
🛑 <code>/off</code> : 모니터링 중지
📊 <code>/test [건수] [YYYYMMDD [YYYYMMDD]]</code> : 시뮬레이션 (기본 최근 3일 1,000건)
ℹ️ <code>/status</code> : 모니터링 상태

💡 <b>알림 조건:</b>
• 영업이익 70%↑ (100억↑, 순이익 감소 없음) 또는 흑자전환
• 매출액 대비 30%↑ 공급계약 (70%↑ 대형수주)
• 임상/기술 공시 (유의성 확보 시 강조)
• 양수도/제3자배정 투자자 (대기업 강조)"""


def parse_test_args(args: str, today: date | None = None) -> tuple[int, str, str]:
    """'/test' arguments -> (max_items, begin YYYYMMDD, end YYYYMMDD)."""
    today = today or date.today()
    max_items = config.SIMULATION_ITEMS
    dates = []
    for arg in (args or "").split():
        if DATE_ARG.match(arg):
            datetime.strptime(arg, "%Y%m%d")  # ValueError on 20261399
            dates.append(arg)
        elif arg.isdigit() and int(arg) > 0:
            max_items = int(arg)
        else:
            raise ValueError(f"알 수 없는 인자: {arg}")
    if len(dates) > 2:
        raise ValueError("날짜는 최대 2개까지 지정할 수 있습니다")
    if not dates:
        begin = (today - timedelta(days=config.SIMULATION_DAYS)).strftime("%Y%m%d")
        return max_items, begin, today.strftime("%Y%m%d")
    begin, end = dates[0], dates[-1]
    if begin > end:
        begin, end = end, begin
    return max_items, begin, end


class CommandBot:
    """Long-polls getUpdates and drives one ScanSession from chat commands."""

    def __init__(self, client: httpx.AsyncClient, session: ScanSession | None = None,
                 notifier: TelegramNotifier | None = None):
        self.client = client
        self.session = session or ScanSession()
        self.notifier = notifier or TelegramNotifier(client)
        self.offset = 0
        self._tasks: set[asyncio.Task] = set()

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def reply(self, text: str) -> None:
        await self.notifier.send_text(text)

    async def get_updates(self) -> list[dict]:
        r = await self.client.get(
            self.notifier.api_url("getUpdates"),
            params={"offset": self.offset, "timeout": config.TELEGRAM_POLL_TIMEOUT},
            timeout=config.TELEGRAM_POLL_TIMEOUT + 10,
        )
        r.raise_for_status()
        updates = r.json().get("result") or []
        if updates:
            self.offset = updates[-1]["update_id"] + 1
        return updates

    async def handle(self, message: dict) -> None:
        text = (message.get("text") or "").strip()
        chat_id = (message.get("chat") or {}).get("id")
        m = COMMAND_RE.match(text)
        if not m or chat_id is None:
            return
        if config.TELEGRAM_CHAT_ID and str(chat_id) != str(config.TELEGRAM_CHAT_ID):
            print(f"[Bot] ignoring command from chat {chat_id}", flush=True)
            return

        command, inline_num, args = m.group(1).lower(), m.group(2), m.group(3) or ""
        self.notifier.chat_id = chat_id
        print(f"[Bot] /{command}{inline_num} {args}".rstrip(), flush=True)

        if command == "help":
            await self.reply(HELP_TEXT)
        elif command == "on":
            await self.turn_on()
        elif command == "off":
            self.session.stop()
            await self.reply("🛑 <b>모니터링 중지</b>")
        elif command == "status":
            await self.reply(self.status_text())
        elif command == "test":
            try:
                max_items, begin, end = parse_test_args(f"{inline_num} {args}")
            except ValueError as e:
                await self.reply(f"⚠️ {e}")
                return
            self._spawn(self.simulate(max_items, begin, end))

    async def turn_on(self) -> None:
        if not self.session.start():
            await self.reply("ℹ️ 이미 모니터링 중입니다")
            return
        # a loop stopped by /off may still be sleeping; it picks the flag up again when it wakes
        task = self.session.monitor_task
        if task is None or task.done():
            self.session.monitor_task = self._spawn(monitor_loop(self.session, self.client, self.notifier))
        await self.reply("🚀 <b>지능형 모니터링 가동 시작</b>")

    async def simulate(self, max_items: int, begin: str, end: str) -> None:
        await self.reply(f"📊 <b>{max_items:,}건 시뮬레이션 시작...</b> ({begin}~{end})")
        try:
            found = await run_simulation(self.session, self.client, begin, end,
                                         max_items=max_items, notifier=self.notifier)
        except Exception as e:
            print(f"[Bot] simulation failed: {e}", flush=True)
            await self.reply(f"⚠️ 시뮬레이션 실패: {e}")
            return
        await self.reply(f"✅ <b>시뮬레이션 완료</b> (감지 {len(found)}건)")

    def status_text(self) -> str:
        return "\n".join([
            f"모니터링: {'ON' if self.session.monitoring else 'OFF'}",
            f"스캔 진행 중: {'예' if self.session.scanning else '아니오'}",
            f"장 운영 시간: {'예' if is_market_open() else '아니오'}",
            f"알림 완료 공시: {len(self.session.seen)}건",
        ])

    async def run(self) -> None:
        while True:
            try:
                updates = await self.get_updates()
            except (httpx.HTTPError, ValueError) as e:
                print(f"[Bot] getUpdates failed: {e}; retrying in 5s", flush=True)
                await asyncio.sleep(5)
                continue
            for update in updates:
                message = update.get("message") or update.get("edited_message")
                if not message:
                    continue
                try:
                    await self.handle(message)
                except Exception as e:
                    print(f"[Bot] command failed: {e}", flush=True)


def parse_date_range(value: str) -> tuple[str, str]:
    """'20261016' or '20261016-20261018' -> (begin, end)."""
    begin, _, end = value.partition("-")
    for d in (begin, end or begin):
        datetime.strptime(d, "%Y%m%d")
    return begin, end or begin


def print_banner() -> None:
    print("============================================================", flush=True)
    print("DART Disclosure Monitor", flush=True)
    print(f"DART API key present: {'YES' if config.DART_API_KEY else 'NO (requests will fail)'}", flush=True)
    print(f"Telegram: {'ENABLED' if config.SEND_TELEGRAM else 'DISABLED (alerts printed to console)'}", flush=True)
    print(f"Earnings policy: {config.EARNINGS_POLICY}", flush=True)
    if config.SIMULATE:
        mode = f"SIMULATION ({config.SIMULATE})"
    elif config.RUN_ONCE:
        mode = "ONCE"
    else:
        mode = f"CONTINUOUS (every {config.POLL_SECONDS:g}s during market hours)"
    print(f"Run mode: {mode}", flush=True)
    print("============================================================", flush=True)


async def amain() -> None:
    async with httpx.AsyncClient() as client:
        session = ScanSession()
        notifier = TelegramNotifier(client)

        if config.SIMULATE:
            begin, end = parse_date_range(config.SIMULATE)
            found = await run_simulation(session, client, begin, end, notifier=notifier)
            print(f"\nSimulation complete. Alerts: {len(found)}", flush=True)
            return
        if config.RUN_ONCE:
            found = await live_tick(session, client, notifier)
            print(f"\n[RUN_ONCE mode] Check complete. Alerts: {len(found)}", flush=True)
            return
        if not config.SEND_TELEGRAM:
            session.start()
            await monitor_loop(session, client, notifier)
            return
        await CommandBot(client, session, notifier).run()


def main() -> None:
    print_banner()
    try:
        asyncio.run(amain())
    except KeyboardInterrupt:
        print("\nStopped by user. Bye.")


if __name__ == "__main__":
    main()
