"""Telegram command handling tests."""

import asyncio
from datetime import date

import httpx
import pytest

from dart_monitor import bot, config, orchestrator
from dart_monitor.bot import HELP_TEXT, CommandBot, parse_date_range, parse_test_args
from dart_monitor.notifier import TelegramNotifier
from dart_monitor.orchestrator import ScanSession

TODAY = date(2026, 10, 18)


def message(text: str, chat_id: int = 42) -> dict:
    return {"message_id": 1, "text": text, "chat": {"id": chat_id, "type": "private"}}


@pytest.fixture
def command_bot(client):
    return CommandBot(client, ScanSession(), TelegramNotifier(client, token="T"))


async def idle_loop(session, client, notifier=None):
    return None


@pytest.mark.unit
class TestParseTestArgs:

    def test_defaults_cover_recent_days(self):
        assert parse_test_args("", today=TODAY) == (1000, "20261015", "20261018")

    def test_count(self):
        assert parse_test_args("500", today=TODAY) == (500, "20261015", "20261018")

    def test_single_date(self):
        assert parse_test_args("20261016", today=TODAY) == (1000, "20261016", "20261016")

    def test_range_in_any_order(self):
        assert parse_test_args("200 20261018 20261016", today=TODAY) == (200, "20261016", "20261018")

    @pytest.mark.parametrize("args", ["abc", "0", "20261399", "20261014 20261015 20261016"])
    def test_bad_arguments(self, args):
        with pytest.raises(ValueError):
            parse_test_args(args, today=TODAY)

    def test_date_range_for_environment(self):
        assert parse_date_range("20261016") == ("20261016", "20261016")
        assert parse_date_range("20261014-20261016") == ("20261014", "20261016")
        with pytest.raises(ValueError):
            parse_date_range("yesterday")


@pytest.mark.unit
class TestCommands:

    @pytest.mark.asyncio
    async def test_help(self, fake_dart, client, command_bot):
        async with client:
            await command_bot.handle(message("/help"))
        assert len(fake_dart.telegram_calls) == 1
        assert fake_dart.telegram_calls[0]["text"] == HELP_TEXT
        assert fake_dart.telegram_calls[0]["chat_id"] == 42
        assert command_bot.notifier.chat_id == 42

    @pytest.mark.asyncio
    async def test_on_then_off(self, fake_dart, client, command_bot, monkeypatch):
        monkeypatch.setattr(bot, "monitor_loop", idle_loop)
        async with client:
            await command_bot.handle(message("/on"))
            assert command_bot.session.monitoring
            await command_bot.session.monitor_task

            await command_bot.handle(message("/on@dart_alert_bot"))
            await command_bot.handle(message("/off"))
        assert not command_bot.session.monitoring
        texts = [c["text"] for c in fake_dart.telegram_calls]
        assert "가동 시작" in texts[0]
        assert "이미 모니터링 중" in texts[1]
        assert "모니터링 중지" in texts[2]

    @pytest.mark.asyncio
    async def test_quick_off_on_keeps_one_loop(self, client, command_bot, monkeypatch):
        monkeypatch.setattr(config, "POLL_SECONDS", 0.05)
        tickers = []

        async def counting_tick(session, client, notifier=None):
            tickers.append(asyncio.current_task())
            return []

        monkeypatch.setattr(orchestrator, "live_tick", counting_tick)
        async with client:
            await command_bot.handle(message("/on"))
            loop_task = command_bot.session.monitor_task
            await asyncio.sleep(0.01)
            await command_bot.handle(message("/off"))
            await command_bot.handle(message("/on"))
            assert command_bot.session.monitor_task is loop_task

            await asyncio.sleep(0.3)
            await command_bot.handle(message("/off"))
            await asyncio.wait_for(loop_task, timeout=5)
        assert len(tickers) >= 2
        assert set(tickers) == {loop_task}

    @pytest.mark.asyncio
    async def test_on_after_loop_exit_starts_a_new_loop(self, client, command_bot, monkeypatch):
        monkeypatch.setattr(bot, "monitor_loop", idle_loop)
        async with client:
            await command_bot.handle(message("/on"))
            first = command_bot.session.monitor_task
            await command_bot.handle(message("/off"))
            await first
            await command_bot.handle(message("/on"))
            second = command_bot.session.monitor_task
            await second
        assert second is not first

    @pytest.mark.asyncio
    async def test_other_chats_are_ignored(self, fake_dart, client, command_bot, monkeypatch):
        monkeypatch.setattr(config, "TELEGRAM_CHAT_ID", "42")
        async with client:
            await command_bot.handle(message("/on", chat_id=7))
        assert not command_bot.session.monitoring
        assert fake_dart.telegram_calls == []

    @pytest.mark.asyncio
    async def test_non_commands_are_ignored(self, fake_dart, client, command_bot):
        async with client:
            await command_bot.handle(message("hello"))
            await command_bot.handle({"text": "/help"})
        assert fake_dart.telegram_calls == []

    @pytest.mark.asyncio
    async def test_bad_test_arguments_reply_with_warning(self, fake_dart, client, command_bot):
        async with client:
            await command_bot.handle(message("/test abc"))
        assert fake_dart.telegram_calls[0]["text"].startswith("⚠️")

    @pytest.mark.asyncio
    async def test_status(self, fake_dart, client, command_bot):
        async with client:
            await command_bot.handle(message("/status"))
        assert "모니터링: OFF" in fake_dart.telegram_calls[0]["text"]


@pytest.mark.unit
class TestSimulationCommand:

    @pytest.mark.asyncio
    async def test_inline_count_and_date(self, fake_dart, client, command_bot):
        fake_dart.add("단일판매ㆍ공급계약체결", "X", "20261016000123",
                      "<table><tr><td>매출액 대비 (%)</td><td>85.0</td></tr></table>")
        async with client:
            await command_bot.handle(message("/test50 20261016"))
            await asyncio.gather(*list(command_bot._tasks))

        assert fake_dart.list_calls[0]["bgn_de"] == "20261016"
        assert fake_dart.list_calls[0]["end_de"] == "20261016"
        texts = [c["text"] for c in fake_dart.telegram_calls]
        assert len(texts) == 3
        assert "50건 시뮬레이션 시작" in texts[0]
        assert "large-scale-supply" in texts[1]
        assert "감지 1건" in texts[2]
        assert command_bot.session.seen == set()


@pytest.mark.unit
class TestGetUpdates:

    @pytest.mark.asyncio
    async def test_offset_advances_past_last_update(self):
        seen_params = []

        def handler(request):
            seen_params.append(dict(request.url.params))
            return httpx.Response(200, json={"ok": True, "result": [
                {"update_id": 5, "message": message("/help")},
                {"update_id": 6, "message": message("/status")},
            ]})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            command_bot = CommandBot(client, notifier=TelegramNotifier(client, token="T"))
            updates = await command_bot.get_updates()
            await command_bot.get_updates()

        assert [u["update_id"] for u in updates] == [5, 6]
        assert seen_params[0]["offset"] == "0"
        assert seen_params[1]["offset"] == "7"
        assert command_bot.offset == 7
