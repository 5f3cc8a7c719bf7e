"""
Telegram alerts.

Messages are sent as Telegram HTML. If Telegram refuses the markup the same
text goes out once more as plain text; with no bot token configured the
plain text is printed instead.
"""

import html

import httpx
from bs4 import BeautifulSoup

from dart_monitor import config
from dart_monitor.errors import NotificationError
from dart_monitor.models import Notification


def format_message(n: Notification) -> str:
    f, v = n.filing, n.verdict
    lines = [
        "🚨 <b>[DART 호재 감지]</b>",
        "",
        f"🏢 <b>기업명:</b> {html.escape(f.corp_name)}",
        f"📄 <b>공시제목:</b> {html.escape(f.report_title)}",
        f"🏷️ <b>분류:</b> {html.escape(n.label)} ({html.escape(v.tag)})",
    ]
    annotation = v.annotation.splitlines()
    if annotation:
        lines.append(f"<b>{html.escape(annotation[0])}</b>")
        lines.extend(html.escape(a) for a in annotation[1:])
    lines += [
        "",
        f'🔗 <a href="{html.escape(f.link)}">원문 보기</a>',
        f"🕒 {n.sent_at.strftime('%Y-%m-%d %H:%M:%S')}",
    ]
    return "\n".join(lines)


def to_plain_text(html_text: str) -> str:
    """Readable version of a Telegram HTML message; links keep their URL."""
    soup = BeautifulSoup(html_text, "html.parser")
    for a in soup.find_all("a"):
        a.replace_with(f"{a.get_text()}: {a.get('href', '')}")
    return soup.get_text()


class TelegramNotifier:
    """Async callable that delivers one Notification to one chat."""

    def __init__(self, client: httpx.AsyncClient, token: str | None = None, chat_id: str | int | None = None):
        self.client = client
        self.token = config.TELEGRAM_TOKEN if token is None else token
        self.chat_id = chat_id or config.TELEGRAM_CHAT_ID or None

    async def __call__(self, notification: Notification) -> None:
        await self.send_text(format_message(notification))

    def api_url(self, method: str) -> str:
        return config.TELEGRAM_API_URL.format(token=self.token, method=method)

    async def send_text(self, text: str, as_html: bool = True) -> None:
        if not self.token:
            print("\n=== TELEGRAM ALERT (printing because TELEGRAM_TOKEN is not set) ===", flush=True)
            print(to_plain_text(text) if as_html else text, flush=True)
            print("=== END ALERT ===\n", flush=True)
            return
        if not self.chat_id:
            raise NotificationError("no chat to send to (use /on or set TELEGRAM_CHAT_ID)")

        payload = {"chat_id": self.chat_id, "text": text, "disable_web_page_preview": True}
        if as_html:
            payload["parse_mode"] = "HTML"
        try:
            r = await self.client.post(self.api_url("sendMessage"), json=payload, timeout=config.HTTP_TIMEOUT)
        except httpx.HTTPError as e:
            raise NotificationError(f"sendMessage: {e}") from e

        if r.status_code == 400 and as_html:
            print(f"  [Telegram] HTML rejected ({r.text[:200]}); resending as plain text", flush=True)
            await self.send_text(to_plain_text(text), as_html=False)
            return
        if r.status_code != 200:
            raise NotificationError(f"sendMessage {r.status_code}: {r.text[:200]}")
