"""Shared fixtures: an in-memory OpenDART + Telegram behind httpx.MockTransport."""

import io
import json
import zipfile

import httpx
import pytest

from dart_monitor import config


@pytest.fixture(autouse=True)
def fast_config(monkeypatch):
    """No throttling pauses and no real credentials in tests."""
    monkeypatch.setattr(config, "LIST_PAGE_PAUSE", 0)
    monkeypatch.setattr(config, "NOTIFY_PAUSE", 0)
    monkeypatch.setattr(config, "POLL_SECONDS", 0)
    monkeypatch.setattr(config, "DART_API_KEY", "test-key")
    monkeypatch.setattr(config, "TELEGRAM_TOKEN", "")
    monkeypatch.setattr(config, "TELEGRAM_CHAT_ID", "")
    monkeypatch.setattr(config, "EARNINGS_POLICY", "skip_in_session")


def zip_bytes(text: str, name: str = "20261016000123.xml") -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr(name, text.encode("utf-8"))
    return buf.getvalue()


def listing_row(title: str, corp: str, rcept_no: str) -> dict:
    return {
        "corp_code": "00123456",
        "corp_name": corp,
        "stock_code": "123456",
        "corp_cls": "K",
        "report_nm": title,
        "rcept_no": rcept_no,
        "flr_nm": corp,
        "rcept_dt": rcept_no[:8],
        "rm": "",
    }


class FakeDart:
    """
    Serves list.json pages (rows kept newest first, like the real API) and
    zipped document.xml bodies. Unknown documents answer 500.
    """

    def __init__(self):
        self.rows: list[dict] = []
        self.documents: dict[str, str | bytes | Exception] = {}
        self.fail_pages: set[int] = set()
        self.list_calls: list[dict] = []
        self.document_calls: list[str] = []
        self.telegram_calls: list[dict] = []
        self.telegram_status = 200

    def add(self, title: str, corp: str, rcept_no: str, document=None) -> dict:
        row = listing_row(title, corp, rcept_no)
        self.rows.insert(0, row)
        if document is not None:
            self.documents[rcept_no] = document
        return row

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.telegram.org":
            self.telegram_calls.append(json.loads(request.content or b"{}"))
            return httpx.Response(self.telegram_status, json={"ok": self.telegram_status == 200})

        params = request.url.params
        if request.url.path.endswith("/list.json"):
            page_no, size = int(params["page_no"]), int(params["page_count"])
            self.list_calls.append(dict(params))
            if page_no in self.fail_pages:
                return httpx.Response(200, json={"status": "020", "message": "요청 제한을 초과하였습니다."})
            rows = self.rows[(page_no - 1) * size: page_no * size]
            if not rows:
                return httpx.Response(200, json={"status": "013", "message": "조회된 데이타가 없습니다."})
            return httpx.Response(200, json={"status": "000", "message": "정상", "page_no": page_no, "list": rows})

        if request.url.path.endswith("/document.xml"):
            rcept_no = params["rcept_no"]
            self.document_calls.append(rcept_no)
            doc = self.documents.get(rcept_no)
            if doc is None:
                return httpx.Response(500, text="server error")
            if isinstance(doc, Exception):
                raise doc
            if isinstance(doc, bytes):
                return httpx.Response(200, content=doc)
            return httpx.Response(200, content=zip_bytes(doc))

        return httpx.Response(404)


@pytest.fixture
def fake_dart():
    return FakeDart()


@pytest.fixture
def client(fake_dart):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_dart.handler))
