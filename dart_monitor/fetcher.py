"""
Filing body retrieval: download document.xml, unzip when needed, strip the
markup and keep only the characters the extractors care about.
"""

import io
import re
import zipfile
import zlib

import httpx
from bs4 import BeautifulSoup

from dart_monitor import config
from dart_monitor.errors import FetchError

ZIP_MAGIC = b"PK"
FETCH_FAILED = "본문 추출 실패"
NO_CONTENT = "본문 내용 없음"
SENTINELS = (FETCH_FAILED, NO_CONTENT)

STATUS_RE = re.compile(rb"<status>\s*(\d{3})\s*</status>")
DISALLOWED_CHARS = re.compile(r"[^가-힣ㄱ-ㅎㅏ-ㅣa-zA-Z0-9.\s%()\[\]:,-]")
WHITESPACE = re.compile(r"\s+")


def unpack_document(payload: bytes) -> str:
    """Text of the first archive entry, or the payload itself when it is not a zip."""
    if payload[:2] != ZIP_MAGIC:
        # document.xml answers errors with a small <result><status>..</status> body
        m = STATUS_RE.search(payload[:500])
        if m and m.group(1) != b"000":
            raise FetchError(f"registry status {m.group(1).decode()}")
        return payload.decode("utf-8", errors="replace")
    try:
        with zipfile.ZipFile(io.BytesIO(payload)) as zf:
            names = zf.namelist()
            if not names:
                raise FetchError("empty archive")
            return zf.read(names[0]).decode("utf-8", errors="replace")
    except (zipfile.BadZipFile, zlib.error, OSError, RuntimeError, NotImplementedError) as e:
        raise FetchError(f"malformed archive: {e}") from e


def normalize_document(raw: str) -> str:
    soup = BeautifulSoup(raw, "html.parser")
    for n in soup(["style", "script"]):
        n.decompose()
    text = soup.get_text(separator=" ")
    text = text.replace("&nbsp;", " ")
    text = WHITESPACE.sub(" ", text).strip()
    text = DISALLOWED_CHARS.sub("", text)
    text = WHITESPACE.sub(" ", text).strip()
    return text or NO_CONTENT


async def fetch_document(client: httpx.AsyncClient, receipt_no: str) -> str:
    """Normalized body of one filing. Raises FetchError."""
    params = {"crtfc_key": config.DART_API_KEY, "rcept_no": receipt_no}
    try:
        r = await client.get(config.DART_DOCUMENT_URL, params=params, timeout=config.HTTP_TIMEOUT)
        r.raise_for_status()
    except httpx.HTTPError as e:
        raise FetchError(f"{receipt_no}: {e}") from e
    return normalize_document(unpack_document(r.content))


async def get_document_text(client: httpx.AsyncClient, receipt_no: str) -> str:
    """Like fetch_document, but a failure degrades to the FETCH_FAILED sentinel."""
    try:
        return await fetch_document(client, receipt_no)
    except FetchError as e:
        print(f"  [Fetch] ✗ {e}", flush=True)
        return FETCH_FAILED


def usable_body(text: str) -> str:
    return "" if text in SENTINELS else text
