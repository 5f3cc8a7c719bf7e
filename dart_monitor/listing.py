"""OpenDART list.json client."""

import httpx

from dart_monitor import config
from dart_monitor.errors import ListingError
from dart_monitor.models import FilingSummary

STATUS_OK = "000"
STATUS_NO_DATA = "013"


async def fetch_listing_page(client: httpx.AsyncClient, page_no: int, page_size: int | None = None,
                             begin_date: str | None = None, end_date: str | None = None) -> list[FilingSummary]:
    """
    One page of filings, newest first. Dates are YYYYMMDD.
    Raises ListingError on transport failures and non-success statuses.
    """
    params = {
        "crtfc_key": config.DART_API_KEY,
        "page_count": min(page_size or config.PAGE_SIZE, 100),
        "page_no": page_no,
    }
    if begin_date:
        params["bgn_de"] = begin_date
    if end_date:
        params["end_de"] = end_date

    try:
        r = await client.get(config.DART_LIST_URL, params=params, timeout=config.HTTP_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except httpx.HTTPError as e:
        raise ListingError(f"page {page_no}: {e}") from e
    except ValueError as e:
        raise ListingError(f"page {page_no}: bad JSON ({e})") from e

    status = str(data.get("status", ""))
    if status == STATUS_NO_DATA:
        return []
    if status != STATUS_OK:
        raise ListingError(f"page {page_no}: status {status} {data.get('message', '')}".strip())
    return [FilingSummary.from_api(row) for row in data.get("list") or []]
