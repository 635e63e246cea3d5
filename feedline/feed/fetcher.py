"""Conditional HTTP fetching of feed documents using httpx."""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime, parsedate_to_datetime

import httpx
import structlog

from feedline.clock import Clock
from feedline.feed.models import FetchError, FetchResult
from feedline.storage.models import EPOCH, CacheInfoItem

logger = structlog.get_logger(__name__)

ACCEPT = (
    "application/rss+xml, application/atom+xml, application/xml, "
    "application/json, text/xml"
)
ACCEPT_ENCODING = "br, gzip"
MIN_MAX_AGE = timedelta(seconds=60)
DEFAULT_RETRY_AFTER = timedelta(minutes=5)


def parse_max_age(cache_control: str | None) -> timedelta:
    """Return the freshness lifetime from a Cache-Control header.

    Only the first ``max-age`` directive is considered. Values below a
    minute, missing directives and garbage all yield one minute.
    """
    if not cache_control:
        return MIN_MAX_AGE
    for part in cache_control.split(","):
        part = part.strip()
        if part.lower().startswith("max-age="):
            try:
                seconds = int(part[len("max-age="):].strip('"'))
            except ValueError:
                return MIN_MAX_AGE
            return max(timedelta(seconds=seconds), MIN_MAX_AGE)
    return MIN_MAX_AGE


def parse_retry_after(retry_after: str | None, now: datetime) -> datetime:
    if not retry_after:
        return now + DEFAULT_RETRY_AFTER
    value = retry_after.strip()
    if value.isdigit():
        return now + timedelta(seconds=int(value))
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return now + DEFAULT_RETRY_AFTER
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when


def apply_fetch_result(
    info: CacheInfoItem, result: FetchResult, now: datetime
) -> None:
    """Fold one fetch result into the URL's cache metadata.

    ``fetch_after`` only ever moves forward; ``last_check`` and ``etag``
    change only when a new body was stored.
    """
    if result.changed:
        info.etag = result.etag
        info.last_check = now
    if result.fetch_after is not None and result.fetch_after > info.fetch_after:
        info.fetch_after = result.fetch_after


class HttpFeedFetcher:
    def __init__(
        self,
        clock: Clock,
        user_agent: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._clock = clock
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport

    def _build_headers(self, info: CacheInfoItem) -> dict[str, str]:
        headers = {
            "User-Agent": self._user_agent,
            "Accept": ACCEPT,
            "Accept-Encoding": ACCEPT_ENCODING,
        }
        if info.etag:
            headers["If-None-Match"] = info.etag
        if info.last_check > EPOCH:
            headers["If-Modified-Since"] = format_datetime(
                info.last_check.astimezone(timezone.utc), usegmt=True
            )
        return headers

    async def fetch(self, info: CacheInfoItem) -> FetchResult:
        now = self._clock.now()
        if info.fetch_after > now:
            logger.debug("fetch_skipped", url=info.url, fetch_after=info.fetch_after)
            return FetchResult(changed=False)

        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self._timeout
            ) as client:
                response = await client.get(info.url, headers=self._build_headers(info))
                # content is decoded per Content-Encoding (br needs brotli)
                body = response.content
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(f"request failed: {type(exc).__name__}: {exc}") from exc

        status = response.status_code
        if status == httpx.codes.NOT_MODIFIED:
            return FetchResult(
                changed=False,
                fetch_after=now + parse_max_age(response.headers.get("Cache-Control")),
                status_code=status,
            )
        if status in (httpx.codes.TOO_MANY_REQUESTS, httpx.codes.SERVICE_UNAVAILABLE):
            logger.info("fetch_backoff", url=info.url, status=status)
            return FetchResult(
                changed=False,
                fetch_after=parse_retry_after(response.headers.get("Retry-After"), now),
                status_code=status,
            )
        if status != httpx.codes.OK:
            raise FetchError(f"unexpected status code: {status}")

        return FetchResult(
            changed=True,
            etag=response.headers.get("ETag", ""),
            fetch_after=now + parse_max_age(response.headers.get("Cache-Control")),
            body=body,
            status_code=status,
        )
