"""Page retrieval over httpx."""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from core.config import CrawlConfig
from core.errors import FetchError

DEFAULT_USER_AGENT = "portal-a11y-Scanner/1.0"


@asynccontextmanager
async def open_client(config: Optional[CrawlConfig] = None) -> AsyncIterator[httpx.AsyncClient]:
    """Shared client for one crawl; closed when the block exits."""
    config = config or CrawlConfig()
    async with httpx.AsyncClient(
        follow_redirects=True,
        headers={"User-Agent": config.user_agent or DEFAULT_USER_AGENT},
        timeout=config.timeout,
    ) as client:
        yield client


async def fetch_page(client: httpx.AsyncClient, url: str, timeout: Optional[float] = None) -> str:
    """Fetch `url` and return its body as text.

    Raises FetchError on network errors, timeouts and non-2xx statuses.
    """
    kwargs = {"timeout": timeout} if timeout is not None else {}
    try:
        resp = await client.get(url, **kwargs)
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise FetchError(url, f"HTTP {exc.response.status_code}", status_code=exc.response.status_code) from exc
    except httpx.HTTPError as exc:
        raise FetchError(url, str(exc) or exc.__class__.__name__) from exc
    return resp.text
