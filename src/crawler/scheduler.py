"""Breadth-first portal crawler that audits every page it reaches.

`analyze(url)` audits a single page; `crawl(seed_url, max_depth)` walks the
portal section the seed belongs to and audits each page once.
"""
import asyncio
import logging
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Deque, List, NamedTuple, Optional, Set, Tuple

import httpx

from core.config import Config
from core.errors import A11yError, ConfigurationError
from core.models import AnalysisResult
from crawler.fetcher import fetch_page, open_client
from crawler.link_extractor import PortalScope, extract_links
from crawler.normalizer import normalize_url
from crawler.sanitizer import audit_markup_async

logger = logging.getLogger(__name__)


class CrawlNode(NamedTuple):
    url: str
    depth: int


@dataclass
class CrawlContext:
    """Traversal state owned by a single crawl invocation."""

    scope: PortalScope
    max_depth: int
    queue: Deque[CrawlNode] = field(default_factory=deque)
    visited: Set[str] = field(default_factory=set)
    analyzed: Set[str] = field(default_factory=set)
    results: List[AnalysisResult] = field(default_factory=list)

    def next_node(self) -> Optional[CrawlNode]:
        """Pop nodes until one is due for processing; None when exhausted."""
        while self.queue:
            node = self.queue.popleft()
            if node.url in self.visited or node.depth > self.max_depth:
                logger.debug("Skipping %s (depth %d)", node.url, node.depth)
                continue
            return node
        return None


@asynccontextmanager
async def _client_for(client: Optional[httpx.AsyncClient], config: Config) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return
    async with open_client(config.crawl) as own:
        yield own


def resolve_scope(seed_url: str, config: Optional[Config] = None) -> PortalScope:
    """Portal scope for `seed_url`; raises ConfigurationError if it has none."""
    config = config or Config()
    return PortalScope.from_config(seed_url, config.crawl)


async def _fetch_and_audit(client: httpx.AsyncClient, url: str, config: Config) -> Tuple[AnalysisResult, str]:
    markup = await fetch_page(client, url, timeout=config.crawl.timeout)
    violations = await audit_markup_async(markup, config.audit.exclude, url=url)
    result = AnalysisResult(url=url, violations=violations, timestamp=datetime.now(timezone.utc))
    return result, markup


async def analyze(url: str, *, client: Optional[httpx.AsyncClient] = None, config: Optional[Config] = None) -> AnalysisResult:
    """Fetch and audit a single page.

    Raises FetchError or AuditError; nothing is retried.
    """
    config = config or Config()
    clean_url = normalize_url(url)
    async with _client_for(client, config) as c:
        result, _ = await _fetch_and_audit(c, clean_url, config)
    return result


async def crawl(
    seed_url: str,
    max_depth: int = 2,
    *,
    client: Optional[httpx.AsyncClient] = None,
    config: Optional[Config] = None,
) -> List[AnalysisResult]:
    """Crawl the portal section of `seed_url` breadth first and audit each page.

    Returns one result per distinct normalized URL, in completion order.
    A seed without a portal namespace yields [] and an error log entry.
    Pages that fail to fetch or audit are logged and dropped.
    """
    config = config or Config()
    try:
        scope = resolve_scope(seed_url, config)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return []

    ctx = CrawlContext(scope=scope, max_depth=max_depth)
    ctx.queue.append(CrawlNode(normalize_url(seed_url), 0))

    async with _client_for(client, config) as c:
        while True:
            node = ctx.next_node()
            if node is None:
                break
            ctx.visited.add(node.url)

            logger.info("Analyzing %s (depth %d)", node.url, node.depth)
            try:
                result, markup = await _fetch_and_audit(c, node.url, config)
            except A11yError as exc:
                logger.warning("Skipping %s: %s", node.url, exc)
                continue
            ctx.results.append(result)
            ctx.analyzed.add(node.url)

            for link in extract_links(markup, node.url, ctx.scope, ctx.analyzed):
                ctx.queue.append(CrawlNode(link, node.depth + 1))

    logger.info("Crawl of %s finished: %d page(s) analyzed", scope.seed, len(ctx.results))
    return ctx.results


def analyze_sync(url: str, config: Optional[Config] = None) -> AnalysisResult:
    """Synchronous wrapper for convenience."""
    return asyncio.run(analyze(url, config=config))


def crawl_sync(seed_url: str, max_depth: int = 2, config: Optional[Config] = None) -> List[AnalysisResult]:
    """Synchronous wrapper for convenience."""
    return asyncio.run(crawl(seed_url, max_depth, config=config))
