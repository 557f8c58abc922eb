"""Discover in-scope links on a fetched page."""
import logging
from dataclasses import dataclass, field
from typing import AbstractSet, List, Optional, Sequence
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, SoupStrainer

from core.config import CrawlConfig
from core.errors import ConfigurationError
from crawler.normalizer import normalize_url

logger = logging.getLogger(__name__)

# Parse only <a href> tags
LINK_STRAINER = SoupStrainer("a", href=True)


@dataclass(frozen=True)
class PortalScope:
    """The portal section a crawl is confined to, derived once from the seed."""

    seed: str
    portal: str
    marker: str = "portal"
    excluded_paths: Sequence[str] = field(default_factory=lambda: ("/servicio/",))

    @classmethod
    def from_seed(cls, seed_url: str, marker: str = "portal", excluded_paths: Optional[Sequence[str]] = None) -> "PortalScope":
        """Build the scope for `seed_url`.

        Raises ConfigurationError when the seed path has no `/<marker>/<name>` segment.
        """
        if excluded_paths is None:
            excluded_paths = ("/servicio/",)
        seed = normalize_url(seed_url)
        segments = urlsplit(seed).path.split("/")
        portal = None
        for i, segment in enumerate(segments[:-1]):
            if segment == marker and segments[i + 1]:
                portal = segments[i + 1]
                break
        if portal is None:
            raise ConfigurationError(
                f"Seed URL {seed_url!r} has no /{marker}/<name> segment; refusing to crawl outside a portal"
            )
        return cls(seed=seed, portal=portal, marker=marker, excluded_paths=tuple(excluded_paths))

    @classmethod
    def from_config(cls, seed_url: str, config: CrawlConfig) -> "PortalScope":
        return cls.from_seed(seed_url, marker=config.namespace_marker, excluded_paths=config.excluded_paths)

    @property
    def namespace(self) -> str:
        return f"/{self.marker}/{self.portal}/"

    def contains(self, url: str) -> bool:
        """True when a normalized absolute URL lies inside this portal section."""
        if self.namespace not in url:
            return False
        if any(excluded in url for excluded in self.excluded_paths):
            return False
        if not url.startswith(self.seed):
            return False
        return "#" not in url


def extract_links(markup: str, base_url: str, scope: PortalScope, analyzed: AbstractSet[str] = frozenset()) -> List[str]:
    """Absolute, normalized, in-scope links found in `markup`, in document order.

    Links already in `analyzed` are left out. Malformed hrefs are skipped.
    """
    soup = BeautifulSoup(markup, "lxml", parse_only=LINK_STRAINER)
    found: List[str] = []
    seen = set()
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        try:
            full = urljoin(base_url, href)
            parts = urlsplit(full)
            parts.port
        except ValueError:
            logger.debug("Skipping malformed href %r on %s", href, base_url)
            continue
        # mailto:, tel:, javascript: and friends
        if parts.scheme not in ("http", "https") or not parts.netloc:
            continue
        candidate = normalize_url(full)
        if candidate in seen or candidate in analyzed:
            continue
        if not scope.contains(candidate):
            continue
        seen.add(candidate)
        found.append(candidate)
    return found
