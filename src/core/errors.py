"""Error types raised by the crawl/analysis pipeline."""

from typing import Optional


class A11yError(Exception):
    """Base class for portal-a11y errors."""


class UrlParseError(A11yError):
    """A URL could not be parsed. Reported, never fatal."""

    def __init__(self, url: str, reason: str = "not an absolute URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Cannot parse URL {url!r}: {reason}")


class FetchError(A11yError):
    """Network failure or non-success HTTP status while fetching a page."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {message}")


class ConfigurationError(A11yError):
    """The crawl cannot start, e.g. the seed URL has no portal namespace."""


class AuditError(A11yError):
    """Sanitizing or auditing a single page failed."""

    def __init__(self, url: Optional[str], message: str):
        self.url = url
        where = f" for {url}" if url else ""
        super().__init__(f"Audit failed{where}: {message}")
