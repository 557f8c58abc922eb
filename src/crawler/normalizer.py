"""URL canonicalization used as the page identity everywhere in the crawler."""
import logging
from urllib.parse import urlsplit, urlunsplit

from core.errors import UrlParseError

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """Strip the query string from `url` and canonicalize its host and port.

    Unparseable input (not an absolute URL) is logged and returned unchanged,
    so a bad link never aborts a crawl. Fragments are kept as they are.
    """
    try:
        parts = urlsplit(url)
        if not parts.scheme or not parts.netloc:
            raise UrlParseError(url)
        # .port validates the netloc and raises ValueError on garbage
        parts.port
    except UrlParseError as exc:
        logger.warning("%s", exc)
        return url
    except ValueError as exc:
        logger.warning("%s", UrlParseError(url, str(exc)))
        return url

    path = parts.path or "/"
    return urlunsplit((parts.scheme, _canonical_netloc(parts), path, "", parts.fragment))


def _canonical_netloc(parts) -> str:
    """Lower-cased host without the scheme's default port; userinfo kept as given."""
    userinfo, _, _ = parts.netloc.rpartition("@")
    host = (parts.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    if port is not None and DEFAULT_PORTS.get(parts.scheme) != port:
        host = f"{host}:{port}"
    return f"{userinfo}@{host}" if userinfo else host
