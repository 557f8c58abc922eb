"""Strip active content from fetched markup and audit it in an isolated fragment."""
import asyncio
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from bs4 import BeautifulSoup

from core.analyzer import get_registry
from core.errors import AuditError
from core.models import Violation

logger = logging.getLogger(__name__)

ACTIVE_TAGS = [
    "script", "noscript", "style", "iframe", "frame", "frameset",
    "object", "embed", "applet", "template", "base", "link",
]
URL_ATTRS = ("href", "src", "action", "formaction", "xlink:href")
UNSAFE_SCHEMES = ("javascript:", "vbscript:", "data:text/html")


def _strip_active_content(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(ACTIVE_TAGS):
        tag.decompose()
    for meta in soup.find_all("meta"):
        if (meta.get("http-equiv") or "").lower() == "refresh":
            meta.decompose()
    for el in soup.find_all(True):
        for attr in list(el.attrs):
            if attr.lower().startswith("on"):
                del el[attr]
                continue
            if attr.lower() in URL_ATTRS:
                value = "".join(str(el[attr]).split()).lower()
                if value.startswith(UNSAFE_SCHEMES):
                    del el[attr]


def sanitize_markup(markup: str) -> str:
    """Return `markup` with scripts, embedded content and event handlers removed."""
    soup = BeautifulSoup(markup, "lxml")
    _strip_active_content(soup)
    return str(soup)


@contextmanager
def audit_fragment(markup: str) -> Iterator[BeautifulSoup]:
    """Yield a fresh sanitized document built from `markup`.

    The fragment belongs to the block only and is torn down on exit,
    whether or not the audit inside raised.
    """
    fragment = BeautifulSoup(markup, "lxml")
    _strip_active_content(fragment)
    try:
        yield fragment
    finally:
        fragment.decompose()


def audit_markup(markup: str, exclude_rules: Optional[List[str]] = None, url: Optional[str] = None) -> List[Violation]:
    """Run the registered rules against a sanitized copy of `markup`.

    Raises AuditError when sanitizing or any rule fails.
    """
    registry = get_registry()
    try:
        with audit_fragment(markup) as fragment:
            return registry.analyze_all(fragment, exclude=exclude_rules)
    except Exception as exc:
        raise AuditError(url, f"{exc.__class__.__name__}: {exc}") from exc


async def audit_markup_async(markup: str, exclude_rules: Optional[List[str]] = None, url: Optional[str] = None) -> List[Violation]:
    """audit_markup off the event loop; parsing large pages is CPU bound."""
    return await asyncio.to_thread(audit_markup, markup, exclude_rules, url)
