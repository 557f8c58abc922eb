"""Built-in accessibility rules.

Each rule inspects a sanitized fragment and reports at most one violation,
collecting every offending element as a node snippet.
"""
import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from core.analyzer import Analyzer
from core.models import Violation
from core.severity import make_violation

SNIPPET_LENGTH = 200

# Primary subtag of a BCP 47 language tag, optionally followed by subtags
_LANG_RE = re.compile(r"^[a-zA-Z]{2,3}(-[a-zA-Z0-9]{1,8})*$")


def _snippet(el: Tag) -> str:
    return str(el)[:SNIPPET_LENGTH]


def _result(rule_id: str, nodes: List[str]) -> Optional[Violation]:
    if not nodes:
        return None
    return make_violation(rule_id, nodes)


def _has_accessible_name(el: Tag) -> bool:
    if el.get_text(strip=True):
        return True
    if (el.get("aria-label") or "").strip() or el.get("aria-labelledby"):
        return True
    if (el.get("title") or "").strip():
        return True
    for img in el.find_all("img"):
        if (img.get("alt") or "").strip():
            return True
    return False


class ImageAltAnalyzer(Analyzer):
    """Images need alt text unless marked decorative."""

    @property
    def name(self) -> str:
        return "image-alt"

    @property
    def description(self) -> str:
        return "Detect images without alternate text"

    def analyze(self, fragment: BeautifulSoup) -> Optional[Violation]:
        nodes = []
        for img in fragment.find_all("img"):
            if img.get("role") in ("none", "presentation"):
                continue
            alt = img.get("alt")
            # alt="" is a valid decorative marker; only a missing attribute fails
            if alt is None and not (img.get("aria-label") or "").strip():
                nodes.append(_snippet(img))
        return _result(self.name, nodes)


class LinkNameAnalyzer(Analyzer):
    """Links need text, an aria label, or an image with alt text."""

    @property
    def name(self) -> str:
        return "link-name"

    @property
    def description(self) -> str:
        return "Detect links missing discernible text"

    def analyze(self, fragment: BeautifulSoup) -> Optional[Violation]:
        nodes = [_snippet(a) for a in fragment.find_all("a", href=True) if not _has_accessible_name(a)]
        return _result(self.name, nodes)


class FormLabelAnalyzer(Analyzer):
    """Check for missing labels on form controls."""

    @property
    def name(self) -> str:
        return "label"

    @property
    def description(self) -> str:
        return "Detect form controls without accessible labels"

    def analyze(self, fragment: BeautifulSoup) -> Optional[Violation]:
        nodes = []
        for control in fragment.find_all(["input", "textarea", "select"]):
            ctype = (control.get("type") or "").lower()
            if ctype in ("hidden", "submit", "button", "image", "reset"):
                continue
            has_label = False
            id_ = control.get("id")
            if id_ and fragment.find("label", attrs={"for": id_}):
                has_label = True
            if control.get("aria-label") or control.get("aria-labelledby") or control.get("title"):
                has_label = True
            if control.find_parent("label") is not None:
                has_label = True
            if not has_label:
                nodes.append(_snippet(control))
        return _result(self.name, nodes)


class ButtonNameAnalyzer(Analyzer):
    """Buttons need a discernible name."""

    @property
    def name(self) -> str:
        return "button-name"

    @property
    def description(self) -> str:
        return "Detect buttons without discernible text"

    def analyze(self, fragment: BeautifulSoup) -> Optional[Violation]:
        nodes = []
        for button in fragment.find_all("button"):
            if not _has_accessible_name(button):
                nodes.append(_snippet(button))
        for control in fragment.find_all("input"):
            ctype = (control.get("type") or "").lower()
            if ctype in ("submit", "reset"):
                # browsers supply a default label for these
                continue
            if ctype == "button" and not (control.get("value") or "").strip() and not control.get("aria-label"):
                nodes.append(_snippet(control))
        return _result(self.name, nodes)


class HeadingOrderAnalyzer(Analyzer):
    """Check for heading level jumps."""

    @property
    def name(self) -> str:
        return "heading-order"

    @property
    def description(self) -> str:
        return "Detect heading level jumps that confuse screen readers"

    def analyze(self, fragment: BeautifulSoup) -> Optional[Violation]:
        headings = fragment.find_all(re.compile(r"^h[1-6]$"))
        nodes = []
        prev = None
        for tag in headings:
            level = int(tag.name[1])
            if prev is not None and level - prev > 1:
                nodes.append(_snippet(tag))
            prev = level
        return _result(self.name, nodes)


def _parse_color(value: str) -> Optional[str]:
    if not value:
        return None
    v = value.strip()
    m = re.match(r"#([0-9a-fA-F]{6}|[0-9a-fA-F]{3})\b", v)
    if m:
        h = m.group(1)
        if len(h) == 3:
            h = "".join(c * 2 for c in h)
        return "#" + h.lower()
    m = re.match(r"rgba?\(([^)]+)\)", v)
    if m:
        try:
            parts = [int(float(p.strip().rstrip("%"))) for p in m.group(1).split(",")[:3]]
        except ValueError:
            return None
        if len(parts) == 3:
            return "#%02x%02x%02x" % tuple(max(0, min(255, p)) for p in parts)
    return None


def _hex_to_rgb(hexstr: str) -> Tuple[int, int, int]:
    h = hexstr.lstrip("#")
    return tuple(int(h[i:i + 2], 16) for i in (0, 2, 4))


def _relative_luminance(rgb: Tuple[int, int, int]) -> float:
    def chan(c):
        s = c / 255.0
        return s / 12.92 if s <= 0.03928 else ((s + 0.055) / 1.055) ** 2.4
    r, g, b = rgb
    return 0.2126 * chan(r) + 0.7152 * chan(g) + 0.0722 * chan(b)


def contrast_ratio(hex1: str, hex2: str) -> float:
    l1 = _relative_luminance(_hex_to_rgb(hex1))
    l2 = _relative_luminance(_hex_to_rgb(hex2))
    lighter = max(l1, l2)
    darker = min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


class ContrastAnalyzer(Analyzer):
    """Check for low contrast text in inline styles."""

    threshold = 4.5

    @property
    def name(self) -> str:
        return "color-contrast"

    @property
    def description(self) -> str:
        return "Detect low contrast in inline style colors"

    def analyze(self, fragment: BeautifulSoup) -> Optional[Violation]:
        nodes = []
        for el in fragment.find_all(style=True):
            color = None
            bgcolor = None
            for part in el["style"].split(";"):
                if ":" not in part:
                    continue
                k, v = part.split(":", 1)
                k = k.strip().lower()
                if k == "color":
                    color = _parse_color(v)
                elif k in ("background-color", "background"):
                    bgcolor = _parse_color(v)
            if color and bgcolor and contrast_ratio(color, bgcolor) < self.threshold:
                nodes.append(_snippet(el))
        return _result(self.name, nodes)


class HtmlLangAnalyzer(Analyzer):
    """The document element needs a valid lang attribute."""

    @property
    def name(self) -> str:
        return "html-has-lang"

    @property
    def description(self) -> str:
        return "Detect documents without a valid lang attribute"

    def analyze(self, fragment: BeautifulSoup) -> Optional[Violation]:
        html = fragment.find("html")
        if html is None:
            return None
        lang = (html.get("lang") or "").strip()
        if lang and _LANG_RE.match(lang):
            return None
        return _result(self.name, [_snippet(html)[:80]])


class DocumentTitleAnalyzer(Analyzer):
    """Documents need a non-empty <title>."""

    @property
    def name(self) -> str:
        return "document-title"

    @property
    def description(self) -> str:
        return "Detect documents without a title"

    def analyze(self, fragment: BeautifulSoup) -> Optional[Violation]:
        if fragment.find("html") is None:
            return None
        title = fragment.find("title")
        if title is not None and title.get_text(strip=True):
            return None
        return _result(self.name, ["<html>"])
