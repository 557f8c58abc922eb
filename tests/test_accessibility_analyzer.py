import pytest
from bs4 import BeautifulSoup

from analyzers.plugins import (
    ButtonNameAnalyzer,
    ContrastAnalyzer,
    DocumentTitleAnalyzer,
    FormLabelAnalyzer,
    HeadingOrderAnalyzer,
    HtmlLangAnalyzer,
    ImageAltAnalyzer,
    LinkNameAnalyzer,
    contrast_ratio,
)
from core.analyzer import Analyzer, AnalyzerRegistry, get_registry
from core.errors import AuditError
from crawler.sanitizer import audit_fragment, audit_markup, sanitize_markup


def soup(html):
    return BeautifulSoup(html, "lxml")


def test_detects_missing_alt_link_name_and_form_label():
    html = """
    <html lang="en">
      <head><title>Form</title></head>
      <body>
        <img src="logo.png" />
        <a href="/"> </a>
        <form>
          <input type="text" id="name" />
        </form>
      </body>
    </html>
    """
    violations = audit_markup(html)
    ids = [v.id for v in violations]
    assert ids == ["image-alt", "link-name", "label"]
    assert all(v.description for v in violations)


def test_one_violation_per_rule_collects_nodes():
    html = '<html lang="en"><head><title>t</title></head><body><img src="a.png"><img src="b.png"></body></html>'
    violations = audit_markup(html)
    assert len(violations) == 1
    assert violations[0].id == "image-alt"
    assert len(violations[0].nodes) == 2
    assert violations[0].impact == "critical"
    assert violations[0].wcag == "1.1.1"


def test_decorative_image_passes():
    assert ImageAltAnalyzer().analyze(soup('<img src="x.png" alt="">')) is None
    assert ImageAltAnalyzer().analyze(soup('<img src="x.png" role="presentation">')) is None


def test_link_with_labelled_image_passes():
    html = '<a href="/home"><img src="home.png" alt="Home"></a>'
    assert LinkNameAnalyzer().analyze(soup(html)) is None


def test_label_variants():
    ok = """
    <label for="a">A</label><input id="a">
    <label>B <input></label>
    <input aria-label="C">
    <input type="hidden">
    """
    assert FormLabelAnalyzer().analyze(soup(ok)) is None
    assert FormLabelAnalyzer().analyze(soup("<select></select>")) is not None


def test_button_name():
    assert ButtonNameAnalyzer().analyze(soup("<button></button>")).id == "button-name"
    assert ButtonNameAnalyzer().analyze(soup("<button>Send</button>")) is None
    assert ButtonNameAnalyzer().analyze(soup('<button aria-label="Close"></button>')) is None


def test_heading_order_jump():
    violation = HeadingOrderAnalyzer().analyze(soup("<h1>a</h1><h3>b</h3><h4>c</h4>"))
    assert violation is not None
    assert violation.nodes == ["<h3>b</h3>"]
    assert HeadingOrderAnalyzer().analyze(soup("<h1>a</h1><h2>b</h2><h1>c</h1>")) is None


def test_low_contrast_inline_style():
    html = "<p style='color:#777777;background-color:#ffffff'>text</p>"
    assert ContrastAnalyzer().analyze(soup(html)).id == "color-contrast"
    ok = "<p style='color:#000;background-color:#fff'>text</p>"
    assert ContrastAnalyzer().analyze(soup(ok)) is None
    assert contrast_ratio("#000000", "#ffffff") == pytest.approx(21.0)


def test_html_lang_and_title():
    assert HtmlLangAnalyzer().analyze(soup("<html><body>Hello</body></html>")) is not None
    assert HtmlLangAnalyzer().analyze(soup('<html lang="en-US"><body>Hello</body></html>')) is None
    assert DocumentTitleAnalyzer().analyze(soup("<html><head><title> </title></head></html>")) is not None
    assert DocumentTitleAnalyzer().analyze(soup("<html><head><title>Home</title></head></html>")) is None


def test_excluded_rules_are_skipped():
    html = '<html><body><img src="a.png"></body></html>'
    ids = [v.id for v in audit_markup(html, exclude_rules=["image-alt"])]
    assert "image-alt" not in ids
    assert "html-has-lang" in ids


def test_default_registry_order():
    assert list(get_registry().list()) == [
        "image-alt",
        "link-name",
        "label",
        "button-name",
        "heading-order",
        "color-contrast",
        "html-has-lang",
        "document-title",
    ]


def test_sanitize_removes_active_content():
    html = """
    <html><head><script>alert(1)</script><meta http-equiv="refresh" content="0;url=/x"></head>
    <body onload="steal()">
      <a href="javascript:alert(1)">x</a>
      <a href="/ok" onclick="steal()">ok</a>
      <iframe src="https://ads.example"></iframe>
      <img src="a.png" onerror="steal()">
    </body></html>
    """
    clean = sanitize_markup(html)
    assert "<script" not in clean
    assert "alert" not in clean
    assert "steal" not in clean
    assert "<iframe" not in clean
    assert "refresh" not in clean
    assert 'href="/ok"' in clean


def test_audit_never_sees_script_content():
    html = '<html lang="en"><head><title>t</title></head><body><script>document.write("<img src=x>")</script></body></html>'
    assert audit_markup(html) == []


def test_audit_fragment_is_torn_down_on_error():
    captured = {}
    with pytest.raises(RuntimeError):
        with audit_fragment("<html><body><p>hi</p></body></html>") as fragment:
            captured["fragment"] = fragment
            raise RuntimeError("rule failed")
    assert captured["fragment"].decomposed


class _ExplodingRule(Analyzer):
    @property
    def name(self):
        return "explodes"

    @property
    def description(self):
        return "Always fails"

    def analyze(self, fragment):
        raise ValueError("bad rule")


def test_failing_rule_raises_audit_error(monkeypatch):
    registry = AnalyzerRegistry()
    registry.register(_ExplodingRule())
    monkeypatch.setattr("crawler.sanitizer.get_registry", lambda: registry)

    with pytest.raises(AuditError) as excinfo:
        audit_markup("<p>x</p>", url="https://example.org/p")
    assert excinfo.value.url == "https://example.org/p"
    assert isinstance(excinfo.value.__cause__, ValueError)
