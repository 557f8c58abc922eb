"""Rule metadata and impact levels for accessibility violations.

Maps rule ids to impact, WCAG criteria and help text so every violation the
auditor reports carries the same prioritization data.
"""

from typing import Dict, Iterable, List

from core.models import Violation

# Impact levels, most severe first
CRITICAL = "critical"  # Blocks access for users with disabilities
SERIOUS = "serious"  # Significant barrier to accessibility
MODERATE = "moderate"  # Usability issue, workarounds exist
MINOR = "minor"

IMPACT_ORDER = {CRITICAL: 0, SERIOUS: 1, MODERATE: 2, MINOR: 3}


RULES: Dict[str, Dict[str, str]] = {
    "image-alt": {
        "impact": CRITICAL,
        "wcag": "1.1.1",
        "description": "Ensures <img> elements have alternate text or a role of none or presentation",
        "help": "Images must have alternate text",
    },
    "link-name": {
        "impact": SERIOUS,
        "wcag": "2.4.4",
        "description": "Ensures links have discernible text",
        "help": "Links must have discernible text",
    },
    "label": {
        "impact": CRITICAL,
        "wcag": "1.3.1",
        "description": "Ensures every form element has a label",
        "help": "Form elements must have labels",
    },
    "button-name": {
        "impact": CRITICAL,
        "wcag": "4.1.2",
        "description": "Ensures buttons have discernible text",
        "help": "Buttons must have discernible text",
    },
    "heading-order": {
        "impact": MODERATE,
        "wcag": "1.3.1",
        "description": "Ensures the order of headings is semantically correct",
        "help": "Heading levels should only increase by one",
    },
    "color-contrast": {
        "impact": SERIOUS,
        "wcag": "1.4.3",
        "description": "Ensures the contrast between foreground and background colors meets WCAG 2 AA contrast ratio thresholds",
        "help": "Elements must meet minimum color contrast ratio thresholds",
    },
    "html-has-lang": {
        "impact": SERIOUS,
        "wcag": "3.1.1",
        "description": "Ensures every HTML document has a lang attribute",
        "help": "<html> element must have a lang attribute",
    },
    "document-title": {
        "impact": SERIOUS,
        "wcag": "2.4.2",
        "description": "Ensures each HTML document contains a non-empty <title> element",
        "help": "Documents must have <title> element to aid in navigation",
    },
}


def make_violation(rule_id: str, nodes: List[str]) -> Violation:
    """Build a Violation for a known rule, filling in its metadata."""
    rule = RULES.get(rule_id, {})
    return Violation(
        id=rule_id,
        description=rule.get("description", rule_id),
        help=rule.get("help", ""),
        impact=rule.get("impact", MINOR),
        wcag=rule.get("wcag"),
        nodes=nodes,
    )


def sort_by_impact(violations: Iterable[Violation]) -> List[Violation]:
    """Sort violations most severe first (stable for equal impact)."""
    return sorted(violations, key=lambda v: IMPACT_ORDER.get(v.impact, 3))


def summarize_by_impact(violations: Iterable[Violation]) -> Dict[str, int]:
    counts = {CRITICAL: 0, SERIOUS: 0, MODERATE: 0, MINOR: 0}
    for v in violations:
        if v.impact in counts:
            counts[v.impact] += 1
        else:
            counts[MINOR] += 1
    return counts


def score_label(violations: List[Violation]) -> str:
    """Cosmetic quality label: 100 minus 5 points per violation.

    Display helper only; the thresholds carry no meaning for the crawl.
    """
    score = 100 - len(violations) * 5
    if score >= 90:
        return "Excellent"
    if score >= 70:
        return "Good"
    if score >= 50:
        return "Fair"
    return "Poor"


def get_impact_color(impact: str) -> str:
    """Color name for an impact level (rich console markup)."""
    return {
        CRITICAL: "red",
        SERIOUS: "magenta",
        MODERATE: "yellow",
        MINOR: "blue",
    }.get(impact, "white")
