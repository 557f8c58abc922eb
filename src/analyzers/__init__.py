"""Initialize and register built-in rules."""
from analyzers.plugins import (
    ButtonNameAnalyzer,
    ContrastAnalyzer,
    DocumentTitleAnalyzer,
    FormLabelAnalyzer,
    HeadingOrderAnalyzer,
    HtmlLangAnalyzer,
    ImageAltAnalyzer,
    LinkNameAnalyzer,
)


def init_default_analyzers(registry=None):
    """Register built-in rules in their reporting order."""
    if registry is None:
        from core.analyzer import get_registry

        registry = get_registry()
    registry.register(ImageAltAnalyzer())
    registry.register(LinkNameAnalyzer())
    registry.register(FormLabelAnalyzer())
    registry.register(ButtonNameAnalyzer())
    registry.register(HeadingOrderAnalyzer())
    registry.register(ContrastAnalyzer())
    registry.register(HtmlLangAnalyzer())
    registry.register(DocumentTitleAnalyzer())
