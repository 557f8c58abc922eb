from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from core.models import Violation


class Analyzer(ABC):
    """Base class for accessibility rules."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Rule id, e.g. 'image-alt'."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description."""
        pass

    @abstractmethod
    def analyze(self, fragment: BeautifulSoup) -> Optional[Violation]:
        """Check a sanitized fragment; return a Violation or None when the rule passes."""
        pass


class AnalyzerRegistry:
    """Registry to manage the rules run by the auditor.

    Rules run in registration order, which fixes the order of violations.
    """

    def __init__(self):
        self._analyzers: Dict[str, Analyzer] = {}

    def register(self, analyzer: Analyzer) -> None:
        """Register an analyzer instance."""
        self._analyzers[analyzer.name] = analyzer

    def unregister(self, name: str) -> None:
        """Unregister an analyzer by name."""
        if name in self._analyzers:
            del self._analyzers[name]

    def get(self, name: str) -> Optional[Analyzer]:
        """Get analyzer by name."""
        return self._analyzers.get(name)

    def list(self) -> Dict[str, Analyzer]:
        """List all registered analyzers."""
        return dict(self._analyzers)

    def analyze_all(self, fragment: BeautifulSoup, exclude: List[str] = None) -> List[Violation]:
        """Run all rules (except excluded) and return their violations.

        A failing rule propagates; the caller decides how to report it.
        """
        exclude = exclude or []
        violations = []
        for name, analyzer in self._analyzers.items():
            if name in exclude:
                continue
            violation = analyzer.analyze(fragment)
            if violation is not None:
                violations.append(violation)
        return violations


# Global registry instance
_registry = AnalyzerRegistry()


def get_registry() -> AnalyzerRegistry:
    """Get the global analyzer registry, populated with the default rules."""
    if not _registry.list():
        from analyzers import init_default_analyzers

        init_default_analyzers(_registry)
    return _registry
