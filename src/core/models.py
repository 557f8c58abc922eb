"""Result records produced by the analyzer and persisted by the result store."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class Violation:
    """A single accessibility rule failure on a page.

    One violation per rule; every offending element is collected in `nodes`.
    """

    id: str
    description: str
    help: str = ""
    impact: str = "minor"
    wcag: Optional[str] = None
    nodes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Violation":
        return cls(
            id=data["id"],
            description=data.get("description", ""),
            help=data.get("help", ""),
            impact=data.get("impact", "minor"),
            wcag=data.get("wcag"),
            nodes=list(data.get("nodes", [])),
        )


@dataclass
class AnalysisResult:
    """Audit outcome for one normalized URL."""

    url: str
    violations: List[Violation] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "violations": [v.to_dict() for v in self.violations],
            "timestamp": self.timestamp.isoformat(),
        }
