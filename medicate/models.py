"""
Data model for barcode resolution.

Candidates flow RawCandidate -> ScoredCandidate -> Group -> RankedGroup,
and a request ends with a single Resolution built fresh from its own list.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RawCandidate:
    """One search-result record as returned by the search provider."""

    title: str = ""
    link: str = ""
    snippet: str = ""

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "RawCandidate":
        """Build from a provider record; missing or null fields become ""."""
        return cls(
            title=str(item.get("title") or ""),
            link=str(item.get("link") or ""),
            snippet=str(item.get("snippet") or ""),
        )


@dataclass(frozen=True)
class ScoredCandidate:
    title: str
    link: str
    snippet: str
    cleaned: str
    hostname: str
    score: float


@dataclass
class Group:
    """Candidates sharing the same lowercase cleaned name."""

    name: str
    total_score: float = 0.0
    count: int = 0
    best: Optional[ScoredCandidate] = None

    def add(self, candidate: ScoredCandidate) -> None:
        self.total_score += candidate.score
        self.count += 1
        # Equal scores keep the earlier member
        if self.best is None or candidate.score > self.best.score:
            self.best = candidate

    @property
    def sample_url(self) -> Optional[str]:
        if self.best is None:
            return None
        return self.best.link or None


@dataclass(frozen=True)
class RankedGroup:
    group: Group
    final_score: float

    @property
    def name(self) -> str:
        return self.group.name

    @property
    def sample_url(self) -> Optional[str]:
        return self.group.sample_url

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "score": self.final_score, "sampleUrl": self.sample_url}


@dataclass(frozen=True)
class Resolution:
    name: str
    confidence: float
    sample_url: Optional[str]
    candidates: List[RankedGroup] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "confidence": self.confidence,
            "sampleUrl": self.sample_url,
            "candidates": [c.to_dict() for c in self.candidates],
        }
