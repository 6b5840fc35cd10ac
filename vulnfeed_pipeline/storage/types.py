"""
Canonical records persisted for each ingested advisory.

Two record kinds are stored per vulnerability:
- Advisory: package-scoped affected/patched version ranges
- VulnerabilityDetail: vulnerability-scoped score, title, description, references

Design decisions:
- Sequences default to empty lists, never None, so the stored form is uniform
- cvss_score uses -1 as the "no score" sentinel since 0.0 is a valid score
"""
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

NO_CVSS_SCORE = -1.0


@dataclass
class Advisory:
    """Affected and patched version range expressions for one package."""
    vulnerable_versions: List[str] = field(default_factory=list)
    patched_versions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class VulnerabilityDetail:
    """Vulnerability-scoped details, independent of any one package."""
    id: str
    cvss_score: float = NO_CVSS_SCORE
    title: str = ""
    description: str = ""
    references: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
