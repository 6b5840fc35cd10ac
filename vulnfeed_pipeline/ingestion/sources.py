"""
Known vulnerability sources and package ecosystems.

Sources are a closed enumeration passed explicitly to adapters and to the
storage operations; nothing looks them up from global state.
"""
from enum import Enum
from typing import List


class Ecosystem(Enum):
    """Package ecosystems advisories can be namespaced under."""
    NPM = "npm"


class VulnSource(Enum):
    """Vulnerability feeds this pipeline knows how to ingest."""
    NODEJS_SECURITY_WG = (
        "nodejs-security-wg",
        "Node.js Ecosystem Security Working Group",
        "NSWG-ECO",
    )

    def __init__(self, source_id: str, display_name: str, id_prefix: str):
        self.source_id = source_id
        self.display_name = display_name
        self.id_prefix = id_prefix

    def synthesize_id(self, sequence: int) -> str:
        """Identifier for a record the feed gave no CVE for."""
        return f"{self.id_prefix}-{sequence}"


def nested_bucket_names(ecosystem: Ecosystem, source: VulnSource) -> List[str]:
    """
    Bucket path advisories from this ecosystem and source are stored under.

    Example: ["npm::Node.js Ecosystem Security Working Group"]
    """
    return [f"{ecosystem.value}::{source.display_name}"]
