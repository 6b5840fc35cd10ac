"""
Base adapter interface for all vulnerability source adapters.

Defines the contract that all source adapters must implement and provides
the shared data model for normalized advisories.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import IO, Any, Dict, List, Optional

from storage.operation import Operation
from storage.types import Advisory, VulnerabilityDetail

from .sources import VulnSource


@dataclass
class NormalizedAdvisory:
    """
    One canonical advisory derived from a raw feed entry.

    This is the format all adapters hand to key derivation and storage.
    It abstracts away feed-specific schemas into a uniform representation.
    """
    vulnerability_id: str
    package_name: str
    advisory: Advisory
    detail: VulnerabilityDetail
    severity: Optional[str] = None  # Informational only, never stored


@dataclass
class SourceHealth:
    """Health status of a source adapter."""
    source_id: str
    is_healthy: bool
    last_update: Optional[datetime]
    entries_seen: int
    advisories_written: int
    entries_skipped: int
    error_message: Optional[str] = None


class BaseAdapter(ABC):
    """
    Abstract base class for source adapters.

    All adapters must implement normalize() and commit().
    Provides shared health check functionality.
    """

    source: VulnSource

    def __init__(self, config: Dict[str, Any], dbc: Operation):
        self.config = config
        self.dbc = dbc
        self._last_update: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._entries_seen: int = 0
        self._advisories_written: int = 0
        self._entries_skipped: int = 0

    @abstractmethod
    def normalize(self, raw_entry: Dict[str, Any], position: int) -> List[NormalizedAdvisory]:
        """
        Transform a raw feed entry into canonical advisories.

        Args:
            raw_entry: Decoded feed entry
            position: Zero-based position of the entry in its feed document

        Returns:
            Normalized advisories, empty if the entry carries none
        """
        pass

    @abstractmethod
    def commit(self, tx, stream: IO) -> None:
        """
        Decode a feed document and write every advisory it carries.

        Args:
            tx: Transaction handle owned by the caller
            stream: Readable stream holding one feed document
        """
        pass

    def get_health(self) -> SourceHealth:
        """Return health status of this adapter."""
        return SourceHealth(
            source_id=self.source.source_id,
            is_healthy=self._last_error is None,
            last_update=self._last_update,
            entries_seen=self._entries_seen,
            advisories_written=self._advisories_written,
            entries_skipped=self._entries_skipped,
            error_message=self._last_error
        )
