"""
Metrics collection for ingest runs.

This module provides IngestMetrics, a dataclass that tracks observability
metrics for a single ingest execution including:
- Counts of feed files, entries and advisories written
- Core Node.js entries skipped for lack of a package
- Source health indicators
- Errors encountered

Design decisions:
- Single metrics object per run for simplicity
- Serializable to_dict() for storage in the ingest_runs table
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from ingestion.base_adapter import SourceHealth


@dataclass
class IngestMetrics:
    """
    Metrics for a single ingest run.

    Designed to be serialized to JSON for storage in the ingest_runs table.
    """
    run_id: str
    started_at: datetime
    completed_at: datetime = None

    # Core counts
    files_processed: int = 0
    entries_total: int = 0
    entries_skipped: int = 0
    advisories_written: int = 0
    errors: int = 0

    # Key: source_id, Value: dict with health status
    source_health: Dict[str, Dict] = field(default_factory=dict)

    quality_issues: List[Dict] = field(default_factory=list)

    def record_source(self, health: SourceHealth, files: int = 0):
        """
        Fold an adapter's health status into the run totals.

        Args:
            health: Health reported by the adapter after its update
            files: Number of feed documents the adapter ingested
        """
        self.files_processed += files
        self.entries_total += health.entries_seen
        self.entries_skipped += health.entries_skipped
        self.advisories_written += health.advisories_written
        self.source_health[health.source_id] = {
            "healthy": health.is_healthy,
            "records": health.advisories_written,
            "error": health.error_message
        }

    def record_error(self, error: str, context: Dict = None):
        """
        Record an error encountered during the run.

        Args:
            error: Error message
            context: Optional dict with additional context (e.g., source_id)
        """
        self.errors += 1
        self.quality_issues.append({
            "type": "error",
            "message": error,
            "context": context or {}
        })

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary for JSON serialization."""
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "files_processed": self.files_processed,
            "entries_total": self.entries_total,
            "entries_skipped": self.entries_skipped,
            "advisories_written": self.advisories_written,
            "errors": self.errors,
            "source_health": self.source_health,
            "quality_issues": self.quality_issues
        }
