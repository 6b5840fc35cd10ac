"""
Observability layer for vulnerability feed ingestion.

This module provides metrics collection, quality checks, and reporting
for ingest runs.

Main exports:
- IngestMetrics: Tracks metrics for an ingest run
- QualityChecker: Runs data quality checks
- QualityCheckResult: Result of a quality check
- RunReporter: Generates Markdown reports
"""
from .metrics import IngestMetrics
from .quality_checks import QualityChecker, QualityCheckResult
from .reporter import RunReporter

__all__ = [
    "IngestMetrics",
    "QualityChecker",
    "QualityCheckResult",
    "RunReporter",
]
