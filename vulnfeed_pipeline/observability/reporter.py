"""
Generate human-readable ingest reports in Markdown format.

This module provides RunReporter, which transforms IngestMetrics and quality
check results into formatted Markdown reports.

Report sections:
- Header with run metadata (ID, timestamp, duration)
- Summary table with core counts
- Data quality check results
- Source health status

Design decisions:
- Markdown output for readability and version control friendliness
- Uses tabulate library for table formatting (GitHub-flavored)
- Reports saved with timestamp for historical tracking
"""
from datetime import datetime
from typing import List
from pathlib import Path
from tabulate import tabulate

from .metrics import IngestMetrics
from .quality_checks import QualityCheckResult


class RunReporter:
    """Generates Markdown reports from ingest run metrics."""

    def generate_report(
        self,
        metrics: IngestMetrics,
        quality_results: List[QualityCheckResult]
    ) -> str:
        """
        Generate full run report in Markdown format.

        Args:
            metrics: IngestMetrics object from a completed run
            quality_results: List of quality check results

        Returns:
            Markdown-formatted report as string
        """
        lines = []

        lines.append("# Ingest Run Report")
        lines.append(f"**Run ID:** {metrics.run_id}")
        lines.append(f"**Started:** {metrics.started_at.isoformat()}")
        if metrics.completed_at:
            duration = (metrics.completed_at - metrics.started_at).total_seconds()
            lines.append(f"**Duration:** {duration:.1f} seconds")
        lines.append("")

        lines.append("## Summary")
        summary_data = [
            ["Feed Files", metrics.files_processed],
            ["Entries", metrics.entries_total],
            ["Core Entries Skipped", metrics.entries_skipped],
            ["Advisories Written", metrics.advisories_written],
            ["Errors", metrics.errors],
        ]
        lines.append(tabulate(summary_data, headers=["Metric", "Value"], tablefmt="github"))
        lines.append("")

        if quality_results:
            lines.append("## Data Quality Checks")
            quality_data = []
            for qr in quality_results:
                status = "✓" if qr.passed else "✗"
                quality_data.append([status, qr.check_name, qr.message])
            lines.append(tabulate(quality_data, headers=["Status", "Check", "Details"], tablefmt="github"))
            lines.append("")

        if metrics.source_health:
            lines.append("## Source Health")
            health_data = []
            for source, health in metrics.source_health.items():
                status = "✓" if health.get("healthy", False) else "✗"
                health_data.append([status, source, health.get("records", 0), health.get("error") or ""])
            lines.append(tabulate(health_data, headers=["Status", "Source", "Records", "Error"], tablefmt="github"))
            lines.append("")

        return "\n".join(lines)

    def save_report(self, report: str, output_dir: Path) -> Path:
        """
        Save report to file with timestamp.

        Args:
            report: Markdown report content
            output_dir: Directory to save report in

        Returns:
            Path to saved report file
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.utcnow().strftime("%Y%m%d-%H%M%S")
        filepath = output_dir / f"ingest-report-{timestamp}.md"
        filepath.write_text(report)
        return filepath
