#!/usr/bin/env python3
"""
Ingest runner for the vulnerability feed pipeline.

This module coordinates one ingest run:
1. Schema: Make sure the DuckDB key spaces exist
2. Ingestion: Commit every configured feed inside its own transaction
3. Run tracking: Record the run in ingest_runs
4. Quality: Run data quality checks over the stored data
5. Reporting: Write a Markdown run report

The runner expects feeds to be checked out already; downloading them is
handled elsewhere.

Usage:
    python run_pipeline.py [--config path/to/config.yaml]
"""
import sys
import json
import yaml
import logging
import argparse
from datetime import datetime
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from storage.database import Database
from storage.operation import DuckDBOperation
from ingestion.node_adapter import NodeAdapter
from observability.metrics import IngestMetrics
from observability.quality_checks import QualityChecker
from observability.reporter import RunReporter

logger = logging.getLogger(__name__)


class IngestPipeline:
    """
    Runs every configured feed adapter against the shared store.

    Design decisions:
    - Single run_id tracks the entire execution
    - Each adapter update is one transaction; a failed feed leaves no writes
    - A failed run is still recorded in ingest_runs before re-raising
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize pipeline with configuration.

        Args:
            config_path: Path to YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(self.config_path) as f:
            self.config = yaml.safe_load(f) or {}

        for key in ["database", "sources"]:
            if key not in self.config:
                raise ValueError(f"Missing required config key: {key}")

        if "nodejs" not in self.config["sources"]:
            raise ValueError("Missing required source configuration: sources.nodejs")

        self.nodejs_config = self.config["sources"]["nodejs"]
        if "feed_dir" not in self.nodejs_config:
            raise ValueError("Missing required config key: sources.nodejs.feed_dir")

        self.db = Database(self.config["database"]["path"])
        self.quality_checker = QualityChecker(self.db)
        self.reporter = RunReporter()
        self.report_dir = Path(self.config.get("output", {}).get("report_dir", "output"))

        self.adapter = NodeAdapter(self.nodejs_config, DuckDBOperation())

        logger.info(f"Pipeline initialized with config: {config_path}")

    def run(self) -> IngestMetrics:
        """
        Execute one ingest run.

        Returns:
            IngestMetrics object with execution statistics

        Raises:
            RuntimeError: If ingestion fails; nothing from the run is committed
        """
        run_id = self.db.get_current_run_id()
        metrics = IngestMetrics(run_id=run_id, started_at=datetime.utcnow())

        logger.info(f"=== Starting Ingest Run: {run_id} ===")

        try:
            logger.info("Stage 1: Initializing database schema")
            self.db.initialize_schema()

            logger.info("Stage 2: Ingesting Node.js Security WG feed")
            files = self.adapter.update(self.nodejs_config["feed_dir"], self.db)
            metrics.record_source(self.adapter.get_health(), files=files)

        except Exception as e:
            metrics.record_source(self.adapter.get_health())
            metrics.record_error(str(e), {"source_id": self.adapter.source.source_id})
            metrics.completed_at = datetime.utcnow()
            self._record_run(metrics, "failed")
            logger.error(f"Ingest failed: {e}", exc_info=True)
            raise RuntimeError(f"Ingest execution failed: {e}") from e

        metrics.completed_at = datetime.utcnow()
        self._record_run(metrics, "success")

        logger.info("Stage 3: Running quality checks")
        quality_results = self.quality_checker.run_all_checks()
        for result in quality_results:
            if not result.passed:
                logger.warning(f"  Quality check {result.check_name} failed: {result.message}")

        logger.info("Stage 4: Generating report")
        report = self.reporter.generate_report(metrics, quality_results)
        report_path = self.reporter.save_report(report, self.report_dir)

        duration = (metrics.completed_at - metrics.started_at).total_seconds()
        logger.info("=== Ingest Complete ===")
        logger.info(f"Duration: {duration:.1f}s")
        logger.info(f"Advisories written: {metrics.advisories_written}")
        logger.info(f"Report: {report_path}")

        return metrics

    def _record_run(self, metrics: IngestMetrics, status: str):
        conn = self.db.connect()
        conn.execute("DELETE FROM ingest_runs WHERE run_id = ?", [metrics.run_id])
        conn.execute("""
            INSERT INTO ingest_runs
            (run_id, started_at, completed_at, status, advisories_written, errors, metadata)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, [
            metrics.run_id,
            metrics.started_at,
            metrics.completed_at,
            status,
            metrics.advisories_written,
            metrics.errors,
            json.dumps(metrics.to_dict())
        ])


def main():
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = argparse.ArgumentParser(
        description="Ingest vulnerability feeds into the shared store"
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    args = parser.parse_args()

    try:
        pipeline = IngestPipeline(config_path=args.config)
        metrics = pipeline.run()

        print("\n" + "=" * 60)
        print("Ingest Summary")
        print("=" * 60)
        print(f"Run ID: {metrics.run_id}")
        print(f"Feed files: {metrics.files_processed}")
        print(f"Entries: {metrics.entries_total}")
        print(f"Core entries skipped: {metrics.entries_skipped}")
        print(f"Advisories written: {metrics.advisories_written}")
        print("=" * 60)

        sys.exit(0)

    except Exception as e:
        logger.error(f"Ingest failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
