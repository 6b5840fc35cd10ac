"""
Adapter for the Node.js Ecosystem Security Working Group advisory feed.

Each feed document holds one advisory object (or an array of them) shaped like:
{
    "id": 334,
    "title": "Downloads resources over HTTP",
    "module_name": "hubl-server",
    "cves": [],
    "vulnerable_versions": "<=99.999.99999",
    "patched_versions": "<0.0.0",
    "overview": "...",
    "references": ["https://..."],
    "cvss_score": null,
    "severity": "high"
}

Entries without a module_name describe the Node.js runtime itself rather
than an npm package; they are skipped without error.
"""
import json
import logging
import math
import traceback
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Dict, List, NamedTuple, Optional, Union

from storage.database import Database
from storage.operation import Operation
from storage.types import NO_CVSS_SCORE, Advisory, VulnerabilityDetail

from .base_adapter import BaseAdapter, NormalizedAdvisory
from .decoder import DecodeError, decode_feed
from .sources import Ecosystem, VulnSource, nested_bucket_names

logger = logging.getLogger(__name__)


class AdvisoryKey(NamedTuple):
    """Storage keys for one normalized advisory."""
    nested_bkt_names: List[str]
    pkg_name: str
    vulnerability_id: str


class NodeAdapter(BaseAdapter):
    """Ingests the Node.js Security WG feed into the shared store."""

    source = VulnSource.NODEJS_SECURITY_WG

    def __init__(self, config: Dict[str, Any], dbc: Operation):
        super().__init__(config, dbc)
        self.ecosystem = Ecosystem(config.get("ecosystem", Ecosystem.NPM.value))
        self.bucket_names = nested_bucket_names(self.ecosystem, self.source)

    def update(self, feed_dir: Union[str, Path], database: Database) -> int:
        """
        Ingest every feed document under <feed_dir>/vuln in one transaction.

        Files are committed in sorted path order. Any failure rolls back the
        whole update and is re-raised after being recorded in the health status.

        Args:
            feed_dir: Root of the checked-out feed
            database: Database providing the transaction

        Returns:
            Number of feed documents ingested
        """
        self._last_update = datetime.utcnow()
        self._entries_seen = 0
        self._advisories_written = 0
        self._entries_skipped = 0

        vuln_dir = Path(feed_dir) / "vuln"
        try:
            if not vuln_dir.is_dir():
                raise FileNotFoundError(f"No feed directory at {vuln_dir}")

            paths = sorted(vuln_dir.rglob("*.json"))
            with database.transaction() as tx:
                for path in paths:
                    logger.debug("Committing %s", path)
                    with open(path, "rb") as handle:
                        try:
                            self.commit(tx, handle)
                        except DecodeError as e:
                            raise DecodeError(
                                f"failed to decode {path}: {e}", e.line, e.column, e.position
                            ) from e

            self._last_error = None
            logger.info(
                f"Node.js Security WG: {len(paths)} files, {self._entries_seen} entries, "
                f"{self._advisories_written} advisories written, "
                f"{self._entries_skipped} core entries skipped"
            )
            return len(paths)

        except Exception as e:
            error_msg = f"{type(e).__name__}: {str(e)}"
            self._last_error = error_msg
            # the transaction rolled back, nothing was kept
            self._advisories_written = 0
            logger.error(f"Node.js Security WG update failed: {error_msg}")
            logger.debug("Full traceback:\n%s", traceback.format_exc())
            raise

    def commit(self, tx, stream: IO) -> None:
        """
        Decode one feed document and write its advisories through the store.

        Nothing is written unless the whole document decodes. Store faults
        propagate unchanged and stop further writes.

        Raises:
            DecodeError: If the document is not a well-formed feed
        """
        entries = decode_feed(stream)

        for position, raw_entry in enumerate(entries):
            self._entries_seen += 1
            records = self.normalize(raw_entry, position)
            if not records:
                self._entries_skipped += 1
                continue

            for record in records:
                key = self.derive_keys(record)
                self.dbc.put_advisory_detail(
                    tx, key.nested_bkt_names, key.pkg_name, key.vulnerability_id, record.advisory
                )
                self.dbc.put_vulnerability_detail(
                    tx, key.vulnerability_id, self.source, record.detail
                )
                self.dbc.put_vulnerability_id(tx, key.vulnerability_id)
                self._advisories_written += 1

    def normalize(self, raw_entry: Dict[str, Any], position: int) -> List[NormalizedAdvisory]:
        """
        Transform a feed entry into one advisory per vulnerability identifier.

        Args:
            raw_entry: Decoded feed entry
            position: Zero-based position of the entry in its document,
                used for the synthesized identifier when the entry has no id

        Returns:
            Normalized advisories, empty for Node.js core entries
        """
        package_name = raw_entry.get("module_name")
        if not isinstance(package_name, str) or not package_name:
            logger.debug("Skipping core entry %s", raw_entry.get("id", position))
            return []

        vulnerability_ids = self._cve_ids(raw_entry)
        if not vulnerability_ids:
            vulnerability_ids = [self.source.synthesize_id(self._sequence_number(raw_entry, position))]

        cvss_score = self._cvss_score(raw_entry)
        severity = raw_entry.get("severity")
        severity = severity.strip().lower() if isinstance(severity, str) and severity.strip() else None
        if severity and cvss_score == NO_CVSS_SCORE:
            logger.debug(
                "Entry %s has severity %r but no CVSS score", vulnerability_ids[0], severity
            )

        title = self._text(raw_entry.get("title"))
        description = self._text(raw_entry.get("overview") or raw_entry.get("description"))
        references = self._string_list(raw_entry.get("references"))
        vulnerable_versions = self._string_list(raw_entry.get("vulnerable_versions"))
        patched_versions = self._string_list(raw_entry.get("patched_versions"))

        return [
            NormalizedAdvisory(
                vulnerability_id=vulnerability_id,
                package_name=package_name,
                advisory=Advisory(
                    vulnerable_versions=list(vulnerable_versions),
                    patched_versions=list(patched_versions),
                ),
                detail=VulnerabilityDetail(
                    id=vulnerability_id,
                    cvss_score=cvss_score,
                    title=title,
                    description=description,
                    references=list(references),
                ),
                severity=severity,
            )
            for vulnerability_id in vulnerability_ids
        ]

    def derive_keys(self, record: NormalizedAdvisory) -> AdvisoryKey:
        """Storage keys for a record, used exactly as derived."""
        return AdvisoryKey(
            nested_bkt_names=list(self.bucket_names),
            pkg_name=record.package_name,
            vulnerability_id=record.vulnerability_id,
        )

    @staticmethod
    def _cve_ids(raw_entry: Dict[str, Any]) -> List[str]:
        cves = raw_entry.get("cves", raw_entry.get("cve"))
        if isinstance(cves, str):
            cves = [cves]
        if not isinstance(cves, list):
            return []

        ids: List[str] = []
        for cve in cves:
            if isinstance(cve, str) and cve.strip() and cve not in ids:
                ids.append(cve)
        return ids

    @staticmethod
    def _sequence_number(raw_entry: Dict[str, Any], position: int) -> int:
        entry_id = raw_entry.get("id")
        if isinstance(entry_id, int) and not isinstance(entry_id, bool):
            return entry_id
        if isinstance(entry_id, str) and entry_id.isdigit():
            return int(entry_id)
        return position

    @staticmethod
    def _cvss_score(raw_entry: Dict[str, Any]) -> float:
        score = raw_entry.get("cvss_score")
        if score is None:
            cvss = raw_entry.get("cvss")
            if isinstance(cvss, dict):
                score = cvss.get("score")

        if isinstance(score, bool):
            return NO_CVSS_SCORE
        if isinstance(score, (int, float)):
            try:
                score = float(score)
            except OverflowError:
                return NO_CVSS_SCORE
            return score if math.isfinite(score) else NO_CVSS_SCORE
        if isinstance(score, str):
            parsed = _parse_float(score)
            if parsed is not None:
                return parsed
        return NO_CVSS_SCORE

    @staticmethod
    def _text(value: Any) -> str:
        return value if isinstance(value, str) else ""

    @staticmethod
    def _string_list(value: Any) -> List[str]:
        if isinstance(value, str):
            return [value] if value else []
        if isinstance(value, list):
            return [item if isinstance(item, str) else json.dumps(item) for item in value if item is not None]
        return []


def _parse_float(value: str) -> Optional[float]:
    try:
        parsed = float(value.strip())
    except ValueError:
        return None
    # float() accepts nan/inf spellings that are not scores
    return parsed if math.isfinite(parsed) else None
