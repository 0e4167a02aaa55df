import re
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

from .cleaner import clean_value
from .fetcher import Fetcher, fetch_document
from .parser import LINK_FIELD, Record


class EnrichmentReport(BaseModel):
    records: List[Dict[str, str]]
    fetched: int = 0
    failed: int = 0


def parse_pair_config(text: Optional[str]) -> Dict[str, str]:
    """Parse ``"A:b,C:d"`` into ``{"A": "b", "C": "d"}``.

    Pairs that do not split into exactly two non-empty parts are dropped.
    """
    pairs: Dict[str, str] = {}
    if not text:
        return pairs
    for item in text.split(","):
        parts = item.split(":")
        if len(parts) != 2:
            continue
        key, value = parts[0].strip(), parts[1].strip()
        if key and value:
            pairs[key] = value
    return pairs


def _class_pattern(marker: str) -> "re.Pattern[str]":
    return re.compile(
        r"<[^>]*\bclass\s*=\s*[\"'][^\"']*"
        + re.escape(marker)
        + r"[^\"']*[\"'][^>]*>([^<]*)",
        re.IGNORECASE,
    )


def extract_by_class(document: str, marker: str) -> str:
    """Return the text after the first tag whose class contains ``marker``."""
    match = _class_pattern(marker).search(document)
    if match is None:
        return ""
    return match.group(1).strip()


class Enricher:
    """Adds scraped fields to records that carry a link."""

    def __init__(
        self,
        fetcher: Fetcher,
        fields: Dict[str, str],
        trace: Callable[[str], None] = lambda message: None,
    ):
        self.fetcher = fetcher
        self.fields = dict(fields)
        self.trace = trace

    def enrich(self, records: List[Record]) -> EnrichmentReport:
        report = EnrichmentReport(records=[])
        for record in records:
            link = clean_value(record.get(LINK_FIELD))
            if not link:
                report.records.append(dict(record))
                continue
            report.records.append(self._enrich_one(record, link, report))
        return report

    def _enrich_one(self, record: Record, link: str, report: EnrichmentReport) -> Record:
        enriched = dict(record)
        try:
            document = fetch_document(self.fetcher, link)
        except Exception as exc:
            report.failed += 1
            self.trace(f"Enrichment skipped for {link}: {type(exc).__name__}: {exc}")
            for field in self.fields:
                enriched[field] = ""
            return enriched
        report.fetched += 1
        for field, marker in self.fields.items():
            enriched[field] = extract_by_class(document, marker)
        return enriched
