import json
import logging
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError

from .cache import FEED_CACHE_KEY, Cache
from .enrichment import Enricher
from .errors import FeedError
from .fetcher import Fetcher, fetch_document
from .models import FeedConfig, FeedRunResult
from .notify import Notifier
from .parser import Record, parse_records
from .properties import PropertyStore
from .transforms import apply_aliases, rename_fields

logger = logging.getLogger(__name__)

CLEAR_CACHE_FLAG = "CLEAR_CACHE"


def serialize_records(records: List[Record]) -> str:
    return json.dumps(records, ensure_ascii=False, separators=(",", ":"))


def error_payload(message: str) -> str:
    return json.dumps({"error": message}, ensure_ascii=False)


class FeedPipeline:
    """Fetch, parse, enrich and post-process the calendar feed behind a cache."""

    def __init__(
        self,
        properties: PropertyStore,
        cache: Cache,
        fetcher: Fetcher,
        notifier: Optional[Notifier] = None,
    ):
        self.properties = properties
        self.cache = cache
        self.fetcher = fetcher
        self.notifier = notifier
        self.last_result: Optional[FeedRunResult] = None

    def serve(self) -> str:
        """Return the feed as a JSON body, or an ``{"error": ...}`` body."""
        run = _Run(datetime.utcnow())
        run.cache_cleared = self.properties.consume_flag(CLEAR_CACHE_FLAG)
        if run.cache_cleared:
            self.cache.remove(FEED_CACHE_KEY)
            logger.info("Cache cleared on request")

        try:
            config = FeedConfig.from_properties(self.properties.snapshot())
            source_url = config.require_source_url()
        except (ValidationError, FeedError) as exc:
            return self._fail(run, str(exc))
        run.debug = config.debug

        if not run.cache_cleared:
            cached = self.cache.get(FEED_CACHE_KEY)
            if cached is not None:
                run.trace("Serving feed from cache")
                self._finish(run, "cache")
                return cached

        try:
            body = self._regenerate(config, source_url, run)
        except FeedError as exc:
            return self._fail(run, str(exc))
        except Exception as exc:
            logger.exception("Feed regeneration failed")
            return self._fail(run, f"{type(exc).__name__}: {exc}")

        self.cache.put(FEED_CACHE_KEY, body, config.cache_timeout)
        self._finish(run, "regenerated")
        if config.email_log:
            self._notify(config.email_log, run)
        return body

    def _regenerate(self, config: FeedConfig, source_url: str, run: "_Run") -> str:
        run.trace(f"Fetching calendar from {source_url}")
        records = parse_records(fetch_document(self.fetcher, source_url))
        run.records = len(records)
        run.trace(f"Parsed {len(records)} events")

        fields = config.enrichment_fields
        if fields:
            report = Enricher(self.fetcher, fields, trace=run.trace).enrich(records)
            records = report.records
            run.enriched = report.fetched
            run.enrichment_failures = report.failed
            run.trace(f"Enriched {report.fetched} events, {report.failed} failed")

        aliases = config.aliases
        if aliases:
            records = apply_aliases(records, aliases)

        renames = config.renames
        if renames:
            records = rename_fields(records, renames)

        return serialize_records(records)

    def _notify(self, recipient: str, run: "_Run") -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.send(recipient, run.payload())
        except Exception:
            logger.warning("Failed to send feed log to %s", recipient, exc_info=True)

    def _fail(self, run: "_Run", message: str) -> str:
        run.trace(f"Error: {message}")
        logger.warning("Feed request failed: %s", message)
        self._finish(run, "error", error=message)
        return error_payload(message)

    def _finish(self, run: "_Run", source: str, error: Optional[str] = None) -> None:
        self.last_result = FeedRunResult(
            started_at=run.started_at,
            finished_at=datetime.utcnow(),
            source=source,
            records=run.records,
            enriched=run.enriched,
            enrichment_failures=run.enrichment_failures,
            cache_cleared=run.cache_cleared,
            error=error,
        )


class _Run:
    """Per-request counters and log lines."""

    def __init__(self, started_at: datetime):
        self.started_at = started_at
        self.debug = False
        self.cache_cleared = False
        self.records = 0
        self.enriched = 0
        self.enrichment_failures = 0
        self.lines: List[str] = []

    def trace(self, message: str) -> None:
        self.lines.append(message)
        if self.debug:
            logger.info(message)

    def payload(self) -> str:
        header = f"ICS feed run started {self.started_at.isoformat()}"
        return "\n".join([header] + self.lines)
