"""
Public-health surveillance pipeline.

Write side: raw symptom reports are anonymized, validated and persisted one
record at a time, so a privacy rejection or storage error only costs that
record. Read side: region aggregates are built from a store query wrapped in a
timeout and retried with exponential backoff.

Key patterns:
- Protocol-based storage collaborator (structural typing, easy test doubles)
- Result type for expected failures instead of exceptions
- Structured concurrency for batches with asyncio.TaskGroup
"""

import asyncio
from collections import Counter
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any, Protocol

import structlog
from pydantic import BaseModel, Field, computed_field
from pydantic import ValidationError as ModelValidationError

from healthsignal.config import PrivacyConfig, StorageConfig
from healthsignal.domain.errors import PrivacyViolation
from healthsignal.domain.models import (
    AnonymizedSymptomRecord,
    RawSymptomReport,
    RegionAggregate,
    RegionKey,
)
from healthsignal.services.aggregation import aggregate
from healthsignal.services.privacy import HashlibHasher, OneWayHasher, anonymize, validate
from healthsignal.services.result import Result

logger = structlog.get_logger(__name__)


class SymptomStore(Protocol):
    """
    Storage collaborator for anonymized symptom data.

    Writes raise on failure; the region read returns a Result.
    """

    async def put_record(self, record: AnonymizedSymptomRecord) -> None: ...

    async def increment(self, pincode: str, symptom_type: str, day: date, by: int = 1) -> int: ...

    async def query_region(
        self, pincode: str, start_date: date, end_date: date | None = None
    ) -> Result[list[dict[str, Any]], Exception]: ...


class IngestionSummary(BaseModel):
    """Outcome of a batch ingestion."""

    accepted: int = Field(default=0, ge=0)
    rejected: int = Field(default=0, ge=0, description="Failed the privacy guard")
    invalid: int = Field(default=0, ge=0, description="Malformed raw reports")
    failed: int = Field(default=0, ge=0, description="Storage errors")
    rejected_fields: dict[str, int] = Field(default_factory=dict)

    @computed_field(return_type=int)
    @property
    def total(self) -> int:
        return self.accepted + self.rejected + self.invalid + self.failed


class SurveillanceIngestor:
    """Anonymize -> validate -> persist, for one report or a batch."""

    def __init__(
        self,
        store: SymptomStore,
        privacy: PrivacyConfig,
        hasher: OneWayHasher | None = None,
    ) -> None:
        self.store = store
        self.privacy = privacy
        self.hasher = hasher or HashlibHasher(privacy.hash_algorithm)
        self.logger = logger.bind(component="surveillance_ingestor")

    async def ingest(
        self, report: RawSymptomReport | Mapping[str, Any]
    ) -> Result[AnonymizedSymptomRecord, Exception]:
        """Anonymize, guard and store a single report."""
        try:
            record = anonymize(report, self.privacy.hash_salt, self.hasher)
            validate(record, digest_length=self.hasher.digest_length)
        except PrivacyViolation as e:
            self.logger.warning("anonymized_record_rejected", field=e.field)
            return Result.err(e)
        except ModelValidationError as e:
            # Error details echo input values, so only the count is logged
            self.logger.warning("raw_report_invalid", error_count=e.error_count())
            return Result.err(e)

        try:
            await self.store.put_record(record)
        except Exception as e:
            self.logger.error("symptom_record_store_failed", error=type(e).__name__)
            return Result.err(e)

        self.logger.info(
            "symptom_record_ingested", symptom_type=record.symptom_type, pincode=record.pincode
        )
        return Result.ok(record)

    async def ingest_batch(
        self, reports: Sequence[RawSymptomReport | Mapping[str, Any]]
    ) -> IngestionSummary:
        """Ingest reports concurrently; each record succeeds or fails on its own."""
        async with asyncio.TaskGroup() as task_group:
            tasks = [task_group.create_task(self.ingest(report)) for report in reports]

        counts: Counter[str] = Counter()
        rejected_fields: Counter[str] = Counter()
        for task in tasks:
            result = task.result()
            if result.is_ok():
                counts["accepted"] += 1
                continue
            error = result.unwrap_err()
            if isinstance(error, PrivacyViolation):
                counts["rejected"] += 1
                rejected_fields[error.field] += 1
            elif isinstance(error, ModelValidationError):
                counts["invalid"] += 1
            else:
                counts["failed"] += 1

        summary = IngestionSummary(**counts, rejected_fields=dict(rejected_fields))
        self.logger.info(
            "symptom_batch_ingested",
            accepted=summary.accepted,
            rejected=summary.rejected,
            invalid=summary.invalid,
            failed=summary.failed,
        )
        return summary

    async def record_tally(
        self, pincode: str, symptom_type: str, day: date, count: int = 1
    ) -> Result[int, Exception]:
        """Add pre-counted occurrences (e.g. from a clinic feed) to a region tally."""
        if count < 1:
            return Result.err(ValueError(f"Tally count must be positive, got {count}"))
        try:
            total = await self.store.increment(pincode, symptom_type, day, by=count)
        except Exception as e:
            self.logger.error("symptom_tally_failed", error=type(e).__name__)
            return Result.err(e)
        return Result.ok(total)


class RegionReportService:
    """
    Dashboard read path: region query with timeout and retries, then aggregate.

    Design: the store applies no policy of its own here; every query attempt is
    bounded by ``query_timeout_seconds`` and failed attempts back off
    exponentially up to ``max_backoff_seconds``.
    """

    def __init__(self, store: SymptomStore, config: StorageConfig | None = None) -> None:
        self.store = store
        self.config = config or StorageConfig()
        self.logger = logger.bind(component="region_report_service")

    async def region_aggregate(
        self, pincode: str, start_date: date, end_date: date | None = None
    ) -> Result[RegionAggregate, Exception]:
        """Per-symptom counts for a region over an inclusive date window."""
        region = RegionKey(pincode=pincode, start_date=start_date, end_date=end_date)

        records = await self._query_with_retry(region)
        if records.is_err():
            return Result.err(records.unwrap_err())

        result = aggregate(region, records.unwrap())
        self.logger.info(
            "region_aggregate_built",
            pincode=pincode,
            symptom_types=len(result.counts),
            total=result.total,
        )
        return Result.ok(result)

    async def _query_with_retry(self, region: RegionKey) -> Result[list[dict[str, Any]], Exception]:
        last_error: Exception = RuntimeError("region query was never attempted")

        for attempt in range(self.config.max_retries + 1):
            try:
                result = await asyncio.wait_for(
                    self.store.query_region(region.pincode, region.start_date, region.end_date),
                    timeout=self.config.query_timeout_seconds,
                )
            except TimeoutError as e:
                last_error = e
                self.logger.warning(
                    "region_query_timeout",
                    attempt=attempt + 1,
                    timeout_seconds=self.config.query_timeout_seconds,
                )
            except Exception as e:
                last_error = e
                self.logger.warning("region_query_failed", attempt=attempt + 1, error=str(e))
            else:
                if result.is_ok():
                    return result
                last_error = result.unwrap_err()
                self.logger.warning(
                    "region_query_failed", attempt=attempt + 1, error=str(last_error)
                )

            if attempt < self.config.max_retries:
                delay = min(
                    self.config.max_backoff_seconds,
                    self.config.retry_backoff_seconds * 2**attempt,
                )
                self.logger.info("region_query_retry", attempt=attempt + 1, delay_seconds=delay)
                await asyncio.sleep(delay)

        self.logger.error(
            "region_query_exhausted",
            pincode=region.pincode,
            attempts=self.config.max_retries + 1,
            error=str(last_error),
        )
        return Result.err(last_error)
