"""
In-memory symptom store.

Implements the ``SymptomStore`` protocol with the single-table key scheme the
production key-value store uses:

- Partition key ``REGION#<pincode>``
- Sort key ``SYMPTOM#<symptom type>#<date>`` for tallies, with the hashed
  subject id and timestamp appended for individual records
- Index keys ``SYMPTOM#<symptom type>`` / ``DATE#<date>`` for by-symptom reads

Used by tests and the pipeline demo; the real storage engine is a collaborator.
"""

import asyncio
from collections import defaultdict
from datetime import date
from typing import Any

import structlog

from healthsignal.domain.models import AnonymizedSymptomRecord
from healthsignal.services.result import Result

logger = structlog.get_logger(__name__)


def region_partition_key(pincode: str) -> str:
    return f"REGION#{pincode}"


def symptom_sort_key(symptom_type: str, day: date) -> str:
    return f"SYMPTOM#{symptom_type}#{day.isoformat()}"


def symptom_index_key(symptom_type: str) -> str:
    return f"SYMPTOM#{symptom_type}"


def date_index_key(day: date) -> str:
    return f"DATE#{day.isoformat()}"


class InMemorySymptomStore:
    """
    Async, lock-guarded dictionary store.

    Items are plain dicts as they would be persisted. Reads return copies so
    callers can never mutate stored state.
    """

    def __init__(self, table_name: str = "health-signals") -> None:
        self.table_name = table_name
        self.logger = logger.bind(component="memory_store", table=table_name)
        self._partitions: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._lock = asyncio.Lock()

    async def put_record(self, record: AnonymizedSymptomRecord) -> None:
        """Persist one anonymized record (one occurrence)."""
        day = record.observed_on
        sort_key = (
            f"{symptom_sort_key(record.symptom_type, day)}"
            f"#{record.hashed_subject_id}#{record.timestamp}"
        )
        item = {
            **record.to_item(),
            "PK": region_partition_key(record.pincode),
            "SK": sort_key,
            "GSI1PK": symptom_index_key(record.symptom_type),
            "GSI1SK": date_index_key(day),
            "date": day.isoformat(),
        }
        async with self._lock:
            self._partitions[item["PK"]][sort_key] = item
        self.logger.debug("symptom_record_stored", symptom_type=record.symptom_type)

    async def increment(self, pincode: str, symptom_type: str, day: date, by: int = 1) -> int:
        """Add ``by`` occurrences to the tally item for (pincode, symptom, day)."""
        partition_key = region_partition_key(pincode)
        sort_key = symptom_sort_key(symptom_type, day)
        async with self._lock:
            item = self._partitions[partition_key].setdefault(
                sort_key,
                {
                    "PK": partition_key,
                    "SK": sort_key,
                    "GSI1PK": symptom_index_key(symptom_type),
                    "GSI1SK": date_index_key(day),
                    "pincode": pincode,
                    "symptomType": symptom_type,
                    "date": day.isoformat(),
                    "count": 0,
                },
            )
            item["count"] += by
            return item["count"]

    async def query_region(
        self, pincode: str, start_date: date, end_date: date | None = None
    ) -> Result[list[dict[str, Any]], Exception]:
        """All symptom items of a region dated within [start_date, end_date]."""
        first, last = start_date.isoformat(), (end_date or start_date).isoformat()
        async with self._lock:
            partition = self._partitions.get(region_partition_key(pincode), {})
            items = [
                dict(item)
                for sort_key, item in sorted(partition.items())
                if sort_key.startswith("SYMPTOM#") and first <= item["date"] <= last
            ]
        self.logger.debug("region_queried", pincode=pincode, items=len(items))
        return Result.ok(items)

    async def query_symptom(
        self, symptom_type: str, start_date: date, end_date: date | None = None
    ) -> list[dict[str, Any]]:
        """All items of one symptom type across regions, by the date index."""
        index_key = symptom_index_key(symptom_type)
        first = date_index_key(start_date)
        last = date_index_key(end_date or start_date)
        async with self._lock:
            return [
                dict(item)
                for partition in self._partitions.values()
                for item in partition.values()
                if item["GSI1PK"] == index_key and first <= item["GSI1SK"] <= last
            ]
