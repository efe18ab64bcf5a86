"""
Regional symptom aggregation for the surveillance dashboard.

A pure fold over already-fetched anonymized records. Each record counts as one
occurrence unless it carries a ``count`` multiplicity (pre-tallied items), in
which case that value is added instead. The fold is commutative, so the order
records arrive in never changes the result.
"""

from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime
from typing import Any

from pydantic import BaseModel

from healthsignal.domain.models import RegionAggregate, RegionKey, observed_date

_SYMPTOM_KEYS = ("symptomType", "symptom_type")
_HASH_KEYS = ("hashedSubjectId", "hashed_subject_id")


def aggregate(
    region: RegionKey, records: Iterable[BaseModel | Mapping[str, Any]]
) -> RegionAggregate:
    """
    Fold records into per-symptom counts for one region and date window.

    Records from another pincode, or dated outside the window, are skipped.
    Records without a pincode or date are assumed to belong to the region key
    they were fetched for.
    """
    counts: Counter[str] = Counter()
    reporters: set[str] = set()

    for record in records:
        fields = record.model_dump(by_alias=True) if isinstance(record, BaseModel) else record

        pincode = fields.get("pincode")
        if pincode is not None and str(pincode) != region.pincode:
            continue

        day = _record_date(fields)
        if day is not None and not region.covers(day):
            continue

        symptom_type = _first(fields, _SYMPTOM_KEYS)
        if not symptom_type:
            continue

        multiplicity = fields.get("count")
        counts[str(symptom_type)] += 1 if multiplicity is None else int(multiplicity)

        hashed = _first(fields, _HASH_KEYS)
        if hashed:
            reporters.add(str(hashed))

    return RegionAggregate(
        region=region,
        counts=dict(sorted(counts.items())),
        distinct_reporters=len(reporters),
    )


def _first(fields: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = fields.get(key)
        if value is not None:
            return value
    return None


def _utc_date(moment: datetime) -> date:
    # Naive datetimes are taken to be UTC already
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.date()


def _record_date(fields: Mapping[str, Any]) -> date | None:
    value = fields.get("date")
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            value = datetime.fromisoformat(value)
    if isinstance(value, datetime):
        return _utc_date(value)
    if isinstance(value, date):
        return value

    timestamp = fields.get("timestamp")
    if timestamp is not None:
        return observed_date(int(timestamp))
    return None
