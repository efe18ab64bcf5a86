"""
Anonymization and privacy validation for public-health surveillance.

Raw symptom reports are reduced to aggregatable fields and the subject
identifier is replaced with a salted one-way hash. ``validate`` is the guard
run on every record before it is persisted or sent across a boundary.

Hashing sits behind the ``OneWayHasher`` protocol so the salt handling and
digest-length checks can be exercised with any digest.
"""

import hashlib
import string
from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import BaseModel, SecretStr

from healthsignal.domain.errors import PrivacyViolation
from healthsignal.domain.models import AnonymizedSymptomRecord, RawSymptomReport

FORBIDDEN_FIELDS: tuple[str, ...] = (
    "name",
    "phone",
    "email",
    "address",
    "fullAddress",
    "full_address",
)

IDENTIFIER_FIELDS: tuple[str, ...] = (
    "subjectId",
    "subject_id",
    "userId",
    "user_id",
    "hashedSubjectId",
    "hashed_subject_id",
)

SHA256_HEX_LENGTH = 64

_HEX_DIGITS = frozenset(string.hexdigits)


class OneWayHasher(Protocol):
    """Narrow one-way hash capability."""

    algorithm: str
    digest_length: int

    def hexdigest(self, data: str) -> str:
        """Hex digest of the UTF-8 encoding of ``data``."""
        ...


class HashlibHasher:
    """OneWayHasher backed by a hashlib algorithm (sha256 by default)."""

    def __init__(self, algorithm: str = "sha256") -> None:
        # hashlib.new raises ValueError for unknown algorithms
        digest = hashlib.new(algorithm)
        self.algorithm = algorithm
        self.digest_length = digest.digest_size * 2

    def hexdigest(self, data: str) -> str:
        return hashlib.new(self.algorithm, data.encode("utf-8")).hexdigest()

    def __repr__(self) -> str:
        return f"HashlibHasher(algorithm={self.algorithm!r})"


_DEFAULT_HASHER = HashlibHasher("sha256")


def anonymize(
    report: RawSymptomReport | Mapping[str, Any],
    salt: str | SecretStr,
    hasher: OneWayHasher | None = None,
) -> AnonymizedSymptomRecord:
    """
    Strip personal data from a symptom report.

    The subject identifier is replaced by ``hash(subject_id + salt)``. Only the
    pincode is kept from the location; name, phone, email and full address are
    dropped even when present.

    Args:
        report: Raw report, as a model or a mapping with camelCase/snake_case keys
        salt: Process-wide secret salt
        hasher: One-way hash to use (SHA-256 when omitted)
    """
    if not isinstance(report, RawSymptomReport):
        report = RawSymptomReport.model_validate(report)
    if isinstance(salt, SecretStr):
        salt = salt.get_secret_value()

    hasher = hasher or _DEFAULT_HASHER
    return AnonymizedSymptomRecord(
        hashed_subject_id=hasher.hexdigest(f"{report.subject_id}{salt}"),
        symptom_type=report.symptom_type,
        severity=report.severity,
        pincode=report.pincode,
        timestamp=report.timestamp,
    )


def validate(
    record: BaseModel | Mapping[str, Any], digest_length: int = SHA256_HEX_LENGTH
) -> bool:
    """
    Assert that a record is safe to persist or transmit.

    Raises:
        PrivacyViolation: If a forbidden personal-data field is present, or a
            subject identifier is not a hex digest of ``digest_length`` characters
    """
    fields = _as_mapping(record)

    for field in FORBIDDEN_FIELDS:
        if field in fields:
            raise PrivacyViolation(field)

    for field in IDENTIFIER_FIELDS:
        value = fields.get(field)
        if value is None:
            continue
        if not _is_hex_digest(value, digest_length):
            raise PrivacyViolation(
                field,
                f"'{field}' must be hashed ({digest_length} hex characters) "
                "before storage in the public health database",
            )

    return True


def _as_mapping(record: BaseModel | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(record, BaseModel):
        return record.model_dump(by_alias=True)
    if isinstance(record, Mapping):
        return record
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


def _is_hex_digest(value: object, digest_length: int) -> bool:
    return isinstance(value, str) and len(value) == digest_length and set(value) <= _HEX_DIGITS
