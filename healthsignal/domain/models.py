"""
Domain models for health signal processing.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation and serialize with camelCase keys, which is
the shape records take in storage and on the wire, while still accepting the
snake_case names in Python code.
"""

from datetime import UTC, date, datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel


class Dosha(str, Enum):
    """Constitution categories. BALANCED is only ever a dominant outcome."""

    VATA = "vata"
    PITTA = "pitta"
    KAPHA = "kapha"
    BALANCED = "balanced"


# Scoring order; also the tie-break order when two doshas score the same
DOSHAS: tuple[Dosha, Dosha, Dosha] = (Dosha.VATA, Dosha.PITTA, Dosha.KAPHA)


class Severity(str, Enum):
    """Self-reported symptom severity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DomainModel(BaseModel):
    """Immutable base model with camelCase serialization aliases."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


def observed_date(timestamp_ms: int) -> date:
    """UTC calendar date of an epoch-milliseconds timestamp."""
    return datetime.fromtimestamp(timestamp_ms / 1000, UTC).date()


# --------------------------------------------------------------------------- scoring


class DoshaWeights(DomainModel):
    """How strongly one questionnaire item speaks to each dosha."""

    vata: float = Field(default=1.0, ge=0.0, allow_inf_nan=False)
    pitta: float = Field(default=1.0, ge=0.0, allow_inf_nan=False)
    kapha: float = Field(default=1.0, ge=0.0, allow_inf_nan=False)

    def weight_for(self, dosha: Dosha) -> float:
        return float(getattr(self, dosha.value))


class QuizAnswer(DomainModel):
    """A single questionnaire response, consumed once by the scoring engine."""

    question_id: int
    answer_value: int = Field(description="Likert answer, expected in [1, 5]")
    dosha_weights: DoshaWeights = Field(default_factory=DoshaWeights)


class DoshaScores(DomainModel):
    """Normalized scores on a 0-100 scale."""

    vata: float = Field(ge=0.0, le=100.0)
    pitta: float = Field(ge=0.0, le=100.0)
    kapha: float = Field(ge=0.0, le=100.0)

    def score_for(self, dosha: Dosha) -> float:
        return float(getattr(self, dosha.value))


class ConstitutionProfile(DomainModel):
    """Result of scoring a completed questionnaire."""

    subject_id: str = Field(min_length=1)
    scores: DoshaScores
    dominant: Dosha
    secondary: Dosha | None = None
    computed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def secondary_is_distinct(self) -> "ConstitutionProfile":
        if self.secondary is None:
            return self
        if self.secondary == Dosha.BALANCED:
            raise ValueError("secondary dosha cannot be balanced")
        if self.dominant == Dosha.BALANCED:
            raise ValueError("a balanced constitution has no secondary dosha")
        if self.secondary == self.dominant:
            raise ValueError("secondary dosha must differ from the dominant dosha")
        return self


# --------------------------------------------------------------------------- safety


class NoEmergency(DomainModel):
    """No emergency phrase matched; the query may continue downstream."""

    kind: Literal["no_emergency"] = "no_emergency"
    is_emergency: Literal[False] = False


class Emergency(DomainModel):
    """At least one emergency phrase matched; the advisory must be shown as is."""

    kind: Literal["emergency"] = "emergency"
    is_emergency: Literal[True] = True
    matched_keywords: tuple[str, ...] = Field(min_length=1)
    advisory_text: str = Field(min_length=1)
    language: str


SafetyCheckResult = Annotated[Emergency | NoEmergency, Field(discriminator="kind")]


class EmergencyResponse(DomainModel):
    """Immediate reply returned instead of a generated answer."""

    response: str
    sources: tuple[str, ...] = ("Emergency Safety Protocol",)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    is_emergency: Literal[True] = True


# --------------------------------------------------------------------------- surveillance


class RawSymptomReport(DomainModel):
    """Symptom report as submitted, possibly carrying direct identifiers."""

    subject_id: str = Field(min_length=1)
    symptom_type: str = Field(min_length=1)
    severity: Severity
    pincode: str = Field(min_length=1)
    timestamp: int = Field(ge=0, description="Epoch milliseconds")

    # Direct identifiers, never copied past the anonymizer
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    full_address: str | None = None


class AnonymizedSymptomRecord(DomainModel):
    """Privacy-safe symptom record. Unknown keys are rejected outright."""

    model_config = ConfigDict(extra="forbid")

    hashed_subject_id: str
    symptom_type: str
    severity: Severity
    pincode: str
    timestamp: int = Field(ge=0)

    @property
    def observed_on(self) -> date:
        return observed_date(self.timestamp)

    def to_item(self) -> dict[str, Any]:
        """Persisted representation (camelCase keys, JSON-compatible values)."""
        return self.model_dump(by_alias=True, mode="json")


class RegionKey(DomainModel):
    """Region and inclusive date window an aggregate is scoped to."""

    pincode: str = Field(min_length=1)
    start_date: date
    end_date: date | None = None

    @model_validator(mode="after")
    def window_is_ordered(self) -> "RegionKey":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    @property
    def last_day(self) -> date:
        return self.end_date or self.start_date

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.last_day


class RegionAggregate(DomainModel):
    """Per-symptom occurrence counts for one region key. Derived, never stored."""

    region: RegionKey
    counts: dict[str, int] = Field(default_factory=dict)
    distinct_reporters: int = Field(default=0, ge=0)

    @computed_field(return_type=int)
    @property
    def total(self) -> int:
        return sum(self.counts.values())
