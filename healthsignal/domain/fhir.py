"""
FHIR R4 export of anonymized symptom records.

Only the slice of the ``Observation`` resource the surveillance exchange needs
is modelled. The subject reference is the hashed subject id, so exported
resources carry no direct identifiers either.
"""

from datetime import UTC, datetime
from typing import Literal

from pydantic import Field

from healthsignal.domain.models import AnonymizedSymptomRecord, DomainModel, Severity

SNOMED_SYSTEM = "http://snomed.info/sct"
INTERPRETATION_SYSTEM = "http://terminology.hl7.org/CodeSystem/v3-ObservationInterpretation"

# Placeholder until symptom types are mapped to SNOMED CT concepts
SYMPTOM_CODE = "symptom-code"

_INTERPRETATION_CODES: dict[Severity, str] = {
    Severity.HIGH: "H",
    Severity.MEDIUM: "N",
    Severity.LOW: "L",
}


class Coding(DomainModel):
    system: str
    code: str
    display: str


class CodeableConcept(DomainModel):
    coding: tuple[Coding, ...] = Field(min_length=1)


class Reference(DomainModel):
    reference: str


class Observation(DomainModel):
    """FHIR R4 Observation (subset)."""

    resource_type: Literal["Observation"] = "Observation"
    id: str
    status: Literal["registered", "preliminary", "final", "amended"] = "final"
    code: CodeableConcept
    subject: Reference
    effective_date_time: str
    value_string: str | None = None
    interpretation: tuple[CodeableConcept, ...] = ()

    def to_resource(self) -> dict:
        """JSON-ready resource with FHIR field names; empty fields are omitted."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def to_fhir_observation(record: AnonymizedSymptomRecord) -> Observation:
    """Convert an anonymized record into a final FHIR Observation."""
    effective = datetime.fromtimestamp(record.timestamp / 1000, UTC)
    return Observation(
        id=record.hashed_subject_id,
        code=CodeableConcept(
            coding=(Coding(system=SNOMED_SYSTEM, code=SYMPTOM_CODE, display=record.symptom_type),)
        ),
        subject=Reference(reference=f"Patient/{record.hashed_subject_id}"),
        effective_date_time=effective.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        value_string=record.symptom_type,
        interpretation=(
            CodeableConcept(
                coding=(
                    Coding(
                        system=INTERPRETATION_SYSTEM,
                        code=_INTERPRETATION_CODES[record.severity],
                        display=record.severity.value,
                    ),
                )
            ),
        ),
    )
