"""
Core services for health signal processing.

This package contains the business logic: constitution scoring, emergency
screening, anonymization, regional aggregation and the async surveillance
pipeline built on top of them.
"""

from .aggregation import aggregate
from .privacy import HashlibHasher, OneWayHasher, anonymize, validate
from .result import Result
from .safety import SafetyClassifier, classify, record_detection, screen_query
from .scoring import compute_profile, create_quiz_answer
from .surveillance import (
    IngestionSummary,
    RegionReportService,
    SurveillanceIngestor,
    SymptomStore,
)

__all__ = [
    "Result",
    "compute_profile",
    "create_quiz_answer",
    "SafetyClassifier",
    "classify",
    "record_detection",
    "screen_query",
    "OneWayHasher",
    "HashlibHasher",
    "anonymize",
    "validate",
    "aggregate",
    "SymptomStore",
    "SurveillanceIngestor",
    "IngestionSummary",
    "RegionReportService",
]
