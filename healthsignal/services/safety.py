"""
Emergency safety screening.

Checks user text for emergency phrases before any generated answer is
produced. A match returns a canned, localized advisory and bypasses the rest
of the query pipeline.

Key properties:
- Total: malformed input degrades to "no emergency", nothing is raised
- Canned output: advisory text is returned exactly as configured
- No PII in logs: detections carry the matched phrases and a coarse region only
"""

import re
from collections.abc import Iterable
from functools import lru_cache

import structlog

from healthsignal.config import SafetyConfig, load_safety_config_from_env
from healthsignal.domain.emergency import (
    EmergencyKeywordTable,
    LocalizedAdvisory,
    default_advisories,
    default_keyword_table,
)
from healthsignal.domain.models import Emergency, EmergencyResponse, NoEmergency, SafetyCheckResult

logger = structlog.get_logger(__name__)

UNKNOWN_REGION = "unknown"

# Pincodes, district or state codes; anything longer is treated as a full location
_COARSE_REGION = re.compile(r"^[A-Za-z0-9-]{1,12}$")


class SafetyClassifier:
    """
    Case-insensitive substring matcher over an emergency keyword table.

    Tables are injected so a process builds them once and tests can supply
    their own.
    """

    def __init__(self, keyword_table: EmergencyKeywordTable, advisories: LocalizedAdvisory) -> None:
        self.keyword_table = keyword_table
        self.advisories = advisories
        self._needles = tuple((k.phrase, k.needle) for k in keyword_table.keywords)

    @classmethod
    def from_config(cls, config: SafetyConfig) -> "SafetyClassifier":
        """Default tables, falling back to the configured language."""
        return cls(default_keyword_table(), default_advisories(config.default_language))

    def classify(self, text: object, language_code: object = None) -> SafetyCheckResult:
        """
        Scan text for emergency phrases.

        Every matching phrase is reported, in table order. Missing or unrecognized
        language codes fall back to the advisory table's default language.
        """
        if not isinstance(text, str):
            return NoEmergency()

        normalized = text.lower().strip()
        if not normalized:
            return NoEmergency()

        matched = tuple(phrase for phrase, needle in self._needles if needle in normalized)
        if not matched:
            return NoEmergency()

        language = self.advisories.resolve_language(language_code)
        return Emergency(
            matched_keywords=matched,
            advisory_text=self.advisories.message_for(language),
            language=language,
        )


@lru_cache
def default_classifier() -> SafetyClassifier:
    """Process-wide classifier; DEFAULT_LANGUAGE is read on first use."""
    return SafetyClassifier.from_config(load_safety_config_from_env())


def classify(text: object, language_code: object = None) -> SafetyCheckResult:
    """Classify text with the default classifier."""
    return default_classifier().classify(text, language_code)


def _keyword_list(matched_keywords: object) -> list[str]:
    if matched_keywords is None:
        return []
    if isinstance(matched_keywords, str):
        return [matched_keywords]
    if not isinstance(matched_keywords, Iterable):
        return []
    return [str(k) for k in matched_keywords]


def record_detection(matched_keywords: Iterable[str] | None, region_hint: object = None) -> None:
    """
    Log an emergency detection for monitoring.

    Only the matched phrases and a coarse region hint are logged; raw text,
    identifiers and full locations never are. A single phrase may be passed as
    a plain string.
    """
    keywords = _keyword_list(matched_keywords)
    region = UNKNOWN_REGION
    if isinstance(region_hint, str) and _COARSE_REGION.match(region_hint.strip()):
        region = region_hint.strip()

    logger.warning("emergency_detected", keywords=keywords, region=region)


def screen_query(
    text: object,
    language_code: object = None,
    region_hint: object = None,
    classifier: SafetyClassifier | None = None,
) -> EmergencyResponse | None:
    """
    Gate a user query before it reaches the answer pipeline.

    Returns:
        EmergencyResponse to send back immediately, or None to let the query
        continue downstream
    """
    result = (classifier or default_classifier()).classify(text, language_code)
    if isinstance(result, NoEmergency):
        return None

    record_detection(result.matched_keywords, region_hint)
    return EmergencyResponse(response=result.advisory_text)
