"""
Tests for emergency screening in `healthsignal/services/safety.py`.

Covers:
- Case-insensitive substring matching and reporting of every match
- Total behavior on malformed input
- Advisory language resolution and fallback, including the configured default
- PII-free detection logging
- The query gate returning an EmergencyResponse
"""

from collections.abc import Iterator

import pytest
from structlog.testing import capture_logs

from healthsignal.config import SafetyConfig
from healthsignal.domain.emergency import (
    EMERGENCY_HOTLINE,
    EmergencyKeyword,
    EmergencyKeywordTable,
    KeywordCategory,
    LocalizedAdvisory,
    default_advisories,
    default_keyword_table,
)
from healthsignal.domain.models import Emergency, NoEmergency
from healthsignal.services.safety import (
    UNKNOWN_REGION,
    SafetyClassifier,
    classify,
    default_classifier,
    record_detection,
    screen_query,
)


@pytest.fixture(autouse=True)
def default_language_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DEFAULT_LANGUAGE", raising=False)
    default_classifier.cache_clear()
    yield
    default_classifier.cache_clear()


class TestDefaultTables:
    def test_keyword_table_covers_every_category(self) -> None:
        table = default_keyword_table()

        assert len(table) == 35
        for category in KeywordCategory:
            assert table.in_category(category)

    def test_every_advisory_names_the_hotline(self) -> None:
        advisories = default_advisories()

        assert set(advisories.languages) == {"en", "hi", "ta", "te", "bn"}
        for text in advisories.messages.values():
            assert EMERGENCY_HOTLINE in text

    def test_duplicate_phrases_are_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate emergency phrase"):
            EmergencyKeywordTable(
                keywords=(
                    EmergencyKeyword(phrase="Stroke", category=KeywordCategory.NEUROLOGICAL),
                    EmergencyKeyword(phrase="stroke", category=KeywordCategory.NEUROLOGICAL),
                )
            )

    def test_advisory_requires_default_language(self) -> None:
        with pytest.raises(ValueError, match="default language"):
            LocalizedAdvisory(messages={"hi": "..."}, default_language="en")


class TestClassify:
    def test_benign_text_is_not_an_emergency(self) -> None:
        result = classify("What should I eat for better digestion?")

        assert isinstance(result, NoEmergency)
        assert result.is_emergency is False

    def test_matching_is_case_insensitive(self) -> None:
        result = classify("I have CHEST PAIN since morning")

        assert isinstance(result, Emergency)
        assert result.matched_keywords == ("chest pain",)

    def test_every_match_is_reported_in_table_order(self) -> None:
        result = classify("severe chest pressure, chest pain and slurred speech")

        assert isinstance(result, Emergency)
        assert result.matched_keywords == ("chest pain", "severe chest pressure", "slurred speech")

    def test_substring_matching_over_matches_longer_words(self) -> None:
        # Containment, not word boundaries: "heatstroke" contains "stroke"
        result = classify("Is heatstroke common in summer?")

        assert isinstance(result, Emergency)
        assert result.matched_keywords == ("stroke",)

    @pytest.mark.parametrize("text", [None, 42, "", "   \n\t", ["chest pain"]])
    def test_malformed_input_is_not_an_emergency(self, text: object) -> None:
        assert isinstance(classify(text), NoEmergency)

    def test_advisory_text_is_returned_verbatim(self) -> None:
        result = classify("he is unconscious", "en")

        assert isinstance(result, Emergency)
        assert result.advisory_text == default_advisories().messages["en"]
        assert "EMERGENCY DETECTED" in result.advisory_text

    @pytest.mark.parametrize(
        "language_code,expected",
        [
            ("hi", "hi"),
            ("HI", "hi"),
            ("ta-IN", "ta"),
            ("te_IN", "te"),
            ("bn", "bn"),
            ("fr", "en"),
            ("", "en"),
            (None, "en"),
            (7, "en"),
        ],
    )
    def test_language_resolution(self, language_code: object, expected: str) -> None:
        result = classify("suspected poisoning", language_code)

        assert isinstance(result, Emergency)
        assert result.language == expected
        assert result.advisory_text == default_advisories().messages[expected]

    def test_localized_advisories_are_in_their_language(self) -> None:
        markers = {
            "hi": "आपातकाल",
            "ta": "அவசரநிலை",
            "te": "అత్యవసర",
            "bn": "জরুরি",
        }
        for language, marker in markers.items():
            result = classify("heart attack", language)
            assert isinstance(result, Emergency)
            assert marker in result.advisory_text

    def test_injected_tables_are_used(self) -> None:
        classifier = SafetyClassifier(
            EmergencyKeywordTable(
                keywords=(EmergencyKeyword(phrase="snake bite", category=KeywordCategory.OTHER),)
            ),
            LocalizedAdvisory(messages={"en": "Call 108 now."}),
        )

        assert isinstance(classifier.classify("chest pain"), NoEmergency)
        result = classifier.classify("A Snake Bite on the leg", "hi")
        assert isinstance(result, Emergency)
        assert result.advisory_text == "Call 108 now."
        assert result.language == "en"


class TestConfiguredLanguage:
    def test_fallback_follows_configured_language(self) -> None:
        classifier = SafetyClassifier.from_config(SafetyConfig(default_language="hi"))

        for language_code in (None, "fr", ""):
            result = classifier.classify("chest pain", language_code)
            assert isinstance(result, Emergency)
            assert result.language == "hi"
            assert result.advisory_text == default_advisories().messages["hi"]

        explicit = classifier.classify("chest pain", "ta")
        assert isinstance(explicit, Emergency)
        assert explicit.language == "ta"

    def test_process_classifier_reads_default_language(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DEFAULT_LANGUAGE", "TA")
        default_classifier.cache_clear()

        result = classify("stroke")

        assert isinstance(result, Emergency)
        assert result.language == "ta"

    def test_screen_query_uses_configured_language(self) -> None:
        classifier = SafetyClassifier.from_config(SafetyConfig(default_language="bn"))

        with capture_logs():
            response = screen_query("he is unconscious", classifier=classifier)

        assert response is not None
        assert response.response == default_advisories().messages["bn"]


class TestRecordDetection:
    def test_logs_keywords_and_coarse_region(self) -> None:
        with capture_logs() as logs:
            record_detection(["chest pain"], "560001")

        assert len(logs) == 1
        entry = logs[0]
        assert entry["event"] == "emergency_detected"
        assert entry["log_level"] == "warning"
        assert entry["keywords"] == ["chest pain"]
        assert entry["region"] == "560001"

    @pytest.mark.parametrize(
        "region_hint",
        [None, "", "Flat 4B, 12 MG Road, Bengaluru 560001", 560001, "a" * 13],
    )
    def test_full_or_missing_location_is_logged_as_unknown(self, region_hint: object) -> None:
        with capture_logs() as logs:
            record_detection(["stroke"], region_hint)

        assert logs[0]["region"] == UNKNOWN_REGION
        assert "MG Road" not in str(logs[0])

    def test_missing_keywords_are_logged_as_empty(self) -> None:
        with capture_logs() as logs:
            record_detection(None)

        assert logs[0]["keywords"] == []

    @pytest.mark.parametrize(
        "matched_keywords,expected",
        [
            ("chest pain", ["chest pain"]),
            (5, []),
            (object(), []),
            (("stroke", "seizure"), ["stroke", "seizure"]),
        ],
    )
    def test_keyword_shapes_never_raise(self, matched_keywords: object, expected: list) -> None:
        with capture_logs() as logs:
            record_detection(matched_keywords, "KA")  # type: ignore[arg-type]

        assert len(logs) == 1
        assert logs[0]["keywords"] == expected
        assert logs[0]["region"] == "KA"


class TestScreenQuery:
    def test_benign_query_continues_downstream(self) -> None:
        with capture_logs() as logs:
            assert screen_query("How much water should I drink?") is None
        assert logs == []

    def test_emergency_query_short_circuits(self) -> None:
        with capture_logs() as logs:
            response = screen_query("my mother had a seizure", "hi", region_hint="KA")

        assert response is not None
        assert response.is_emergency is True
        assert response.confidence == 1.0
        assert response.sources == ("Emergency Safety Protocol",)
        assert response.response == default_advisories().messages["hi"]
        assert logs[0]["keywords"] == ["seizure"]
        assert logs[0]["region"] == "KA"

    def test_query_text_is_never_logged(self) -> None:
        text = "Ravi at 9876543210 has a heart attack"
        with capture_logs() as logs:
            screen_query(text)

        assert "9876543210" not in str(logs)
        assert "Ravi" not in str(logs)
