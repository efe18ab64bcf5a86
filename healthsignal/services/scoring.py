"""
Constitution (Prakriti) scoring.

Scores the three doshas from weighted questionnaire answers and classifies the
result as dominant/secondary or balanced. The computation is a pure function
of its inputs: the same subject and answers always give the same scores and
classification.

Thresholds:
- Balanced: highest and lowest normalized scores within 10 points
- Secondary: runner-up within 15 points of the leader and strictly ahead of third
"""

import math
from collections.abc import Sequence

from healthsignal.domain.errors import ValidationError
from healthsignal.domain.models import (
    DOSHAS,
    ConstitutionProfile,
    Dosha,
    DoshaScores,
    DoshaWeights,
    QuizAnswer,
)

MIN_ANSWER_VALUE = 1
MAX_ANSWER_VALUE = 5

BALANCED_RANGE = 10.0
SECONDARY_GAP = 15.0

# Emitted for every dosha when no answer carries any weight
ZERO_WEIGHT_SCORE = 33.33


def compute_profile(subject_id: str, answers: Sequence[QuizAnswer]) -> ConstitutionProfile:
    """
    Compute a constitution profile from questionnaire answers.

    Args:
        subject_id: Identifier of the person who answered the questionnaire
        answers: One answer per questionnaire item

    Returns:
        ConstitutionProfile with normalized scores and dominant/secondary doshas

    Raises:
        ValidationError: If subject_id is blank, answers is empty, or an answer
            value is outside [1, 5]
    """
    if not subject_id or not subject_id.strip():
        raise ValidationError("subject_id is required")
    if not answers:
        raise ValidationError("At least one answer is required")

    raw_scores = _raw_scores(answers)
    scores = _normalize(raw_scores)
    dominant, secondary = _classify(scores)

    return ConstitutionProfile(
        subject_id=subject_id,
        scores=DoshaScores(**{d.value: s for d, s in scores.items()}),
        dominant=dominant,
        secondary=secondary,
    )


def create_quiz_answer(
    question_id: int,
    answer_value: int,
    vata: float = 1.0,
    pitta: float = 1.0,
    kapha: float = 1.0,
) -> QuizAnswer:
    """Build a quiz answer with explicit dosha weights."""
    return QuizAnswer(
        question_id=question_id,
        answer_value=answer_value,
        dosha_weights=DoshaWeights(vata=vata, pitta=pitta, kapha=kapha),
    )


def _raw_scores(answers: Sequence[QuizAnswer]) -> dict[Dosha, float]:
    raw = dict.fromkeys(DOSHAS, 0.0)
    for answer in answers:
        if not MIN_ANSWER_VALUE <= answer.answer_value <= MAX_ANSWER_VALUE:
            raise ValidationError(
                f"Invalid answer value: {answer.answer_value} for question "
                f"{answer.question_id}. Must be between {MIN_ANSWER_VALUE} and {MAX_ANSWER_VALUE}."
            )
        for dosha in DOSHAS:
            raw[dosha] += answer.answer_value * answer.dosha_weights.weight_for(dosha)
    return raw


def _round2(value: float) -> float:
    """Round half up to two decimals."""
    return math.floor(value * 100 + 0.5) / 100


def _normalize(raw: dict[Dosha, float]) -> dict[Dosha, float]:
    top = max(raw.values())
    if top == 0:
        return dict.fromkeys(DOSHAS, ZERO_WEIGHT_SCORE)
    return {dosha: _round2(value / top * 100) for dosha, value in raw.items()}


def _classify(scores: dict[Dosha, float]) -> tuple[Dosha, Dosha | None]:
    # sorted() is stable, so ties keep vata, pitta, kapha order
    ranked = sorted(DOSHAS, key=lambda d: scores[d], reverse=True)
    first, second, third = (scores[d] for d in ranked)

    if first - third <= BALANCED_RANGE:
        return Dosha.BALANCED, None

    has_secondary = first - second <= SECONDARY_GAP and second > third
    return ranked[0], ranked[1] if has_secondary else None
