"""
Qualitative Scoring.

Turns the yes/no survey answers recorded on each visit into a 0-5 score per
question for the radar ("spider") chart.

Scoring:
    yes -> 5 when "yes" is the healthy answer, else 0
    no  -> 0 when "yes" is the healthy answer, else 5
    missing answers are ignored (neither numerator nor denominator)

    score = mean of the contributions, rounded to two decimals.

A question nobody answered scores exactly 0.  Unlike the metric trend series
there is no gap here, because the radar chart is bounded to 0-5 and cannot
draw a missing spoke.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..core.config import (
    QUALITATIVE_QUESTIONS, QUALITATIVE_MAX_SCORE, ANSWER_YES, ANSWER_NO,
)
from ..core.utils import round_value
from ..models.data_models import VisitRecord, QualitativeScore

logger = logging.getLogger(__name__)


def answer_points(answer: Optional[str], positive_is_yes: bool) -> Optional[float]:
    """Points for a single answer, or None when it does not count."""
    if answer == ANSWER_YES:
        return QUALITATIVE_MAX_SCORE if positive_is_yes else 0.0
    if answer == ANSWER_NO:
        return 0.0 if positive_is_yes else QUALITATIVE_MAX_SCORE
    return None


def score_qualitative(visits: Iterable[VisitRecord],
                      questions: Optional[List[Dict[str, Any]]] = None,
                      sort_descending: bool = False) -> List[QualitativeScore]:
    """
    Average score per survey question.

    Args:
        visits: Filtered visits.
        questions: Question configs with ``key``, ``positive_is_yes`` and an
            optional ``label``; defaults to ``config.QUALITATIVE_QUESTIONS``.
        sort_descending: Order by score, highest first (ties keep question
            order).  Otherwise the question order is kept.

    Returns:
        list[QualitativeScore], one per question, every score in [0, 5].
    """
    questions = QUALITATIVE_QUESTIONS if questions is None else questions
    visits = list(visits)

    scores = []
    for question in questions:
        key = question['key']
        positive_is_yes = bool(question['positive_is_yes'])

        total = 0.0
        count = 0
        for visit in visits:
            points = answer_points(visit.answer(key), positive_is_yes)
            if points is None:
                continue
            total += points
            count += 1

        average = round_value(total / count) if count else 0.0
        scores.append(QualitativeScore(
            key=key,
            subject=question.get('label', key),
            score=average,
            responses=count,
        ))

    if sort_descending:
        scores.sort(key=lambda s: s.score, reverse=True)

    logger.debug(f"Scored {len(scores)} qualitative questions over {len(visits)} visits")
    return scores
