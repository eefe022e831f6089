from typing import Iterable

from models.line import MasteryLevel
from utils.sm2 import round_half_up

MASTERED_MIN_REPETITIONS = 3
MASTERED_MIN_INTERVAL_DAYS = 21


def classify(repetitions: int, interval: int) -> MasteryLevel:
    """Derive a line's mastery level from its scheduling fields."""
    if repetitions >= MASTERED_MIN_REPETITIONS and interval >= MASTERED_MIN_INTERVAL_DAYS:
        return MasteryLevel.MASTERED
    if repetitions >= 1:
        return MasteryLevel.LEARNING
    return MasteryLevel.NEW


def mastery_percent(mastered: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(round_half_up(mastered / total * 100))


def count_mastered(levels: Iterable[MasteryLevel]) -> int:
    return sum(1 for level in levels if level == MasteryLevel.MASTERED)
