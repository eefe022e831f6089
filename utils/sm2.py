import math
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Optional, Union

from errors import InvalidArgument
from models.line import MIN_EASE_FACTOR

PASSING_QUALITY = 3
MAX_QUALITY = 5


class Grade(str, Enum):
    FORGOT = "forgot"
    HARD = "hard"
    GOOD = "good"
    PERFECT = "perfect"


GRADE_QUALITY = {
    Grade.FORGOT: 0,
    Grade.HARD: 2,
    Grade.GOOD: 3,
    Grade.PERFECT: 5,
}


@dataclass(frozen=True)
class ScheduleResult:
    interval: int
    repetitions: int
    ease_factor: float
    due_date: date


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positive values (2.5 -> 3), unlike round()."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def map_grade_to_quality(grade: Union[str, Grade]) -> int:
    """Map a named grade to SM-2 quality score (0-5)."""
    try:
        return GRADE_QUALITY[Grade(grade)]
    except ValueError:
        raise InvalidArgument(f"Unknown grade: {grade}") from None


def schedule(
    quality: float,
    repetitions: int,
    interval: int,
    ease_factor: float,
    today: Optional[date] = None,
) -> ScheduleResult:
    """Compute the next SM-2 state of a line from a 0-5 quality grade."""
    if isinstance(quality, bool) or not isinstance(quality, (int, float)):
        raise InvalidArgument(f"Quality must be a number, got {quality!r}")
    if not 0 <= quality <= MAX_QUALITY:
        raise InvalidArgument(f"Quality must be between 0 and {MAX_QUALITY}, got {quality}")
    if quality >= PASSING_QUALITY:
        if repetitions == 0:
            new_interval = 1
        elif repetitions == 1:
            new_interval = 6
        else:
            new_interval = int(round_half_up(interval * ease_factor))
        new_repetitions = repetitions + 1
    else:
        new_repetitions = 0
        new_interval = 1
    # Ease changes on every grade, pass or fail
    penalty = MAX_QUALITY - quality
    new_ef = max(MIN_EASE_FACTOR, ease_factor + (0.1 - penalty * (0.08 + penalty * 0.02)))
    anchor = today or date.today()
    return ScheduleResult(
        interval=new_interval,
        repetitions=new_repetitions,
        ease_factor=round_half_up(new_ef, 3),
        due_date=anchor + timedelta(days=new_interval),
    )
