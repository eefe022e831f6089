from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional

from models.line import DueLine, MasteryLevel
from models.text import Text
from utils.mastery import classify, mastery_percent


@dataclass(frozen=True)
class TextProgress:
    title: str
    percent: int


@dataclass
class Stats:
    total_texts: int = 0
    total_lines: int = 0
    mastered: int = 0
    learning: int = 0
    new: int = 0
    streak: int = 0
    text_breakdown: List[TextProgress] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "totalTexts": self.total_texts,
            "totalLines": self.total_lines,
            "mastered": self.mastered,
            "learning": self.learning,
            "new": self.new,
            "streak": self.streak,
            "textBreakdown": [asdict(item) for item in self.text_breakdown],
        }


def is_due(due_date: Optional[date], today: date) -> bool:
    return due_date is None or due_date <= today


def due_lines(texts: List[Text], today: Optional[date] = None) -> List[DueLine]:
    """Collect every line, across all texts, whose review date has arrived."""
    today = today or date.today()
    due: List[DueLine] = []
    for text in texts:
        for line in text.lines:
            if is_due(line.due_date, today):
                due.append(DueLine(**line.model_dump(), text_id=text.id, text_title=text.title))
    return due


def compute_stats(texts: List[Text], streak: int = 0) -> Stats:
    """Aggregate mastery counts over all lines in one pass."""
    stats = Stats(total_texts=len(texts), streak=streak)
    for text in texts:
        text_mastered = 0
        for line in text.lines:
            stats.total_lines += 1
            level = classify(line.repetitions, line.interval)
            if level == MasteryLevel.MASTERED:
                stats.mastered += 1
                text_mastered += 1
            elif level == MasteryLevel.LEARNING:
                stats.learning += 1
            else:
                stats.new += 1
        if text.lines:
            stats.text_breakdown.append(
                TextProgress(title=text.title, percent=mastery_percent(text_mastered, len(text.lines)))
            )
    return stats


def compute_streak(session_dates: List[date], today: Optional[date] = None) -> int:
    """Count consecutive practice days ending today or yesterday."""
    if not session_dates:
        return 0
    today = today or date.today()
    dates = sorted(set(session_dates), reverse=True)
    if dates[0] not in (today, today - timedelta(days=1)):
        return 0
    streak = 1
    previous = dates[0]
    for current in dates[1:]:
        if current != previous - timedelta(days=1):
            break
        streak += 1
        previous = current
    return streak
