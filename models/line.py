from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


class MasteryLevel(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"


class CamelModel(BaseModel):
    """Accepts and emits the camelCase keys of the stored records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LineInput(CamelModel):
    text: str = ""
    pronunciation: str = ""
    translation: str = ""


class Line(LineInput):
    id: str
    interval: int = Field(default=0, ge=0)
    repetitions: int = Field(default=0, ge=0)
    ease_factor: float = Field(default=INITIAL_EASE_FACTOR, ge=MIN_EASE_FACTOR)
    due_date: Optional[date] = None
    mastery_level: MasteryLevel = MasteryLevel.NEW


class LinePatch(CamelModel):
    """Fields a caller may change on one line. Identity and mastery are not among them."""

    text: Optional[str] = None
    pronunciation: Optional[str] = None
    translation: Optional[str] = None
    interval: Optional[int] = Field(default=None, ge=0)
    repetitions: Optional[int] = Field(default=None, ge=0)
    ease_factor: Optional[float] = Field(default=None, ge=MIN_EASE_FACTOR)
    due_date: Optional[date] = None


class DueLine(Line):
    text_id: int
    text_title: str
