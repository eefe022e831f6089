from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from .line import CamelModel, Line, LineInput


class Category(str, Enum):
    PRAYER = "Prayer"
    SPEECH = "Speech"
    SONG = "Song"
    POEM = "Poem"
    SCRIPT = "Script"
    OTHER = "Other"


class TextBase(CamelModel):
    title: str
    category: Category

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()


class TextCreate(TextBase):
    lines: List[LineInput] = Field(default_factory=list)


class TextPatch(CamelModel):
    title: Optional[str] = None
    category: Optional[Category] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Title cannot be blank")
        return v.strip() if v is not None else v


class Text(TextBase):
    id: int
    date_added: date
    lines: List[Line] = Field(default_factory=list)


class AnnotatedText(Text):
    line_count: int
    mastery_percent: int
