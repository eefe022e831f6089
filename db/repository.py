"""Texts, lines and practice sessions on top of the record store.

Lines are embedded in their parent text's record, so every line change is a
read-modify-write of the whole text. Concurrency guarantee: all mutations of one
text (``update_text``, ``update_line``, ``grade_lines``, ``delete_text``) are
serialized by a per-text ``asyncio.Lock``, so concurrent per-line updates of the
same text never lose each other's changes. Operations on different texts run
independently. ``grade_lines`` additionally writes each parent text once for the
whole batch.
"""

from __future__ import annotations

import asyncio
import weakref
from collections import OrderedDict
from contextlib import AsyncExitStack
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from errors import InvalidArgument, NotFound
from models.line import Line, LinePatch
from models.session import Session
from models.text import AnnotatedText, Category, Text, TextCreate, TextPatch
from utils.line_keys import line_key, parse_line_key
from utils.mastery import classify, count_mastered, mastery_percent
from utils.sm2 import schedule
from .database import Store

TEXTS = "texts"
SESSIONS = "sessions"

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate(model: Type[ModelT], data: Any) -> ModelT:
    """Validate a payload, reporting failures as InvalidArgument."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidArgument(str(exc)) from exc


def coerce_text_id(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidArgument(f"Invalid text id: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid text id: {value!r}") from None


def with_mastery(line: Line) -> Line:
    return line.model_copy(update={"mastery_level": classify(line.repetitions, line.interval)})


def annotate(text: Text) -> AnnotatedText:
    total = len(text.lines)
    mastered = count_mastered(classify(line.repetitions, line.interval) for line in text.lines)
    return AnnotatedText(
        **text.model_dump(),
        line_count=total,
        mastery_percent=mastery_percent(mastered, total),
    )


class Repository:
    def __init__(self, store: Store) -> None:
        self.store = store
        # Entries vanish once no caller holds or awaits the lock
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock_for(self, text_id: int) -> asyncio.Lock:
        """Return the lock serializing writes to one text."""
        return self._locks.setdefault(text_id, asyncio.Lock())

    async def _load(self, text_id: int) -> Text:
        record = await self.store.get_one(TEXTS, text_id)
        if record is None:
            raise NotFound(f"Text {text_id} not found")
        return Text.model_validate(record)

    async def _save(self, text: Text) -> None:
        await self.store.upsert(TEXTS, text.model_dump(mode="json", by_alias=True))

    # ---- texts ----

    async def load_texts(self) -> List[Text]:
        records = await self.store.get_all(TEXTS)
        return [Text.model_validate(record) for record in records]

    async def list_texts(self) -> List[AnnotatedText]:
        return [annotate(text) for text in await self.load_texts()]

    async def get_text(self, text_id: Any) -> AnnotatedText:
        return annotate(await self._load(coerce_text_id(text_id)))

    async def reserve_text_id(self, title: str, category: Category, date_added: date) -> int:
        """Insert a line-less placeholder text and return its generated id."""
        placeholder = {
            "title": title,
            "category": category.value,
            "dateAdded": date_added.isoformat(),
            "lines": [],
        }
        return await self.store.insert(TEXTS, placeholder)

    async def finalize_text(self, text_id: int, payload: TextCreate, date_added: date) -> Text:
        """Build the lines of a reserved text and overwrite its placeholder."""
        lines = [
            Line(
                id=line_key(text_id, index),
                text=raw.text,
                pronunciation=raw.pronunciation,
                translation=raw.translation,
                due_date=date_added,
            )
            for index, raw in enumerate(payload.lines)
        ]
        text = Text(
            id=text_id,
            title=payload.title,
            category=payload.category,
            date_added=date_added,
            lines=[with_mastery(line) for line in lines],
        )
        await self._save(text)
        return text

    async def create_text(
        self,
        title: Any,
        category: Any,
        raw_lines: Optional[Iterable[Any]] = None,
        today: Optional[date] = None,
    ) -> AnnotatedText:
        """Create a text with all its lines.

        Line ids embed the parent id, which only the store can generate, so the
        text is inserted first as a placeholder and then rewritten in full.
        """
        payload = validate(TextCreate, {"title": title, "category": category, "lines": list(raw_lines or [])})
        today = today or date.today()
        text_id = await self.reserve_text_id(payload.title, payload.category, today)
        text = await self.finalize_text(text_id, payload, today)
        logger.info(f"Created text {text_id} '{text.title}' with {len(text.lines)} lines")
        return annotate(text)

    async def update_text(self, text_id: Any, fields: Dict[str, Any]) -> AnnotatedText:
        text_id = coerce_text_id(text_id)
        patch = validate(TextPatch, fields)
        async with self.lock_for(text_id):
            text = await self._load(text_id)
            text = text.model_copy(update=patch.model_dump(exclude_unset=True, exclude_none=True))
            await self._save(text)
        return annotate(text)

    async def delete_text(self, text_id: Any) -> None:
        text_id = coerce_text_id(text_id)
        async with self.lock_for(text_id):
            await self.store.delete(TEXTS, text_id)
        logger.info(f"Deleted text {text_id}")

    # ---- lines ----

    @staticmethod
    def _line_at(text: Text, index: int) -> Line:
        if index < 0 or index >= len(text.lines):
            raise NotFound(f"Line index {index} out of range for text {text.id}")
        return text.lines[index]

    async def update_line(self, line_id: Any, fields: Dict[str, Any]) -> Line:
        """Patch one line and rewrite its parent text. Mastery is recomputed."""
        if not line_id:
            raise InvalidArgument("updateLine: missing line id")
        text_id, index = parse_line_key(str(line_id))
        patch = validate(LinePatch, fields)
        changes = patch.model_dump(exclude_unset=True)
        async with self.lock_for(text_id):
            text = await self._load(text_id)
            line = self._line_at(text, index)
            updated = with_mastery(validate(Line, {**line.model_dump(), **changes, "id": line.id}))
            text.lines[index] = updated
            await self._save(text)
        logger.debug(f"Updated line {updated.id}: {sorted(changes)}")
        return updated

    async def grade_lines(
        self,
        line_ids: Iterable[Any],
        quality: float,
        today: Optional[date] = None,
    ) -> List[Line]:
        """Schedule many lines with one shared quality, one write per parent text.

        Every line is graded once from its state before the batch, even when its
        id is repeated. The locks of all parents are held while the batch is
        checked and written, so a missing text or line rejects the batch before
        any parent is written.
        """
        today = today or date.today()
        keys: List[Tuple[int, int]] = [parse_line_key(str(line_id)) for line_id in line_ids]
        by_text: "OrderedDict[int, List[int]]" = OrderedDict()
        for text_id, index in keys:
            indexes = by_text.setdefault(text_id, [])
            if index not in indexes:
                indexes.append(index)

        async with AsyncExitStack() as stack:
            # Fixed acquisition order keeps overlapping batches from deadlocking
            for text_id in sorted(by_text):
                await stack.enter_async_context(self.lock_for(text_id))

            texts: Dict[int, Text] = {}
            for text_id, indexes in by_text.items():
                text = await self._load(text_id)
                for index in indexes:
                    self._line_at(text, index)
                texts[text_id] = text

            graded: Dict[Tuple[int, int], Line] = {}
            for text_id, indexes in by_text.items():
                text = texts[text_id]
                for index in indexes:
                    line = text.lines[index]
                    result = schedule(quality, line.repetitions, line.interval, line.ease_factor, today)
                    updated = with_mastery(line.model_copy(update={
                        "interval": result.interval,
                        "repetitions": result.repetitions,
                        "ease_factor": result.ease_factor,
                        "due_date": result.due_date,
                    }))
                    text.lines[index] = updated
                    graded[(text_id, index)] = updated

            for text_id, indexes in by_text.items():
                await self._save(texts[text_id])
                logger.debug(f"Graded {len(indexes)} lines of text {text_id} with quality {quality}")
        return [graded[key] for key in keys]

    # ---- sessions ----

    async def record_practice(self, today: Optional[date] = None) -> Session:
        session = Session(date=today or date.today())
        await self.store.upsert(SESSIONS, session.model_dump(mode="json"))
        logger.info(f"Recorded practice for {session.date.isoformat()}")
        return session

    async def session_dates(self) -> List[date]:
        records = await self.store.get_all(SESSIONS)
        return [validate(Session, record).date for record in records]
