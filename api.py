"""Single entry point used by the presentation layer.

``await api(method, action, data)`` mirrors the browser app's ``api()`` call:
``action`` may carry query parameters (``"getText&id=3"``) and every result is a
JSON-ready value with camelCase keys.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple
from urllib.parse import parse_qsl

from loguru import logger

from db.repository import Repository, coerce_text_id
from errors import InvalidArgument, UnknownAction
from utils.progress import compute_stats, compute_streak, due_lines
from utils.sm2 import map_grade_to_quality

Payload = Dict[str, Any]
Handler = Callable[["Api", Payload, Payload, date], Awaitable[Any]]


def parse_action(action: str) -> Tuple[str, Payload]:
    """Split ``"getText&id=3"`` into ``("getText", {"id": 3})``."""
    base, _, query = str(action).partition("&")
    params: Payload = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params[key] = int(value) if value.lstrip("-").isdigit() else value
    return base, params


def dump(model) -> Payload:
    return model.model_dump(mode="json", by_alias=True)


def require_id(params: Payload, data: Payload, action: str) -> Any:
    if "id" in params:
        return params["id"]
    if data.get("id") is not None:
        return data["id"]
    raise InvalidArgument(f"{action}: missing id")


class Api:
    def __init__(self, repository: Repository, clock: Callable[[], date] = date.today) -> None:
        self.repository = repository
        self.clock = clock

    async def __call__(self, method: str, action: str, data: Optional[Payload] = None) -> Any:
        base, params = parse_action(action)
        route = ROUTES.get(base)
        if route is None or route[0] != method.upper():
            raise UnknownAction(f"Unknown action: {method.upper()} {base}")
        logger.debug(f"api {method.upper()} {base} {params}")
        try:
            return await route[1](self, params, data or {}, self.clock())
        except Exception as exc:
            logger.error(f"[API Error] {base}: {exc}")
            raise

    # ---- GET ----

    async def get_texts(self, params: Payload, data: Payload, today: date) -> Any:
        return [dump(text) for text in await self.repository.list_texts()]

    async def get_text(self, params: Payload, data: Payload, today: date) -> Any:
        return dump(await self.repository.get_text(require_id(params, data, "getText")))

    async def get_due_lines(self, params: Payload, data: Payload, today: date) -> Any:
        lines = due_lines(await self.repository.load_texts(), today)
        return {"count": len(lines), "lines": [dump(line) for line in lines]}

    async def get_stats(self, params: Payload, data: Payload, today: date) -> Any:
        texts = await self.repository.load_texts()
        streak = compute_streak(await self.repository.session_dates(), today)
        return compute_stats(texts, streak).to_dict()

    # ---- POST ----

    async def add_text(self, params: Payload, data: Payload, today: date) -> Any:
        text = await self.repository.create_text(
            data.get("title"), data.get("category"), data.get("lines") or [], today=today
        )
        return dump(text)

    async def update_text(self, params: Payload, data: Payload, today: date) -> Any:
        text_id = require_id(params, data, "updateText")
        fields = {k: v for k, v in data.items() if k != "id"}
        return dump(await self.repository.update_text(text_id, fields))

    async def record_practice(self, params: Payload, data: Payload, today: date) -> Any:
        await self.repository.record_practice(today)
        return {"ok": True}

    # ---- PUT ----

    async def update_line(self, params: Payload, data: Payload, today: date) -> Any:
        line_id = params.get("id") or data.get("id")
        if not line_id:
            raise InvalidArgument("updateLine: missing line id")
        fields = {k: v for k, v in data.items() if k != "id"}
        line = await self.repository.update_line(line_id, fields)
        return {"ok": True, "line": dump(line)}

    async def grade_lines(self, params: Payload, data: Payload, today: date) -> Any:
        ids = data.get("ids")
        if not ids or not isinstance(ids, list):
            raise InvalidArgument("gradeLines: ids must be a non-empty list")
        if data.get("quality") is not None:
            quality = data["quality"]
        elif data.get("grade") is not None:
            quality = map_grade_to_quality(data["grade"])
        else:
            raise InvalidArgument("gradeLines: quality or grade is required")
        lines = await self.repository.grade_lines(ids, quality, today)
        return {"ok": True, "lines": [dump(line) for line in lines]}

    # ---- DELETE ----

    async def delete_text(self, params: Payload, data: Payload, today: date) -> Any:
        await self.repository.delete_text(coerce_text_id(require_id(params, data, "deleteText")))
        return {"ok": True}


ROUTES: Dict[str, Tuple[str, Handler]] = {
    "getTexts": ("GET", Api.get_texts),
    "getText": ("GET", Api.get_text),
    "getDueLines": ("GET", Api.get_due_lines),
    "getStats": ("GET", Api.get_stats),
    "addText": ("POST", Api.add_text),
    "updateText": ("POST", Api.update_text),
    "recordPractice": ("POST", Api.record_practice),
    "updateLine": ("PUT", Api.update_line),
    "gradeLines": ("PUT", Api.grade_lines),
    "deleteText": ("DELETE", Api.delete_text),
}
