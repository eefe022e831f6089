import asyncio
from datetime import date, timedelta

import pytest

from api import parse_action
from errors import InvalidArgument, NotFound, UnknownAction

TODAY = date(2026, 3, 10)


async def _add(api, lines=("a", "b"), title="T"):
    return await api("POST", "addText", {
        "title": title,
        "category": "Prayer",
        "lines": [{"text": text} for text in lines],
    })


def test_parse_action_reads_query_parameters():
    assert parse_action("getText&id=3") == ("getText", {"id": 3})
    assert parse_action("getTexts") == ("getTexts", {})
    assert parse_action("getText&id=abc&x=") == ("getText", {"id": "abc", "x": ""})


@pytest.mark.asyncio
async def test_add_and_get_text_round_trip(api):
    created = await _add(api)
    text_id = created["id"]

    fetched = await api("GET", f"getText&id={text_id}")

    assert fetched["lineCount"] == 2
    assert fetched["masteryPercent"] == 0
    assert fetched["dateAdded"] == TODAY.isoformat()
    assert [line["id"] for line in fetched["lines"]] == [f"{text_id}_0", f"{text_id}_1"]
    assert {line["masteryLevel"] for line in fetched["lines"]} == {"new"}
    assert fetched["lines"][0]["dueDate"] == TODAY.isoformat()
    assert fetched["lines"][0]["easeFactor"] == 2.5


@pytest.mark.asyncio
async def test_get_text_accepts_payload_id(api):
    created = await _add(api)
    fetched = await api("GET", "getText", {"id": str(created["id"])})
    assert fetched["id"] == created["id"]


@pytest.mark.asyncio
async def test_get_text_errors(api):
    with pytest.raises(NotFound):
        await api("GET", "getText&id=41")
    with pytest.raises(InvalidArgument):
        await api("GET", "getText")


@pytest.mark.asyncio
async def test_get_texts_lists_annotated_texts(api):
    await _add(api, title="One")
    await _add(api, title="Two", lines=("x",))
    texts = await api("GET", "getTexts")
    assert [(t["title"], t["lineCount"]) for t in texts] == [("One", 2), ("Two", 1)]


@pytest.mark.asyncio
async def test_update_line_reclassifies(api):
    created = await _add(api)
    text_id = created["id"]

    result = await api("PUT", "updateLine", {"id": f"{text_id}_1", "repetitions": 3, "interval": 21})

    assert result["ok"] is True
    assert result["line"]["masteryLevel"] == "mastered"
    fetched = await api("GET", f"getText&id={text_id}")
    assert [line["masteryLevel"] for line in fetched["lines"]] == ["new", "mastered"]
    assert fetched["masteryPercent"] == 50


@pytest.mark.asyncio
async def test_update_line_requires_id(api):
    with pytest.raises(InvalidArgument):
        await api("PUT", "updateLine", {"translation": "x"})


@pytest.mark.asyncio
async def test_concurrent_update_line_calls_keep_every_change(api):
    created = await _add(api, lines=("a", "b", "c", "d"))
    text_id = created["id"]
    fields = ["translation", "pronunciation", "text", "translation"]

    await asyncio.gather(*[
        api("PUT", "updateLine", {"id": f"{text_id}_{index}", field: f"v{index}"})
        for index, field in enumerate(fields)
    ])

    lines = (await api("GET", f"getText&id={text_id}"))["lines"]
    assert [line[field] for line, field in zip(lines, fields)] == ["v0", "v1", "v2", "v3"]


@pytest.mark.asyncio
async def test_grade_lines_by_quality_and_grade(api):
    created = await _add(api)
    ids = [line["id"] for line in created["lines"]]

    first = await api("PUT", "gradeLines", {"ids": ids, "quality": 5})
    second = await api("PUT", "gradeLines", {"ids": ids, "grade": "good"})

    assert [line["interval"] for line in first["lines"]] == [1, 1]
    assert [line["repetitions"] for line in second["lines"]] == [2, 2]
    assert second["lines"][0]["interval"] == 6
    assert second["lines"][0]["dueDate"] == (TODAY + timedelta(days=6)).isoformat()
    assert second["lines"][0]["masteryLevel"] == "learning"


@pytest.mark.asyncio
async def test_grade_lines_validates_payload(api):
    created = await _add(api)
    with pytest.raises(InvalidArgument):
        await api("PUT", "gradeLines", {"ids": [], "quality": 3})
    with pytest.raises(InvalidArgument):
        await api("PUT", "gradeLines", {"ids": [created["lines"][0]["id"]]})
    with pytest.raises(InvalidArgument):
        await api("PUT", "gradeLines", {"ids": [created["lines"][0]["id"]], "grade": "meh"})


@pytest.mark.asyncio
async def test_update_text(api):
    created = await _add(api)
    updated = await api("POST", "updateText", {"id": created["id"], "title": "New", "category": "Song"})
    assert (updated["id"], updated["title"], updated["category"]) == (created["id"], "New", "Song")
    assert updated["lineCount"] == 2


@pytest.mark.asyncio
async def test_delete_text(api):
    created = await _add(api)
    assert await api("DELETE", "deleteText", {"id": created["id"]}) == {"ok": True}
    assert await api("GET", "getTexts") == []


@pytest.mark.asyncio
async def test_delete_text_by_action_parameter(api):
    created = await _add(api)
    assert await api("DELETE", f"deleteText&id={created['id']}") == {"ok": True}
    with pytest.raises(NotFound):
        await api("GET", f"getText&id={created['id']}")


@pytest.mark.asyncio
async def test_due_lines(api, repository):
    created = await _add(api, lines=("today", "yesterday", "tomorrow"))
    text_id = created["id"]
    await repository.update_line(f"{text_id}_1", {"dueDate": (TODAY - timedelta(days=1)).isoformat()})
    await repository.update_line(f"{text_id}_2", {"dueDate": (TODAY + timedelta(days=1)).isoformat()})

    due = await api("GET", "getDueLines")

    assert due["count"] == 2
    assert [line["id"] for line in due["lines"]] == [f"{text_id}_0", f"{text_id}_1"]
    assert due["lines"][0]["textId"] == text_id
    assert due["lines"][0]["textTitle"] == "T"


@pytest.mark.asyncio
async def test_stats_and_streak(api, repository):
    created = await _add(api, lines=("a", "b"))
    await _add(api, title="Empty", lines=())
    await api("PUT", "updateLine", {"id": f"{created['id']}_0", "repetitions": 3, "interval": 21})
    await repository.record_practice(TODAY - timedelta(days=1))
    await repository.record_practice(TODAY - timedelta(days=2))

    assert await api("POST", "recordPractice", {"textId": created["id"], "linesPracticed": 2}) == {"ok": True}
    stats = await api("GET", "getStats")

    assert stats == {
        "totalTexts": 2,
        "totalLines": 2,
        "mastered": 1,
        "learning": 0,
        "new": 1,
        "streak": 3,
        "textBreakdown": [{"title": "T", "percent": 50}],
    }


@pytest.mark.asyncio
async def test_unknown_action(api):
    with pytest.raises(UnknownAction):
        await api("GET", "getEverything")
    with pytest.raises(UnknownAction):
        await api("POST", "getTexts")


@pytest.mark.asyncio
async def test_update_line_takes_id_from_action_string(api):
    created = await _add(api)
    text_id = created["id"]

    result = await api("PUT", f"updateLine&id={text_id}_1", {"id": f"{text_id}_0", "translation": "second"})

    assert result["line"]["id"] == f"{text_id}_1"
    lines = (await api("GET", f"getText&id={text_id}"))["lines"]
    assert [line["translation"] for line in lines] == ["", "second"]
