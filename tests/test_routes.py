from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import config
from db import database
from main import app
from utils.samples import SAMPLE_TITLE


def _write_test_config(config_path: Path, db_path: Path, preload: bool) -> None:
    config_path.write_text(
        "\n".join(
            [
                "[storage]",
                f'db_path = "{db_path.as_posix()}"',
                "",
                "[samples]",
                f"preload = {'true' if preload else 'false'}",
                "",
                "[logging]",
                'level = "WARNING"',
            ]
        ),
        encoding="utf-8",
    )


@pytest.fixture
def client_factory(tmp_path, monkeypatch):
    config_dir = tmp_path / ".recite"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    db_path = config_dir / "recite.db"
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    for name in ("RECITE_DB_PATH", "RECITE_PRELOAD_SAMPLE", "RECITE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    def make(preload: bool = False) -> TestClient:
        _write_test_config(config_path, db_path, preload)
        database.set_store(database.Store(db_path))
        return TestClient(app)

    yield make
    database.set_store(None)


def test_add_text_then_fetch_over_http(client_factory):
    with client_factory() as client:
        response = client.post(
            "/api/addText",
            json={"title": "Ode", "category": "Poem", "lines": [{"text": "a"}, {"text": "b"}]},
        )
        assert response.status_code == 200
        text_id = response.json()["id"]

        response = client.get("/api/getText", params={"id": text_id})
        assert response.status_code == 200
        body = response.json()
        assert [line["id"] for line in body["lines"]] == [f"{text_id}_0", f"{text_id}_1"]

        response = client.put("/api/updateLine", json={"id": f"{text_id}_0", "repetitions": 3, "interval": 21})
        assert response.status_code == 200
        assert response.json()["line"]["masteryLevel"] == "mastered"

        assert client.get("/api/getDueLines").json()["count"] == 2
        assert client.post("/api/recordPractice").json() == {"ok": True}
        stats = client.get("/api/getStats").json()
        assert stats["mastered"] == 1
        assert stats["streak"] == 1

        assert client.request("DELETE", "/api/deleteText", json={"id": text_id}).json() == {"ok": True}
        assert client.get("/api/getTexts").json() == []


def test_error_status_codes(client_factory):
    with client_factory() as client:
        assert client.get("/api/getText", params={"id": 999}).status_code == 404
        assert client.get("/api/getText").status_code == 400
        assert client.get("/api/getNothing").status_code == 404
        assert client.put("/api/updateLine", json={"translation": "x"}).status_code == 400
        response = client.post("/api/addText", json={"title": "", "category": "Poem", "lines": []})
        assert response.status_code == 400


def test_startup_preloads_sample_into_empty_store(client_factory):
    with client_factory(preload=True) as client:
        texts = client.get("/api/getTexts").json()
        assert [text["title"] for text in texts] == [SAMPLE_TITLE]
        assert texts[0]["lineCount"] == 12


def test_startup_without_preload_leaves_store_empty(client_factory):
    with client_factory(preload=False) as client:
        assert client.get("/api/getTexts").json() == []
