import base64
import json

import pytest

from app import create_app
from bible_processing.assistant import QuestionAssistant
from bible_processing.errors import BibleFormatError
from bible_processing.ingest import BatchIngestor
from conftest import FakeOpenAI, FakeStore


@pytest.fixture
def upload_store():
    return FakeStore()


@pytest.fixture
def client(lookup, upload_store):
    openai = FakeOpenAI(content=json.dumps({
        "verses": [{"reference": "John 3:16", "reasoning": "love"}],
        "footnotes": [{"title": "Theological Note", "content": "agape"}],
    }))
    assistant = QuestionAssistant(openai, openai, lookup)
    app = create_app(assistant=assistant, ingestor=BatchIngestor(upload_store, batch_size=2))
    app.config["TESTING"] = True
    return app.test_client()


def test_process_question_audio(client):
    audio = base64.b64encode(b"fake audio").decode()
    resp = client.post("/api/process-question", json={"audio": audio, "version": "KJV"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["question"] == "What is love?"
    assert body["verses"][0]["text"] == "For God so loved the world..."
    assert body["footnotes"][0]["content"] == "agape"
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_process_question_text(client):
    resp = client.post("/api/process-question", json={"question": "Who is my neighbour?"})
    assert resp.status_code == 200
    assert resp.get_json()["version"] == "KJV"


def test_process_question_requires_audio(client):
    resp = client.post("/api/process-question", json={})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "No audio provided"}


def test_process_question_upstream_failure(lookup):
    assistant = QuestionAssistant(FakeOpenAI(error=RuntimeError("quota exceeded")), FakeOpenAI(), lookup)
    resp = create_app(assistant=assistant, ingestor=object()).test_client().post(
        "/api/process-question", json={"question": "why?"})
    assert resp.status_code == 500
    body = resp.get_json()
    assert body["error"] == "Failed to process question"
    assert "quota exceeded" in body["details"]


def test_preflight_and_wrong_method(client):
    resp = client.options("/api/upload-bible", headers={
        "Origin": "http://localhost:5173",
        "Access-Control-Request-Method": "POST",
    })
    assert resp.status_code == 200
    assert resp.data == b""
    assert resp.headers["Access-Control-Allow-Origin"] == "*"

    resp = client.get("/api/process-question")
    assert resp.status_code == 405
    assert resp.get_json() == {"error": "Method not allowed"}


def test_upload_bible(client, upload_store):
    bible = {"John": {"chapters": {"3": {"16": "For God so loved", "17": "For God sent not", "18": "He that"}}}}
    resp = client.post("/api/upload-bible", json={"bibleData": bible, "version": "KJV", "versionName": "King James"})
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "message": "King James imported successfully", "count": 3}
    assert [len(b) for b in upload_store.inserts] == [2, 1]


def test_upload_bible_already_imported(client, upload_store):
    upload_store.existing = 42
    bible = [{"name": "Jude", "chapters": [["Jude, the servant"]]}]
    resp = client.post("/api/upload-bible", json={"bibleData": bible, "version": "KJV", "versionName": "King James"})
    assert resp.get_json() == {
        "success": True, "message": "King James already imported", "count": 42, "alreadyExists": True,
    }
    assert upload_store.inserts == []


@pytest.mark.parametrize("payload,error", [
    ({"version": "KJV"}, "Missing Bible data or version"),
    ({"bibleData": [{"name": "John"}], "version": "KJV"}, "No verses found in uploaded file"),
    ({"bibleData": "text", "version": "KJV"}, "Unrecognized Bible data"),
])
def test_upload_bible_bad_input(client, payload, error):
    resp = client.post("/api/upload-bible", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == error


def test_upload_bible_store_failure(client, upload_store):
    upload_store.fail_on_insert = 0
    bible = [{"name": "Jude", "chapters": [["a", "b", "c"]]}]
    resp = client.post("/api/upload-bible", json={"bibleData": bible, "version": "KJV"})
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Failed to import Bible data"
    assert "batch 0" in resp.get_json()["details"]


def test_upload_chunk(client, upload_store):
    verses = [{"version": "KJV", "book": "Jude", "chapter": 1, "verse": 1, "text": "Jude"}]
    resp = client.post("/api/upload-bible-chunk", json={"verses": verses, "version": "KJV", "isFirstBatch": True})
    assert resp.get_json() == {"success": True, "count": 1}

    upload_store.existing = 1
    resp = client.post("/api/upload-bible-chunk",
                       json={"verses": verses, "version": "KJV", "versionName": "KJV", "isFirstBatch": True})
    assert resp.get_json()["alreadyExists"] is True


def test_upload_chunk_errors(client, upload_store):
    assert client.post("/api/upload-bible-chunk", json={"version": "KJV"}).status_code == 400
    bad = [{"book": "Jude", "chapter": 0, "verse": 1, "text": "x"}]
    assert client.post("/api/upload-bible-chunk", json={"verses": bad, "version": "KJV"}).status_code == 400

    upload_store.fail_on_insert = 0
    good = [{"book": "Jude", "chapter": 1, "verse": 1, "text": "x"}]
    resp = client.post("/api/upload-bible-chunk", json={"verses": good, "version": "KJV"})
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Failed to upload verses"


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_process_question_invalid_audio(client):
    resp = client.post("/api/process-question", json={"audio": "***not base64***"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid audio"


def test_process_question_data_error_is_not_reported_as_audio():
    class BrokenAssistant:
        def answer(self, question, version):
            raise BibleFormatError("Invalid chapter 'x' in John")

    resp = create_app(assistant=BrokenAssistant(), ingestor=object()).test_client().post(
        "/api/process-question", json={"question": "why?"})
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Failed to process question"
