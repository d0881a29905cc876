import json
from types import SimpleNamespace

import pytest

from bible_processing.fallback import FallbackVerseSource
from bible_processing.lookup import VerseLookup


class FakeStore:
    def __init__(self, verses=None, existing=0, progress=None, fail_on_insert=None,
                 log_error=None, fail_progress_at=()):
        self.verses = dict(verses or {})
        self.existing = existing
        self.progress = dict(progress or {})
        self.fail_on_insert = fail_on_insert
        self.log_error = log_error
        self.fail_progress_at = set(fail_progress_at)
        self.fetches = []
        self.inserts = []
        self.saved = []

    def fetch_text(self, version, book, chapter, verse):
        self.fetches.append((version, book, chapter, verse))
        return self.verses.get((version, book, chapter, verse))

    def count_verses(self, version):
        return self.existing

    def insert_verses(self, rows):
        if self.fail_on_insert is not None and len(self.inserts) == self.fail_on_insert:
            raise RuntimeError("canceling statement due to statement timeout")
        self.inserts.append(list(rows))
        # unique (version, book, chapter, verse); existing rows are kept
        for row in rows:
            key = (row["version"], row["book"], row["chapter"], row["verse"])
            self.verses.setdefault(key, row["text"])

    def get_import_progress(self, version):
        if self.log_error:
            raise self.log_error
        return self.progress.get(version)

    def save_import_progress(self, version, batches_committed, total_batches, completed):
        if self.log_error:
            raise self.log_error
        if batches_committed in self.fail_progress_at:
            self.fail_progress_at.discard(batches_committed)
            raise RuntimeError("connection reset by peer")
        entry = {"version": version, "batches_committed": batches_committed,
                 "total_batches": total_batches, "completed": completed}
        self.progress[version] = entry
        self.saved.append(entry)


class FakeResponse:
    def __init__(self, payload=None, status=200):
        self.payload = payload or {}
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError(f"HTTP {self.status_code}")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        if self.error:
            raise self.error
        return self.response


class FakeOpenAI:
    """Just enough of the OpenAI client: chat.completions and audio.transcriptions."""

    def __init__(self, content=None, transcript="What is love?", error=None):
        self.content = content if content is not None else json.dumps({"verses": [], "footnotes": []})
        self.transcript = transcript
        self.error = error
        self.chat_calls = []
        self.audio_calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._complete))
        self.audio = SimpleNamespace(transcriptions=SimpleNamespace(create=self._transcribe))

    def _complete(self, **kwargs):
        self.chat_calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    def _transcribe(self, **kwargs):
        self.audio_calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.transcript)


@pytest.fixture
def store():
    return FakeStore({
        ("KJV", "John", 3, 16): "For God so loved the world...",
        ("KJV", "1 John", 4, 8): "He that loveth not knoweth not God; for God is love.",
    })


@pytest.fixture
def session():
    return FakeSession(FakeResponse({"text": " Love suffereth long, and is kind \n"}))


@pytest.fixture
def lookup(store, session):
    return VerseLookup(store, FallbackVerseSource(session=session), max_workers=4)
