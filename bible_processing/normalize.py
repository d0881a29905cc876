"""Flatten uploaded Bible JSON into VerseRecords.

Two upload shapes are accepted:

* list of books: ``[{"name": "John", "chapters": [["In the beginning...", ...], ...]}]``.
  Chapters may also be ``{"verses": [...]}`` and verses may be objects with a
  ``text`` (or ``verse``) field. Chapter and verse numbers are positions
  (1-based), so the source must list every chapter and verse in order.
* mapping of books: ``{"John": {"chapters": {"3": {"16": "For God so loved..."}}}}``.
  Chapter and verse numbers are the keys, emitted in ascending numeric order.

Both shapes end in VerseRecord.create, which owns the integer and text rules
and stores book names in the same canonical form lookups query with.
"""
from dataclasses import asdict, dataclass
from typing import Iterable, Iterator, List

from .books import canonical_book
from .console import log
from .errors import BibleFormatError, EmptyImportError


@dataclass(frozen=True)
class VerseRecord:
    version: str
    book: str
    chapter: int
    verse: int
    text: str

    @classmethod
    def create(cls, version, book, chapter, verse, text) -> "VerseRecord":
        if not isinstance(book, str) or not book.strip():
            raise BibleFormatError(f"Missing book name for {version} {chapter}:{verse}")
        chapter_num = _positive(chapter, "chapter", book)
        verse_num = _positive(verse, "verse", book)
        if not isinstance(text, str):
            raise BibleFormatError(
                f"Verse text for {book} {chapter_num}:{verse_num} is {type(text).__name__}, not text"
            )
        text = text.strip()
        if not text:
            raise BibleFormatError(f"Verse text for {book} {chapter_num}:{verse_num} is empty")
        return cls(version, canonical_book(book), chapter_num, verse_num, text)

    @classmethod
    def from_row(cls, row: dict, version=None) -> "VerseRecord":
        if not isinstance(row, dict):
            raise BibleFormatError(f"Verse row must be an object, got {type(row).__name__}")
        return cls.create(version or row.get("version"), row.get("book"), row.get("chapter"),
                          row.get("verse"), row.get("text"))

    @property
    def key(self):
        return (self.version, self.book, self.chapter, self.verse)

    def as_row(self) -> dict:
        return asdict(self)


def _positive(value, field, book) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str) and value.strip().isdigit():
        number = int(value)
    else:
        number = None
    if number is None or number <= 0:
        raise BibleFormatError(f"Invalid {field} {value!r} in {book}")
    return number


def _is_blank(text) -> bool:
    return isinstance(text, str) and not text.strip()


# ==============================
# Shape A: list of books
# ==============================
def _verse_text(verse_obj):
    if isinstance(verse_obj, dict):
        return verse_obj.get("text") or verse_obj.get("verse")
    return verse_obj


def _from_book_list(books: list, version: str) -> Iterator[VerseRecord]:
    for book in books:
        if not isinstance(book, dict):
            raise BibleFormatError(f"Book entries must be objects, got {type(book).__name__}")
        name = book.get("name") or book.get("book")
        for chapter_index, chapter in enumerate(book.get("chapters") or []):
            verses = chapter.get("verses") if isinstance(chapter, dict) else chapter
            if not isinstance(verses, list):
                raise BibleFormatError(f"Chapter {chapter_index + 1} of {name} has no verse list")
            for verse_index, verse_obj in enumerate(verses):
                text = _verse_text(verse_obj)
                if _is_blank(text):
                    continue
                yield VerseRecord.create(version, name, chapter_index + 1, verse_index + 1, text)


# ==============================
# Shape B: mapping of books
# ==============================
def _numeric_keys(mapping: dict, what: str, book: str):
    try:
        return sorted(mapping, key=lambda k: int(k))
    except (TypeError, ValueError):
        raise BibleFormatError(f"{what} keys of {book} must be numbers: {list(mapping)[:5]}") from None


def _from_book_map(books: dict, version: str) -> Iterator[VerseRecord]:
    for book_key, book in books.items():
        if not isinstance(book, dict):
            continue
        name = book.get("name") or book_key
        chapters = book.get("chapters")
        if not isinstance(chapters, dict):
            continue
        for chapter_key in _numeric_keys(chapters, "Chapter", name):
            chapter = chapters[chapter_key]
            if not isinstance(chapter, dict):
                raise BibleFormatError(f"Chapter {chapter_key} of {name} must map verse numbers to text")
            for verse_key in _numeric_keys(chapter, "Verse", name):
                text = chapter[verse_key]
                if _is_blank(text):
                    continue
                yield VerseRecord.create(version, name, int(chapter_key), int(verse_key), text)


def dedupe(records: Iterable[VerseRecord]) -> List[VerseRecord]:
    seen, out, dropped = set(), [], 0
    for record in records:
        if record.key in seen:
            dropped += 1
            continue
        seen.add(record.key)
        out.append(record)
    if dropped:
        log(f"⚠️ Dropped {dropped} duplicate verses")
    return out


def normalize_bible(raw, version: str) -> List[VerseRecord]:
    if isinstance(raw, list):
        records = _from_book_list(raw, version)
    elif isinstance(raw, dict):
        records = _from_book_map(raw, version)
    else:
        raise BibleFormatError(f"Unsupported Bible data of type {type(raw).__name__}")

    verses = dedupe(records)
    if not verses:
        raise EmptyImportError()
    log(f"📖 Parsed {len(verses)} verses from {version}")
    return verses


def iter_batches(records: list, size: int) -> Iterator[list]:
    if size <= 0:
        raise ValueError("batch size must be positive")
    for i in range(0, len(records), size):
        yield records[i:i + size]
