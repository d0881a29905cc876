import re
from dataclasses import dataclass
from typing import Optional

from .books import canonical_book
from .errors import MalformedReferenceError

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def leading_int(text: str) -> Optional[int]:
    """Integer at the start of text ('16-18' -> 16, '1st' -> 1), or None."""
    m = _LEADING_INT.match(text)
    return int(m.group(1)) if m else None


@dataclass(frozen=True)
class ParsedReference:
    book: str
    chapter: int
    verse: int

    @property
    def label(self) -> str:
        return f"{self.book} {self.chapter}:{self.verse}"


@dataclass(frozen=True)
class ReferenceResult:
    raw: str
    reference: Optional[ParsedReference] = None
    error: Optional[MalformedReferenceError] = None

    @property
    def ok(self) -> bool:
        return self.reference is not None


def parse_reference(text: str) -> ParsedReference:
    """Split 'Book[ Book2] Chapter:Verse' into its parts.

    The last token before the colon is the chapter and everything ahead of it
    is the book, so '1 John 3:16', 'Song of Solomon 2:1' and 'John 3:16' all
    resolve. Chapter and verse take the leading integer of their token, which
    makes '3:16-18' resolve to verse 16.
    """
    if not isinstance(text, str):
        raise MalformedReferenceError(text, "reference is not a string")
    if ":" not in text:
        raise MalformedReferenceError(text, "missing ':' between chapter and verse")

    book_chapter, verse_part = text.split(":", 1)
    verse = leading_int(verse_part)
    if verse is None:
        raise MalformedReferenceError(text, "verse is not a number")

    tokens = book_chapter.split()
    if len(tokens) < 2:
        raise MalformedReferenceError(text, "expected a book name followed by a chapter")
    if leading_int(tokens[0]) is not None and len(tokens) < 3:
        raise MalformedReferenceError(text, "numbered book is missing its chapter")

    chapter = leading_int(tokens[-1])
    if chapter is None:
        raise MalformedReferenceError(text, "chapter is not a number")
    if chapter <= 0 or verse <= 0:
        raise MalformedReferenceError(text, "chapter and verse must be positive")

    book = canonical_book(" ".join(tokens[:-1]))
    return ParsedReference(book=book, chapter=chapter, verse=verse)


def try_parse_reference(text) -> ReferenceResult:
    try:
        return ReferenceResult(raw=text, reference=parse_reference(text))
    except MalformedReferenceError as e:
        return ReferenceResult(raw=text, error=e)
