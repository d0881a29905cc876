import json
import re
from typing import Iterable, List

from bs4 import BeautifulSoup

from .errors import BibleFormatError
from .normalize import VerseRecord, dedupe

VERSE_LINE = re.compile(r"(\d+):(\d+)\s+(.*)", re.S)
SKIP_MARKERS = ("Project Gutenberg", "License", "Contents")


def parse_gutenberg_html(html: str, version: str) -> List[VerseRecord]:
    """Project Gutenberg KJV HTML: <h2> book titles, <p> '1:1 In the beginning...'."""
    soup = BeautifulSoup(html, "html.parser")
    records = []
    current_book = None

    for el in soup.find_all(["h2", "p"]):
        if el.name == "h2":
            title = el.get_text(" ", strip=True)
            # front matter and licence sections carry no verses
            if any(marker in title for marker in SKIP_MARKERS):
                current_book = None
                continue
            current_book = title
        elif current_book:
            match = VERSE_LINE.match(el.get_text(" ", strip=True))
            if match:
                chapter, verse, content = match.groups()
                records.append(VerseRecord.create(version, current_book, chapter, verse, " ".join(content.split())))
    return dedupe(records)


def read_jsonl(lines: Iterable[str], version: str) -> List[VerseRecord]:
    """One {book, chapter, verse, text} object per line, as the parsers emit."""
    records = []
    for n, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            row = json.loads(line)
        except json.JSONDecodeError as e:
            raise BibleFormatError(f"Line {n} is not valid JSON: {e}") from e
        if not isinstance(row, dict) or "text" not in row:
            continue
        records.append(VerseRecord.from_row(row, version=version))
    return dedupe(records)
