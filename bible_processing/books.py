import re

OLD_TESTAMENT = [
    "Genesis", "Exodus", "Leviticus", "Numbers", "Deuteronomy",
    "Joshua", "Judges", "Ruth", "1 Samuel", "2 Samuel",
    "1 Kings", "2 Kings", "1 Chronicles", "2 Chronicles",
    "Ezra", "Nehemiah", "Esther", "Job", "Psalms", "Proverbs",
    "Ecclesiastes", "Song of Solomon", "Isaiah", "Jeremiah",
    "Lamentations", "Ezekiel", "Daniel", "Hosea", "Joel", "Amos",
    "Obadiah", "Jonah", "Micah", "Nahum", "Habakkuk", "Zephaniah",
    "Haggai", "Zechariah", "Malachi",
]

NEW_TESTAMENT = [
    "Matthew", "Mark", "Luke", "John", "Acts", "Romans",
    "1 Corinthians", "2 Corinthians", "Galatians", "Ephesians",
    "Philippians", "Colossians", "1 Thessalonians", "2 Thessalonians",
    "1 Timothy", "2 Timothy", "Titus", "Philemon", "Hebrews",
    "James", "1 Peter", "2 Peter", "1 John", "2 John",
    "3 John", "Jude", "Revelation",
]

BOOKS = OLD_TESTAMENT + NEW_TESTAMENT

ORDINALS = {
    "1st": "1", "first": "1", "i": "1",
    "2nd": "2", "second": "2", "ii": "2",
    "3rd": "3", "third": "3", "iii": "3",
}

ALIASES = {
    "revelations": "Revelation",
    "the revelation": "Revelation",
    "psalm": "Psalms",
    "song of songs": "Song of Solomon",
    "canticles": "Song of Solomon",
}

_BY_LOWER = {name.lower(): name for name in BOOKS}
_NT_LOWER = {name.lower() for name in NEW_TESTAMENT}


def canonical_book(name: str) -> str:
    """'1st  john' -> '1 John', 'Revelations' -> 'Revelation'.

    Names that match nothing known are returned with whitespace collapsed.
    """
    tokens = name.split()
    if not tokens:
        return ""
    if len(tokens) > 1 and tokens[0].lower() in ORDINALS:
        tokens[0] = ORDINALS[tokens[0].lower()]
    cleaned = " ".join(tokens)
    key = cleaned.lower()
    if key in ALIASES:
        return ALIASES[key]
    if key in _BY_LOWER:
        return _BY_LOWER[key]
    # "1John" -> "1 John"
    m = re.match(r"^([1-3])([A-Za-z].*)$", cleaned)
    if m:
        spaced = f"{m.group(1)} {m.group(2)}".lower()
        if spaced in _BY_LOWER:
            return _BY_LOWER[spaced]
    return cleaned


def is_new_testament(name: str) -> bool:
    return canonical_book(name).lower() in _NT_LOWER
