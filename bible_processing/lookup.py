from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional

from . import config
from .console import log
from .references import try_parse_reference

UNAVAILABLE_TEXT = "Verse text unavailable"

SOURCE_STORE = "store"
SOURCE_FALLBACK = "fallback"
SOURCE_UNAVAILABLE = "unavailable"


@dataclass
class VerseResult:
    reference: str
    text: str
    source: str
    error: Optional[str] = None

    def as_dict(self) -> dict:
        out = {"reference": self.reference, "text": self.text, "source": self.source}
        if self.error:
            out["error"] = self.error
        return out


class VerseLookup:
    """Resolve a reference through the store, then the public API, then the sentinel."""

    def __init__(self, store, fallback, max_workers=config.MAX_LOOKUP_WORKERS):
        self.store = store
        self.fallback = fallback
        self.max_workers = max_workers

    def lookup(self, reference: str, version: str) -> VerseResult:
        parsed = try_parse_reference(reference)
        error = None if parsed.ok else str(parsed.error)

        if parsed.ok:
            ref = parsed.reference
            try:
                text = self.store.fetch_text(version, ref.book, ref.chapter, ref.verse)
                if text:
                    return VerseResult(reference, text, SOURCE_STORE)
                log(f"⚠️ {ref.label} ({version}) not in store")
            except Exception as e:
                log(f"⚠️ store lookup failed for {reference} ({version}): {e}")
        else:
            log(f"⚠️ {error}")

        if not isinstance(reference, str) or not reference.strip():
            return VerseResult(str(reference), UNAVAILABLE_TEXT, SOURCE_UNAVAILABLE, error)

        try:
            log(f"🌐 fallback lookup for {reference} ({version})")
            text = self.fallback.fetch(reference, version)
            if text:
                return VerseResult(reference, text, SOURCE_FALLBACK, error)
            log(f"⚠️ no fallback source configured for {version}")
        except Exception as e:
            log(f"❌ fallback failed for {reference}: {e}")
        return VerseResult(reference, UNAVAILABLE_TEXT, SOURCE_UNAVAILABLE, error)

    def lookup_many(self, references: List[str], version: str) -> List[VerseResult]:
        if not references:
            return []
        workers = max(1, min(self.max_workers, len(references)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self.lookup, ref, version) for ref in references]
            results = []
            for ref, future in zip(references, futures):
                try:
                    results.append(future.result())
                except Exception as e:
                    log(f"❌ lookup crashed for {ref}: {e}")
                    results.append(VerseResult(str(ref), UNAVAILABLE_TEXT, SOURCE_UNAVAILABLE, str(e)))
        return results
