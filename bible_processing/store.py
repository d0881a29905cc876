from datetime import datetime, timezone
from typing import List, Optional

from supabase import create_client

from . import config


class VerseStore:
    """bible_verses rows and the per-version import log, over a supabase client."""

    def __init__(self, client, verses_table=config.VERSES_TABLE, log_table=config.IMPORT_LOG_TABLE):
        self.client = client
        self.verses_table = verses_table
        self.log_table = log_table

    def fetch_text(self, version: str, book: str, chapter: int, verse: int) -> Optional[str]:
        resp = (
            self.client.table(self.verses_table)
            .select("text")
            .eq("version", version)
            .eq("book", book)
            .eq("chapter", chapter)
            .eq("verse", verse)
            .limit(1)
            .execute()
        )
        rows = getattr(resp, "data", None) or []
        return rows[0].get("text") if rows else None

    def count_verses(self, version: str) -> int:
        resp = (
            self.client.table(self.verses_table)
            .select("*", count="exact", head=True)
            .eq("version", version)
            .execute()
        )
        return getattr(resp, "count", None) or 0

    def insert_verses(self, rows: List[dict]):
        """Write rows, skipping any (version, book, chapter, verse) already stored."""
        self.client.table(self.verses_table).upsert(
            rows, on_conflict="version,book,chapter,verse", ignore_duplicates=True
        ).execute()

    def get_import_progress(self, version: str) -> Optional[dict]:
        resp = self.client.table(self.log_table).select("*").eq("version", version).limit(1).execute()
        rows = getattr(resp, "data", None) or []
        return rows[0] if rows else None

    def save_import_progress(self, version: str, batches_committed: int, total_batches: int, completed: bool):
        self.client.table(self.log_table).upsert({
            "version": version,
            "batches_committed": batches_committed,
            "total_batches": total_batches,
            "completed": completed,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }, on_conflict="version").execute()


def create_store() -> VerseStore:
    config.require_env(SUPABASE_URL=config.SUPABASE_URL, SUPABASE_SERVICE_KEY=config.SUPABASE_KEY)
    return VerseStore(create_client(config.SUPABASE_URL, config.SUPABASE_KEY))
