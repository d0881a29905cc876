from dataclasses import dataclass
from typing import List, Optional, Tuple

from . import config
from .console import log
from .errors import StoreWriteError
from .normalize import VerseRecord, iter_batches


@dataclass
class IngestResult:
    inserted_count: int
    already_exists: bool = False
    existing_count: int = 0
    resumed_from_batch: Optional[int] = None


class BatchIngestor:
    """Sequential batch inserts with a resumable per-version import log.

    A version with rows and no unfinished log entry is treated as already
    imported. An unfinished entry resumes at the first batch it has not
    recorded. Batch writes skip rows already in the store, so a log that
    lags behind the store only costs a repeated write. Batches already
    committed are never rolled back.
    """

    def __init__(self, store, batch_size=config.BATCH_SIZE, progress=None):
        self.store = store
        self.batch_size = batch_size
        self.progress = progress

    def _resume_point(self, version: str, total_batches: int) -> Tuple[Optional[int], bool]:
        """(first batch to write or None, whether the import log is usable)."""
        try:
            entry = self.store.get_import_progress(version)
        except Exception as e:
            log(f"⚠️ import log unavailable for {version}, not tracking progress: {e}")
            return None, False
        if not entry or entry.get("completed"):
            return None, True
        if entry.get("total_batches") not in (None, total_batches):
            log(f"⚠️ {version} import log expects {entry.get('total_batches')} batches, "
                f"upload has {total_batches}; not resuming")
            return None, True
        return int(entry.get("batches_committed") or 0), True

    def _record_progress(self, version: str, committed: int, total: int):
        try:
            self.store.save_import_progress(version, committed, total, committed == total)
        except Exception as e:
            log(f"⚠️ could not record {version} progress at batch {committed}/{total}: {e}")

    def ingest(self, records: List[VerseRecord], version: str) -> IngestResult:
        batches = list(iter_batches(records, self.batch_size))
        start, track = self._resume_point(version, len(batches))

        if start is None:
            existing = self.store.count_verses(version)
            if existing > 0:
                log(f"ℹ️ {version} already exists with {existing} verses")
                return IngestResult(0, already_exists=True, existing_count=existing)
            start_batch = 0
        else:
            log(f"🔁 resuming {version} import at batch {start + 1}/{len(batches)}")
            start_batch = start

        inserted = 0
        for index in range(start_batch, len(batches)):
            batch = batches[index]
            try:
                self.store.insert_verses([r.as_row() for r in batch])
            except Exception as e:
                log(f"❌ Error inserting {version} batch {index + 1}/{len(batches)}: {e}")
                raise StoreWriteError(version, index, start_batch * self.batch_size + inserted, e) from e
            if track:
                self._record_progress(version, index + 1, len(batches))
            inserted += len(batch)
            if self.progress:
                self.progress(len(batch))
            log(f"✅ Imported {start_batch * self.batch_size + inserted}/{len(records)} verses")

        return IngestResult(inserted, resumed_from_batch=start)

    def ingest_chunk(self, records: List[VerseRecord], version: str, first_batch: bool) -> IngestResult:
        """One client-side chunk; only the first chunk checks for an existing import."""
        if first_batch:
            existing = self.store.count_verses(version)
            if existing > 0:
                return IngestResult(0, already_exists=True, existing_count=existing)
        try:
            self.store.insert_verses([r.as_row() for r in records])
        except Exception as e:
            log(f"❌ Insert error for {version} chunk: {e}")
            raise StoreWriteError(version, 0, 0, e) from e
        return IngestResult(len(records))
