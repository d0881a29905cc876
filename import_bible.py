# ===============================
# 🔧 IMPORTS & SETUP
# ===============================
import argparse
import json
import os
import sys

from tqdm import tqdm

from bible_processing import config
from bible_processing.console import log
from bible_processing.errors import BibleError
from bible_processing.ingest import BatchIngestor
from bible_processing.normalize import normalize_bible
from bible_processing.sources import parse_gutenberg_html, read_jsonl

ALLOWED_EXTENSIONS = (".json", ".jsonl", ".html", ".htm")


# ===============================
# 📖 READ SOURCE FILE
# ===============================
def load_records(file_path: str, version: str):
    ext = os.path.splitext(file_path)[1].lower()
    with open(file_path, "r", encoding="utf-8") as f:
        if ext == ".jsonl":
            return read_jsonl(f, version)
        if ext in (".html", ".htm"):
            return parse_gutenberg_html(f.read(), version)
        if ext == ".json":
            return normalize_bible(json.load(f), version)
    raise ValueError(f"Unsupported file type {ext!r}; expected one of {', '.join(ALLOWED_EXTENSIONS)}")


# ===============================
# 📂 GUI FILE PICKER
# ===============================
def select_bible_file() -> str:
    from tkinter import Tk, filedialog

    root = Tk()
    root.withdraw()
    return filedialog.askopenfilename(
        title="Select a Bible file",
        filetypes=[("Bible files", " ".join(f"*{e}" for e in ALLOWED_EXTENSIONS))],
    )


# ===============================
# 🚀 IMPORT
# ===============================
def import_file(file_path: str, version: str, store, batch_size=config.BATCH_SIZE, dry_run=False):
    log(f"\n📘 Processing: {file_path} as {version}")
    records = load_records(file_path, version)
    log(f"🧩 Total verses: {len(records)}")
    if dry_run:
        log("🧪 Dry run, nothing written")
        return None

    with tqdm(total=len(records), desc=f"Importing {version}", unit="verse", leave=False) as pbar:
        result = BatchIngestor(store, batch_size=batch_size, progress=pbar.update).ingest(records, version)

    if result.already_exists:
        log(f"ℹ️ {version} already imported ({result.existing_count} verses)")
    else:
        log(f"✅ Imported {result.inserted_count} verses for {version}")
    return result


def build_parser():
    parser = argparse.ArgumentParser(description="Import a Bible translation into the verse store.")
    parser.add_argument("path", nargs="?", help="Bible .json, .jsonl or Gutenberg .html file")
    parser.add_argument("--version", default=config.DEFAULT_VERSION, help="translation code, e.g. KJV")
    parser.add_argument("--batch-size", type=int, default=config.BATCH_SIZE)
    parser.add_argument("--dry-run", action="store_true", help="parse only, do not write")
    return parser


# ===============================
# ▶️ ENTRY POINT
# ===============================
def main(argv=None, store=None):
    args = build_parser().parse_args(argv)
    file_path = args.path or select_bible_file()
    if not file_path:
        log("❌ No file selected. Exiting.")
        return 1

    try:
        if store is None and not args.dry_run:
            from bible_processing.store import create_store
            store = create_store()
        import_file(file_path, args.version.upper(), store, args.batch_size, args.dry_run)
    except (BibleError, ValueError, OSError, RuntimeError) as e:
        log(f"❌ Import failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
