import os
import sys

# -------- logging --------
os.environ.setdefault("PYTHONUNBUFFERED", "1")
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(line_buffering=True)


def log(msg: str):
    print(msg, flush=True)
