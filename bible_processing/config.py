import os
from dotenv import load_dotenv

# -------- env --------
load_dotenv()
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_KEY")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
PORT = int(os.getenv("PORT", 10000))

# -------- models --------
CHAT_MODEL = "gpt-4o-mini"
CHAT_TEMPERATURE = 0.3
GROQ_BASE_URL = "https://api.groq.com/openai/v1"
TRANSCRIBE_MODEL = "whisper-large-v3-turbo" if GROQ_API_KEY else "whisper-1"
TRANSCRIBE_LANGUAGE = "en"

# -------- store --------
VERSES_TABLE = "bible_verses"
IMPORT_LOG_TABLE = "bible_import_log"
BATCH_SIZE = 500
DEFAULT_VERSION = "KJV"

# -------- lookup --------
FALLBACK_API_URL = "https://bible-api.com"
FALLBACK_TIMEOUT = 15.0
MAX_LOOKUP_WORKERS = 8

# version -> bible-api.com translation id (None = no public source)
FALLBACK_TRANSLATIONS = {
    "KJV": "kjv",
    "WEB": "web",
    "ASV": "asv",
    "BBE": "bbe",
    "YLT": "ylt",
    "DARBY": "darby",
    "BSB": None,
}

DEFAULT_SYSTEM_PROMPT = """You are a Biblical scholar expert in the King James Version New Testament.

Your task is to find the most relevant Bible verses that directly answer the user's question.

CRITICAL REQUIREMENTS:
1. ONLY use verses from the New Testament (Matthew through Revelation)
2. Return EXACT verse references (e.g., "John 3:16", "Romans 8:28")
3. Return 1-5 of the most relevant verses
4. Include brief context/footnotes explaining relevance
5. If no verses directly address the question, find related verses and explain the connection

Response format (JSON):
{
  "verses": [
    {
      "reference": "Book Chapter:Verse",
      "reasoning": "Why this verse answers the question"
    }
  ],
  "footnotes": [
    {
      "title": "Historical Context" or "Cross-Reference" or "Theological Note",
      "content": "Brief explanation"
    }
  ]
}"""


# -------- system prompt --------
def load_system_prompt(filepath="system_message.txt"):
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return f.read().strip() or DEFAULT_SYSTEM_PROMPT
    except OSError:
        return DEFAULT_SYSTEM_PROMPT
SYSTEM_PROMPT = load_system_prompt()


def require_env(**values):
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise RuntimeError(f"Missing one or more environment variables: {', '.join(missing)}")
