from typing import Optional
from urllib.parse import quote

import requests

from . import config


class FallbackVerseSource:
    """Public bible-api.com lookup, keyed by the raw reference string."""

    def __init__(self, session=None, translations=None, base_url=config.FALLBACK_API_URL,
                 timeout=config.FALLBACK_TIMEOUT):
        self.session = session or requests.Session()
        self.translations = config.FALLBACK_TRANSLATIONS if translations is None else translations
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def translation_for(self, version: str) -> Optional[str]:
        return self.translations.get((version or "").upper())

    def fetch(self, reference: str, version: str) -> Optional[str]:
        """Verse text, or None when version has no public source.

        Raises on HTTP errors and on responses without text.
        """
        translation = self.translation_for(version)
        if not translation:
            return None
        url = f"{self.base_url}/{quote(reference.strip())}"
        resp = self.session.get(url, params={"translation": translation}, timeout=self.timeout)
        resp.raise_for_status()
        text = (resp.json().get("text") or "").strip()
        if not text:
            raise ValueError(f"no text returned for {reference}")
        return text
