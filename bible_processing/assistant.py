import base64
import binascii
import json
from typing import List

from openai import OpenAI

from . import config
from .console import log
from .errors import InvalidAudioError, UpstreamServiceError
from .fallback import FallbackVerseSource
from .lookup import VerseLookup
from .store import create_store


def speech_text(verses: List[dict]) -> str:
    return ". ".join(f"{v['reference']}: {v['text']}" for v in verses)


class QuestionAssistant:
    """Spoken question -> transcript -> verse references -> verse text."""

    def __init__(self, chat_client, transcribe_client, lookup: VerseLookup,
                 chat_model=config.CHAT_MODEL, transcribe_model=config.TRANSCRIBE_MODEL,
                 system_prompt=config.SYSTEM_PROMPT):
        self.chat_client = chat_client
        self.transcribe_client = transcribe_client
        self.lookup = lookup
        self.chat_model = chat_model
        self.transcribe_model = transcribe_model
        self.system_prompt = system_prompt

    def transcribe(self, audio: bytes, fmt: str = "webm") -> str:
        try:
            resp = self.transcribe_client.audio.transcriptions.create(
                file=(f"audio.{fmt}", audio, f"audio/{fmt}"),
                model=self.transcribe_model,
                language=config.TRANSCRIBE_LANGUAGE,
                response_format="json",
            )
        except Exception as e:
            raise UpstreamServiceError("transcription", e) from e
        text = (getattr(resp, "text", "") or "").strip()
        if not text:
            raise UpstreamServiceError("transcription", "no speech detected")
        log(f"🎙️ Transcribed: {text}")
        return text

    def find_verses(self, question: str) -> dict:
        try:
            content = self.chat_client.chat.completions.create(
                model=self.chat_model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": question},
                ],
                response_format={"type": "json_object"},
                temperature=config.CHAT_TEMPERATURE,
            ).choices[0].message.content
        except Exception as e:
            raise UpstreamServiceError("completion", e) from e

        try:
            data = json.loads(content or "")
        except json.JSONDecodeError as e:
            raise UpstreamServiceError("completion", f"response was not JSON: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamServiceError("completion", "response was not a JSON object")

        verses = [v for v in data.get("verses") or [] if isinstance(v, dict) and v.get("reference")]
        footnotes = [f for f in data.get("footnotes") or [] if isinstance(f, dict)]
        return {"verses": verses, "footnotes": footnotes}

    def answer(self, question: str, version: str = config.DEFAULT_VERSION) -> dict:
        found = self.find_verses(question)
        picks = found["verses"]
        log(f"🔎 {len(picks)} references for: {question}")

        results = self.lookup.lookup_many([v["reference"] for v in picks], version)
        verses = []
        for pick, result in zip(picks, results):
            item = result.as_dict()
            item["reasoning"] = pick.get("reasoning", "")
            verses.append(item)

        return {
            "question": question,
            "version": version,
            "verses": verses,
            "footnotes": found["footnotes"],
            "speech": speech_text(verses),
        }

    def answer_audio(self, audio_b64: str, version: str = config.DEFAULT_VERSION, fmt: str = "webm") -> dict:
        try:
            audio = base64.b64decode(audio_b64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidAudioError(f"audio is not valid base64: {e}") from e
        return self.answer(self.transcribe(audio, fmt), version)


def create_assistant() -> QuestionAssistant:
    config.require_env(OPENAI_API_KEY=config.OPENAI_API_KEY)
    chat = OpenAI(api_key=config.OPENAI_API_KEY)
    if config.GROQ_API_KEY:
        transcriber = OpenAI(api_key=config.GROQ_API_KEY, base_url=config.GROQ_BASE_URL)
    else:
        transcriber = chat
    lookup = VerseLookup(create_store(), FallbackVerseSource())
    return QuestionAssistant(chat, transcriber, lookup)
