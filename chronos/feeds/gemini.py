import os
import re
import uuid
import logging
from typing import Any, List, Optional

from google import genai
from google.genai import types

from .base import BaseNewsFeed, ProviderFetchError
from chronos.storage.models import Coordinates, NewsItem, Sentiment, Source, GLOBAL_LOCATION

logger = logging.getLogger(__name__)

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")

DEFAULT_TITLE = "Breaking Update"
EMPTY_REPLY_TITLE = "Intelligence Synchronized"
EMPTY_REPLY_SUMMARY = "No briefing text was returned for this cycle."
IMAGE_URL_TEMPLATE = (
    "https://images.unsplash.com/photo-1585829365234-78d9b8184481"
    "?auto=format&fit=crop&q=80&w=800&h=400&sig={sig}"
)

_TITLE_RE = re.compile(r"TITLE:\s*(.*)", re.IGNORECASE)
_SENTIMENT_RE = re.compile(r"SENTIMENT:\s*(bullish|bearish|neutral)", re.IGNORECASE)
_LOCATION_RE = re.compile(r"LOCATION:\s*(.*)", re.IGNORECASE)
_SUMMARY_RE = re.compile(r"SUMMARY:\s*([\s\S]*)", re.IGNORECASE)


def build_prompt(topic: str, location: Optional[Coordinates] = None) -> str:
    location_context = ""
    if location:
        location_context = (
            f"Prioritize news happening near coordinates {location.lat}, {location.lng} "
            "if relevant, otherwise stick to major global news."
        )
    return (
        f"Find the most significant news headline in the {topic} category from the last 60 minutes.\n"
        f"{location_context}\n\n"
        "Return the result in this format:\n"
        "TITLE: [Headline]\n"
        "SENTIMENT: [bullish, bearish, or neutral]\n"
        "LOCATION: [Detected city/country or 'Global']\n"
        "SUMMARY: [2-3 sentence engaging journalistic summary]"
    )


def _match(pattern: re.Pattern, text: str) -> str:
    m = pattern.search(text)
    return m.group(1).strip() if m else ""


def extract_sources(grounding_chunks: Optional[List[Any]]) -> List[Source]:
    """Lê os chunks de grounding (objetos do SDK ou dicts) e devolve as fontes web."""
    sources: List[Source] = []
    for chunk in grounding_chunks or []:
        web = chunk.get("web") if isinstance(chunk, dict) else getattr(chunk, "web", None)
        if not web:
            continue
        if isinstance(web, dict):
            uri, title = web.get("uri"), web.get("title")
        else:
            uri, title = getattr(web, "uri", None), getattr(web, "title", None)
        if not uri:
            continue
        sources.append(Source(title=title or "Source", url=uri))
    return sources


def parse_news_response(
    text: Optional[str],
    topic: str,
    grounding_chunks: Optional[List[Any]] = None,
) -> NewsItem:
    """
    Converte a resposta textual do modelo em NewsItem.
    Campos ausentes caem nos defaults: título genérico, sentimento neutro,
    localização 'Global' e, para o resumo, o texto cru da resposta.
    """
    text = text or ""
    if not text.strip():
        title, summary = EMPTY_REPLY_TITLE, EMPTY_REPLY_SUMMARY
    else:
        title = _match(_TITLE_RE, text) or DEFAULT_TITLE
        summary = _match(_SUMMARY_RE, text) or text.strip()

    sentiment = _match(_SENTIMENT_RE, text).lower() or Sentiment.neutral.value
    location = _match(_LOCATION_RE, text) or GLOBAL_LOCATION

    return NewsItem(
        title=title,
        summary=summary,
        sources=extract_sources(grounding_chunks),
        topic=topic,
        sentiment=Sentiment(sentiment),
        location=location,
        image_url=IMAGE_URL_TEMPLATE.format(sig=uuid.uuid4().hex[:8]),
    )


def _grounding_chunks(response: Any) -> List[Any]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    return list(getattr(metadata, "grounding_chunks", None) or [])


class GeminiNewsFeed(BaseNewsFeed):
    """Gera a manchete do tópico via Gemini com grounding no Google Search."""

    def __init__(self, api_key: Optional[str] = None, model: str = GEMINI_MODEL, client: Optional[genai.Client] = None):
        self.api_key = api_key or GEMINI_API_KEY
        self.model = model
        self._client = client

    @property
    def client(self) -> genai.Client:
        # criado sob demanda: sem chave o app ainda sobe (e o ciclo falha de forma controlada)
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def fetch(self, topic: str, location: Optional[Coordinates] = None) -> NewsItem:
        prompt = build_prompt(topic, location)
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    tools=[types.Tool(google_search=types.GoogleSearch())],
                ),
            )
            return parse_news_response(response.text, topic, _grounding_chunks(response))
        except Exception as e:
            logger.error("Gemini news fetch failed for '%s': %s", topic, e)
            raise ProviderFetchError(str(e)) from e
