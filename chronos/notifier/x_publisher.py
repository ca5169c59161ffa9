"""
Publicadores (sindicação) de notícias.

- SimulatedXPublisher: simula o post no X com um atraso configurável, sempre sucesso.
- WebhookPublisher: posta um card simples em um Incoming Webhook (Teams/Slack-like).

O controlador só conhece BasePublisher.publish(item) -> bool; qualquer exceção
ou retorno False é tratado como falha de sindicação.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv

from chronos.storage.models import NewsItem
from chronos.utils.http import SESSION, TIMEOUT

load_dotenv()

X_POST_DELAY_SECONDS = float(os.getenv("X_POST_DELAY_SECONDS", "1.2"))
SYNDICATION_WEBHOOK_URL = os.getenv("SYNDICATION_WEBHOOK_URL")

logger = logging.getLogger(__name__)


class SyndicationError(Exception):
    """Falha ao publicar um item."""


class BasePublisher(ABC):
    @abstractmethod
    async def publish(self, item: NewsItem) -> bool:
        pass


class SimulatedXPublisher(BasePublisher):
    def __init__(self, delay_seconds: float = X_POST_DELAY_SECONDS) -> None:
        self.delay_seconds = delay_seconds

    async def publish(self, item: NewsItem) -> bool:
        logger.info("[X-AUTH] Posting update: %s (%s)", item.title, item.sentiment.value)
        await asyncio.sleep(self.delay_seconds)
        return True


class WebhookPublisher(BasePublisher):
    """Posta o item em um Incoming Webhook; erros HTTP viram SyndicationError."""

    def __init__(self, webhook_url: str, session: Optional[requests.Session] = None) -> None:
        self.webhook_url = webhook_url
        self.session = session or SESSION

    @staticmethod
    def build_payload(item: NewsItem) -> Dict[str, Any]:
        lines = [f"- {s.title} <{s.url}>" for s in item.sources]
        text = f"[{item.sentiment.value.upper()}] {item.summary}"
        if lines:
            text += "\n\n" + "\n".join(lines)
        return {"title": f"{item.topic}: {item.title}", "text": text}

    def _post(self, item: NewsItem) -> None:
        resp = self.session.post(
            self.webhook_url,
            data=json.dumps(self.build_payload(item)),
            headers={"Content-Type": "application/json"},
            timeout=TIMEOUT,
        )
        resp.raise_for_status()

    async def publish(self, item: NewsItem) -> bool:
        try:
            await asyncio.to_thread(self._post, item)
        except requests.RequestException as e:
            raise SyndicationError(f"Webhook post failed: {e}") from e
        return True


def publisher_from_env() -> BasePublisher:
    """Usa o webhook se SYNDICATION_WEBHOOK_URL estiver definido, senão a simulação."""
    if SYNDICATION_WEBHOOK_URL:
        return WebhookPublisher(SYNDICATION_WEBHOOK_URL)
    return SimulatedXPublisher()
