from abc import ABC, abstractmethod
from typing import Optional

from chronos.storage.models import Coordinates, NewsItem


class ProviderFetchError(Exception):
    """Falha do provedor de conteúdo (qualquer causa)."""


class BaseNewsFeed(ABC):
    @abstractmethod
    async def fetch(self, topic: str, location: Optional[Coordinates] = None) -> NewsItem:
        pass
