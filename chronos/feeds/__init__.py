from .gemini import GeminiNewsFeed, parse_news_response

# base também exportada para provedores alternativos/testes
from .base import BaseNewsFeed, ProviderFetchError

__all__ = ["GeminiNewsFeed", "parse_news_response", "BaseNewsFeed", "ProviderFetchError"]
