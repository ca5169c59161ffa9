from typing import List, Optional

from chronos.storage.models import NewsItem

MAX_HISTORY_ITEMS = 20


class NewsHistory:
    """
    Buffer em memória das notícias aceitas, mais recente primeiro.
    Ao passar de `max_items` a mais antiga é descartada silenciosamente.
    """

    def __init__(self, max_items: int = MAX_HISTORY_ITEMS):
        self.max_items = max_items
        self._items: List[NewsItem] = []

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: NewsItem) -> None:
        self._items.insert(0, item)
        del self._items[self.max_items:]

    def latest(self) -> Optional[NewsItem]:
        return self._items[0] if self._items else None

    def is_duplicate(self, item: NewsItem) -> bool:
        # só compara com a mais recente (título exato)
        latest = self.latest()
        return latest is not None and latest.title == item.title

    def get(self, item_id: str) -> Optional[NewsItem]:
        return next((n for n in self._items if n.id == item_id), None)

    def mark_posted(self, item_id: str) -> bool:
        item = self.get(item_id)
        if not item:
            return False
        item.mark_posted()
        return True

    def all(self) -> List[NewsItem]:
        return list(self._items)
