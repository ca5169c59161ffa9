import logging
from datetime import datetime
from typing import List, Optional

from chronos.utils.tz_utils import clock_str

MAX_LOG_ENTRIES = 15

logger = logging.getLogger(__name__)


class AuditLog:
    """Log visível ao usuário: '[HH:MM:SS] msg', mais recente primeiro, limitado."""

    def __init__(self, max_entries: int = MAX_LOG_ENTRIES):
        self.max_entries = max_entries
        self._entries: List[str] = []

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, message: str, when: Optional[datetime] = None) -> str:
        entry = f"[{clock_str(when)}] {message}"
        self._entries.insert(0, entry)
        del self._entries[self.max_entries:]
        logger.info("audit: %s", message)
        return entry

    def entries(self) -> List[str]:
        return list(self._entries)

    def contains(self, fragment: str) -> bool:
        return any(fragment in e for e in self._entries)
