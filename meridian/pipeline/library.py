"""Saved-item library kept as one JSON blob in the SQLite cache.

Entries are stored oldest first, in the order they were saved, and listed
newest first. A blob that cannot be decoded reads as an empty library.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Union

from meridian.core.cache import SQLiteCache
from meridian.core.logger import logger
from meridian.models.datatypes import (
    ContentConfig, SavedItem, VerificationResult,
    ALL_ITEMS, ITEM_CONTENT, ITEM_REPORT,
)
from meridian.pipeline.validator import dump_library, load_library

CACHE_KEY_LIBRARY = "meridian_library"
TITLE_LIMIT = 50


def _short_title(text: str) -> str:
    text = text or ""
    if len(text) > TITLE_LIMIT:
        return text[:TITLE_LIMIT] + "..."
    return text


class SavedItemLibrary:
    """Save, list, filter and delete generated drafts and fact-check reports."""

    def __init__(self, cache: SQLiteCache) -> None:
        self.cache = cache

    def _load(self) -> List[SavedItem]:
        blob = self.cache.get(CACHE_KEY_LIBRARY)
        items = load_library(blob)
        if items is None:
            if blob:
                logger.warning("Saved-item library blob is unreadable; treating it as empty")
            return []
        return items

    def _store(self, items: List[SavedItem]) -> None:
        self.cache.set(CACHE_KEY_LIBRARY, dump_library(items))

    def items(self) -> List[SavedItem]:
        """Every saved item, newest first."""
        return list(reversed(self._load()))

    def filter(self, kind: str = ALL_ITEMS) -> List[SavedItem]:
        """
        Saved items of one type, newest first.

        Args:
            kind (str): ``"ALL"``, ``"CONTENT"`` or ``"REPORT"`` (case-insensitive).
                        Any other value matches nothing.

        Returns:
            List[SavedItem]: The matching items.
        """
        wanted = (kind or ALL_ITEMS).upper()
        if wanted == ALL_ITEMS:
            return self.items()
        return [item for item in self.items() if item.type == wanted]

    def save(
        self,
        item_type: str,
        title: str,
        content: Union[str, VerificationResult],
        tags: Optional[List[str]] = None,
    ) -> SavedItem:
        """Append a new item with a fresh id and timestamp, and return it."""
        item = SavedItem(
            id=str(uuid.uuid4()),
            type=item_type,
            title=title,
            content=content,
            created_at=datetime.now(timezone.utc).isoformat(),
            tags=list(tags or []),
        )
        items = self._load()
        items.append(item)
        self._store(items)
        logger.info(f"Saved {item_type.lower()} '{title}' to library as {item.id}")
        return item

    def save_report(self, text: str, result: VerificationResult) -> SavedItem:
        """Save a fact-check result, titled by the checked text and tagged with its status."""
        return self.save(ITEM_REPORT, _short_title(text), result, [result.status])

    def save_content(self, config: ContentConfig, text: str) -> SavedItem:
        """Save a generated draft, titled by its topic and tagged with its style and tone."""
        tags = [t for t in (config.style, config.tone) if t]
        return self.save(ITEM_CONTENT, _short_title(config.topic), text, tags)

    def delete(self, item_id: str) -> bool:
        """Remove the item with ``item_id``. Returns False when no such item exists."""
        items = self._load()
        kept = [item for item in items if item.id != item_id]
        if len(kept) == len(items):
            logger.warning(f"No saved item with id {item_id}")
            return False
        self._store(kept)
        logger.info(f"Deleted saved item {item_id}")
        return True
