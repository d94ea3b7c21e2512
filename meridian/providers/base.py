"""Abstract base classes for the dashboard's external collaborators."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from meridian.models.datatypes import DailyStrategy, RawNewsItem, RawTrendItem


class NewsProvider(ABC):
    """Abstract interface for fetching a batch of trending news items."""

    @abstractmethod
    def fetch_news(self) -> List[RawNewsItem]:
        """
        Fetch the latest news batch.

        Returns:
            List[RawNewsItem]: Items in arrival order; empty on any failure.
        """
        pass


class TrendProvider(ABC):
    """Abstract interface for fetching trending keywords."""

    @abstractmethod
    def fetch_trends(self) -> List[RawTrendItem]:
        """
        Fetch the current trending keywords.

        Returns:
            List[RawTrendItem]: Trend items; empty on any failure.
        """
        pass


class StrategyProvider(ABC):
    """Abstract interface for folding a news batch into a daily briefing."""

    @abstractmethod
    def generate_strategy(self, news: Sequence[RawNewsItem]) -> Optional[DailyStrategy]:
        """
        Summarize a news batch into a :class:`DailyStrategy`.

        Args:
            news (Sequence[RawNewsItem]): The batch to summarize.

        Returns:
            Optional[DailyStrategy]: The briefing, or None on failure.
        """
        pass
