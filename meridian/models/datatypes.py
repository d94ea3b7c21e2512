"""Data structures for the news and trend ranking pipelines."""

from dataclasses import dataclass, field
from typing import List, Optional, Union

VERIFIED = "Verified"
NEEDS_REVIEW = "Needs Review"
RISKY = "Risky"
VERIFICATION_STATUSES = (VERIFIED, NEEDS_REVIEW, RISKY)

BULLISH = "Bullish"
NEUTRAL = "Neutral"
BEARISH = "Bearish"
SENTIMENTS = (BULLISH, NEUTRAL, BEARISH)
MARKET_MOODS = (BULLISH, BEARISH, NEUTRAL, "Volatile")

ALL_CATEGORIES = "All"
ALL_SENTIMENTS = "ALL"

SORT_RECENT = "RECENT"
SORT_HOT = "HOT"
SORT_SEO = "SEO"
NEWS_SORT_MODES = (SORT_RECENT, SORT_HOT, SORT_SEO)

SORT_RANK = "RANK"
SORT_VOLUME = "VOLUME"
SORT_MOVE = "MOVE"
TREND_SORT_MODES = (SORT_RANK, SORT_VOLUME, SORT_MOVE)

ITEM_CONTENT = "CONTENT"
ITEM_REPORT = "REPORT"
ITEM_TYPES = (ITEM_CONTENT, ITEM_REPORT)
ALL_ITEMS = "ALL"


@dataclass(frozen=True)
class RawNewsItem:
    """
    A news item exactly as received from the AI collaborator, after boundary coercion.
    """
    id: str
    title: str
    source: str
    time: str  # free-text relative age, e.g. "2 hours ago"
    summary: str
    trending_score: Optional[float]
    engagement: str  # free-text magnitude, e.g. "12.5K"
    verification_status: str
    category: str
    url: Optional[str] = None


@dataclass(frozen=True)
class RankedNewsItem:
    """
    A raw news item plus the fields derived from it for display and ordering.

    Attributes:
        item: The untouched raw item.
        index: 0-based arrival position within its batch.
        freshness_minutes: Canonical age in minutes.
        hot_score: Upstream trending score, or a position-based fallback.
        seo_score: Content readiness heuristic in ``[30, 100]``.
        relative_label: Display label for the age (``"3h ago"``).
    """
    item: RawNewsItem
    index: int
    freshness_minutes: int
    hot_score: float
    seo_score: int
    relative_label: str


@dataclass(frozen=True)
class RawTrendItem:
    """
    A trending keyword with its mention volume and 24h move.
    """
    rank: int
    keyword: str
    mentions: str  # free-text magnitude, e.g. "45.2K"
    sentiment: str
    change: float  # signed 24h percentage change


@dataclass(frozen=True)
class NewsViewParams:
    """User-selected projection over the news collection."""
    search: str = ""
    category: str = ALL_CATEGORIES
    sort_mode: str = SORT_RECENT


@dataclass(frozen=True)
class TrendViewParams:
    """User-selected projection over the trend collection."""
    sentiment: str = ALL_SENTIMENTS
    sort_mode: str = SORT_RANK


@dataclass
class DailyStrategy:
    """
    Executive briefing folded from a news batch by the AI collaborator.
    """
    headline: str
    market_mood: str = NEUTRAL
    action_items: List[str] = field(default_factory=list)
    focus_topics: List[str] = field(default_factory=list)


@dataclass
class VerificationResult:
    """
    Outcome of a fact-check / compliance review of a piece of text.
    """
    score: float
    status: str
    analysis: str
    corrections: List[str] = field(default_factory=list)


@dataclass
class ContentConfig:
    """Brief for a generated draft (topic plus optional style hints)."""
    topic: str
    style: str = ""
    tone: str = ""
    format: str = ""
    key_points: str = ""


@dataclass
class SavedItem:
    """
    An entry in the saved-item library.

    Attributes:
        id: Unique identifier.
        type: ``"CONTENT"`` for a generated draft, ``"REPORT"`` for a fact check.
        title: Short display title.
        content: Draft text, or the fact-check result for reports.
        created_at: ISO-8601 timestamp.
        tags: Free-form labels (style, tone, verification status).
    """
    id: str
    type: str
    title: str
    content: Union[str, VerificationResult]
    created_at: str
    tags: List[str] = field(default_factory=list)


@dataclass
class DashboardSnapshot:
    """
    One rendered state of the dashboard: both views plus the latest briefing.
    """
    news: List[RankedNewsItem]
    trends: List[RawTrendItem]
    strategy: Optional[DailyStrategy] = None
