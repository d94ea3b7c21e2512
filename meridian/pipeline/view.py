"""View pipelines (Normalize → Annotate → Filter → Sort) for news and trends.

News sort modes:
  RECENT: freshest first
  HOT   : highest hot score first, ties → freshest first
  SEO   : highest SEO score first, ties → freshest first

Trend sort modes:
  RANK  : declared rank ascending
  VOLUME: parsed mention volume descending, ties → lower rank first
  MOVE  : absolute 24h change descending, ties → lower rank first

All sorts are stable and every function returns a new list; inputs are
never mutated. An unknown sort mode degrades to the default with a warning.
"""

from typing import Callable, Dict, List, Sequence

from meridian.core.logger import logger
from meridian.core.parsers import parse_magnitude
from meridian.models.datatypes import (
    NewsViewParams, RankedNewsItem, RawNewsItem, RawTrendItem, TrendViewParams,
    ALL_CATEGORIES, ALL_SENTIMENTS,
    SORT_HOT, SORT_MOVE, SORT_RANK, SORT_RECENT, SORT_SEO, SORT_VOLUME,
)
from meridian.pipeline.scoring import annotate_news

_NEWS_SORT_KEYS: Dict[str, Callable[[RankedNewsItem], tuple]] = {
    SORT_RECENT: lambda r: (r.freshness_minutes,),
    SORT_HOT: lambda r: (-r.hot_score, r.freshness_minutes),
    SORT_SEO: lambda r: (-r.seo_score, r.freshness_minutes),
}

_TREND_SORT_KEYS: Dict[str, Callable[[RawTrendItem], tuple]] = {
    SORT_RANK: lambda t: (t.rank,),
    SORT_VOLUME: lambda t: (-parse_magnitude(t.mentions), t.rank),
    SORT_MOVE: lambda t: (-abs(t.change), t.rank),
}


# ── news ──────────────────────────────────────────────────────────────────────

def matches_news(ranked: RankedNewsItem, category: str, search: str) -> bool:
    """Category equality (unless "All") AND case-insensitive title/summary search."""
    item = ranked.item
    if category != ALL_CATEGORIES and item.category != category:
        return False
    if not search:
        return True
    term = search.lower()
    return term in item.title.lower() or term in item.summary.lower()


def filter_news(
    ranked: Sequence[RankedNewsItem],
    category: str = ALL_CATEGORIES,
    search: str = "",
) -> List[RankedNewsItem]:
    return [r for r in ranked if matches_news(r, category, search)]


def sort_news(ranked: Sequence[RankedNewsItem], sort_mode: str = SORT_RECENT) -> List[RankedNewsItem]:
    """Stable sort by ``sort_mode``; see module docstring for the orderings."""
    key = _NEWS_SORT_KEYS.get(sort_mode)
    if key is None:
        logger.warning(f"sort_news: unknown sort mode {sort_mode!r} — using {SORT_RECENT}")
        key = _NEWS_SORT_KEYS[SORT_RECENT]
    return sorted(ranked, key=key)


def build_news_view(items: Sequence[RawNewsItem], params: NewsViewParams) -> List[RankedNewsItem]:
    """Annotate, filter and sort a raw news batch for display.

    Args:
        items: Raw batch in arrival order.
        params: Search term, category and sort mode.

    Returns:
        List[RankedNewsItem]: New, filtered and ordered list.
    """
    ranked = annotate_news(items)
    visible = filter_news(ranked, params.category, params.search)
    return sort_news(visible, params.sort_mode)


# ── trends ────────────────────────────────────────────────────────────────────

def filter_trends(items: Sequence[RawTrendItem], sentiment: str = ALL_SENTIMENTS) -> List[RawTrendItem]:
    if not sentiment or sentiment.upper() == ALL_SENTIMENTS:
        return list(items)
    return [t for t in items if t.sentiment == sentiment]


def sort_trends(items: Sequence[RawTrendItem], sort_mode: str = SORT_RANK) -> List[RawTrendItem]:
    key = _TREND_SORT_KEYS.get(sort_mode)
    if key is None:
        logger.warning(f"sort_trends: unknown sort mode {sort_mode!r} — using {SORT_RANK}")
        key = _TREND_SORT_KEYS[SORT_RANK]
    return sorted(items, key=key)


def build_trend_view(items: Sequence[RawTrendItem], params: TrendViewParams) -> List[RawTrendItem]:
    """Filter by sentiment, then sort by the selected mode."""
    return sort_trends(filter_trends(items, params.sentiment), params.sort_mode)
