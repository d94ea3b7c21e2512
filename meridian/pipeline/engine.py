"""Dashboard engine: cache-first orchestration around the collaborators and view pipelines.

Flow per run:
  1. News    : cache → GeminiProvider.fetch_news → previous cache on empty fetch
  2. Strategy: generated from every fresh non-empty news batch, then cached
  3. Trends  : cache → GeminiProvider.fetch_trends → previous cache → built-in sample
  4. Views   : build_news_view / build_trend_view with the selected parameters
  5. Export  : news_view.csv and trends_view.csv under output_dir

On demand, outside the run: fact checks (check_facts) and drafts
(draft_content), optionally saved to the SavedItemLibrary.

Collaborator failures are logged and degrade to "no new data"; the engine
never raises because a fetch failed.
"""

import csv
import os
from typing import Callable, List, Optional, Tuple, TypeVar

from meridian.core.cache import SQLiteCache
from meridian.core.config import get_api_key
from meridian.core.logger import logger
from meridian.models.datatypes import (
    ContentConfig, DailyStrategy, DashboardSnapshot, NewsViewParams, RankedNewsItem,
    RawNewsItem, RawTrendItem, TrendViewParams, VerificationResult,
    ALL_CATEGORIES, ALL_SENTIMENTS, BULLISH, NEUTRAL, SORT_RANK, SORT_RECENT,
)
from meridian.pipeline.validator import (
    dump_news_batch, dump_strategy, dump_trend_batch,
    load_news_batch, load_strategy, load_trend_batch,
)
from meridian.pipeline.library import SavedItemLibrary
from meridian.pipeline.view import build_news_view, build_trend_view
from meridian.providers.gemini import GeminiProvider

CACHE_KEY_NEWS = "meridian_cache_news"
CACHE_KEY_STRATEGY = "meridian_cache_strategy"
CACHE_KEY_TRENDS = "meridian_cache_trends"

FALLBACK_TRENDS = [
    RawTrendItem(rank=1, keyword="#Bitcoin", mentions="45.2K", sentiment=BULLISH, change=23),
    RawTrendItem(rank=2, keyword="#AI", mentions="38.9K", sentiment=BULLISH, change=45),
    RawTrendItem(rank=3, keyword="$SOL", mentions="32.1K", sentiment=BULLISH, change=12),
    RawTrendItem(rank=4, keyword="LayerZero", mentions="28.4K", sentiment=NEUTRAL, change=-8),
]

_NEWS_CSV_HEADER = [
    "Id", "Title", "Source", "Category", "Age", "Freshness_Minutes",
    "Trending_Score", "Hot_Score", "SEO_Score", "Engagement",
    "Verification_Status", "Url",
]
_TRENDS_CSV_HEADER = ["Rank", "Keyword", "Mentions", "Sentiment", "Change_24h"]

T = TypeVar("T")


class DashboardEngine:
    """Loads raw collections (cache-first) and renders the ranked views.

    Args:
        config: Parsed config.yaml dict (passed in; not re-loaded internally).
        provider: Collaborator implementing news, trends and strategy. Built
            from config when not given.
        cache: String blob cache. A ``SQLiteCache`` at ``cache.db_path`` when not given.
        output_dir: Directory for CSV exports. Defaults to ``config["output_dir"]``.
    """

    def __init__(
        self,
        config: dict,
        provider: Optional[GeminiProvider] = None,
        cache: Optional[SQLiteCache] = None,
        output_dir: Optional[str] = None,
    ) -> None:
        self.config = config
        self.output_dir = output_dir or config.get("output_dir", "output")

        cache_cfg = config.get("cache") or {}
        self.cache = cache or SQLiteCache(cache_cfg.get("db_path", "output/.cache.db"))
        self.provider = provider or GeminiProvider.from_config(config, get_api_key(config))
        self.library = SavedItemLibrary(self.cache)

    # ── public ────────────────────────────────────────────────────────────────

    def load_news(self, refresh: bool = False) -> List[RawNewsItem]:
        """Return the current raw news batch.

        Serves the cached batch unless ``refresh`` is set or the cache is empty.
        A fresh non-empty batch is cached and triggers a new daily strategy.
        An empty fetch falls back to whatever was cached before.
        """
        cached = self._read_cached(CACHE_KEY_NEWS, load_news_batch)
        if cached and not refresh:
            logger.info(f"DashboardEngine: {len(cached)} news items served from cache")
            return cached

        try:
            live = self.provider.fetch_news()
        except Exception as exc:
            logger.error(f"DashboardEngine: fetch_news raised: {exc}")
            live = []

        if not live:
            logger.warning("DashboardEngine: no new news data — keeping previous state")
            return cached or []

        self.cache.set(CACHE_KEY_NEWS, dump_news_batch(live))
        self._refresh_strategy(live)
        return live

    def load_strategy(self) -> Optional[DailyStrategy]:
        """Return the cached daily strategy, if any."""
        return self._read_cached(CACHE_KEY_STRATEGY, load_strategy)

    def load_trends(self, refresh: bool = False) -> List[RawTrendItem]:
        """Return the current trend batch; the built-in sample when nothing else exists."""
        cached = self._read_cached(CACHE_KEY_TRENDS, load_trend_batch)
        if cached and not refresh:
            logger.info(f"DashboardEngine: {len(cached)} trends served from cache")
            return cached

        try:
            live = self.provider.fetch_trends()
        except Exception as exc:
            logger.error(f"DashboardEngine: fetch_trends raised: {exc}")
            live = []

        if live:
            self.cache.set(CACHE_KEY_TRENDS, dump_trend_batch(live))
            return live

        if cached:
            logger.warning("DashboardEngine: no new trend data — keeping previous state")
            return cached

        logger.warning("DashboardEngine: no trend data available — using sample trends")
        return list(FALLBACK_TRENDS)

    def news_view(self, items: List[RawNewsItem], params: NewsViewParams) -> List[RankedNewsItem]:
        view = build_news_view(items, params)
        logger.info(
            f"DashboardEngine: news view {len(view)}/{len(items)} items "
            f"(category={params.category}, search={params.search!r}, sort={params.sort_mode})"
        )
        return view

    def trend_view(self, items: List[RawTrendItem], params: TrendViewParams) -> List[RawTrendItem]:
        view = build_trend_view(items, params)
        logger.info(
            f"DashboardEngine: trend view {len(view)}/{len(items)} items "
            f"(sentiment={params.sentiment}, sort={params.sort_mode})"
        )
        return view

    def run(
        self,
        news_params: NewsViewParams,
        trend_params: TrendViewParams,
        refresh: bool = False,
    ) -> DashboardSnapshot:
        """Load both collections, render both views and export them to CSV.

        Returns:
            :class:`DashboardSnapshot` with the rendered views and the briefing.
        """
        news = self.load_news(refresh=refresh)
        trends = self.load_trends(refresh=refresh)

        snapshot = DashboardSnapshot(
            news=self.news_view(news, news_params),
            trends=self.trend_view(trends, trend_params),
            strategy=self.load_strategy(),
        )

        self._write_news_csv(snapshot.news)
        self._write_trends_csv(snapshot.trends)
        return snapshot

    def check_facts(
        self,
        text: str,
        source: Optional[str] = None,
        save: bool = False,
    ) -> VerificationResult:
        """Fact-check ``text`` and, when ``save`` is set, keep the report in the library."""
        result = self.provider.fact_check(text, source)
        logger.info(
            f"DashboardEngine: fact check scored {result.score:.0f} ({result.status})"
        )
        if save:
            self.library.save_report(text, result)
        return result

    def draft_content(self, config: ContentConfig, save: bool = False) -> str:
        """Generate a draft for ``config`` and, when ``save`` is set, keep it in the library."""
        text = self.provider.generate_content(config)
        logger.info(f"DashboardEngine: drafted {len(text)} characters on {config.topic!r}")
        if save:
            self.library.save_content(config, text)
        return text

    # ── internal ──────────────────────────────────────────────────────────────

    def _read_cached(self, key: str, loader: Callable[[Optional[str]], Optional[T]]) -> Optional[T]:
        """Read and decode one cache entry; unparsable blobs count as a miss."""
        blob = self.cache.get(key)
        if blob is None:
            return None
        decoded = loader(blob)
        if decoded is None:
            logger.warning(f"DashboardEngine: discarding unparsable cache entry {key}")
        return decoded

    def _refresh_strategy(self, news: List[RawNewsItem]) -> None:
        try:
            strategy = self.provider.generate_strategy(news)
        except Exception as exc:
            logger.error(f"DashboardEngine: generate_strategy raised: {exc}")
            return
        if strategy is not None:
            self.cache.set(CACHE_KEY_STRATEGY, dump_strategy(strategy))

    def _write_news_csv(self, rows: List[RankedNewsItem]) -> None:
        """Write the news view to output/news_view.csv (overwrites each run)."""
        os.makedirs(self.output_dir, exist_ok=True)
        path = os.path.join(self.output_dir, "news_view.csv")
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=_NEWS_CSV_HEADER)
            writer.writeheader()
            for row in rows:
                item = row.item
                writer.writerow({
                    "Id": item.id,
                    "Title": item.title,
                    "Source": item.source,
                    "Category": item.category,
                    "Age": row.relative_label,
                    "Freshness_Minutes": row.freshness_minutes,
                    "Trending_Score": (
                        item.trending_score
                        if item.trending_score is not None else ""
                    ),
                    "Hot_Score": round(row.hot_score, 1),
                    "SEO_Score": row.seo_score,
                    "Engagement": item.engagement,
                    "Verification_Status": item.verification_status,
                    "Url": item.url or "",
                })
        logger.info(f"DashboardEngine: wrote {len(rows)} news rows to {path}")

    def _write_trends_csv(self, rows: List[RawTrendItem]) -> None:
        """Write the trend view to output/trends_view.csv (overwrites each run)."""
        os.makedirs(self.output_dir, exist_ok=True)
        path = os.path.join(self.output_dir, "trends_view.csv")
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=_TRENDS_CSV_HEADER)
            writer.writeheader()
            for row in rows:
                writer.writerow({
                    "Rank": row.rank,
                    "Keyword": row.keyword,
                    "Mentions": row.mentions,
                    "Sentiment": row.sentiment,
                    "Change_24h": row.change,
                })
        logger.info(f"DashboardEngine: wrote {len(rows)} trend rows to {path}")


# ── helpers ───────────────────────────────────────────────────────────────────

def view_params_from_config(config: dict) -> Tuple[NewsViewParams, TrendViewParams]:
    """Read the ``view`` section of config.yaml into view parameter objects."""
    view_cfg = config.get("view") or {}
    news_cfg = view_cfg.get("news") or {}
    trends_cfg = view_cfg.get("trends") or {}
    news_params = NewsViewParams(
        search=str(news_cfg.get("search") or ""),
        category=str(news_cfg.get("category") or ALL_CATEGORIES),
        sort_mode=str(news_cfg.get("sort") or SORT_RECENT).upper(),
    )
    trend_params = TrendViewParams(
        sentiment=str(trends_cfg.get("sentiment") or ALL_SENTIMENTS),
        sort_mode=str(trends_cfg.get("sort") or SORT_RANK).upper(),
    )
    return news_params, trend_params
