import csv

from meridian.core.cache import SQLiteCache
from meridian.models.datatypes import (
    ContentConfig, DailyStrategy, NewsViewParams, RawNewsItem, RawTrendItem,
    TrendViewParams, VerificationResult,
)
from meridian.pipeline.engine import (
    CACHE_KEY_NEWS, CACHE_KEY_STRATEGY, CACHE_KEY_TRENDS, FALLBACK_TRENDS,
    DashboardEngine, view_params_from_config,
)
from meridian.pipeline.validator import dump_news_batch, dump_trend_batch


def make_item(item_id, title="Headline", time="1 hour ago", score=None):
    return RawNewsItem(
        id=item_id, title=title, source="CoinDesk", time=time, summary="Summary",
        trending_score=score, engagement="1K", verification_status="Verified",
        category="DeFi",
    )


class FakeProvider:
    def __init__(self, news=None, trends=None, strategy=None, fail=False):
        self.news = news or []
        self.trends = trends or []
        self.strategy = strategy
        self.fail = fail
        self.news_calls = 0
        self.trend_calls = 0
        self.strategy_calls = 0

    def fetch_news(self):
        self.news_calls += 1
        if self.fail:
            raise RuntimeError("collaborator down")
        return list(self.news)

    def fetch_trends(self):
        self.trend_calls += 1
        if self.fail:
            raise RuntimeError("collaborator down")
        return list(self.trends)

    def generate_strategy(self, news):
        self.strategy_calls += 1
        return self.strategy

    def fact_check(self, text, source=None):
        self.checked = (text, source)
        return VerificationResult(score=55, status="Risky", analysis="Unsourced.", corrections=["cite it"])

    def generate_content(self, config):
        return f"Draft about {config.topic}"


def make_engine(tmp_path, provider):
    cache = SQLiteCache(str(tmp_path / "cache.db"))
    config = {"output_dir": str(tmp_path / "out")}
    return DashboardEngine(config, provider=provider, cache=cache), cache


def test_load_news_fetches_and_caches(tmp_path):
    strategy = DailyStrategy(headline="Go DeFi", action_items=["x"])
    provider = FakeProvider(news=[make_item("a"), make_item("b")], strategy=strategy)
    engine, cache = make_engine(tmp_path, provider)

    first = engine.load_news()
    second = engine.load_news()

    assert [i.id for i in first] == ["a", "b"]
    assert second == first
    assert provider.news_calls == 1
    assert provider.strategy_calls == 1
    assert cache.get(CACHE_KEY_NEWS) is not None
    assert cache.get(CACHE_KEY_STRATEGY) is not None
    assert engine.load_strategy() == strategy


def test_refresh_with_empty_fetch_keeps_previous(tmp_path):
    provider = FakeProvider(news=[])
    engine, cache = make_engine(tmp_path, provider)
    cache.set(CACHE_KEY_NEWS, dump_news_batch([make_item("old")]))

    items = engine.load_news(refresh=True)

    assert [i.id for i in items] == ["old"]
    assert provider.news_calls == 1
    assert provider.strategy_calls == 0


def test_unparsable_cache_is_discarded(tmp_path):
    provider = FakeProvider(news=[make_item("fresh")])
    engine, cache = make_engine(tmp_path, provider)
    cache.set(CACHE_KEY_NEWS, "{broken")

    items = engine.load_news()

    assert [i.id for i in items] == ["fresh"]


def test_collaborator_exception_degrades_to_empty(tmp_path):
    engine, _ = make_engine(tmp_path, FakeProvider(fail=True))
    assert engine.load_news() == []


def test_trends_fall_back_to_sample(tmp_path):
    engine, _ = make_engine(tmp_path, FakeProvider(fail=True))
    assert engine.load_trends() == FALLBACK_TRENDS


def test_trends_prefer_previous_cache_over_sample(tmp_path):
    engine, cache = make_engine(tmp_path, FakeProvider(trends=[]))
    cached = [RawTrendItem(rank=1, keyword="#ETH", mentions="10K", sentiment="Neutral", change=1.0)]
    cache.set(CACHE_KEY_TRENDS, dump_trend_batch(cached))

    assert engine.load_trends(refresh=True) == cached


def test_run_renders_views_and_writes_csv(tmp_path):
    provider = FakeProvider(
        news=[make_item("slow", time="2 days ago", score=9), make_item("fast", time="5 min ago", score=3)],
        trends=list(FALLBACK_TRENDS),
        strategy=DailyStrategy(headline="Stay nimble"),
    )
    engine, _ = make_engine(tmp_path, provider)

    snapshot = engine.run(NewsViewParams(sort_mode="HOT"), TrendViewParams(sort_mode="MOVE"))

    assert [r.item.id for r in snapshot.news] == ["slow", "fast"]
    assert [t.keyword for t in snapshot.trends] == ["#AI", "#Bitcoin", "$SOL", "LayerZero"]
    assert snapshot.strategy.headline == "Stay nimble"

    with open(tmp_path / "out" / "news_view.csv", encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["Id"] for r in rows] == ["slow", "fast"]
    assert rows[1]["Age"] == "5m ago"

    with open(tmp_path / "out" / "trends_view.csv", encoding="utf-8", newline="") as f:
        assert len(list(csv.DictReader(f))) == 4


def test_view_params_from_config():
    news, trends = view_params_from_config({
        "view": {"news": {"search": "eth", "category": "L2", "sort": "seo"},
                 "trends": {"sentiment": "Bearish", "sort": "volume"}},
    })
    assert news == NewsViewParams(search="eth", category="L2", sort_mode="SEO")
    assert trends == TrendViewParams(sentiment="Bearish", sort_mode="VOLUME")


def test_view_params_defaults():
    assert view_params_from_config({}) == (NewsViewParams(), TrendViewParams())


def test_check_facts_without_save(tmp_path):
    provider = FakeProvider()
    engine, _ = make_engine(tmp_path, provider)

    result = engine.check_facts("ETH flips BTC", source="example.com")

    assert result.status == "Risky"
    assert provider.checked == ("ETH flips BTC", "example.com")
    assert engine.library.items() == []


def test_check_facts_saves_report(tmp_path):
    engine, _ = make_engine(tmp_path, FakeProvider())

    engine.check_facts("ETH flips BTC", save=True)

    saved = engine.library.items()
    assert [(i.type, i.title, i.tags) for i in saved] == [("REPORT", "ETH flips BTC", ["Risky"])]
    assert saved[0].content.corrections == ["cite it"]


def test_draft_content_saves_draft(tmp_path):
    engine, _ = make_engine(tmp_path, FakeProvider())

    text = engine.draft_content(ContentConfig(topic="L2 fees", tone="Bullish"), save=True)

    assert text == "Draft about L2 fees"
    saved = engine.library.filter("CONTENT")
    assert [(i.title, i.content, i.tags) for i in saved] == [("L2 fees", text, ["Bullish"])]
