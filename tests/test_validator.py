import json

from meridian.models.datatypes import DailyStrategy
from meridian.pipeline.validator import (
    dump_news_batch, dump_strategy, load_news_batch, load_strategy, load_trend_batch,
    news_item_from_dict, parse_news_batch, parse_trend_batch, trend_item_from_dict,
    verification_from_dict,
)


def test_news_item_from_complete_dict():
    item = news_item_from_dict({
        "id": "abc",
        "title": "ETH upgrade",
        "source": "The Block",
        "time": "2 hours ago",
        "summary": "Summary.",
        "trendingScore": 8.2,
        "engagement": "12.5K",
        "verificationStatus": "Verified",
        "category": "L2",
        "url": "https://example.com/eth",
    })
    assert item.id == "abc"
    assert item.trending_score == 8.2
    assert item.verification_status == "Verified"
    assert item.url == "https://example.com/eth"


def test_news_item_defaults():
    item = news_item_from_dict({}, index=3)
    assert item.id == "news-3"
    assert item.title == ""
    assert item.trending_score is None
    assert item.verification_status == "Needs Review"
    assert item.url is None


def test_trending_score_coercion():
    assert news_item_from_dict({"trendingScore": "7.5"}).trending_score == 7.5
    assert news_item_from_dict({"trendingScore": "high"}).trending_score is None
    assert news_item_from_dict({"trendingScore": float("nan")}).trending_score is None
    assert news_item_from_dict({"trendingScore": True}).trending_score is None


def test_verification_status_variants():
    assert news_item_from_dict({"verificationStatus": "NeedsReview"}).verification_status == "Needs Review"
    assert news_item_from_dict({"verificationStatus": "risky"}).verification_status == "Risky"
    assert news_item_from_dict({"verificationStatus": "maybe"}).verification_status == "Needs Review"


def test_trend_item_defaults():
    trend = trend_item_from_dict({"rank": "x", "sentiment": "euphoric", "change": "n/a"}, index=1)
    assert trend.rank == 2
    assert trend.sentiment == "Neutral"
    assert trend.change == 0.0


def test_trend_item_coercion():
    trend = trend_item_from_dict({"rank": 3, "keyword": "$SOL", "mentions": "32.1K",
                                  "sentiment": "bearish", "change": "-5"})
    assert trend.rank == 3
    assert trend.sentiment == "Bearish"
    assert trend.change == -5.0


def test_batches_skip_non_mappings():
    assert len(parse_news_batch([{"title": "a"}, "junk", None, {"title": "b"}])) == 2
    assert parse_trend_batch(None) == []


def test_news_blob_reads_back():
    items = parse_news_batch([{"id": "1", "title": "A", "trendingScore": 5}, {"title": "B"}])
    assert load_news_batch(dump_news_batch(items)) == items


def test_unparsable_blobs_load_as_none():
    assert load_news_batch("{not json") is None
    assert load_news_batch(json.dumps({"title": "not a list"})) is None
    assert load_trend_batch("") is None
    assert load_strategy("[]") is None


def test_strategy_blob_reads_back():
    strategy = DailyStrategy(
        headline="Focus on L2", market_mood="Volatile",
        action_items=["Post thread"], focus_topics=["#L2"],
    )
    assert load_strategy(dump_strategy(strategy)) == strategy


def test_verification_from_dict_clamps_and_defaults():
    result = verification_from_dict({"score": 140, "corrections": ["fix"]})
    assert result.score == 100
    assert result.status == "Needs Review"
    assert result.analysis == "Analysis failed."
    assert result.corrections == ["fix"]
