"""Boundary validator that coerces loosely-typed collaborator payloads into dataclasses.

Per-field rules (never raise, always default):
  News:   id → "news-<index>" | strings → "" | trendingScore → None when not a
          finite number | verificationStatus → "Needs Review" when unknown |
          url → None when empty
  Trends: rank → index + 1 when not a positive int | sentiment → "Neutral"
          when unknown | change → 0.0 when not a finite number

Also (de)serializes raw batches for the blob cache using the collaborator's
camelCase keys, so a cached batch reads back exactly like a fresh one.
Unparsable blobs load as ``None`` and are discarded by the caller.
"""

import json
import math
from dataclasses import asdict
from typing import Any, Iterable, List, Mapping, Optional

from meridian.models.datatypes import (
    DailyStrategy, RawNewsItem, RawTrendItem, SavedItem, VerificationResult,
    ITEM_REPORT, ITEM_TYPES, MARKET_MOODS, NEEDS_REVIEW, NEUTRAL,
    SENTIMENTS, VERIFICATION_STATUSES,
)

_STATUS_LOOKUP = {
    status.replace(" ", "").lower(): status for status in VERIFICATION_STATUSES
}
_SENTIMENT_LOOKUP = {s.lower(): s for s in SENTIMENTS}
_MOOD_LOOKUP = {m.lower(): m for m in MARKET_MOODS}


# ── field coercion ────────────────────────────────────────────────────────────

def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_finite_float(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None. Booleans are rejected."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _as_status(value: Any) -> str:
    key = _as_text(value).replace(" ", "").replace("_", "").lower()
    return _STATUS_LOOKUP.get(key, NEEDS_REVIEW)


def _as_sentiment(value: Any) -> str:
    return _SENTIMENT_LOOKUP.get(_as_text(value).strip().lower(), NEUTRAL)


def _as_rank(value: Any, index: int) -> int:
    number = _as_finite_float(value)
    if number is None or number < 1 or number != int(number):
        return index + 1
    return int(number)


def _as_text_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(v) for v in value if v is not None]


# ── news ──────────────────────────────────────────────────────────────────────

def news_item_from_dict(data: Mapping[str, Any], index: int = 0) -> RawNewsItem:
    """Build a ``RawNewsItem`` from a collaborator dict.

    Args:
        data: One decoded JSON object (camelCase keys).
        index: Position in the batch, used for the generated id fallback.

    Returns:
        RawNewsItem: Always succeeds; missing fields take their defaults.
    """
    item_id = _as_text(data.get("id")).strip()
    url = _as_text(data.get("url")).strip()
    return RawNewsItem(
        id=item_id or f"news-{index}",
        title=_as_text(data.get("title")),
        source=_as_text(data.get("source")),
        time=_as_text(data.get("time")),
        summary=_as_text(data.get("summary")),
        trending_score=_as_finite_float(data.get("trendingScore")),
        engagement=_as_text(data.get("engagement")),
        verification_status=_as_status(data.get("verificationStatus")),
        category=_as_text(data.get("category")),
        url=url or None,
    )


def news_item_to_dict(item: RawNewsItem) -> dict:
    """Inverse of :func:`news_item_from_dict` (camelCase keys)."""
    return {
        "id": item.id,
        "title": item.title,
        "source": item.source,
        "time": item.time,
        "summary": item.summary,
        "trendingScore": item.trending_score,
        "engagement": item.engagement,
        "verificationStatus": item.verification_status,
        "category": item.category,
        "url": item.url,
    }


def parse_news_batch(entries: Iterable[Any]) -> List[RawNewsItem]:
    """Coerce every mapping in ``entries``; non-mapping entries are skipped."""
    items: List[RawNewsItem] = []
    for entry in entries or []:
        if isinstance(entry, Mapping):
            items.append(news_item_from_dict(entry, len(items)))
    return items


# ── trends ────────────────────────────────────────────────────────────────────

def trend_item_from_dict(data: Mapping[str, Any], index: int = 0) -> RawTrendItem:
    """Build a ``RawTrendItem`` from a collaborator dict."""
    change = _as_finite_float(data.get("change"))
    return RawTrendItem(
        rank=_as_rank(data.get("rank"), index),
        keyword=_as_text(data.get("keyword")),
        mentions=_as_text(data.get("mentions")),
        sentiment=_as_sentiment(data.get("sentiment")),
        change=change if change is not None else 0.0,
    )


def parse_trend_batch(entries: Iterable[Any]) -> List[RawTrendItem]:
    """Coerce every mapping in ``entries``; non-mapping entries are skipped."""
    items: List[RawTrendItem] = []
    for entry in entries or []:
        if isinstance(entry, Mapping):
            items.append(trend_item_from_dict(entry, len(items)))
    return items


# ── strategy / fact check ─────────────────────────────────────────────────────

def strategy_from_dict(data: Mapping[str, Any]) -> DailyStrategy:
    mood = _MOOD_LOOKUP.get(_as_text(data.get("marketMood")).strip().lower(), NEUTRAL)
    return DailyStrategy(
        headline=_as_text(data.get("headline")),
        market_mood=mood,
        action_items=_as_text_list(data.get("actionItems")),
        focus_topics=_as_text_list(data.get("focusTopics")),
    )


def strategy_to_dict(strategy: DailyStrategy) -> dict:
    return {
        "headline": strategy.headline,
        "marketMood": strategy.market_mood,
        "actionItems": list(strategy.action_items),
        "focusTopics": list(strategy.focus_topics),
    }


def verification_from_dict(data: Mapping[str, Any]) -> VerificationResult:
    """Fact-check payload → ``VerificationResult`` (score clamped to 0-100)."""
    score = _as_finite_float(data.get("score")) or 0.0
    status_raw = data.get("status")
    return VerificationResult(
        score=min(100.0, max(0.0, score)),
        status=_as_status(status_raw) if status_raw else NEEDS_REVIEW,
        analysis=_as_text(data.get("analysis")) or "Analysis failed.",
        corrections=_as_text_list(data.get("corrections")),
    )


def verification_to_dict(result: VerificationResult) -> dict:
    return {
        "score": result.score,
        "status": result.status,
        "analysis": result.analysis,
        "corrections": list(result.corrections),
    }


# ── saved-item library ────────────────────────────────────────────────────────

def saved_item_from_dict(data: Mapping[str, Any]) -> Optional[SavedItem]:
    """Build a ``SavedItem`` from its stored dict.

    Entries without an id or with an unknown type are rejected (``None``).
    A report whose content is not an object keeps the raw text instead.
    """
    item_id = _as_text(data.get("id")).strip()
    item_type = _as_text(data.get("type")).strip().upper()
    if not item_id or item_type not in ITEM_TYPES:
        return None

    raw_content = data.get("content")
    if item_type == ITEM_REPORT and isinstance(raw_content, Mapping):
        content: Any = verification_from_dict(raw_content)
    else:
        content = _as_text(raw_content)

    return SavedItem(
        id=item_id,
        type=item_type,
        title=_as_text(data.get("title")),
        content=content,
        created_at=_as_text(data.get("createdAt")),
        tags=_as_text_list(data.get("tags")),
    )


def saved_item_to_dict(item: SavedItem) -> dict:
    content = item.content
    if isinstance(content, VerificationResult):
        content = verification_to_dict(content)
    return {
        "id": item.id,
        "type": item.type,
        "title": item.title,
        "content": content,
        "createdAt": item.created_at,
        "tags": list(item.tags),
    }


# ── cache blobs ───────────────────────────────────────────────────────────────

def _decode(blob: Optional[str], expected: type) -> Optional[Any]:
    if not blob:
        return None
    try:
        decoded = json.loads(blob)
    except (TypeError, ValueError):
        return None
    return decoded if isinstance(decoded, expected) else None


def dump_news_batch(items: List[RawNewsItem]) -> str:
    return json.dumps([news_item_to_dict(item) for item in items])


def load_news_batch(blob: Optional[str]) -> Optional[List[RawNewsItem]]:
    """Decode a cached news blob, or None when it is missing or unparsable."""
    decoded = _decode(blob, list)
    return None if decoded is None else parse_news_batch(decoded)


def dump_trend_batch(items: List[RawTrendItem]) -> str:
    return json.dumps([asdict(item) for item in items])


def load_trend_batch(blob: Optional[str]) -> Optional[List[RawTrendItem]]:
    """Decode a cached trend blob, or None when it is missing or unparsable."""
    decoded = _decode(blob, list)
    return None if decoded is None else parse_trend_batch(decoded)


def dump_strategy(strategy: DailyStrategy) -> str:
    return json.dumps(strategy_to_dict(strategy))


def load_strategy(blob: Optional[str]) -> Optional[DailyStrategy]:
    decoded = _decode(blob, dict)
    return None if decoded is None else strategy_from_dict(decoded)


def dump_library(items: List[SavedItem]) -> str:
    return json.dumps([saved_item_to_dict(item) for item in items])


def load_library(blob: Optional[str]) -> Optional[List[SavedItem]]:
    """Decode the saved-item blob; malformed entries are dropped, a malformed blob is None."""
    decoded = _decode(blob, list)
    if decoded is None:
        return None
    items: List[SavedItem] = []
    for entry in decoded:
        if isinstance(entry, Mapping):
            item = saved_item_from_dict(entry)
            if item is not None:
                items.append(item)
    return items
