"""Score synthesis for news items: freshness, heat and SEO readiness.

SEO readiness (base 40, clamped to [30, 100]):
    +20  title length in [45, 70]
    +25  summary length in [140, 320]
    +5   title mentions how / why / guide / report / update
    +5   summary mentions defi / layer 2 / regulation / funding / token
"""

import math
import re
from typing import List, Sequence

from meridian.core.parsers import format_age, normalize_age
from meridian.models.datatypes import RankedNewsItem, RawNewsItem

SEO_BASE = 40
SEO_MIN = 30
SEO_MAX = 100

TITLE_LENGTH_RANGE = (45, 70)
SUMMARY_LENGTH_RANGE = (140, 320)

_TITLE_KEYWORDS_RE = re.compile(r"\b(how|why|guide|report|update)\b", re.IGNORECASE)
_SUMMARY_KEYWORDS_RE = re.compile(r"\b(defi|layer 2|regulation|funding|token)\b", re.IGNORECASE)


def hot_score(item: RawNewsItem, index: int, batch_size: int) -> float:
    """Return the item's upstream trending score, or ``batch_size - index``.

    A missing or zero upstream score falls back to arrival order so that
    earlier items in an unranked batch run hotter than later ones.
    """
    score = item.trending_score
    if score:
        return float(score)
    return float(batch_size - index)


def seo_score(item: RawNewsItem) -> int:
    """Heuristic content-readiness score in ``[30, 100]``."""
    title_length = len(item.title)
    summary_length = len(item.summary)

    score = SEO_BASE
    if TITLE_LENGTH_RANGE[0] <= title_length <= TITLE_LENGTH_RANGE[1]:
        score += 20
    if SUMMARY_LENGTH_RANGE[0] <= summary_length <= SUMMARY_LENGTH_RANGE[1]:
        score += 25
    if _TITLE_KEYWORDS_RE.search(item.title):
        score += 5
    if _SUMMARY_KEYWORDS_RE.search(item.summary):
        score += 5

    return min(SEO_MAX, max(SEO_MIN, int(math.floor(score + 0.5))))


def rank_item(item: RawNewsItem, index: int, batch_size: int) -> RankedNewsItem:
    """Annotate one raw item; depends only on the item and its batch position."""
    minutes = normalize_age(item.time)
    return RankedNewsItem(
        item=item,
        index=index,
        freshness_minutes=minutes,
        hot_score=hot_score(item, index, batch_size),
        seo_score=seo_score(item),
        relative_label=format_age(minutes),
    )


def annotate_news(items: Sequence[RawNewsItem]) -> List[RankedNewsItem]:
    """Annotate a whole batch, preserving arrival order."""
    batch_size = len(items)
    return [rank_item(item, index, batch_size) for index, item in enumerate(items)]
