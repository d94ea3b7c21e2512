"""Gemini generative-AI collaborator: news, trends, strategy, fact checks and drafts.

Every public method degrades instead of raising:
  fetch_news        → []    on HTTP / key / JSON failure
  fetch_trends      → []
  generate_strategy → None
  fact_check        → "Needs Review" / score 0 with the error in the analysis
  generate_content  → a fixed apology string

Transport errors, HTTP 429 and 5xx answers are retried with exponential
backoff (``with_retries``); other HTTP errors such as 400 or 401 fail at once.
"""

import json
import re
from typing import Any, List, Optional, Sequence

import requests

from meridian.core.logger import logger
from meridian.core.retry import with_retries
from meridian.models.datatypes import (
    ContentConfig, DailyStrategy, RawNewsItem, RawTrendItem, VerificationResult, NEEDS_REVIEW,
)
from meridian.pipeline.validator import (
    parse_news_batch, parse_trend_batch, strategy_from_dict, verification_from_dict,
)
from meridian.providers.base import NewsProvider, StrategyProvider, TrendProvider

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"

_FENCE_RE = re.compile(r"```json\n?|\n?```")

NEWS_PROMPT = """
Find the top 5 most important breaking news stories in Web3, Crypto, DeFi, and NFTs from the last 24 hours.

For each story, extract:
1. A catchy headline.
2. The source name (e.g., CoinDesk, The Block).
3. Relative time (e.g., "2 hours ago").
4. A brief summary (2 sentences max).
5. An estimated trending score (1.0 to 10.0) based on importance.
6. An estimated engagement number (e.g., "12.5K").
7. A category (DeFi, NFT, L2, Regulation, or Market).
8. The canonical URL for the source article.

Return the output as a strictly valid JSON array of objects.
The objects must have these keys: "id" (random string), "title", "source", "time", "summary",
"trendingScore" (number), "engagement", "verificationStatus" (one of "Verified", "Needs Review",
"Risky"), "category", "url".

Do not use markdown code blocks. Just return the JSON string.
"""

TRENDS_PROMPT = """
Identify the top 6 trending keywords, hashtags, or tickers (e.g., $BTC, #Solana, #Airdrop) in the
Crypto/Web3 space right now based on Google Search and Social signals.

For each trend, provide:
1. Rank (1-6).
2. Keyword/Hashtag.
3. Estimated mentions (e.g. "45K").
4. Sentiment ("Bullish", "Bearish", or "Neutral").
5. 24h Change percentage (number only, e.g. 15 or -5).

Return strictly as a JSON array of objects with keys: "rank", "keyword", "mentions", "sentiment", "change".
Do not use markdown.
"""

STRATEGY_PROMPT = """
As a Head of Web3 Marketing, analyze these top news stories and create a daily strategy executive brief:

News:
{news_context}

Provide a JSON response with:
1. "headline": A short, punchy strategy directive (e.g. "Focus on ETH DeFi Narratives").
2. "marketMood": "Bullish", "Bearish", "Neutral", or "Volatile".
3. "actionItems": 3 specific marketing actions to take today (short strings).
4. "focusTopics": 3 key topics/hashtags to create content around.

Return raw JSON only.
"""

FACT_CHECK_PROMPT = """
You are a Compliance Officer for a Web3 platform.
Analyze the following text for factual accuracy, potential regulatory risks (SEC violations,
financial advice), and overall safety. Use Google Search to verify claims if necessary.

Text to Analyze: "{text}"
{source_line}

Return the response in strictly valid JSON format with the following structure:
{{
  "score": number (0-100, where 100 is perfectly safe/accurate),
  "status": string ("Verified", "Needs Review", or "Risky"),
  "analysis": string (A brief summary of why it received this score),
  "corrections": array of strings (Specific suggestions to fix issues)
}}

Do not include markdown formatting in the response, just the raw JSON string.
"""

CONTENT_PROMPT = """
You are an expert Web3 Marketing Agent named Meridian.

Task: Generate content based on the following parameters:
- Topic: {topic}
- Style: {style}
- Tone: {tone}
- Format: {format}
- Key Points to Include: {key_points}

Constraint:
- Use crypto-native terminology where appropriate (e.g., alpha, wagmi, liquidity, bearish/bullish) but keep it readable.
- If the format is "Twitter Thread", separate tweets with "---".
- Ensure the content is engaging and optimized for high social media engagement.
- Do not include hashtags unless asked.
"""

CONTENT_EMPTY_FALLBACK = "Failed to generate content. Please try again."
CONTENT_ERROR_FALLBACK = (
    "Error: Unable to connect to Meridian AI Core. Please check your API key settings."
)


class GeminiAPIError(RuntimeError):
    """Non-200 answer from the Gemini API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Gemini API error HTTP {status_code}: {message}")
        self.status_code = status_code


def is_transient(exc: Exception) -> bool:
    """True for failures worth retrying: transport errors, 429 and 5xx."""
    if isinstance(exc, requests.RequestException):
        return True
    if isinstance(exc, GeminiAPIError):
        return exc.status_code == 429 or exc.status_code >= 500
    return False


class GeminiProvider(NewsProvider, TrendProvider, StrategyProvider):
    """Gemini ``generateContent`` client implementing every collaborator role.

    Args:
        api_key: Gemini API key. An empty key makes every call fail softly.
        model: Model used for news, trends and strategy.
        reasoning_model: Model used for fact checks (defaults to ``model``).
        base_url: API root.
        timeout: Per-request timeout in seconds.
        max_retries: Retry attempts after the first failed HTTP call.
        retry_delay: Initial backoff delay in seconds.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        reasoning_model: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30,
        max_retries: int = 2,
        retry_delay: float = 2,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.reasoning_model = reasoning_model or model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    @classmethod
    def from_config(cls, config: dict, api_key: str) -> "GeminiProvider":
        """Build a provider from the ``gemini`` section of config.yaml."""
        gemini_cfg = config.get("gemini") or {}
        return cls(
            api_key=api_key,
            model=gemini_cfg.get("model", DEFAULT_MODEL),
            reasoning_model=gemini_cfg.get("reasoning_model"),
            base_url=gemini_cfg.get("base_url", DEFAULT_BASE_URL),
            timeout=gemini_cfg.get("timeout_seconds", 30),
            max_retries=gemini_cfg.get("max_retries", 2),
            retry_delay=gemini_cfg.get("retry_delay_seconds", 2),
        )

    # ── public API ────────────────────────────────────────────────────────────

    def fetch_news(self) -> List[RawNewsItem]:
        """Return the latest news batch, or ``[]`` on any failure."""
        try:
            text = self._generate(
                self.model, NEWS_PROMPT, tools=[{"googleSearch": {}}],
            )
        except Exception as exc:
            logger.error(f"GeminiProvider: news request failed: {exc}")
            return []

        decoded = _decode_json(text or "[]")
        if not isinstance(decoded, list):
            logger.error(f"GeminiProvider: failed to parse news JSON: {text[:200]!r}")
            return []

        items = parse_news_batch(decoded)
        logger.info(f"GeminiProvider: {len(items)} news items received")
        return items

    def fetch_trends(self) -> List[RawTrendItem]:
        """Return the current trending keywords, or ``[]`` on any failure."""
        try:
            text = self._generate(
                self.model, TRENDS_PROMPT, tools=[{"googleSearch": {}}],
            )
        except Exception as exc:
            logger.error(f"GeminiProvider: trends request failed: {exc}")
            return []

        decoded = _decode_json(text or "[]")
        if not isinstance(decoded, list):
            logger.error(f"GeminiProvider: failed to parse trends JSON: {text[:200]!r}")
            return []

        items = parse_trend_batch(decoded)
        logger.info(f"GeminiProvider: {len(items)} trend items received")
        return items

    def generate_strategy(self, news: Sequence[RawNewsItem]) -> Optional[DailyStrategy]:
        """Fold a news batch into a daily briefing, or None on failure."""
        news_context = "\n".join(f"- {n.title} ({n.category})" for n in news)
        try:
            text = self._generate(
                self.model,
                STRATEGY_PROMPT.format(news_context=news_context),
                generation_config={"responseMimeType": "application/json"},
            )
        except Exception as exc:
            logger.error(f"GeminiProvider: strategy request failed: {exc}")
            return None

        decoded = _decode_json(text or "{}")
        if not isinstance(decoded, dict) or not decoded:
            logger.error(f"GeminiProvider: failed to parse strategy JSON: {text[:200]!r}")
            return None
        return strategy_from_dict(decoded)

    def fact_check(self, text: str, source: Optional[str] = None) -> VerificationResult:
        """Review ``text`` for accuracy and compliance risk."""
        source_line = f"Reference Sources: {source}" if source else ""
        try:
            result_text = self._generate(
                self.reasoning_model,
                FACT_CHECK_PROMPT.format(text=text, source_line=source_line),
                tools=[{"googleSearch": {}}],
            )
            decoded = json.loads(_strip_fence(result_text or "{}"))
            if not isinstance(decoded, dict):
                raise ValueError("fact check response is not a JSON object")
        except Exception as exc:
            logger.error(f"GeminiProvider: fact check failed: {exc}")
            return VerificationResult(
                score=0,
                status=NEEDS_REVIEW,
                analysis=f"System error during verification: {exc}",
                corrections=[],
            )
        return verification_from_dict(decoded)

    def generate_content(self, config: ContentConfig) -> str:
        """Draft marketing copy for ``config``.

        Returns the generated text, or one of the fixed fallback strings when
        the model answers with nothing or the request fails.
        """
        prompt = CONTENT_PROMPT.format(
            topic=config.topic,
            style=config.style,
            tone=config.tone,
            format=config.format,
            key_points=config.key_points,
        )
        try:
            text = self._generate(self.model, prompt)
        except Exception as exc:
            logger.error(f"GeminiProvider: content generation failed: {exc}")
            return CONTENT_ERROR_FALLBACK
        return text or CONTENT_EMPTY_FALLBACK

    # ── internal ──────────────────────────────────────────────────────────────

    def _generate(
        self,
        model: str,
        prompt: str,
        tools: Optional[list] = None,
        generation_config: Optional[dict] = None,
    ) -> str:
        """Send one prompt and return the concatenated candidate text.

        Raises:
            ValueError: When no API key is configured.
            GeminiAPIError: When the API answers with a non-200 status.
            requests.RequestException: On transport failure after retries.
        """
        if not self.api_key:
            raise ValueError("API key is missing. Set GEMINI_API_KEY in .env or config.yaml.")

        body: dict = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if tools:
            body["tools"] = tools
        if generation_config:
            body["generationConfig"] = generation_config

        post = with_retries(self.max_retries, self.retry_delay, retry_if=is_transient)(self._post)
        return _extract_text(post(model, body))

    def _post(self, model: str, body: dict) -> dict:
        url = f"{self.base_url}/models/{model}:generateContent"
        logger.info(f"GeminiProvider: calling {model}")
        resp = requests.post(
            url,
            params={"key": self.api_key},
            json=body,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        if resp.status_code != 200:
            raise GeminiAPIError(resp.status_code, _error_message(resp))
        return resp.json()


# ── helpers ───────────────────────────────────────────────────────────────────

def _error_message(resp: requests.Response) -> str:
    """Best-effort error message from a failed response."""
    try:
        payload = resp.json()
    except ValueError:
        return resp.reason or resp.text[:200]
    if isinstance(payload, dict):
        error = payload.get("error") or {}
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return resp.reason or ""


def _extract_text(data: Any) -> str:
    """Concatenate the text parts of the first candidate."""
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text") or "" for part in parts if isinstance(part, dict)).strip()


def _strip_fence(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def _decode_json(text: str) -> Any:
    """Decode a possibly fenced JSON string; None when it does not parse."""
    try:
        return json.loads(_strip_fence(text))
    except ValueError:
        return None
