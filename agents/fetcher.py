"""
Platform Mention Fetchers
--------------------------
Collects brand mentions from Twitter/X (API v2 recent search) and Reddit
(OAuth search), one fetcher per platform.

Every fetch resolves to a usable mention list:
  cache hit → rate-limit check → credentials check → outbound call
  → normalization, and any failure on the way degrades to synthetic data
  with a human-readable explanation.

Architecture:
  PlatformFetcher.fetch(company_name) -> FetchResult
  MentionFetchAgent.run(company_name) -> FetchResult
"""

import base64
import json
import logging
import math
import time
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import requests

from agents.base import Agent
from agents.cache import ResponseCache
from agents.rate_limiter import RateLimiter, build_rate_limiters
from agents.synthetic import SyntheticDataGenerator
from config.settings import Settings, settings as default_settings
from models.schemas import FetchResult, Mention, Platform

logger = logging.getLogger(__name__)


# ─── Errors ──────────────────────────────────────────────────────────────────


class FetchErrorKind(str, Enum):
    TIMEOUT = "timeout"
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    RATE_LIMITED = "rate_limited"
    MALFORMED = "malformed"


class FetchError(Exception):
    """Tagged failure of one outbound call."""

    def __init__(
        self,
        kind: FetchErrorKind,
        status_code: Optional[int] = None,
        retry_after: Optional[int] = None,
        detail: str = "",
    ):
        self.kind = kind
        self.status_code = status_code
        self.retry_after = retry_after
        self.detail = detail
        super().__init__(f"{kind.value}: {detail or status_code or ''}".rstrip(": "))


def parse_retry_after(value: Optional[str], default: int) -> int:
    if not value:
        return default
    try:
        seconds = int(value.strip())
    except ValueError:
        return default
    return seconds if seconds > 0 else default


# ─── Base Fetcher ────────────────────────────────────────────────────────────


class PlatformFetcher:
    """Shared fetch sequence; subclasses supply the platform specifics."""

    platform: Platform
    recency_label: str = ""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        cache: ResponseCache,
        generator: Optional[SyntheticDataGenerator] = None,
        session: Optional[requests.Session] = None,
        cfg: Settings = default_settings,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.rate_limiter = rate_limiter
        self.cache = cache
        self.generator = generator or SyntheticDataGenerator()
        self.session = session or requests.Session()
        self.cfg = cfg
        self._clock = clock

    @property
    def name(self) -> str:
        return self.platform.display_name

    # -- hooks ---------------------------------------------------------------

    def is_configured(self) -> bool:
        raise NotImplementedError

    def search(self, company_name: str) -> List[Mention]:
        """Issue the outbound request(s). Raises FetchError."""
        raise NotImplementedError

    def default_retry_after(self) -> int:
        raise NotImplementedError

    # -- sequence ------------------------------------------------------------

    def fetch(self, company_name: str) -> FetchResult:
        cached = self.cache.get(self.platform, company_name)
        if cached is not None:
            logger.info(
                f"Cache hit for {self.name} '{company_name}': "
                f"{len(cached.mentions)} {self.platform.content_noun}"
            )
            return FetchResult(mentions=list(cached.mentions), is_real_data=cached.is_real_data)

        decision = self.rate_limiter.check()
        if not decision.allowed:
            logger.warning(
                f"{self.name} rate limit active, retry after {decision.retry_after_seconds}s"
            )
            return self._fallback(
                company_name,
                f"Temporary {self.name} API limit reached. "
                f"Try again in {decision.retry_after_seconds} seconds.",
                cache=False,
            )

        if not self.is_configured():
            logger.info(f"{self.name} credentials not configured, using simulated data")
            return self._fallback(
                company_name,
                f"{self.name} API configuration not found. Using simulated data.",
            )

        try:
            mentions = self.search(company_name)
        except FetchError as e:
            if e.kind is FetchErrorKind.RATE_LIMITED:
                self.rate_limiter.arm_retry_after(e.retry_after)
            logger.warning(f"{self.name} fetch failed ({e}), falling back to simulated data")
            return self._fallback(company_name, self.describe_error(e))
        except Exception as e:
            logger.error(f"Unexpected {self.name} fetch failure: {e}", exc_info=True)
            return self._fallback(company_name, f"Connection error with the {self.name} API")

        if not mentions:
            logger.info(f"No {self.platform.content_noun} found on {self.name} for '{company_name}'")
            return self._fallback(company_name, self.empty_message())

        logger.info(f"Found {len(mentions)} real {self.platform.content_noun} on {self.name}")
        self.cache.put(self.platform, company_name, mentions, is_real_data=True)
        return FetchResult(mentions=mentions, is_real_data=True)

    def _fallback(self, company_name: str, message: str, cache: bool = True) -> FetchResult:
        mentions = self.generator.generate(company_name, self.platform)
        if cache:
            self.cache.put(self.platform, company_name, mentions, is_real_data=False)
        return FetchResult(mentions=mentions, is_real_data=False, error_message=message)

    def empty_message(self) -> str:
        return (
            f"No {self.platform.content_noun} found on {self.name} in the "
            f"{self.recency_label}. Showing simulated data."
        )

    def describe_error(self, error: FetchError) -> str:
        if error.kind is FetchErrorKind.RATE_LIMITED:
            minutes = math.ceil(error.retry_after / 60)
            return f"{self.name} API limit reached. Try again in {minutes} minutes."
        if error.kind is FetchErrorKind.HTTP_STATUS:
            code = error.status_code or 0
            if code == 401:
                return "Invalid or expired access token"
            if code == 403:
                return f"Access denied by the {self.name} API"
            if code >= 500:
                return f"{self.name} service temporarily unavailable"
            return f"{self.name} API error"
        if error.kind is FetchErrorKind.TIMEOUT:
            return f"Timeout connecting to {self.name}. Please try again."
        if error.kind is FetchErrorKind.NETWORK:
            return "Network error. Check your connection."
        return f"Connection error with the {self.name} API"

    # -- HTTP ----------------------------------------------------------------

    def _request(self, method: str, url: str, **kwargs) -> bytes:
        """
        One call bounded by a total deadline of REQUEST_TIMEOUT seconds.

        requests' own `timeout` only bounds connect and each socket read, so
        the body is streamed and checked against the deadline chunk by chunk.
        Returns the raw body; failures are translated to FetchError.
        """
        deadline = self._clock() + self.cfg.REQUEST_TIMEOUT
        try:
            resp = self.session.request(
                method, url, timeout=self.cfg.REQUEST_TIMEOUT, stream=True, **kwargs
            )
            try:
                self._check_deadline(deadline)
                self._raise_for_status(resp)
                chunks = []
                for chunk in resp.iter_content(chunk_size=8192):
                    chunks.append(chunk)
                    self._check_deadline(deadline)
                return b"".join(chunks)
            finally:
                resp.close()
        except requests.Timeout as e:
            raise FetchError(FetchErrorKind.TIMEOUT, detail=str(e)) from e
        except requests.RequestException as e:
            raise FetchError(FetchErrorKind.NETWORK, detail=str(e)) from e

    def _check_deadline(self, deadline: float) -> None:
        if self._clock() > deadline:
            raise FetchError(
                FetchErrorKind.TIMEOUT,
                detail=f"no complete response within {self.cfg.REQUEST_TIMEOUT}s",
            )

    def _raise_for_status(self, resp: requests.Response) -> None:
        if resp.status_code == 429:
            retry_after = parse_retry_after(
                resp.headers.get("retry-after"), self.default_retry_after()
            )
            raise FetchError(FetchErrorKind.RATE_LIMITED, status_code=429, retry_after=retry_after)
        if not 200 <= resp.status_code < 300:
            raise FetchError(FetchErrorKind.HTTP_STATUS, status_code=resp.status_code)

    @staticmethod
    def _json(body: bytes) -> Dict[str, Any]:
        try:
            payload = json.loads(body)
        except ValueError as e:
            raise FetchError(FetchErrorKind.MALFORMED, detail="invalid JSON body") from e
        if not isinstance(payload, dict):
            raise FetchError(FetchErrorKind.MALFORMED, detail="unexpected JSON shape")
        return payload


# ─── Twitter / X ─────────────────────────────────────────────────────────────


class TwitterFetcher(PlatformFetcher):
    """Twitter API v2 recent search, bearer-token auth."""

    platform = Platform.TWITTER

    @property
    def recency_label(self) -> str:
        return f"last {self.cfg.TWITTER_SEARCH_WINDOW_HOURS} hours"

    def is_configured(self) -> bool:
        return bool(self.cfg.TWITTER_BEARER_TOKEN)

    def default_retry_after(self) -> int:
        return self.cfg.TWITTER_DEFAULT_RETRY_AFTER

    def build_query(self, company_name: str) -> str:
        return (
            f"{company_name} lang:{self.cfg.TWITTER_LANGUAGE} "
            f"-is:retweet place_country:{self.cfg.TWITTER_COUNTRY}"
        )

    def search(self, company_name: str) -> List[Mention]:
        start_time = datetime.now(timezone.utc) - timedelta(
            hours=self.cfg.TWITTER_SEARCH_WINDOW_HOURS
        )
        params = {
            "query": self.build_query(company_name),
            "max_results": str(self.cfg.TWITTER_MAX_RESULTS),
            "start_time": start_time.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
            "tweet.fields": "created_at,public_metrics,author_id",
            "user.fields": "username,name",
            "expansions": "author_id",
        }
        headers = {
            "Authorization": f"Bearer {self.cfg.TWITTER_BEARER_TOKEN}",
            "Content-Type": "application/json",
        }

        self.rate_limiter.consume()
        body = self._request("GET", self.cfg.TWITTER_SEARCH_URL, params=params, headers=headers)
        payload = self._json(body)

        tweets = payload.get("data") or []
        users = {
            u.get("id"): u
            for u in (payload.get("includes") or {}).get("users", [])
        }
        try:
            return [self.parse_tweet(t, users, i) for i, t in enumerate(tweets)]
        except (KeyError, TypeError, ValueError) as e:
            raise FetchError(FetchErrorKind.MALFORMED, detail=f"bad tweet record: {e}") from e

    @staticmethod
    def parse_tweet(tweet: Dict[str, Any], users: Dict[str, Any], index: int) -> Mention:
        metrics = tweet.get("public_metrics") or {}
        user = users.get(tweet.get("author_id")) or {}
        return Mention(
            id=f"real_{tweet['id']}",
            content=tweet["text"],
            author=user.get("username") or f"user_{index}",
            likes=int(metrics.get("like_count", 0)),
            retweets=int(metrics.get("retweet_count", 0)),
            replies=int(metrics.get("reply_count", 0)),
            created_at=parse_timestamp(tweet.get("created_at")),
            platform=Platform.TWITTER,
        )


# ─── Reddit ──────────────────────────────────────────────────────────────────


class RedditFetcher(PlatformFetcher):
    """Reddit search via client-credentials OAuth; re-authenticates per call."""

    platform = Platform.REDDIT
    recency_label = "last 24 hours"
    CONTENT_LIMIT = 500

    def is_configured(self) -> bool:
        return bool(self.cfg.REDDIT_CLIENT_ID and self.cfg.REDDIT_CLIENT_SECRET)

    def default_retry_after(self) -> int:
        return self.cfg.REDDIT_DEFAULT_RETRY_AFTER

    def _access_token(self) -> str:
        credentials = f"{self.cfg.REDDIT_CLIENT_ID}:{self.cfg.REDDIT_CLIENT_SECRET}"
        encoded = base64.b64encode(credentials.encode()).decode()
        body = self._request(
            "POST",
            self.cfg.REDDIT_TOKEN_URL,
            headers={
                "Authorization": f"Basic {encoded}",
                "Content-Type": "application/x-www-form-urlencoded",
                "User-Agent": self.cfg.REDDIT_USER_AGENT,
            },
            data={"grant_type": "client_credentials"},
        )
        token = self._json(body).get("access_token")
        if not token:
            raise FetchError(FetchErrorKind.MALFORMED, detail="token response without access_token")
        return token

    def search(self, company_name: str) -> List[Mention]:
        token = self._access_token()

        self.rate_limiter.consume()
        body = self._request(
            "GET",
            self.cfg.REDDIT_SEARCH_URL,
            params={
                "q": company_name,
                "sort": "new",
                "limit": str(self.cfg.REDDIT_SEARCH_LIMIT),
                "t": self.cfg.REDDIT_TIME_FILTER,
                "type": "link,sr",
            },
            headers={
                "Authorization": f"Bearer {token}",
                "User-Agent": self.cfg.REDDIT_USER_AGENT,
            },
        )
        payload = self._json(body)

        children = (payload.get("data") or {}).get("children") or []
        try:
            return [self.parse_post(child["data"]) for child in children]
        except (KeyError, TypeError, ValueError) as e:
            raise FetchError(FetchErrorKind.MALFORMED, detail=f"bad post record: {e}") from e

    @classmethod
    def parse_post(cls, post: Dict[str, Any]) -> Mention:
        content = post["title"]
        if post.get("selftext"):
            content = f"{content} {post['selftext']}"
        return Mention(
            id=f"reddit_{post['id']}",
            content=content[:cls.CONTENT_LIMIT],
            author=post.get("author") or "[deleted]",
            likes=int(post.get("ups", 0)),
            retweets=0,
            replies=int(post.get("num_comments", 0)),
            created_at=datetime.fromtimestamp(
                float(post["created_utc"]), tz=timezone.utc
            ).replace(tzinfo=None),
            platform=Platform.REDDIT,
            subreddit=post.get("subreddit"),
        )


def parse_timestamp(value: Optional[str]) -> datetime:
    """ISO-8601 (with a trailing Z) → naive UTC datetime."""
    if not value:
        return datetime.utcnow()
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


# ─── Wiring ──────────────────────────────────────────────────────────────────


_FETCHER_MAP = {
    Platform.TWITTER: TwitterFetcher,
    Platform.REDDIT: RedditFetcher,
}


def build_fetchers(
    cfg: Settings = default_settings,
    cache: Optional[ResponseCache] = None,
    rate_limiters: Optional[Dict[Platform, RateLimiter]] = None,
    generator: Optional[SyntheticDataGenerator] = None,
    session: Optional[requests.Session] = None,
) -> Dict[Platform, PlatformFetcher]:
    """One fetcher per platform, sharing a single cache and HTTP session."""
    cache = cache or ResponseCache(ttl_seconds=cfg.CACHE_TTL_SECONDS)
    rate_limiters = rate_limiters or build_rate_limiters(cfg)
    generator = generator or SyntheticDataGenerator()
    session = session or requests.Session()
    return {
        platform: cls(
            rate_limiter=rate_limiters[platform],
            cache=cache,
            generator=generator,
            session=session,
            cfg=cfg,
        )
        for platform, cls in _FETCHER_MAP.items()
    }


# ─── MentionFetchAgent ───────────────────────────────────────────────────────


class MentionFetchAgent(Agent):
    """
    Agent 1: Mention Fetcher

    Input:  company name (str)
    Output: FetchResult
    """

    def __init__(self, fetcher: PlatformFetcher):
        super().__init__(name="MentionFetchAgent")
        self.fetcher = fetcher

    def run(self, company_name: str) -> FetchResult:
        result = self.fetcher.fetch(company_name)
        self.logger.info(
            f"{len(result.mentions)} {self.fetcher.platform.content_noun} for "
            f"'{company_name}' on {self.fetcher.name} (real={result.is_real_data})"
        )
        if result.error_message:
            self.logger.info(f"Fetch notice: {result.error_message}")
        return result
