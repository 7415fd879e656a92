"""
Fetch layer tests: rate limiter, response cache, synthetic fallback and the
Twitter / Reddit fetchers against a mocked HTTP session.
Run with: python -m pytest tests/ -v
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
import random
from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests

from agents.cache import ResponseCache, make_cache_key
from agents.fetcher import (
    FetchError, FetchErrorKind, RedditFetcher, TwitterFetcher,
    build_fetchers, parse_retry_after, parse_timestamp,
)
from agents.rate_limiter import RateLimiter
from agents.synthetic import (
    SyntheticDataGenerator, SUBREDDITS, MIN_MENTIONS, MAX_MENTIONS,
)
from config.settings import Settings
from models.schemas import Platform


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_response(status_code=200, payload=None, headers=None, chunks=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.headers = headers or {}
    if chunks is None:
        chunks = [json.dumps(payload if payload is not None else {}).encode()]
    resp.iter_content.return_value = chunks
    return resp


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cfg():
    return Settings(
        TWITTER_BEARER_TOKEN="test-token",
        REDDIT_CLIENT_ID="client-id",
        REDDIT_CLIENT_SECRET="client-secret",
    )


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def generator():
    return SyntheticDataGenerator(rng=random.Random(7))


@pytest.fixture
def twitter(cfg, session, clock, generator):
    return TwitterFetcher(
        rate_limiter=RateLimiter(180, 900, clock),
        cache=ResponseCache(900, clock),
        generator=generator,
        session=session,
        cfg=cfg,
    )


@pytest.fixture
def reddit(cfg, session, clock, generator):
    return RedditFetcher(
        rate_limiter=RateLimiter(60, 60, clock),
        cache=ResponseCache(900, clock),
        generator=generator,
        session=session,
        cfg=cfg,
    )


TWEET_PAYLOAD = {
    "data": [
        {
            "id": "1001",
            "text": "Adoro a Acme, excelente atendimento",
            "author_id": "u1",
            "created_at": "2024-05-01T12:00:00.000Z",
            "public_metrics": {"like_count": 5, "retweet_count": 2, "reply_count": 1},
        },
        {
            "id": "1002",
            "text": "Acme entrega lenta",
            "author_id": "u-missing",
            "created_at": "2024-05-01T11:30:00.000Z",
            "public_metrics": {"like_count": 0, "retweet_count": 0, "reply_count": 0},
        },
    ],
    "includes": {"users": [{"id": "u1", "username": "maria", "name": "Maria"}]},
}

REDDIT_POST = {
    "id": "p1",
    "title": "Acme is great",
    "selftext": "x" * 600,
    "author": "bob",
    "ups": 12,
    "num_comments": 4,
    "created_utc": 1714564800,
    "subreddit": "brasil",
}


# ─── Rate Limiter ────────────────────────────────────────────────────────────

class TestRateLimiter:
    def test_allows_until_window_is_full(self, clock):
        limiter = RateLimiter(2, 60, clock)
        assert limiter.check().allowed
        limiter.consume()
        limiter.consume()
        decision = limiter.check()
        assert not decision.allowed
        assert decision.retry_after_seconds == 60

    def test_window_resets_after_expiry(self, clock):
        limiter = RateLimiter(1, 60, clock)
        limiter.consume()
        clock.advance(61)
        assert limiter.check().allowed
        assert limiter.state.request_count == 0

    def test_denial_at_window_edge_is_at_least_one_second(self, clock):
        limiter = RateLimiter(1, 60, clock)
        limiter.consume()
        clock.advance(60)
        decision = limiter.check()
        assert not decision.allowed
        assert decision.retry_after_seconds == 1

    def test_denied_checks_do_not_count(self, clock):
        limiter = RateLimiter(1, 60, clock)
        limiter.consume()
        for _ in range(3):
            limiter.check()
        assert limiter.state.request_count == 1

    def test_retry_after_override(self, clock):
        limiter = RateLimiter(100, 900, clock)
        limiter.arm_retry_after(30)
        assert limiter.check().retry_after_seconds == 30
        clock.advance(10)
        decision = limiter.check()
        assert not decision.allowed
        assert decision.retry_after_seconds == 20
        clock.advance(21)
        assert limiter.check().allowed


# ─── Response Cache ──────────────────────────────────────────────────────────

class TestResponseCache:
    def test_hit_within_ttl(self, clock, generator):
        cache = ResponseCache(900, clock)
        mentions = generator.generate("Acme", Platform.TWITTER)
        cache.put(Platform.TWITTER, "Acme", mentions, is_real_data=True)
        clock.advance(899)
        entry = cache.get(Platform.TWITTER, "Acme")
        assert entry is not None
        assert entry.mentions == mentions
        assert entry.is_real_data is True

    def test_expires_at_ttl(self, clock):
        cache = ResponseCache(900, clock)
        cache.put(Platform.TWITTER, "Acme", [], is_real_data=False)
        clock.advance(900)
        assert cache.get(Platform.TWITTER, "Acme") is None

    def test_key_is_case_and_whitespace_insensitive(self, clock):
        cache = ResponseCache(900, clock)
        cache.put(Platform.REDDIT, "  Acme ", [], is_real_data=False)
        assert cache.get(Platform.REDDIT, "acme") is not None
        assert make_cache_key(Platform.REDDIT, " ACME ") == "reddit_acme"

    def test_platforms_do_not_share_entries(self, clock):
        cache = ResponseCache(900, clock)
        cache.put(Platform.TWITTER, "Acme", [], is_real_data=False)
        assert cache.get(Platform.REDDIT, "Acme") is None


# ─── Synthetic Data ──────────────────────────────────────────────────────────

class TestSyntheticDataGenerator:
    @pytest.mark.parametrize("platform", list(Platform))
    def test_count_within_bounds(self, platform):
        for seed in range(20):
            gen = SyntheticDataGenerator(rng=random.Random(seed))
            mentions = gen.generate("Acme", platform)
            assert MIN_MENTIONS <= len(mentions) <= MAX_MENTIONS

    @pytest.mark.parametrize("platform", list(Platform))
    def test_every_mention_names_the_company(self, generator, platform):
        for m in generator.generate("Acme", platform):
            assert "Acme" in m.content
            assert m.id.startswith(f"fallback_{platform.value}_")
            assert m.author.startswith("user_")
            assert m.platform == platform

    def test_templates_not_repeated_within_a_batch(self, generator):
        mentions = generator.generate("Acme", Platform.TWITTER)
        assert len({m.content for m in mentions}) == len(mentions)

    def test_reddit_has_no_reshares_and_a_subreddit(self, generator):
        for m in generator.generate("Acme", Platform.REDDIT):
            assert m.retweets == 0
            assert m.subreddit in SUBREDDITS

    def test_twitter_has_no_subreddit(self, generator):
        for m in generator.generate("Acme", Platform.TWITTER):
            assert m.subreddit is None
            assert m.likes >= 0 and m.retweets >= 0 and m.replies >= 0


# ─── Helpers ─────────────────────────────────────────────────────────────────

class TestHelpers:
    def test_parse_retry_after(self):
        assert parse_retry_after("120", 900) == 120
        assert parse_retry_after(None, 900) == 900
        assert parse_retry_after("soon", 60) == 60
        assert parse_retry_after("0", 60) == 60

    def test_parse_timestamp_to_naive_utc(self):
        assert parse_timestamp("2024-05-01T12:00:00.000Z") == datetime(2024, 5, 1, 12, 0)

    def test_build_fetchers_share_one_cache(self, cfg):
        fetchers = build_fetchers(cfg, session=MagicMock())
        assert set(fetchers) == {Platform.TWITTER, Platform.REDDIT}
        assert fetchers[Platform.TWITTER].cache is fetchers[Platform.REDDIT].cache
        assert fetchers[Platform.TWITTER].rate_limiter is not fetchers[Platform.REDDIT].rate_limiter


# ─── Twitter Fetcher ─────────────────────────────────────────────────────────

class TestTwitterFetcher:
    def test_success_maps_tweets(self, twitter, session):
        session.request.return_value = make_response(200, TWEET_PAYLOAD)
        result = twitter.fetch("Acme")

        assert result.is_real_data is True
        assert result.error_message is None
        first, second = result.mentions
        assert first.id == "real_1001"
        assert first.author == "maria"
        assert (first.likes, first.retweets, first.replies) == (5, 2, 1)
        assert first.created_at == datetime(2024, 5, 1, 12, 0)
        assert second.author == "user_1"
        assert twitter.rate_limiter.state.request_count == 1

    def test_request_shape(self, twitter, session, cfg):
        session.request.return_value = make_response(200, TWEET_PAYLOAD)
        twitter.fetch("Acme")

        args, kwargs = session.request.call_args
        assert args == ("GET", cfg.TWITTER_SEARCH_URL)
        assert kwargs["params"]["query"] == "Acme lang:pt -is:retweet place_country:BR"
        assert kwargs["params"]["max_results"] == "10"
        assert kwargs["headers"]["Authorization"] == "Bearer test-token"
        assert kwargs["timeout"] == cfg.REQUEST_TIMEOUT

    def test_second_fetch_served_from_cache(self, twitter, session):
        session.request.return_value = make_response(200, TWEET_PAYLOAD)
        twitter.fetch("Acme")
        again = twitter.fetch("  ACME ")
        assert session.request.call_count == 1
        assert again.is_real_data is True
        assert len(again.mentions) == 2

    def test_empty_result_falls_back(self, twitter, session):
        session.request.return_value = make_response(200, {"meta": {"result_count": 0}})
        result = twitter.fetch("Acme")
        assert result.is_real_data is False
        assert result.error_message == (
            "No tweets found on Twitter in the last 2 hours. Showing simulated data."
        )
        assert MIN_MENTIONS <= len(result.mentions) <= MAX_MENTIONS

    def test_429_arms_rate_limiter(self, twitter, session, clock):
        session.request.return_value = make_response(429, headers={"retry-after": "120"})
        result = twitter.fetch("Acme")

        assert result.is_real_data is False
        assert result.error_message == "Twitter API limit reached. Try again in 2 minutes."

        denied = twitter.fetch("Other")
        assert denied.is_real_data is False
        assert denied.error_message == "Temporary Twitter API limit reached. Try again in 120 seconds."
        assert session.request.call_count == 1

        clock.advance(121)
        session.request.return_value = make_response(200, TWEET_PAYLOAD)
        assert twitter.fetch("Third").is_real_data is True

    def test_429_without_header_uses_platform_default(self, twitter, session):
        session.request.return_value = make_response(429)
        result = twitter.fetch("Acme")
        assert result.error_message == "Twitter API limit reached. Try again in 15 minutes."

    @pytest.mark.parametrize("status, message", [
        (401, "Invalid or expired access token"),
        (403, "Access denied by the Twitter API"),
        (503, "Twitter service temporarily unavailable"),
        (404, "Twitter API error"),
    ])
    def test_http_errors(self, twitter, session, status, message):
        session.request.return_value = make_response(status)
        result = twitter.fetch("Acme")
        assert result.is_real_data is False
        assert result.error_message == message
        assert len(result.mentions) >= MIN_MENTIONS

    def test_timeout(self, twitter, session):
        session.request.side_effect = requests.Timeout("read timed out")
        result = twitter.fetch("Acme")
        assert result.error_message == "Timeout connecting to Twitter. Please try again."

    def test_network_error(self, twitter, session):
        session.request.side_effect = requests.ConnectionError("refused")
        result = twitter.fetch("Acme")
        assert result.error_message == "Network error. Check your connection."

    def test_malformed_json(self, twitter, session):
        session.request.return_value = make_response(200, chunks=[b"<html>not json"])
        result = twitter.fetch("Acme")
        assert result.is_real_data is False
        assert result.error_message == "Connection error with the Twitter API"

    def test_body_is_streamed_and_released(self, twitter, session):
        resp = make_response(200, chunks=[b'{"data": [], ', b'"meta": {"result_count": 0}}'])
        session.request.return_value = resp
        twitter.fetch("Acme")
        assert session.request.call_args.kwargs["stream"] is True
        resp.close.assert_called_once()

    def test_slow_trickling_body_hits_total_deadline(self, cfg, session, clock, generator):
        fetcher = TwitterFetcher(
            rate_limiter=RateLimiter(180, 900, clock),
            cache=ResponseCache(900, clock),
            generator=generator,
            session=session,
            cfg=cfg,
            clock=clock,
        )

        def trickle():
            # each chunk arrives within the per-read timeout
            for piece in (b'{"data": ', b"[], ", b'"meta": ', b"{}}"):
                clock.advance(cfg.REQUEST_TIMEOUT - 1)
                yield piece

        resp = make_response(200, chunks=trickle())
        session.request.return_value = resp

        result = fetcher.fetch("Acme")
        assert result.is_real_data is False
        assert result.error_message == "Timeout connecting to Twitter. Please try again."
        resp.close.assert_called_once()

    def test_slow_headers_hit_total_deadline(self, cfg, session, clock, generator):
        fetcher = TwitterFetcher(
            rate_limiter=RateLimiter(180, 900, clock),
            cache=ResponseCache(900, clock),
            generator=generator,
            session=session,
            cfg=cfg,
            clock=clock,
        )

        def slow_request(*args, **kwargs):
            clock.advance(cfg.REQUEST_TIMEOUT + 1)
            return make_response(200, TWEET_PAYLOAD)

        session.request.side_effect = slow_request
        result = fetcher.fetch("Acme")
        assert result.error_message == "Timeout connecting to Twitter. Please try again."

    def test_unconfigured_never_calls_out(self, session, clock, generator):
        fetcher = TwitterFetcher(
            rate_limiter=RateLimiter(180, 900, clock),
            cache=ResponseCache(900, clock),
            generator=generator,
            session=session,
            cfg=Settings(TWITTER_BEARER_TOKEN=None),
        )
        result = fetcher.fetch("Acme")
        assert result.is_real_data is False
        assert result.error_message == "Twitter API configuration not found. Using simulated data."
        session.request.assert_not_called()
        assert fetcher.fetch("acme").mentions == result.mentions

    def test_exhausted_limiter_fallback_is_not_cached(self, session, clock, generator, cfg):
        cache = ResponseCache(900, clock)
        fetcher = TwitterFetcher(
            rate_limiter=RateLimiter(0, 900, clock),
            cache=cache,
            generator=generator,
            session=session,
            cfg=cfg,
        )
        result = fetcher.fetch("Acme")
        assert result.is_real_data is False
        assert result.error_message == "Temporary Twitter API limit reached. Try again in 900 seconds."
        assert len(cache) == 0
        session.request.assert_not_called()


# ─── Reddit Fetcher ──────────────────────────────────────────────────────────

class TestRedditFetcher:
    def test_success_authenticates_then_searches(self, reddit, session, cfg):
        session.request.side_effect = [
            make_response(200, {"access_token": "abc", "token_type": "bearer"}),
            make_response(200, {"data": {"children": [{"kind": "t3", "data": REDDIT_POST}]}}),
        ]
        result = reddit.fetch("Acme")

        assert result.is_real_data is True
        post = result.mentions[0]
        assert post.id == "reddit_p1"
        assert post.content.startswith("Acme is great x")
        assert len(post.content) == 500
        assert post.retweets == 0
        assert (post.likes, post.replies) == (12, 4)
        assert post.subreddit == "brasil"
        assert post.created_at == datetime(2024, 5, 1, 12, 0)

        token_call, search_call = session.request.call_args_list
        assert token_call.args == ("POST", cfg.REDDIT_TOKEN_URL)
        assert token_call.kwargs["data"] == {"grant_type": "client_credentials"}
        assert token_call.kwargs["headers"]["Authorization"].startswith("Basic ")
        assert search_call.args == ("GET", cfg.REDDIT_SEARCH_URL)
        assert search_call.kwargs["headers"]["Authorization"] == "Bearer abc"
        assert search_call.kwargs["params"]["q"] == "Acme"
        assert search_call.kwargs["params"]["limit"] == "25"
        assert reddit.rate_limiter.state.request_count == 1

    def test_post_without_selftext_uses_title(self):
        post = dict(REDDIT_POST, selftext="")
        assert RedditFetcher.parse_post(post).content == "Acme is great"

    def test_token_failure_falls_back_without_counting(self, reddit, session):
        session.request.return_value = make_response(401)
        result = reddit.fetch("Acme")
        assert result.is_real_data is False
        assert result.error_message == "Invalid or expired access token"
        assert reddit.rate_limiter.state.request_count == 0
        assert session.request.call_count == 1

    def test_token_response_without_token(self, reddit, session):
        session.request.return_value = make_response(200, {"error": "invalid_grant"})
        result = reddit.fetch("Acme")
        assert result.error_message == "Connection error with the Reddit API"

    def test_search_429_uses_default_retry(self, reddit, session):
        session.request.side_effect = [
            make_response(200, {"access_token": "abc"}),
            make_response(429),
        ]
        result = reddit.fetch("Acme")
        assert result.error_message == "Reddit API limit reached. Try again in 1 minutes."
        decision = reddit.rate_limiter.check()
        assert not decision.allowed
        assert decision.retry_after_seconds == 60

    def test_empty_search(self, reddit, session):
        session.request.side_effect = [
            make_response(200, {"access_token": "abc"}),
            make_response(200, {"data": {"children": []}}),
        ]
        result = reddit.fetch("Acme")
        assert result.is_real_data is False
        assert result.error_message == (
            "No posts found on Reddit in the last 24 hours. Showing simulated data."
        )
        for m in result.mentions:
            assert m.retweets == 0

    def test_unconfigured(self, session, clock, generator):
        fetcher = RedditFetcher(
            rate_limiter=RateLimiter(60, 60, clock),
            cache=ResponseCache(900, clock),
            generator=generator,
            session=session,
            cfg=Settings(REDDIT_CLIENT_ID="only-id", REDDIT_CLIENT_SECRET=None),
        )
        result = fetcher.fetch("Acme")
        assert result.error_message == "Reddit API configuration not found. Using simulated data."
        session.request.assert_not_called()


class TestFetchError:
    def test_kind_and_status_preserved(self):
        err = FetchError(FetchErrorKind.HTTP_STATUS, status_code=502)
        assert err.kind is FetchErrorKind.HTTP_STATUS
        assert err.status_code == 502
