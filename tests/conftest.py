"""Shared test fixtures for Voight-Kampff tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from voight_kampff.config import ScoringConfig
from voight_kampff.models import AccountProfile, ActivityEvent, EventType

_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
_UNSET: Any = object()


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation instant shared by every test."""
    return _NOW


@pytest.fixture
def make_event(now: datetime) -> Callable[..., ActivityEvent]:
    """Factory for ActivityEvents; pass ``at=None`` for a missing timestamp."""

    def _make(
        type: EventType = EventType.PUSH,
        at: datetime | None = _UNSET,
        repo: str | None = "someone/project",
    ) -> ActivityEvent:
        return ActivityEvent(type=type, created_at=now if at is _UNSET else at, repo=repo)

    return _make


@pytest.fixture
def make_profile(now: datetime) -> Callable[..., AccountProfile]:
    """Factory for AccountProfiles with sensible (human-looking) defaults."""

    def _make(**kwargs: Any) -> AccountProfile:
        defaults = {
            "login": "testuser",
            "created_at": now - timedelta(days=5 * 365),
            "name": "Test User",
            "bio": None,
            "public_repos": 20,
            "followers": 50,
            "following": 10,
        }
        defaults.update(kwargs)
        return AccountProfile(**defaults)

    return _make


@pytest.fixture
def config() -> ScoringConfig:
    return ScoringConfig()


@pytest.fixture
def sample_human_profile(make_profile: Callable[..., AccountProfile]) -> AccountProfile:
    return make_profile()


@pytest.fixture
def sample_new_account_profile(
    make_profile: Callable[..., AccountProfile], now: datetime
) -> AccountProfile:
    return make_profile(
        login="newuser",
        created_at=now - timedelta(days=5),
        name=None,
        bio=None,
        public_repos=0,
        followers=0,
        following=0,
    )


@pytest.fixture
def sample_github_user() -> dict:
    return {
        "login": "octocat",
        "name": "The Octocat",
        "bio": None,
        "public_repos": 8,
        "followers": 4000,
        "following": 9,
        "created_at": "2011-01-25T18:44:36Z",
    }


@pytest.fixture
def sample_github_events() -> list[dict]:
    return [
        {
            "type": "PushEvent",
            "created_at": "2025-05-30T10:00:00Z",
            "repo": {"name": "octocat/hello-world"},
        },
        {
            "type": "PullRequestEvent",
            "created_at": "2025-05-29T09:30:00Z",
            "repo": {"name": "github/docs"},
        },
        {
            "type": "WatchEvent",
            "created_at": "2025-05-28T08:00:00Z",
            "repo": {"name": "python/cpython"},
        },
    ]
