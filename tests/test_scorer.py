"""Tests for the scoring engine."""

from __future__ import annotations

import random
from collections.abc import Callable
from datetime import datetime, timedelta

import httpx
import pytest
import respx

from voight_kampff.config import ScoringConfig
from voight_kampff.models import (
    AccountProfile,
    ActivityEvent,
    Classification,
    EventType,
    Flag,
    ResultMetadata,
)
from voight_kampff.scorer import ReplicantScorer, evaluate, identify_replicant

EventFactory = Callable[..., ActivityEvent]
ProfileFactory = Callable[..., AccountProfile]

BASE_URL = "https://api.github.com"

# Flags that can never appear together in one result.
_EXCLUSIVE_GROUPS: list[set[str]] = [
    {"Recently created", "Young account"},
    {"Unusual follow ratio", "No followers yet"},
    {"Extreme commit burst", "High commit burst"},
    {"Very high commit rate", "High commit rate"},
    {"Extremely high PR rate", "High PR rate"},
    {"Many recent forks", "Multiple forks"},
    {"Extended daily coding", "Frequent long coding days"},
    {"Very wide contribution spread", "Wide contribution spread"},
    {"High PR volume in the past 24 hours", "High PR volume during last week"},
    {"Only active on other people's repos", "Mostly external activity"},
]


def _labels(flags: tuple[Flag, ...]) -> list[str]:
    return [f.label for f in flags]


def _assert_exclusive(flags: tuple[Flag, ...]) -> None:
    labels = set(_labels(flags))
    for group in _EXCLUSIVE_GROUPS:
        assert len(labels & group) <= 1, labels & group


@pytest.fixture
def busy_bot_events(now: datetime, make_event: EventFactory) -> list[ActivityEvent]:
    """Three marathon days of external pushes and PRs plus forks."""
    midnight = now.replace(hour=0)
    events: list[ActivityEvent] = []
    for day in range(1, 4):
        for hour in range(18):
            at = midnight - timedelta(days=day) + timedelta(hours=hour)
            events.append(make_event(EventType.PUSH, at=at, repo=f"org{hour}/lib"))
            events.append(
                make_event(
                    EventType.PULL_REQUEST,
                    at=at + timedelta(minutes=5),
                    repo=f"org{hour + day}/app",
                )
            )
    events.extend(
        make_event(EventType.FORK, at=now - timedelta(hours=i), repo=f"fork{i}/x")
        for i in range(9)
    )
    return events


@pytest.fixture
def bot_profile(make_profile: ProfileFactory, now: datetime) -> AccountProfile:
    return make_profile(
        created_at=now - timedelta(days=2),
        name=None,
        public_repos=0,
        followers=1,
        following=80,
    )


class TestScenarios:
    def test_new_account_without_identity(
        self, config: ScoringConfig, make_profile: ProfileFactory, now: datetime
    ) -> None:
        profile = make_profile(created_at=now - timedelta(days=5), name=None, bio=None)
        result = ReplicantScorer(config).evaluate(profile, [], now)

        assert [(f.label, f.points) for f in result.flags] == [
            ("Recently created", 20),
            ("Minimal profile", 15),
        ]
        assert result.score == 65
        assert result.classification == Classification.SUSPICIOUS

    def test_established_account(
        self, config: ScoringConfig, make_profile: ProfileFactory, now: datetime
    ) -> None:
        profile = make_profile(
            created_at=now - timedelta(days=5 * 365),
            name="Grace",
            followers=200,
            following=10,
        )
        result = ReplicantScorer(config).evaluate(profile, [], now)

        assert result.flags == ()
        assert result.score == 100
        assert result.classification == Classification.HUMAN

    def test_pushes_in_one_short_span(
        self,
        config: ScoringConfig,
        make_event: EventFactory,
        make_profile: ProfileFactory,
        now: datetime,
    ) -> None:
        profile = make_profile(created_at=now - timedelta(days=40))
        start = now - timedelta(hours=3)
        events = [
            make_event(EventType.PUSH, at=start + timedelta(minutes=4 * i), repo="testuser/app")
            for i in range(12)
        ]
        result = ReplicantScorer(config).evaluate(profile, events, now)

        labels = _labels(result.flags)
        # 12 pushes stay under the 50-per-hour burst bar
        assert "High commit burst" not in labels
        assert "Extreme commit burst" not in labels
        assert labels == ["Young account", "Commits too tightly spaced", "High commit rate"]
        assert result.flags[1].detail.startswith("12 commits")
        assert result.flags[2].detail == "12 commits in 1 day"
        assert result.score == 50
        assert result.classification == Classification.SUSPICIOUS

    def test_pushes_in_one_short_span_with_lower_burst_bar(
        self, make_event: EventFactory, make_profile: ProfileFactory, now: datetime
    ) -> None:
        config = ScoringConfig(hourly_burst={"high": 10, "extreme": 12})
        profile = make_profile(created_at=now - timedelta(days=40))
        start = now - timedelta(hours=3)
        events = [
            make_event(EventType.PUSH, at=start + timedelta(minutes=4 * i), repo="testuser/app")
            for i in range(12)
        ]
        result = ReplicantScorer(config).evaluate(profile, events, now)
        assert "Extreme commit burst" in _labels(result.flags)
        assert result.score == 100 - 10 - 25 - 25 - 15

    def test_steady_commits_all_day(
        self,
        config: ScoringConfig,
        make_event: EventFactory,
        make_profile: ProfileFactory,
        now: datetime,
    ) -> None:
        profile = make_profile(created_at=now - timedelta(days=40))
        start = now - timedelta(minutes=70 * 99)
        events = [
            make_event(EventType.PUSH, at=start + timedelta(minutes=70 * i), repo="testuser/app")
            for i in range(100)
        ]
        result = ReplicantScorer(config).evaluate(profile, events, now)

        assert [(f.label, f.points) for f in result.flags] == [
            ("Young account", 10),
            ("Very high commit rate", 25),
            ("Extended daily coding", 40),
        ]
        assert result.score == 25
        assert result.classification == Classification.LIKELY_BOT

    def test_zero_repos_all_external(
        self,
        config: ScoringConfig,
        make_event: EventFactory,
        make_profile: ProfileFactory,
        now: datetime,
    ) -> None:
        profile = make_profile(created_at=now - timedelta(days=10), public_repos=0)
        events = [
            make_event(EventType.OTHER, at=now - timedelta(minutes=30 * i), repo="org/project")
            for i in range(25)
        ]
        result = ReplicantScorer(config).evaluate(profile, events, now)

        labels = _labels(result.flags)
        assert "Only active on other people's repos" in labels
        assert "Mostly external activity" not in labels
        assert labels == ["Recently created", "Only active on other people's repos"]
        assert result.score == 30
        assert result.classification == Classification.LIKELY_BOT

    def test_tightly_spaced_commits(
        self,
        config: ScoringConfig,
        make_event: EventFactory,
        make_profile: ProfileFactory,
        now: datetime,
    ) -> None:
        profile = make_profile(created_at=now - timedelta(days=40))
        t = now - timedelta(days=1)
        pushes = [
            make_event(EventType.PUSH, at=t + timedelta(minutes=m), repo="testuser/app")
            for m in (0, 3, 8, 9)
        ]
        others = [
            make_event(EventType.OTHER, at=t - timedelta(hours=i), repo="testuser/app")
            for i in range(6)
        ]
        result = ReplicantScorer(config).evaluate(profile, pushes + others, now)

        tight = [f for f in result.flags if f.label == "Commits too tightly spaced"]
        assert len(tight) == 1
        assert tight[0].detail.startswith("4 commits")


class TestAggregation:
    def test_score_clamped_at_zero(
        self,
        config: ScoringConfig,
        bot_profile: AccountProfile,
        busy_bot_events: list[ActivityEvent],
        now: datetime,
    ) -> None:
        result = ReplicantScorer(config).evaluate(bot_profile, busy_bot_events, now)

        assert result.total_points > 100
        assert result.score == 0
        assert result.classification == Classification.LIKELY_BOT
        _assert_exclusive(result.flags)

    def test_score_matches_points(
        self, config: ScoringConfig, make_profile: ProfileFactory, now: datetime
    ) -> None:
        profile = make_profile(created_at=now - timedelta(days=60), name=None)
        result = ReplicantScorer(config).evaluate(profile, [], now)
        assert result.score == 100 - result.total_points == 75

    def test_compute_score(self) -> None:
        flags = [
            Flag(label="a", points=30, detail=""),
            Flag(label="b", points=45, detail=""),
        ]
        assert ReplicantScorer.compute_score(flags) == 25
        assert ReplicantScorer.compute_score(flags * 2) == 0
        assert ReplicantScorer.compute_score([]) == 100

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (100, Classification.HUMAN),
            (70, Classification.HUMAN),
            (69, Classification.SUSPICIOUS),
            (50, Classification.SUSPICIOUS),
            (49, Classification.LIKELY_BOT),
            (0, Classification.LIKELY_BOT),
        ],
    )
    def test_classify(self, config: ScoringConfig, score: int, expected: Classification) -> None:
        assert ReplicantScorer(config).classify(score) == expected

    def test_classify_custom_cutoffs(self) -> None:
        scorer = ReplicantScorer(ScoringConfig(classification={"human": 90, "suspicious": 80}))
        assert scorer.classify(85) == Classification.SUSPICIOUS
        assert scorer.classify(79) == Classification.LIKELY_BOT

    def test_flag_order_follows_evaluation_order(
        self,
        config: ScoringConfig,
        bot_profile: AccountProfile,
        busy_bot_events: list[ActivityEvent],
        now: datetime,
    ) -> None:
        result = ReplicantScorer(config).evaluate(bot_profile, busy_bot_events, now)
        labels = _labels(result.flags)
        assert labels[:4] == [
            "Recently created",
            "Minimal profile",
            "Unusual follow ratio",
            "Only active on other people's repos",
        ]
        assert labels.index("Very high commit rate") < labels.index("Extremely high PR rate")
        assert labels.index("Extremely high PR rate") < labels.index("Many recent forks")
        assert labels.index("Many recent forks") < labels.index("Extended daily coding")
        assert "Mostly external activity" not in labels

    def test_profile_summary(
        self,
        config: ScoringConfig,
        make_event: EventFactory,
        make_profile: ProfileFactory,
        now: datetime,
    ) -> None:
        profile = make_profile(created_at=now - timedelta(days=400), followers=7, public_repos=3)
        events = [make_event(repo="testuser/a"), make_event(repo="org/b")]
        result = ReplicantScorer(config).evaluate(profile, events, now)

        assert result.profile.login == "testuser"
        assert result.profile.account_age_days == 400
        assert result.profile.followers == 7
        assert result.profile.public_repos == 3
        assert result.profile.has_identity is True
        assert result.metadata == ResultMetadata(events=2, external_events=1, coding_events=2)


class TestProperties:
    def test_deterministic(
        self,
        config: ScoringConfig,
        make_profile: ProfileFactory,
        busy_bot_events: list[ActivityEvent],
        now: datetime,
    ) -> None:
        profile = make_profile(created_at=now - timedelta(days=20), public_repos=1)
        scorer = ReplicantScorer(config)
        first = scorer.evaluate(profile, busy_bot_events, now)
        second = scorer.evaluate(profile, busy_bot_events, now)
        assert first.model_dump_json() == second.model_dump_json()

    def test_event_order_does_not_matter(
        self,
        config: ScoringConfig,
        make_profile: ProfileFactory,
        busy_bot_events: list[ActivityEvent],
        now: datetime,
    ) -> None:
        profile = make_profile(created_at=now - timedelta(days=20), public_repos=1)
        shuffled = list(busy_bot_events)
        random.Random(7).shuffle(shuffled)
        scorer = ReplicantScorer(config)
        assert scorer.evaluate(profile, busy_bot_events, now) == scorer.evaluate(
            profile, shuffled, now
        )

    def test_adding_flagged_events_never_raises_score(
        self,
        config: ScoringConfig,
        make_event: EventFactory,
        make_profile: ProfileFactory,
        now: datetime,
    ) -> None:
        profile = make_profile(created_at=now - timedelta(days=200))
        base = [make_event(EventType.OTHER, at=now - timedelta(days=i)) for i in range(10)]
        before = ReplicantScorer(config).evaluate(profile, base, now)

        forks = [make_event(EventType.FORK, at=now, repo=f"o{i}/r") for i in range(5)]
        after = ReplicantScorer(config).evaluate(profile, base + forks, now)

        assert len(after.flags) > len(before.flags)
        assert after.score <= before.score

    def test_empty_inputs_are_valid(self, config: ScoringConfig, now: datetime) -> None:
        profile = AccountProfile(login="ghost", created_at=now - timedelta(days=1000))
        result = ReplicantScorer(config).evaluate(profile, [], now)
        assert 0 <= result.score <= 100
        assert _labels(result.flags) == ["Minimal profile"]

    def test_naive_now_is_utc(
        self, config: ScoringConfig, make_profile: ProfileFactory, now: datetime
    ) -> None:
        profile = make_profile(created_at=now - timedelta(days=5))
        naive = now.replace(tzinfo=None)
        scorer = ReplicantScorer(config)
        assert scorer.evaluate(profile, [], naive) == scorer.evaluate(profile, [], now)

    def test_exclusive_groups_across_inputs(
        self,
        config: ScoringConfig,
        make_event: EventFactory,
        make_profile: ProfileFactory,
        now: datetime,
    ) -> None:
        rng = random.Random(42)
        scorer = ReplicantScorer(config)
        for _ in range(25):
            profile = make_profile(
                created_at=now - timedelta(days=rng.randint(0, 400)),
                public_repos=rng.randint(0, 6),
                followers=rng.randint(0, 6),
                following=rng.randint(0, 80),
            )
            events = [
                make_event(
                    rng.choice(list(EventType)),
                    at=now - timedelta(minutes=rng.randint(0, 60 * 24 * 30)),
                    repo=rng.choice(["testuser/own", *(f"org{i}/r" for i in range(40))]),
                )
                for _ in range(rng.randint(0, 120))
            ]
            result = scorer.evaluate(profile, events, now)
            _assert_exclusive(result.flags)
            assert result.score == max(0, 100 - result.total_points)


class TestEvaluateFunction:
    def test_default_config(self, make_profile: ProfileFactory, now: datetime) -> None:
        profile = make_profile(created_at=now - timedelta(days=5), name=None)
        assert evaluate(profile, [], now).score == 65

    def test_injected_config(self, make_profile: ProfileFactory, now: datetime) -> None:
        profile = make_profile(created_at=now - timedelta(days=5), name=None)
        config = ScoringConfig(account_age={"points_new": 50})
        assert evaluate(profile, [], now, config=config).score == 35


class TestIdentifyReplicant:
    @respx.mock
    async def test_fetch_and_score(
        self, sample_github_user: dict, sample_github_events: list[dict], now: datetime
    ) -> None:
        respx.get(f"{BASE_URL}/users/octocat").mock(
            return_value=httpx.Response(200, json=sample_github_user)
        )
        respx.get(f"{BASE_URL}/users/octocat/events").mock(
            return_value=httpx.Response(200, json=sample_github_events)
        )

        result = await identify_replicant("octocat", config=ScoringConfig(), now=now)

        assert result.score == 100
        assert result.classification == Classification.HUMAN
        assert result.profile.login == "octocat"
        assert result.metadata.events == 3

    @respx.mock
    async def test_events_unavailable(self, sample_github_user: dict, now: datetime) -> None:
        respx.get(f"{BASE_URL}/users/octocat").mock(
            return_value=httpx.Response(200, json=sample_github_user)
        )
        respx.get(f"{BASE_URL}/users/octocat/events").mock(
            return_value=httpx.Response(500)
        )

        result = await identify_replicant("octocat", config=ScoringConfig(), now=now)

        assert result.metadata.events == 0
        assert result.classification == Classification.HUMAN
