"""Temporal and ownership pattern checks over an account's activity events.

The sequence helpers are pure functions over timestamps sorted once up
front. Every ``check_*`` function returns at most one :class:`Flag`;
:func:`analyze_activity` applies the volume and account-age gates and
collects the flags in evaluation order.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta
from itertools import pairwise

from voight_kampff.config import ScoringConfig
from voight_kampff.events import EventPartition
from voight_kampff.models import AccountProfile, ActivityEvent, Flag

_SECONDS_PER_DAY = 24 * 60 * 60


# ------------------------------------------------------------------
# Sequence helpers
# ------------------------------------------------------------------

def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def sorted_timestamps(events: Iterable[ActivityEvent]) -> list[datetime]:
    """Ascending timestamps; events without one are skipped."""
    return sorted(e.created_at for e in events if e.created_at is not None)


def max_events_in_window(times: Sequence[datetime], window: timedelta) -> int:
    """Largest number of sorted *times* that fit inside any span of *window*.

    Two-pointer sweep: each timestamp in turn is the right edge, and the
    left edge moves forward while the span exceeds *window*.
    """
    best = 0
    left = 0
    for right, current in enumerate(times):
        while current - times[left] > window:
            left += 1
        best = max(best, right - left + 1)
    return best


def count_tight_gaps(times: Sequence[datetime], interval: timedelta) -> int:
    """Number of adjacent pairs in sorted *times* at most *interval* apart."""
    return sum(1 for earlier, later in pairwise(times) if later - earlier <= interval)


def longest_consecutive_run(days: Iterable[date]) -> int:
    """Longest run of immediately consecutive calendar dates."""
    ordered = sorted(set(days))
    if not ordered:
        return 0
    best = current = 1
    for previous, day in pairwise(ordered):
        if (day - previous).days == 1:
            current += 1
            best = max(best, current)
        else:
            current = 1
    return best


def span_days(times: Sequence[datetime]) -> int:
    """Whole days between the first and last sorted timestamp, at least 1."""
    if len(times) < 2:
        return 1
    seconds = (times[-1] - times[0]).total_seconds()
    return max(1, round_half_up(seconds / _SECONDS_PER_DAY))


def marathon_days(times: Iterable[datetime], hours_per_day: int) -> list[date]:
    """UTC dates touching at least *hours_per_day* distinct UTC hours."""
    hours_by_day: dict[date, set[int]] = defaultdict(set)
    for t in times:
        hours_by_day[t.date()].add(t.hour)
    return sorted(day for day, hours in hours_by_day.items() if len(hours) >= hours_per_day)


# ------------------------------------------------------------------
# Checks
# ------------------------------------------------------------------

def check_hourly_burst(push_times: Sequence[datetime], config: ScoringConfig) -> Flag | None:
    cfg = config.hourly_burst
    peak = max_events_in_window(push_times, timedelta(seconds=cfg.window_seconds))
    if peak >= cfg.extreme:
        return Flag(
            label="Extreme commit burst",
            points=cfg.points_extreme,
            detail=f"{peak} commits within one hour",
        )
    if peak >= cfg.high:
        return Flag(
            label="High commit burst",
            points=cfg.points_high,
            detail=f"{peak} commits within one hour",
        )
    return None


def check_tight_spacing(push_times: Sequence[datetime], config: ScoringConfig) -> Flag | None:
    cfg = config.tight_spacing
    tight = count_tight_gaps(push_times, timedelta(seconds=cfg.interval_seconds))
    if tight < cfg.threshold:
        return None
    # n tight gaps join n + 1 commits
    return Flag(
        label="Commits too tightly spaced",
        points=cfg.points,
        detail=(
            f"{tight + 1} commits pushed within "
            f"{cfg.interval_seconds // 60} minutes of each other"
        ),
    )


def _daily_rate(times: Sequence[datetime], noun: str) -> tuple[float, str]:
    days = span_days(times)
    detail = f"{len(times)} {noun} in {days} day{'' if days == 1 else 's'}"
    return len(times) / days, detail


def check_commit_density(push_times: Sequence[datetime], config: ScoringConfig) -> Flag | None:
    """Pushes per day over the span between the first and last push."""
    if not push_times:
        return None
    cfg = config.commit_density
    per_day, detail = _daily_rate(push_times, "commits")
    if per_day >= cfg.extreme:
        return Flag(label="Very high commit rate", points=cfg.points_extreme, detail=detail)
    if per_day >= cfg.high:
        return Flag(label="High commit rate", points=cfg.points_high, detail=detail)
    return None


def check_pr_rate(pr_times: Sequence[datetime], config: ScoringConfig) -> Flag | None:
    """PRs per day, held to the commit density bar divided for rarity."""
    if not pr_times:
        return None
    cfg = config.pr_rate
    density = config.commit_density
    per_day, detail = _daily_rate(pr_times, "PRs")
    if per_day >= density.extreme / cfg.rarity_divisor:
        return Flag(label="Extremely high PR rate", points=cfg.points_extreme, detail=detail)
    if per_day >= density.high / cfg.rarity_divisor:
        return Flag(label="High PR rate", points=cfg.points_high, detail=detail)
    return None


def check_fork_surge(fork_count: int, config: ScoringConfig) -> Flag | None:
    cfg = config.forks
    if fork_count >= cfg.extreme:
        return Flag(
            label="Many recent forks",
            points=cfg.points_extreme,
            detail=f"{fork_count} repos forked recently",
        )
    if fork_count >= cfg.high:
        return Flag(
            label="Multiple forks",
            points=cfg.points_high,
            detail=f"{fork_count} repos forked recently",
        )
    return None


def check_marathon_days(coding_times: Iterable[datetime], config: ScoringConfig) -> Flag | None:
    """Days with near-zero rest, consecutive runs taking priority."""
    cfg = config.marathon
    days = marathon_days(coding_times, cfg.hours_per_day)
    run = longest_consecutive_run(days)
    if run >= cfg.consecutive_days:
        return Flag(
            label="Extended daily coding",
            points=cfg.points_consecutive,
            detail=f"{run} days in a row with {cfg.hours_per_day}+ hours of coding",
        )
    if len(days) >= cfg.frequent_days:
        return Flag(
            label="Frequent long coding days",
            points=cfg.points_frequent,
            detail=f"{len(days)} days with {cfg.hours_per_day}+ hours of coding each",
        )
    return None


def check_activity_streak(times: Iterable[datetime], config: ScoringConfig) -> Flag | None:
    streak = longest_consecutive_run(t.date() for t in times)
    if streak < config.streak.consecutive_days:
        return None
    return Flag(
        label="Long activity streak",
        points=config.streak.points,
        detail=f"{streak} days in a row with activity",
    )


def check_repo_spread(external_repo_count: int, config: ScoringConfig) -> Flag | None:
    cfg = config.repo_spread
    detail = f"Active in {external_repo_count} repos they don't own"
    if external_repo_count >= cfg.extreme:
        return Flag(label="Very wide contribution spread", points=cfg.points_extreme, detail=detail)
    if external_repo_count >= cfg.high:
        return Flag(label="Wide contribution spread", points=cfg.points_high, detail=detail)
    return None


def check_pr_cadence(
    external_pr_times: Iterable[datetime], now: datetime, config: ScoringConfig
) -> Flag | None:
    """External PRs in the trailing 24 hours, else in the trailing week."""
    cfg = config.pr_cadence
    day_ago = now - timedelta(days=1)
    week_ago = now - timedelta(days=7)
    times = list(external_pr_times)
    today = sum(1 for t in times if t > day_ago)
    week = sum(1 for t in times if t > week_ago)
    if today >= cfg.today_extreme:
        return Flag(
            label="High PR volume in the past 24 hours",
            points=cfg.points_today,
            detail=f"{today} PRs to other repos in the last 24 hours",
        )
    if week >= cfg.week_high:
        return Flag(
            label="High PR volume during last week",
            points=cfg.points_week,
            detail=f"{week} PRs to other repos in the last 7 days",
        )
    return None


def check_pr_only(
    external_pr_count: int, public_repos: int, config: ScoringConfig
) -> Flag | None:
    cfg = config.pr_only
    if external_pr_count < cfg.external_prs_min or public_repos >= cfg.personal_repos_low:
        return None
    if public_repos == 0:
        detail = f"{external_pr_count} PRs to other repos, none of their own"
    else:
        detail = (
            f"{external_pr_count} PRs to other repos, "
            f"but only {public_repos} of their own"
        )
    return Flag(label="Primarily external contributions", points=cfg.points, detail=detail)


def check_external_ratio(
    ratio: float, public_repos: int, config: ScoringConfig
) -> Flag | None:
    cfg = config.external_ratio
    if ratio < cfg.ratio_high or public_repos >= cfg.personal_repos_low:
        return None
    return Flag(
        label="Mostly external activity",
        points=cfg.points_high,
        detail=f"{round_half_up(ratio * 100)}% of activity on other people's repos",
    )


# ------------------------------------------------------------------
# Gated analysis
# ------------------------------------------------------------------

def analyze_activity(
    profile: AccountProfile,
    partition: EventPartition,
    age_days: int,
    now: datetime,
    config: ScoringConfig,
    zero_repos_flagged: bool = False,
) -> list[Flag]:
    """Run the activity checks that the event volume and account age allow.

    *zero_repos_flagged* suppresses the mostly-external check when the
    fully-external, zero-repos flag already covered the same signal.
    """
    min_events = config.analysis.min_events
    if partition.total < min_events:
        return []

    new_or_young = age_days < config.account_age.young_account_days
    candidates: list[Flag | None] = []

    if new_or_young:
        push_times = sorted_timestamps(partition.pushes)
        if len(partition.pushes) >= min_events:
            candidates.append(check_hourly_burst(push_times, config))
        candidates.append(check_tight_spacing(push_times, config))
        if len(partition.pushes) >= min_events:
            candidates.append(check_commit_density(push_times, config))
        if len(partition.pull_requests) >= min_events:
            candidates.append(
                check_pr_rate(sorted_timestamps(partition.pull_requests), config)
            )

    candidates.append(check_fork_surge(len(partition.forks), config))
    candidates.append(
        check_marathon_days(sorted_timestamps(partition.coding_with_review), config)
    )
    candidates.append(check_activity_streak(sorted_timestamps(partition.events), config))

    if new_or_young:
        candidates.append(check_repo_spread(len(partition.external_repos), config))

    candidates.append(
        check_pr_cadence(sorted_timestamps(partition.external_pull_requests), now, config)
    )
    candidates.append(
        check_pr_only(len(partition.external_pull_requests), profile.public_repos, config)
    )
    if not zero_repos_flagged:
        candidates.append(
            check_external_ratio(partition.external_ratio, profile.public_repos, config)
        )

    return [flag for flag in candidates if flag is not None]
