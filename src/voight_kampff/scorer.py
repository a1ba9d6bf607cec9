"""Scoring engine: accumulate flags and classify an account."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from voight_kampff.config import ScoringConfig, load_config
from voight_kampff.events import EventPartition, check_zero_repos_activity
from voight_kampff.models import (
    AccountProfile,
    ActivityEvent,
    AnalysisResult,
    Classification,
    Flag,
    ProfileSummary,
    ResultMetadata,
)
from voight_kampff.profile_signals import evaluate_profile
from voight_kampff.temporal import analyze_activity

logger = logging.getLogger(__name__)


class ReplicantScorer:
    """Classify accounts as human, suspicious or likely automated.

    The scorer holds nothing but its configuration, so one instance can be
    shared across threads and tasks.
    """

    def __init__(self, config: ScoringConfig) -> None:
        self.config = config

    def evaluate(
        self,
        profile: AccountProfile,
        events: Iterable[ActivityEvent],
        now: datetime,
    ) -> AnalysisResult:
        """Score *profile* and its *events* as of the instant *now*."""
        now = now.replace(tzinfo=UTC) if now.tzinfo is None else now.astimezone(UTC)
        age_days = profile.account_age_days(now)
        partition = EventPartition.from_events(profile.login, events)

        flags: list[Flag] = evaluate_profile(profile, age_days, self.config)

        zero_repos_flag = check_zero_repos_activity(profile, partition, self.config)
        if zero_repos_flag is not None:
            flags.append(zero_repos_flag)

        flags.extend(
            analyze_activity(
                profile,
                partition,
                age_days,
                now,
                self.config,
                zero_repos_flagged=zero_repos_flag is not None,
            )
        )

        for flag in flags:
            logger.debug("%s: %s (-%d) %s", profile.login, flag.label, flag.points, flag.detail)

        score = self.compute_score(flags)
        classification = self.classify(score)
        logger.debug("%s: score %d -> %s", profile.login, score, classification.value)

        return AnalysisResult(
            score=score,
            classification=classification,
            flags=tuple(flags),
            profile=ProfileSummary(
                login=profile.login,
                account_age_days=age_days,
                followers=profile.followers,
                public_repos=profile.public_repos,
                has_identity=profile.has_identity,
            ),
            metadata=ResultMetadata(
                events=partition.total,
                external_events=len(partition.external),
                coding_events=len(partition.coding),
            ),
        )

    @staticmethod
    def compute_score(flags: Iterable[Flag]) -> int:
        """Invert the penalty total: 100 = human, clamped at 0."""
        return max(0, 100 - sum(flag.points for flag in flags))

    def classify(self, score: int) -> Classification:
        """Map a score to a classification using the configured cutoffs."""
        cutoffs = self.config.classification
        if score >= cutoffs.human:
            return Classification.HUMAN
        if score >= cutoffs.suspicious:
            return Classification.SUSPICIOUS
        return Classification.LIKELY_BOT


def evaluate(
    profile: AccountProfile,
    events: Iterable[ActivityEvent],
    now: datetime,
    config: ScoringConfig | None = None,
) -> AnalysisResult:
    """Convenience function: score with *config* or the default calibration."""
    scorer = ReplicantScorer(config if config is not None else ScoringConfig())
    return scorer.evaluate(profile, events, now)


async def identify_replicant(
    login: str,
    token: str | None = None,
    config: ScoringConfig | None = None,
    now: datetime | None = None,
) -> AnalysisResult:
    """Convenience function: fetch an account from GitHub and score it.

    Parameters
    ----------
    login:
        GitHub username to classify.
    token:
        Optional GitHub token; unauthenticated requests are rate limited
        more aggressively.
    config:
        Optional configuration; :func:`load_config` is used when *None*.
    now:
        Evaluation instant; captured once after the fetch when *None*.
    """
    from voight_kampff.github_client import GitHubClient

    if config is None:
        config = load_config()

    async with GitHubClient(token=token) as client:
        profile, events = await client.fetch_account(login)

    if now is None:
        now = datetime.now(UTC)
    return ReplicantScorer(config).evaluate(profile, events, now)
