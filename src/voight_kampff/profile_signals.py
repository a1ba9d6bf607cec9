"""Profile signals: account age, identity completeness and follow ratio.

Each check returns at most one :class:`Flag`, so the variants of a
group (e.g. "Recently created" vs. "Young account") can never fire
together.
"""

from __future__ import annotations

from voight_kampff.config import ScoringConfig
from voight_kampff.models import AccountProfile, Flag


def check_account_age(age_days: int, config: ScoringConfig) -> Flag | None:
    cfg = config.account_age
    if age_days < cfg.new_account_days:
        return Flag(
            label="Recently created",
            points=cfg.points_new,
            detail=f"Account is {age_days} days old",
        )
    if age_days < cfg.young_account_days:
        return Flag(
            label="Young account",
            points=cfg.points_young,
            detail=f"Account is {age_days} days old",
        )
    return None


def check_identity(profile: AccountProfile, config: ScoringConfig) -> Flag | None:
    if profile.has_identity:
        return None
    return Flag(
        label="Minimal profile",
        points=config.identity.points_missing,
        detail="No name or bio provided",
    )


def check_follow_ratio(profile: AccountProfile, config: ScoringConfig) -> Flag | None:
    """Flag follow-bot patterns, or an account nobody follows back yet."""
    cfg = config.follow_ratio
    if profile.following > cfg.following_min and profile.followers < cfg.followers_max:
        return Flag(
            label="Unusual follow ratio",
            points=cfg.points_ratio,
            detail=(
                f"Following {profile.following} but only "
                f"{profile.followers} followers"
            ),
        )
    if profile.followers == 0 and profile.following > 0:
        return Flag(
            label="No followers yet",
            points=cfg.points_zero_followers,
            detail="Account has no followers",
        )
    return None


def evaluate_profile(
    profile: AccountProfile, age_days: int, config: ScoringConfig
) -> list[Flag]:
    """Run the profile checks in order and collect the flags that fire."""
    candidates = [
        check_account_age(age_days, config),
        check_identity(profile, config),
        check_follow_ratio(profile, config),
    ]
    return [flag for flag in candidates if flag is not None]
