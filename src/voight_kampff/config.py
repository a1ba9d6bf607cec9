"""Configuration models for Voight-Kampff."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    ValidationError,
    model_validator,
)

from voight_kampff.exceptions import ConfigError


class _FrozenConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ClassificationConfig(_FrozenConfig):
    """Score cutoffs (inverted score: 100 = human, 0 = bot)."""
    human: int = 70
    suspicious: int = 50

    @model_validator(mode="after")
    def check_order(self) -> ClassificationConfig:
        if self.suspicious > self.human:
            raise ValueError("suspicious cutoff must not exceed human cutoff")
        return self


class AccountAgeConfig(_FrozenConfig):
    """Account age cutoffs in days and their penalties."""
    new_account_days: int = 30
    young_account_days: int = 90
    points_new: PositiveInt = 20
    points_young: PositiveInt = 10

    @model_validator(mode="after")
    def check_order(self) -> AccountAgeConfig:
        if self.young_account_days < self.new_account_days:
            raise ValueError("young_account_days must not be below new_account_days")
        return self


class IdentityConfig(_FrozenConfig):
    points_missing: PositiveInt = 15


class FollowRatioConfig(_FrozenConfig):
    """Follow-bot pattern: following > following_min and followers < followers_max."""
    following_min: int = 50
    followers_max: int = 5
    points_ratio: PositiveInt = 15
    points_zero_followers: PositiveInt = 10


class AnalysisConfig(_FrozenConfig):
    """Volume gate for activity analysis."""
    min_events: int = 10


class ForkConfig(_FrozenConfig):
    high: int = 5
    extreme: int = 8
    points_high: PositiveInt = 20
    points_extreme: PositiveInt = 30


class HourlyBurstConfig(_FrozenConfig):
    """Pushes inside any sliding window of ``window_seconds``."""
    window_seconds: int = 3600
    high: int = 50
    extreme: int = 100
    points_high: PositiveInt = 15
    points_extreme: PositiveInt = 25


class TightSpacingConfig(_FrozenConfig):
    interval_seconds: int = 600  # 10 minutes
    threshold: int = 3
    points: PositiveInt = 25


class CommitDensityConfig(_FrozenConfig):
    """Pushes per day over the span between the first and last push."""
    high: float = 8.0
    extreme: float = 15.0
    points_high: PositiveInt = 15
    points_extreme: PositiveInt = 25


class PullRequestRateConfig(_FrozenConfig):
    """PR rate compared against the commit density thresholds.

    PRs are rarer than commits, so the per-day bar is divided by
    ``rarity_divisor`` and the penalties are raised.
    """
    rarity_divisor: float = Field(default=2.0, gt=0)
    points_high: PositiveInt = 20
    points_extreme: PositiveInt = 35


class MarathonConfig(_FrozenConfig):
    """Days touching at least ``hours_per_day`` distinct UTC hours."""
    hours_per_day: int = 16
    consecutive_days: int = 3
    frequent_days: int = 5
    points_consecutive: PositiveInt = 40
    points_frequent: PositiveInt = 25


class StreakConfig(_FrozenConfig):
    consecutive_days: int = 21
    points: PositiveInt = 25


class RepoSpreadConfig(_FrozenConfig):
    """Distinct external repos touched by a new or young account."""
    high: int = 20
    extreme: int = 30
    points_high: PositiveInt = 15
    points_extreme: PositiveInt = 30


class PullRequestCadenceConfig(_FrozenConfig):
    """External PRs in the trailing 24 hours / 7 days."""
    today_extreme: int = 15
    week_high: int = 20
    points_today: PositiveInt = 20
    points_week: PositiveInt = 15


class PullRequestOnlyConfig(_FrozenConfig):
    external_prs_min: int = 15
    personal_repos_low: int = 5
    points: PositiveInt = 20


class ExternalRatioConfig(_FrozenConfig):
    ratio_full: float = 1.0
    ratio_high: float = 0.95
    personal_repos_low: int = 5
    points_high: PositiveInt = 20
    points_no_personal_activity: PositiveInt = 30


class ZeroReposConfig(_FrozenConfig):
    """No owned repos, yet at least ``min_events`` events elsewhere."""
    min_events: int = 20
    points_active: PositiveInt = 20


class ScoringConfig(_FrozenConfig):
    """Top-level configuration composing all sub-configs."""
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    account_age: AccountAgeConfig = Field(default_factory=AccountAgeConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    follow_ratio: FollowRatioConfig = Field(default_factory=FollowRatioConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    forks: ForkConfig = Field(default_factory=ForkConfig)
    hourly_burst: HourlyBurstConfig = Field(default_factory=HourlyBurstConfig)
    tight_spacing: TightSpacingConfig = Field(default_factory=TightSpacingConfig)
    commit_density: CommitDensityConfig = Field(default_factory=CommitDensityConfig)
    pr_rate: PullRequestRateConfig = Field(default_factory=PullRequestRateConfig)
    marathon: MarathonConfig = Field(default_factory=MarathonConfig)
    streak: StreakConfig = Field(default_factory=StreakConfig)
    repo_spread: RepoSpreadConfig = Field(default_factory=RepoSpreadConfig)
    pr_cadence: PullRequestCadenceConfig = Field(
        default_factory=PullRequestCadenceConfig
    )
    pr_only: PullRequestOnlyConfig = Field(default_factory=PullRequestOnlyConfig)
    external_ratio: ExternalRatioConfig = Field(default_factory=ExternalRatioConfig)
    zero_repos: ZeroReposConfig = Field(default_factory=ZeroReposConfig)


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        try:
            yaml_data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not yaml_data:
        return {}
    if not isinstance(yaml_data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return yaml_data


def load_config(path: str | Path | None = None) -> ScoringConfig:
    """Load configuration from YAML file, environment variables, and defaults.

    Priority (highest to lowest):
    1. Environment variables (VOIGHT_KAMPFF_*)
    2. YAML config file
    3. Defaults
    """
    config_data: dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if config_path.is_file():
            config_data = _read_yaml(config_path)
    else:
        for default_path in [".voight-kampff.yml", ".voight-kampff.yaml"]:
            p = Path(default_path)
            if p.is_file():
                config_data = _read_yaml(p)
                break

    env_mapping = {
        "VOIGHT_KAMPFF_THRESHOLD_HUMAN": ("classification", "human", int),
        "VOIGHT_KAMPFF_THRESHOLD_SUSPICIOUS": ("classification", "suspicious", int),
        "VOIGHT_KAMPFF_MIN_EVENTS": ("analysis", "min_events", int),
        "VOIGHT_KAMPFF_NEW_ACCOUNT_DAYS": ("account_age", "new_account_days", int),
        "VOIGHT_KAMPFF_YOUNG_ACCOUNT_DAYS": ("account_age", "young_account_days", int),
    }

    for env_var, (section, key, type_fn) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            try:
                typed = type_fn(value)
            except ValueError as exc:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}") from exc
            config_data.setdefault(section, {})[key] = typed

    try:
        return ScoringConfig(**config_data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
