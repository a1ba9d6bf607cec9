"""Data models for Voight-Kampff account classification."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class EventType(StrEnum):
    """Activity event tags."""
    PUSH = "push"
    PULL_REQUEST = "pull_request"
    FORK = "fork"
    PULL_REQUEST_REVIEW = "pull_request_review"
    PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"
    OTHER = "other"


class Classification(StrEnum):
    """Final verdict for an account."""
    HUMAN = "human"
    SUSPICIOUS = "suspicious"
    LIKELY_BOT = "likely_bot"

    @property
    def label(self) -> str:
        return _CLASSIFICATION_LABELS[self]


_CLASSIFICATION_LABELS: dict[Classification, str] = {
    Classification.HUMAN: "Human",
    Classification.SUSPICIOUS: "Suspicious",
    Classification.LIKELY_BOT: "Likely Bot",
}


class AccountProfile(BaseModel):
    """Public profile of a code-hosting account."""
    model_config = ConfigDict(frozen=True)

    login: str
    created_at: datetime
    name: str | None = None
    bio: str | None = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @property
    def has_identity(self) -> bool:
        """A non-blank display name or bio."""
        return bool((self.name or "").strip() or (self.bio or "").strip())

    def account_age_days(self, now: datetime) -> int:
        """Whole days from creation to *now*, never negative."""
        delta = _as_utc(now) - self.created_at  # type: ignore[operator]
        return max(0, delta.days)


class ActivityEvent(BaseModel):
    """A single public activity event.

    ``created_at`` is ``None`` when the source timestamp could not be
    parsed; ``repo`` is the owning repository as ``owner/name``.
    """
    model_config = ConfigDict(frozen=True)

    type: EventType = EventType.OTHER
    created_at: datetime | None = None
    repo: str | None = None

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @property
    def repo_owner(self) -> str | None:
        if not self.repo:
            return None
        owner = self.repo.split("/", 1)[0]
        return owner or None


class Flag(BaseModel):
    """A single named, weighted piece of evidence."""
    model_config = ConfigDict(frozen=True)

    label: str
    points: PositiveInt
    detail: str


class ProfileSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str
    account_age_days: int
    followers: int
    public_repos: int
    has_identity: bool


class ResultMetadata(BaseModel):
    """Event counts behind a result, kept for audit."""
    model_config = ConfigDict(frozen=True)

    events: int = 0
    external_events: int = 0
    coding_events: int = 0


class AnalysisResult(BaseModel):
    """Complete classification result.

    ``flags`` keeps emission order; ``score`` is 100 minus the summed
    flag points, clamped at 0.
    """
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    classification: Classification
    flags: tuple[Flag, ...] = ()
    profile: ProfileSummary
    metadata: ResultMetadata = Field(default_factory=ResultMetadata)

    @property
    def total_points(self) -> int:
        return sum(flag.points for flag in self.flags)
