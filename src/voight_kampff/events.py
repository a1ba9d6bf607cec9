"""Partition an activity event stream by type and by repository ownership."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from voight_kampff.config import ScoringConfig
from voight_kampff.models import AccountProfile, ActivityEvent, EventType, Flag

CODING_TYPES = frozenset({EventType.PUSH, EventType.PULL_REQUEST})
REVIEW_TYPES = frozenset({
    EventType.PULL_REQUEST_REVIEW,
    EventType.PULL_REQUEST_REVIEW_COMMENT,
})


def is_external(event: ActivityEvent, login: str) -> bool:
    """True when the event's repository is owned by someone other than *login*.

    Events without an owning repository are never external.
    """
    owner = event.repo_owner
    if owner is None:
        return False
    return owner.lower() != login.lower()


class EventPartition(BaseModel):
    """Event subsets computed once per evaluation and shared by every check."""
    model_config = ConfigDict(frozen=True)

    events: tuple[ActivityEvent, ...] = ()
    external: tuple[ActivityEvent, ...] = ()
    pushes: tuple[ActivityEvent, ...] = ()
    pull_requests: tuple[ActivityEvent, ...] = ()
    external_pull_requests: tuple[ActivityEvent, ...] = ()
    forks: tuple[ActivityEvent, ...] = ()
    coding: tuple[ActivityEvent, ...] = ()
    coding_with_review: tuple[ActivityEvent, ...] = ()
    external_repos: frozenset[str] = frozenset()

    @classmethod
    def from_events(
        cls, login: str, events: Iterable[ActivityEvent]
    ) -> EventPartition:
        all_events = tuple(events)
        external = tuple(e for e in all_events if is_external(e, login))
        pull_requests = tuple(
            e for e in all_events if e.type == EventType.PULL_REQUEST
        )
        return cls(
            events=all_events,
            external=external,
            pushes=tuple(e for e in all_events if e.type == EventType.PUSH),
            pull_requests=pull_requests,
            external_pull_requests=tuple(
                e for e in pull_requests if is_external(e, login)
            ),
            forks=tuple(e for e in all_events if e.type == EventType.FORK),
            coding=tuple(e for e in all_events if e.type in CODING_TYPES),
            coding_with_review=tuple(
                e for e in all_events
                if e.type in CODING_TYPES or e.type in REVIEW_TYPES
            ),
            external_repos=frozenset(
                e.repo for e in external if e.repo is not None
            ),
        )

    @property
    def total(self) -> int:
        return len(self.events)

    @property
    def external_ratio(self) -> float:
        """Share of events on external repos; 0.0 for an empty stream."""
        if not self.events:
            return 0.0
        return len(self.external) / len(self.events)


def check_zero_repos_activity(
    profile: AccountProfile, partition: EventPartition, config: ScoringConfig
) -> Flag | None:
    """No owned repos while every one of many events is on someone else's repo.

    Penalises both the missing personal footprint and the fully external
    activity, so the weight is the sum of the two configured penalties.
    """
    if profile.public_repos != 0:
        return None
    if partition.total < config.zero_repos.min_events:
        return None
    if partition.external_ratio < config.external_ratio.ratio_full:
        return None
    points = (
        config.zero_repos.points_active
        + config.external_ratio.points_no_personal_activity
    )
    return Flag(
        label="Only active on other people's repos",
        points=points,
        detail=(
            f"No personal repos, all {partition.total} events are on "
            "repos they don't own"
        ),
    )
