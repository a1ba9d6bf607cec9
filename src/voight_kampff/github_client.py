"""Async GitHub REST client for fetching account profiles and public events."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from voight_kampff.exceptions import GitHubAPIError, RateLimitExhaustedError, UserNotFoundError
from voight_kampff.models import AccountProfile, ActivityEvent, EventType

logger = logging.getLogger(__name__)

_GITHUB_BASE_URL = "https://api.github.com"

# One page of the public event feed; the API never returns more than 300.
_EVENTS_PER_PAGE = 100

_EVENT_TYPES: dict[str, EventType] = {
    "PushEvent": EventType.PUSH,
    "PullRequestEvent": EventType.PULL_REQUEST,
    "ForkEvent": EventType.FORK,
    "PullRequestReviewEvent": EventType.PULL_REQUEST_REVIEW,
    "PullRequestReviewCommentEvent": EventType.PULL_REQUEST_REVIEW_COMMENT,
}


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def parse_profile(data: dict[str, Any]) -> AccountProfile:
    """Build an :class:`AccountProfile` from a ``GET /users/{login}`` payload."""
    return AccountProfile(
        login=str(data["login"]),
        created_at=datetime.fromisoformat(data["created_at"]),
        name=data.get("name"),
        bio=data.get("bio"),
        public_repos=data.get("public_repos") or 0,
        followers=data.get("followers") or 0,
        following=data.get("following") or 0,
    )


def parse_event(data: dict[str, Any]) -> ActivityEvent:
    """Build an :class:`ActivityEvent` from one public event payload.

    Unknown event types map to ``other``; a missing or unparseable
    timestamp becomes ``None`` so only the checks needing it skip the event.
    """
    repo = data.get("repo") or {}
    repo_name = repo.get("name") if isinstance(repo, dict) else None
    return ActivityEvent(
        type=_EVENT_TYPES.get(str(data.get("type", "")), EventType.OTHER),
        created_at=_parse_timestamp(data.get("created_at")),
        repo=repo_name or None,
    )


def parse_events(data: list[dict[str, Any]]) -> list[ActivityEvent]:
    return [parse_event(item) for item in data if isinstance(item, dict)]


class GitHubClient:
    """Async GitHub REST client for fetching account data."""

    def __init__(self, token: str | None = None, timeout: float = 30.0) -> None:
        headers = {"Accept": "application/vnd.github+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=_GITHUB_BASE_URL,
            headers=headers,
            timeout=timeout,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, object] | None = None) -> Any:
        """Issue a GET request with error and rate-limit handling.

        Raises:
            RateLimitExhaustedError: On 403 with a rate-limit message or on 429.
            GitHubAPIError: For any other non-200 response.
        """
        response = await self._client.get(path, params=params)

        if response.status_code in (403, 429):
            body = response.json() if response.content else {}
            message = body.get("message", "") if isinstance(body, dict) else ""
            if response.status_code == 429 or "rate limit" in message.lower():
                reset_header = response.headers.get("X-RateLimit-Reset")
                if reset_header:
                    reset_at = datetime.fromtimestamp(int(reset_header), tz=UTC)
                else:
                    reset_at = datetime.now(UTC)
                raise RateLimitExhaustedError(reset_at=reset_at)

        if response.status_code != 200:
            remaining = response.headers.get("X-RateLimit-Remaining")
            raise GitHubAPIError(
                message=f"GitHub API returned {response.status_code} for {path}",
                status_code=response.status_code,
                rate_limit_remaining=int(remaining) if remaining else None,
            )

        return response.json()

    async def fetch_user(self, login: str) -> AccountProfile:
        """Fetch an account profile.

        Raises:
            UserNotFoundError: If the account does not exist.
        """
        try:
            data = await self._get(f"/users/{login}")
        except GitHubAPIError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(login) from exc
            raise
        return parse_profile(data)

    async def fetch_events(self, login: str) -> list[ActivityEvent]:
        """Fetch the most recent public events of an account.

        Any retrieval failure degrades to an empty list so scoring can
        proceed on the profile alone.
        """
        try:
            data = await self._get(
                f"/users/{login}/events", params={"per_page": _EVENTS_PER_PAGE}
            )
        except (GitHubAPIError, httpx.HTTPError) as exc:
            logger.warning("Could not fetch events for %s: %s", login, exc)
            return []
        if not isinstance(data, list):
            logger.warning("Unexpected events payload for %s", login)
            return []
        return parse_events(data)

    async def fetch_account(self, login: str) -> tuple[AccountProfile, list[ActivityEvent]]:
        """Fetch profile and events concurrently."""
        profile, events = await asyncio.gather(
            self.fetch_user(login), self.fetch_events(login)
        )
        return profile, events
