"""Minimal GitHub REST client used to date releases and check versions."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import httpx
from tenacity import Retrying, RetryCallState, retry_if_exception_type, stop_after_attempt
from tenacity.wait import wait_base

from .config import Settings
from .errors import DecodeError, FetchError, RateLimitedError
from .logging import get_logger

logger = get_logger("github")

# GitHub answers throttled requests with 403 (primary limit) or 429 (secondary)
_RATE_LIMIT_STATUSES = (403, 429)
# Secondary limits without Retry-After ask clients to back off for a minute
_DEFAULT_RATE_LIMIT_WAIT = 60.0


@dataclass(frozen=True)
class GitHubTag:
    name: str
    commit_sha: str = ""
    commit_url: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "GitHubTag":
        commit = data.get("commit") or {}
        return cls(
            name=str(data.get("name", "")),
            commit_sha=str(commit.get("sha", "")),
            commit_url=str(commit.get("url", "")),
        )


@dataclass(frozen=True)
class GitHubCommit:
    sha: str
    author_name: str
    author_date: datetime

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "GitHubCommit":
        author = (data.get("commit") or {}).get("author") or {}
        raw_date = author.get("date")
        if not raw_date:
            raise DecodeError(f"commit {data.get('sha', '')} has no author date")
        return cls(
            sha=str(data.get("sha", "")),
            author_name=str(author.get("name", "")),
            author_date=parse_timestamp(raw_date),
        )


@dataclass(frozen=True)
class RepositoryContent:
    """A file entry from the repository contents API."""

    type: str
    name: str
    path: str
    url: str = ""
    download_url: str | None = None
    sha: str = ""
    size: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "RepositoryContent":
        return cls(
            type=str(data.get("type", "")),
            name=str(data.get("name", "")),
            path=str(data.get("path", "")),
            url=str(data.get("url", "")),
            download_url=data.get("download_url"),
            sha=str(data.get("sha", "")),
            size=int(data.get("size") or 0),
        )


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO-8601 timestamp (``2022-10-05T19:52:29Z``)."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise DecodeError(f"invalid timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def rate_limit_wait(response: httpx.Response, now: float | None = None) -> float | None:
    """Seconds GitHub asks us to wait before retrying, or None if not throttled.

    ``Retry-After`` wins over ``X-RateLimit-Reset``. A 429 without either
    header still counts as throttled and gets the default back-off.
    """
    if response.status_code not in _RATE_LIMIT_STATUSES:
        return None

    retry_after = response.headers.get("Retry-After")
    if retry_after:
        try:
            return max(float(retry_after), 0.0)
        except ValueError:
            logger.debug("Ignoring unparseable Retry-After %r", retry_after)

    if response.headers.get("X-RateLimit-Remaining") == "0":
        reset = response.headers.get("X-RateLimit-Reset")
        try:
            reset_at = float(reset) if reset else None
        except ValueError:
            reset_at = None
        if reset_at is None:
            return _DEFAULT_RATE_LIMIT_WAIT
        current = time.time() if now is None else now
        return max(reset_at - current, 0.0)

    if response.status_code == 429:
        return _DEFAULT_RATE_LIMIT_WAIT
    return None


@dataclass(frozen=True)
class WaitForRateLimit(wait_base):
    """Wait as long as the last RateLimitedError asked, capped at ``max_wait``."""

    max_wait: float

    def __call__(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        exc = outcome.exception() if outcome else None
        delay = getattr(exc, "retry_after", None)
        if delay is None:
            delay = _DEFAULT_RATE_LIMIT_WAIT
        return min(delay, self.max_wait)


def _log_rate_limit(retry_state: RetryCallState) -> None:
    sleep = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        "GitHub rate limit hit (attempt %d), waiting %.0fs before retrying",
        retry_state.attempt_number,
        sleep,
    )


class GitHubClient:
    """Thin wrapper over httpx for the few GitHub endpoints registrygen needs.

    Requests carry a bearer token when one is configured. Throttled requests
    are retried after the wait GitHub reports, up to ``rate_limit_attempts``
    attempts and never waiting longer than ``max_rate_limit_wait`` at a time.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.Client | None = None,
        *,
        rate_limit_attempts: int = 3,
        max_rate_limit_wait: float = 300.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.api_url = self.settings.github_api_url.rstrip("/")
        self.rate_limit_attempts = rate_limit_attempts
        self.max_rate_limit_wait = max_rate_limit_wait
        self._sleep = sleep
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=self.settings.http_timeout, follow_redirects=True)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json", "Content-Type": "application/json"}
        if self.settings.github_token:
            headers["Authorization"] = f"Bearer {self.settings.github_token}"
        return headers

    def _retrying(self) -> Retrying:
        return Retrying(
            retry=retry_if_exception_type(RateLimitedError),
            stop=stop_after_attempt(self.rate_limit_attempts),
            wait=WaitForRateLimit(self.max_rate_limit_wait),
            before_sleep=_log_rate_limit,
            sleep=self._sleep,
            reraise=True,
        )

    def _get(self, url: str, stage: str) -> httpx.Response:
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url, headers=self._headers())
        except httpx.HTTPError as exc:
            raise FetchError(url, stage, str(exc)) from exc
        wait = rate_limit_wait(response)
        if wait is not None:
            raise RateLimitedError(
                url, stage, f"HTTP {response.status_code}: rate limit exceeded", retry_after=wait
            )
        return response

    def get_json(self, path: str, stage: str) -> Any:
        """GET an API path (or absolute API URL) and decode the JSON body."""
        url = path if path.startswith(("http://", "https://")) else f"{self.api_url}{path}"
        response = self._retrying()(self._get, url, stage)
        if response.status_code != 200:
            raise FetchError(url, stage, f"HTTP {response.status_code}: {response.text}")
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"{stage}: response from {url} is not JSON") from exc

    def get_tags(self, repo_slug: str) -> list[GitHubTag]:
        data = self.get_json(f"/repos/{repo_slug}/tags?per_page=100", f"getting tags info for {repo_slug}")
        if not isinstance(data, list):
            raise DecodeError(f"constructing tags information for {repo_slug}: expected a list")
        return [GitHubTag.from_json(item) for item in data]

    def get_commit(self, url: str) -> GitHubCommit:
        data = self.get_json(url, "getting commit info")
        return GitHubCommit.from_json(data)

    def get_latest_release_tag(self, owner: str, repo: str) -> str:
        data = self.get_json(
            f"/repos/{owner}/{repo}/releases/latest",
            f"getting latest release for {owner}/{repo}",
        )
        tag = data.get("tag_name") or data.get("name")
        if not tag:
            raise DecodeError(f"latest release of {owner}/{repo} has no tag name")
        return str(tag)

    def get_file_contents(
        self, repo_slug: str, repo_path: str, version: str = ""
    ) -> list[RepositoryContent]:
        """List files under ``repo_path``, descending into directories."""
        path = f"/repos/{repo_slug}/contents/{repo_path}"
        if version:
            path += f"?ref={version}"
        return self._get_contents(path)

    def _get_contents(self, path: str) -> list[RepositoryContent]:
        data = self.get_json(path, f"getting content for path {path}")
        if isinstance(data, dict):
            data = [data]
        files: list[RepositoryContent] = []
        for item in data:
            entry = RepositoryContent.from_json(item)
            if entry.type.lower() == "dir":
                files.extend(self._get_contents(entry.url))
            else:
                files.append(entry)
        return files

    def resolve_published_date(self, repo_slug: str, version: str) -> datetime:
        """Return the commit date of tag ``version``, or now if it is not tagged."""
        for tag in self.get_tags(repo_slug):
            if tag.name == version and tag.commit_url:
                return self.get_commit(tag.commit_url).author_date
        logger.info("No tag %s found for %s, using the current time", version, repo_slug)
        return datetime.now(timezone.utc)
