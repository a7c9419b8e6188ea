"""Tests for the GitHub client."""

import logging
import time
from datetime import datetime, timezone

import httpx
import pytest

from registrygen.config import Settings
from registrygen.errors import DecodeError, FetchError, RateLimitedError
from registrygen.github import GitHubClient, parse_timestamp, rate_limit_wait

_API = "https://api.github.com"

_TAGS = [
    {"name": "v1.1.0", "commit": {"sha": "aaa", "url": f"{_API}/repos/pulumi/pulumi-foo/commits/aaa"}},
    {"name": "v1.2.0", "commit": {"sha": "bbb", "url": f"{_API}/repos/pulumi/pulumi-foo/commits/bbb"}},
]

_COMMIT = {
    "sha": "bbb",
    "commit": {"author": {"name": "Someone", "date": "2022-10-05T19:52:29Z"}},
}


def _github(client, token=None):
    return GitHubClient(Settings(github_token=token), client=client)


class TestTags:
    def test_get_tags(self, mock_client):
        github = _github(mock_client({"/repos/pulumi/pulumi-foo/tags": _TAGS}))
        tags = github.get_tags("pulumi/pulumi-foo")
        assert [t.name for t in tags] == ["v1.1.0", "v1.2.0"]
        assert tags[1].commit_sha == "bbb"

    def test_error_status(self, mock_client):
        client = mock_client({"/repos/pulumi/pulumi-foo/tags": httpx.Response(403, text="rate limited")})
        with pytest.raises(FetchError) as exc_info:
            _github(client).get_tags("pulumi/pulumi-foo")
        assert "403" in str(exc_info.value)
        assert "rate limited" in str(exc_info.value)

    def test_unexpected_payload(self, mock_client):
        github = _github(mock_client({"/repos/pulumi/pulumi-foo/tags": {"message": "odd"}}))
        with pytest.raises(DecodeError):
            github.get_tags("pulumi/pulumi-foo")


class TestHeaders:
    def test_bearer_token_sent(self, mock_client):
        client = mock_client({"/repos/pulumi/pulumi-foo/tags": []})
        _github(client, token="secret").get_tags("pulumi/pulumi-foo")
        assert client.requests[0].headers["Authorization"] == "Bearer secret"

    def test_no_token(self, mock_client):
        client = mock_client({"/repos/pulumi/pulumi-foo/tags": []})
        _github(client).get_tags("pulumi/pulumi-foo")
        assert "Authorization" not in client.requests[0].headers


class TestPublishedDate:
    def test_tagged_version_uses_commit_date(self, mock_client):
        client = mock_client({
            "/repos/pulumi/pulumi-foo/tags": _TAGS,
            "/repos/pulumi/pulumi-foo/commits/bbb": _COMMIT,
        })
        published = _github(client).resolve_published_date("pulumi/pulumi-foo", "v1.2.0")
        assert published == datetime(2022, 10, 5, 19, 52, 29, tzinfo=timezone.utc)

    def test_untagged_version_uses_now(self, mock_client):
        client = mock_client({"/repos/pulumi/pulumi-foo/tags": _TAGS})
        before = datetime.now(timezone.utc)
        published = _github(client).resolve_published_date("pulumi/pulumi-foo", "v9.9.9")
        assert published >= before
        assert len(client.requests) == 1

    def test_parse_timestamp(self):
        assert parse_timestamp("2022-10-05T19:52:29Z").tzinfo is not None
        with pytest.raises(DecodeError):
            parse_timestamp("yesterday")


class TestReleasesAndContents:
    def test_latest_release_tag(self, mock_client):
        client = mock_client({"/repos/pulumi/pulumi-foo/releases/latest": {"tag_name": "v1.2.0"}})
        assert _github(client).get_latest_release_tag("pulumi", "pulumi-foo") == "v1.2.0"

    def test_missing_release(self, mock_client):
        with pytest.raises(FetchError):
            _github(mock_client({})).get_latest_release_tag("pulumi", "pulumi-foo")

    def test_file_contents_recurse_into_directories(self, mock_client):
        client = mock_client({
            "/repos/pulumi/pulumi-foo/contents/provider": [
                {"type": "file", "name": "go.mod", "path": "provider/go.mod"},
                {
                    "type": "dir",
                    "name": "cmd",
                    "path": "provider/cmd",
                    "url": f"{_API}/repos/pulumi/pulumi-foo/contents/provider/cmd",
                },
            ],
            "/repos/pulumi/pulumi-foo/contents/provider/cmd": [
                {"type": "file", "name": "schema.json", "path": "provider/cmd/schema.json", "size": 12},
            ],
        })
        files = _github(client).get_file_contents("pulumi/pulumi-foo", "provider", "v1.2.0")
        assert [f.path for f in files] == ["provider/go.mod", "provider/cmd/schema.json"]
        assert files[1].size == 12
        assert client.requests[0].url.params["ref"] == "v1.2.0"


def _sequence_client(responses):
    """An httpx client answering each request with the next canned response."""
    pending = list(responses)
    requests = []

    def handler(request):
        requests.append(request)
        return pending.pop(0)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    client.requests = requests
    return client


class TestRateLimit:
    """Throttled requests wait for the reported time and try again."""

    def _github(self, client, **kwargs):
        self.sleeps = []
        return GitHubClient(Settings(), client=client, sleep=self.sleeps.append, **kwargs)

    def test_retry_after_is_honoured(self):
        client = _sequence_client([
            httpx.Response(429, headers={"Retry-After": "2"}),
            httpx.Response(200, json=_TAGS),
        ])
        tags = self._github(client).get_tags("pulumi/pulumi-foo")
        assert [t.name for t in tags] == ["v1.1.0", "v1.2.0"]
        assert self.sleeps == [2.0]
        assert len(client.requests) == 2

    def test_waits_for_rate_limit_reset(self):
        reset = int(time.time()) + 30
        client = _sequence_client([
            httpx.Response(403, headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": str(reset)}),
            httpx.Response(200, json={"tag_name": "v1.2.0"}),
        ])
        github = self._github(client)
        assert github.get_latest_release_tag("pulumi", "pulumi-foo") == "v1.2.0"
        assert 25 <= self.sleeps[0] <= 30

    def test_wait_is_capped(self):
        client = _sequence_client([
            httpx.Response(429, headers={"Retry-After": "3600"}),
            httpx.Response(200, json=[]),
        ])
        self._github(client, max_rate_limit_wait=5.0).get_tags("pulumi/pulumi-foo")
        assert self.sleeps == [5.0]

    def test_gives_up_after_attempts(self, caplog):
        client = _sequence_client([httpx.Response(429, headers={"Retry-After": "1"})] * 3)
        with caplog.at_level(logging.WARNING, logger="registrygen"):
            with pytest.raises(RateLimitedError) as exc_info:
                self._github(client, rate_limit_attempts=3).get_tags("pulumi/pulumi-foo")
        assert isinstance(exc_info.value, FetchError)
        assert len(client.requests) == 3
        assert self.sleeps == [1.0, 1.0]
        assert "rate limit" in caplog.text

    def test_plain_forbidden_is_not_retried(self):
        client = _sequence_client([httpx.Response(403, text="Resource not accessible")])
        with pytest.raises(FetchError):
            self._github(client).get_tags("pulumi/pulumi-foo")
        assert self.sleeps == []
        assert len(client.requests) == 1


class TestRateLimitWait:
    def _response(self, status, **headers):
        return httpx.Response(status, headers=headers)

    def test_success_is_not_throttled(self):
        assert rate_limit_wait(self._response(200)) is None

    def test_reset_relative_to_now(self):
        response = self._response(403, **{"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1000"})
        assert rate_limit_wait(response, now=990.0) == 10.0

    def test_reset_in_the_past(self):
        response = self._response(403, **{"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1000"})
        assert rate_limit_wait(response, now=2000.0) == 0.0

    def test_bare_429_uses_default_back_off(self):
        assert rate_limit_wait(self._response(429)) == 60.0
