"""Shared fixtures for registrygen tests.

HTTP traffic is served by httpx.MockTransport, so no test touches the network.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any, Callable

import httpx
import pytest


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

_SCHEMA: dict[str, Any] = {
    "name": "foo",
    "displayName": "Foo Cloud",
    "description": "A Pulumi package for creating and managing Foo cloud resources.",
    "keywords": ["pulumi", "foo", "category/cloud"],
    "repository": "https://github.com/pulumi/pulumi-foo",
    "publisher": "Foo Inc.",
    "logoUrl": "https://example.com/foo.png",
    "attribution": "This Pulumi package is based on the foo Terraform Provider.",
    "provider": {
        "description": "The provider type for the foo package.",
        "inputProperties": {
            "region": {"type": "string", "description": "The region to deploy to."},
        },
    },
    "types": {
        "foo:storage/BucketWebsite:BucketWebsite": {
            "type": "object",
            "properties": {"indexDocument": {"type": "string"}},
        },
    },
    "resources": {
        "foo:storage/bucket:Bucket": {
            "description": "Provides a storage bucket.\n\n## Example Usage\n\nSee the examples.",
            "inputProperties": {
                "name": {"type": "string", "description": "The bucket name."},
                "website": {"$ref": "#/types/foo:storage/BucketWebsite:BucketWebsite"},
                "tags": {"type": "object", "additionalProperties": {"type": "string"}},
            },
            "requiredInputs": ["name"],
            "properties": {
                "arn": {"type": "string", "description": "The ARN of the bucket."},
                "name": {"type": "string"},
            },
            "required": ["arn", "name"],
        },
        "foo:index/project:Project": {
            "description": "A project groups resources.",
            "inputProperties": {"title": {"type": "string"}},
            "properties": {"title": {"type": "string"}},
        },
    },
    "functions": {
        "foo:storage/getBucket:getBucket": {
            "description": "Looks up a bucket by name.",
            "inputs": {
                "properties": {"name": {"type": "string"}},
                "required": ["name"],
            },
            "outputs": {
                "properties": {"arn": {"type": "string"}, "id": {"type": "string"}},
                "required": ["arn", "id"],
            },
        },
    },
    "language": {
        "go": {
            "importBasePath": "github.com/pulumi/pulumi-foo/sdk/go/foo",
            "moduleToPackage": {"storage": "storage"},
        },
        "nodejs": {"packageName": "@pulumi/foo", "moduleToPackage": {"storage": "storage"}},
        "csharp": {"namespaces": {"foo": "Foo", "storage": "Storage"}},
        "python": {"packageName": "pulumi_foo"},
    },
}


@pytest.fixture
def schema() -> dict[str, Any]:
    """A fresh copy of a small but complete package schema."""
    return copy.deepcopy(_SCHEMA)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

Routes = dict[str, Any]


@pytest.fixture
def mock_client() -> Callable[[Routes], httpx.Client]:
    """Return a factory for httpx clients serving canned responses.

    Routes map a URL path to a body (dict/list → JSON, str/bytes → raw) or to
    an httpx.Response. Unknown paths answer 404. Every request is recorded on
    ``client.requests``.
    """
    def _factory(routes: Routes) -> httpx.Client:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            body = routes.get(request.url.path)
            if body is None:
                return httpx.Response(404, text="Not Found")
            if isinstance(body, httpx.Response):
                return body
            if isinstance(body, (dict, list)):
                return httpx.Response(200, content=json.dumps(body).encode("utf-8"))
            if isinstance(body, str):
                body = body.encode("utf-8")
            return httpx.Response(200, content=body)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        client.requests = requests  # type: ignore[attr-defined]
        return client

    return _factory


# ---------------------------------------------------------------------------
# Logging: undo configure_logging() between tests so caplog keeps working
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_registrygen_logger():
    yield
    logger = logging.getLogger("registrygen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
