"""Fetch and decode package schemas.

Schemas are read from a raw-content host (``<host>/<slug>/<version>/<path>``)
or from local disk. YAML schemas are detected by file suffix.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
import yaml

from .errors import DecodeError, FetchError
from .logging import get_logger
from .schema import SchemaContext

logger = get_logger("loader")

_YAML_SUFFIXES = (".yaml", ".yml")
_REPEATED_SLASHES = re.compile(r"/{2,}")


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def repo_slug_from_url(repo: str) -> str:
    """Reduce a repository URL to its ``owner/name`` slug.

    Plain slugs are returned unchanged apart from surrounding slashes.
    """
    if is_url(repo):
        repo = urlparse(repo).path
    return repo.strip("/")


def build_schema_url(host: str, repo_slug: str, version: str, schema_file: str) -> str:
    """Compose the raw-content URL of a schema file at a version."""
    path = "/".join([repo_slug_from_url(repo_slug), version, schema_file])
    return f"{host.rstrip('/')}/{_REPEATED_SLASHES.sub('/', path).strip('/')}"


def decode_schema(raw: bytes | str, filename: str) -> dict[str, Any]:
    """Decode schema bytes into a mapping, converting YAML when needed."""
    if filename.endswith(_YAML_SUFFIXES):
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise DecodeError(f"reading YAML schema {filename}: {exc}") from exc
    else:
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise DecodeError(f"unmarshalling schema {filename} into a package spec: {exc}") from exc

    if not isinstance(data, dict):
        raise DecodeError(f"schema {filename} must contain a mapping at the root")
    return data


def fetch_bytes(client: httpx.Client, url: str, stage: str) -> bytes:
    """GET ``url`` and return the body, raising FetchError on any failure."""
    logger.debug("GET %s", url)
    try:
        response = client.get(url)
    except httpx.HTTPError as exc:
        raise FetchError(url, stage, str(exc)) from exc
    if response.status_code != 200:
        raise FetchError(url, stage, f"HTTP {response.status_code}")
    return response.content


def load_schema(source: str, client: httpx.Client | None = None) -> dict[str, Any]:
    """Load a schema from a URL or a local path."""
    if is_url(source):
        if client is None:
            with httpx.Client(follow_redirects=True) as own_client:
                raw = fetch_bytes(own_client, source, "downloading schema file")
        else:
            raw = fetch_bytes(client, source, "downloading schema file")
        filename = urlparse(source).path
    else:
        path = Path(source)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise FetchError(str(path), "reading schema file", str(exc)) from exc
        filename = path.name

    return decode_schema(raw, filename)


def get_section(spec: dict[str, Any], key: str) -> dict[str, Any]:
    """Return a mapping section of the spec (types, resources, ...), or {}."""
    section = spec.get(key)
    if isinstance(section, dict):
        return section
    return {}


def load_context(
    host: str,
    repo_slug: str,
    version: str,
    schema_file: str,
    client: httpx.Client | None = None,
) -> SchemaContext:
    """Fetch a package schema at a version and wrap it in a SchemaContext.

    ``host`` is a raw-content URL, or a local directory holding a checkout of
    the repository at that version.
    """
    if is_url(host):
        source = build_schema_url(host, repo_slug, version, schema_file)
    else:
        source = str(Path(host) / schema_file)
    logger.info("Loading schema from %s", source)

    spec = load_schema(source, client)
    return SchemaContext.create(
        spec,
        version=version,
        schema_file=schema_file,
        repo_slug=repo_slug_from_url(repo_slug),
    )
