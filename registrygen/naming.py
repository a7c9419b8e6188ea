"""Convert schema tokens to documentation modules and page links.

Pattern: {package}:{module}:{Name}
  - "index" is the package root module
  - a trailing module segment that repeats the member name is dropped
  - page slugs and links are lower case

Examples:
  aws:s3/bucket:Bucket               -> module s3,      link s3/bucket/
  aws:index/getRegion:getRegion      -> module (root),  link getregion/
  kubernetes:apps/v1:Deployment      -> module apps/v1, link apps/v1/deployment/
  kubernetes:helm.sh/v3:Chart        -> module helm.sh/v3, link helm.sh/v3/chart/
  pulumi:providers:aws               -> module (root),  link provider/
"""

from __future__ import annotations

import re
from typing import NamedTuple

ROOT_MODULE = ""
_INDEX_MODULE = "index"
_PROVIDER_PREFIX = "pulumi:providers:"


class Token(NamedTuple):
    package: str
    module: str
    name: str


def _lower_first(word: str) -> str:
    return word[:1].lower() + word[1:]


def _sanitize_segment(segment: str) -> str:
    """Sanitize a module segment for use in a URL path."""
    name = segment.lower()
    name = re.sub(r"[^a-z0-9._-]", "-", name)
    name = re.sub(r"-+", "-", name)
    return name.strip("-")


def parse_token(token: str) -> Token:
    """Split a schema token into package, module and member name.

    Raises ValueError for tokens without three ``:``-separated parts.
    """
    if token.startswith(_PROVIDER_PREFIX):
        return Token(token[len(_PROVIDER_PREFIX):], ROOT_MODULE, "Provider")

    parts = token.split(":")
    if len(parts) != 3 or not all(parts):
        raise ValueError(f"invalid schema token {token!r}")
    package, module, name = parts

    segments = module.split("/")
    if len(segments) > 1 and segments[-1] == _lower_first(name):
        segments = segments[:-1]
    if segments == [_INDEX_MODULE]:
        segments = []

    return Token(package, "/".join(segments), name)


def module_path(module: str) -> str:
    """Return the URL path of a module, '' for the root module."""
    segments = [_sanitize_segment(s) for s in module.split("/") if s]
    return "/".join(s for s in segments if s)


def page_slug(name: str) -> str:
    return _sanitize_segment(name)


def module_link(module: str) -> str:
    path = module_path(module)
    return f"{path}/" if path else ""


def member_link(token: str) -> str:
    """Return the page link of a resource or function token."""
    parsed = parse_token(token)
    return f"{module_link(parsed.module)}{page_slug(parsed.name)}/"


def display_module(module: str) -> str:
    return module or _INDEX_MODULE
