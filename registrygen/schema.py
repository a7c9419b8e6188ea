"""Per-package schema state and keyword helpers.

A SchemaContext carries one package's decoded schema together with the
caller-supplied coordinates it was fetched from. It is passed explicitly to
every step so several packages can be processed in one process.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Sequence

from .logging import get_logger

logger = get_logger("schema")


@dataclass(frozen=True)
class SchemaContext:
    """One package schema plus where it came from."""

    spec: dict[str, Any]
    version: str
    schema_file: str
    repo_slug: str = ""
    overlay_applied: bool = field(default=False, compare=False)

    @classmethod
    def create(
        cls,
        spec: dict[str, Any],
        *,
        version: str,
        schema_file: str,
        repo_slug: str = "",
    ) -> "SchemaContext":
        """Build a context, stamping the caller's version onto a copy of the spec."""
        stamped = copy.deepcopy(spec)
        stamped["version"] = version
        return cls(spec=stamped, version=version, schema_file=schema_file, repo_slug=repo_slug)

    @property
    def name(self) -> str:
        return get_str(self.spec, "name")

    def with_spec(self, spec: dict[str, Any], *, overlay_applied: bool = False) -> "SchemaContext":
        return replace(self, spec=spec, overlay_applied=overlay_applied)


def get_str(spec: dict[str, Any], key: str) -> str:
    """Return a string field, treating missing and null values as empty."""
    value = spec.get(key)
    if value is None:
        return ""
    return str(value)


def get_keywords(spec: dict[str, Any]) -> list[str]:
    keywords = spec.get("keywords") or []
    return [str(k) for k in keywords]


def find_tag(keywords: Sequence[str], tag: str) -> str | None:
    """Return ``tag`` if it appears verbatim in ``keywords``."""
    for keyword in keywords:
        if keyword == tag:
            return keyword
    logger.debug("The tag %r was not found in the package's keywords", tag)
    return None


def find_tag_with_prefix(keywords: Sequence[str], prefix: str) -> str | None:
    """Return the first keyword starting with ``prefix``."""
    for keyword in keywords:
        if keyword.startswith(prefix):
            return keyword
    logger.debug("A tag with the prefix %r was not found in the package's keywords", prefix)
    return None
