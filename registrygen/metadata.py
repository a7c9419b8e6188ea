"""Classify a package schema into the registry's package metadata record.

The record drives the registry's browse pages: which category a package is
listed under, its display title and publisher, and whether it is a native
provider or a component package.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from .categories import (
    CATEGORY_LOOKUP,
    CATEGORY_NAME_MAP,
    DEFAULT_CATEGORY,
    DEFAULT_PUBLISHER,
    FEATURED_PACKAGES,
    TITLE_LOOKUP,
    PackageCategory,
    PackageStatus,
)
from .errors import DecodeError, FetchError, InvalidCategoryError, MissingFieldError
from .logging import get_logger
from .output import emit_file
from .schema import SchemaContext, find_tag, find_tag_with_prefix, get_keywords, get_str

logger = get_logger("metadata")

_CATEGORY_TAG_PREFIX = "category/"
_NATIVE_TAG = "kind/native"
_COMPONENT_TAG = "kind/component"


@dataclass
class MetadataOverrides:
    """Caller-supplied values that take precedence over the schema."""

    category: str | None = None
    publisher: str | None = None
    title: str | None = None
    component: bool = False


@dataclass
class PackageMeta:
    name: str
    description: str
    logo_url: str
    publisher: str
    title: str
    repo_url: str
    schema_file_path: str
    package_status: PackageStatus
    updated_on: int
    version: str
    category: PackageCategory
    component: bool
    featured: bool
    native: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "component": self.component,
            "description": self.description,
            "featured": self.featured,
            "logo_url": self.logo_url,
            "name": self.name,
            "native": self.native,
            "package_status": self.package_status.value,
            "publisher": self.publisher,
            "repo_url": self.repo_url,
            "schema_file_path": self.schema_file_path,
            "title": self.title,
            "updated_on": self.updated_on,
            "version": self.version,
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=True, allow_unicode=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PackageMeta":
        """Read a record back, as written by :meth:`to_yaml`."""
        try:
            status = PackageStatus(data.get("package_status") or PackageStatus.GA.value)
            category = PackageCategory(data.get("category") or DEFAULT_CATEGORY.value)
        except ValueError as exc:
            raise DecodeError(f"package metadata for {data.get('name')!r}: {exc}") from exc
        try:
            updated_on = int(data.get("updated_on") or 0)
        except (TypeError, ValueError) as exc:
            raise DecodeError(
                f"package metadata for {data.get('name')!r}: updated_on must be a Unix timestamp, "
                f"got {data.get('updated_on')!r}"
            ) from exc
        return cls(
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            logo_url=str(data.get("logo_url") or ""),
            publisher=str(data.get("publisher") or ""),
            title=str(data.get("title") or ""),
            repo_url=str(data.get("repo_url") or ""),
            schema_file_path=str(data.get("schema_file_path") or ""),
            package_status=status,
            updated_on=updated_on,
            version=str(data.get("version") or ""),
            category=category,
            component=bool(data.get("component", False)),
            featured=bool(data.get("featured", False)),
            native=bool(data.get("native", False)),
        )


def load_package_meta(path: Path) -> PackageMeta:
    """Read a metadata YAML file from disk."""
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"metadata file {path} is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise FetchError(str(path), "reading metadata file", str(exc)) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DecodeError(f"unmarshalling the metadata file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError(f"metadata file {path} must contain a mapping at the root")
    return PackageMeta.from_dict(data)


def category_from_name(name: str) -> PackageCategory:
    """Look up a category by its override/tag name."""
    category = CATEGORY_NAME_MAP.get(name)
    if category is None:
        raise InvalidCategoryError(name)
    return category


def category_from_keywords(keywords: list[str]) -> PackageCategory:
    """Resolve the category from a ``category/<name>`` keyword.

    Unknown names fall back to the default category with a warning.
    """
    tag = find_tag_with_prefix(keywords, _CATEGORY_TAG_PREFIX)
    if tag is None:
        return DEFAULT_CATEGORY

    name = tag[len(_CATEGORY_TAG_PREFIX):]
    category = CATEGORY_NAME_MAP.get(name)
    if category is None:
        logger.warning(
            "invalid category tag %s, using the default category %s",
            tag,
            DEFAULT_CATEGORY.value,
        )
        return DEFAULT_CATEGORY
    return category


def resolve_category(spec: dict[str, Any], override: str | None = None) -> PackageCategory:
    if override:
        logger.debug("Using category override name %s", override)
        return category_from_name(override)

    name = get_str(spec, "name")
    if name in CATEGORY_LOOKUP:
        logger.debug("Using the category for %s from the lookup map", name)
        return CATEGORY_LOOKUP[name]

    logger.debug("Looking up category from the keywords in the schema")
    return category_from_keywords(get_keywords(spec))


def resolve_title(spec: dict[str, Any], override: str | None = None) -> str:
    if override:
        return override
    display_name = get_str(spec, "displayName")
    if display_name:
        return display_name
    name = get_str(spec, "name")
    return TITLE_LOOKUP.get(name, name)


def resolve_status(version: str) -> PackageStatus:
    if version.startswith("v0."):
        return PackageStatus.PUBLIC_PREVIEW
    return PackageStatus.GA


def resolve_publisher(spec: dict[str, Any], override: str | None = None) -> str:
    if override:
        return override
    return get_str(spec, "publisher") or DEFAULT_PUBLISHER


def resolve_kind(spec: dict[str, Any], component_override: bool = False) -> tuple[bool, bool]:
    """Return ``(native, component)``; the two are never both true."""
    keywords = get_keywords(spec)

    native = get_str(spec, "attribution") == ""
    if not native:
        native = find_tag(keywords, _NATIVE_TAG) is not None

    component = component_override or find_tag(keywords, _COMPONENT_TAG) is not None

    if native and component:
        logger.warning(
            "Package found to be marked as both native and component. Will proceed with "
            "tagging the package as a component but not native."
        )
        native = False
    return native, component


def is_featured(name: str) -> bool:
    return name in FEATURED_PACKAGES


def clean_schema_file_path(schema_file: str, package_name: str) -> str:
    """Strip ``../`` segments and the ``pulumi-resource-<name>`` and ``pulumi-<name>`` names from a path."""
    cleaned = schema_file.replace("../", "")
    cleaned = cleaned.replace(f"pulumi-resource-{package_name}", "")
    return cleaned.replace(f"pulumi-{package_name}", "")


def build_package_meta(
    ctx: SchemaContext,
    overrides: MetadataOverrides | None = None,
    published: datetime | None = None,
) -> PackageMeta:
    """Classify ``ctx``'s schema into a PackageMeta record."""
    overrides = overrides or MetadataOverrides()
    spec = ctx.spec

    repo_url = get_str(spec, "repository")
    if not repo_url:
        raise MissingFieldError("repository")

    name = get_str(spec, "name")
    native, component = resolve_kind(spec, overrides.component)
    published = published or datetime.now(timezone.utc)

    return PackageMeta(
        name=name,
        description=get_str(spec, "description"),
        logo_url=get_str(spec, "logoUrl"),
        publisher=resolve_publisher(spec, overrides.publisher),
        title=resolve_title(spec, overrides.title),
        repo_url=repo_url,
        schema_file_path=clean_schema_file_path(ctx.schema_file, name),
        package_status=resolve_status(ctx.version),
        updated_on=int(published.timestamp()),
        version=ctx.version,
        category=resolve_category(spec, overrides.category),
        component=component,
        featured=is_featured(name),
        native=native,
    )


def write_package_meta(meta: PackageMeta, out_dir: str | Path) -> Path:
    """Write ``<name>.yaml`` under ``out_dir`` and return its path."""
    filename = f"{meta.name}.yaml"
    emit_file(out_dir, filename, meta.to_yaml())
    return Path(out_dir) / filename
