"""Merge hand-authored overlay schemas into generated package schemas.

An overlay adds types, resources, functions and language module mappings that
a provider's generated schema lacks. The generated ("main") schema always
wins: an overlay can add keys, never replace them.

Overlays ship with registrygen under ``overlays/<package>/overlays.json``.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Mapping

from .errors import DecodeError, MalformedLanguageInfoError
from .logging import get_logger
from .schema import SchemaContext

logger = get_logger("overlays")

OVERLAYS_DIR = Path(__file__).parent / "overlays"

# Top-level sections merged key by key
_MERGED_SECTIONS = ("types", "resources", "functions")

# Languages whose configuration is merged, with the module mapping each one carries
LANGUAGE_MODULE_FIELDS: dict[str, str] = {
    "go": "moduleToPackage",
    "nodejs": "moduleToPackage",
    "csharp": "namespaces",
}


def overlay_path(package_name: str, overlays_dir: Path | None = None) -> Path | None:
    """Return the overlay file location for a package, or None for unusable names."""
    if not package_name or "/" in package_name or "\\" in package_name or package_name.startswith("."):
        return None
    return (overlays_dir or OVERLAYS_DIR) / package_name / "overlays.json"


def load_overlay(package_name: str, overlays_dir: Path | None = None) -> dict[str, Any] | None:
    """Load the bundled overlay for a package. Returns None when it has none."""
    path = overlay_path(package_name, overlays_dir)
    if path is None or not path.is_file():
        logger.debug("No overlay found for package %r", package_name)
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise DecodeError(f"unmarshalling overlay schema {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError(f"overlay schema {path} must contain a mapping at the root")
    return data


def _merge_missing(main: dict[str, Any], overlay: Mapping[str, Any]) -> None:
    """Copy keys missing from ``main``; recurse where both sides hold mappings."""
    for key, value in overlay.items():
        if key not in main:
            main[key] = copy.deepcopy(value)
        elif isinstance(main[key], dict) and isinstance(value, Mapping):
            _merge_missing(main[key], value)


def decode_language_info(language: str, side: str, blob: Any) -> dict[str, Any]:
    """Decode a language configuration blob into a mapping.

    Blobs are usually already-decoded mappings, but raw JSON text is accepted.
    A missing blob decodes to an empty configuration.
    """
    if blob is None:
        return {}
    if isinstance(blob, (bytes, bytearray, str)):
        try:
            blob = json.loads(blob)
        except ValueError as exc:
            raise MalformedLanguageInfoError(language, side, str(exc)) from exc
    if not isinstance(blob, Mapping):
        raise MalformedLanguageInfoError(language, side, f"expected an object, got {type(blob).__name__}")

    info = copy.deepcopy(dict(blob))
    module_field = LANGUAGE_MODULE_FIELDS[language]
    modules = info.get(module_field)
    if modules is not None and not isinstance(modules, Mapping):
        raise MalformedLanguageInfoError(language, side, f"{module_field} must be an object")
    return info


def merge_language_info(language: str, main_blob: Any, overlay_blob: Any) -> dict[str, Any]:
    """Merge one language's configuration, main side winning on every key."""
    main_info = decode_language_info(language, "main", main_blob)
    overlay_info = decode_language_info(language, "overlay", overlay_blob)
    _merge_missing(main_info, overlay_info)
    try:
        # Round-trip so the result is plain JSON data, as the generator expects.
        return json.loads(json.dumps(main_info))
    except (TypeError, ValueError) as exc:
        raise MalformedLanguageInfoError(language, "main", f"encoding merged info: {exc}") from exc


def merge_overlay(main: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new schema with ``overlay`` merged additively into ``main``.

    Neither argument is modified.
    """
    merged = copy.deepcopy(dict(main))

    for section in _MERGED_SECTIONS:
        overlay_section = overlay.get(section) or {}
        if not overlay_section:
            continue
        target = merged.get(section)
        if not isinstance(target, dict):
            target = {}
            merged[section] = target
        for key, value in overlay_section.items():
            if key in target:
                continue
            target[key] = copy.deepcopy(value)

    overlay_languages = overlay.get("language") or {}
    if overlay_languages:
        languages = merged.get("language")
        if not isinstance(languages, dict):
            languages = {}
            merged["language"] = languages
        for language, overlay_blob in overlay_languages.items():
            if language not in LANGUAGE_MODULE_FIELDS:
                logger.debug("Ignoring overlay language info for unsupported language %r", language)
                continue
            languages[language] = merge_language_info(language, languages.get(language), overlay_blob)

    return merged


def apply_overlay(ctx: SchemaContext, overlays_dir: Path | None = None) -> SchemaContext:
    """Return ``ctx`` with its package's bundled overlay merged in, if one exists."""
    overlay = load_overlay(ctx.name, overlays_dir)
    if overlay is None:
        return ctx
    logger.info("Merging overlay schema into %s", ctx.name)
    return ctx.with_spec(merge_overlay(ctx.spec, overlay), overlay_applied=True)
