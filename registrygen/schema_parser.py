"""Extract documented properties from package schema definitions.

Handles:
- Resource input and output properties (inputProperties / properties)
- Function inputs and outputs
- Local $ref resolution (#/types/...) and well-known pulumi.json refs
- array / map / oneOf composition
- Deprecation notices
- HTML stripping of summaries
"""

from __future__ import annotations

import re
from typing import Any

# Well-known types defined by the core schema rather than the package
_BUILTIN_REFS: dict[str, str] = {
    "pulumi.json#/Any": "any",
    "pulumi.json#/Archive": "Archive",
    "pulumi.json#/Asset": "Asset",
    "pulumi.json#/Json": "Json",
}

_PRIMITIVES: dict[str, str] = {
    "string": "string",
    "integer": "integer",
    "number": "number",
    "boolean": "boolean",
}


def _strip_html(text: str) -> str:
    """Strip HTML tags and collapse whitespace."""
    text = re.sub(r"<[^>]+>", "", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text


def summarize(description: str) -> str:
    """Return the first paragraph of a description, without markup or examples."""
    if not description:
        return ""
    paragraph = description.strip().split("\n\n", 1)[0]
    if paragraph.startswith(("{{%", "##", "```")):
        return ""
    return _strip_html(paragraph)


def _ref_name(ref: str) -> str:
    if ref in _BUILTIN_REFS:
        return _BUILTIN_REFS[ref]
    token = ref.rsplit("/", 1)[-1] if "#/" in ref else ref
    return token.rsplit(":", 1)[-1]


def resolve_property_type(schema: dict[str, Any]) -> str:
    """Render a property schema as a documentation type string."""
    if not schema:
        return "any"

    if "$ref" in schema:
        return _ref_name(schema["$ref"])

    if "oneOf" in schema:
        return " | ".join(resolve_property_type(sub) for sub in schema["oneOf"])

    schema_type = schema.get("type")
    if schema_type in _PRIMITIVES:
        return _PRIMITIVES[schema_type]
    if schema_type == "array":
        return f"List<{resolve_property_type(schema.get('items', {}))}>"
    if schema_type == "object":
        additional = schema.get("additionalProperties")
        if isinstance(additional, dict):
            return f"Map<{resolve_property_type(additional)}>"
        return "object"

    return "any"


def parse_properties(
    properties: dict[str, Any] | None,
    required: list[str] | None = None,
) -> list[dict[str, Any]]:
    """Flatten a properties mapping into documentation rows, sorted by name.

    Required properties come first.
    """
    required_fields = set(required or [])
    rows = []

    for prop_name, prop_schema in (properties or {}).items():
        prop_schema = prop_schema or {}
        rows.append({
            "name": prop_name,
            "type": resolve_property_type(prop_schema),
            "required": prop_name in required_fields,
            "description": summarize(prop_schema.get("description", "")),
            "deprecation": prop_schema.get("deprecationMessage", ""),
            "secret": bool(prop_schema.get("secret", False)),
        })

    rows.sort(key=lambda row: (not row["required"], row["name"]))
    return rows


def parse_resource(resource: dict[str, Any]) -> dict[str, list[dict[str, Any]]]:
    """Return the input and output property rows of a resource."""
    return {
        "inputs": parse_properties(
            resource.get("inputProperties"), resource.get("requiredInputs")
        ),
        "outputs": parse_properties(resource.get("properties"), resource.get("required")),
    }


def parse_function(function: dict[str, Any]) -> dict[str, list[dict[str, Any]]]:
    """Return the input and output property rows of a function."""
    inputs = function.get("inputs") or {}
    outputs = function.get("outputs") or {}
    if "$ref" in outputs or outputs.get("type") not in (None, "object"):
        # Functions that return a plain value have no output properties.
        output_rows = []
    else:
        output_rows = parse_properties(outputs.get("properties"), outputs.get("required"))
    return {
        "inputs": parse_properties(inputs.get("properties"), inputs.get("required")),
        "outputs": output_rows,
    }
