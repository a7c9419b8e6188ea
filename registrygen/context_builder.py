"""Build Jinja2 template context from a merged package schema.

Assigns each resource and function to a module, builds page entries,
and assembles the context dict the documentation templates render.
"""

from __future__ import annotations

from typing import Any

from .loader import get_section
from .logging import get_logger
from .naming import (
    ROOT_MODULE,
    display_module,
    module_link,
    module_path,
    page_slug,
    parse_token,
)
from .schema_parser import parse_function, parse_resource, summarize

logger = get_logger("context_builder")

# Tree item types, in the order they are listed under a module
_TREE_ORDER = ("module", "resource", "function")


def _make_member(kind: str, token: str, definition: dict[str, Any]) -> dict[str, Any] | None:
    try:
        parsed = parse_token(token)
    except ValueError:
        logger.warning("Skipping %s with invalid token %r", kind, token)
        return None

    properties = parse_function(definition) if kind == "function" else parse_resource(definition)
    description = definition.get("description", "")
    return {
        "token": token,
        "name": parsed.name,
        "kind": kind,
        "module": parsed.module,
        "page": page_slug(parsed.name),
        "description": description,
        "summary": summarize(description),
        "deprecation": definition.get("deprecationMessage", ""),
        "is_component": bool(definition.get("isComponent", False)),
        "inputs": properties["inputs"],
        "outputs": properties["outputs"],
    }


def _assign_links(members: list[dict[str, Any]]) -> None:
    """Give every member a unique link, suffixing pages that collide."""
    seen: dict[str, int] = {}
    for member in members:
        base = f"{module_link(member['module'])}{member['page']}"
        if base in seen:
            seen[base] += 1
            member["page"] = f"{member['page']}-{seen[base]}"
            logger.debug("Page %s/ is taken, using %s instead", base, member["page"])
        else:
            seen[base] = 1
        member["link"] = f"{module_link(member['module'])}{member['page']}/"


def build_context(spec: dict[str, Any]) -> dict[str, Any]:
    """Build the full template context from a package schema."""
    package_name = spec.get("name", "")
    members: list[dict[str, Any]] = []

    provider = spec.get("provider")
    if isinstance(provider, dict):
        member = _make_member("resource", f"pulumi:providers:{package_name}", provider)
        if member:
            members.append(member)

    for token, resource in sorted(get_section(spec, "resources").items()):
        member = _make_member("resource", token, resource or {})
        if member:
            members.append(member)

    for token, function in sorted(get_section(spec, "functions").items()):
        member = _make_member("function", token, function or {})
        if member:
            members.append(member)

    _assign_links(members)

    modules: dict[str, dict[str, Any]] = {}
    for member in members:
        module = member["module"]
        if module not in modules:
            modules[module] = {
                "name": display_module(module),
                "path": module_path(module),
                "link": module_link(module),
                "resources": [],
                "functions": [],
            }
        modules[module][f"{member['kind']}s"].append(member)

    resources = [m for m in members if m["kind"] == "resource"]
    functions = [m for m in members if m["kind"] == "function"]
    submodules = [modules[m] for m in sorted(modules) if m != ROOT_MODULE]

    return {
        "package": {
            "name": package_name,
            "title": spec.get("displayName") or package_name,
            "description": spec.get("description", ""),
            "version": spec.get("version", ""),
            "repository": spec.get("repository", ""),
            "publisher": spec.get("publisher", ""),
            "logo_url": spec.get("logoUrl", ""),
        },
        "modules": {m: modules[m] for m in sorted(modules)},
        "submodules": submodules,
        "root": modules.get(ROOT_MODULE, {"resources": [], "functions": []}),
        "resources": resources,
        "functions": functions,
        "resource_count": len(resources),
        "function_count": len(functions),
    }


def _tree_item(name: str, item_type: str, link: str) -> dict[str, Any]:
    return {"name": name, "type": item_type, "link": link}


def build_package_tree(context: dict[str, Any]) -> list[dict[str, Any]]:
    """Build the navigation tree: nested modules, then resources, then functions."""
    root: dict[str, Any] = {"children": []}
    module_nodes: dict[str, dict[str, Any]] = {"": root}

    def module_node(path: str) -> dict[str, Any]:
        if path in module_nodes:
            return module_nodes[path]
        parent_path, _, leaf = path.rpartition("/")
        parent = module_node(parent_path)
        node = _tree_item(leaf, "module", f"{path}/")
        node["children"] = []
        parent["children"].append(node)
        module_nodes[path] = node
        return node

    for module in context["modules"].values():
        node = module_node(module["path"])
        for member in module["resources"] + module["functions"]:
            node["children"].append(_tree_item(member["name"], member["kind"], member["link"]))

    def sort_children(node: dict[str, Any]) -> None:
        children = node.get("children")
        if not children:
            node.pop("children", None)
            return
        children.sort(key=lambda item: (_TREE_ORDER.index(item["type"]), item["name"].lower()))
        for child in children:
            sort_children(child)

    sort_children(root)
    return root.get("children", [])
