"""Render documentation pages and the package tree from a schema.

Takes the context from context_builder and produces markdown pages keyed by
their path relative to the docs output directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

from .context_builder import build_context, build_package_tree

TEMPLATE_DIR = Path(__file__).parent / "templates"
INDEX_PAGE = "_index.md"


class TemplateDocsGenerator:
    """Documentation generator backed by the bundled Jinja2 templates."""

    def __init__(self, template_dir: Path | None = None) -> None:
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=jinja2.StrictUndefined,
        )

    def _render(self, template_name: str, **context: Any) -> bytes:
        template = self.env.get_template(template_name)
        return template.render(**context).encode("utf-8")

    def generate_package(self, spec: dict[str, Any]) -> dict[str, bytes]:
        """Render every page of the package, keyed by relative path."""
        context = build_context(spec)
        files = {INDEX_PAGE: self._render("package.md.j2", **context)}

        for module in context["submodules"]:
            files[f"{module['link']}{INDEX_PAGE}"] = self._render(
                "module.md.j2", package=context["package"], module=module
            )

        for member in context["resources"] + context["functions"]:
            files[f"{member['link']}{INDEX_PAGE}"] = self._render(
                "member.md.j2", package=context["package"], member=member
            )

        return files

    def generate_package_tree(self, spec: dict[str, Any]) -> list[dict[str, Any]]:
        return build_package_tree(build_context(spec))
