"""Generate API docs and the package tree for registry packages.

The documentation generator is pluggable: anything implementing
:class:`DocsGenerator` can render the merged schema. The bundled
:class:`~registrygen.codegen.TemplateDocsGenerator` is used by default.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any, Protocol

import httpx

from .codegen import TemplateDocsGenerator
from .errors import EmitError, MissingFieldError, RegistryGenError
from .loader import load_context
from .logging import get_logger
from .metadata import load_package_meta
from .output import emit_file
from .overlays import apply_overlay
from .schema import SchemaContext

logger = get_logger("docs")


class DocsGenerator(Protocol):
    def generate_package(self, spec: dict[str, Any]) -> dict[str, bytes]:
        """Return documentation files keyed by path relative to the docs directory."""

    def generate_package_tree(self, spec: dict[str, Any]) -> list[dict[str, Any]]:
        """Return the navigation tree of the package."""


def _remove_tree(path: Path) -> None:
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as exc:
        raise EmitError(str(path), f"deleting existing docs: {exc}") from exc


def generate_docs(
    ctx: SchemaContext,
    docs_out_dir: str | Path,
    package_tree_out_dir: str | Path,
    generator: DocsGenerator | None = None,
    overlays_dir: Path | None = None,
) -> list[Path]:
    """Merge the package's overlay, then write its docs and package tree.

    Existing files under ``docs_out_dir`` are deleted first. Returns the
    paths written.
    """
    generator = generator or TemplateDocsGenerator()
    docs_dir = Path(docs_out_dir)

    ctx = apply_overlay(ctx, overlays_dir)
    _remove_tree(docs_dir)

    written: list[Path] = []
    files = generator.generate_package(ctx.spec)
    for rel_path, contents in sorted(files.items()):
        path = emit_file(docs_dir, rel_path, contents)
        if path is not None:
            written.append(path)

    tree = generator.generate_package_tree(ctx.spec)
    tree_file = f"{ctx.name}.json"
    emit_file(package_tree_out_dir, tree_file, json.dumps(tree).encode("utf-8"))
    written.append(Path(package_tree_out_dir) / tree_file)

    logger.info("Generated %d docs files for %s", len(files), ctx.name)
    return written


def generate_all_docs(
    registry_packages_path: str | Path,
    base_docs_out_dir: str | Path,
    package_tree_out_dir: str | Path,
    host: str,
    client: httpx.Client,
    generator: DocsGenerator | None = None,
) -> list[str]:
    """Generate docs for every package metadata file in a registry checkout.

    Docs for package ``<name>`` go to ``<base_docs_out_dir>/<name>/api-docs``.
    Returns the names of the packages processed.
    """
    packages_dir = Path(registry_packages_path)
    try:
        metadata_files = sorted(
            p for p in packages_dir.iterdir() if p.is_file() and p.suffix in (".yaml", ".yml")
        )
    except OSError as exc:
        raise RegistryGenError(f"reading the registry packages dir {packages_dir}: {exc}") from exc

    processed: list[str] = []
    for metadata_file in metadata_files:
        meta = load_package_meta(metadata_file)
        if not meta.repo_url:
            raise MissingFieldError("repo_url", f"metadata for package {meta.name!r}")

        ctx = load_context(host, meta.repo_url, meta.version, meta.schema_file_path, client)
        docs_out_dir = Path(base_docs_out_dir) / meta.name / "api-docs"
        try:
            generate_docs(ctx, docs_out_dir, package_tree_out_dir, generator)
        except RegistryGenError as exc:
            raise RegistryGenError(f"error generating docs for {meta.name}: {exc}") from exc
        processed.append(meta.name)

    return processed
