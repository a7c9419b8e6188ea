"""Command line interface for registrygen."""

from __future__ import annotations

import dataclasses
from contextlib import contextmanager
from importlib.metadata import PackageNotFoundError, version as dist_version
from pathlib import Path
from typing import Annotated, Iterator, Optional

import httpx
import typer

from .config import DEFAULT_HOST, Settings
from .docs import generate_all_docs, generate_docs
from .errors import RegistryGenError
from .github import GitHubClient
from .loader import load_context
from .logging import configure_logging, get_logger
from .metadata import MetadataOverrides, build_package_meta, write_package_meta
from .pkgversion import check_version

logger = get_logger("cli")

app = typer.Typer(
    help=(
        "Generate package metadata and API docs for the registry from a package's "
        "schema. This tool will not generate the schema."
    ),
    no_args_is_help=True,
    add_completion=False,
)

HostOption = Annotated[
    Optional[str],
    typer.Option(
        "--host",
        help=(
            "Raw-content host the schema is fetched from, or a local directory "
            f"holding a checkout. Defaults to REGISTRYGEN_HOST or {DEFAULT_HOST}."
        ),
    ),
]
RepoSlugOption = Annotated[
    str,
    typer.Option("--repo-slug", "--repoSlug", help="The repository slug, e.g. pulumi/pulumi-aws."),
]
VersionOption = Annotated[str, typer.Option("--version", help="The version of the package.")]
SchemaFileOption = Annotated[
    str,
    typer.Option(
        "--schema-file",
        "--schemaFile",
        "-s",
        help="Relative path to the schema file from the root of the repository.",
    ),
]


@contextmanager
def _handle_errors(command: str) -> Iterator[None]:
    try:
        yield
    except RegistryGenError as exc:
        logger.debug("%s failed", command, exc_info=True)
        typer.echo(f"registrygen {command} failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _http_client(settings: Settings) -> httpx.Client:
    return httpx.Client(timeout=settings.http_timeout, follow_redirects=True)


@app.callback()
def root(
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase log verbosity (-v info, -vv debug)."),
    ] = 0,
) -> None:
    configure_logging(verbose)


@app.command("metadata")
def metadata_command(
    repo_slug: RepoSlugOption,
    version: VersionOption,
    schema_file: SchemaFileOption,
    category: Annotated[
        Optional[str],
        typer.Option("--category", help="Category override, e.g. cloud, database, vcs."),
    ] = None,
    publisher: Annotated[
        Optional[str],
        typer.Option("--publisher", help="Publisher display name. Defaults to the schema's publisher, then Pulumi."),
    ] = None,
    title: Annotated[
        Optional[str],
        typer.Option("--title", help="Display name of the package. Defaults to the schema's displayName."),
    ] = None,
    component: Annotated[
        bool,
        typer.Option("--component", help="Mark the package as a component rather than a provider."),
    ] = False,
    out_dir: Annotated[
        Path,
        typer.Option("--out-dir", "--outDir", help="Directory the <name>.yaml file is written to."),
    ] = Path("output"),
    host: HostOption = None,
) -> None:
    """Generate package metadata from a package schema."""
    with _handle_errors("metadata"):
        settings = Settings.from_env()
        overrides = MetadataOverrides(
            category=category, publisher=publisher, title=title, component=component
        )
        with _http_client(settings) as client:
            ctx = load_context(host or settings.host, repo_slug, version, schema_file, client)
            meta = build_package_meta(ctx, overrides)
            github = GitHubClient(settings, client=client)
            published = github.resolve_published_date(ctx.repo_slug, version)
        meta = dataclasses.replace(meta, updated_on=int(published.timestamp()))
        path = write_package_meta(meta, out_dir)
    typer.echo(f"Wrote package metadata to {path}")


@app.command("docs")
def docs_command(
    repo_slug: RepoSlugOption,
    version: VersionOption,
    schema_file: SchemaFileOption,
    docs_out_dir: Annotated[
        Path,
        typer.Option("--docs-out-dir", "--docsOutDir", help="Directory the docs are written to."),
    ],
    package_tree_json_out_dir: Annotated[
        Path,
        typer.Option(
            "--package-tree-json-out-dir",
            "--packageTreeJSONOutDir",
            help="Directory the package tree JSON file is written to.",
        ),
    ],
    host: HostOption = None,
) -> None:
    """Generate API docs from a package schema."""
    with _handle_errors("docs"):
        settings = Settings.from_env()
        with _http_client(settings) as client:
            ctx = load_context(host or settings.host, repo_slug, version, schema_file, client)
        written = generate_docs(ctx, docs_out_dir, package_tree_json_out_dir)
    typer.echo(f"Generated {len(written)} files for {ctx.name}")


@app.command("all-docs")
def all_docs_command(
    registry_packages_path: Annotated[
        Path,
        typer.Option(
            "--registry-packages-path",
            "--registryPackagesPath",
            help="Directory holding the registry's package metadata files.",
        ),
    ] = Path("../registry/themes/default/data/registry/packages/"),
    docs_out_dir: Annotated[
        Path,
        typer.Option("--docs-out-dir", "--docsOutDir", help="Base directory the docs are written to."),
    ] = Path("content/registry/packages"),
    package_tree_json_out_dir: Annotated[
        Path,
        typer.Option(
            "--package-tree-json-out-dir",
            "--packageTreeJSONOutDir",
            help="Directory the package tree JSON files are written to.",
        ),
    ] = Path("static/registry/packages/navs"),
    host: HostOption = None,
) -> None:
    """Generate API docs for every package in the registry."""
    with _handle_errors("all-docs"):
        settings = Settings.from_env()
        with _http_client(settings) as client:
            processed = generate_all_docs(
                registry_packages_path,
                docs_out_dir,
                package_tree_json_out_dir,
                host or settings.host,
                client,
            )
    typer.echo(f"Generated docs for {len(processed)} packages")


@app.command("pkgversion")
def pkgversion_command(
    owner: Annotated[str, typer.Option("--owner", "-o", help="GitHub owner or organization, e.g. pulumi.")],
    repo: Annotated[str, typer.Option("--repo", "-r", help="GitHub repository, e.g. pulumi-aws.")],
) -> None:
    """Compare a package's latest release with the version in the registry."""
    with _handle_errors("pkgversion"):
        settings = Settings.from_env()
        with _http_client(settings) as client:
            github = GitHubClient(settings, client=client)
            result = check_version(github, client, owner, repo)
    typer.echo(f"Package: {result.package}")
    typer.echo(f"Latest version: {result.latest}")
    typer.echo(f"Registry version: {result.registry}")
    if result.outdated:
        typer.echo("The registry is out of date.")


@app.command("version")
def version_command() -> None:
    """Print the registrygen version."""
    try:
        current = dist_version("registrygen")
    except PackageNotFoundError:
        current = "dev"
    typer.echo(current)
