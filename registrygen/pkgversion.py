"""Compare a package's latest GitHub release with the version in the registry."""

from __future__ import annotations

from typing import NamedTuple

import httpx
import yaml

from .errors import DecodeError
from .github import GitHubClient
from .loader import fetch_bytes
from .metadata import PackageMeta

REGISTRY_METADATA_URL = (
    "https://raw.githubusercontent.com/pulumi/registry/master"
    "/themes/default/data/registry/packages/{name}.yaml"
)


class VersionCheck(NamedTuple):
    package: str
    latest: str
    registry: str

    @property
    def outdated(self) -> bool:
        return self.latest != self.registry


def package_name_from_repo(repo: str) -> str:
    return repo.removeprefix("pulumi-")


def get_registry_version(
    client: httpx.Client, package_name: str, url_template: str = REGISTRY_METADATA_URL
) -> str:
    url = url_template.format(name=package_name)
    raw = fetch_bytes(client, url, "getting registry metadata")
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise DecodeError(f"unmarshalling registry metadata from {url}: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError(f"registry metadata from {url} must contain a mapping at the root")
    return PackageMeta.from_dict(data).version


def check_version(
    github: GitHubClient,
    client: httpx.Client,
    owner: str,
    repo: str,
    url_template: str = REGISTRY_METADATA_URL,
) -> VersionCheck:
    latest = github.get_latest_release_tag(owner, repo)
    name = package_name_from_repo(repo)
    registry = get_registry_version(client, name, url_template)
    return VersionCheck(package=name, latest=latest, registry=registry)
