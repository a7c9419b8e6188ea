"""Fixed lookup data used to classify registry packages."""

from __future__ import annotations

from enum import Enum


class PackageCategory(str, Enum):
    CLOUD = "Cloud"
    DATABASE = "Database"
    INFRASTRUCTURE = "Infrastructure"
    MONITORING = "Monitoring"
    NETWORK = "Network"
    UTILITY = "Utility"
    VERSION_CONTROL_SYSTEM = "Version Control System"


class PackageStatus(str, Enum):
    GA = "ga"
    PUBLIC_PREVIEW = "public_preview"


DEFAULT_CATEGORY = PackageCategory.CLOUD
DEFAULT_PUBLISHER = "Pulumi"

# Names accepted by the category override and by category/<name> keyword tags
CATEGORY_NAME_MAP: dict[str, PackageCategory] = {
    "cloud": PackageCategory.CLOUD,
    "database": PackageCategory.DATABASE,
    "infrastructure": PackageCategory.INFRASTRUCTURE,
    "monitoring": PackageCategory.MONITORING,
    "network": PackageCategory.NETWORK,
    "utility": PackageCategory.UTILITY,
    "vcs": PackageCategory.VERSION_CONTROL_SYSTEM,
}

# Packages whose schemas do not carry a category/<name> keyword yet.
# Remove entries once the upstream schemas are tagged.
CATEGORY_LOOKUP: dict[str, PackageCategory] = {
    "akamai": PackageCategory.NETWORK,
    "auth0": PackageCategory.INFRASTRUCTURE,
    "cloudflare": PackageCategory.NETWORK,
    "consul": PackageCategory.INFRASTRUCTURE,
    "datadog": PackageCategory.MONITORING,
    "docker": PackageCategory.INFRASTRUCTURE,
    "f5bigip": PackageCategory.NETWORK,
    "github": PackageCategory.VERSION_CONTROL_SYSTEM,
    "gitlab": PackageCategory.VERSION_CONTROL_SYSTEM,
    "kafka": PackageCategory.INFRASTRUCTURE,
    "keycloak": PackageCategory.INFRASTRUCTURE,
    "kubernetes": PackageCategory.CLOUD,
    "mongodbatlas": PackageCategory.DATABASE,
    "mysql": PackageCategory.DATABASE,
    "newrelic": PackageCategory.MONITORING,
    "postgresql": PackageCategory.DATABASE,
    "random": PackageCategory.UTILITY,
    "signalfx": PackageCategory.MONITORING,
    "tls": PackageCategory.UTILITY,
    "vault": PackageCategory.INFRASTRUCTURE,
}

# Display titles for packages whose schemas lack displayName
TITLE_LOOKUP: dict[str, str] = {
    "aiven": "Aiven",
    "akamai": "Akamai",
    "alicloud": "Alibaba Cloud",
    "auth0": "Auth0",
    "aws": "AWS Classic",
    "aws-native": "AWS Native",
    "azure": "Azure Classic",
    "azure-native": "Azure Native",
    "azuread": "Azure Active Directory (Azure AD)",
    "cloudflare": "Cloudflare",
    "datadog": "Datadog",
    "digitalocean": "DigitalOcean",
    "docker": "Docker",
    "gcp": "Google Cloud (GCP) Classic",
    "github": "GitHub",
    "gitlab": "GitLab",
    "kubernetes": "Kubernetes",
    "mongodbatlas": "MongoDB Atlas",
    "newrelic": "New Relic",
    "random": "random",
    "tls": "TLS",
    "vault": "HashiCorp Vault",
}

FEATURED_PACKAGES: tuple[str, ...] = (
    "aws",
    "azure-native",
    "gcp",
    "kubernetes",
)
