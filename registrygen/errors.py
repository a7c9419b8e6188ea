"""Error types raised by registrygen.

Every error the CLI reports derives from RegistryGenError, so callers can
catch one type and turn it into a non-zero exit.
"""

from __future__ import annotations


class RegistryGenError(RuntimeError):
    """Base class for all registrygen failures."""


class FetchError(RegistryGenError):
    """Raised when a remote document cannot be retrieved."""

    def __init__(self, url: str, stage: str, detail: str = "") -> None:
        self.url = url
        self.stage = stage
        message = f"{stage} from {url}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class RateLimitedError(FetchError):
    """Raised when GitHub throttles a request.

    ``retry_after`` is the number of seconds GitHub asked us to wait, when it said.
    """

    def __init__(self, url: str, stage: str, detail: str = "", retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(url, stage, detail)


class DecodeError(RegistryGenError):
    """Raised when a schema, overlay or metadata document is malformed."""


class MissingFieldError(RegistryGenError):
    """Raised when a required field is absent from a document."""

    def __init__(self, field: str, document: str = "package schema") -> None:
        self.field = field
        super().__init__(f"{field} field must be set in the {document}")


class InvalidCategoryError(RegistryGenError):
    """Raised when a category name is not one of the known categories."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"invalid override for category name {name}")


class MalformedLanguageInfoError(RegistryGenError):
    """Raised when a language configuration blob cannot be decoded or encoded."""

    def __init__(self, language: str, side: str, detail: str = "") -> None:
        self.language = language
        self.side = side
        message = f"malformed {language} package info in the {side} schema spec"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class EmitError(RegistryGenError):
    """Raised when an output file or directory cannot be written."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"writing {path}: {detail}")


class ConfigError(RegistryGenError):
    """Raised when environment configuration is invalid."""
