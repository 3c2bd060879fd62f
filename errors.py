"""Error taxonomy shared by the client, the catalog and the query service."""

from __future__ import annotations

from typing import Any


class SuperheroCatalogError(Exception):
    """Base class for every error raised by this package."""


class UpstreamFailure(SuperheroCatalogError):
    """The upstream catalog could not produce a usable answer.

    `payload` holds whatever upstream sent back (parsed JSON, raw text, or the
    transport error message) so callers can log it.
    """

    def __init__(self, message: str, *, payload: Any = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.payload = payload
        self.status_code = status_code


class UpstreamUnavailable(UpstreamFailure):
    """Network or transport error while talking to upstream."""


class UpstreamError(UpstreamFailure):
    """Upstream answered, but with a failure status or error envelope."""


class InvalidArgument(SuperheroCatalogError, ValueError):
    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFound(SuperheroCatalogError):
    """No record matched the request."""


class HeroNotFound(NotFound):
    def __init__(self, hero_id: str) -> None:
        super().__init__(f"No superhero found with ID: {hero_id}")
        self.hero_id = hero_id


class NotFoundInCatalog(NotFound):
    def __init__(self, query: str) -> None:
        super().__init__(f"No superhero found with name: {query}")
        self.query = query
