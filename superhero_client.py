"""HTTP client for the superheroapi.com catalog."""

from __future__ import annotations

import logging
from typing import Any

import requests

from errors import HeroNotFound, InvalidArgument, UpstreamError, UpstreamUnavailable
from models import Hero

SUPERHERO_API_BASE_URL = "https://superheroapi.com/api"
REQUEST_TIMEOUT_SECONDS = 20

# Upstream answers an empty search with an error envelope carrying this text.
_EMPTY_SEARCH_MESSAGE = "character with given name not found"

LOGGER = logging.getLogger(__name__)


class SuperheroClient:
    """Thin wrapper over the two upstream endpoints the catalog needs.

    No retries are attempted here; callers decide what a failure means.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = SUPERHERO_API_BASE_URL,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise RuntimeError("SUPERHERO_API_KEY environment variable is required")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._session = session

    def fetch_by_letter(self, letter: str) -> list[Hero]:
        """Fetch every hero whose name search matches `letter`, in upstream order."""
        if not isinstance(letter, str) or len(letter) != 1 or not letter.isascii() or not letter.isalpha():
            raise InvalidArgument(f"Expected a single letter a-z, got {letter!r}", field="letter")
        letter = letter.lower()

        LOGGER.info("Fetching heroes starting with letter: %s", letter)
        body = self._get_json(f"search/{letter}")

        if body.get("response") == "error":
            message = str(body.get("error", ""))
            if message.lower() == _EMPTY_SEARCH_MESSAGE:
                LOGGER.debug("No upstream results for letter=%s", letter)
                return []
            raise UpstreamError(f"Upstream search failed for letter={letter}: {message}", payload=body)

        results = body.get("results", [])
        if not isinstance(results, list):
            raise UpstreamError(f"Unexpected search payload shape for letter={letter}", payload=body)
        return _parse_heroes(results, letter)

    def fetch_by_id(self, hero_id: str | int) -> Hero:
        """Fetch one hero straight from upstream."""
        hero_id = str(hero_id).strip()
        LOGGER.info("Fetching superhero details for id=%s", hero_id)
        body = self._get_json(hero_id)

        if body.get("response") != "success":
            LOGGER.info("Upstream has no hero with id=%s: %s", hero_id, body.get("error"))
            raise HeroNotFound(hero_id)

        try:
            return Hero.from_payload(body)
        except ValueError as exc:
            raise UpstreamError(f"Malformed hero payload for id={hero_id}", payload=body) from exc

    def _get_json(self, path: str) -> dict[str, Any]:
        url = f"{self._base_url}/{self._api_key}/{path}"
        safe_url = f"{self._base_url}/***/{path}"
        getter = self._session.get if self._session is not None else requests.get

        try:
            response = getter(url, timeout=self._timeout_seconds)
            response.raise_for_status()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise UpstreamError(
                f"Upstream returned HTTP {status_code} for {safe_url}",
                payload=_response_payload(exc.response),
                status_code=status_code,
            ) from exc
        except requests.RequestException as exc:
            raise UpstreamUnavailable(
                f"Upstream request failed for {safe_url}: {_mask(str(exc), self._api_key)}",
                payload=_mask(str(exc), self._api_key),
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamError(
                f"Upstream returned non-JSON body for {safe_url}",
                payload=response.text,
                status_code=response.status_code,
            ) from exc

        if not isinstance(body, dict):
            raise UpstreamError(
                f"Unexpected upstream payload shape for {safe_url}: expected an object",
                payload=body,
                status_code=response.status_code,
            )
        return body


def _parse_heroes(results: list[Any], letter: str) -> list[Hero]:
    heroes: list[Hero] = []
    for item in results:
        try:
            heroes.append(Hero.from_payload(item))
        except ValueError as exc:
            LOGGER.warning("Skipping malformed hero for letter=%s: %s", letter, exc)
    return heroes


def _response_payload(response: requests.Response | None) -> Any:
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _mask(text: str, secret: str) -> str:
    return text.replace(secret, "***") if secret else text
