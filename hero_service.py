"""Query facade used by the CLI (and any other request layer)."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from errors import InvalidArgument, NotFoundInCatalog
from hero_cache import HeroCatalog
from models import Alignment, Hero

LOGGER = logging.getLogger(__name__)


class HeroLookup(Protocol):
    def fetch_by_id(self, hero_id: str | int) -> Hero: ...


class HeroQueryService:
    """Translates caller requests into catalog queries or direct upstream lookups."""

    def __init__(self, catalog: HeroCatalog, client: HeroLookup) -> None:
        self._catalog = catalog
        self._client = client

    def list_heroes(self, alignment: str | None = None) -> list[Hero]:
        """Return the whole catalog, optionally filtered by alignment.

        Upstream outages during the sweep surface as an empty (or short) list,
        never as an error. An alignment outside good/bad/neutral matches nothing.
        """
        wanted: Alignment | str | None
        try:
            wanted = Alignment.parse(alignment)
        except InvalidArgument:
            LOGGER.info("list_heroes got unknown alignment=%r; no hero will match", alignment)
            wanted = alignment
        heroes = self._catalog.query_by_alignment(wanted)
        LOGGER.info("list_heroes alignment=%s returned=%s", alignment or "*", len(heroes))
        return heroes

    def search_by_name(self, name: str | None) -> list[Hero]:
        """Substring search on names; the term is matched as given, whitespace included."""
        if not name:
            raise InvalidArgument("Please provide a superhero name.", field="name")

        heroes = self._catalog.query_by_name_substring(name)
        if not heroes:
            raise NotFoundInCatalog(name.lower())
        LOGGER.info("search_by_name term=%r matched=%s", name, len(heroes))
        return heroes

    def get_by_id(self, hero_id: str | int | None) -> Hero:
        """Look a hero up directly upstream; the catalog is not consulted."""
        if hero_id is None or not str(hero_id).strip():
            raise InvalidArgument("Please provide a superhero id.", field="id")
        return self._client.fetch_by_id(str(hero_id).strip())

    def warm_up(self) -> None:
        """Populate the catalog now instead of on the first query."""
        self._catalog.ensure_ready()

    def catalog_stats(self) -> dict[str, Any]:
        """Observability snapshot; does not trigger the sweep."""
        sweep = self._catalog.last_sweep
        return {
            "state": self._catalog.state.value,
            "hero_count": len(self._catalog),
            "sweep_failure_count": sweep.failure_count if sweep else 0,
            "failed_letters": sorted(sweep.failures) if sweep else [],
            "duplicates_skipped": sweep.duplicates_skipped if sweep else 0,
        }
