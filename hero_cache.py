"""In-memory aggregation cache over the letter-search upstream API.

Upstream has no "list all" endpoint, so the catalog is materialized once per
process by searching every letter a-z and merging the results by hero id.
"""

from __future__ import annotations

import logging
import string
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Protocol

from errors import InvalidArgument, UpstreamFailure
from models import Alignment, CatalogState, Hero, SweepReport

DEFAULT_LETTERS = string.ascii_lowercase

LOGGER = logging.getLogger(__name__)


class LetterSource(Protocol):
    def fetch_by_letter(self, letter: str) -> list[Hero]: ...


class HeroCatalog:
    """Owns the deduplicated hero set and its Empty -> Populating -> Ready lifecycle.

    The first query runs the sweep; concurrent first callers block until it
    finishes. Once ready the catalog is never cleared or refreshed.
    """

    def __init__(
        self,
        client: LetterSource,
        *,
        letters: Iterable[str] = DEFAULT_LETTERS,
        max_workers: int = 1,
    ) -> None:
        self._client = client
        self._letters = tuple(letters)
        self._max_workers = max(1, max_workers)
        self._heroes: dict[str, Hero] = {}
        self._state = CatalogState.EMPTY
        self._state_lock = threading.Lock()
        self._merge_lock = threading.Lock()
        self._ready = threading.Event()
        self._last_sweep: SweepReport | None = None

    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def last_sweep(self) -> SweepReport | None:
        return self._last_sweep

    def __len__(self) -> int:
        return len(self._heroes)

    def ensure_ready(self) -> SweepReport | None:
        """Run the population sweep exactly once per catalog.

        Returns the sweep report to the caller that performed the sweep and
        None to everyone else (who waited for it, or arrived after it).
        """
        with self._state_lock:
            claimed = self._state is CatalogState.EMPTY
            if claimed:
                self._state = CatalogState.POPULATING

        if not claimed:
            self._ready.wait()
            return None

        LOGGER.info("Catalog is empty, initializing hero cache (%s letters)", len(self._letters))
        report: SweepReport | None = None
        try:
            report = self._sweep()
        except Exception as exc:  # broad so a merge bug still leaves the catalog usable
            LOGGER.exception("Hero cache sweep aborted: %s", exc)
            report = SweepReport(
                letters_attempted=0,
                heroes_added=len(self._heroes),
                failures={"*": str(exc)},
            )
        finally:
            # Waiters must see the report as soon as they see READY.
            self._last_sweep = report
            with self._state_lock:
                self._state = CatalogState.READY
            self._ready.set()

        LOGGER.info(
            "Hero cache ready: heroes=%s letters=%s duplicates_skipped=%s failed_letters=%s",
            len(self._heroes),
            report.letters_attempted,
            report.duplicates_skipped,
            ",".join(sorted(report.failures)) or "-",
        )
        return report

    def query_by_alignment(self, alignment: Alignment | str | None = None) -> list[Hero]:
        """Return heroes whose alignment equals `alignment`; all heroes when empty."""
        self.ensure_ready()
        wanted = alignment.value if isinstance(alignment, Alignment) else (alignment or "").strip().lower()
        if not wanted:
            return list(self._heroes.values())
        return [hero for hero in self._heroes.values() if hero.alignment and hero.alignment == wanted]

    def query_by_name_substring(self, text: str) -> list[Hero]:
        """Case-insensitive, unanchored substring match on hero names."""
        self.ensure_ready()
        needle = text.lower()
        return [hero for hero in self._heroes.values() if needle in hero.name.lower()]

    def get(self, hero_id: str | int) -> Hero | None:
        self.ensure_ready()
        return self._heroes.get(str(hero_id))

    def _sweep(self) -> SweepReport:
        failures: dict[str, str] = {}
        added = 0
        duplicates = 0

        if self._max_workers > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="hero-sweep") as pool:
                futures = [(letter, pool.submit(self._client.fetch_by_letter, letter)) for letter in self._letters]
                outcomes = [(letter, _outcome(future.result)) for letter, future in futures]
        else:
            outcomes = ((letter, _outcome(self._client.fetch_by_letter, letter)) for letter in self._letters)

        for letter, (heroes, error) in outcomes:
            if error is not None:
                failures[letter] = str(error)
                LOGGER.warning(
                    "Error fetching heroes for letter %s, skipping: %s payload=%s",
                    letter,
                    error,
                    getattr(error, "payload", None),
                )
                continue

            new_ids, skipped = self._merge(heroes)
            added += new_ids
            duplicates += skipped
            LOGGER.info(
                "Hero cache: letter=%s fetched=%s new_unique=%s total=%s",
                letter,
                len(heroes),
                new_ids,
                len(self._heroes),
            )

        return SweepReport(
            letters_attempted=len(self._letters),
            heroes_added=added,
            duplicates_skipped=duplicates,
            failures=failures,
        )

    def _merge(self, heroes: list[Hero]) -> tuple[int, int]:
        """Add heroes whose id is not yet present; first-seen wins."""
        added = 0
        skipped = 0
        with self._merge_lock:
            for hero in heroes:
                if hero.hero_id in self._heroes:
                    skipped += 1
                    continue
                self._heroes[hero.hero_id] = hero
                added += 1
        return added, skipped


def _outcome(fetch: Callable[..., list[Hero]], *args: str) -> tuple[list[Hero], Exception | None]:
    try:
        return fetch(*args), None
    except (UpstreamFailure, InvalidArgument) as exc:
        return [], exc
    except Exception as exc:  # broad so one bad letter never aborts the sweep
        LOGGER.exception("Unexpected error fetching heroes: %s", exc)
        return [], exc
