"""Shared typed models for the superhero catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from errors import InvalidArgument

# Upstream uses "-" where a biography field is unknown.
_UNKNOWN_MARKERS = frozenset({"", "-", "null"})


class Alignment(str, Enum):
    GOOD = "good"
    BAD = "bad"
    NEUTRAL = "neutral"

    @classmethod
    def parse(cls, value: str | None) -> Alignment | None:
        """Parse a caller-supplied alignment filter.

        Empty or missing values mean "no filter" and return None. Matching is
        case-insensitive; anything outside good/bad/neutral is rejected.
        """
        if value is None or not value.strip():
            return None
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise InvalidArgument(
                f"Unknown alignment {value!r}; expected one of good, bad, neutral",
                field="alignment",
            ) from exc


class CatalogState(str, Enum):
    EMPTY = "empty"
    POPULATING = "populating"
    READY = "ready"


@dataclass(frozen=True, slots=True)
class Hero:
    """One catalog record, keyed by the upstream id."""

    hero_id: str
    name: str
    alignment: str = ""
    publisher: str | None = None
    image_url: str | None = None
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> Hero:
        """Build a Hero from one upstream JSON object, keeping the raw payload."""
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a JSON object for a hero, got {type(payload).__name__}")

        raw_id = payload.get("id")
        hero_id = str(raw_id).strip() if isinstance(raw_id, (str, int)) else ""
        name = _as_str(payload.get("name"))
        if not hero_id or not name:
            raise ValueError(f"Hero payload is missing id or name: id={raw_id!r}")

        biography = payload.get("biography") if isinstance(payload.get("biography"), dict) else {}
        image = payload.get("image") if isinstance(payload.get("image"), dict) else {}
        alignment = (_as_str(biography.get("alignment")) or "").lower()

        return cls(
            hero_id=hero_id,
            name=name,
            alignment="" if alignment in _UNKNOWN_MARKERS else alignment,
            publisher=_known_or_none(_as_str(biography.get("publisher"))),
            image_url=_as_str(image.get("url")),
            payload=_freeze(payload),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the upstream record as a plain dict for serialization."""
        if self.payload:
            return _thaw(self.payload)
        return {
            "id": self.hero_id,
            "name": self.name,
            "biography": {"alignment": self.alignment, "publisher": self.publisher},
            "image": {"url": self.image_url},
        }


@dataclass(frozen=True, slots=True)
class SweepReport:
    """Outcome of one population sweep, kept for observability only."""

    letters_attempted: int
    heroes_added: int
    duplicates_skipped: int = 0
    failures: Mapping[str, str] = field(default_factory=dict)

    @property
    def failure_count(self) -> int:
        return len(self.failures)


def _freeze(value: Any) -> Any:
    """Deep read-only copy: dicts become mapping proxies, lists become tuples."""
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


def _known_or_none(value: str | None) -> str | None:
    if value is None or value.lower() in _UNKNOWN_MARKERS:
        return None
    return value


def _as_str(value: Any) -> str | None:
    return value.strip() if isinstance(value, str) and value.strip() else None
