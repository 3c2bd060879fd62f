from __future__ import annotations

import string
from unittest.mock import MagicMock

import pytest

from errors import HeroNotFound, InvalidArgument, NotFoundInCatalog, UpstreamUnavailable
from hero_cache import HeroCatalog
from hero_service import HeroQueryService
from models import CatalogState, Hero


def _hero(hero_id: str, name: str, alignment: str = "") -> Hero:
    return Hero.from_payload({"id": hero_id, "name": name, "biography": {"alignment": alignment}})


def _letter_results(letter: str) -> list[Hero]:
    return {
        "b": [_hero("63", "Batgirl", "good"), _hero("60", "Bane", "bad")],
        "s": [_hero("620", "Spider-Man", "good")],
    }.get(letter, [])


@pytest.fixture()
def client() -> MagicMock:
    mock = MagicMock()
    mock.fetch_by_letter.side_effect = _letter_results
    return mock


@pytest.fixture()
def service(client: MagicMock) -> HeroQueryService:
    return HeroQueryService(HeroCatalog(client), client)


def test_list_heroes_without_filter_returns_everything(service: HeroQueryService) -> None:
    assert {hero.name for hero in service.list_heroes()} == {"Batgirl", "Bane", "Spider-Man"}


def test_list_heroes_filters_case_insensitively(service: HeroQueryService) -> None:
    assert [hero.name for hero in service.list_heroes("BAD")] == ["Bane"]


def test_list_heroes_unknown_alignment_returns_empty(service: HeroQueryService, client: MagicMock) -> None:
    assert service.list_heroes("chaotic") == []
    assert client.fetch_by_letter.call_count == 26


def test_list_heroes_returns_empty_when_upstream_is_down() -> None:
    client = MagicMock()
    client.fetch_by_letter.side_effect = UpstreamUnavailable("down")
    service = HeroQueryService(HeroCatalog(client), client)

    assert service.list_heroes() == []
    assert service.catalog_stats()["sweep_failure_count"] == 26


def test_search_by_name_matches_substring(service: HeroQueryService) -> None:
    names = [hero.name for hero in service.search_by_name("man")]

    assert names == ["Spider-Man"]


def test_search_by_name_raises_when_nothing_matches(service: HeroQueryService) -> None:
    with pytest.raises(NotFoundInCatalog) as excinfo:
        service.search_by_name("Hulk")

    assert excinfo.value.query == "hulk"


@pytest.mark.parametrize("name", ["", None])
def test_search_by_name_rejects_empty_input(service: HeroQueryService, client: MagicMock, name) -> None:
    with pytest.raises(InvalidArgument):
        service.search_by_name(name)

    client.fetch_by_letter.assert_not_called()
    client.fetch_by_id.assert_not_called()


def test_search_by_name_does_not_trim_the_term(service: HeroQueryService) -> None:
    with pytest.raises(NotFoundInCatalog) as excinfo:
        service.search_by_name(" man")

    assert excinfo.value.query == " man"


def test_search_by_name_whitespace_term_is_searched(service: HeroQueryService, client: MagicMock) -> None:
    with pytest.raises(NotFoundInCatalog):
        service.search_by_name("   ")

    assert client.fetch_by_letter.call_count == 26


def test_get_by_id_always_calls_upstream(service: HeroQueryService, client: MagicMock) -> None:
    service.list_heroes()
    catalog_size = service.catalog_stats()["hero_count"]
    client.fetch_by_id.return_value = _hero("42", "Bizarro", "neutral")

    hero = service.get_by_id(42)

    assert hero.name == "Bizarro"
    client.fetch_by_id.assert_called_once_with("42")
    assert service.catalog_stats()["hero_count"] == catalog_size
    assert client.fetch_by_letter.call_count == 26


def test_get_by_id_does_not_trigger_sweep(service: HeroQueryService, client: MagicMock) -> None:
    client.fetch_by_id.return_value = _hero("620", "Spider-Man")

    service.get_by_id("620")

    client.fetch_by_letter.assert_not_called()
    assert service.catalog_stats()["state"] == CatalogState.EMPTY.value


def test_get_by_id_propagates_not_found(service: HeroQueryService, client: MagicMock) -> None:
    client.fetch_by_id.side_effect = HeroNotFound("9999")

    with pytest.raises(HeroNotFound):
        service.get_by_id("9999")


def test_get_by_id_rejects_blank_id(service: HeroQueryService, client: MagicMock) -> None:
    with pytest.raises(InvalidArgument):
        service.get_by_id(" ")

    client.fetch_by_id.assert_not_called()


def test_warm_up_and_stats(service: HeroQueryService, client: MagicMock) -> None:
    assert service.catalog_stats() == {
        "state": "empty",
        "hero_count": 0,
        "sweep_failure_count": 0,
        "failed_letters": [],
        "duplicates_skipped": 0,
    }

    service.warm_up()
    stats = service.catalog_stats()

    assert stats["state"] == "ready"
    assert stats["hero_count"] == 3
    assert [call.args[0] for call in client.fetch_by_letter.call_args_list] == list(string.ascii_lowercase)
