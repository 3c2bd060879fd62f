"""CLI entrypoint for querying the aggregated superhero catalog."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv

from errors import InvalidArgument, NotFound, UpstreamFailure
from hero_cache import HeroCatalog
from hero_service import HeroQueryService
from superhero_client import REQUEST_TIMEOUT_SECONDS, SUPERHERO_API_BASE_URL, SuperheroClient

EXIT_NOT_FOUND = 1
EXIT_INVALID_ARGUMENT = 2
EXIT_UPSTREAM_FAILURE = 3


@dataclass(frozen=True, slots=True)
class Settings:
    api_key: str
    base_url: str = SUPERHERO_API_BASE_URL
    timeout_seconds: float = REQUEST_TIMEOUT_SECONDS
    sweep_workers: int = 1
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read configuration from the environment (after .env has been loaded)."""
    api_key = os.getenv("SUPERHERO_API_KEY")
    if not api_key:
        raise RuntimeError("SUPERHERO_API_KEY environment variable is required")

    return Settings(
        api_key=api_key,
        base_url=os.getenv("SUPERHERO_API_BASE_URL", SUPERHERO_API_BASE_URL),
        timeout_seconds=float(os.getenv("SUPERHERO_REQUEST_TIMEOUT", str(REQUEST_TIMEOUT_SECONDS))),
        sweep_workers=int(os.getenv("SUPERHERO_SWEEP_WORKERS", "1")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def build_service(settings: Settings) -> HeroQueryService:
    """Wire client -> catalog -> service for one process."""
    client = SuperheroClient(
        settings.api_key,
        base_url=settings.base_url,
        timeout_seconds=settings.timeout_seconds,
    )
    catalog = HeroCatalog(client, max_workers=settings.sweep_workers)
    return HeroQueryService(catalog, client)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Query the superhero catalog aggregated from superheroapi.com")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List every hero, optionally filtered by alignment")
    list_parser.add_argument("--alignment", default=None, help="good, bad or neutral (case-insensitive)")
    list_parser.add_argument("--sort-by-name", action="store_true", help="Sort the output by hero name")

    search_parser = subparsers.add_parser("search", help="Search cached heroes by name substring")
    search_parser.add_argument("name")

    get_parser = subparsers.add_parser("get", help="Fetch one hero directly from upstream by id")
    get_parser.add_argument("hero_id")

    subparsers.add_parser("stats", help="Populate the catalog and print sweep statistics")
    return parser.parse_args(argv)


def run(args: argparse.Namespace, service: HeroQueryService) -> int:
    """Execute one CLI command and return the process exit code."""
    try:
        if args.command == "list":
            heroes = service.list_heroes(args.alignment)
            if args.sort_by_name:
                heroes = sorted(heroes, key=lambda hero: hero.name.lower())
            _emit([hero.to_dict() for hero in heroes])
        elif args.command == "search":
            _emit([hero.to_dict() for hero in service.search_by_name(args.name)])
        elif args.command == "get":
            _emit(service.get_by_id(args.hero_id).to_dict())
        elif args.command == "stats":
            service.warm_up()
            _emit(service.catalog_stats())
    except InvalidArgument as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INVALID_ARGUMENT
    except NotFound as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_NOT_FOUND
    except UpstreamFailure as exc:
        logging.error("Error fetching superhero data: %s payload=%s", exc, exc.payload)
        print("Error fetching superhero data.", file=sys.stderr)
        return EXIT_UPSTREAM_FAILURE
    return 0


def _emit(data: list[dict[str, Any]] | dict[str, Any]) -> None:
    json.dump(data, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute one command."""
    load_dotenv()
    args = parse_args(argv)
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    return run(args, build_service(settings))


if __name__ == "__main__":
    sys.exit(main())
