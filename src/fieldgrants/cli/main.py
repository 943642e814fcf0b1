#!/usr/bin/env python3
"""
field-grants CLI.

Usage:
    fieldgrants fields User --sdl schema.graphql --allowed-type User --allowed-type AuthData
    fieldgrants fields Person --service person=http://person:8002 --max-depth 3
    fieldgrants viewable User --group admins --group support --grants-url http://grants:8010
    fieldgrants serve --sdl schema.graphql --port 8020
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from ..config import DEFAULT_CONFIG_PATH, Settings, build_remote_authority, load_config
from ..core.errors import FieldGrantsError
from ..fields.collector import FieldPathCollector
from ..grants.remote import HttpGrantsClient
from ..grants.resolver import PermissionResolver
from ..messaging.client import close_redis, init_redis
from ..schema.discovery import ServiceSchemaProvider
from ..schema.graph import SchemaGraphProvider
from ..schema.graphql_schema import GraphQLSchemaProvider

CLI_ERRORS = (FieldGrantsError, ValueError, OSError, yaml.YAMLError)


def _parse_services(values: List[str]) -> dict[str, str]:
    services = {}
    for value in values:
        name, sep, url = value.partition("=")
        if not sep or not name or not url:
            raise ValueError(f"Invalid --service {value!r}, expected NAME=URL")
        services[name] = url
    return services


def _build_provider(args: argparse.Namespace, settings: Settings) -> SchemaGraphProvider:
    """Schema provider from --sdl, --service, or SCHEMA_SERVICES settings."""
    if args.sdl:
        return GraphQLSchemaProvider.from_sdl(Path(args.sdl).read_text())

    services = _parse_services(args.service) if args.service else settings.SCHEMA_SERVICES
    if not services:
        raise ValueError("No schema source: pass --sdl FILE or --service NAME=URL")
    provider = ServiceSchemaProvider(services)
    asyncio.run(provider.refresh())
    return provider


def _build_collector(args: argparse.Namespace, settings: Settings) -> FieldPathCollector:
    collector = FieldPathCollector(_build_provider(args, settings), settings.traversal_config())
    collector.configure(
        max_depth=args.max_depth,
        allowed_types=args.allowed_type or None,
        debug=True if args.debug else None,
    )
    return collector


def cmd_fields(args: argparse.Namespace) -> int:
    """Print field paths reachable from an entity."""
    try:
        settings = load_config(args.config)
        collector = _build_collector(args, settings)
        paths = collector.get_field_paths(args.entity)
    except CLI_ERRORS as e:
        print(f"Error: {e}")
        return 1

    if not paths:
        print(f"No field paths for {args.entity} (unknown entity or not in allowed types)")
        return 0

    for path in sorted(paths):
        print(path)
    return 0


async def _viewable(args: argparse.Namespace, settings: Settings) -> set[str]:
    if args.grants_url:
        remote = HttpGrantsClient(args.grants_url, timeout=settings.HTTP_TIMEOUT)
    else:
        remote = build_remote_authority(settings)
        if settings.REDIS_URL and not settings.GRANTS_SERVICE_URL:
            await init_redis(settings.REDIS_URL)

    try:
        resolver = PermissionResolver.from_authorities(remote=remote)
        return await resolver.get_viewable_fields(args.group, args.entity)
    finally:
        if isinstance(remote, HttpGrantsClient):
            await remote.close()
        await close_redis()


def cmd_viewable(args: argparse.Namespace) -> int:
    """Print field paths the given groups may view."""
    try:
        settings = load_config(args.config)
        fields = asyncio.run(_viewable(args, settings))
    except CLI_ERRORS as e:
        print(f"Error: {e}")
        return 1

    for path in sorted(fields):
        print(path)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the field-grants HTTP API."""
    import uvicorn

    from ..api.app import create_app

    try:
        settings = load_config(args.config)
        collector = _build_collector(args, settings)
    except CLI_ERRORS as e:
        print(f"Error: {e}")
        return 1

    remote = build_remote_authority(settings)
    resolver = PermissionResolver.from_authorities(remote=remote) if remote is not None else None

    async def connect_redis():
        if settings.REDIS_URL and not settings.GRANTS_SERVICE_URL:
            await init_redis(settings.REDIS_URL)

    app = create_app(
        collector,
        resolver,
        warm_up=sorted(collector.config.allowed_types),
        on_startup=connect_redis,
        on_shutdown=close_redis,
    )
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def _add_schema_args(parser: argparse.ArgumentParser):
    parser.add_argument("--sdl", help="GraphQL SDL file")
    parser.add_argument("--service", action="append", default=[], help="Schema service NAME=URL (repeatable)")
    parser.add_argument("--max-depth", type=int, help="Maximum field path depth")
    parser.add_argument("--allowed-type", action="append", default=[], help="Traversable type (repeatable)")
    parser.add_argument("--debug", action="store_true", help="Verbose traversal logging")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="fieldgrants",
        description="Field path discovery and field-level grants lookup",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="YAML config file")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    fields_parser = subparsers.add_parser("fields", help="List field paths of an entity")
    fields_parser.add_argument("entity", help="Entity type name")
    _add_schema_args(fields_parser)

    viewable_parser = subparsers.add_parser("viewable", help="List fields viewable by groups")
    viewable_parser.add_argument("entity", help="Entity type name")
    viewable_parser.add_argument("--group", action="append", default=[], help="Group id (repeatable)")
    viewable_parser.add_argument("--grants-url", help="Grants service base URL")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    _add_schema_args(serve_parser)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind host")
    serve_parser.add_argument("--port", type=int, default=8020, help="Bind port")

    return parser


def app(args: Optional[List[str]] = None) -> int:
    """Main CLI application."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 0

    logging.basicConfig(level=logging.DEBUG if getattr(parsed, "debug", False) else logging.INFO)

    commands = {
        "fields": cmd_fields,
        "viewable": cmd_viewable,
        "serve": cmd_serve,
    }

    handler = commands.get(parsed.command)
    if handler:
        return handler(parsed)

    parser.print_help()
    return 1


def main() -> None:
    """Entry point for CLI."""
    sys.exit(app())


if __name__ == "__main__":
    main()
