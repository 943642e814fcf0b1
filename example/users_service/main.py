"""
Users service - minimal field-grants example.

Serves the field paths of its own GraphQL schema and resolves viewable
fields through the grants service.

Usage:
    FIELD_GRANTS_GRANTS_SERVICE_URL=http://grants:8010 uvicorn main:app --port 8002
"""

from pathlib import Path

from fieldgrants import (
    FieldPathCollector,
    GraphQLSchemaProvider,
    PermissionResolver,
    build_remote_authority,
    create_app,
    load_config,
)

settings = load_config(Path(__file__).with_name("fieldgrants.yaml"))

provider = GraphQLSchemaProvider.from_sdl(Path(__file__).with_name("schema.graphql").read_text())
collector = FieldPathCollector(provider, settings.traversal_config())
resolver = PermissionResolver.from_authorities(remote=build_remote_authority(settings))

app = create_app(
    collector,
    resolver,
    title="Users Service",
    warm_up=settings.ALLOWED_TYPES,
)
