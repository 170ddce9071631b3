# Overview: Flask CLI command groups for document bootstrap, tokens, permissions and maintenance.

# backend/bazaar/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Document store:
# - python -m flask docs init-db
#   Create the documents table (sql backend only; idempotent).
# - python -m flask docs seed fixtures.json
#   Write every {"<document path>": {...}} entry of a JSON file (overwrites).
# - python -m flask docs get organizations/org1/events/evt1/merchants/m1
#   Print one document as JSON.
# - python -m flask docs list organizations/org1/events/evt1/merchants
#   List document ids in a collection.
#
# Tokens (AUTH_BACKEND=signed only):
# - python -m flask tokens issue <uid> [--ttl 3600]
#   Print a bearer token for uid.
#
# Role and capability inspection:
# - python -m flask perms list [--role merchantOwner] [--category MERCHANTS]
#   List capabilities and the roles granting them.
#
# Maintenance:
# - python -m flask maintenance reset-daily-revenue [--batch-size 500]
#   Run the daily merchant/assistant counter reset now.

import json

import click
from flask import current_app
from flask.cli import with_appcontext

from .docstore import DocumentStoreError
from .docstore.base import validate_collection_path, validate_document_path
from .extensions import db, documents
from .permissions import (
    CAPABILITY_DEFINITIONS,
    CAPABILITY_ROLES,
    get_capabilities_by_category,
    get_capabilities_for_role,
    validate_role,
)
from .services import auth_service, maintenance_service
from .time_utils import from_json_safe, to_json_safe


def _echo_json(value) -> None:
    click.echo(json.dumps(to_json_safe(value), ensure_ascii=False, indent=2, sort_keys=True))


# =============================================================================
# DOCS
# =============================================================================

@click.group('docs')
def docs_group():
    """Document store bootstrap and inspection commands."""


@docs_group.command('init-db')
@with_appcontext
def init_db_cli():
    """Create the documents table for the sql backend."""
    if documents.store.backend_name != "sql":
        click.echo(f"SKIP Backend is {documents.store.backend_name}; nothing to create")
        return
    from . import models  # noqa: F401
    db.create_all()
    click.echo("PASS documents table ready")


@docs_group.command('seed')
@click.argument('json_file', type=click.File('r', encoding='utf-8'))
@with_appcontext
def seed_cli(json_file):
    """
    Write documents from a JSON file.

    The file maps document paths to document bodies. Strings such as
    "2025-01-01T00:00:00Z" are stored as timestamps.
    """
    try:
        payload = json.load(json_file)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON: {e}")
    if not isinstance(payload, dict):
        raise click.ClickException("Seed file must be a JSON object of {path: document}")

    store = documents.store
    written = 0
    for path, body in payload.items():
        if not isinstance(body, dict):
            raise click.ClickException(f"Document at {path} must be an object")
        try:
            store.set(validate_document_path(path), from_json_safe(body))
        except DocumentStoreError as e:
            raise click.ClickException(str(e))
        written += 1

    click.echo(f"PASS Wrote {written} documents")


@docs_group.command('get')
@click.argument('path')
@with_appcontext
def get_cli(path):
    """Print one document."""
    try:
        snapshot = documents.store.get(validate_document_path(path))
    except DocumentStoreError as e:
        raise click.ClickException(str(e))
    if not snapshot.exists:
        raise click.ClickException(f"Document not found: {path}")
    _echo_json(snapshot.to_dict())


@docs_group.command('list')
@click.argument('collection')
@with_appcontext
def list_cli(collection):
    """List document ids in a collection."""
    try:
        snapshots = documents.store.list_documents(validate_collection_path(collection))
    except DocumentStoreError as e:
        raise click.ClickException(str(e))

    for snapshot in snapshots:
        click.echo(snapshot.id)
    click.echo(f"\n Total: {len(snapshots)} documents\n")


# =============================================================================
# TOKENS
# =============================================================================

@click.group('tokens')
def tokens_group():
    """Local bearer token commands."""


@tokens_group.command('issue')
@click.argument('uid')
@click.option('--ttl', type=int, default=None, help='Lifetime in seconds (default TOKEN_TTL_SECONDS)')
@click.option('--org-id', default=None, help='Add an organizationId claim')
@click.option('--event-id', default=None, help='Add an eventId claim')
@with_appcontext
def issue_token_cli(uid, ttl, org_id, event_id):
    """Issue a signed bearer token for uid."""
    if current_app.config.get("AUTH_BACKEND") != "signed":
        raise click.ClickException("Tokens can only be issued with AUTH_BACKEND=signed")

    claims = {}
    if org_id:
        claims["organizationId"] = org_id
    if event_id:
        claims["eventId"] = event_id

    click.echo(auth_service.issue_token(uid, expires_in=ttl, extra_claims=claims))


# =============================================================================
# PERMS
# =============================================================================

@click.group('perms')
def perms_group():
    """Role and capability inspection commands."""


@perms_group.command('list')
@click.option('--role', help='Filter by role tag')
@click.option('--category', help='Filter by category')
def list_permissions_cli(role, category):
    """List capabilities, optionally filtered by role or category."""
    if role:
        if not validate_role(role):
            click.echo(f"FAIL Role '{role}' not found")
            return

        codes = get_capabilities_for_role(role)
        click.echo(f"\n{'='*80}")
        click.echo(f"Capabilities for role: {role}")
        click.echo(f"{'='*80}\n")
        for code in codes:
            click.echo(f"  {code}")
        click.echo(f"\n Total: {len(codes)} capabilities\n")

    elif category:
        caps = get_capabilities_by_category(category)
        click.echo(f"\n{'='*80}")
        click.echo(f"Capabilities in category: {category}")
        click.echo(f"{'='*80}\n")
        click.echo(f"{'Code':<32} {'Roles'}")
        click.echo("-"*80)
        for cap in caps:
            click.echo(f"{cap[0]:<32} {', '.join(CAPABILITY_ROLES[cap[0]])}")
        click.echo(f"\n Total: {len(caps)} capabilities\n")

    else:
        click.echo(f"\n{'='*80}")
        click.echo("All Capabilities")
        click.echo(f"{'='*80}\n")

        current_category = None
        for code, name, _description, cap_category in sorted(
            CAPABILITY_DEFINITIONS, key=lambda cap: (cap[3], cap[0])
        ):
            if cap_category != current_category:
                if current_category:
                    click.echo("")
                click.echo(f"CATEGORY {cap_category}")
                click.echo("-"*80)
                current_category = cap_category
            click.echo(f"  {code:<30} {name:<28} {', '.join(CAPABILITY_ROLES[code])}")

        click.echo(f"\n Total: {len(CAPABILITY_DEFINITIONS)} capabilities\n")


# =============================================================================
# MAINTENANCE
# =============================================================================

@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('reset-daily-revenue')
@click.option('--batch-size', type=int, default=None, help='Writes per batch (max 500)')
@with_appcontext
def reset_daily_revenue_cli(batch_size):
    """Zero daily merchant and assistant counters in every event."""
    try:
        summary = maintenance_service.reset_daily_revenue(batch_size=batch_size)
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo(
        f"PASS Reset {summary['totalMerchants']} merchants and {summary['totalAsists']} assistants "
        f"across {summary['totalOrgs']} organizations / {summary['totalEvents']} events "
        f"({summary['batchesCommitted']} batches)"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(docs_group)
    app.cli.add_command(tokens_group)
    app.cli.add_command(perms_group)
    app.cli.add_command(maintenance_group)
