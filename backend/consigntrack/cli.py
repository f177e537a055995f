# Overview: Flask CLI command groups for bootstrap, user whitelist and tenant maintenance.

# backend/consigntrack/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to consigntrack (PowerShell: $env:FLASK_APP="consigntrack").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables that do not exist yet.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User whitelist:
# - python -m flask users add <uid> <email> [--role admin|staff]
# - python -m flask users list
# - python -m flask users deactivate <uid>
#
# Tenant maintenance:
# - python -m flask tenants reset <tenant_id> [--batch-size 500] --yes
#   Batched delete of every store, product and ledger row of one tenant.

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import maintenance_service, user_service
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables (idempotent)."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('users')
def users_group():
    """Login whitelist commands."""


@users_group.command('add')
@click.argument('uid')
@click.argument('email')
@click.option('--role', type=click.Choice(user_service.VALID_ROLES), default=user_service.ROLE_STAFF)
@with_appcontext
def add_user(uid, email, role):
    """Whitelist (or re-activate) a user."""
    try:
        user = user_service.whitelist_user(uid, email, role)
    except ValidationError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"PASS {user.id} <{user.email}> role={user.role}")


@users_group.command('list')
@with_appcontext
def list_users():
    """List whitelisted users."""
    users = user_service.list_users()
    if not users:
        click.echo("No users.")
        return
    for user in users:
        status = "active" if user.active else "inactive"
        click.echo(f"{user.id:<32} {user.email:<32} {user.role:<6} {status}")


@users_group.command('deactivate')
@click.argument('uid')
@with_appcontext
def deactivate_user(uid):
    """Block a user from signing in."""
    try:
        user_service.deactivate_user(uid)
    except ValidationError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"PASS {uid} deactivated")


@click.group('tenants')
def tenants_group():
    """Tenant maintenance commands."""


@tenants_group.command('reset')
@click.argument('tenant_id')
@click.option('--batch-size', type=int, default=None, help='Rows deleted per commit (default RESET_BATCH_SIZE)')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_tenant(tenant_id, batch_size, yes):
    """Delete all tenant-scoped data for TENANT_ID."""
    if not yes:
        click.confirm(f"WARN This will DELETE all data of tenant {tenant_id}. Are you sure?", abort=True)

    summary = maintenance_service.reset_tenant_data(tenant_id, batch_size=batch_size)
    for table, count in summary.items():
        click.echo(f"{table:<24} {count}")
    click.echo("PASS Tenant reset complete.")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(tenants_group)
