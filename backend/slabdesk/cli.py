# Overview: Flask CLI command group for buying desk bootstrap, inspection, and maintenance.

# backend/slabdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to "slabdesk:create_app" (PowerShell: $env:FLASK_APP="slabdesk:create_app").
# - Use: python -m flask <group> <command> [options]
#
# Buying desk:
# - python -m flask buying-desk init-db
#   Create all tables that do not exist yet (local/dev; use "flask db upgrade" in production).
# - python -m flask buying-desk reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask buying-desk list-sessions --user-id <uuid> [--archived]
#   List a user's sessions with cart totals.
# - python -m flask buying-desk recalculate-profits --user-id <uuid>
#   Backfill market value / expected profit for cart items missing it.

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import buy_session_service, checkout_service


@click.group('buying-desk')
def buying_desk_group():
    """Buying desk bootstrap and maintenance commands."""


@buying_desk_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables from the current models."""
    db.create_all()
    click.echo("PASS Database tables created")


@buying_desk_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("This will DELETE ALL DATA. Continue?", abort=True)

    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset complete")


@buying_desk_group.command('list-sessions')
@click.option('--user-id', required=True, help='Owner user id (Supabase sub)')
@click.option('--archived', is_flag=True, help='List archived sessions instead of active ones')
@with_appcontext
def list_sessions(user_id, archived):
    """List a user's buying sessions."""
    sessions = buy_session_service.list_sessions(user_id, archived=archived)

    if not sessions:
        click.echo("No sessions found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'Number':<14} {'Status':<12} {'Seller':<24} {'Items':>6} {'Cart':>6} {'Total':>12} {'Profit':>12}")
    click.echo("="*100)

    for s in sessions:
        seller = s["seller"]["name"] if "seller" in s else "-"
        click.echo(
            f"{s['sessionNumber']:<14} {s['status']:<12} {seller[:24]:<24} "
            f"{s['assetCount']:>6} {s['cartCount']:>6} "
            f"{s['totalValue']:>12.2f} {s['expectedProfit']:>12.2f}"
        )

    click.echo("="*100 + "\n")


@buying_desk_group.command('recalculate-profits')
@click.option('--user-id', required=True, help='Owner user id (Supabase sub)')
@with_appcontext
def recalculate_profits(user_id):
    """Backfill expected profit for cart items missing it."""
    updated = checkout_service.recalculate_profits(user_id)
    click.echo(f"PASS Recalculated expected profit for {updated} cart item(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(buying_desk_group)
