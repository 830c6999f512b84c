# flask_app/cli.py
"""
Flask CLI commands for reference data and account management.
"""

import click
from flask.cli import with_appcontext

from flask_app.models import User, db
from flask_app.services.badge_service import BadgeService
from flask_app.utils.tokens import create_access_token


@click.command("seed-badges")
@with_appcontext
def seed_badges_command():
    """Insert the default badge catalog (idempotent)."""
    created = BadgeService.seed_default_badges()
    if created:
        click.echo(f"Created {created} badges.")
    else:
        click.echo("Badge catalog already up to date.")


@click.command("issue-token")
@click.argument("email")
@click.option("--minutes", type=int, default=None, help="Token lifetime in minutes.")
@with_appcontext
def issue_token_command(email, minutes):
    """Print a bearer token for an existing active user."""
    user = User.find_by_email(email)
    if user is None:
        raise click.ClickException(f"No user with email {email}")
    if not user.is_active:
        raise click.ClickException(f"User {email} is inactive")
    click.echo(create_access_token(user, expires_minutes=minutes))


@click.command("create-db")
@with_appcontext
def create_db_command():
    """Create all database tables."""
    db.create_all()
    click.echo("Database tables created.")


def register_cli(app):
    """Attach the project's commands to ``app.cli``"""
    for command in (seed_badges_command, issue_token_command, create_db_command):
        app.cli.add_command(command)


