"""CLI commands for the school league governance core."""

from __future__ import annotations

import click
from sqlalchemy import select

from schoolleague.errors import LeagueError
from schoolleague.extensions import db
from schoolleague.models import User


def acting_user_id(email: str) -> str:
    """Resolve the ``--as`` e-mail to a user id or abort the command."""
    user_id = db.session.execute(
        select(User.id).where(User.email == email.strip().lower())
    ).scalar_one_or_none()
    if user_id is None:
        fail(f'Error: No user with email "{email}"')
    return user_id


def fail(message: str) -> None:
    click.echo(click.style(message, fg='red'), err=True)
    click.get_current_context().exit(1)


def report_error(error: LeagueError) -> None:
    details = ', '.join(f'{k}={v}' for k, v in error.context.items() if v is not None)
    fail(f'Error: {type(error).__name__} ({details})')


def register_commands(app):
    """Register all CLI command groups with the Flask app."""
    from .school import school_commands
    from .team import team_commands
    from .user import user_commands

    app.cli.add_command(school_commands)
    app.cli.add_command(team_commands)
    app.cli.add_command(user_commands)
