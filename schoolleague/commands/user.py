"""User and role management CLI commands."""

import json

import click
from flask.cli import with_appcontext
from sqlalchemy import select

from schoolleague.commands import acting_user_id, fail, report_error
from schoolleague.errors import LeagueError
from schoolleague.extensions import db
from schoolleague.models import User, UserRole
from schoolleague.services.audit import log_admin_action, log_role_change
from schoolleague.services.authorization import can_manage
from schoolleague.services.capabilities import ResourceClass, permissions_for
from schoolleague.services.roles import (
    change_role,
    change_user_school,
    create_user,
    delete_user,
    remove_from_role,
)

ROLE_CHOICES = [r.value for r in UserRole]


@click.group('user')
def user_commands():
    """User management commands."""
    pass


@user_commands.command('bootstrap-admin')
@click.option('--email', required=True, help='Admin email')
@click.option('--password', required=True, help='Admin password')
@click.option('--name', 'full_name', default='League Admin', show_default=True)
@with_appcontext
def bootstrap_admin(email, password, full_name):
    """Create the first league admin (only when no admin exists)."""
    existing = db.session.execute(
        select(User.id).where(User.role == UserRole.ADMIN).limit(1)
    ).scalar_one_or_none()
    if existing is not None:
        fail('Error: An admin already exists; use "user create --as" instead')
        return

    user = User(email=email.strip().lower(), full_name=full_name, role=UserRole.ADMIN)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    log_admin_action(user.id, 'admin_bootstrapped', 'user', user.id)
    click.echo(click.style('Admin created successfully!', fg='green'))
    click.echo(f'  Email: {user.email}')
    click.echo(f'  ID: {user.id}')


@user_commands.command('create')
@click.option('--as', 'actor_email', required=True, help='Acting admin email')
@click.option('--email', required=True, help='User email')
@click.option('--password', required=True, help='User password')
@click.option('--name', 'full_name', required=True, help='Full name')
@click.option('--role', type=click.Choice(ROLE_CHOICES), default=UserRole.PLAYER.value, show_default=True)
@click.option('--school', 'school_id', help='School id (required for coach and school_admin)')
@with_appcontext
def create(actor_email, email, password, full_name, role, school_id):
    """Create a user."""
    actor_id = acting_user_id(actor_email)
    try:
        user = create_user(actor_id, email, password, full_name, role=role, school_id=school_id)
    except LeagueError as e:
        report_error(e)
        return

    log_admin_action(actor_id, 'user_created', 'user', user.id, {'role': role, 'school_id': school_id})
    click.echo(click.style('User created successfully!', fg='green'))
    click.echo(f'  Email: {user.email}')
    click.echo(f'  Role: {role}')
    click.echo(f'  ID: {user.id}')


@user_commands.command('change-role')
@click.option('--as', 'actor_email', required=True, help='Acting admin email')
@click.argument('user_id')
@click.argument('role', type=click.Choice(ROLE_CHOICES))
@click.option('--school', 'school_id', help='School to coach or own')
@with_appcontext
def change_role_command(actor_email, user_id, role, school_id):
    """Change a user's role."""
    actor_id = acting_user_id(actor_email)
    try:
        change = change_role(actor_id, user_id, role, school_id)
    except LeagueError as e:
        report_error(e)
        return

    log_role_change(actor_id, change)
    old = change.old_role.value if change.old_role else 'unknown'
    click.echo(click.style(f'{change.email}: {old} -> {change.new_role.value}', fg='green'))


@user_commands.command('remove-role')
@click.option('--as', 'actor_email', required=True, help='Acting admin email')
@click.argument('user_id')
@with_appcontext
def remove_role_command(actor_email, user_id):
    """Demote a user to player."""
    actor_id = acting_user_id(actor_email)
    try:
        change = remove_from_role(actor_id, user_id)
    except LeagueError as e:
        report_error(e)
        return

    log_role_change(actor_id, change)
    click.echo(click.style(f'{change.email} is now a player', fg='green'))


@user_commands.command('delete')
@click.option('--as', 'actor_email', required=True, help='Acting admin email')
@click.argument('user_id')
@click.confirmation_option(prompt='Delete this user?')
@with_appcontext
def delete_command(actor_email, user_id):
    """Delete a user and their coach link and team memberships."""
    actor_id = acting_user_id(actor_email)
    try:
        change = delete_user(actor_id, user_id)
    except LeagueError as e:
        report_error(e)
        return

    log_role_change(actor_id, change)
    click.echo(click.style(f'Deleted {change.email}', fg='green'))
    if change.captaincies_cleared:
        click.echo(f'  Captaincy cleared on {len(change.captaincies_cleared)} team(s)')


@user_commands.command('move-school')
@click.option('--as', 'actor_email', required=True, help='Acting admin email')
@click.argument('user_id')
@click.argument('school_id')
@with_appcontext
def move_school(actor_email, user_id, school_id):
    """Move a user's school (owned, coached or enrolled, by role)."""
    actor_id = acting_user_id(actor_email)
    try:
        user = change_user_school(actor_id, user_id, school_id)
    except LeagueError as e:
        report_error(e)
        return

    log_admin_action(actor_id, 'user_school_changed', 'user', user.id, {'school_id': school_id})
    click.echo(click.style(f'{user.email} moved to school {school_id}', fg='green'))


@user_commands.command('can-manage')
@click.option('--as', 'actor_email', required=True, help='User to check')
@click.argument('resource_class', type=click.Choice([r.value for r in ResourceClass]))
@click.argument('resource_id')
@with_appcontext
def can_manage_command(actor_email, resource_class, resource_id):
    """Check whether a user may manage a resource."""
    allowed = can_manage(acting_user_id(actor_email), resource_class, resource_id)
    click.echo(json.dumps({
        'allowed': allowed,
        'resource_type': resource_class,
        'resource_id': resource_id,
    }))


@user_commands.command('permissions')
@click.argument('email')
@with_appcontext
def permissions(email):
    """Print a user's permission summary as JSON."""
    try:
        summary = permissions_for(acting_user_id(email))
    except LeagueError as e:
        report_error(e)
        return
    click.echo(json.dumps(summary, indent=2))
