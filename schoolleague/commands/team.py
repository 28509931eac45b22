"""Team and roster CLI commands."""

import click
from flask.cli import with_appcontext

from schoolleague.commands import acting_user_id, report_error
from schoolleague.errors import LeagueError
from schoolleague.services.audit import log_admin_action
from schoolleague.services.roster import (
    assign_student_to_team,
    remove_student_from_team,
    set_team_captain,
)
from schoolleague.services.schools import create_team


@click.group('team')
def team_commands():
    """Team and roster commands."""
    pass


@team_commands.command('create')
@click.option('--as', 'actor_email', required=True, help='Acting user email')
@click.option('--school', 'school_id', required=True, help='Owning school id')
@click.option('--name', required=True, help='Team name')
@with_appcontext
def create(actor_email, school_id, name):
    """Create a team at its school's current tier."""
    actor_id = acting_user_id(actor_email)
    try:
        team = create_team(actor_id, school_id, name)
    except LeagueError as e:
        report_error(e)
        return

    log_admin_action(actor_id, 'team_created', 'team', team.id, {'school_id': school_id})
    click.echo(click.style('Team created successfully!', fg='green'))
    click.echo(f'  Name: {team.name}')
    click.echo(f'  Tier: {team.tier.value}')
    click.echo(f'  ID: {team.id}')


@team_commands.command('add-player')
@click.option('--as', 'actor_email', required=True, help='Acting user email')
@click.argument('team_id')
@click.argument('player_id')
@with_appcontext
def add_player(actor_email, team_id, player_id):
    """Add a player to a team."""
    actor_id = acting_user_id(actor_email)
    try:
        assign_student_to_team(actor_id, player_id, team_id)
    except LeagueError as e:
        report_error(e)
        return

    log_admin_action(actor_id, 'team_member_added', 'team', team_id, {'player_id': player_id})
    click.echo(click.style('Player added to team.', fg='green'))


@team_commands.command('remove-player')
@click.option('--as', 'actor_email', required=True, help='Acting user email')
@click.argument('team_id')
@click.argument('player_id')
@with_appcontext
def remove_player(actor_email, team_id, player_id):
    """Remove a player from a team."""
    actor_id = acting_user_id(actor_email)
    try:
        was_captain = remove_student_from_team(actor_id, player_id, team_id)
    except LeagueError as e:
        report_error(e)
        return

    log_admin_action(actor_id, 'team_member_removed', 'team', team_id, {
        'player_id': player_id,
        'was_captain': was_captain,
    })
    click.echo(click.style('Player removed from team.', fg='green'))
    if was_captain:
        click.echo('  Team has no captain now.')


@team_commands.command('captain')
@click.option('--as', 'actor_email', required=True, help='Acting user email')
@click.argument('team_id')
@click.argument('player_id', required=False)
@with_appcontext
def captain(actor_email, team_id, player_id):
    """Set the team captain (omit PLAYER_ID to clear it)."""
    actor_id = acting_user_id(actor_email)
    try:
        set_team_captain(actor_id, team_id, player_id)
    except LeagueError as e:
        report_error(e)
        return

    log_admin_action(actor_id, 'team_captain_set', 'team', team_id, {'player_id': player_id})
    click.echo(click.style('Captain updated.', fg='green'))
