"""School and tier CLI commands."""

import click
from flask.cli import with_appcontext
from sqlalchemy import func, select

from schoolleague.commands import acting_user_id, fail, report_error
from schoolleague.errors import LeagueError
from schoolleague.extensions import db
from schoolleague.models import School, Team, Tier, TIER_ORDER
from schoolleague.services.audit import log_admin_action, log_bulk_tier_change, log_tier_change
from schoolleague.services.authorization import require_admin
from schoolleague.services.schools import create_school
from schoolleague.services.tiers import apply_transition, bulk_apply_transition

TIER_CHOICES = [t.value for t in TIER_ORDER]


@click.group('school')
def school_commands():
    """School and league tier commands."""
    pass


@school_commands.command('create')
@click.option('--as', 'actor_email', required=True, help='Acting admin email')
@click.option('--name', required=True, help='School name')
@click.option('--location', help='School location')
@click.option('--motto', help='School motto')
@click.option('--tier', type=click.Choice(TIER_CHOICES), help='Initial tier (defaults to DEFAULT_SCHOOL_TIER)')
@with_appcontext
def create(actor_email, name, location, motto, tier):
    """Create a school."""
    actor_id = acting_user_id(actor_email)
    try:
        school = create_school(actor_id, name, location=location, motto=motto, tier=tier)
    except LeagueError as e:
        report_error(e)
        return

    log_admin_action(actor_id, 'school_created', 'school', school.id, {'name': school.name})
    click.echo(click.style('School created successfully!', fg='green'))
    click.echo(f'  Name: {school.name}')
    click.echo(f'  Tier: {school.tier.value}')
    click.echo(f'  ID: {school.id}')


@school_commands.command('list')
@click.option('--tier', type=click.Choice(TIER_CHOICES), help='Only schools at this tier')
@with_appcontext
def list_schools(tier):
    """List schools with their tier and team count."""
    stmt = (
        select(School, func.count(Team.id))
        .outerjoin(Team, Team.school_id == School.id)
        .group_by(School.id)
        .order_by(School.name)
    )
    if tier:
        stmt = stmt.where(School.tier == Tier(tier))

    rows = db.session.execute(stmt).all()
    if not rows:
        click.echo('No schools found.')
        return

    for school, team_count in rows:
        click.echo(f'{school.name}  [{school.tier.value}]  teams={team_count}  ID: {school.id}')


def _transition(actor_email, school_id, transition, action):
    actor_id = acting_user_id(actor_email)
    try:
        require_admin(actor_id, f'{action} schools')
        change = apply_transition(school_id, transition)
    except LeagueError as e:
        report_error(e)
        return

    log_tier_change(actor_id, change, action=f'school_{action}')
    click.echo(click.style(
        f'{change.school_name}: {change.old_tier.value} -> {change.new_tier.value} '
        f'({change.teams_updated} teams updated)',
        fg='green',
    ))


@school_commands.command('promote')
@click.option('--as', 'actor_email', required=True, help='Acting admin email')
@click.argument('school_id')
@with_appcontext
def promote(actor_email, school_id):
    """Promote a school one tier."""
    _transition(actor_email, school_id, 'promote', 'promote')


@school_commands.command('relegate')
@click.option('--as', 'actor_email', required=True, help='Acting admin email')
@click.argument('school_id')
@with_appcontext
def relegate(actor_email, school_id):
    """Relegate a school one tier."""
    _transition(actor_email, school_id, 'relegate', 'relegate')


@school_commands.command('set-tier')
@click.option('--as', 'actor_email', required=True, help='Acting admin email')
@click.argument('school_id')
@click.argument('tier')
@with_appcontext
def set_tier(actor_email, school_id, tier):
    """Override a school's tier."""
    _transition(actor_email, school_id, tier, 'set_tier')


@school_commands.command('bulk')
@click.option('--as', 'actor_email', required=True, help='Acting admin email')
@click.option('--action', 'direction', type=click.Choice(['promote', 'relegate']), required=True)
@click.option('--tier', type=click.Choice(TIER_CHOICES), help='Only schools currently at this tier')
@click.option('--strict', is_flag=True, help='Exit non-zero if any school failed')
@with_appcontext
def bulk(actor_email, direction, tier, strict):
    """Promote or relegate every school (optionally only one tier)."""
    actor_id = acting_user_id(actor_email)
    try:
        require_admin(actor_id, f'bulk {direction} schools')
        result = bulk_apply_transition(direction, tier_filter=tier)
    except LeagueError as e:
        report_error(e)
        return

    log_bulk_tier_change(actor_id, result)
    for change in result.processed:
        click.echo(f'  {change.school_name}: {change.old_tier.value} -> {change.new_tier.value}')
    for item in result.failed:
        click.echo(click.style(f'  {item.school_name}: failed ({item.reason})', fg='yellow'))

    summary = result.as_dict()['summary']
    click.echo(
        f"Processed: {summary['processed']}  Skipped: {summary['skipped']}  Failed: {summary['failed']}"
    )
    if strict and not result.ok:
        fail('Error: bulk transition finished with failures')
