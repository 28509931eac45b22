"""create_league_governance_tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-18 09:12:44.102311

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None

TIERS = ('beginner', 'amateur', 'regular', 'professional', 'legendary', 'national')
ROLES = ('admin', 'school_admin', 'coach', 'judge', 'player', 'sponsor')


def _timestamps():
    return [
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade():
    op.create_table(
        'school',
        *_timestamps(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('motto', sa.Text(), nullable=True),
        sa.Column('tier', sa.Enum(*TIERS, name='school_tier', native_enum=False), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'user',
        *_timestamps(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.Enum(*ROLES, name='user_role', native_enum=False), nullable=False),
        sa.Column('owned_school_id', sa.String(length=36), nullable=True),
        sa.Column('student_school_id', sa.String(length=36), nullable=True),
        sa.ForeignKeyConstraint(['owned_school_id'], ['school.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['student_school_id'], ['school.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)
    op.create_index('ix_user_owned_school_id', 'user', ['owned_school_id'], unique=False)
    op.create_index('ix_user_student_school_id', 'user', ['student_school_id'], unique=False)

    op.create_table(
        'coach',
        *_timestamps(),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('school_id', sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['school_id'], ['school.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index('ix_coach_school_id', 'coach', ['school_id'], unique=False)

    op.create_table(
        'team',
        *_timestamps(),
        sa.Column('school_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('tier', sa.Enum(*TIERS, name='team_tier', native_enum=False), nullable=False),
        sa.Column('captain_id', sa.String(length=36), nullable=True),
        sa.ForeignKeyConstraint(['school_id'], ['school.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['captain_id'], ['user.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_team_school_id', 'team', ['school_id'], unique=False)
    op.create_index('ix_team_captain_id', 'team', ['captain_id'], unique=False)

    op.create_table(
        'team_member',
        *_timestamps(),
        sa.Column('team_id', sa.String(length=36), nullable=False),
        sa.Column('player_id', sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['team.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['player_id'], ['user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'player_id', name='uq_team_member_team_player'),
    )
    op.create_index('ix_team_member_team_id', 'team_member', ['team_id'], unique=False)
    op.create_index('ix_team_member_player_id', 'team_member', ['player_id'], unique=False)

    op.create_table(
        'match',
        *_timestamps(),
        sa.Column('home_team_id', sa.String(length=36), nullable=True),
        sa.Column('away_team_id', sa.String(length=36), nullable=True),
        sa.ForeignKeyConstraint(['home_team_id'], ['team.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['away_team_id'], ['team.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_match_teams', 'match', ['home_team_id', 'away_team_id'], unique=False)

    op.create_table(
        'audit_log',
        *_timestamps(),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('action', sa.String(length=128), nullable=False),
        sa.Column('entity_type', sa.String(length=128), nullable=False),
        sa.Column('entity_id', sa.String(length=36), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_log_user_id', 'audit_log', ['user_id'], unique=False)


def downgrade():
    op.drop_index('ix_audit_log_user_id', table_name='audit_log')
    op.drop_table('audit_log')
    op.drop_index('ix_match_teams', table_name='match')
    op.drop_table('match')
    op.drop_index('ix_team_member_player_id', table_name='team_member')
    op.drop_index('ix_team_member_team_id', table_name='team_member')
    op.drop_table('team_member')
    op.drop_index('ix_team_captain_id', table_name='team')
    op.drop_index('ix_team_school_id', table_name='team')
    op.drop_table('team')
    op.drop_index('ix_coach_school_id', table_name='coach')
    op.drop_table('coach')
    op.drop_index('ix_user_student_school_id', table_name='user')
    op.drop_index('ix_user_owned_school_id', table_name='user')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_table('user')
    op.drop_table('school')
