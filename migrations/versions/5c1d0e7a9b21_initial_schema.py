"""initial_schema

Revision ID: 5c1d0e7a9b21
Revises:
Create Date: 2026-10-19 10:12:44.318201

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c1d0e7a9b21'
down_revision = None
branch_labels = None
depends_on = None


election_status = sa.Enum('upcoming', 'active', 'completed', 'cancelled', name='electionstatusenum')
candidate_status = sa.Enum('pending', 'approved', 'rejected', name='candidatestatusenum')
user_role = sa.Enum('admin', 'faculty', 'student', name='userrole')


def upgrade():
    op.create_table(
        'auth_user',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('public_id', sa.String(200), nullable=False, unique=True),
        sa.Column('username', sa.String(200), nullable=False, unique=True),
        sa.Column('password', sa.String(200), nullable=False),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('department', sa.String(200), nullable=True),
        sa.Column('role', user_role, nullable=False),
    )

    op.create_table(
        'nexus_election',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('created_by', sa.String(36), sa.ForeignKey('auth_user.id'), nullable=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', election_status, nullable=False),
        sa.Column('positions', sa.JSON, nullable=False),
        sa.Column('is_public', sa.Boolean, nullable=False),
        sa.Column('vote_count', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )

    op.create_table(
        'nexus_candidate',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'election_id', sa.String(36),
            sa.ForeignKey('nexus_election.id', onupdate='CASCADE', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('applicant_id', sa.String(36), nullable=False),
        sa.Column('applicant_name', sa.String(200), nullable=False),
        sa.Column('department', sa.String(200), nullable=True),
        sa.Column('year', sa.String(50), nullable=True),
        sa.Column('position', sa.String(100), nullable=False),
        sa.Column('manifesto', sa.Text, nullable=False),
        sa.Column('image_url', sa.String(500), nullable=True),
        sa.Column('status', candidate_status, nullable=False),
        sa.Column('vote_count', sa.Integer, nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.Column('reviewed_by', sa.String(36), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text, nullable=True),
        sa.UniqueConstraint('election_id', 'applicant_id', 'position', name='uq_candidate_application'),
    )

    op.create_table(
        'nexus_vote',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'election_id', sa.String(36),
            sa.ForeignKey('nexus_election.id', onupdate='CASCADE', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'candidate_id', sa.String(36),
            sa.ForeignKey('nexus_candidate.id', onupdate='CASCADE', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('voter_id', sa.String(36), nullable=False),
        sa.Column('cast_at', sa.DateTime(timezone=True)),
        sa.UniqueConstraint('election_id', 'voter_id', name='uq_vote_once_per_voter'),
    )

    op.create_table(
        'election_logs',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column(
            'election_id', sa.String(36),
            sa.ForeignKey('nexus_election.id', onupdate='CASCADE', ondelete='CASCADE'),
        ),
        sa.Column('log_level', sa.String(200), nullable=False),
        sa.Column('event', sa.String(200), nullable=False),
        sa.Column('event_params', sa.Text, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_election_logs_id', 'election_logs', ['id'])


def downgrade():
    op.drop_index('ix_election_logs_id', table_name='election_logs')
    op.drop_table('election_logs')
    op.drop_table('nexus_vote')
    op.drop_table('nexus_candidate')
    op.drop_table('nexus_election')
    op.drop_table('auth_user')
