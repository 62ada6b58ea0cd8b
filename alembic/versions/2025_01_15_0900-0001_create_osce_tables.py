"""Create administration, participant and feedback tables

Revision ID: 0001
Revises:
Create Date: 2025-01-15 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _participant_table(table_name: str, key_column: str) -> None:
    op.create_table(
        table_name,
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column(key_column, sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f(f'ix_{table_name}_{key_column}'), table_name, [key_column], unique=True)


def upgrade() -> None:
    # Create administrations table
    op.create_table(
        'administrations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('track_ids', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    # Create tracks table
    op.create_table(
        'tracks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('administration_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['administration_id'], ['administrations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_tracks_administration_id'), 'tracks', ['administration_id'], unique=False)

    # Create stations table
    op.create_table(
        'stations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('track_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['track_id'], ['tracks.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_stations_track_id'), 'stations', ['track_id'], unique=False)

    # Participants share one layout keyed by their natural id
    _participant_table('examiners', 'examiner_id')
    _participant_table('examinees', 'examinee_id')
    _participant_table('clients', 'client_id')

    # Create feedback table
    op.create_table(
        'feedback',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('feedback', sa.Text(), nullable=False),
        sa.Column('rate', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('rate BETWEEN 1 AND 5', name='ck_feedback_rate_range'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_feedback_created_at'), 'feedback', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_feedback_created_at'), table_name='feedback')
    op.drop_table('feedback')
    for table_name, key_column in (
        ('clients', 'client_id'),
        ('examinees', 'examinee_id'),
        ('examiners', 'examiner_id'),
    ):
        op.drop_index(op.f(f'ix_{table_name}_{key_column}'), table_name=table_name)
        op.drop_table(table_name)
    op.drop_index(op.f('ix_stations_track_id'), table_name='stations')
    op.drop_table('stations')
    op.drop_index(op.f('ix_tracks_administration_id'), table_name='tracks')
    op.drop_table('tracks')
    op.drop_table('administrations')
