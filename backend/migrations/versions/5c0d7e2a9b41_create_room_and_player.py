"""create room and player tables

Revision ID: 5c0d7e2a9b41
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c0d7e2a9b41'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'room' not in existing_tables:
        op.create_table(
            'room',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('room_code', sa.String(length=4), nullable=False),
            sa.Column('host_id', sa.String(length=64), nullable=False),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='lobby'),
            sa.Column('mode', sa.String(length=16), nullable=False, server_default='friends'),
            sa.Column('current_number', sa.Integer(), nullable=True),
            sa.Column('called_numbers', sa.JSON(), nullable=False),
            sa.Column('call_interval_ms', sa.Integer(), nullable=False, server_default='4000'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_room_room_code', 'room', ['room_code'], unique=True)

    if 'player' not in existing_tables:
        op.create_table(
            'player',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('room_id', sa.String(length=36), sa.ForeignKey('room.id', ondelete='CASCADE'), nullable=False),
            sa.Column('session_id', sa.String(length=64), nullable=False),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('is_bot', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('is_host', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('ticket_data', sa.JSON(), nullable=False),
            sa.Column('avatar', sa.String(length=1024), nullable=True),
            sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_player_room_id', 'player', ['room_id'])
        op.create_index('ix_player_session_id', 'player', ['session_id'])


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'player' in existing_tables:
        op.drop_index('ix_player_session_id', table_name='player')
        op.drop_index('ix_player_room_id', table_name='player')
        op.drop_table('player')
    if 'room' in existing_tables:
        op.drop_index('ix_room_room_code', table_name='room')
        op.drop_table('room')
