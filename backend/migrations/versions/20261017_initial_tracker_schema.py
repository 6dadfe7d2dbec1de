"""Initial tracker schema: stage games, handling tables, issues, key-value log

Revision ID: 20261017_initial
Revises:
Create Date: 2026-10-17

This migration adds:
1. stage_games (Inventory/Open/Closed for every location, keyed by location+stage+key)
2. final_closed (permanent archive written at pickup)
3. transportation, office, deposit (post-pickup handling)
4. game_issues (free-text issue log)
5. kv_entries (namespaced key-value store backing the sign-in log)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261017_initial'
down_revision = None
branch_labels = None
depends_on = None


def _game_columns():
    """Canonical game record columns shared by stage_games and final_closed."""
    return [
        sa.Column('game_key', sa.String(length=128), nullable=False),
        sa.Column('game_name', sa.String(length=255), nullable=True),
        sa.Column('distributor_id', sa.String(length=64), nullable=True),
        sa.Column('game_type', sa.String(length=64), nullable=True),
        sa.Column('game_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('site_number', sa.String(length=32), nullable=True),
        sa.Column('inventory_number', sa.String(length=64), nullable=True),
        sa.Column('ticket_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('total_tickets', sa.Integer(), nullable=True),
        sa.Column('tickets_sold', sa.Integer(), nullable=True),
        sa.Column('current_tickets', sa.Integer(), nullable=True),
        sa.Column('total_winners', sa.Integer(), nullable=True),
        sa.Column('winners_sold', sa.Integer(), nullable=True),
        sa.Column('current_winners', sa.Integer(), nullable=True),
        sa.Column('ideal_gross', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('ideal_prize', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('ideal_net', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('purchase_date', sa.String(length=10), nullable=True),
        sa.Column('cash_on_hand', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('date_opened', sa.DateTime(timezone=True), nullable=True),
        sa.Column('date_closed', sa.DateTime(timezone=True), nullable=True),
        sa.Column('box_number', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=True),
    ]


def upgrade():
    # ==========================================================================
    # 1. STAGE GAMES
    # ==========================================================================
    op.create_table('stage_games',
        *_game_columns(),
        sa.Column('location', sa.String(length=64), nullable=False),
        sa.Column('stage', sa.String(length=16), nullable=False),
        sa.Column('entered_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('location', 'stage', 'game_key', name='pk_stage_games'),
    )
    with op.batch_alter_table('stage_games', schema=None) as batch_op:
        batch_op.create_index('ix_stage_games_key', ['game_key'], unique=False)
        batch_op.create_index('ix_stage_games_location_stage_entered', ['location', 'stage', 'entered_at'], unique=False)
        batch_op.create_index('ix_stage_games_box', ['location', 'stage', 'box_number'], unique=False)

    # ==========================================================================
    # 2. FINAL CLOSED ARCHIVE
    # ==========================================================================
    op.create_table('final_closed',
        *_game_columns(),
        sa.Column('location', sa.String(length=64), nullable=True),
        sa.Column('archived_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('game_key', name='pk_final_closed'),
    )

    # ==========================================================================
    # 3. HANDLING: TRANSPORTATION, OFFICE, DEPOSIT
    # ==========================================================================
    op.create_table('transportation',
        sa.Column('game_key', sa.String(length=128), nullable=False),
        sa.Column('game_name', sa.String(length=255), nullable=True),
        sa.Column('location', sa.String(length=64), nullable=True),
        sa.Column('cash_on_hand', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('picked_up_by', sa.String(length=64), nullable=False),
        sa.Column('picked_up_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('game_key'),
    )
    with op.batch_alter_table('transportation', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_transportation_picked_up_at'), ['picked_up_at'], unique=False)

    op.create_table('office',
        sa.Column('game_key', sa.String(length=128), nullable=False),
        sa.Column('game_name', sa.String(length=255), nullable=True),
        sa.Column('cash_on_hand', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('picked_up_by', sa.String(length=64), nullable=True),
        sa.Column('received_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('scan_state', sa.String(length=32), nullable=False, server_default='AwaitingAudit'),
        sa.Column('audit_office', sa.String(length=64), nullable=True),
        sa.Column('river_room', sa.String(length=128), nullable=True),
        sa.Column('bin_number', sa.String(length=128), nullable=True),
        sa.Column('storage', sa.String(length=128), nullable=True),
        sa.PrimaryKeyConstraint('game_key'),
    )
    with op.batch_alter_table('office', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_office_received_at'), ['received_at'], unique=False)

    op.create_table('deposit',
        sa.Column('game_key', sa.String(length=128), nullable=False),
        sa.Column('cash_on_hand', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('picked_up_by', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('going_to_bank_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('dropped_at_bank_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('game_key'),
    )
    with op.batch_alter_table('deposit', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_deposit_created_at'), ['created_at'], unique=False)

    # ==========================================================================
    # 4. GAME ISSUES
    # ==========================================================================
    op.create_table('game_issues',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_key', sa.String(length=128), nullable=False),
        sa.Column('issue', sa.String(length=500), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('game_issues', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_game_issues_game_key'), ['game_key'], unique=False)

    # ==========================================================================
    # 5. KEY-VALUE ENTRIES
    # ==========================================================================
    op.create_table('kv_entries',
        sa.Column('namespace', sa.String(length=64), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('value', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('namespace', 'key', name='pk_kv_entries'),
    )


def downgrade():
    op.drop_table('kv_entries')
    op.drop_table('game_issues')
    op.drop_table('deposit')
    op.drop_table('office')
    op.drop_table('transportation')
    op.drop_table('final_closed')
    op.drop_table('stage_games')
