"""Initial migration

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create organizers table
    op.create_table('organizers',
        sa.Column('pk', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('experience', sa.Text(), nullable=False),
        sa.Column('organization_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='approved'),
        sa.Column('wallet_balance', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('locked_prize_pool', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('tournaments_organized', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_prize_pools', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('pk'),
        sa.UniqueConstraint('email'),
        sa.CheckConstraint('wallet_balance >= 0', name='chk_organizer_wallet_nonneg'),
        sa.CheckConstraint('locked_prize_pool >= 0', name='chk_organizer_locked_nonneg')
    )
    op.create_index('ix_organizers_id', 'organizers', ['id'], unique=True)

    # Create players table
    op.create_table('players',
        sa.Column('pk', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('age', sa.Integer(), nullable=False),
        sa.Column('country', sa.String(length=64), nullable=False),
        sa.Column('gender', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('wallet_balance', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('tournaments_participated', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tournaments_won', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_earnings', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('pk'),
        sa.UniqueConstraint('email'),
        sa.CheckConstraint('wallet_balance >= 0', name='chk_player_wallet_nonneg'),
        sa.CheckConstraint('age >= 13 AND age <= 99', name='chk_player_age')
    )
    op.create_index('ix_players_id', 'players', ['id'], unique=True)

    # Create tournaments table
    op.create_table('tournaments',
        sa.Column('pk', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('tournament_name', sa.String(length=255), nullable=False),
        sa.Column('organizer_id', sa.String(length=64), nullable=False),
        sa.Column('organizer_name', sa.String(length=255), nullable=False),
        sa.Column('game', sa.String(length=16), nullable=False),
        sa.Column('mode', sa.String(length=16), nullable=False),
        sa.Column('format', sa.String(length=32), nullable=False, server_default='battle-royale'),
        sa.Column('start_date', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('end_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('registration_deadline', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('max_teams', sa.Integer(), nullable=False),
        sa.Column('current_participants', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('prize_pool', sa.BigInteger(), nullable=False),
        sa.Column('prize_distribution', sa.String(length=64), nullable=False, server_default='60-30-10'),
        sa.Column('has_entry_fee', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('entry_fee', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('min_age', sa.Integer(), nullable=False, server_default='13'),
        sa.Column('region', sa.String(length=64), nullable=False, server_default='global'),
        sa.Column('rules', sa.Text(), nullable=False, server_default='Standard tournament rules apply.'),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('stream_url', sa.String(length=512), nullable=False, server_default=''),
        sa.Column('discord_url', sa.String(length=512), nullable=False, server_default=''),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='registration-open'),
        sa.Column('entry_fee_collected', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('prize_locked', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('result_declared_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('prize_released_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('prize_release_note', sa.Text(), nullable=False, server_default=''),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('pk'),
        sa.ForeignKeyConstraint(['organizer_id'], ['organizers.id']),
        sa.CheckConstraint('max_teams >= 2', name='chk_tournament_max_teams'),
        sa.CheckConstraint('current_participants >= 0', name='chk_tournament_participants_nonneg'),
        sa.CheckConstraint('current_participants <= max_teams', name='chk_tournament_capacity'),
        sa.CheckConstraint('entry_fee >= 0', name='chk_tournament_entry_fee_nonneg'),
        sa.CheckConstraint('entry_fee_collected >= 0', name='chk_tournament_fee_collected_nonneg'),
        sa.CheckConstraint('prize_locked >= 0', name='chk_tournament_prize_locked_nonneg')
    )
    op.create_index('ix_tournaments_id', 'tournaments', ['id'], unique=True)
    op.create_index('ix_tournaments_organizer_id', 'tournaments', ['organizer_id'])
    op.create_index('ix_tournaments_game', 'tournaments', ['game'])
    op.create_index('ix_tournaments_status', 'tournaments', ['status'])

    # Create tournament_participants table
    op.create_table('tournament_participants',
        sa.Column('seq', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tournament_id', sa.String(length=64), nullable=False),
        sa.Column('player_id', sa.String(length=64), nullable=False),
        sa.Column('player_name', sa.String(length=255), nullable=False),
        sa.Column('team_name', sa.String(length=255), nullable=False),
        sa.Column('registered_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('seq'),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('tournament_id', 'player_id', name='uq_tournament_player')
    )
    op.create_index('ix_tournament_participants_tournament_id', 'tournament_participants', ['tournament_id'])

    # Create tournament_winners table
    op.create_table('tournament_winners',
        sa.Column('seq', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tournament_id', sa.String(length=64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('player_id', sa.String(length=64), nullable=False),
        sa.Column('player_name', sa.String(length=255), nullable=False),
        sa.Column('team_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('prize', sa.BigInteger(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('seq'),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('tournament_id', 'position', name='uq_tournament_position'),
        sa.CheckConstraint('prize >= 0', name='chk_winner_prize_nonneg')
    )
    op.create_index('ix_tournament_winners_tournament_id', 'tournament_winners', ['tournament_id'])

    # Create transactions table
    op.create_table('transactions',
        sa.Column('seq', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('user_type', sa.String(length=16), nullable=False),
        sa.Column('tx_type', sa.String(length=32), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('currency', sa.String(length=16), nullable=False, server_default='INR'),
        sa.Column('reference', sa.String(length=128), nullable=False, server_default=''),
        sa.Column('operation_id', sa.String(length=64), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('seq'),
        sa.UniqueConstraint('id'),
        sa.CheckConstraint('amount >= 0', name='chk_transaction_amount_nonneg')
    )
    op.create_index('idx_transactions_user_created', 'transactions', ['user_id', 'user_type', 'created_at'])
    op.create_index('idx_transactions_user_reference', 'transactions', ['user_id', 'reference'])
    op.create_index('ix_transactions_operation_id', 'transactions', ['operation_id'])

    # Create ledger_operations table
    op.create_table('ledger_operations',
        sa.Column('pk', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('kind', sa.String(length=32), nullable=False),
        sa.Column('reference', sa.String(length=128), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('steps', sa.JSON(), nullable=False),
        sa.Column('compensated', sa.JSON(), nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('pk'),
        sa.UniqueConstraint('id')
    )
    op.create_index('idx_ledger_operations_status_created', 'ledger_operations', ['status', 'created_at'])


def downgrade() -> None:
    op.drop_table('ledger_operations')
    op.drop_table('transactions')
    op.drop_table('tournament_winners')
    op.drop_table('tournament_participants')
    op.drop_table('tournaments')
    op.drop_table('players')
    op.drop_table('organizers')
