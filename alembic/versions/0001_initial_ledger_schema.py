"""initial ledger schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # Create companies table
    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email_domain', sa.String(), nullable=True),
        sa.Column('admin_user_id', sa.Integer(), nullable=True),
        sa.Column('plan_type', sa.String(), nullable=True),
        sa.Column('minutes_included', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('minutes_used', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('subscription_period_start', sa.DateTime(), nullable=True),
        sa.Column('subscription_period_end', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['admin_user_id'], ['users.id'], ),
        sa.CheckConstraint('minutes_used >= 0', name='ck_companies_minutes_used_non_negative'),
    )
    op.create_index(op.f('ix_companies_id'), 'companies', ['id'], unique=False)
    op.create_index(op.f('ix_companies_email_domain'), 'companies', ['email_domain'], unique=False)
    op.create_index(op.f('ix_companies_admin_user_id'), 'companies', ['admin_user_id'], unique=False)

    # Create company_employees table
    op.create_table(
        'company_employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('invited_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    )
    op.create_index(op.f('ix_company_employees_id'), 'company_employees', ['id'], unique=False)
    op.create_index(op.f('ix_company_employees_company_id'), 'company_employees', ['company_id'], unique=False)
    op.create_index(op.f('ix_company_employees_user_id'), 'company_employees', ['user_id'], unique=False)
    op.create_index(op.f('ix_company_employees_email'), 'company_employees', ['email'], unique=False)

    # Create specialists table
    op.create_table(
        'specialists',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('rate_tier', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_specialists_id'), 'specialists', ['id'], unique=False)
    op.create_index(op.f('ix_specialists_email'), 'specialists', ['email'], unique=False)

    # Create bookings table
    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('specialist_id', sa.Integer(), nullable=False),
        sa.Column('employee_user_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('session_duration', sa.Integer(), nullable=True),
        sa.Column('minutes_deducted', sa.Integer(), nullable=True),
        sa.Column('payout_rate', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('proposed_datetime', sa.DateTime(), nullable=True),
        sa.Column('confirmed_datetime', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['specialist_id'], ['specialists.id'], ),
        sa.ForeignKeyConstraint(['employee_user_id'], ['users.id'], ),
    )
    op.create_index(op.f('ix_bookings_id'), 'bookings', ['id'], unique=False)
    op.create_index(op.f('ix_bookings_specialist_id'), 'bookings', ['specialist_id'], unique=False)
    op.create_index(op.f('ix_bookings_employee_user_id'), 'bookings', ['employee_user_id'], unique=False)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)
    op.create_index(op.f('ix_bookings_confirmed_datetime'), 'bookings', ['confirmed_datetime'], unique=False)
    op.create_index('idx_bookings_specialist_status', 'bookings', ['specialist_id', 'status'], unique=False)

    # Create payout_requests table
    op.create_table(
        'payout_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('specialist_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('period_start', sa.DateTime(), nullable=False),
        sa.Column('period_end', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('rejection_reason', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['specialist_id'], ['specialists.id'], ),
    )
    op.create_index(op.f('ix_payout_requests_id'), 'payout_requests', ['id'], unique=False)
    op.create_index(op.f('ix_payout_requests_specialist_id'), 'payout_requests', ['specialist_id'], unique=False)
    op.create_index(op.f('ix_payout_requests_status'), 'payout_requests', ['status'], unique=False)
    op.create_index(op.f('ix_payout_requests_created_at'), 'payout_requests', ['created_at'], unique=False)
    # At most one pending request per specialist
    op.create_index(
        'uq_payout_requests_one_pending_per_specialist',
        'payout_requests',
        ['specialist_id'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )


def downgrade():
    op.drop_index('uq_payout_requests_one_pending_per_specialist', table_name='payout_requests')
    op.drop_index(op.f('ix_payout_requests_created_at'), table_name='payout_requests')
    op.drop_index(op.f('ix_payout_requests_status'), table_name='payout_requests')
    op.drop_index(op.f('ix_payout_requests_specialist_id'), table_name='payout_requests')
    op.drop_index(op.f('ix_payout_requests_id'), table_name='payout_requests')
    op.drop_table('payout_requests')

    op.drop_index('idx_bookings_specialist_status', table_name='bookings')
    op.drop_index(op.f('ix_bookings_confirmed_datetime'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_status'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_employee_user_id'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_specialist_id'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_id'), table_name='bookings')
    op.drop_table('bookings')

    op.drop_index(op.f('ix_specialists_email'), table_name='specialists')
    op.drop_index(op.f('ix_specialists_id'), table_name='specialists')
    op.drop_table('specialists')

    op.drop_index(op.f('ix_company_employees_email'), table_name='company_employees')
    op.drop_index(op.f('ix_company_employees_user_id'), table_name='company_employees')
    op.drop_index(op.f('ix_company_employees_company_id'), table_name='company_employees')
    op.drop_index(op.f('ix_company_employees_id'), table_name='company_employees')
    op.drop_table('company_employees')

    op.drop_index(op.f('ix_companies_admin_user_id'), table_name='companies')
    op.drop_index(op.f('ix_companies_email_domain'), table_name='companies')
    op.drop_index(op.f('ix_companies_id'), table_name='companies')
    op.drop_table('companies')

    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')
