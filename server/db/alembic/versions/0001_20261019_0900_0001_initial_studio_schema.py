"""Initial studio schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create classes table
    op.create_table('classes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(length=7), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(name) > 0', name='ck_class_name_not_empty'),
        sa.CheckConstraint('duration_minutes > 0', name='ck_class_duration_positive'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_classes_name'), 'classes', ['name'], unique=False)

    # Create instructors table
    op.create_table('instructors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(full_name) > 0', name='ck_instructor_full_name_not_empty'),
        sa.PrimaryKeyConstraint('id')
    )

    # Create scheduled_classes table
    op.create_table('scheduled_classes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('class_id', sa.Uuid(), nullable=False),
        sa.Column('instructor_id', sa.Uuid(), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('end_time > start_time', name='ck_scheduled_class_end_after_start'),
        sa.CheckConstraint('capacity IS NULL OR capacity > 0', name='ck_scheduled_class_capacity_positive'),
        sa.CheckConstraint(
            "status IN ('scheduled', 'cancelled', 'completed')",
            name='ck_scheduled_class_status_valid'
        ),
        sa.ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['instructor_id'], ['instructors.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_scheduled_classes_class_id'), 'scheduled_classes', ['class_id'], unique=False)
    op.create_index(op.f('ix_scheduled_classes_instructor_id'), 'scheduled_classes', ['instructor_id'], unique=False)
    op.create_index(op.f('ix_scheduled_classes_start_time'), 'scheduled_classes', ['start_time'], unique=False)
    op.create_index(op.f('ix_scheduled_classes_status'), 'scheduled_classes', ['status'], unique=False)

    # Create bookings table
    op.create_table('bookings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('scheduled_class_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(user_id) > 0', name='ck_booking_user_id_not_empty'),
        sa.ForeignKeyConstraint(['scheduled_class_id'], ['scheduled_classes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'scheduled_class_id', name='uq_booking_user_scheduled_class')
    )
    op.create_index(op.f('ix_bookings_user_id'), 'bookings', ['user_id'], unique=False)
    op.create_index(op.f('ix_bookings_scheduled_class_id'), 'bookings', ['scheduled_class_id'], unique=False)

    # Create waiting_list table
    op.create_table('waiting_list',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('scheduled_class_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(user_id) > 0', name='ck_waiting_list_user_id_not_empty'),
        sa.ForeignKeyConstraint(['scheduled_class_id'], ['scheduled_classes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'scheduled_class_id', name='uq_waiting_list_user_scheduled_class')
    )
    op.create_index(op.f('ix_waiting_list_user_id'), 'waiting_list', ['user_id'], unique=False)
    op.create_index(op.f('ix_waiting_list_scheduled_class_id'), 'waiting_list', ['scheduled_class_id'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index(op.f('ix_waiting_list_scheduled_class_id'), table_name='waiting_list')
    op.drop_index(op.f('ix_waiting_list_user_id'), table_name='waiting_list')
    op.drop_table('waiting_list')

    op.drop_index(op.f('ix_bookings_scheduled_class_id'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_user_id'), table_name='bookings')
    op.drop_table('bookings')

    op.drop_index(op.f('ix_scheduled_classes_status'), table_name='scheduled_classes')
    op.drop_index(op.f('ix_scheduled_classes_start_time'), table_name='scheduled_classes')
    op.drop_index(op.f('ix_scheduled_classes_instructor_id'), table_name='scheduled_classes')
    op.drop_index(op.f('ix_scheduled_classes_class_id'), table_name='scheduled_classes')
    op.drop_table('scheduled_classes')

    op.drop_table('instructors')

    op.drop_index(op.f('ix_classes_name'), table_name='classes')
    op.drop_table('classes')
