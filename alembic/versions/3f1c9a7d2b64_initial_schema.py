"""initial schema

Revision ID: 3f1c9a7d2b64
Revises:
Create Date: 2024-04-28 10:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b64'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'workers',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('salary', sa.Float(), nullable=True),
    )
    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('target_quantity', sa.Integer(), nullable=False),
        sa.CheckConstraint('target_quantity > 0', name='ck_tasks_target_positive'),
    )
    op.create_table(
        'daily_evaluations',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('worker_id', sa.Integer(), sa.ForeignKey('workers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('total_score', sa.Float(), nullable=False),
        sa.UniqueConstraint('worker_id', 'date', name='uq_evaluation_worker_date'),
    )
    op.create_table(
        'task_entries',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('evaluation_id', sa.Integer(), sa.ForeignKey('daily_evaluations.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('task_id', sa.Integer(), sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
    )
    op.create_table(
        'attendance_records',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('worker_id', sa.Integer(), sa.ForeignKey('workers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('check_in', sa.Time(), nullable=True),
        sa.Column('check_out', sa.Time(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('worker_id', 'date', name='uq_attendance_worker_date'),
    )
    op.create_table(
        'worker_transactions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('worker_id', sa.Integer(), sa.ForeignKey('workers.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'schema_migrations',
        sa.Column('version', sa.String(), primary_key=True),
        sa.Column('applied_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('schema_migrations')
    op.drop_table('worker_transactions')
    op.drop_table('attendance_records')
    op.drop_table('task_entries')
    op.drop_table('daily_evaluations')
    op.drop_table('tasks')
    op.drop_table('workers')
