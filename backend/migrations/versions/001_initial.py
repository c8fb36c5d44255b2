"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2024-05-01

Creates all database tables for Demo Pass:
- students: Student records, unique by mobile number and by email
- batches: Demo batches with their scheduled dates
- demo_enrollments: Student-in-batch bindings carrying the QR token
- attendance: One record per enrollment per UTC day
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Students Table ────────────────────────────────────────
    op.create_table(
        'students',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('mobile_number', sa.String(10), nullable=False, unique=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    # ── Batches Table ─────────────────────────────────────────
    op.create_table(
        'batches',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('batch_code', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('demo_dates', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    # ── Demo Enrollments Table ────────────────────────────────
    op.create_table(
        'demo_enrollments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('batch_id', sa.String(36),
                  sa.ForeignKey('batches.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.String(36),
                  sa.ForeignKey('students.id'), nullable=False),
        sa.Column('qr_code_data', sa.String(64), nullable=False, unique=True),
        sa.Column('is_walk_in', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('batch_id', 'student_id', name='uq_enrollment_batch_student'),
    )

    # ── Attendance Table ──────────────────────────────────────
    op.create_table(
        'attendance',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('enrollment_id', sa.String(36),
                  sa.ForeignKey('demo_enrollments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('batch_id', sa.String(36),
                  sa.ForeignKey('batches.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.String(36),
                  sa.ForeignKey('students.id'), nullable=False),
        sa.Column('attendance_date', sa.DateTime(), nullable=False),
        sa.Column('scan_time', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('enrollment_id', 'attendance_date',
                            name='uq_attendance_enrollment_date'),
    )

    # Indexes for report queries
    op.create_index('ix_attendance_batch_id', 'attendance', ['batch_id'])
    op.create_index('ix_attendance_attendance_date', 'attendance', ['attendance_date'])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_index('ix_attendance_attendance_date', table_name='attendance')
    op.drop_index('ix_attendance_batch_id', table_name='attendance')
    op.drop_table('attendance')
    op.drop_table('demo_enrollments')
    op.drop_table('batches')
    op.drop_table('students')
