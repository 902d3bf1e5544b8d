"""initial_shift_lifecycle

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-19 09:00:00.000000

교대 수명 주기 초기 스키마: 역할/사용자/토큰, 고객사/작업/교대, 배정/출퇴근 기록,
타임시트, 위임 권한, 감사 로그, 알림.
Initial shift lifecycle schema: roles/users/tokens, clients/jobs/shifts,
assignments/time entries, timesheets, delegated permissions, audit log and
notifications. Seeds the five default roles.
"""
from typing import Sequence, Union
import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = 'a1c2e3f4b5d6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_DEFAULT_ROLES = (("admin", 1), ("manager", 2), ("crew_chief", 3), ("employee", 4), ("client", 5))


def upgrade() -> None:
    # roles — 역할 (lower level = more authority)
    roles = op.create_table(
        'roles',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
        sa.Column('level', sa.Integer(), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # clients — 고객사 (Client companies that own jobs)
    op.create_table(
        'clients',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('contact_name', sa.String(255), nullable=True),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # users — 사용자 (client_id set for client-company users)
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('role_id', UUID(as_uuid=True), sa.ForeignKey('roles.id'), nullable=False),
        sa.Column('client_id', UUID(as_uuid=True), sa.ForeignKey('clients.id', ondelete='SET NULL'), nullable=True),
        sa.Column('username', sa.String(100), nullable=False, unique=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # refresh_tokens — 리프레시 토큰 (Revocable refresh tokens)
    op.create_table(
        'refresh_tokens',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token', sa.String(512), nullable=False, unique=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # jobs — 작업 (Jobs under a client, with PO number)
    op.create_table(
        'jobs',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('client_id', UUID(as_uuid=True), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('po_number', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # shifts — 교대 (One work period of a job)
    op.create_table(
        'shifts',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('job_id', UUID(as_uuid=True), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('location', sa.String(500), nullable=True),
        sa.Column('crew_chief_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('requested_workers', sa.Integer(), server_default='1'),
        sa.Column('status', sa.String(30), server_default='Upcoming', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # worker_requirements — 역할별 필요 인원 (Per-role headcount; requested_workers is their sum)
    op.create_table(
        'worker_requirements',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role_code', sa.String(5), nullable=False),
        sa.Column('required_count', sa.Integer(), server_default='0', nullable=False),
        sa.UniqueConstraint('shift_id', 'role_code', name='uq_worker_requirement_role'),
        sa.CheckConstraint('required_count >= 0', name='ck_worker_requirement_count'),
    )

    # assignments — 교대 배정 (employee_id NULL = placeholder slot)
    op.create_table(
        'assignments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('employee_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('role_code', sa.String(5), nullable=False),
        sa.Column('role_label', sa.String(100), nullable=False),
        sa.Column('status', sa.String(20), server_default='not_started', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('shift_id', 'employee_id', name='uq_assignment_shift_employee'),
    )
    op.create_index('ix_assignments_shift_id', 'assignments', ['shift_id'])

    # time_entries — 출퇴근 기록 (Numbered clock-in/out pairs)
    op.create_table(
        'time_entries',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('assignment_id', UUID(as_uuid=True), sa.ForeignKey('assignments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('entry_number', sa.Integer(), nullable=False),
        sa.Column('clock_in', sa.DateTime(timezone=True), nullable=False),
        sa.Column('clock_out', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('assignment_id', 'entry_number', name='uq_time_entry_number'),
        sa.CheckConstraint('entry_number >= 1 AND entry_number <= 3', name='ck_time_entry_number_range'),
    )
    # 배정당 진행 중 기록 최대 1개 — At most one active entry per assignment, even under race
    op.create_index(
        'uq_time_entry_one_active',
        'time_entries',
        ['assignment_id'],
        unique=True,
        postgresql_where=sa.text('is_active'),
    )

    # timesheets — 타임시트 (One per shift; approval chain envelope)
    op.create_table(
        'timesheets',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('status', sa.String(30), server_default='pending_client_approval', nullable=False),
        sa.Column('submitted_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('client_approved_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('client_approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('client_signature', sa.Text(), nullable=True),
        sa.Column('manager_approved_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('manager_approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('manager_signature', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # crew_chief_permissions — 위임 권한 (target_id points at a shift, job or client)
    op.create_table(
        'crew_chief_permissions',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('permission_type', sa.String(20), nullable=False),
        sa.Column('target_id', UUID(as_uuid=True), nullable=False),
        sa.Column('granted_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('granted_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        'ix_crew_chief_permissions_lookup',
        'crew_chief_permissions',
        ['user_id', 'permission_type', 'target_id'],
    )

    # shift_logs — 교대 감사 로그 (no-show, end shift, finalize, approvals)
    op.create_table(
        'shift_logs',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('actor_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_shift_logs_shift_id', 'shift_logs', ['shift_id'])

    # notifications — 알림
    op.create_table(
        'notifications',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('message', sa.String(1000), nullable=False),
        sa.Column('reference_type', sa.String(50), nullable=True),
        sa.Column('reference_id', UUID(as_uuid=True), nullable=True),
        sa.Column('is_read', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    # 기본 역할 시드 — Seed default roles
    op.bulk_insert(roles, [
        {"id": uuid.uuid4(), "name": name, "level": level}
        for name, level in _DEFAULT_ROLES
    ])


def downgrade() -> None:
    op.drop_index('ix_notifications_user_id', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_shift_logs_shift_id', table_name='shift_logs')
    op.drop_table('shift_logs')
    op.drop_index('ix_crew_chief_permissions_lookup', table_name='crew_chief_permissions')
    op.drop_table('crew_chief_permissions')
    op.drop_table('timesheets')
    op.drop_index('uq_time_entry_one_active', table_name='time_entries')
    op.drop_table('time_entries')
    op.drop_index('ix_assignments_shift_id', table_name='assignments')
    op.drop_table('assignments')
    op.drop_table('worker_requirements')
    op.drop_table('shifts')
    op.drop_table('jobs')
    op.drop_table('refresh_tokens')
    op.drop_table('users')
    op.drop_table('clients')
    op.drop_table('roles')
