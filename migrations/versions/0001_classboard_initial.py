"""classboard tables

Revision ID: 0001_classboard
Revises:
Create Date: 2024-12-11

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_classboard'
down_revision = None
branch_labels = None
depends_on = None

# в БД храним value enum-ов (как values_callable в моделях)
user_role = sa.Enum('TEACHER', 'ADMIN', name='user_role')
participant_type = sa.Enum('students', 'parents', 'teachers', name='participant_type')
meeting_type = sa.Enum('in_person', 'virtual', name='meeting_type')
meeting_status = sa.Enum('scheduled', 'completed', 'cancelled', name='meeting_status')
attendance_status = sa.Enum('present', 'absent', 'late', 'excused', name='attendance_status')
test_type = sa.Enum('quiz', 'exam', 'assignment', 'project', name='test_type')
submission_status = sa.Enum('not_submitted', 'submitted', 'graded', 'late', name='submission_status')

ENUMS = [user_role, participant_type, meeting_type, meeting_status,
         attendance_status, test_type, submission_status]


def _timestamps(updated=True):
    cols = [sa.Column('created_at', sa.DateTime(), nullable=False)]
    if updated:
        cols.append(sa.Column('updated_at', sa.DateTime(), nullable=False))
    return cols


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('students',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(64), nullable=True),
        sa.Column('grade', sa.String(64), nullable=True),
        sa.Column('parent_contact', sa.String(255), nullable=True),
        sa.Column('enrollment_date', sa.String(32), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_students_email', 'students', ['email'])

    op.create_table('classes',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('room', sa.String(100), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('color', sa.String(32), nullable=True),
        sa.Column('created_date', sa.String(32), nullable=True),
        *_timestamps(),
    )

    op.create_table('class_enrollments',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('class_id', sa.String(64), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.String(64), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('enrolled_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('class_id', 'student_id', name='uq_enrollment_class_student'),
    )

    op.create_table('schedules',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('class_id', sa.String(64), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index('ix_schedule_class_day', 'schedules', ['class_id', 'day_of_week'])

    op.create_table('schedule_exceptions',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('schedule_id', sa.String(64), sa.ForeignKey('schedules.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.String(32), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('cancelled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_date', sa.String(32), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('ix_schedule_exceptions_schedule_id', 'schedule_exceptions', ['schedule_id'])

    op.create_table('meetings',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('date', sa.String(32), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('participants', sa.JSON(), nullable=True),
        sa.Column('participant_type', participant_type, nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('meeting_type', meeting_type, nullable=False),
        sa.Column('status', meeting_status, nullable=False),
        sa.Column('created_date', sa.String(32), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_meetings_date', 'meetings', ['date'])

    op.create_table('attendance_records',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('class_id', sa.String(64), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.String(32), nullable=False),
        sa.Column('created_date', sa.String(32), nullable=True),
        sa.Column('updated_date', sa.String(32), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_attendance_class_date', 'attendance_records', ['class_id', 'date'])

    op.create_table('attendance_entries',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('attendance_record_id', sa.String(64),
                  sa.ForeignKey('attendance_records.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.String(64), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', attendance_status, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.UniqueConstraint('attendance_record_id', 'student_id', name='uq_attendance_entry_record_student'),
    )

    op.create_table('class_notes',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('class_id', sa.String(64), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.String(32), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('topics', sa.JSON(), nullable=True),
        sa.Column('homework', sa.Text(), nullable=True),
        sa.Column('objectives', sa.Text(), nullable=True),
        sa.Column('created_date', sa.String(32), nullable=True),
        sa.Column('updated_date', sa.String(32), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_class_notes_class_id', 'class_notes', ['class_id'])

    op.create_table('tests',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('class_id', sa.String(64), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('test_date', sa.String(32), nullable=False),
        sa.Column('test_time', sa.String(5), nullable=True),
        sa.Column('total_points', sa.Integer(), nullable=False),
        sa.Column('test_type', test_type, nullable=False),
        sa.Column('file_name', sa.String(255), nullable=True),
        sa.Column('file_url', sa.String(1024), nullable=True),
        sa.Column('created_date', sa.String(32), nullable=True),
        sa.Column('updated_date', sa.String(32), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_tests_class_id', 'tests', ['class_id'])

    op.create_table('test_results',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('test_id', sa.String(64), sa.ForeignKey('tests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.String(64), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
        sa.Column('max_score', sa.Float(), nullable=False),
        sa.Column('percentage', sa.Float(), nullable=False),
        sa.Column('grade', sa.String(8), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('submitted_date', sa.String(32), nullable=True),
        sa.Column('graded_date', sa.String(32), nullable=True),
        sa.Column('created_date', sa.String(32), nullable=True),
        sa.Column('updated_date', sa.String(32), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('test_id', 'student_id', name='uq_test_result_test_student'),
    )
    op.create_index('ix_test_results_student_id', 'test_results', ['student_id'])

    op.create_table('homework_assignments',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('class_id', sa.String(64), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('assigned_date', sa.String(32), nullable=True),
        sa.Column('due_date', sa.String(32), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=False),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('resources', sa.JSON(), nullable=True),
        sa.Column('created_date', sa.String(32), nullable=True),
        sa.Column('updated_date', sa.String(32), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_homework_assignments_class_id', 'homework_assignments', ['class_id'])

    op.create_table('homework_submissions',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('assignment_id', sa.String(64),
                  sa.ForeignKey('homework_assignments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.String(64), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('submitted_date', sa.String(32), nullable=True),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('max_score', sa.Float(), nullable=False),
        sa.Column('grade', sa.String(8), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('status', submission_status, nullable=False),
        sa.Column('submission_notes', sa.Text(), nullable=True),
        sa.Column('graded_date', sa.String(32), nullable=True),
        sa.Column('created_date', sa.String(32), nullable=True),
        sa.Column('updated_date', sa.String(32), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('assignment_id', 'student_id', name='uq_submission_assignment_student'),
    )
    op.create_index('ix_homework_submissions_student_id', 'homework_submissions', ['student_id'])


def downgrade():
    op.drop_index('ix_homework_submissions_student_id', table_name='homework_submissions')
    op.drop_table('homework_submissions')
    op.drop_index('ix_homework_assignments_class_id', table_name='homework_assignments')
    op.drop_table('homework_assignments')
    op.drop_index('ix_test_results_student_id', table_name='test_results')
    op.drop_table('test_results')
    op.drop_index('ix_tests_class_id', table_name='tests')
    op.drop_table('tests')
    op.drop_index('ix_class_notes_class_id', table_name='class_notes')
    op.drop_table('class_notes')
    op.drop_table('attendance_entries')
    op.drop_index('ix_attendance_class_date', table_name='attendance_records')
    op.drop_table('attendance_records')
    op.drop_index('ix_meetings_date', table_name='meetings')
    op.drop_table('meetings')
    op.drop_index('ix_schedule_exceptions_schedule_id', table_name='schedule_exceptions')
    op.drop_table('schedule_exceptions')
    op.drop_index('ix_schedule_class_day', table_name='schedules')
    op.drop_table('schedules')
    op.drop_table('class_enrollments')
    op.drop_table('classes')
    op.drop_index('ix_students_email', table_name='students')
    op.drop_table('students')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    if bind.dialect.name != "sqlite":
        for enum in ENUMS:
            enum.drop(bind, checkfirst=True)
