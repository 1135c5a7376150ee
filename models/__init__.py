from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    Enum, ForeignKey, UniqueConstraint, Index, Boolean, DateTime,
    Integer, Float, String, Text, JSON
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from extensions import db

# ---------- Enums ----------
# в БД храним value (как в исходной схеме), а не имя члена
def _values(enum_cls):
    return [m.value for m in enum_cls]

class UserRole(PyEnum):
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"

class ParticipantType(PyEnum):
    STUDENTS = "students"
    PARENTS = "parents"
    TEACHERS = "teachers"

class MeetingType(PyEnum):
    IN_PERSON = "in_person"
    VIRTUAL = "virtual"

class MeetingStatus(PyEnum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class AttendanceStatus(PyEnum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"

class TestType(PyEnum):
    QUIZ = "quiz"
    EXAM = "exam"
    ASSIGNMENT = "assignment"
    PROJECT = "project"

class SubmissionStatus(PyEnum):
    NOT_SUBMITTED = "not_submitted"
    SUBMITTED = "submitted"
    GRADED = "graded"
    LATE = "late"


# ---------- Core Entities ----------
class User(db.Model):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole, name="user_role", values_callable=_values),
                                           nullable=False, default=UserRole.TEACHER)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<User {self.email}>"


class Student(db.Model):
    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(64))
    grade: Mapped[str | None] = mapped_column(String(64))
    parent_contact: Mapped[str | None] = mapped_column(String(255))
    enrollment_date: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Student {self.name}>"


class Class(db.Model):
    __tablename__ = "classes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    room: Mapped[str | None] = mapped_column(String(100))
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    color: Mapped[str | None] = mapped_column(String(32))
    created_date: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    enrollments = relationship("ClassEnrollment", back_populates="class_", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Class {self.name}>"


class ClassEnrollment(db.Model):
    __tablename__ = "class_enrollments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    class_id: Mapped[str] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    student_id: Mapped[str] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    enrolled_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    class_ = relationship("Class", back_populates="enrollments")
    student = relationship("Student")

    __table_args__ = (
        UniqueConstraint("class_id", "student_id", name="uq_enrollment_class_student"),
    )


class Schedule(db.Model):
    __tablename__ = "schedules"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    class_id: Mapped[str] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0=Sun .. 6=Sat
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # "HH:MM"
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    class_ = relationship("Class")

    __table_args__ = (
        Index("ix_schedule_class_day", "class_id", "day_of_week"),
    )


class ScheduleException(db.Model):
    __tablename__ = "schedule_exceptions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    schedule_id: Mapped[str] = mapped_column(ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True)
    date: Mapped[str] = mapped_column(String(32), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    cancelled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_date: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    schedule = relationship("Schedule")


class Meeting(db.Model):
    __tablename__ = "meetings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    date: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    participants: Mapped[list | None] = mapped_column(JSON)  # список id участников
    participant_type: Mapped[ParticipantType] = mapped_column(
        Enum(ParticipantType, name="participant_type", values_callable=_values), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255))
    meeting_type: Mapped[MeetingType] = mapped_column(
        Enum(MeetingType, name="meeting_type", values_callable=_values), nullable=False)
    status: Mapped[MeetingStatus] = mapped_column(
        Enum(MeetingStatus, name="meeting_status", values_callable=_values), nullable=False)
    created_date: Mapped[str | None] = mapped_column(String(32))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AttendanceRecord(db.Model):
    __tablename__ = "attendance_records"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    class_id: Mapped[str] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[str] = mapped_column(String(32), nullable=False)
    created_date: Mapped[str | None] = mapped_column(String(32))
    updated_date: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    entries = relationship("AttendanceEntry", back_populates="record", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_attendance_class_date", "class_id", "date"),
    )


class AttendanceEntry(db.Model):
    __tablename__ = "attendance_entries"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    attendance_record_id: Mapped[str] = mapped_column(ForeignKey("attendance_records.id", ondelete="CASCADE"), nullable=False)
    student_id: Mapped[str] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[AttendanceStatus] = mapped_column(
        Enum(AttendanceStatus, name="attendance_status", values_callable=_values), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    record = relationship("AttendanceRecord", back_populates="entries")

    __table_args__ = (
        UniqueConstraint("attendance_record_id", "student_id", name="uq_attendance_entry_record_student"),
    )


class ClassNote(db.Model):
    __tablename__ = "class_notes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    class_id: Mapped[str] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    date: Mapped[str] = mapped_column(String(32), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    topics: Mapped[list | None] = mapped_column(JSON)
    homework: Mapped[str | None] = mapped_column(Text)
    objectives: Mapped[str | None] = mapped_column(Text)
    created_date: Mapped[str | None] = mapped_column(String(32))
    updated_date: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Test(db.Model):
    __tablename__ = "tests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    class_id: Mapped[str] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    test_date: Mapped[str] = mapped_column(String(32), nullable=False)
    test_time: Mapped[str | None] = mapped_column(String(5))
    total_points: Mapped[int] = mapped_column(Integer, nullable=False)
    test_type: Mapped[TestType] = mapped_column(Enum(TestType, name="test_type", values_callable=_values), nullable=False)
    file_name: Mapped[str | None] = mapped_column(String(255))
    file_url: Mapped[str | None] = mapped_column(String(1024))
    created_date: Mapped[str | None] = mapped_column(String(32))
    updated_date: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class TestResult(db.Model):
    __tablename__ = "test_results"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    test_id: Mapped[str] = mapped_column(ForeignKey("tests.id", ondelete="CASCADE"), nullable=False)
    student_id: Mapped[str] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    max_score: Mapped[float] = mapped_column(Float, nullable=False)
    percentage: Mapped[float] = mapped_column(Float, nullable=False)
    grade: Mapped[str | None] = mapped_column(String(8))
    feedback: Mapped[str | None] = mapped_column(Text)
    submitted_date: Mapped[str | None] = mapped_column(String(32))
    graded_date: Mapped[str | None] = mapped_column(String(32))
    created_date: Mapped[str | None] = mapped_column(String(32))
    updated_date: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("test_id", "student_id", name="uq_test_result_test_student"),
    )


class HomeworkAssignment(db.Model):
    __tablename__ = "homework_assignments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    class_id: Mapped[str] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    assigned_date: Mapped[str | None] = mapped_column(String(32))
    due_date: Mapped[str] = mapped_column(String(32), nullable=False)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False)
    instructions: Mapped[str | None] = mapped_column(Text)
    resources: Mapped[list | None] = mapped_column(JSON)
    created_date: Mapped[str | None] = mapped_column(String(32))
    updated_date: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class HomeworkSubmission(db.Model):
    __tablename__ = "homework_submissions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    assignment_id: Mapped[str] = mapped_column(ForeignKey("homework_assignments.id", ondelete="CASCADE"), nullable=False)
    student_id: Mapped[str] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    submitted_date: Mapped[str | None] = mapped_column(String(32))
    score: Mapped[float | None] = mapped_column(Float)
    max_score: Mapped[float] = mapped_column(Float, nullable=False)
    grade: Mapped[str | None] = mapped_column(String(8))
    feedback: Mapped[str | None] = mapped_column(Text)
    status: Mapped[SubmissionStatus] = mapped_column(
        Enum(SubmissionStatus, name="submission_status", values_callable=_values), nullable=False)
    submission_notes: Mapped[str | None] = mapped_column(Text)
    graded_date: Mapped[str | None] = mapped_column(String(32))
    created_date: Mapped[str | None] = mapped_column(String(32))
    updated_date: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )


# порядок зависимостей: родители раньше детей; очистка — в обратном порядке
TABLE_ORDER = [
    User,
    Student,
    Class,
    ClassEnrollment,
    Schedule,
    ScheduleException,
    Meeting,
    AttendanceRecord,
    AttendanceEntry,
    ClassNote,
    Test,
    TestResult,
    HomeworkAssignment,
    HomeworkSubmission,
]
