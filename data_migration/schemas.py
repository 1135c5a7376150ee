# data_migration/schemas.py
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models import (
    AttendanceStatus, MeetingStatus, MeetingType, ParticipantType,
    SubmissionStatus, TestType,
)

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# входные записи приходят в camelCase (формат фронтенда), в БД — snake_case
class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_empty_list(cls, v, info):
        field = cls.model_fields.get(info.field_name)
        if v is None and field is not None and field.default_factory is list:
            return []
        return v

# ---------- Students / Classes ----------
class StudentIn(_Record):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    phone: Optional[str] = None
    grade: Optional[str] = None
    parent_contact: Optional[str] = Field(None, alias="parentContact")
    enrollment_date: Optional[str] = Field(None, alias="enrollmentDate")

class ClassIn(_Record):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    subject: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    room: Optional[str] = None
    capacity: int = Field(gt=0)
    enrolled_students: list[str] = Field(default_factory=list, alias="enrolledStudents")
    created_date: Optional[str] = Field(None, alias="createdDate")
    color: Optional[str] = None

# ---------- Schedules ----------
class ScheduleIn(_Record):
    id: str = Field(min_length=1)
    class_id: str = Field(min_length=1, alias="classId")
    day_of_week: int = Field(ge=0, le=6, alias="dayOfWeek")
    start_time: str = Field(pattern=TIME_PATTERN, alias="startTime")
    end_time: str = Field(pattern=TIME_PATTERN, alias="endTime")

    @model_validator(mode="after")
    def check_range(self):
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be > startTime")
        return self

class ScheduleExceptionIn(_Record):
    id: str = Field(min_length=1)
    schedule_id: str = Field(min_length=1, alias="scheduleId")
    date: str = Field(min_length=1)
    start_time: str = Field(pattern=TIME_PATTERN, alias="startTime")
    end_time: str = Field(pattern=TIME_PATTERN, alias="endTime")
    cancelled: bool = False
    created_date: Optional[str] = Field(None, alias="createdDate")

    @field_validator("cancelled", mode="before")
    @classmethod
    def _none_is_false(cls, v):
        return False if v is None else v

# ---------- Meetings ----------
class MeetingIn(_Record):
    id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    date: str = Field(min_length=1)
    start_time: str = Field(pattern=TIME_PATTERN, alias="startTime")
    end_time: str = Field(pattern=TIME_PATTERN, alias="endTime")
    participants: list[str] = Field(default_factory=list)
    participant_type: ParticipantType = Field(alias="participantType")
    location: Optional[str] = None
    meeting_type: MeetingType = Field(alias="meetingType")
    status: MeetingStatus
    created_date: Optional[str] = Field(None, alias="createdDate")
    notes: Optional[str] = None

    @field_validator("meeting_type", mode="before")
    @classmethod
    def _normalize_meeting_type(cls, v):
        # фронтенд пишет "in-person", в БД — "in_person"
        return v.replace("-", "_") if isinstance(v, str) else v

# ---------- Attendance ----------
class AttendanceEntryIn(_Record):
    student_id: str = Field(min_length=1, alias="studentId")
    status: AttendanceStatus
    notes: Optional[str] = None

class AttendanceRecordIn(_Record):
    id: str = Field(min_length=1)
    class_id: str = Field(min_length=1, alias="classId")
    date: str = Field(min_length=1)
    attendance_data: list[AttendanceEntryIn] = Field(default_factory=list, alias="attendanceData")
    created_date: Optional[str] = Field(None, alias="createdDate")
    updated_date: Optional[str] = Field(None, alias="updatedDate")

# ---------- Notes ----------
class ClassNoteIn(_Record):
    id: str = Field(min_length=1)
    class_id: str = Field(min_length=1, alias="classId")
    date: str = Field(min_length=1)
    content: str = Field(min_length=1)
    topics: list[str] = Field(default_factory=list)
    homework: Optional[str] = None
    objectives: Optional[str] = None
    created_date: Optional[str] = Field(None, alias="createdDate")
    updated_date: Optional[str] = Field(None, alias="updatedDate")

# ---------- Tests ----------
class TestIn(_Record):
    id: str = Field(min_length=1)
    class_id: str = Field(min_length=1, alias="classId")
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    test_date: str = Field(min_length=1, alias="testDate")
    test_time: Optional[str] = Field(None, pattern=TIME_PATTERN, alias="testTime")
    total_points: int = Field(gt=0, alias="totalPoints")
    test_type: TestType = Field(alias="testType")
    file_name: Optional[str] = Field(None, alias="fileName")
    file_url: Optional[str] = Field(None, alias="fileUrl")
    created_date: Optional[str] = Field(None, alias="createdDate")
    updated_date: Optional[str] = Field(None, alias="updatedDate")

class TestResultIn(_Record):
    id: str = Field(min_length=1)
    test_id: str = Field(min_length=1, alias="testId")
    student_id: str = Field(min_length=1, alias="studentId")
    score: float = Field(ge=0)
    max_score: float = Field(gt=0, alias="maxScore")
    percentage: float = Field(ge=0, le=100)
    grade: Optional[str] = None
    feedback: Optional[str] = None
    submitted_date: Optional[str] = Field(None, alias="submittedDate")
    graded_date: Optional[str] = Field(None, alias="gradedDate")
    created_date: Optional[str] = Field(None, alias="createdDate")
    updated_date: Optional[str] = Field(None, alias="updatedDate")

# ---------- Homework ----------
class HomeworkAssignmentIn(_Record):
    id: str = Field(min_length=1)
    class_id: str = Field(min_length=1, alias="classId")
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_date: Optional[str] = Field(None, alias="assignedDate")
    due_date: str = Field(min_length=1, alias="dueDate")
    total_points: int = Field(gt=0, alias="totalPoints")
    instructions: Optional[str] = None
    resources: list[str] = Field(default_factory=list)
    created_date: Optional[str] = Field(None, alias="createdDate")
    updated_date: Optional[str] = Field(None, alias="updatedDate")

class HomeworkSubmissionIn(_Record):
    id: str = Field(min_length=1)
    assignment_id: str = Field(min_length=1, alias="assignmentId")
    student_id: str = Field(min_length=1, alias="studentId")
    submitted_date: Optional[str] = Field(None, alias="submittedDate")
    score: Optional[float] = Field(None, ge=0)
    max_score: float = Field(gt=0, alias="maxScore")
    grade: Optional[str] = None
    feedback: Optional[str] = None
    status: SubmissionStatus
    submission_notes: Optional[str] = Field(None, alias="submissionNotes")
    graded_date: Optional[str] = Field(None, alias="gradedDate")
    created_date: Optional[str] = Field(None, alias="createdDate")
    updated_date: Optional[str] = Field(None, alias="updatedDate")

# ---------- Payload ----------
class MigrationPayload(_Record):
    students: list[StudentIn] = Field(default_factory=list)
    classes: list[ClassIn] = Field(default_factory=list)
    schedules: list[ScheduleIn] = Field(default_factory=list)
    schedule_exceptions: list[ScheduleExceptionIn] = Field(default_factory=list, alias="scheduleExceptions")
    meetings: list[MeetingIn] = Field(default_factory=list)
    attendance_records: list[AttendanceRecordIn] = Field(default_factory=list, alias="attendanceRecords")
    class_notes: list[ClassNoteIn] = Field(default_factory=list, alias="classNotes")
    tests: list[TestIn] = Field(default_factory=list)
    test_results: list[TestResultIn] = Field(default_factory=list, alias="testResults")
    homework_assignments: list[HomeworkAssignmentIn] = Field(default_factory=list, alias="homeworkAssignments")
    homework_submissions: list[HomeworkSubmissionIn] = Field(default_factory=list, alias="homeworkSubmissions")

# имя сущности в ошибках валидации -> схема записи
ENTITY_MODELS: dict[str, type[_Record]] = {
    "student": StudentIn,
    "class": ClassIn,
    "schedule": ScheduleIn,
    "scheduleException": ScheduleExceptionIn,
    "meeting": MeetingIn,
    "attendanceRecord": AttendanceRecordIn,
    "classNote": ClassNoteIn,
    "test": TestIn,
    "testResult": TestResultIn,
    "homeworkAssignment": HomeworkAssignmentIn,
    "homeworkSubmission": HomeworkSubmissionIn,
}
