from __future__ import annotations
import copy
import pytest

from data_migration import EntityError, validate_input_data
from data_migration.schemas import MigrationPayload
from data_migration.validators import is_valid_email
from fixtures.sample_data import INVALID_SAMPLE_DATA, SAMPLE_DATA, sample_data
import models


def _msgs(errors):
    return [str(e) for e in errors]

def test_sample_data_is_valid():
    assert validate_input_data(SAMPLE_DATA) == []

def test_missing_groups_count_as_empty():
    assert validate_input_data({}) == []
    assert validate_input_data({"students": None}) == []

def test_invalid_sample_reports_every_error():
    errors = validate_input_data(INVALID_SAMPLE_DATA)
    assert len(errors) == 8
    msgs = _msgs(errors)
    assert "student[].id, name: Missing required fields: id, name" in msgs
    assert "student[].email: Invalid email format" in msgs
    assert "class[].capacity: Capacity must be greater than 0" in msgs
    assert "schedule[invalid-schedule].dayOfWeek: Day of week must be between 0-6" in msgs
    assert "schedule[invalid-schedule].startTime: Invalid time format (expected HH:MM)" in msgs
    assert "schedule[invalid-schedule].classId: References non-existent class: non-existent-class" in msgs

def test_error_is_structured():
    err = EntityError("student", "7", "email", "Invalid email format")
    assert str(err) == "student[7].email: Invalid email format"

@pytest.mark.parametrize("email,ok", [
    ("valid@example.com", True),
    ("user.name@domain.co.uk", True),
    ("test+tag@example.org", True),
    ("invalid-email", False),
    ("@example.com", False),
    ("test@", False),
    ("test.example.com", False),
    ("", False),
])
def test_email_format(email, ok):
    assert is_valid_email(email) is ok

def test_payload_must_be_object():
    errors = validate_input_data(["not", "a", "dict"])
    assert len(errors) == 1 and errors[0].entity == "payload"

def test_group_must_be_list_and_rows_objects():
    msgs = _msgs(validate_input_data({"students": {"id": "1"}, "classes": ["oops"]}))
    assert "payload[].students: Expected a list" in msgs
    assert "class[#0].record: Expected an object" in msgs

def test_duplicate_ids_and_enrollments():
    data = sample_data()
    data["students"].append(dict(data["students"][0]))
    data["classes"][0]["enrolledStudents"] = ["1", "1", "42"]
    msgs = _msgs(validate_input_data(data))
    assert "student[1].id: Duplicate id" in msgs
    assert "class[1].enrolledStudents: Duplicate enrollment: 1" in msgs
    assert "class[1].enrolledStudents: References non-existent student: 42" in msgs

def test_schedule_end_must_follow_start():
    data = sample_data()
    data["schedules"][0].update(startTime="10:30", endTime="09:00")
    assert _msgs(validate_input_data(data)) == ["schedule[1].endTime: End time must be after start time"]

def test_meeting_type_accepts_both_spellings():
    data = sample_data()
    data["meetings"][0]["meetingType"] = "in_person"
    assert validate_input_data(data) == []
    data["meetings"][0]["meetingType"] = "hybrid"
    errors = validate_input_data(data)
    assert [e.field for e in errors] == ["meetingType"]

def test_attendance_entries_checked():
    data = sample_data()
    data["attendanceRecords"][0]["attendanceData"] = [
        {"studentId": "1", "status": "present"},
        {"studentId": "1", "status": "absent"},
        {"studentId": "9", "status": "sleeping"},
    ]
    msgs = _msgs(validate_input_data(data))
    assert "attendanceRecord[1].studentId: Duplicate attendance entry for student: 1" in msgs
    assert "attendanceRecord[1].studentId: References non-existent student: 9" in msgs
    assert any(m.startswith("attendanceRecord[1].status: Invalid value 'sleeping'") for m in msgs)

def test_scores_and_unique_pairs():
    data = sample_data()
    dup = dict(data["testResults"][0], id="2", score=120, percentage=120)
    data["testResults"].append(dup)
    msgs = _msgs(validate_input_data(data))
    assert "testResult[2].studentId: Duplicate testResult for testId 1 and studentId 1" in msgs
    assert "testResult[2].score: Score must be between 0 and maxScore" in msgs
    assert "testResult[2].percentage: Percentage must be between 0 and 100" in msgs

def test_submission_score_is_optional():
    data = sample_data()
    data["homeworkSubmissions"][0].update(score=None, status="submitted", grade=None)
    assert validate_input_data(data) == []

def test_optional_field_types_checked_by_schema():
    data = sample_data()
    data["students"][0]["parentContact"] = 5
    errors = validate_input_data(data)
    assert len(errors) == 1
    assert errors[0].entity == "student" and errors[0].field == "parentContact"

def test_existing_ids_allow_references_but_block_reinsert():
    payload = {
        "students": [{"id": "1", "name": "Again", "email": "again@example.com"}],
        "schedules": [{"id": "s9", "classId": "1", "dayOfWeek": 5, "startTime": "08:00", "endTime": "09:00"}],
    }
    assert "schedule[s9].classId: References non-existent class: 1" in _msgs(validate_input_data(payload))

    existing = {"student": {"1"}, "class": {"1"}}
    msgs = _msgs(validate_input_data(payload, existing))
    assert msgs == ["student[1].id: Record already exists"]

def test_payload_model_normalizes_input():
    p = MigrationPayload.model_validate(copy.deepcopy(SAMPLE_DATA))
    assert p.meetings[0].meeting_type is models.MeetingType.IN_PERSON
    assert p.classes[0].enrolled_students == ["1", "3"]
    assert p.attendance_records[0].attendance_data[1].status is models.AttendanceStatus.LATE
    assert p.schedule_exceptions == []

def test_schema_errors_reported_alongside_rule_errors():
    data = sample_data()
    data["students"][0].update(email="bad", parentContact=5)
    errors = validate_input_data(data)
    assert [(e.entity, e.id, e.field) for e in errors] == [
        ("student", "1", "email"),
        ("student", "1", "parentContact"),
    ]
    assert errors[0].message == "Invalid email format"

def test_rule_and_schema_do_not_double_count():
    data = sample_data()
    data["schedules"][0].update(dayOfWeek=9, startTime="11:00", endTime="10:00")
    assert _msgs(validate_input_data(data)) == [
        "schedule[1].dayOfWeek: Day of week must be between 0-6",
        "schedule[1].endTime: End time must be after start time",
    ]

@pytest.mark.parametrize("key,field,expected", [
    ("schedules", "classId", "schedule[1].classId: References non-existent class: nonexistent"),
    ("attendanceRecords", "classId", "attendanceRecord[1].classId: References non-existent class: nonexistent"),
    ("classNotes", "classId", "classNote[1].classId: References non-existent class: nonexistent"),
    ("tests", "classId", "test[1].classId: References non-existent class: nonexistent"),
    ("testResults", "testId", "testResult[1].testId: References non-existent test: nonexistent"),
    ("testResults", "studentId", "testResult[1].studentId: References non-existent student: nonexistent"),
    ("homeworkAssignments", "classId", "homeworkAssignment[1].classId: References non-existent class: nonexistent"),
    ("homeworkSubmissions", "assignmentId",
     "homeworkSubmission[1].assignmentId: References non-existent homeworkAssignment: nonexistent"),
    ("homeworkSubmissions", "studentId",
     "homeworkSubmission[1].studentId: References non-existent student: nonexistent"),
])
def test_dangling_reference(key, field, expected):
    data = sample_data()
    data[key][0][field] = "nonexistent"
    assert _msgs(validate_input_data(data)) == [expected]

def test_stored_unique_pairs_block_reinsert():
    payload = {
        "testResults": [{"id": "r2", "testId": "t1", "studentId": "s1", "score": 5, "maxScore": 10, "percentage": 50}],
        "classes": [{"id": "c1", "name": "Bio", "subject": "Science", "capacity": 5, "enrolledStudents": ["s1"]}],
    }
    existing = {"student": {"s1"}, "test": {"t1"}}
    pairs = {"testResult": {("t1", "s1")}, "enrollment": {("c1", "s1")}}
    assert _msgs(validate_input_data(payload, existing, pairs)) == [
        "class[c1].enrolledStudents: Record already exists for classId c1 and studentId s1",
        "testResult[r2].studentId: Record already exists for testId t1 and studentId s1",
    ]
