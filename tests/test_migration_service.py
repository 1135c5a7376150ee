from __future__ import annotations
import json
import pytest

from app import create_app, get_migration_service
from extensions import db
from fixtures.sample_data import INVALID_SAMPLE_DATA, empty_payload, sample_data
import models

SAMPLE_SUMMARY = {
    "students": 3, "classes": 2, "enrollments": 3, "schedules": 3, "scheduleExceptions": 0,
    "meetings": 1, "attendanceRecords": 1, "classNotes": 1, "tests": 1, "testResults": 1,
    "homeworkAssignments": 1, "homeworkSubmissions": 1,
}

@pytest.fixture()
def app_ctx(tmp_path):
    app = create_app("test")
    app.config.update(
        BACKUP_DIR=str(tmp_path / "backups"),
        MIGRATION_LOG_FILE=str(tmp_path / "logs" / "migration.log"),
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture()
def svc(app_ctx):
    return get_migration_service(app_ctx)

def _count(model):
    return db.session.query(model).count()

def test_sample_migration(svc):
    res = svc.migrate_all_data(sample_data())
    assert res.success is True
    assert res.summary == SAMPLE_SUMMARY
    assert res.backup_id and res.backup_id.startswith("backup-")
    assert _count(models.Student) == 3
    assert _count(models.AttendanceEntry) == 2
    # пользователь по умолчанию
    user = db.session.get(models.User, "default-teacher-1")
    assert user is not None and user.role is models.UserRole.TEACHER

    meeting = db.session.get(models.Meeting, "1")
    assert meeting.meeting_type is models.MeetingType.IN_PERSON
    assert meeting.participants == ["1"]
    algebra = db.session.get(models.Class, "1")
    assert sorted(e.student_id for e in algebra.enrollments) == ["1", "3"]

def test_single_student_enrolled_in_single_class(svc):
    payload = {
        "students": [{"id": "s1", "name": "Ann", "email": "ann@example.com"}],
        "classes": [{"id": "c1", "name": "Bio", "subject": "Science", "capacity": 10, "enrolledStudents": ["s1"]}],
    }
    res = svc.migrate_all_data(payload)
    assert res.success
    assert res.summary["students"] == 1
    assert res.summary["classes"] == 1
    assert res.summary["enrollments"] == 1

def test_invalid_input_writes_nothing(svc):
    res = svc.migrate_all_data(INVALID_SAMPLE_DATA)
    assert res.success is False
    assert res.message.startswith("Input validation failed")
    assert len(res.errors) == 8
    assert res.backup_id is None
    assert svc.list_backups() == []
    assert _count(models.User) == 0

def test_empty_payload(svc):
    res = svc.migrate_all_data(empty_payload())
    assert res.success
    assert set(res.summary) == set(SAMPLE_SUMMARY)
    assert not any(res.summary.values())
    assert _count(models.User) == 1

def test_replace_mode_clears_previous_data(svc):
    svc.migrate_all_data(sample_data())
    payload = {"students": [{"id": "x", "name": "Xavier", "email": "x@example.com"}]}
    res = svc.migrate_all_data(payload)
    assert res.success
    assert [s.id for s in db.session.query(models.Student).all()] == ["x"]
    assert _count(models.Class) == 0
    assert len(svc.list_backups()) == 2

def test_append_mode_links_to_stored_records(svc):
    svc.migrate_all_data(sample_data())
    payload = {
        "students": [{"id": "4", "name": "Dan Lee", "email": "dan@example.com"}],
        "classes": [{"id": "3", "name": "Physics", "subject": "Science", "capacity": 15,
                     "enrolledStudents": ["1", "4"]}],
        "schedules": [{"id": "10", "classId": "1", "dayOfWeek": 5, "startTime": "08:00", "endTime": "09:00"}],
    }
    res = svc.migrate_all_data(payload, replace_existing=False)
    assert res.success, res.errors
    assert res.summary["enrollments"] == 2
    assert _count(models.Student) == 4
    assert _count(models.Schedule) == 4
    assert _count(models.User) == 1

    again = svc.migrate_all_data({"students": [{"id": "1", "name": "Dup", "email": "d@example.com"}]},
                                 replace_existing=False)
    assert not again.success
    assert again.errors == ["student[1].id: Record already exists"]

def test_dry_run_does_not_write(svc):
    res = svc.migrate_all_data(sample_data(), dry_run=True)
    assert res.success
    assert res.summary == SAMPLE_SUMMARY
    assert res.backup_id is None
    assert svc.list_backups() == []
    assert _count(models.Student) == 0

def test_log_file_records_run(svc, app_ctx):
    svc.migrate_all_data(sample_data())
    with open(app_ctx.config["MIGRATION_LOG_FILE"], encoding="utf-8") as fh:
        lines = [json.loads(line) for line in fh if line.strip()]
    msgs = [line["msg"] for line in lines]
    assert "Starting complete data migration" in msgs
    assert "Data migration completed successfully" in msgs
    steps = [line.get("step") for line in lines if line.get("event") == "step_completed"]
    assert "students" in steps and "homeworkSubmissions" in steps

def test_validate_migration(svc):
    assert svc.validate_migration() is False
    svc.migrate_all_data(sample_data())
    assert svc.validate_migration() is True

def test_validate_migration_detects_orphans(svc):
    svc.migrate_all_data(sample_data())
    db.session.query(models.Student).filter_by(id="2").delete()
    db.session.commit()
    assert svc.validate_migration() is False

def test_self_test_scenarios(svc):
    out = svc.test_migration()
    assert out["success"] is True
    assert [r["test"] for r in out["results"]] == [
        "Empty data migration", "Invalid data handling", "Sample data migration"]
    assert all(r["passed"] for r in out["results"])
    # сценарии идут в dry-run
    assert _count(models.Student) == 0
    assert svc.list_backups() == []

def test_result_to_dict(svc):
    res = svc.migrate_all_data(INVALID_SAMPLE_DATA)
    d = res.to_dict()
    assert d["success"] is False
    assert "summary" not in d and "backup_id" not in d

def test_append_rejects_stored_unique_pairs(svc):
    svc.migrate_all_data(sample_data())
    base = sample_data()
    payload = {
        "students": [{"id": "4", "name": "Dan Lee", "email": "dan@example.com"}],
        "testResults": [dict(base["testResults"][0], id="99")],
        "homeworkSubmissions": [dict(base["homeworkSubmissions"][0], id="98")],
    }
    res = svc.migrate_all_data(payload, replace_existing=False)
    assert res.success is False
    assert res.errors == [
        "testResult[99].studentId: Record already exists for testId 1 and studentId 1",
        "homeworkSubmission[98].studentId: Record already exists for assignmentId 1 and studentId 1",
    ]
    # ничего не записано, в т.ч. группы до testResults
    assert db.session.get(models.Student, "4") is None
    assert len(svc.list_backups()) == 1
