from __future__ import annotations
import pytest
from sqlalchemy.exc import SQLAlchemyError

from app import create_app, get_migration_service
from extensions import db
from data_migration import PersistenceError
from data_migration.steps import GROUP_STEPS
from fixtures.sample_data import sample_data
import models

@pytest.fixture()
def app_ctx(tmp_path):
    app = create_app("test")
    app.config.update(
        BACKUP_DIR=str(tmp_path / "backups"),
        MIGRATION_LOG_FILE=str(tmp_path / "migration.log"),
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture()
def svc(app_ctx):
    return get_migration_service(app_ctx)

def _fail_at(monkeypatch, key):
    step = next(s for s in GROUP_STEPS if s.key == key)

    def boom(payload):
        raise SQLAlchemyError("boom")

    monkeypatch.setattr(step, "build", boom)

def _ids(model):
    return sorted(r.id for r in db.session.query(model).all())

def test_failure_keeps_completed_groups(svc, monkeypatch):
    _fail_at(monkeypatch, "testResults")
    with pytest.raises(PersistenceError) as ei:
        svc.migrate_all_data(sample_data())
    err = ei.value
    assert err.step == "testResults"
    keys = [s.key for s in GROUP_STEPS]
    assert err.completed_steps == keys[:keys.index("testResults")]
    assert err.backup_id in svc.list_backups()
    assert _ids(models.Student) == ["1", "2", "3"]
    assert _ids(models.TestResult) == []

    # бэкап снят до очистки: откат возвращает пустую БД
    svc.rollback(err.backup_id)
    assert _ids(models.Student) == []

def test_compensation_restores_replaced_data(svc, monkeypatch):
    svc.migrate_all_data(sample_data())
    svc.auto_compensate = True
    _fail_at(monkeypatch, "classNotes")
    payload = {"students": [{"id": "z", "name": "Zed", "email": "zed@example.com"}]}
    with pytest.raises(PersistenceError, match="undone"):
        svc.migrate_all_data(payload)
    assert _ids(models.Student) == ["1", "2", "3"]
    assert db.session.query(models.ClassEnrollment).count() == 3

def test_compensation_undoes_appended_groups(svc, monkeypatch):
    svc.migrate_all_data(sample_data())
    svc.auto_compensate = True
    _fail_at(monkeypatch, "schedules")
    payload = {
        "students": [{"id": "4", "name": "Dan Lee", "email": "dan@example.com"}],
        "classes": [{"id": "3", "name": "Physics", "subject": "Science", "capacity": 15,
                     "enrolledStudents": ["4"]}],
    }
    with pytest.raises(PersistenceError) as ei:
        svc.migrate_all_data(payload, replace_existing=False)
    assert ei.value.completed_steps == ["students", "classes", "enrollments"]
    assert _ids(models.Student) == ["1", "2", "3"]
    assert _ids(models.Class) == ["1", "2"]
    assert db.session.query(models.ClassEnrollment).count() == 3
