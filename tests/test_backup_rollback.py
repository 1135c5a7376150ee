from __future__ import annotations
import json
import pytest

from app import create_app, get_migration_service
from extensions import db
from data_migration import BackupError, BackupNotFoundError, generate_checksum
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

def _counts():
    return {m.__tablename__: db.session.query(m).count() for m in models.TABLE_ORDER}

def test_checksum_is_sha256_hex():
    assert generate_checksum("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    d1 = json.dumps({"test": "data", "number": 123})
    d2 = json.dumps({"test": "data", "number": 124})
    assert generate_checksum(d1) == generate_checksum(d1)
    assert generate_checksum(d1) != generate_checksum(d2)

def test_backup_file_layout(svc, app_ctx, tmp_path):
    backup_id = svc.create_backup()
    path = tmp_path / "backups" / f"{backup_id}.json"
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["id"] == backup_id
    assert set(doc) == {"id", "timestamp", "checksum", "data"}
    assert set(doc["data"]) == {m.__tablename__ for m in models.TABLE_ORDER}
    assert generate_checksum(json.dumps(doc["data"], sort_keys=True, ensure_ascii=False)) == doc["checksum"]

def test_rollback_restores_pre_run_state(svc):
    first = svc.migrate_all_data(sample_data())
    after_first = _counts()
    # второй прогон: бэкап содержит состояние после первого
    second = svc.migrate_all_data(sample_data())
    db.session.query(models.AttendanceEntry).delete()
    db.session.query(models.Student).delete()
    db.session.commit()

    svc.rollback(second.backup_id)
    assert _counts() == after_first
    meeting = db.session.get(models.Meeting, "1")
    assert meeting.meeting_type is models.MeetingType.IN_PERSON
    assert db.session.get(models.User, "default-teacher-1") is not None

    # самый первый бэкап снят с пустой БД
    svc.rollback(first.backup_id)
    assert not any(_counts().values())

def test_rollback_unknown_backup(svc):
    with pytest.raises(BackupNotFoundError):
        svc.rollback("backup-1999-01-01T00-00-00-000000Z")
    with pytest.raises(BackupNotFoundError):
        svc.rollback("../secrets")

def test_tampered_backup_is_rejected(svc, tmp_path):
    svc.migrate_all_data(sample_data())
    backup_id = svc.create_backup()
    path = tmp_path / "backups" / f"{backup_id}.json"
    doc = json.loads(path.read_text(encoding="utf-8"))
    doc["data"]["students"][0]["name"] = "Mallory"
    path.write_text(json.dumps(doc), encoding="utf-8")

    with pytest.raises(BackupError, match="checksum"):
        svc.rollback(backup_id)
    # данные не тронуты
    assert db.session.get(models.Student, "1").name == "Alice Johnson"

def test_list_backups(svc):
    assert svc.list_backups() == []
    ids = [svc.create_backup(), svc.create_backup()]
    assert svc.list_backups() == sorted(ids)
    assert len(set(ids)) == 2
