from __future__ import annotations
import pytest

import config
from scripts import demo_migration, migrate_data

@pytest.fixture()
def isolated_dirs(tmp_path, monkeypatch):
    monkeypatch.setattr(config.BaseConfig, "BACKUP_DIR", str(tmp_path / "backups"))
    monkeypatch.setattr(config.BaseConfig, "MIGRATION_LOG_FILE", str(tmp_path / "migration.log"))
    return tmp_path

def test_demo_runs_without_database(capsys):
    assert demo_migration.main() == 0
    out = capsys.readouterr().out
    assert "valid data passed validation with no errors" in out
    assert "invalid data: 8 validation error(s)" in out
    assert "- 3 enrollments" in out

def test_migrate_script_dry_run(isolated_dirs, capsys):
    assert migrate_data.main(["--config", "test", "--dry-run"]) == 0
    out = capsys.readouterr().out
    assert "students: 3" in out
    assert not (isolated_dirs / "backups").exists()

def test_migrate_script_full_run(isolated_dirs, capsys):
    assert migrate_data.main(["--config", "test"]) == 0
    assert "Data migration completed successfully" in capsys.readouterr().out
    assert len(list((isolated_dirs / "backups").glob("backup-*.json"))) == 1

def test_migrate_script_rejects_bad_fixture(isolated_dirs, capsys):
    bad = isolated_dirs / "bad.json"
    bad.write_text('{"students": [{"id": "1"}]}', encoding="utf-8")
    assert migrate_data.main(["--config", "test", "--dry-run", "--fixture", str(bad)]) == 1
    assert "Missing required fields: name, email" in capsys.readouterr().err
