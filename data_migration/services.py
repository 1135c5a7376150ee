# data_migration/services.py
from __future__ import annotations
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

import models as m
from .backup import BackupStore
from .errors import MigrationError, PersistenceError
from .logs import get_migration_logger
from .schemas import MigrationPayload
from .steps import GROUP_STEPS, GroupStep
from .validators import EntityError, validate_input_data

# сущность (как в ошибках валидации) -> таблица
ENTITY_TABLES = {
    "student": m.Student,
    "class": m.Class,
    "schedule": m.Schedule,
    "scheduleException": m.ScheduleException,
    "meeting": m.Meeting,
    "attendanceRecord": m.AttendanceRecord,
    "classNote": m.ClassNote,
    "test": m.Test,
    "testResult": m.TestResult,
    "homeworkAssignment": m.HomeworkAssignment,
    "homeworkSubmission": m.HomeworkSubmission,
}

@dataclass
class MigrationResult:
    success: bool
    summary: Optional[Dict[str, int]] = None
    errors: Optional[List[str]] = None
    message: Optional[str] = None
    backup_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


class DataMigrationService:
    """
    Переносит payload (формат фронтенда) в БД.

    Конвейер: валидация -> бэкап -> (очистка) -> вставка групп по порядку зависимостей.
    Сессия передаётся явно; глобального клиента нет.
    """

    def __init__(self, session, *, backup_dir: str = "backups", log_file: str = "logs/migration.log",
                 default_user: Optional[Mapping[str, Any]] = None, auto_compensate: bool = False):
        self.session = session
        self.backups = BackupStore(session, backup_dir)
        self.default_user = dict(default_user) if default_user else None
        self.auto_compensate = auto_compensate
        self.log = get_migration_logger(log_file)

    @classmethod
    def from_config(cls, config: Mapping[str, Any], session) -> "DataMigrationService":
        return cls(
            session,
            backup_dir=config["BACKUP_DIR"],
            log_file=config["MIGRATION_LOG_FILE"],
            default_user=config.get("DEFAULT_USER"),
            auto_compensate=bool(config.get("MIGRATION_AUTO_COMPENSATE", False)),
        )

    # ---------- валидация
    def _existing_ids(self) -> Dict[str, set[str]]:
        return {
            entity: {row[0] for row in self.session.query(model.id).all()}
            for entity, model in ENTITY_TABLES.items()
        }

    def _existing_pairs(self) -> Dict[str, set[Tuple[str, str]]]:
        # уникальные пары, которые БД отвергнет при повторной вставке
        pairs = {
            "enrollment": (m.ClassEnrollment.class_id, m.ClassEnrollment.student_id),
            "testResult": (m.TestResult.test_id, m.TestResult.student_id),
            "homeworkSubmission": (m.HomeworkSubmission.assignment_id, m.HomeworkSubmission.student_id),
        }
        return {
            entity: {tuple(row) for row in self.session.query(*cols).all()}
            for entity, cols in pairs.items()
        }

    def validate_input_data(self, payload: Any, *, replace_existing: bool = True) -> List[EntityError]:
        # в режиме замены хранилище будет очищено, ссылаться на него нельзя
        if replace_existing:
            return validate_input_data(payload)
        return validate_input_data(payload, self._existing_ids(), self._existing_pairs())

    # ---------- бэкап / откат
    def create_backup(self) -> str:
        backup_id = self.backups.create()
        self.log.info("Backup created", extra={"event": "backup_created", "backup_id": backup_id})
        return backup_id

    def list_backups(self) -> List[str]:
        return self.backups.list()

    def rollback(self, backup_id: str) -> None:
        self.log.info("Starting rollback", extra={"event": "rollback_started", "backup_id": backup_id})
        try:
            data = self.backups.load(backup_id)
            counts = self.backups.restore(data)
        except MigrationError:
            self.log.error("Rollback failed", exc_info=True,
                           extra={"event": "rollback_failed", "backup_id": backup_id})
            raise
        self.log.info("Rollback completed", extra={
            "event": "rollback_completed", "backup_id": backup_id, "count": sum(counts.values())})

    # ---------- миграция
    def _clear_existing_data(self) -> None:
        for model in reversed(m.TABLE_ORDER):
            self.session.query(model).delete()
        self.session.commit()
        self.log.info("Cleared existing data", extra={"event": "step_completed", "step": "clear"})

    def _ensure_default_user(self) -> bool:
        u = self.default_user
        if not u:
            return False
        exists = (self.session.get(m.User, u["id"])
                  or self.session.query(m.User).filter_by(email=u["email"]).first())
        if exists:
            return False
        self.session.add(m.User(
            id=u["id"],
            email=u["email"],
            name=u.get("name") or u["email"],
            role=m.UserRole(u.get("role", "TEACHER")),
        ))
        self.session.commit()
        self.log.info("Created default user", extra={"event": "step_completed", "step": "defaultUser"})
        return True

    def _compensate(self, completed: List[Tuple[GroupStep, List[str]]], *,
                    backup_id: Optional[str], restore: bool, created_user: bool) -> bool:
        try:
            for step, ids in reversed(completed):
                step.undo(self.session, ids)
                self.log.info(f"Undid {step.key}", extra={"event": "step_undone", "step": step.key, "count": len(ids)})
            if restore and backup_id:
                self.backups.restore(self.backups.load(backup_id))
            elif created_user and self.default_user:
                self.session.query(m.User).filter_by(id=self.default_user["id"]).delete()
                self.session.commit()
        except (SQLAlchemyError, MigrationError):
            self.session.rollback()
            self.log.error("Compensation failed; restore manually from backup", exc_info=True,
                           extra={"event": "compensation_failed", "backup_id": backup_id})
            return False
        self.log.info("Compensation completed", extra={"event": "compensation_completed", "backup_id": backup_id})
        return True

    def migrate_all_data(self, payload: Any, *, replace_existing: bool = True, dry_run: bool = False) -> MigrationResult:
        started = time.monotonic()
        self.log.info("Starting complete data migration", extra={"event": "migration_started"})

        errors = self.validate_input_data(payload, replace_existing=replace_existing)
        if errors:
            msg = f"Input validation failed: {len(errors)} error(s)"
            self.log.warning(msg, extra={"event": "validation_failed", "errors": [str(e) for e in errors]})
            return MigrationResult(success=False, errors=[str(e) for e in errors], message=msg)

        data = MigrationPayload.model_validate(payload)

        if dry_run:
            summary = {step.key: step.count(data) for step in GROUP_STEPS}
            self.log.info("Dry run completed", extra={"event": "dry_run_completed", "count": sum(summary.values())})
            return MigrationResult(success=True, summary=summary, message="Dry run: input is valid, nothing was written")

        # без бэкапа не трогаем БД (BackupError уходит вызывающему)
        backup_id = self.create_backup()

        completed: List[Tuple[GroupStep, List[str]]] = []
        summary: Dict[str, int] = {}
        current = "clear"
        cleared = created_user = False
        try:
            if replace_existing:
                self._clear_existing_data()
                cleared = True
            current = "defaultUser"
            created_user = self._ensure_default_user()
            for step in GROUP_STEPS:
                current = step.key
                ids = step.apply(self.session, data)
                completed.append((step, ids))
                summary[step.key] = len(ids)
                self.log.info(f"Migrated {len(ids)} {step.key}",
                              extra={"event": "step_completed", "step": step.key, "count": len(ids)})
        except SQLAlchemyError as exc:
            self.session.rollback()
            self.log.error("Data migration failed", exc_info=True,
                           extra={"event": "migration_failed", "step": current, "backup_id": backup_id})
            compensated = False
            if self.auto_compensate:
                compensated = self._compensate(completed, backup_id=backup_id, restore=cleared, created_user=created_user)
            hint = "changes were undone" if compensated else f"run rollback('{backup_id}') to restore"
            raise PersistenceError(
                f"Migration failed at step '{current}': {exc.__class__.__name__}; {hint}",
                step=current,
                completed_steps=[s.key for s, _ in completed],
                backup_id=backup_id,
            ) from exc

        duration_ms = int((time.monotonic() - started) * 1000)
        self.log.info("Data migration completed successfully", extra={
            "event": "migration_completed", "backup_id": backup_id,
            "count": sum(summary.values()), "duration_ms": duration_ms})
        return MigrationResult(
            success=True,
            summary=summary,
            message=f"Migrated {sum(summary.values())} records",
            backup_id=backup_id,
        )

    # ---------- проверки после миграции
    def validate_migration(self) -> bool:
        """Дымовая проверка: основные таблицы не пусты, связи не висят."""
        self.log.info("Validating migration", extra={"event": "validation_started"})
        try:
            counts = {
                "users": self.session.query(m.User).count(),
                "students": self.session.query(m.Student).count(),
                "classes": self.session.query(m.Class).count(),
                "enrollments": self.session.query(m.ClassEnrollment).count(),
                "schedules": self.session.query(m.Schedule).count(),
                "tests": self.session.query(m.Test).count(),
                "homeworkAssignments": self.session.query(m.HomeworkAssignment).count(),
            }
            orphans = (
                self.session.query(m.ClassEnrollment)
                .outerjoin(m.Student, m.Student.id == m.ClassEnrollment.student_id)
                .outerjoin(m.Class, m.Class.id == m.ClassEnrollment.class_id)
                .filter((m.Student.id.is_(None)) | (m.Class.id.is_(None)))
                .count()
            )
        except SQLAlchemyError:
            self.session.rollback()
            self.log.error("Migration validation failed", exc_info=True, extra={"event": "validation_failed"})
            return False

        self.log.info(f"Migration summary: {counts}", extra={"event": "migration_summary"})
        if counts["students"] == 0 or counts["classes"] == 0:
            self.log.error("Migration validation failed: Missing core data", extra={"event": "validation_failed"})
            return False
        if orphans:
            self.log.error(f"Migration validation failed: {orphans} orphan enrollment(s)",
                           extra={"event": "validation_failed"})
            return False
        self.log.info("Migration validation passed", extra={"event": "validation_passed"})
        return True

    def test_migration(self) -> Dict[str, Any]:
        """Прогоняет встроенные сценарии в режиме dry-run; БД не меняется."""
        from fixtures.sample_data import INVALID_SAMPLE_DATA, SAMPLE_DATA, empty_payload

        results: List[Dict[str, Any]] = []

        res = self.migrate_all_data(empty_payload(), dry_run=True)
        ok = res.success and not any((res.summary or {}).values())
        results.append({"test": "Empty data migration", "passed": ok,
                        "message": "all counts are zero" if ok else (res.message or "unexpected counts")})

        res = self.migrate_all_data(INVALID_SAMPLE_DATA, dry_run=True)
        ok = not res.success and bool(res.errors)
        results.append({"test": "Invalid data handling", "passed": ok,
                        "message": f"{len(res.errors or [])} validation error(s) reported"})

        res = self.migrate_all_data(SAMPLE_DATA, dry_run=True)
        ok = res.success and (res.summary or {}).get("students") == len(SAMPLE_DATA["students"])
        results.append({"test": "Sample data migration", "passed": ok,
                        "message": res.message or ""})

        passed = all(r["passed"] for r in results)
        self.log.info(f"Migration self-test {'passed' if passed else 'failed'}",
                      extra={"event": "self_test", "count": len(results)})
        return {"success": passed, "results": results}
