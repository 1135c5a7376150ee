from __future__ import annotations


class MigrationError(Exception):
    """Базовая ошибка миграции данных."""


class PersistenceError(MigrationError):
    """Хранилище отвергло запись; прогон прерван."""

    def __init__(self, message: str, *, step: str | None = None,
                 completed_steps: list[str] | None = None, backup_id: str | None = None):
        super().__init__(message)
        self.step = step
        self.completed_steps = list(completed_steps or [])
        self.backup_id = backup_id


class BackupError(MigrationError):
    """Бэкап нельзя записать или прочитать."""


class BackupNotFoundError(BackupError):
    def __init__(self, backup_id: str):
        super().__init__(f"Backup not found: {backup_id}")
        self.backup_id = backup_id
