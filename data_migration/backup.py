# data_migration/backup.py
from __future__ import annotations
import hashlib
import json
from datetime import datetime, timezone
from enum import Enum as PyEnum
from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy import DateTime
from sqlalchemy.exc import SQLAlchemyError

from models import TABLE_ORDER
from .errors import BackupError, BackupNotFoundError, PersistenceError

BACKUP_PREFIX = "backup-"

def generate_checksum(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()

def _canonical(data: Dict[str, Any]) -> str:
    return json.dumps(data, sort_keys=True, ensure_ascii=False)

# ---------- строки <-> dict
def _dump_value(v: Any) -> Any:
    if isinstance(v, PyEnum):
        return v.value
    if isinstance(v, datetime):
        return v.isoformat()
    return v

def _load_value(column, v: Any) -> Any:
    if v is None:
        return None
    enum_class = getattr(column.type, "enum_class", None)
    if enum_class is not None:
        return enum_class(v)
    if isinstance(column.type, DateTime):
        return datetime.fromisoformat(v)
    return v

def row_to_dict(row) -> Dict[str, Any]:
    return {c.key: _dump_value(getattr(row, c.key)) for c in row.__table__.columns}

def dict_to_row(model, data: Dict[str, Any]):
    cols = model.__table__.columns
    return model(**{c.key: _load_value(c, data[c.key]) for c in cols if c.key in data})


class BackupStore:
    """Снимки всех таблиц в JSON-файлах backups/backup-<timestamp>.json."""

    def __init__(self, session, directory: str | Path):
        self.session = session
        self.directory = Path(directory)

    def _path(self, backup_id: str) -> Path:
        return self.directory / f"{backup_id}.json"

    def _new_id(self, ts: datetime) -> str:
        base = f"{BACKUP_PREFIX}{ts.strftime('%Y-%m-%dT%H-%M-%S-%fZ')}"
        backup_id, n = base, 0
        while self._path(backup_id).exists():
            n += 1
            backup_id = f"{base}-{n}"
        return backup_id

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            model.__tablename__: [row_to_dict(r) for r in self.session.query(model).order_by(model.id).all()]
            for model in TABLE_ORDER
        }

    def create(self) -> str:
        try:
            data = self.snapshot()
        except SQLAlchemyError as exc:
            raise BackupError(f"Cannot read current state for backup: {exc}") from exc

        ts = datetime.now(timezone.utc)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            backup_id = self._new_id(ts)
            doc = {
                "id": backup_id,
                "timestamp": ts.isoformat(),
                "checksum": generate_checksum(_canonical(data)),
                "data": data,
            }
            self._path(backup_id).write_text(json.dumps(doc, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            raise BackupError(f"Cannot write backup to {self.directory}: {exc}") from exc
        return backup_id

    def load(self, backup_id: str) -> Dict[str, List[Dict[str, Any]]]:
        if backup_id and backup_id.endswith(".json"):
            backup_id = backup_id[:-len(".json")]
        # только имя файла внутри каталога бэкапов
        if not backup_id or Path(backup_id).name != backup_id:
            raise BackupNotFoundError(str(backup_id))
        path = self._path(backup_id)
        if not path.is_file():
            raise BackupNotFoundError(backup_id)
        try:
            doc = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise BackupError(f"Cannot read backup {backup_id}: {exc}") from exc

        data = doc.get("data") if isinstance(doc, dict) else None
        if not isinstance(data, dict):
            raise BackupError(f"Backup {backup_id} has no data section")
        if generate_checksum(_canonical(data)) != doc.get("checksum"):
            raise BackupError(f"Backup {backup_id} checksum mismatch")
        return data

    def restore(self, data: Dict[str, List[Dict[str, Any]]]) -> Dict[str, int]:
        """Полностью заменяет содержимое таблиц снимком; одна транзакция."""
        counts: Dict[str, int] = {}
        try:
            for model in reversed(TABLE_ORDER):
                self.session.query(model).delete()
            for model in TABLE_ORDER:
                rows = data.get(model.__tablename__) or []
                self.session.add_all([dict_to_row(model, r) for r in rows])
                self.session.flush()
                counts[model.__tablename__] = len(rows)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(f"Restore failed: {exc}") from exc
        except (ValueError, TypeError, AttributeError) as exc:
            self.session.rollback()
            raise BackupError(f"Backup data is malformed: {exc}") from exc
        return counts

    def list(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob(f"{BACKUP_PREFIX}*.json"))
