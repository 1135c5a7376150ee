from __future__ import annotations
import json, logging
from datetime import datetime
from pathlib import Path

MIGRATION_LOGGER = "classboard.migration"

class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.utcnow().isoformat(timespec="milliseconds") + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in ("event", "step", "count", "backup_id", "duration_ms", "errors"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)

def setup_structured_logging(app) -> None:
    logger = app.logger
    has_json = any(
        isinstance(h, logging.StreamHandler)
        and isinstance(getattr(h, "formatter", None), JSONFormatter)
        for h in logger.handlers
    )
    if not has_json:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

def get_migration_logger(log_file: str | Path) -> logging.Logger:
    """Логгер миграции с файловым обработчиком на log_file (по одному на файл)."""
    path = Path(log_file).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(MIGRATION_LOGGER)
    logger.setLevel(logging.INFO)
    attached = any(
        isinstance(h, logging.FileHandler) and Path(h.baseFilename) == path
        for h in logger.handlers
    )
    if not attached:
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    return logger
