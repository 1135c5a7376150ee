from __future__ import annotations
import os
from pathlib import Path

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    BASE_DIR = Path(__file__).resolve().parent
    # SQLite файл в каталоге проекта; в проде — DATABASE_URL на PostgreSQL
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'classboard.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    BACKUP_DIR = os.getenv("CLASSBOARD_BACKUP_DIR", str(BASE_DIR / "backups"))
    MIGRATION_LOG_FILE = str(Path(os.getenv("CLASSBOARD_LOG_DIR", str(BASE_DIR / "logs"))) / "migration.log")
    # откатывать уже вставленные группы при ошибке посреди прогона
    MIGRATION_AUTO_COMPENSATE = False
    DEFAULT_USER = {
        "id": "default-teacher-1",
        "email": "teacher@classboard.com",
        "name": "Default Teacher",
        "role": "TEACHER",
    }

class DevConfig(BaseConfig):
    DEBUG = True

class TestConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"

class ProdConfig(BaseConfig):
    DEBUG = False
    JSON_SORT_KEYS = False

config_map = {
    "dev": DevConfig,
    "test": TestConfig,
    "prod": ProdConfig,
    "default": DevConfig,
}
