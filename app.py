from __future__ import annotations
import os
from flask import Flask
from config import config_map
from extensions import db, migrate
from data_migration.logs import setup_structured_logging


def get_migration_service(app: Flask | None = None):
    """Сервис миграции поверх db.session текущего приложения (нужен app context)."""
    from flask import current_app
    from data_migration import DataMigrationService
    app = app or current_app
    return DataMigrationService.from_config(app.config, db.session)


def create_app(config_name: str | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.setdefault("SECRET_KEY", "change-me-in-prod")
    cfg_name = config_name or os.getenv("FLASK_CONFIG", "default")
    app.config.from_object(config_map[cfg_name])
    # pytest выставляет PYTEST_CURRENT_TEST: БД в памяти, тесты не протекают друг в друга
    if os.environ.get("PYTEST_CURRENT_TEST"):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
        app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", {"connect_args": {"check_same_thread": False}})

    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        pass
    db.init_app(app)
    import models  # noqa: F401  регистрируем таблицы в metadata
    migrate.init_app(app, db)
    setup_structured_logging(app)
    return app
