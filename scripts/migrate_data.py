"""
Перенос демо-данных (формат фронтенда) в БД.
Запуск:
  python scripts/migrate_data.py                       # SAMPLE_DATA, режим замены
  python scripts/migrate_data.py --fixture data.json   # свой payload из JSON-файла
  python scripts/migrate_data.py --append              # дозапись без очистки таблиц
  python scripts/migrate_data.py --dry-run             # только валидация и сводка
  python scripts/migrate_data.py --rollback backup-... # восстановить бэкап
  python scripts/migrate_data.py --list-backups
"""
import argparse
import json
import os
import sys

# добавить корень проекта в sys.path
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.dirname(BASE_DIR)
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from app import create_app, get_migration_service  # noqa: E402
from extensions import db  # noqa: E402
from data_migration import MigrationError  # noqa: E402
from fixtures.sample_data import sample_data  # noqa: E402


def _load_payload(path):
    if not path:
        return sample_data()
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="ClassBoard data migration")
    ap.add_argument("--config", default=os.getenv("FLASK_CONFIG", "default"), help="dev | test | prod")
    ap.add_argument("--fixture", help="JSON-файл с payload (по умолчанию встроенные демо-данные)")
    ap.add_argument("--append", action="store_true", help="не очищать таблицы перед вставкой")
    ap.add_argument("--dry-run", action="store_true", help="только проверить данные")
    ap.add_argument("--rollback", metavar="BACKUP_ID", help="восстановить состояние из бэкапа")
    ap.add_argument("--list-backups", action="store_true")
    args = ap.parse_args(argv)

    app = create_app(args.config)
    with app.app_context():
        db.create_all()
        svc = get_migration_service(app)

        if args.list_backups:
            for backup_id in svc.list_backups():
                print(backup_id)
            return 0

        try:
            if args.rollback:
                svc.rollback(args.rollback)
                print(f"Restored {args.rollback}")
                return 0

            print("Starting data migration...")
            try:
                payload = _load_payload(args.fixture)
            except (OSError, ValueError) as exc:
                print(f"Cannot read fixture: {exc}", file=sys.stderr)
                return 1
            result = svc.migrate_all_data(payload, replace_existing=not args.append, dry_run=args.dry_run)
        except MigrationError as exc:
            print(f"Data migration failed: {exc}", file=sys.stderr)
            return 1

        if not result.success:
            print(result.message, file=sys.stderr)
            for err in result.errors or []:
                print(f"  - {err}", file=sys.stderr)
            return 1

        for key, count in (result.summary or {}).items():
            print(f"  {key}: {count}")
        if args.dry_run:
            print(result.message)
            return 0

        if not svc.validate_migration():
            print("Data migration validation failed!", file=sys.stderr)
            return 1
        print(f"Data migration completed successfully (backup: {result.backup_id})")
        return 0


if __name__ == "__main__":
    sys.exit(main())
