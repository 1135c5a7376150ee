"""
Демонстрация проверок миграции без БД: валидация, email, контрольные суммы, состав данных.
Запуск:
  python scripts/demo_migration.py
"""
import json
import os
import sys

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.dirname(BASE_DIR)
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from data_migration import generate_checksum, validate_input_data  # noqa: E402
from data_migration.schemas import MigrationPayload  # noqa: E402
from data_migration.steps import GROUP_STEPS  # noqa: E402
from data_migration.validators import is_valid_email  # noqa: E402
from fixtures.sample_data import INVALID_SAMPLE_DATA, SAMPLE_DATA  # noqa: E402

DEMO_EMAILS = [
    "valid@example.com",
    "user.name@domain.co.uk",
    "test+tag@example.org",
    "invalid-email",
    "@example.com",
    "test@",
    "test.example.com",
    "",
]


def demo_validation():
    print("== Data validation")
    errors = validate_input_data(SAMPLE_DATA)
    if not errors:
        print("   valid data passed validation with no errors")
    else:
        print(f"   unexpected errors: {len(errors)}")

    errors = validate_input_data(INVALID_SAMPLE_DATA)
    print(f"   invalid data: {len(errors)} validation error(s)")
    for i, err in enumerate(errors, 1):
        print(f"   {i}. {err}")
    print()


def demo_emails():
    print("== Email validation")
    for email in DEMO_EMAILS:
        print(f"   {'ok ' if is_valid_email(email) else 'bad'} {email or '(empty)'}")
    print()


def demo_checksums():
    print("== Checksums")
    d1 = json.dumps({"test": "data", "number": 123})
    d2 = json.dumps({"test": "data", "number": 124})
    c1a, c1b, c2 = generate_checksum(d1), generate_checksum(d1), generate_checksum(d2)
    print(f"   same data, same checksum: {c1a == c1b}")
    print(f"   different data, different checksum: {c1a != c2}")
    print()


def demo_structure():
    # та же сводка, что вернул бы dry-run, но без БД
    print("== Sample data would migrate")
    payload = MigrationPayload.model_validate(SAMPLE_DATA)
    for step in GROUP_STEPS:
        print(f"   - {step.count(payload)} {step.key}")
    print()


def main() -> int:
    demo_validation()
    demo_emails()
    demo_checksums()
    demo_structure()
    return 0


if __name__ == "__main__":
    sys.exit(main())
