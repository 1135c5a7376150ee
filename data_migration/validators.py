# data_migration/validators.py
from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from .schemas import ENTITY_MODELS

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

PARTICIPANT_TYPES = ("students", "parents", "teachers")
MEETING_TYPES = ("in-person", "in_person", "virtual")
MEETING_STATUSES = ("scheduled", "completed", "cancelled")
ATTENDANCE_STATUSES = ("present", "absent", "late", "excused")
TEST_TYPES = ("quiz", "exam", "assignment", "project")
SUBMISSION_STATUSES = ("not_submitted", "submitted", "graded", "late")

# ---------- контракт ошибки
@dataclass
class EntityError:
    entity: str
    id: str
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.entity}[{self.id}].{self.field}: {self.message}"

# ---------- helpers
def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.match(value))

def is_valid_time(value: Any) -> bool:
    return isinstance(value, str) and bool(TIME_RE.match(value))

def _is_blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())

def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)

def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)

def _rid(row: Mapping[str, Any]) -> str:
    v = row.get("id")
    return "" if v is None else str(v)

@dataclass
class _Context:
    refs: dict[str, set[str]]         # сущность -> id, на которые можно ссылаться
    existing: dict[str, set[str]]     # сущность -> id, уже лежащие в хранилище
    # сущность -> уникальные пары (testId, studentId) и т.п., уже лежащие в хранилище
    existing_pairs: dict[str, set[tuple[str, str]]] = field(default_factory=dict)
    errors: list[EntityError] = field(default_factory=list)

    def add(self, entity: str, rec_id: str, fld: str, message: str) -> None:
        self.errors.append(EntityError(entity, rec_id, fld, message))

    def ref(self, entity: str, rec_id: str, fld: str, value: Any, target: str) -> None:
        # пустые и нестроковые значения уже отмечены проверкой обязательных полей
        if _is_blank(value) or not isinstance(value, str):
            return
        if str(value) not in self.refs.get(target, set()):
            self.add(entity, rec_id, fld, f"References non-existent {target}: {value}")

# ---------- общие правила
def _check_required(ctx: _Context, entity: str, row: Mapping[str, Any], fields: list[str]) -> set[str]:
    """Одна ошибка на запись со всеми пустыми обязательными полями.

    Возвращает поля, которые дальше проверять не нужно (пустые или не строки).
    """
    rid = _rid(row)
    missing = [f for f in fields if _is_blank(row.get(f))]
    if missing:
        ctx.add(entity, rid, ", ".join(missing), f"Missing required fields: {', '.join(missing)}")
    skip = set(missing)
    for f in fields:
        if f not in skip and not isinstance(row.get(f), str):
            ctx.add(entity, rid, f, "Expected a string")
            skip.add(f)
    return skip

def _check_enum(ctx: _Context, entity: str, row: Mapping[str, Any], fld: str, allowed: tuple[str, ...], missing: set[str]) -> None:
    if fld in missing:
        return
    v = row.get(fld)
    if v not in allowed:
        ctx.add(entity, _rid(row), fld, f"Invalid value '{v}' (expected one of: {', '.join(allowed)})")

def _check_time_window(ctx: _Context, entity: str, row: Mapping[str, Any], missing: set[str]) -> None:
    rid = _rid(row)
    ok = True
    for fld in ("startTime", "endTime"):
        if fld in missing:
            ok = False
            continue
        if not is_valid_time(row.get(fld)):
            ctx.add(entity, rid, fld, "Invalid time format (expected HH:MM)")
            ok = False
    if ok and row["endTime"] <= row["startTime"]:
        ctx.add(entity, rid, "endTime", "End time must be after start time")

def _check_positive(ctx: _Context, entity: str, row: Mapping[str, Any], fld: str, message: str) -> bool:
    v = row.get(fld)
    if not _is_number(v) or v <= 0:
        ctx.add(entity, _rid(row), fld, message)
        return False
    return True

def _check_score(ctx: _Context, entity: str, row: Mapping[str, Any], max_ok: bool, *, optional: bool) -> None:
    v = row.get("score")
    if v is None and optional:
        return
    upper = row["maxScore"] if max_ok else None
    if not _is_number(v) or v < 0 or (upper is not None and v > upper):
        ctx.add(entity, _rid(row), "score", "Score must be between 0 and maxScore")

def _check_list(ctx: _Context, entity: str, row: Mapping[str, Any], fld: str) -> list:
    v = row.get(fld)
    if v is None:
        return []
    if not isinstance(v, list):
        ctx.add(entity, _rid(row), fld, "Expected a list")
        return []
    return v

# ---------- валидация по сущностям
def validate_students(ctx: _Context, row: Mapping[str, Any]) -> None:
    missing = _check_required(ctx, "student", row, ["id", "name", "email"])
    if "email" not in missing and not is_valid_email(row.get("email")):
        ctx.add("student", _rid(row), "email", "Invalid email format")

def validate_classes(ctx: _Context, row: Mapping[str, Any]) -> None:
    rid = _rid(row)
    _check_required(ctx, "class", row, ["id", "name", "subject"])
    cap = row.get("capacity")
    if not _is_int(cap) or cap <= 0:
        ctx.add("class", rid, "capacity", "Capacity must be greater than 0")
    seen: set[str] = set()
    for sid in _check_list(ctx, "class", row, "enrolledStudents"):
        if _is_blank(sid) or not isinstance(sid, str):
            ctx.add("class", rid, "enrolledStudents", "Invalid student reference")
            continue
        if sid in seen:
            ctx.add("class", rid, "enrolledStudents", f"Duplicate enrollment: {sid}")
            continue
        seen.add(sid)
        if (rid, sid) in ctx.existing_pairs.get("enrollment", set()):
            ctx.add("class", rid, "enrolledStudents", f"Record already exists for classId {rid} and studentId {sid}")
            continue
        ctx.ref("class", rid, "enrolledStudents", sid, "student")

def validate_schedules(ctx: _Context, row: Mapping[str, Any]) -> None:
    rid = _rid(row)
    missing = _check_required(ctx, "schedule", row, ["id", "classId", "startTime", "endTime"])
    dow = row.get("dayOfWeek")
    if not _is_int(dow) or not 0 <= dow <= 6:
        ctx.add("schedule", rid, "dayOfWeek", "Day of week must be between 0-6")
    _check_time_window(ctx, "schedule", row, missing)
    ctx.ref("schedule", rid, "classId", row.get("classId"), "class")

def validate_schedule_exceptions(ctx: _Context, row: Mapping[str, Any]) -> None:
    missing = _check_required(ctx, "scheduleException", row, ["id", "scheduleId", "date", "startTime", "endTime"])
    _check_time_window(ctx, "scheduleException", row, missing)
    ctx.ref("scheduleException", _rid(row), "scheduleId", row.get("scheduleId"), "schedule")

def validate_meetings(ctx: _Context, row: Mapping[str, Any]) -> None:
    missing = _check_required(ctx, "meeting", row, [
        "id", "title", "date", "startTime", "endTime", "participantType", "meetingType", "status"])
    _check_time_window(ctx, "meeting", row, missing)
    _check_enum(ctx, "meeting", row, "participantType", PARTICIPANT_TYPES, missing)
    _check_enum(ctx, "meeting", row, "meetingType", MEETING_TYPES, missing)
    _check_enum(ctx, "meeting", row, "status", MEETING_STATUSES, missing)
    _check_list(ctx, "meeting", row, "participants")

def validate_attendance_records(ctx: _Context, row: Mapping[str, Any]) -> None:
    rid = _rid(row)
    _check_required(ctx, "attendanceRecord", row, ["id", "classId", "date"])
    ctx.ref("attendanceRecord", rid, "classId", row.get("classId"), "class")
    seen: set[str] = set()
    for entry in _check_list(ctx, "attendanceRecord", row, "attendanceData"):
        if not isinstance(entry, Mapping):
            ctx.add("attendanceRecord", rid, "attendanceData", "Expected an object")
            continue
        sid = entry.get("studentId")
        if _is_blank(sid) or not isinstance(sid, str):
            ctx.add("attendanceRecord", rid, "attendanceData", "Missing required fields: studentId")
        elif sid in seen:
            ctx.add("attendanceRecord", rid, "studentId", f"Duplicate attendance entry for student: {sid}")
        else:
            seen.add(sid)
            ctx.ref("attendanceRecord", rid, "studentId", sid, "student")
        if entry.get("status") not in ATTENDANCE_STATUSES:
            ctx.add("attendanceRecord", rid, "status",
                    f"Invalid value '{entry.get('status')}' (expected one of: {', '.join(ATTENDANCE_STATUSES)})")

def validate_class_notes(ctx: _Context, row: Mapping[str, Any]) -> None:
    _check_required(ctx, "classNote", row, ["id", "classId", "date", "content"])
    ctx.ref("classNote", _rid(row), "classId", row.get("classId"), "class")
    _check_list(ctx, "classNote", row, "topics")

def validate_tests(ctx: _Context, row: Mapping[str, Any]) -> None:
    rid = _rid(row)
    missing = _check_required(ctx, "test", row, ["id", "classId", "title", "testDate", "testType"])
    _check_positive(ctx, "test", row, "totalPoints", "Total points must be greater than 0")
    _check_enum(ctx, "test", row, "testType", TEST_TYPES, missing)
    if row.get("testTime") is not None and not is_valid_time(row.get("testTime")):
        ctx.add("test", rid, "testTime", "Invalid time format (expected HH:MM)")
    ctx.ref("test", rid, "classId", row.get("classId"), "class")

def validate_test_results(ctx: _Context, row: Mapping[str, Any]) -> None:
    rid = _rid(row)
    _check_required(ctx, "testResult", row, ["id", "testId", "studentId"])
    max_ok = _check_positive(ctx, "testResult", row, "maxScore", "Max score must be greater than 0")
    _check_score(ctx, "testResult", row, max_ok, optional=False)
    pct = row.get("percentage")
    if not _is_number(pct) or not 0 <= pct <= 100:
        ctx.add("testResult", rid, "percentage", "Percentage must be between 0 and 100")
    ctx.ref("testResult", rid, "testId", row.get("testId"), "test")
    ctx.ref("testResult", rid, "studentId", row.get("studentId"), "student")

def validate_homework_assignments(ctx: _Context, row: Mapping[str, Any]) -> None:
    _check_required(ctx, "homeworkAssignment", row, ["id", "classId", "title", "dueDate"])
    _check_positive(ctx, "homeworkAssignment", row, "totalPoints", "Total points must be greater than 0")
    ctx.ref("homeworkAssignment", _rid(row), "classId", row.get("classId"), "class")
    _check_list(ctx, "homeworkAssignment", row, "resources")

def validate_homework_submissions(ctx: _Context, row: Mapping[str, Any]) -> None:
    rid = _rid(row)
    missing = _check_required(ctx, "homeworkSubmission", row, ["id", "assignmentId", "studentId", "status"])
    max_ok = _check_positive(ctx, "homeworkSubmission", row, "maxScore", "Max score must be greater than 0")
    _check_score(ctx, "homeworkSubmission", row, max_ok, optional=True)
    _check_enum(ctx, "homeworkSubmission", row, "status", SUBMISSION_STATUSES, missing)
    ctx.ref("homeworkSubmission", rid, "assignmentId", row.get("assignmentId"), "homeworkAssignment")
    ctx.ref("homeworkSubmission", rid, "studentId", row.get("studentId"), "student")

# ---------- фасад
# (ключ payload, сущность, валидатор, поля уникальной пары)
ENTITY_SPEC: list[tuple[str, str, Callable[[_Context, Mapping[str, Any]], None], tuple[str, str] | None]] = [
    ("students", "student", validate_students, None),
    ("classes", "class", validate_classes, None),
    ("schedules", "schedule", validate_schedules, None),
    ("scheduleExceptions", "scheduleException", validate_schedule_exceptions, None),
    ("meetings", "meeting", validate_meetings, None),
    ("attendanceRecords", "attendanceRecord", validate_attendance_records, None),
    ("classNotes", "classNote", validate_class_notes, None),
    ("tests", "test", validate_tests, None),
    ("testResults", "testResult", validate_test_results, ("testId", "studentId")),
    ("homeworkAssignments", "homeworkAssignment", validate_homework_assignments, None),
    ("homeworkSubmissions", "homeworkSubmission", validate_homework_submissions, ("assignmentId", "studentId")),
]

PAYLOAD_KEYS = [key for key, *_ in ENTITY_SPEC]

# поля правил, которые в схеме лежат внутри вложенного списка
_NESTED_FIELDS = {
    ("attendanceRecord", "studentId"): "attendanceData",
    ("attendanceRecord", "status"): "attendanceData",
}

def _reported_fields(entity: str, errors: list[EntityError]) -> set[str]:
    out: set[str] = set()
    for e in errors:
        for f in e.field.split(", "):
            out.add(_NESTED_FIELDS.get((entity, f), f))
    return out

def _pydantic_errors(entity: str, rec_id: str, ve: ValidationError, skip: set[str], row_failed: bool) -> list[EntityError]:
    """Ошибки схемы по полям, о которых правила ещё не сообщили."""
    out = []
    for e in ve.errors():
        loc = e.get("loc", ())
        if not loc:
            # ошибка уровня записи (model_validator) дублирует правило
            if row_failed:
                continue
            out.append(EntityError(entity, rec_id, "record", e.get("msg", "Invalid value")))
            continue
        if str(loc[0]) in skip:
            continue
        out.append(EntityError(entity, rec_id, ".".join(str(p) for p in loc), e.get("msg", "Invalid value")))
    return out

def validate_input_data(payload: Any, existing: Mapping[str, set[str]] | None = None,
                        existing_pairs: Mapping[str, set[tuple[str, str]]] | None = None) -> list[EntityError]:
    """
    Проверяет payload целиком и возвращает ВСЕ найденные ошибки (пустой список — можно мигрировать).
    existing: id, уже лежащие в хранилище (режим дозаписи); на них разрешены ссылки,
    но повторная вставка того же id — ошибка.
    existing_pairs: уже сохранённые уникальные пары ("enrollment", "testResult",
    "homeworkSubmission"); повтор такой пары — тоже ошибка.
    """
    if not isinstance(payload, Mapping):
        return [EntityError("payload", "", "payload", "Expected an object with entity arrays")]

    existing = {k: set(v) for k, v in (existing or {}).items()}
    ctx = _Context(refs={}, existing=existing,
                   existing_pairs={k: set(v) for k, v in (existing_pairs or {}).items()})

    # 1) разбираем группы и собираем id для ссылок
    groups: list[tuple[str, Callable, tuple[str, str] | None, list[Mapping[str, Any]]]] = []
    for key, entity, validator, unique_pair in ENTITY_SPEC:
        rows = payload.get(key)
        if rows is None:
            rows = []
        if not isinstance(rows, list):
            ctx.add("payload", "", key, "Expected a list")
            rows = []
        good: list[Mapping[str, Any]] = []
        for i, row in enumerate(rows):
            if not isinstance(row, Mapping):
                ctx.add(entity, f"#{i}", "record", "Expected an object")
                continue
            good.append(row)
        ids = {str(r["id"]) for r in good if not _is_blank(r.get("id"))}
        ctx.refs[entity] = ids | existing.get(entity, set())
        groups.append((entity, validator, unique_pair, good))

    # 2) правила по записям
    for entity, validator, unique_pair, rows in groups:
        seen_ids: set[str] = set()
        stored_pairs = ctx.existing_pairs.get(entity, set())
        seen_pairs: set[tuple[str, str]] = set()
        schema = ENTITY_MODELS[entity]
        for row in rows:
            before = len(ctx.errors)
            rid = _rid(row)
            if rid:
                if rid in seen_ids:
                    ctx.add(entity, rid, "id", "Duplicate id")
                elif rid in existing.get(entity, set()):
                    ctx.add(entity, rid, "id", "Record already exists")
                seen_ids.add(rid)
            if unique_pair:
                a, b = (row.get(f) for f in unique_pair)
                if isinstance(a, str) and isinstance(b, str) and a.strip() and b.strip():
                    if (a, b) in stored_pairs:
                        ctx.add(entity, rid, unique_pair[1], f"Record already exists for {unique_pair[0]} {a} and {unique_pair[1]} {b}")
                    elif (a, b) in seen_pairs:
                        ctx.add(entity, rid, unique_pair[1], f"Duplicate {entity} for {unique_pair[0]} {a} and {unique_pair[1]} {b}")
                    seen_pairs.add((a, b))
            validator(ctx, row)
            # схема ловит то, что не покрыто правилами выше (типы необязательных полей и т.п.)
            row_errors = ctx.errors[before:]
            try:
                schema.model_validate(row)
            except ValidationError as ve:
                ctx.errors.extend(_pydantic_errors(
                    entity, rid, ve, _reported_fields(entity, row_errors), bool(row_errors)))
    return ctx.errors
