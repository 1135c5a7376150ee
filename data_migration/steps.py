# data_migration/steps.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple
from uuid import uuid4

import models as m
from .schemas import MigrationPayload

def _new_id() -> str:
    return uuid4().hex

# ---------- payload -> ORM-объекты
def build_students(p: MigrationPayload) -> list:
    return [m.Student(**s.model_dump()) for s in p.students]

def build_classes(p: MigrationPayload) -> list:
    return [m.Class(**c.model_dump(exclude={"enrolled_students"})) for c in p.classes]

def build_enrollments(p: MigrationPayload) -> list:
    return [
        m.ClassEnrollment(id=_new_id(), class_id=c.id, student_id=sid)
        for c in p.classes
        for sid in c.enrolled_students
    ]

def build_schedules(p: MigrationPayload) -> list:
    return [m.Schedule(**s.model_dump()) for s in p.schedules]

def build_schedule_exceptions(p: MigrationPayload) -> list:
    return [m.ScheduleException(**e.model_dump()) for e in p.schedule_exceptions]

def build_meetings(p: MigrationPayload) -> list:
    return [m.Meeting(**mt.model_dump()) for mt in p.meetings]

def build_attendance_records(p: MigrationPayload) -> list:
    objs: list = []
    for r in p.attendance_records:
        objs.append(m.AttendanceRecord(**r.model_dump(exclude={"attendance_data"})))
        for e in r.attendance_data:
            objs.append(m.AttendanceEntry(id=_new_id(), attendance_record_id=r.id, **e.model_dump()))
    return objs

def build_class_notes(p: MigrationPayload) -> list:
    return [m.ClassNote(**n.model_dump()) for n in p.class_notes]

def build_tests(p: MigrationPayload) -> list:
    return [m.Test(**t.model_dump()) for t in p.tests]

def build_test_results(p: MigrationPayload) -> list:
    return [m.TestResult(**r.model_dump()) for r in p.test_results]

def build_homework_assignments(p: MigrationPayload) -> list:
    return [m.HomeworkAssignment(**a.model_dump()) for a in p.homework_assignments]

def build_homework_submissions(p: MigrationPayload) -> list:
    return [m.HomeworkSubmission(**s.model_dump()) for s in p.homework_submissions]


@dataclass
class GroupStep:
    """Шаг саги: вставка одной группы сущностей и обратное действие к ней."""
    key: str
    model: type
    build: Callable[[MigrationPayload], list]
    # (модель, fk-поле) — дочерние строки, которые создаёт этот же шаг
    children: Sequence[Tuple[type, str]] = ()

    def count(self, payload: MigrationPayload) -> int:
        return sum(1 for o in self.build(payload) if isinstance(o, self.model))

    def apply(self, session, payload: MigrationPayload) -> List[str]:
        objs = self.build(payload)
        ids = [o.id for o in objs if isinstance(o, self.model)]
        session.add_all(objs)
        session.commit()
        return ids

    def undo(self, session, ids: List[str]) -> None:
        if not ids:
            return
        for child, fk in self.children:
            session.query(child).filter(getattr(child, fk).in_(ids)).delete()
        session.query(self.model).filter(self.model.id.in_(ids)).delete()
        session.commit()


# порядок вставки: независимые -> связи -> зависимые
GROUP_STEPS: List[GroupStep] = [
    GroupStep("students", m.Student, build_students),
    GroupStep("classes", m.Class, build_classes),
    GroupStep("enrollments", m.ClassEnrollment, build_enrollments),
    GroupStep("schedules", m.Schedule, build_schedules),
    GroupStep("scheduleExceptions", m.ScheduleException, build_schedule_exceptions),
    GroupStep("meetings", m.Meeting, build_meetings),
    GroupStep("attendanceRecords", m.AttendanceRecord, build_attendance_records,
              children=((m.AttendanceEntry, "attendance_record_id"),)),
    GroupStep("classNotes", m.ClassNote, build_class_notes),
    GroupStep("tests", m.Test, build_tests),
    GroupStep("testResults", m.TestResult, build_test_results),
    GroupStep("homeworkAssignments", m.HomeworkAssignment, build_homework_assignments),
    GroupStep("homeworkSubmissions", m.HomeworkSubmission, build_homework_submissions),
]
