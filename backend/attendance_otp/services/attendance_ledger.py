"""Append-only attendance ledger with one mark per student, class and day."""
import enum
import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, insert
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from attendance_otp import db
from attendance_otp.models.attendance import AttendanceMark
from attendance_otp.utils.clock import Clock

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO NOTHING
UPSERT_INSERTS = {
    'postgresql': postgresql_insert,
    'sqlite': sqlite_insert,
}

MARK_KEY = ['student_id', 'class_id', 'day']


class MarkOutcome(enum.Enum):
    """Result of recording a mark."""
    CREATED = 'created'
    ALREADY_MARKED = 'already_marked'


class AttendanceLedger:
    """Record attendance marks, relying on the storage uniqueness constraint."""

    def __init__(self, clock: Clock):
        self.clock = clock

    def mark_present(
        self,
        student_id: str,
        class_id: str,
        day: date,
        method: str = 'code',
        latitude: float = None,
        longitude: float = None,
        session_id: int = None
    ) -> MarkOutcome:
        """Insert the mark unless (student, class, day) already exists."""
        now = self.clock.utcnow()
        values = {
            'student_id': student_id,
            'class_id': class_id,
            'day': day,
            'marked_at': now,
            'created_at': now,
            'updated_at': now,
            'method': method,
            'latitude': latitude,
            'longitude': longitude,
            'session_id': session_id,
        }
        table = AttendanceMark.__table__
        upsert = UPSERT_INSERTS.get(db.engine.dialect.name)

        try:
            if upsert is not None:
                statement = upsert(table).values(**values).on_conflict_do_nothing(index_elements=MARK_KEY)
                created = db.session.execute(statement).rowcount == 1
            else:
                db.session.execute(insert(table).values(**values))
                created = True
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            # Only a clash on the mark key means the student is already present
            if not self.is_marked(student_id, class_id, day):
                raise
            created = False

        if created:
            logger.debug("Marked %s present in %s on %s via %s", student_id, class_id, day, method)
            return MarkOutcome.CREATED
        return MarkOutcome.ALREADY_MARKED

    def mark_many(
        self,
        student_ids: Iterable[str],
        class_id: str,
        day: date,
        method: str = 'manual'
    ) -> Dict[str, int]:
        """Mark several students, counting new and pre-existing marks."""
        counts = {'created': 0, 'already_marked': 0}
        for student_id in dict.fromkeys(student_ids):
            outcome = self.mark_present(student_id, class_id, day, method=method)
            counts[outcome.value] += 1
        return counts

    def is_marked(self, student_id: str, class_id: str, day: date) -> bool:
        query = AttendanceMark.query.filter_by(student_id=student_id, class_id=class_id, day=day)
        return db.session.query(query.exists()).scalar()

    def marks_for_student(self, student_id: str, day: Optional[date] = None) -> List[AttendanceMark]:
        query = AttendanceMark.query.filter_by(student_id=student_id)
        if day is not None:
            query = query.filter_by(day=day)
        return query.order_by(AttendanceMark.day, AttendanceMark.class_id).all()

    def present_class_ids(self, student_id: str, day: date) -> List[str]:
        """Class ids the student was marked present for on day."""
        return [mark.class_id for mark in self.marks_for_student(student_id, day)]

    def count_for_class(self, class_id: str, day: Optional[date] = None) -> int:
        query = db.session.query(func.count(AttendanceMark.id)).filter(AttendanceMark.class_id == class_id)
        if day is not None:
            query = query.filter(AttendanceMark.day == day)
        return query.scalar()
