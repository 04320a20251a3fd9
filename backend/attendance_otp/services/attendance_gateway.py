"""Orchestration of the instructor and student attendance operations."""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List

from sqlalchemy.exc import SQLAlchemyError

from attendance_otp import db
from attendance_otp.errors import (
    ClassNotFound, InvalidCode, NoActiveSession, StorageUnavailable,
    StudentNotFound, Unauthorized
)
from attendance_otp.models.course_class import CourseClass
from attendance_otp.models.user import User
from attendance_otp.services.attendance_ledger import AttendanceLedger, MarkOutcome
from attendance_otp.services.code_deriver import CodeDeriver
from attendance_otp.services.session_store import SessionStore
from attendance_otp.utils.clock import Clock

logger = logging.getLogger(__name__)

FirstMarkListener = Callable[[str, str, date], None]


@dataclass
class CodeGrant:
    """Code currently displayed for a class."""
    code: str
    expires_in_ms: int
    session_id: int
    session_expires_at: datetime
    created: bool

    def to_dict(self) -> Dict:
        return {
            'code': self.code,
            'expires_in_ms': self.expires_in_ms,
            'session_expires_at': self.session_expires_at.isoformat(),
        }


@dataclass
class SubmissionResult:
    """Accepted submission; rejections are raised as AttendanceError."""
    outcome: MarkOutcome
    day: date

    @property
    def accepted(self) -> bool:
        return True

    @property
    def first_mark(self) -> bool:
        return self.outcome is MarkOutcome.CREATED


class AttendanceGateway:
    """Entry point for opening sessions and submitting codes."""

    def __init__(
        self,
        session_store: SessionStore,
        ledger: AttendanceLedger,
        deriver: CodeDeriver,
        clock: Clock,
        timezone: str = 'UTC'
    ):
        self.session_store = session_store
        self.ledger = ledger
        self.deriver = deriver
        self.clock = clock
        self.timezone = timezone
        self._first_mark_listeners: List[FirstMarkListener] = [self._log_first_mark]

    def on_first_mark(self, listener: FirstMarkListener) -> FirstMarkListener:
        """Register a callback run once per new (student, class, day) mark."""
        self._first_mark_listeners.append(listener)
        return listener

    def today(self) -> date:
        return self.clock.today(self.timezone)

    def request_code(self, class_id: str, requester: User, issuer_address: str = None) -> CodeGrant:
        """Open or refresh the attendance window and return the current code."""
        with self._storage_guard('request_code'):
            course_class = self._authorize_instructor(class_id, requester)
            ticket = self.session_store.open_or_refresh(
                course_class.id,
                issuer_address=issuer_address,
                issued_by=requester.id
            )

        return CodeGrant(
            code=ticket.code,
            expires_in_ms=ticket.expires_in_ms,
            session_id=ticket.session.id,
            session_expires_at=ticket.session.expires_at,
            created=ticket.created
        )

    def session_status(self, class_id: str, requester: User) -> Dict:
        with self._storage_guard('session_status'):
            self._authorize_instructor(class_id, requester)
            session = self.session_store.find_active(class_id)
            if session is None:
                return {'class_id': class_id, 'active': False}
            return {
                'class_id': class_id,
                'active': True,
                'session_id': session.id,
                'created_at': session.created_at.isoformat(),
                'expires_at': session.expires_at.isoformat(),
            }

    def close_session(self, class_id: str, requester: User) -> bool:
        with self._storage_guard('close_session'):
            self._authorize_instructor(class_id, requester)
            return self.session_store.close(class_id)

    def submit_code(
        self,
        class_id: str,
        student_id: str,
        code: str,
        latitude: float = None,
        longitude: float = None
    ) -> SubmissionResult:
        """Validate a student's code and record the mark for today.

        Raises NoActiveSession or InvalidCode when rejected. Re-submitting
        after a successful mark is accepted again without a second record.
        """
        day = self.today()
        with self._storage_guard('submit_code'):
            student = db.session.get(User, student_id)
            if student is None:
                raise StudentNotFound()
            if not student.is_student():
                raise Unauthorized("Only students can submit attendance codes")

            session = self.session_store.find_active(class_id)
            if session is None:
                raise NoActiveSession()

            if not self.deriver.validate(session.secret, code):
                logger.info("Rejected code from %s for class %s", student_id, class_id)
                raise InvalidCode()

            outcome = self.ledger.mark_present(
                student_id, class_id, day,
                method='code',
                latitude=latitude,
                longitude=longitude,
                session_id=session.id
            )

        if outcome is MarkOutcome.CREATED:
            self._notify_first_mark(student_id, class_id, day)
        return SubmissionResult(outcome=outcome, day=day)

    def bulk_mark(
        self,
        class_id: str,
        requester: User,
        student_ids: Iterable[str],
        day: date = None
    ) -> Dict[str, int]:
        """Manually mark students present, as a fallback to code entry."""
        day = day or self.today()
        with self._storage_guard('bulk_mark'):
            self._authorize_instructor(class_id, requester)
            student_ids = list(dict.fromkeys(student_ids))
            known = {
                user.id for user in User.query.filter(User.id.in_(student_ids)).all()
                if user.is_student()
            }
            unknown = [student_id for student_id in student_ids if student_id not in known]
            if unknown:
                raise StudentNotFound(f"Unknown students: {', '.join(unknown)}")

            counts = self.ledger.mark_many(student_ids, class_id, day, method='manual')

        logger.info(
            "Bulk mark for class %s on %s by %s: %d created, %d already marked",
            class_id, day, requester.id, counts['created'], counts['already_marked']
        )
        return counts

    def present_class_ids(self, student_id: str, day: date = None) -> List[str]:
        with self._storage_guard('present_class_ids'):
            return self.ledger.present_class_ids(student_id, day or self.today())

    def _authorize_instructor(self, class_id: str, requester: User) -> CourseClass:
        course_class = db.session.get(CourseClass, class_id)
        if course_class is None:
            raise ClassNotFound(f"Class {class_id} not found")
        if not course_class.is_instructed_by(requester):
            raise Unauthorized(f"Only the instructor of {class_id} can manage its attendance")
        return course_class

    def _notify_first_mark(self, student_id: str, class_id: str, day: date) -> None:
        for listener in self._first_mark_listeners:
            try:
                listener(student_id, class_id, day)
            except Exception:
                # The mark is already committed at this point.
                logger.exception("First-mark listener %r failed", listener)

    @staticmethod
    def _log_first_mark(student_id: str, class_id: str, day: date) -> None:
        logger.info("Student %s marked present in %s for %s", student_id, class_id, day)

    @contextmanager
    def _storage_guard(self, operation: str):
        try:
            yield
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Storage failure during %s", operation)
            raise StorageUnavailable() from exc
