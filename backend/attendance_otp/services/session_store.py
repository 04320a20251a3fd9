"""Attendance session lifecycle: find the live window or open a new one."""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError

from attendance_otp import db
from attendance_otp.errors import StorageUnavailable
from attendance_otp.models.attendance_session import AttendanceSession
from attendance_otp.services.code_deriver import CodeDeriver
from attendance_otp.services.secret_generator import SecretGenerator
from attendance_otp.utils.clock import Clock

logger = logging.getLogger(__name__)


@dataclass
class SessionTicket:
    """Result of opening or refreshing a window."""
    session: AttendanceSession
    code: str
    expires_in_ms: int
    created: bool


class SessionStore:
    """Single point of truth for the one-live-session-per-class rule.

    Liveness is evaluated lazily on every read (``is_active`` and
    ``expires_at > now``). Creation races are settled by the unique
    ``active_class_id`` column: the losing writer rolls back and reuses the
    winner's session.
    """

    def __init__(
        self,
        deriver: CodeDeriver,
        secret_generator: SecretGenerator,
        clock: Clock,
        lifetime: timedelta = timedelta(hours=2),
        max_attempts: int = 3
    ):
        self.deriver = deriver
        self.secret_generator = secret_generator
        self.clock = clock
        self.lifetime = lifetime
        self.max_attempts = max_attempts

    def find_active(self, class_id: str) -> Optional[AttendanceSession]:
        """Return the live session for class_id, if any."""
        now = self.clock.utcnow()
        return AttendanceSession.query.filter(
            AttendanceSession.class_id == class_id,
            AttendanceSession.is_active.is_(True),
            AttendanceSession.expires_at > now
        ).order_by(AttendanceSession.created_at.desc()).first()

    def open_or_refresh(
        self,
        class_id: str,
        issuer_address: str = None,
        issued_by: str = None
    ) -> SessionTicket:
        """Reuse the live session for class_id or create one."""
        for attempt in range(1, self.max_attempts + 1):
            session = self.find_active(class_id)
            if session is not None:
                return self._ticket(session, created=False)

            now = self.clock.utcnow()
            self._retire_stale(class_id, now)
            session = AttendanceSession(
                class_id=class_id,
                secret=self.secret_generator.generate(),
                created_at=now,
                updated_at=now,
                expires_at=now + self.lifetime,
                is_active=True,
                active_class_id=class_id,
                issuer_address=issuer_address,
                issued_by=issued_by
            )
            db.session.add(session)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                logger.info(
                    "Concurrent session creation for class %s (attempt %d), re-reading",
                    class_id, attempt
                )
                continue

            logger.info(
                "Opened attendance session %s for class %s until %s (issuer %s)",
                session.id, class_id, session.expires_at.isoformat(), issuer_address
            )
            return self._ticket(session, created=True)

        raise StorageUnavailable(f"Could not open an attendance session for class {class_id}")

    def close(self, class_id: str) -> bool:
        """End the live session for class_id early. Returns False if none was live."""
        session = self.find_active(class_id)
        if session is None:
            return False

        session.retire(self.clock.utcnow())
        db.session.commit()
        logger.info("Closed attendance session %s for class %s", session.id, class_id)
        return True

    def _retire_stale(self, class_id: str, now) -> None:
        # Expired rows keep their active slot until the next open for the class.
        AttendanceSession.query.filter(
            AttendanceSession.class_id == class_id,
            AttendanceSession.is_active.is_(True),
            AttendanceSession.expires_at <= now
        ).update(
            {'is_active': False, 'active_class_id': None, 'closed_at': now},
            synchronize_session=False
        )

    def _ticket(self, session: AttendanceSession, created: bool) -> SessionTicket:
        return SessionTicket(
            session=session,
            code=self.deriver.current_code(session.secret),
            expires_in_ms=self.deriver.milliseconds_remaining(),
            created=created
        )
