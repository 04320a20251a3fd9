"""Attendance session holding the one-time-code secret for a class."""
from datetime import datetime
from attendance_otp import db
from attendance_otp.models.base import BaseModel


class AttendanceSession(BaseModel):
    """Time-bounded attendance window opened by an instructor."""

    __tablename__ = 'attendance_sessions'
    __table_args__ = (
        db.Index('ix_attendance_sessions_class_expiry', 'class_id', 'expires_at'),
    )

    class_id = db.Column(db.String(20), db.ForeignKey('classes.id'), nullable=False)
    secret = db.Column(db.String(64), unique=True, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Holds class_id while the row is active, NULL once retired. The unique
    # constraint allows one active row per class.
    active_class_id = db.Column(db.String(20), unique=True, nullable=True)

    # Audit
    issuer_address = db.Column(db.String(45), nullable=True)
    issued_by = db.Column(db.String(20), db.ForeignKey('users.id'), nullable=True)
    closed_at = db.Column(db.DateTime, nullable=True)

    # Relationships
    course_class = db.relationship('CourseClass', backref=db.backref('attendance_sessions', lazy='dynamic'))
    marks = db.relationship('AttendanceMark', backref='session', lazy='dynamic')

    def is_live(self, now: datetime) -> bool:
        """Check if session still accepts codes at now."""
        return self.is_active and self.expires_at > now

    def retire(self, now: datetime) -> None:
        """Deactivate the session, releasing the class slot."""
        self.is_active = False
        self.active_class_id = None
        self.closed_at = now

    def to_dict(self, now: datetime = None):
        """Convert to dictionary. The secret is never included."""
        data = super().to_dict(exclude=['secret', 'active_class_id', 'issuer_address'])
        if now is not None:
            data['is_active'] = self.is_live(now)
        return data

    def __repr__(self):
        return f'<AttendanceSession {self.id} class={self.class_id}>'
