"""Attendance mark model."""
from attendance_otp import db
from attendance_otp.models.base import BaseModel
from attendance_otp.utils.clock import utcnow


class AttendanceMark(BaseModel):
    """One student counted present for one class on one calendar day."""

    __tablename__ = 'attendance_marks'
    __table_args__ = (
        db.UniqueConstraint('student_id', 'class_id', 'day', name='uq_attendance_marks_student_class_day'),
    )

    student_id = db.Column(db.String(20), db.ForeignKey('users.id'), nullable=False, index=True)
    class_id = db.Column(db.String(20), db.ForeignKey('classes.id'), nullable=False, index=True)
    day = db.Column(db.Date, nullable=False)
    marked_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    method = db.Column(db.String(20), default='code', nullable=False)  # code, manual
    session_id = db.Column(db.Integer, db.ForeignKey('attendance_sessions.id'), nullable=True)

    # Location hints supplied with the submission, kept for audit only
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)

    # Relationships
    student = db.relationship('User', backref=db.backref('attendance_marks', lazy='dynamic'))

    def __repr__(self):
        return f'<AttendanceMark {self.student_id}-{self.class_id}-{self.day}>'
