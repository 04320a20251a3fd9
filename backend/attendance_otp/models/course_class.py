"""Class offering model used for roster and instructor lookups."""
from attendance_otp import db
from attendance_otp.models.base import BaseModel


class CourseClass(BaseModel):
    """A scheduled class that attendance is taken for."""

    __tablename__ = 'classes'

    # e.g. 'NCSC211'
    id = db.Column(db.String(20), primary_key=True)
    course_code = db.Column(db.String(20), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    program = db.Column(db.String(50), nullable=True)
    year = db.Column(db.Integer, nullable=True)
    instructor_id = db.Column(db.String(20), db.ForeignKey('users.id'), nullable=False)

    # Relationships
    instructor = db.relationship('User', backref='classes_taught')

    def is_instructed_by(self, user) -> bool:
        """Check whether user may open attendance windows for this class."""
        if user is None:
            return False
        if user.is_admin():
            return True
        return user.is_instructor() and user.id == self.instructor_id

    def __repr__(self):
        return f'<CourseClass {self.id}>'
