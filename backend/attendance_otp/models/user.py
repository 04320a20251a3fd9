"""User model for authentication and authorization."""
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from attendance_otp import db
from attendance_otp.models.base import BaseModel


class UserRole(Enum):
    """User roles enumeration."""
    STUDENT = 'student'
    INSTRUCTOR = 'instructor'
    ADMIN = 'admin'


class User(BaseModel):
    """User model for students, instructors and administrators."""

    __tablename__ = 'users'

    # University-issued identifier, e.g. '240101'
    id = db.Column(db.String(20), primary_key=True)

    # Basic Information
    email = db.Column(db.String(255), unique=True, nullable=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)

    # Role and enrolment
    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.STUDENT)
    program = db.Column(db.String(50), nullable=True)
    year = db.Column(db.Integer, nullable=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        return check_password_hash(self.password_hash, password)

    def is_instructor(self) -> bool:
        """Check if user can run attendance sessions."""
        return self.role in [UserRole.INSTRUCTOR, UserRole.ADMIN]

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def is_student(self) -> bool:
        """Check if user is a student."""
        return self.role == UserRole.STUDENT

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        default_exclude = ['password_hash']
        exclude = (exclude or []) + default_exclude

        result = super().to_dict(exclude=exclude)
        result['role'] = self.role.value if self.role else None

        return result

    def __repr__(self) -> str:
        return f'<User {self.id}>'
