"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole
from .course_class import CourseClass
from .attendance_session import AttendanceSession
from .attendance import AttendanceMark

__all__ = [
    'BaseModel', 'User', 'UserRole', 'CourseClass',
    'AttendanceSession', 'AttendanceMark'
]
