"""Domain errors raised by the attendance services."""


class AttendanceError(Exception):
    """Base class for outcomes that end an attendance request."""

    reason = 'AttendanceError'
    status_code = 400
    default_message = 'Attendance request failed'

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NoActiveSession(AttendanceError):
    """No attendance window is open for the class."""

    reason = 'NoActiveSession'
    status_code = 409
    default_message = 'No active attendance session for this class'


class InvalidCode(AttendanceError):
    """The code did not match any tolerated time step."""

    reason = 'InvalidCode'
    status_code = 400
    default_message = 'Invalid or expired code'


class Unauthorized(AttendanceError):
    reason = 'Unauthorized'
    status_code = 403
    default_message = 'Not allowed to perform this action for the class'


class ClassNotFound(AttendanceError):
    reason = 'ClassNotFound'
    status_code = 404
    default_message = 'Class not found'


class StudentNotFound(AttendanceError):
    reason = 'StudentNotFound'
    status_code = 404
    default_message = 'Student not found'


class StorageUnavailable(AttendanceError):
    """The backing store failed in a way the domain cannot interpret."""

    reason = 'StorageUnavailable'
    status_code = 503
    default_message = 'Attendance storage is unavailable, please retry'
