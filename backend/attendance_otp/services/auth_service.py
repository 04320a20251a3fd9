"""Authentication service for user management."""
from typing import Optional, Tuple

from flask_jwt_extended import create_access_token
from attendance_otp import db
from attendance_otp.models.user import User, UserRole
from attendance_otp.utils.clock import utcnow


class AuthService:
    @staticmethod
    def validate_password(password: str) -> Tuple[bool, str]:
        """Validate password strength."""
        if len(password) < 6:
            return False, "Password must be at least 6 characters long"
        return True, ""

    @staticmethod
    def login(user_id: str, password: str) -> Tuple[Optional[dict], Optional[str]]:
        """Authenticate user and return an access token."""
        if not user_id or not password:
            return None, "User ID and password are required"

        user = db.session.get(User, user_id.strip())

        if not user or not user.check_password(password):
            return None, "Invalid user ID or password"

        if not user.is_active:
            return None, "Account is deactivated"

        user.last_login = utcnow()
        user.save()

        return {
            "access_token": create_access_token(identity=user.id),
            "user": user.to_dict()
        }, None

    @staticmethod
    def create_user(
        user_id: str,
        name: str,
        password: str,
        role: str = "student",
        email: str = None,
        program: str = None,
        year: int = None
    ) -> Tuple[Optional[User], Optional[str]]:
        """Create a user account."""
        if not all([user_id, name, password]):
            return None, "User ID, name and password are required"

        is_valid, password_error = AuthService.validate_password(password)
        if not is_valid:
            return None, password_error

        try:
            user_role = UserRole(role.lower())
        except ValueError:
            return None, f"Unknown role: {role}"

        if db.session.get(User, user_id) is not None:
            return None, "User ID already exists"

        user = User(
            id=user_id,
            name=name.strip(),
            role=user_role,
            email=email.lower().strip() if email else None,
            program=program,
            year=year
        )
        user.set_password(password)
        user.save()

        return user, None
