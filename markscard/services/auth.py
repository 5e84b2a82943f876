"""Authentication service: admin sessions and student self-service lookup."""

import logging
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from markscard.core.config import settings
from markscard.core.exceptions import AuthenticationError, MissingFieldError, NotFoundError
from markscard.core.security import create_access_token, hash_password, verify_password
from markscard.core.session import AdminProfile, AdminSession, AdminSessionStore, admin_sessions
from markscard.models.admin import Admin
from markscard.models.student import Student
from markscard.schemas.auth import AdminLoginRequest, AdminLoginResponse, AdminProfileResponse
from markscard.services.student import StudentService
from markscard.services.validation import normalize_seat_number, parse_date_of_birth

logger = logging.getLogger(__name__)

ADMIN_LOGIN_FAILED = "Invalid username or password"
STUDENT_LOGIN_FAILED = "Invalid seat number or date of birth"

# Unknown usernames are verified against this hash
_DUMMY_PASSWORD_HASH = hash_password("markscard-unknown-admin")


class AuthService:
    """Authentication service."""

    def __init__(self, db: Session, sessions: AdminSessionStore | None = None):
        self.db = db
        self.sessions = sessions if sessions is not None else admin_sessions

    def find_admin_by_username(self, username: str) -> Admin | None:
        result = self.db.execute(
            select(Admin).where(Admin.username == username)
        )
        return result.scalar_one_or_none()

    def login_admin(self, request: AdminLoginRequest) -> AdminLoginResponse:
        """Verify admin credentials and open a session."""
        username = request.username.strip()
        missing = [
            name
            for name, value in (("username", username), ("password", request.password))
            if not value
        ]
        if missing:
            raise MissingFieldError(missing)

        admin = self.find_admin_by_username(username)

        if admin is None:
            verify_password(request.password, _DUMMY_PASSWORD_HASH)
            logger.warning(f"Failed admin login for unknown username '{username}'")
            raise AuthenticationError(ADMIN_LOGIN_FAILED)

        if not verify_password(request.password, admin.password_hash):
            logger.warning(f"Failed admin login for username '{username}'")
            raise AuthenticationError(ADMIN_LOGIN_FAILED)

        if not admin.is_active:
            logger.warning(f"Login attempt for deactivated admin '{admin.username}'")
            raise AuthenticationError(ADMIN_LOGIN_FAILED)

        admin.last_login_at = datetime.now(timezone.utc)
        self.db.flush()

        lifetime = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
        profile = AdminProfile(id=admin.id, username=admin.username, full_name=admin.full_name)
        session = self.sessions.open(profile, lifetime)
        token = create_access_token(
            admin.id,
            admin.username,
            session.session_id,
            expires_at=session.expires_at,
        )

        logger.info(f"Admin '{admin.username}' logged in")

        return AdminLoginResponse(
            access_token=token,
            token_type="bearer",
            expires_in=int(lifetime.total_seconds()),
            expires_at=session.expires_at,
            admin=AdminProfileResponse(
                id=profile.id,
                username=profile.username,
                full_name=profile.full_name,
            ),
        )

    def logout_admin(self, session: AdminSession) -> None:
        self.sessions.revoke(session.session_id)
        logger.info(f"Admin '{session.profile.username}' logged out")

    def change_password(
        self,
        admin_id: int,
        current_password: str,
        new_password: str,
    ) -> None:
        """Change an admin's password and end their other sessions."""
        admin = self.db.get(Admin, admin_id)
        if not admin:
            raise NotFoundError("Admin", str(admin_id))

        if not verify_password(current_password, admin.password_hash):
            raise AuthenticationError("Current password is incorrect")

        admin.password_hash = hash_password(new_password)
        self.db.flush()
        self.sessions.revoke_admin(admin_id)

    def authenticate_student(
        self,
        seat_number: str | None,
        date_of_birth: date | str | None,
    ) -> Student:
        """Resolve seat number + date of birth to exactly one student.

        Unknown seat numbers and wrong dates fail identically.
        """
        missing = [
            name
            for name, value in (("seat_number", seat_number), ("date_of_birth", date_of_birth))
            if value is None or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            raise MissingFieldError(missing)

        seat = normalize_seat_number(seat_number)
        dob = parse_date_of_birth(date_of_birth)

        student = StudentService(self.db).find_student_by_credentials(seat, dob)
        if student is None:
            logger.info("Student lookup failed")
            raise AuthenticationError(STUDENT_LOGIN_FAILED)
        return student
