"""Authentication schemas."""

from datetime import datetime

from pydantic import ConfigDict, Field

from markscard.schemas.common import BaseSchema


class AdminLoginRequest(BaseSchema):
    """Admin login request schema."""

    # Passwords are compared exactly as typed
    model_config = ConfigDict(str_strip_whitespace=False)

    username: str = ""
    password: str = ""


class AdminProfileResponse(BaseSchema):
    """Authenticated administrator profile."""

    id: int
    username: str
    full_name: str | None = None


class AdminLoginResponse(BaseSchema):
    """Token issued for an admin session."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    expires_at: datetime
    admin: AdminProfileResponse


class PasswordChange(BaseSchema):
    """Password change schema."""

    model_config = ConfigDict(str_strip_whitespace=False)

    current_password: str
    new_password: str = Field(..., min_length=8)
