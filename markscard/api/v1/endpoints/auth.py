"""Administrator authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from markscard.core.database import get_db
from markscard.core.dependencies import CurrentAdmin
from markscard.schemas.auth import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminProfileResponse,
    PasswordChange,
)
from markscard.schemas.common import MessageResponse
from markscard.services.auth import AuthService

router = APIRouter()


@router.post("/login", response_model=AdminLoginResponse)
def login(
    request: AdminLoginRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Authenticate an administrator and open a session.
    """
    service = AuthService(db)
    return service.login_admin(request)


@router.post("/logout", response_model=MessageResponse)
def logout(
    session: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """End the current admin session."""
    AuthService(db).logout_admin(session)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AdminProfileResponse)
def get_current_admin(session: CurrentAdmin):
    """Get the authenticated administrator's profile."""
    profile = session.profile
    return AdminProfileResponse(
        id=profile.id,
        username=profile.username,
        full_name=profile.full_name,
    )


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    request: PasswordChange,
    session: CurrentAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Change the current admin's password.
    All sessions of this admin are ended, including the current one.
    """
    service = AuthService(db)
    service.change_password(
        session.profile.id,
        request.current_password,
        request.new_password,
    )
    return MessageResponse(message="Password changed successfully")
