"""Student self-service result endpoints."""

from io import BytesIO
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from markscard.core.database import get_db
from markscard.schemas.result import StudentCredentials, StudentResultResponse
from markscard.services.markscard import content_disposition, markscard_filename
from markscard.services.result import ResultService

router = APIRouter()


@router.post("/lookup", response_model=StudentResultResponse)
def lookup_result(
    credentials: StudentCredentials,
    db: Annotated[Session, Depends(get_db)],
):
    """
    View results with seat number and date of birth.
    Nothing is remembered between requests.
    """
    return ResultService(db).lookup(credentials)


@router.post("/markscard")
def download_markscard(
    credentials: StudentCredentials,
    db: Annotated[Session, Depends(get_db)],
):
    """Download the markscard PDF for the matching student."""
    student, content = ResultService(db).markscard_for_credentials(credentials)
    return StreamingResponse(
        BytesIO(content),
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(markscard_filename(student.seat_number))},
    )
