"""Subject catalog endpoints."""

from fastapi import APIRouter

from markscard.core.subjects import SUBJECTS
from markscard.schemas.subject import SubjectResponse

router = APIRouter()


@router.get("", response_model=list[SubjectResponse])
def list_subjects():
    """List the graded subjects with their credit weights."""
    return [SubjectResponse.model_validate(s) for s in SUBJECTS]
