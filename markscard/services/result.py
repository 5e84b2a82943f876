"""Result service: graded views and markscards for resolved students."""

from sqlalchemy.orm import Session

from markscard.core.config import settings
from markscard.models.student import Student
from markscard.schemas.result import (
    GradedViewResponse,
    StudentCredentials,
    StudentIdentity,
    StudentResultResponse,
)
from markscard.services.auth import AuthService
from markscard.services.grading import GradedView, grade_marks
from markscard.services.markscard import render_markscard


class ResultService:
    """Builds what a student (or an admin on their behalf) sees."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def identity(student: Student) -> StudentIdentity:
        return StudentIdentity(
            seat_number=student.seat_number,
            full_name=student.full_name,
            date_of_birth=student.date_of_birth,
        )

    @staticmethod
    def graded_view(student: Student) -> GradedView:
        # Grade a copy of the scores, not the ORM collection
        return grade_marks(dict(student.scores()))

    def lookup(self, credentials: StudentCredentials) -> StudentResultResponse:
        student = AuthService(self.db).authenticate_student(
            credentials.seat_number,
            credentials.date_of_birth,
        )
        return StudentResultResponse(
            student=self.identity(student),
            result=GradedViewResponse.model_validate(self.graded_view(student)),
        )

    def markscard(self, student: Student) -> bytes:
        return render_markscard(
            self.identity(student),
            self.graded_view(student),
            institution_name=settings.INSTITUTION_NAME,
        )

    def markscard_for_credentials(self, credentials: StudentCredentials) -> tuple[Student, bytes]:
        student = AuthService(self.db).authenticate_student(
            credentials.seat_number,
            credentials.date_of_birth,
        )
        return student, self.markscard(student)
