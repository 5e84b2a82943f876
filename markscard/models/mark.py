"""Mark entry model."""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from markscard.core.database import Base
from markscard.models.base import BigIntegerPK, IDMixin, TimestampMixin


class MarkEntry(Base, IDMixin, TimestampMixin):
    """One subject's score for one student."""

    __tablename__ = "marks"

    student_id: Mapped[int] = mapped_column(
        BigIntegerPK,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subject_code: Mapped[str] = mapped_column(String(10), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    student: Mapped["Student"] = relationship(
        "Student",
        back_populates="marks",
    )

    __table_args__ = (
        UniqueConstraint("student_id", "subject_code", name="uq_mark_student_subject"),
        CheckConstraint("score >= 0 AND score <= 100", name="ck_mark_score_range"),
    )

    def __repr__(self) -> str:
        return f"<MarkEntry(student_id={self.student_id}, subject={self.subject_code}, score={self.score})>"
