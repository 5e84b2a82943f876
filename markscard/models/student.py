"""Student model."""

from datetime import date

from sqlalchemy import Date, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from markscard.core.database import Base
from markscard.models.base import IDMixin, TimestampMixin


class Student(Base, IDMixin, TimestampMixin):
    """A student record, identified publicly by its seat number (USN)."""

    __tablename__ = "students"

    seat_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)

    # Relationships
    marks: Mapped[list["MarkEntry"]] = relationship(
        "MarkEntry",
        back_populates="student",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="MarkEntry.id",
    )

    def scores(self) -> dict[str, int]:
        """Recorded scores keyed by subject code; absent subjects are omitted."""
        return {entry.subject_code: entry.score for entry in self.marks}

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, seat_number={self.seat_number})>"
