"""Database models package."""

from markscard.models.admin import Admin
from markscard.models.mark import MarkEntry
from markscard.models.student import Student

__all__ = [
    # Admin
    "Admin",
    # Student
    "Student",
    "MarkEntry",
]
