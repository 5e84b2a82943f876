"""Subject catalog schemas."""

from markscard.schemas.common import BaseSchema


class SubjectResponse(BaseSchema):
    """A catalog subject."""

    code: str
    name: str
    credits: int
