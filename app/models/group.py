from pydantic import Field
from app.models.base import MongoModel, PyObjectId


class Group(MongoModel):
    name: str
    currency: str = Field(default="USD", min_length=3, max_length=3)


class Participant(MongoModel):
    """Member of exactly one group; group membership never changes."""
    name: str
    group_id: PyObjectId
