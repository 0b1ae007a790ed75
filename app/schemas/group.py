from typing import List
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from app.schemas.common import ObjectIdStr


class GroupCreate(BaseModel):
    """Schema for creating a group with its initial participants."""
    name: str = Field(..., min_length=1, max_length=100)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    participant_names: List[str] = Field(default_factory=list)


class ParticipantResponse(BaseModel):
    id: ObjectIdStr
    name: str
    group_id: ObjectIdStr

    model_config = ConfigDict(from_attributes=True)


class GroupResponse(BaseModel):
    id: ObjectIdStr
    name: str
    currency: str
    created_at: datetime
    participants: List[ParticipantResponse] = []

    model_config = ConfigDict(from_attributes=True)


class ParticipantCreate(BaseModel):
    """Add a participant to an existing group."""
    group_id: str
    name: str = Field(..., min_length=1, max_length=100)


class ParticipantUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
