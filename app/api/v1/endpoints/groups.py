from fastapi import APIRouter, Depends, status
from app.api.deps import get_group_service
from app.schemas.group import GroupCreate, GroupResponse, ParticipantResponse
from app.services.group_service import GroupService

router = APIRouter()


def _group_response(group, participants) -> GroupResponse:
    return GroupResponse(
        id=group.id,
        name=group.name,
        currency=group.currency,
        created_at=group.created_at,
        participants=[ParticipantResponse.model_validate(p) for p in participants]
    )


@router.post("/", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_in: GroupCreate,
    service: GroupService = Depends(get_group_service)
):
    """Create a group with its initial participants"""
    group, participants = await service.create_group(group_in)
    return _group_response(group, participants)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: str,
    service: GroupService = Depends(get_group_service)
):
    group, participants = await service.get_group(group_id)
    return _group_response(group, participants)
