from typing import List
from fastapi import APIRouter, Depends, status
from app.api.deps import get_participant_service
from app.schemas.debt import DebtResponse
from app.schemas.group import ParticipantCreate, ParticipantResponse, ParticipantUpdate
from app.services.participant_service import ParticipantService

router = APIRouter()


@router.post("/", response_model=ParticipantResponse, status_code=status.HTTP_201_CREATED)
async def add_participant(
    participant_in: ParticipantCreate,
    service: ParticipantService = Depends(get_participant_service)
):
    """Add a member to an existing group"""
    participant = await service.add_participant(participant_in)
    return ParticipantResponse.model_validate(participant)


@router.put("/{participant_id}", response_model=ParticipantResponse)
async def rename_participant(
    participant_id: str,
    participant_in: ParticipantUpdate,
    service: ParticipantService = Depends(get_participant_service)
):
    participant = await service.rename_participant(participant_id, participant_in)
    return ParticipantResponse.model_validate(participant)


@router.delete("/{participant_id}", response_model=List[DebtResponse])
async def delete_participant(
    participant_id: str,
    service: ParticipantService = Depends(get_participant_service)
):
    """Remove a participant with their expenses, splits, payments and debts; returns the recomputed debts"""
    debts = await service.delete_participant(participant_id)
    return [DebtResponse.model_validate(debt) for debt in debts]
