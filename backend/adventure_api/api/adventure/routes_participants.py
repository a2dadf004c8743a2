"""Adventure membership routes."""
from fastapi import APIRouter, Depends, HTTPException, status

from adventure_api.api.adventure.routes_adventures import ADVENTURE_NOT_FOUND
from adventure_api.api.adventure.schemas import (
    AddParticipantRequest,
    ParticipantResponse,
    ParticipantsResponse,
)
from adventure_api.api.deps import get_adventure_service, get_current_user
from adventure_api.domain.adventure.models import Participant, User
from adventure_api.domain.adventure.services import AdventureService

router = APIRouter()


def _participants_response(participants: list[Participant]) -> ParticipantsResponse:
    return ParticipantsResponse(
        participants=[ParticipantResponse.model_validate(p.model_dump()) for p in participants]
    )


@router.get("/{adventure_id}/participants", response_model=ParticipantsResponse)
async def list_participants(
    adventure_id: str,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    participants = await service.list_participants(adventure_id)
    if participants is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ADVENTURE_NOT_FOUND)
    return _participants_response(participants)


@router.post("/{adventure_id}/participants", response_model=ParticipantsResponse)
async def add_participant(
    adventure_id: str,
    request: AddParticipantRequest,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    """Add a user to the adventure; adding an existing member changes nothing."""
    participants = await service.add_participant(adventure_id, request.user_id)
    if participants is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ADVENTURE_NOT_FOUND)
    return _participants_response(participants)
