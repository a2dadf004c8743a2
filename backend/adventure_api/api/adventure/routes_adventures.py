"""Adventure lifecycle routes."""
from fastapi import APIRouter, Depends, HTTPException, Path, status

from adventure_api.api.adventure.schemas import (
    AdventureDetailResponse,
    AdventureListResponse,
    AdventureResponse,
    AdventureWithMediaResponse,
    CreateAdventureRequest,
    FriendsResponse,
    ParticipantResponse,
    ShareTokenResponse,
    UpdateAdventureRequest,
)
from adventure_api.api.deps import get_adventure_service, get_current_user
from adventure_api.domain.adventure.models import (
    AdventureCreate,
    AdventureStatus,
    AdventureUpdate,
    User,
)
from adventure_api.domain.adventure.services import AdventureService

router = APIRouter()

ADVENTURE_NOT_FOUND = "Adventure not found"


async def not_found_or_forbidden(service: AdventureService, adventure_id: str, detail: str) -> HTTPException:
    """404 when the adventure is missing, else 403 with ``detail``."""
    if await service.get_by_id(adventure_id) is None:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ADVENTURE_NOT_FOUND)
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


async def _list(service: AdventureService, user: User, adventure_status: AdventureStatus) -> AdventureListResponse:
    adventures = await service.list_by_status(user.id, adventure_status)
    enriched = await service.enrich_with_media(adventures)
    return AdventureListResponse(
        adventures=[AdventureWithMediaResponse.model_validate(a.model_dump()) for a in enriched]
    )


@router.post("", response_model=AdventureResponse, status_code=status.HTTP_201_CREATED)
async def create_adventure(
    request: CreateAdventureRequest,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    """Create an adventure; the caller becomes its creator and first participant."""
    adventure = await service.create_adventure(
        current_user.id,
        AdventureCreate(title=request.title, starts_at=request.starts_at, friend_ids=request.friend_ids),
    )
    return AdventureResponse.model_validate(adventure.model_dump())


@router.get("/upcoming", response_model=AdventureListResponse)
async def list_upcoming(
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    return await _list(service, current_user, AdventureStatus.UPCOMING)


@router.get("/completed", response_model=AdventureListResponse)
async def list_completed(
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    return await _list(service, current_user, AdventureStatus.COMPLETED)


@router.get("/friends", response_model=FriendsResponse)
async def list_friends(
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    """Friends the caller can invite."""
    friends = await service.list_friends(current_user.id)
    return FriendsResponse(friends=[ParticipantResponse.model_validate(f.model_dump()) for f in friends])


@router.post("/join/{token}", response_model=AdventureResponse)
async def join_adventure(
    token: str = Path(min_length=6),
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    """Join by share token. Joining twice is a no-op."""
    adventure = await service.join_by_token(current_user.id, token)
    if adventure is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ADVENTURE_NOT_FOUND)
    return AdventureResponse.model_validate(adventure.model_dump())


@router.get("/{adventure_id}", response_model=AdventureDetailResponse)
async def get_adventure(
    adventure_id: str,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    adventure = await service.get_with_media(adventure_id)
    if adventure is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ADVENTURE_NOT_FOUND)
    return AdventureDetailResponse(adventure=AdventureWithMediaResponse.model_validate(adventure.model_dump()))


@router.put("/{adventure_id}", response_model=AdventureResponse)
async def update_adventure(
    adventure_id: str,
    request: UpdateAdventureRequest,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    """Update the fields present in the body."""
    adventure = await service.update_adventure(
        adventure_id, AdventureUpdate(**request.model_dump(exclude_unset=True))
    )
    if adventure is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ADVENTURE_NOT_FOUND)
    return AdventureResponse.model_validate(adventure.model_dump())


@router.post("/{adventure_id}/complete", response_model=AdventureResponse)
async def complete_adventure(
    adventure_id: str,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    """Mark completed with a generated recap. Creator only."""
    adventure = await service.complete_adventure(adventure_id, current_user.id)
    if adventure is None:
        raise await not_found_or_forbidden(
            service, adventure_id, "Only the creator can complete this adventure"
        )
    return AdventureResponse.model_validate(adventure.model_dump())


@router.get("/{adventure_id}/share-token", response_model=ShareTokenResponse)
async def get_share_token(
    adventure_id: str,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    link = await service.get_share_token(adventure_id)
    if link is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ADVENTURE_NOT_FOUND)
    return ShareTokenResponse(token=link.token, url=link.url)
