"""Adventure photo and reaction routes."""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, Response, UploadFile, status

from adventure_api.api.adventure.routes_adventures import ADVENTURE_NOT_FOUND, not_found_or_forbidden
from adventure_api.api.adventure.schemas import (
    AddReactionRequest,
    CreatePhotoRequest,
    PhotoResponse,
    PhotosResponse,
    ReactionResponse,
    ReactionsResponse,
    SignedUploadResponse,
    SignedViewResponse,
    SignPhotoRequest,
)
from adventure_api.api.deps import get_adventure_service, get_current_user
from adventure_api.domain.adventure.models import User
from adventure_api.domain.adventure.services import AdventureService
from adventure_api.settings import settings

router = APIRouter()

NOT_A_PARTICIPANT = "Only participants can do this"


@router.get("/{adventure_id}/photos", response_model=PhotosResponse)
async def list_photos(
    adventure_id: str,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    photos = await service.list_photos(adventure_id)
    if photos is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ADVENTURE_NOT_FOUND)
    return PhotosResponse(photos=[PhotoResponse.model_validate(p.model_dump()) for p in photos])


@router.post("/{adventure_id}/photos", response_model=PhotoResponse, status_code=status.HTTP_201_CREATED)
async def create_photo(
    adventure_id: str,
    request: CreatePhotoRequest,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    """Attach a photo by URL; without a URL a placeholder image is used."""
    photo = await service.upload_photo(
        adventure_id,
        current_user.id,
        caption=request.caption,
        photo_url=request.photo_url,
        content_type=request.content_type,
    )
    if photo is None:
        raise await not_found_or_forbidden(service, adventure_id, NOT_A_PARTICIPANT)
    return PhotoResponse.model_validate(photo.model_dump())


@router.post(
    "/{adventure_id}/photos/upload",
    response_model=PhotoResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_photo_file(
    adventure_id: str,
    file: UploadFile = File(...),
    caption: Optional[str] = Form(default=None, max_length=160),
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    """Upload raw bytes to storage, then record the photo."""
    limit = settings.photo_max_bytes
    data = await file.read(limit + 1)
    if len(data) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Photo exceeds {limit} bytes",
        )
    content_type = file.content_type if (file.content_type or "").startswith("image/") else None
    photo = await service.upload_photo(
        adventure_id,
        current_user.id,
        caption=caption,
        content_type=content_type,
        file=data,
        filename=file.filename,
    )
    if photo is None:
        # Missing adventure or failed transfer.
        adventure = await service.get_by_id(adventure_id)
        if adventure is not None and not adventure.has_participant(current_user.id):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_A_PARTICIPANT)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Photo upload failed")
    return PhotoResponse.model_validate(photo.model_dump())


@router.post("/{adventure_id}/photos/sign", response_model=SignedUploadResponse)
async def sign_photo_upload(
    adventure_id: str,
    request: SignPhotoRequest,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    """Presigned PUT URL for a direct browser upload."""
    signed = await service.sign_photo_upload(adventure_id, request.filename, current_user.id)
    if signed is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ADVENTURE_NOT_FOUND)
    return SignedUploadResponse.model_validate(signed.model_dump())


@router.get("/{adventure_id}/photos/{photo_id}/view", response_model=SignedViewResponse)
async def sign_photo_view(
    adventure_id: str,
    photo_id: str,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    """Time-limited view URL. Non-participants get the same 404 as a missing photo."""
    signed = await service.sign_photo_view(adventure_id, photo_id, current_user.id)
    if signed is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Photo not found")
    return SignedViewResponse.model_validate(signed.model_dump())


@router.delete("/{adventure_id}/photos/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_photo(
    adventure_id: str,
    photo_id: str,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    deleted = await service.delete_photo(adventure_id, photo_id, current_user.id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Photo not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{adventure_id}/reactions", response_model=ReactionsResponse)
async def list_reactions(
    adventure_id: str,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    reactions = await service.list_reactions(adventure_id)
    if reactions is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ADVENTURE_NOT_FOUND)
    return ReactionsResponse(reactions=[ReactionResponse.model_validate(r.model_dump()) for r in reactions])


@router.post(
    "/{adventure_id}/reactions",
    response_model=ReactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_reaction(
    adventure_id: str,
    request: AddReactionRequest,
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    """React with an emoji, replacing the caller's previous reaction."""
    reaction = await service.add_reaction(adventure_id, current_user.id, request.emoji)
    if reaction is None:
        raise await not_found_or_forbidden(service, adventure_id, NOT_A_PARTICIPANT)
    return ReactionResponse.model_validate(reaction.model_dump())


@router.delete("/{adventure_id}/reactions/{emoji}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_reaction(
    adventure_id: str,
    emoji: str = Path(min_length=1, max_length=8),
    current_user: User = Depends(get_current_user),
    service: AdventureService = Depends(get_adventure_service),
):
    removed = await service.remove_reaction(adventure_id, current_user.id, emoji)
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reaction not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
