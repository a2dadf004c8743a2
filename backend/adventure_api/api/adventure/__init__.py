"""Adventure API routes."""
from fastapi import APIRouter

from adventure_api.api.adventure import routes_adventures, routes_participants, routes_photos

router = APIRouter()

# routes_adventures first: its static paths (/upcoming, /friends) precede /{adventure_id}
router.include_router(routes_adventures.router, prefix="/adventures", tags=["adventures"])
router.include_router(routes_participants.router, prefix="/adventures", tags=["adventures"])
router.include_router(routes_photos.router, prefix="/adventures", tags=["adventure-photos"])
