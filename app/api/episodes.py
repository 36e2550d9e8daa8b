from fastapi import APIRouter, HTTPException

from app.api.deps import SessionDep
from app.core.errors import EpisodeNotFound
from app.schemas.media import EpisodeWatchStatusUpdate
from app.services.library import LibraryService

router = APIRouter()


@router.put("/{episode_id}/watch-status", name="watch_status")
async def update_episode_watch_status(episode_id: int, update: EpisodeWatchStatusUpdate, db: SessionDep):
    try:
        LibraryService(db).update_episode_watch_status(episode_id, update.watch_status)
    except EpisodeNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"message": "Episode watch status updated successfully"}
