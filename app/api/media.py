from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Annotated, List, Optional
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import SessionDep, CatalogDep, PaginationParams
from app.core.errors import (
    CatalogUnavailable, ConfigurationError, MediaNotFound, NoCatalogMatch,
)
from app.schemas.media import (
    AddFromCatalogRequest, MediaOut, MediaPage, MediaType, WatchStatusUpdate,
)
from app.services.library import LibraryService
from app.services.reconciliation import ReconciliationService
from app.services.verification import VerificationService
from app.services.verification_report import bulk_report, single_report

router = APIRouter()

# NOTE: fixed paths (/random, /verify-recent, /add-from-tmdb) are registered
# before /{media_id} so they are not captured by it.


@router.get("", response_model=MediaPage, name="list")
async def list_media(
        db: SessionDep,
        params: Annotated[PaginationParams, Depends()],
        media_type: Optional[MediaType] = Query(None, alias="type"),
        genre: Optional[str] = None,
        search: Optional[str] = None,
):
    """
    List library media (Paginated), newest first.

    - **type**: movie or tv
    - **genre**: exact genre name
    - **search**: title substring
    """
    return LibraryService(db).list_media(
        page=params.page,
        limit=params.limit,
        media_type=media_type,
        genre=genre,
        search=search,
    )


@router.get("/random", response_model=List[MediaOut], name="random")
async def random_movies(
        db: SessionDep,
        genre: Optional[str] = None,
        limit: int = Query(3, ge=1, le=50),
):
    """Random movies from one genre"""
    if not genre:
        raise HTTPException(status_code=400, detail="Genre parameter is required")

    return LibraryService(db).random_movies(genre, limit)


@router.get("/verify-recent", name="verify_recent")
def verify_recent(
        db: SessionDep,
        hours: int = Query(24, ge=1, description="Trailing window in hours"),
):
    """Check that everything added in the last `hours` has its folder on disk."""
    results = VerificationService(db).verify_recent(hours)
    return bulk_report(results)


@router.post("/add-from-tmdb", name="add_from_catalog")
async def add_from_catalog(
        payload: AddFromCatalogRequest,
        db: SessionDep,
        catalog: CatalogDep,
):
    """
    Import a TMDB movie or show into the library.

    - **folderPath**: optional folder to record for the new item
    """
    service = ReconciliationService(db, catalog)

    try:
        media = await service.add_from_catalog(payload.tmdb_id, payload.media_type, payload.folder_path)
    except (CatalogUnavailable, ConfigurationError) as e:
        raise HTTPException(status_code=500, detail=str(e))
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Failed to save media")

    return {"message": "Media added successfully", "id": media.id}


@router.get("/{media_id}", response_model=MediaOut, name="detail")
async def get_media(media_id: int, db: SessionDep):
    """Single media item. TV shows include their episodes."""
    try:
        return LibraryService(db).get_media_detail(media_id)
    except MediaNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{media_id}", name="delete")
async def delete_media(media_id: int, db: SessionDep):
    """Delete a media item with its episodes and file links"""
    try:
        LibraryService(db).delete_media(media_id)
    except MediaNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"message": "Media deleted"}


@router.put("/{media_id}/watch-status", name="watch_status")
async def update_watch_status(media_id: int, update: WatchStatusUpdate, db: SessionDep):
    try:
        LibraryService(db).update_watch_status(media_id, update)
    except MediaNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"message": "Watch status updated successfully"}


@router.get("/{media_id}/verify", name="verify")
def verify_media(media_id: int, db: SessionDep):
    """
    Database vs. filesystem check for one item.
    A missing row is a valid answer (status 'missing'), never a 404.
    """
    return single_report(VerificationService(db).verify(media_id))


@router.post("/{media_id}/populate-episodes", name="populate_episodes")
async def populate_episodes(media_id: int, db: SessionDep, catalog: CatalogDep):
    """
    Fetch every regular season of a show from TMDB and store its episodes.
    Seasons that fail to load are skipped; the counts only cover stored rows.
    """
    service = ReconciliationService(db, catalog)

    try:
        result = await service.populate_episodes(media_id)
    except MediaNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ConfigurationError, CatalogUnavailable, NoCatalogMatch) as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "success": True,
        "message": f"Added {result['episodes_added']} episodes",
        "episodesAdded": result["episodes_added"],
        "seasons": result["seasons"],
    }
