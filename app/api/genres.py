from fastapi import APIRouter
from typing import List

from app.api.deps import SessionDep
from app.schemas.media import GenreOut
from app.services.library import LibraryService

router = APIRouter()


@router.get("", response_model=List[GenreOut], name="list")
async def list_genres(db: SessionDep):
    """All genres, sorted by name"""
    return LibraryService(db).list_genres()
