import logging
from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import SessionDep
from app.services.library import LibraryService
from app.services.scanner import LibraryScanner

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/library", name="library")
def get_library_stats(db: SessionDep):
    """
    Media rows in the database against folders on disk.
    Errors are reported in the body with success=false.
    """
    try:
        return LibraryService(db).library_stats(LibraryScanner(db))
    except (OSError, SQLAlchemyError) as e:
        logger.error(f"Library stats failed: {e}")
        return {"success": False, "error": "Failed to compute library stats"}
