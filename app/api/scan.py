import logging
from fastapi import APIRouter, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import SessionDep, CatalogDep
from app.core.errors import CatalogUnavailable, ConfigurationError
from app.schemas.scan import FolderMatchRequest
from app.services.reconciliation import ReconciliationService
from app.services.scanner import LibraryScanner, folder_id

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/folders", name="folders")
def scan_folders(db: SessionDep, unmatched_only: bool = False):
    """
    List the top-level folders of the library roots with a title/year guess.

    - **unmatched_only**: hide folders that already have a media row

    Folder ids are only meaningful within this scan's result.
    """
    try:
        folders = LibraryScanner(db).scan(unmatched_only=unmatched_only)
    except (OSError, SQLAlchemyError) as e:
        logger.error(f"Folder scan failed: {e}")
        return {"success": False, "error": "Folder scan failed", "folders": [], "totalFound": 0}

    return {
        "success": True,
        "folders": [f.model_dump() for f in folders],
        "totalFound": len(folders),
    }


@router.post("/match", name="match")
async def match_folder(payload: FolderMatchRequest, catalog: CatalogDep, db: SessionDep):
    """
    Best-guess TMDB match for one scanned folder.
    The folder comes back 'verified' with detected metadata, or 'skipped'
    when the catalog has nothing for it.
    """
    service = ReconciliationService(db, catalog)

    try:
        candidate = await service.match_folder(payload.title, payload.year, payload.type)
    except (CatalogUnavailable, ConfigurationError) as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "id": folder_id(payload.type, payload.path) if payload.path else None,
        "path": payload.path,
        "title": payload.title,
        "year": payload.year,
        "type": payload.type,
        "status": "verified" if candidate else "skipped",
        "detected_metadata": candidate.model_dump() if candidate else None,
    }
