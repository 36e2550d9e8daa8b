from pydantic import BaseModel
from typing import Optional, Literal

from app.schemas.catalog import CatalogCandidate

FolderStatus = Literal['pending', 'verified', 'skipped', 'processing']


class ScannedFolder(BaseModel):
    """
    A folder found by one scan pass. Never persisted.
    The id is derived from (type, path); clients should still treat it as
    valid only for the scan session that produced it.
    """
    id: str
    path: str
    name: str
    type: Literal['movie', 'tv']
    title: str
    year: int
    status: FolderStatus = 'pending'
    in_library: bool = False
    detected_metadata: Optional[CatalogCandidate] = None


class FolderMatchRequest(BaseModel):
    title: str
    year: Optional[int] = None
    type: Literal['movie', 'tv']
    path: Optional[str] = None
