from typing import AsyncGenerator, Generator, Annotated
from fastapi import Depends, Query
from sqlalchemy.orm import Session

from app.database import open_session
from app.services.catalog import CatalogClient

# 1. DATABASE DEPENDENCY
def get_db() -> Generator:
    """One pooled session per request, released on every exit path"""
    db = open_session()
    try:
        yield db
    finally:
        db.close()


# 2. CATALOG DEPENDENCY
async def get_catalog_client() -> AsyncGenerator:
    client = CatalogClient()
    try:
        yield client
    finally:
        await client.close()


# 3. PAGINATION DEPENDENCY
class PaginationParams:
    def __init__(
            self,
            page: int = Query(1, ge=1, description="Page number"),
            limit: int = Query(20, ge=1, le=100, description="Items per page"),
    ):
        self.page = page
        self.limit = limit


SessionDep = Annotated[Session, Depends(get_db)]
CatalogDep = Annotated[CatalogClient, Depends(get_catalog_client)]
