from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse
from typing import Optional

from app.api.deps import CatalogDep
from app.core.errors import CatalogUnavailable, ConfigurationError
from app.schemas.media import MediaType

router = APIRouter()


@router.get("/search", name="search")
async def search_catalog(
        catalog: CatalogDep,
        query: str = Query(..., min_length=1),
        media_type: Optional[MediaType] = Query(None, alias="type"),
):
    """
    TMDB search passthrough. Without a type this is a multi search
    (movies, shows and people).
    """
    try:
        return await catalog.search_raw(query, media_type)
    except (CatalogUnavailable, ConfigurationError) as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/test", name="test")
async def test_catalog(catalog: CatalogDep):
    """Check the TMDB key and connectivity by fetching the image configuration."""
    api_key_state = "Present" if catalog.is_configured else "Missing"

    try:
        config = await catalog.get_configuration()
    except (CatalogUnavailable, ConfigurationError) as e:
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "TMDB API connection failed",
                "error": str(e),
                "apiKey": api_key_state,
            }
        )

    images = config.get("images") or {}
    return {
        "success": True,
        "message": "TMDB API connection successful",
        "apiKey": api_key_state,
        "data": {
            "imageBaseUrl": images.get("secure_base_url"),
            "posterSizes": images.get("poster_sizes", []),
        }
    }
