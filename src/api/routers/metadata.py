"""Server-side relay for URL metadata lookups."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from api.dependencies import get_settings
from core.config import Settings
from services.exceptions import MetadataNotFoundError, MetadataServiceError
from services.metadata_service import fetch_url_metadata

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookmarks", tags=["metadata"])


class MetadataRequest(BaseModel):
    """Request body for a metadata lookup."""

    url: str | None = None


class MetadataResponse(BaseModel):
    """Title and description of the requested URL."""

    title: str
    description: str | None


@router.post("/metadata", response_model=MetadataResponse)
async def lookup_metadata(
    data: MetadataRequest,
    settings: Settings = Depends(get_settings),
) -> MetadataResponse:
    """Fetch title and description for a URL using the server-held credential."""
    url = (data.url or "").strip()
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL is required")

    if not settings.urlmeta_api_key:
        logger.error("URLMETA_API_KEY is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Metadata service is not configured",
        )

    try:
        metadata = await fetch_url_metadata(
            url,
            api_key=settings.urlmeta_api_key,
            api_url=settings.urlmeta_api_url,
            timeout=settings.urlmeta_timeout,
        )
    except MetadataNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Could not fetch metadata for this URL",
        )
    except MetadataServiceError as e:
        logger.warning("Metadata lookup for %s failed: %s", url, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not fetch metadata",
        )

    return MetadataResponse(title=metadata.title, description=metadata.description)
