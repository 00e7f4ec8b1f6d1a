"""
Relay to the urlmeta.org metadata lookup service.

The API credential is held server-side so it is never exposed to browsers. The relay
does no caching, retrying or rate limiting.
"""
import logging
from dataclasses import dataclass

import httpx

from services.exceptions import MetadataNotFoundError, MetadataServiceError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass
class UrlMetadata:
    """Title and description reported for a URL."""

    title: str
    description: str | None


async def fetch_url_metadata(
    url: str,
    api_key: str,
    api_url: str,
    timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
) -> UrlMetadata:
    """
    Look up the title and description of `url`.

    Args:
        url:
            The page to describe.
        api_key:
            Credential sent as `Authorization: Basic <api_key>`.
        api_url:
            Endpoint of the metadata service.
        timeout:
            Request timeout in seconds.

    Returns:
        UrlMetadata with a non-blank title.

    Raises:
        MetadataNotFoundError: The service answered but reported no usable title.
        MetadataServiceError: The request failed, timed out, or returned a non-2xx status
            or a body that is not JSON.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(
                api_url,
                params={"url": url},
                headers={
                    "Authorization": f"Basic {api_key}",
                    "Content-Type": "application/json",
                },
            )
            response.raise_for_status()
            data = response.json()
    except httpx.TimeoutException as e:
        raise MetadataServiceError("Metadata request timed out") from e
    except httpx.HTTPStatusError as e:
        raise MetadataServiceError(
            f"Metadata service returned HTTP {e.response.status_code}",
        ) from e
    except httpx.RequestError as e:
        raise MetadataServiceError(f"Metadata request failed: {e}") from e
    except ValueError as e:
        raise MetadataServiceError("Metadata service returned invalid JSON") from e

    if not isinstance(data, dict):
        raise MetadataNotFoundError(url)

    result = data.get("result")
    if not isinstance(result, dict) or result.get("status") != "OK":
        raise MetadataNotFoundError(url)

    meta = data.get("meta")
    if not isinstance(meta, dict):
        raise MetadataNotFoundError(url)
    title = meta.get("title")
    if not isinstance(title, str) or not title.strip():
        raise MetadataNotFoundError(url)

    return UrlMetadata(title=title, description=meta.get("description"))
