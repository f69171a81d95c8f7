"""
Blob Service: uploads product images to Azure Blob Storage.

Uses the Blob REST API directly (Put Blob with a container SAS token), so
the only client needed is httpx. The container is expected to exist and to
allow public blob read access; provisioning is out of scope.
"""
import logging
import time
from urllib.parse import quote

import httpx

from config import settings
from utils.validators import sanitize_filename

logger = logging.getLogger(__name__)

BLOB_API_VERSION = "2021-08-06"


def _container_url() -> str:
    """Build the container base URL from settings."""
    if not settings.blob_account_url or not settings.blob_sas_token:
        raise ValueError(
            "Blob storage account URL and SAS token must be set in .env "
            "(BLOB_ACCOUNT_URL, BLOB_SAS_TOKEN)"
        )
    return f"{settings.blob_account_url.rstrip('/')}/{settings.blob_container}"


def make_blob_name(filename: str) -> str:
    """``<epoch-ms>_<sanitised name>`` keeps uploads unique and URL-safe."""
    return f"{int(time.time() * 1000)}_{sanitize_filename(filename)}"


async def upload_image(
    file_bytes: bytes,
    filename: str,
    content_type: str = "image/jpeg",
    client: httpx.AsyncClient | None = None,
) -> dict:
    """
    Upload an image to the product-images container.

    Args:
        file_bytes: Raw image bytes
        filename: Original filename (sanitised into the blob name)
        content_type: MIME type stored on the blob
        client: Optional pre-built client (tests inject a MockTransport)

    Returns:
        dict: {blob_name, url, size}
    """
    base_url = _container_url()
    blob_name = make_blob_name(filename)
    blob_url = f"{base_url}/{quote(blob_name)}"
    sas = settings.blob_sas_token.lstrip("?")

    headers = {
        "x-ms-blob-type": "BlockBlob",
        "x-ms-version": BLOB_API_VERSION,
        "Content-Type": content_type,
    }

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=60.0)
    try:
        response = await client.put(f"{blob_url}?{sas}", headers=headers, content=file_bytes)
        response.raise_for_status()
    finally:
        if owns_client:
            await client.aclose()

    logger.info(f"Image uploaded to blob storage: {blob_name} ({len(file_bytes)} bytes)")

    return {
        "blob_name": blob_name,
        "url": blob_url,
        "size": len(file_bytes),
    }
