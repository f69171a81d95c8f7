"""
Image upload endpoint: passes product images through to blob storage.
"""

import logging

import httpx
from fastapi import APIRouter, File, HTTPException, UploadFile

from config import settings
from domain.responses import success_response
from services import blob_service
from utils.validators import validate_image_upload

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("")
async def upload_image(file: UploadFile = File(..., description="Product image file")):
    """Upload a product image; returns the blob URL to store on the product."""
    content = await file.read()
    validate_image_upload(content, file.content_type, settings.max_upload_bytes)

    try:
        result = await blob_service.upload_image(
            file_bytes=content,
            filename=file.filename or "upload",
            content_type=file.content_type,
        )
    except httpx.HTTPError as e:
        logger.error(f"Blob upload failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to upload file")

    return success_response(
        data={
            "file_name": result["blob_name"],
            "blob_url": result["url"],
            "size": result["size"],
        },
        meta={"message": "File uploaded successfully"},
    )
