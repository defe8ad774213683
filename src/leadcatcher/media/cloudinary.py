"""
Cloudinary media storage through the Cloudinary SDK.
"""

import asyncio
import io
from dataclasses import dataclass
from typing import Any, Dict, Optional

import cloudinary
import cloudinary.uploader

from leadcatcher.logger import get_logger

logger = get_logger(__name__)


@dataclass
class UploadedMedia:
    url: str
    public_id: str


def resource_type_for(mime_type: Optional[str]) -> str:
    """Map a MIME type to a Cloudinary resource type."""
    if mime_type and mime_type.startswith("image"):
        return "image"
    if mime_type and mime_type.startswith("video"):
        return "video"
    return "auto"


class CloudinaryStorage:
    """Uploads raw media bytes and returns their public URL."""

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: str = "whatsapp-uploads",
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder

    def upload_options(self, mime_type: Optional[str]) -> Dict[str, Any]:
        # Credentials go with each call; the global SDK config is never set.
        return {
            "resource_type": resource_type_for(mime_type),
            "folder": self.folder,
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
        }

    async def upload(self, data: bytes, mime_type: Optional[str]) -> UploadedMedia:
        """
        Upload a buffer.

        The SDK call is blocking, so it runs in a worker thread.

        Raises:
            cloudinary.exceptions.Error: If Cloudinary rejects the upload.
        """
        result = await asyncio.to_thread(
            cloudinary.uploader.upload, io.BytesIO(data), **self.upload_options(mime_type)
        )
        logger.info(f"Uploaded buffer to {result['secure_url']}")
        return UploadedMedia(url=result["secure_url"], public_id=result["public_id"])
