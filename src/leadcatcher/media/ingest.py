"""
Moves pending channel media into permanent storage when a lead is saved.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional

from leadcatcher.errors import MediaProcessingError
from leadcatcher.logger import get_logger
from leadcatcher.media.cloudinary import CloudinaryStorage
from leadcatcher.session.models import MediaReference

logger = get_logger(__name__)

Downloader = Callable[[str], Awaitable[bytes]]


class MediaIngestor:
    """Downloads each media reference from the channel and uploads it."""

    def __init__(self, download: Downloader, storage: CloudinaryStorage):
        self.download = download
        self.storage = storage

    async def _transfer_one(self, media: MediaReference) -> Optional[str]:
        try:
            data = await self.download(media.media_id)
            uploaded = await self.storage.upload(data, media.mime_type)
            return uploaded.url
        except Exception as e:
            logger.error(f"Failed to process media {media.media_id}: {e}")
            return None

    async def transfer(self, media: List[MediaReference]) -> List[str]:
        """
        Transfer all media concurrently and return the uploaded URLs.

        Individual failures are skipped.

        Raises:
            MediaProcessingError: If there was media and none of it transferred.
        """
        if not media:
            return []

        logger.info(f"Transferring {len(media)} media files")
        results = await asyncio.gather(*(self._transfer_one(item) for item in media))
        urls = [url for url in results if url]

        if not urls:
            raise MediaProcessingError(f"All {len(media)} media uploads failed")

        logger.info(f"Successfully uploaded {len(urls)} of {len(media)} media files")
        return urls
