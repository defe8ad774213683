"""Media transfer from the messaging channel into storage."""

from .cloudinary import CloudinaryStorage, UploadedMedia
from .ingest import MediaIngestor

__all__ = ["CloudinaryStorage", "MediaIngestor", "UploadedMedia"]
