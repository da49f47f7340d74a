"""
Image upload boundary.
The core never sees storage protocol details, only the URL that comes back.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping

from devevent.core.errors import ImageUploadFailed
from devevent.core.logging import get_logger

logger = get_logger(__name__)


class ImageUploader(ABC):
    """
    Interface for object-storage uploads of event images.

    Implementations wrap a hosted image service; failures must surface as
    ImageUploadFailed so callers can reject the submission cleanly.
    """

    @abstractmethod
    async def upload(self, data: bytes) -> str:
        """
        Store image bytes.

        Args:
            data: Raw image bytes

        Returns:
            Public URL of the stored image
        """
        pass


async def attach_uploaded_image(
    candidate: Mapping[str, Any],
    uploader: ImageUploader,
    data: bytes,
) -> dict[str, Any]:
    """Upload `data` and return a copy of the candidate with `image` set to its URL."""
    if not data:
        raise ImageUploadFailed("image file is required")

    try:
        url = await uploader.upload(data)
    except ImageUploadFailed:
        raise
    except Exception as e:
        logger.error("image_upload_failed", error=str(e), size=len(data))
        raise ImageUploadFailed(str(e)) from e

    if not url or not str(url).strip():
        raise ImageUploadFailed("uploader returned an empty URL")

    logger.info("image_uploaded", url=url, size=len(data))
    return {**candidate, "image": str(url).strip()}
