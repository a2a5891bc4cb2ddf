"""
Photo uploads to the hosted image service (Cloudinary, unsigned preset).
"""

import asyncio
import httpx
from datetime import date
from typing import List, Optional, Sequence, Tuple
from pydantic import BaseModel
from core.config import Settings, settings
from core.exceptions import ConfigurationError, ImageUploadError
import logging

logger = logging.getLogger(__name__)

UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud}/image/upload"
DELIVERY_URL = "https://res.cloudinary.com/{cloud}/image/upload"

# (filename, content, content type)
UploadFile = Tuple[str, bytes, str]


class UploadedImage(BaseModel):
    public_id: str
    secure_url: str
    url: str = ""
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    bytes: Optional[int] = None
    created_at: Optional[str] = None


class ImageUploader:
    """
    Unsigned uploads plus locally-built delivery URLs.

    Deleting images needs a signed API call and is not offered.
    """

    def __init__(
        self,
        cloud_name: str,
        upload_preset: str,
        folder: str = "afreq",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.folder = folder
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "ImageUploader":
        config = config or settings
        return cls(
            cloud_name=config.CLOUDINARY_CLOUD_NAME,
            upload_preset=config.CLOUDINARY_UPLOAD_PRESET,
            folder=config.CLOUDINARY_FOLDER,
            timeout=config.HTTP_TIMEOUT,
            transport=transport,
        )

    async def upload_image(
        self,
        filename: str,
        content: bytes,
        content_type: str = "image/jpeg",
        folder: Optional[str] = None
    ) -> UploadedImage:
        """
        Upload one image and return its hosted metadata.

        Raises:
            ConfigurationError: Cloud name or upload preset missing
            ImageUploadError: Non-200 response or unreadable body
        """
        if not self.cloud_name or not self.upload_preset:
            raise ConfigurationError(
                "Image uploads need CLOUDINARY_CLOUD_NAME and CLOUDINARY_UPLOAD_PRESET",
                context={"filename": filename}
            )

        data = {
            "upload_preset": self.upload_preset,
            "folder": folder or self.folder,
            "cloud_name": self.cloud_name,
        }
        files = {"file": (filename, content, content_type)}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    UPLOAD_URL.format(cloud=self.cloud_name),
                    data=data,
                    files=files,
                )
        except httpx.HTTPError as e:
            raise ImageUploadError(
                f"Failed to upload {filename}",
                context={"filename": filename},
                original_exception=e
            )

        if response.status_code != 200:
            logger.error(f"Image upload failed for {filename}: {response.status_code} {response.text[:200]}")
            raise ImageUploadError(
                f"Image upload failed: {response.reason_phrase}",
                context={"filename": filename, "status_code": response.status_code}
            )

        try:
            uploaded = UploadedImage.model_validate(response.json())
        except ValueError as e:
            raise ImageUploadError(
                "Failed to parse upload response",
                context={"filename": filename},
                original_exception=e
            )

        logger.info(f"Uploaded {filename} as {uploaded.public_id}")
        return uploaded

    async def upload_multiple_images(
        self,
        files: Sequence[UploadFile],
        folder: Optional[str] = None
    ) -> List[UploadedImage]:
        """Upload in parallel; results keep the input order."""
        return list(await asyncio.gather(*[
            self.upload_image(filename, content, content_type, folder=folder)
            for filename, content, content_type in files
        ]))

    async def upload_bulk_images(
        self,
        files: Sequence[UploadFile],
        upload_date: Optional[date] = None
    ) -> List[UploadedImage]:
        """Bulk receiving uploads go into one folder per day."""
        upload_date = upload_date or date.today()
        return await self.upload_multiple_images(files, folder=f"{self.folder}/{upload_date.isoformat()}")

    def get_image_url(
        self,
        public_id: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
        crop: Optional[str] = None,
        quality: Optional[str] = None,
        format: Optional[str] = None
    ) -> str:
        transformations = []
        if width:
            transformations.append(f"w_{width}")
        if height:
            transformations.append(f"h_{height}")
        if crop:
            transformations.append(f"c_{crop}")
        if quality:
            transformations.append(f"q_{quality}")
        if format:
            transformations.append(f"f_{format}")

        base = DELIVERY_URL.format(cloud=self.cloud_name)
        if not transformations:
            return f"{base}/{public_id}"
        return f"{base}/{','.join(transformations)}/{public_id}"

    def get_thumbnail_url(self, public_id: str, size: int = 200) -> str:
        return self.get_image_url(
            public_id, width=size, height=size, crop="thumb", quality="auto", format="auto"
        )
