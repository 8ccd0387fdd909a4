"""
Image Host Service — Bill photo uploads to Cloudinary.
The temporary local copy is always removed, whether the upload succeeds or not.
"""
import logging
import os
import random
import time
from pathlib import Path
from typing import Optional

import cloudinary.uploader
from fastapi import UploadFile

from order_splitter.config import Settings
from order_splitter.exceptions import UpstreamServiceError, ValidationError

logger = logging.getLogger(__name__)

_EXTENSIONS = {"image/jpeg": ".jpg", "image/jpg": ".jpg", "image/png": ".png"}
_CHUNK = 64 * 1024


class ImageHostService:
    """Uploads bill images and returns their permanent URL."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.folder = settings.CLOUDINARY_FOLDER
        self.tmp_dir = Path(settings.UPLOAD_TMP_DIR)
        self.credentials = {
            "cloud_name": settings.CLOUDINARY_CLOUD_NAME,
            "api_key": settings.CLOUDINARY_API_KEY,
            "api_secret": settings.CLOUDINARY_API_SECRET,
            "secure": True,
        }

    def save_upload(self, upload: UploadFile) -> Path:
        """Validate an uploaded bill photo and copy it to the temp directory.

        Raises:
            ValidationError: Wrong content type or file too large.
        """
        content_type = (upload.content_type or "").lower()
        if not content_type.startswith("image/"):
            raise ValidationError(
                "Only image files are allowed!",
                details=[{"field": "billImage", "message": "Only image files are allowed!"}],
            )
        if content_type not in self.settings.ALLOWED_IMAGE_TYPES:
            raise ValidationError(
                "Only JPG, JPEG, and PNG images are allowed!",
                details=[{"field": "billImage", "message": "Only JPG, JPEG, and PNG images are allowed!"}],
            )

        suffix = Path(upload.filename or "").suffix.lower() or _EXTENSIONS.get(content_type, "")
        self.tmp_dir.mkdir(parents=True, exist_ok=True)
        path = self.tmp_dir / f"bill-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{suffix}"

        written = 0
        too_large = False
        with open(path, "wb") as out:
            while True:
                chunk = upload.file.read(_CHUNK)
                if not chunk:
                    break
                written += len(chunk)
                if written > self.settings.MAX_UPLOAD_BYTES:
                    too_large = True
                    break
                out.write(chunk)

        if too_large:
            _remove(path)
            limit_mb = self.settings.MAX_UPLOAD_BYTES // (1024 * 1024)
            raise ValidationError(
                f"File too large (max {limit_mb}MB)",
                details=[{"field": "billImage", "message": f"File too large (max {limit_mb}MB)"}],
            )
        return path

    def upload(self, local_path) -> str:
        """Upload a local image and return its secure URL.

        The local file is deleted on success and on failure.

        Raises:
            UpstreamServiceError: Cloudinary rejected or failed the upload.
        """
        try:
            result = cloudinary.uploader.upload(
                str(local_path),
                folder=self.folder,
                resource_type="image",
                **self.credentials,
            )
        except Exception as exc:
            logger.error("Bill image upload failed: %s", exc)
            raise UpstreamServiceError("Failed to upload bill image") from exc
        finally:
            _remove(local_path)

        url = result.get("secure_url") if isinstance(result, dict) else None
        if not url:
            raise UpstreamServiceError("Image host returned no URL")
        logger.info("Bill image uploaded to %s", url)
        return url

    def upload_file(self, upload: Optional[UploadFile]) -> str:
        """Validate, stage and upload a form file. Returns "" when none was sent."""
        if upload is None or not upload.filename:
            return ""
        return self.upload(self.save_upload(upload))


def _remove(path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
