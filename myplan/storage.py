import os
import uuid
from typing import Optional

from fastapi import UploadFile

from myplan.config import settings
from myplan.exceptions import ValidationError
from myplan.logging_config import get_logger

logger = get_logger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


class FileStorageService:
    """Stores uploaded files on local disk under ``UPLOAD_DIR``"""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = base_dir or settings.UPLOAD_DIR

    def save(self, upload: UploadFile, folder: str) -> str:
        """Save an upload and return its path relative to the upload root"""
        extension = os.path.splitext(upload.filename or "")[1].lower()
        if extension not in ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationError(f"Unsupported file type: {extension or 'unknown'}")

        target_dir = os.path.join(self.base_dir, folder)
        os.makedirs(target_dir, exist_ok=True)

        filename = f"{uuid.uuid4().hex}{extension}"
        with open(os.path.join(target_dir, filename), "wb") as out:
            out.write(upload.file.read())

        relative_path = f"{folder}/{filename}"
        logger.info("file_saved", path=relative_path)
        return relative_path

    def delete(self, relative_path: Optional[str]) -> None:
        """Remove a stored file; failures are logged and ignored"""
        if not relative_path:
            return
        full_path = os.path.join(self.base_dir, relative_path)
        try:
            if os.path.exists(full_path):
                os.remove(full_path)
        except OSError as e:
            logger.warning("file_delete_failed", path=relative_path, error=str(e))


def get_storage() -> FileStorageService:
    return FileStorageService()
