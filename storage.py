"""Local image store for property photos."""
import logging
import os
import shutil
import uuid
from typing import List

from fastapi import UploadFile

from config import settings
from errors import BadRequestError

logger = logging.getLogger(__name__)


def _check_upload(file: UploadFile) -> None:
    if not (file.content_type or "").startswith("image/"):
        raise BadRequestError("Only image files are allowed")

    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    if size > settings.MAX_UPLOAD_BYTES:
        raise BadRequestError("Image exceeds the maximum upload size")


def save_images(files: List[UploadFile]) -> List[str]:
    """Stores every file and returns their public URLs.

    All files are checked before anything is written. If any write fails the
    files already stored for this call are removed and the whole upload fails.
    """
    if not files:
        raise BadRequestError("No images provided")
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise BadRequestError(f"At most {settings.MAX_UPLOAD_FILES} images can be uploaded at once")

    for file in files:
        _check_upload(file)

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    stored = []
    try:
        for file in files:
            file_extension = os.path.splitext(file.filename or "")[1]
            file_path = os.path.join(settings.UPLOAD_DIR, f"{uuid.uuid4()}{file_extension}")
            with open(file_path, "wb") as buffer:
                shutil.copyfileobj(file.file, buffer)
            stored.append(file_path)
    except OSError:
        logger.exception("Image upload failed after %d of %d files", len(stored), len(files))
        for path in stored:
            if os.path.exists(path):
                os.remove(path)
        raise BadRequestError("Image upload failed")

    return [f"/{path}" for path in stored]
