# utils/storage.py
import os
import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, UploadFile

from config import settings

UPLOAD_ROOT = Path(settings.UPLOAD_DIR)
URL_PREFIX = "/uploads"

# Buckets
CATEGORY_IMAGES = "category-images"
STAFF_AVATARS = "staff-avatars"

# Stored extension follows the checked content type, never the client filename
IMAGE_EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}
ALLOWED_CONTENT_TYPES = set(IMAGE_EXTENSIONS)


def ensure_buckets() -> None:
    for bucket in (CATEGORY_IMAGES, STAFF_AVATARS):
        (UPLOAD_ROOT / bucket).mkdir(parents=True, exist_ok=True)


def save_image(bucket: str, file: UploadFile) -> str:
    """Store an uploaded image under a random name and return its public URL path."""
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Invalid file type")

    ext = IMAGE_EXTENSIONS[file.content_type]
    unique_filename = f"{uuid.uuid4()}.{ext}"
    target_dir = UPLOAD_ROOT / bucket
    target_dir.mkdir(parents=True, exist_ok=True)
    try:
        with open(target_dir / unique_filename, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"File save error: {e}")
    finally:
        file.file.close()

    return f"{URL_PREFIX}/{bucket}/{unique_filename}"


def remove_image(url: Optional[str]) -> None:
    """Delete a previously stored image; external URLs are left alone."""
    if not url or not url.startswith(URL_PREFIX + "/"):
        return
    path = UPLOAD_ROOT / url[len(URL_PREFIX) + 1:]
    if path.exists() and path.is_file():
        os.remove(path)
