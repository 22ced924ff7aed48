"""
Utility module for product image storage.

Two backends are supported, selected with ``IMAGE_STORAGE``:

- ``local`` (default): files are written under ``UPLOAD_DIR`` and served by the
  application itself at ``/uploads/...``.
- ``cloudinary``: files are uploaded to Cloudinary and the secure URL is stored.
"""
import logging
import os
import re
import time
import uuid
from pathlib import Path
from typing import Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from fastapi import UploadFile

from gev_api.common.config import IMAGE_STORAGE, UPLOAD_DIR
from gev_api.common.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
LOCAL_PREFIX = "/uploads/"


def configure_cloudinary():
    """Configure Cloudinary with environment variables."""
    cloudinary.config(
        cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME"),
        api_key=os.getenv("CLOUDINARY_API_KEY"),
        api_secret=os.getenv("CLOUDINARY_API_SECRET"),
        secure=True
    )


def _safe_filename(filename: Optional[str]) -> str:
    name = Path(filename or "imagem").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "imagem"


def _validate_image(file: UploadFile) -> None:
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise ValidationError(f"O arquivo deve ser uma imagem, recebido {content_type or 'desconhecido'}")


async def _save_local(contents: bytes, file: UploadFile, folder: str) -> str:
    target_dir = Path(UPLOAD_DIR) / folder
    target_dir.mkdir(parents=True, exist_ok=True)

    filename = f"produto_{int(time.time() * 1000)}_{_safe_filename(file.filename)}"
    (target_dir / filename).write_bytes(contents)
    return f"{LOCAL_PREFIX}{folder}/{filename}"


async def _save_cloudinary(contents: bytes, folder: str) -> str:
    configure_cloudinary()
    result = cloudinary.uploader.upload(
        contents,
        public_id=f"{uuid.uuid4()}",
        folder=folder,
        resource_type="image",
        quality="auto:eco",
    )
    return result.get("secure_url")


async def upload_image(file: UploadFile, folder: str = "produtos") -> str:
    """
    Store an uploaded image and return the path or URL to persist.

    Args:
        file: The uploaded file
        folder: Sub-folder (local) or Cloudinary folder to store it in

    Returns:
        The public path (``/uploads/...``) or URL of the stored image

    Raises:
        ValidationError: If the file is not an image
        StorageError: If the backend fails to store the file
    """
    _validate_image(file)

    try:
        contents = await file.read()
        if IMAGE_STORAGE == "cloudinary":
            location = await _save_cloudinary(contents, folder)
        else:
            location = await _save_local(contents, file, folder)
        logger.info("Stored image %s at %s", file.filename, location)
        return location
    except OSError as e:
        logger.error("Failed to write image %s: %s", file.filename, e)
        raise StorageError(f"Falha ao salvar imagem: {e}")
    except cloudinary.exceptions.Error as e:
        logger.error("Cloudinary upload failed for %s: %s", file.filename, e)
        raise StorageError(f"Falha ao enviar imagem: {e}")
    finally:
        # Reset file cursor for potential future reads
        await file.seek(0)


def delete_image(location: Optional[str]) -> bool:
    """
    Remove a locally stored image given the path returned by ``upload_image``.

    Cloudinary URLs and empty values are left alone. Failures are only logged.

    Returns:
        True if a file was removed
    """
    if not location or not location.startswith(LOCAL_PREFIX):
        return False

    root = Path(UPLOAD_DIR).resolve()
    path = (root / location[len(LOCAL_PREFIX):]).resolve()
    if root not in path.parents:
        logger.warning("Refusing to delete %s outside of %s", path, root)
        return False

    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("Failed to delete image %s: %s", location, e)
        return False
    logger.info("Deleted image %s", location)
    return True
