"""
Local file storage for uploaded images.

Uploaded files live under ``<DATA_DIR>/avatars`` and ``<DATA_DIR>/posts``
and are served back under the ``/s3`` URL prefix.
"""

import logging
import re
import uuid
from pathlib import Path
from typing import List, Optional

from fastapi import UploadFile

from crisper.app.config import settings
from crisper.app.errors import InvalidInputError

logger = logging.getLogger(__name__)

URL_PREFIX = "/s3"
AVATARS = "avatars"
POST_IMAGES = "posts"

_EXTENSION = re.compile(r"[A-Za-z0-9]+")


def data_dir() -> Path:
    return Path(settings.DATA_DIR)


def ensure_dirs() -> Path:
    """Create the upload directories and return the data root."""
    root = data_dir()
    for sub in (AVATARS, POST_IMAGES):
        (root / sub).mkdir(parents=True, exist_ok=True)
    return root


def _extension(upload: UploadFile) -> str:
    if not (upload.content_type or "").startswith("image/"):
        raise InvalidInputError("Only image files are accepted")

    suffix = Path(upload.filename or "").suffix
    if not suffix:
        raise InvalidInputError("File name must include an extension")
    if not _EXTENSION.fullmatch(suffix[1:]):
        raise InvalidInputError("File extension must be letters and digits only")
    return suffix[1:]


async def save_image(upload: UploadFile, folder: str, stem: Optional[str] = None) -> str:
    """
    Write an uploaded image into one of the storage folders.

    Args:
        upload: The multipart file sent by the client.
        folder: Either AVATARS or POST_IMAGES.
        stem:   File name without extension; a random one is used if omitted.

    Returns:
        str: The public URL of the stored file (e.g. /s3/posts/<name>.png).

    Raises:
        InvalidInputError: If the upload is not an image or has no extension.
    """
    ext = _extension(upload)
    file_name = f"{stem or uuid.uuid4().hex}.{ext}"

    target = ensure_dirs() / folder / file_name
    target.write_bytes(await upload.read())
    logger.info(f"Stored upload {target}")

    return f"{URL_PREFIX}/{folder}/{file_name}"


def post_images_exist(images: Optional[List[str]]) -> bool:
    """True if every image URL points at a file in the post images folder."""
    if not images:
        return True
    folder = data_dir() / POST_IMAGES
    for url in images:
        base = url.rsplit("/", 1)[-1]
        if not base or not (folder / base).is_file():
            return False
    return True
