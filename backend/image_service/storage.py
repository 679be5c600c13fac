"""
Image normalization and per-user storage.

Files are written under <root>/<user_id>/image-<epoch_ms>-<index>.png and
exposed at /generated-images/<user_id>/<filename>.
"""

import base64
import binascii
import logging
import os
import re
import tempfile
import time
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from backend.image_service.errors import FileIOFailure, MalformedImagePayload

TARGET_SIZE = (512, 512)
# Stored files must be readable by whatever serves the public directory
FILE_MODE = 0o644
PUBLIC_PREFIX = "/generated-images"

_DATA_URI = re.compile(r"^data:image/(png|jpeg|jpg);base64,(.+)$", re.DOTALL)


@dataclass(frozen=True)
class StoredImage:
    path: str
    url: str
    index: int


def decode_data_uri(data_uri: str) -> bytes:
    """
    Decode a `data:image/(png|jpeg|jpg);base64,...` string.

    Raises:
        MalformedImagePayload: If the prefix or the base64 body is invalid.
    """
    match = _DATA_URI.match(data_uri)
    if not match:
        raise MalformedImagePayload()

    try:
        return base64.b64decode(match.group(2))
    except (binascii.Error, ValueError):
        raise MalformedImagePayload("Invalid base64 image data")


def normalize_image(data: bytes) -> bytes:
    """
    Stretch an image to exactly 512x512 and encode it as PNG.

    Aspect ratio is not preserved.

    Raises:
        MalformedImagePayload: If Pillow cannot read the bytes as an image.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGBA")
            resized = img.resize(TARGET_SIZE, Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logging.error(f"[Storage] Could not read uploaded image: {e}")
        raise MalformedImagePayload("Failed to process uploaded image")

    buffer = BytesIO()
    resized.save(buffer, format="PNG")
    return buffer.getvalue()


class ImageStore:
    """
    Writes images into a per-user directory tree.

    Args:
        root_dir (str): Base directory, served statically at PUBLIC_PREFIX.
        clock (callable): Returns the current time in seconds. Tests pin it.
    """

    def __init__(self, root_dir: str, clock=time.time):
        self.root_dir = root_dir
        self.clock = clock

    def user_dir(self, user_id) -> str:
        return os.path.join(self.root_dir, str(user_id))

    def file_name(self, index: int, now_ms: Optional[int] = None) -> str:
        if now_ms is None:
            now_ms = int(self.clock() * 1000)
        return f"image-{now_ms}-{index}.png"

    def save(self, user_id, index: int, data: bytes) -> StoredImage:
        """
        Write image bytes for a user and segment.

        The bytes go to a temporary file in the target directory first and are
        renamed into place, so a failed write never leaves a partial PNG.

        Raises:
            FileIOFailure: If the directory or the file cannot be written.
        """
        user_dir = self.user_dir(user_id)
        file_name = self.file_name(index)
        file_path = os.path.join(user_dir, file_name)
        tmp_path = None

        try:
            os.makedirs(user_dir, exist_ok=True)
            with tempfile.NamedTemporaryFile(dir=user_dir, suffix=".tmp", delete=False) as tmp:
                tmp_path = tmp.name
                tmp.write(data)
            os.chmod(tmp_path, FILE_MODE)
            os.replace(tmp_path, file_path)
        except OSError as e:
            logging.error(f"[Storage] Error saving image file {file_path}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise FileIOFailure(f"Error saving image: {e}")

        url = f"{PUBLIC_PREFIX}/{user_id}/{file_name}"
        logging.info(f"[Storage] Saved {url}")
        return StoredImage(path=file_path, url=url, index=index)
