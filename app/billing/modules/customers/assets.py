from __future__ import annotations

import os
import re
import uuid

from app.billing.constants import CUSTOMER_ASSET_DIR
from app.billing.modules.customers.validation import ImageUpload
from app.billing.storage import Storage


_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9]+")


def image_extension(filename: str) -> str:
    """
    Original extension (".png"), or "" when the name has none or it is not
    plain alphanumeric. The rest of the client name is never used.
    """
    ext = os.path.splitext(os.path.basename((filename or "").replace("\\", "/")))[1]
    return ext if _EXTENSION_RE.fullmatch(ext) else ""


def build_image_key(filename: str) -> str:
    return f"{CUSTOMER_ASSET_DIR}/{uuid.uuid4()}{image_extension(filename)}"


def key_from_image_url(image_url: str) -> str:
    return image_url.lstrip("/")


def save_customer_image(storage: Storage, image: ImageUpload) -> str:
    """
    Write the upload under a fresh unique name and return its public path
    ("/customers/<uuid><ext>"). Raises StorageError on write failure.
    """
    key = build_image_key(image.filename)
    storage.put_bytes(key, image.data, content_type=image.content_type)
    return f"/{key}"


def delete_customer_image(storage: Storage, image_url: str) -> None:
    storage.delete(key_from_image_url(image_url))
