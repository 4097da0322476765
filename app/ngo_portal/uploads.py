import logging
import os
import shutil
import time

from fastapi import UploadFile

from ngo_portal import constant_file
from ngo_portal.exceptions import ValidationError

logger = logging.getLogger(__name__)

IMAGE = "images"
DOCUMENT = "documents"

_ALLOWED = {
    IMAGE: constant_file.allowed_image_types,
    DOCUMENT: constant_file.allowed_document_types,
}


def has_file(file) -> bool:
    return file is not None and bool(getattr(file, "filename", None))


def check_extension(file: UploadFile, kind: str):
    extension = os.path.splitext(file.filename)[1].lower().lstrip(".")
    if extension not in _ALLOWED[kind]:
        raise ValidationError(
            f"Invalid file type for {kind}: {file.filename}",
            details={"allowed": sorted(_ALLOWED[kind])},
        )


def save_upload(file: UploadFile, kind: str) -> str:
    """Store an uploaded file under UPLOAD_ROOT/<kind> and return its public URL path."""
    check_extension(file, kind)
    upload_dir = os.path.join(constant_file.upload_root, kind)
    os.makedirs(upload_dir, exist_ok=True)

    filename = f"{int(time.time() * 1000)}-{os.path.basename(file.filename)}"
    path = os.path.join(upload_dir, filename)
    with open(path, "wb") as buffer:
        file.file.seek(0)
        shutil.copyfileobj(file.file, buffer)
    logger.debug("Stored upload %s", path)
    return f"/uploads/{kind}/{filename}"
