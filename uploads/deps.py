from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO, Optional

from fastapi import File, HTTPException, UploadFile, status

from core.config_loader import settings


@dataclass
class IncomingFile:
    """An uploaded file that has passed the type and size checks but is not stored yet."""

    filename: str
    content_type: str
    size: int
    file: BinaryIO

    def read(self) -> bytes:
        self.file.seek(0)
        return self.file.read()

    def discard(self) -> None:
        # spooled temp files are removed from disk on close
        if not self.file.closed:
            self.file.close()


def _measure(fh: BinaryIO) -> int:
    fh.seek(0, os.SEEK_END)
    size = fh.tell()
    fh.seek(0)
    return size


def check_upload(upload: Optional[UploadFile], max_bytes: int) -> Optional[IncomingFile]:
    if upload is None:
        return None

    size = upload.size if upload.size is not None else _measure(upload.file)
    # an empty file input still submits a nameless, empty part
    if not upload.filename and size == 0:
        upload.file.close()
        return None

    content_type = upload.content_type or ""
    if not content_type.startswith("image/"):
        upload.file.close()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image files are allowed")
    if size > max_bytes:
        upload.file.close()
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File too large")

    return IncomingFile(filename=upload.filename or "", content_type=content_type, size=size, file=upload.file)


# Dependency for routes accepting an optional `profile_picture` form part
def profile_picture_upload(profile_picture: Optional[UploadFile] = File(None)) -> Optional[IncomingFile]:
    return check_upload(profile_picture, settings.MAX_UPLOAD_BYTES)
