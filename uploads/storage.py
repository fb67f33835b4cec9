"""Filesystem storage for employee profile pictures.

Each stored file gets a generated name and is addressed by a reference of
the form ``/uploads/<name>``, which is also the public URL the static mount
in ``main.py`` serves it from.
"""
from __future__ import annotations

import logging
import os
import re
import tempfile
import uuid
from pathlib import Path
from typing import Optional, Union

from core.config_loader import settings
from core.exceptions import ArtifactDeleteFailed, ArtifactWriteFailed

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"

_EXTENSION = re.compile(r"^\.[a-z0-9]{1,8}$")
_GENERATED_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class ArtifactStore:
    def __init__(self, root: Union[str, Path], url_prefix: str = URL_PREFIX) -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _generate_name(self, suggested_name: str) -> str:
        ext = Path(suggested_name or "").suffix.lower()
        if not _EXTENSION.match(ext):
            ext = ""
        return f"profile-{uuid.uuid4().hex}{ext}"

    def _name_from_reference(self, reference: str) -> Optional[str]:
        prefix = self.url_prefix + "/"
        if not reference or not reference.startswith(prefix):
            return None
        name = reference[len(prefix):]
        # only bare file names inside the root, never a path out of it
        if not _GENERATED_NAME.match(name) or ".." in name:
            return None
        return name

    def path_for(self, reference: str) -> Optional[Path]:
        """Resolve a reference to its on-disk path, or None if it is not one of ours."""
        name = self._name_from_reference(reference)
        if name is None:
            return None
        return self.root / name

    def store(self, data: bytes, suggested_name: str) -> str:
        """Write `data` under a freshly generated name and return its reference.

        The bytes land in a temporary file first and are renamed into place,
        so a reference never points at a partially written file.
        """
        name = self._generate_name(suggested_name)
        target = self.root / name
        tmp_path = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.root, prefix=".incoming-")
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise ArtifactWriteFailed(f"could not store {suggested_name!r}: {e}") from e

        reference = f"{self.url_prefix}/{name}"
        logger.debug("stored artifact %s (%d bytes)", reference, len(data))
        return reference

    def delete(self, reference: str) -> None:
        """Remove the file behind `reference`. Deleting a missing file is a no-op."""
        path = self.path_for(reference)
        if path is None:
            raise ArtifactDeleteFailed(f"not an upload reference: {reference!r}", reference)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise ArtifactDeleteFailed(f"could not delete {reference}: {e}", reference) from e
        logger.debug("deleted artifact %s", reference)

    def exists(self, reference: str) -> bool:
        path = self.path_for(reference)
        return path is not None and path.is_file()


def get_artifact_store() -> ArtifactStore:
    return ArtifactStore(settings.UPLOAD_DIR)
