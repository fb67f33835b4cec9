"""Employee lifecycle: validation, email uniqueness and profile picture bookkeeping.

A record and the picture it references change together. Pictures are written
before the row that points at them and removed again if the row never makes
it to the database; on delete the picture goes first so no row is ever left
pointing at a missing file.
"""
from __future__ import annotations
import logging
import re
from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import (
    ArtifactDeleteFailed,
    ArtifactWriteFailed,
    DuplicateEmail,
    NotFound,
    StorageUnavailable,
    ValidationFailed,
)
from uploads.deps import IncomingFile
from uploads.storage import ArtifactStore
from . import repository
from .models import Employee, utcnow
from .schema import EmployeeCreate, EmployeeUpdate, errors_from

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"^[0-9]{1,18}$")


def _coerce_id(employee_id: Any) -> Optional[int]:
    if isinstance(employee_id, bool):
        return None
    if isinstance(employee_id, int):
        return employee_id if 0 < employee_id < 2 ** 63 else None
    if isinstance(employee_id, str) and _ID_PATTERN.match(employee_id.strip()):
        return int(employee_id.strip())
    return None


@contextmanager
def _claimed(upload: Optional[IncomingFile]) -> Iterator[Optional[IncomingFile]]:
    """Release the upload's temporary handle however the operation ends."""
    try:
        yield upload
    finally:
        if upload is not None:
            upload.discard()


def _store_upload(store: ArtifactStore, upload: IncomingFile) -> str:
    try:
        data = upload.read()
    except OSError as e:
        raise ArtifactWriteFailed(f"could not read upload {upload.filename!r}: {e}") from e
    return store.store(data, upload.filename)


def _discard_artifact(store: ArtifactStore, reference: str) -> None:
    if not reference:
        return
    try:
        store.delete(reference)
    except ArtifactDeleteFailed:
        logger.warning("could not remove profile picture %s, leaving it orphaned", reference, exc_info=True)


def _validate(model, data: Mapping[str, Any]):
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        raise ValidationFailed(errors_from(e)) from e


def _get_or_404(db: Session, employee_id: Any) -> Employee:
    key = _coerce_id(employee_id)
    if key is None:
        raise NotFound(employee_id)
    row = repository.find_employee(db, key)
    if row is None:
        raise NotFound(employee_id)
    return row


def list_employees(db: Session) -> List[Employee]:
    return repository.find_employees(db)


def search_employees(
    db: Session,
    *,
    department: Optional[str] = None,
    position: Optional[str] = None,
) -> List[Employee]:
    department = department.strip() if department else None
    position = position.strip() if position else None
    if not department and not position:
        return repository.find_employees(db)
    return repository.find_employees_by_filter(db, department=department, position=position)


def get_employee(db: Session, employee_id: Any) -> Employee:
    return _get_or_404(db, employee_id)


def create_employee(
    db: Session,
    store: ArtifactStore,
    data: Mapping[str, Any],
    *,
    created_by: Optional[str],
    upload: Optional[IncomingFile] = None,
) -> Employee:
    with _claimed(upload):
        payload = _validate(EmployeeCreate, data)

        # fast path; the unique index on email is what actually holds the line
        if repository.find_employee_by_email(db, payload.email) is not None:
            raise DuplicateEmail(payload.email)

        reference = _store_upload(store, upload) if upload is not None else ""

        now = utcnow()
        row = Employee(
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            phone_number=payload.phone_number,
            department=payload.department,
            position=payload.position,
            salary=payload.salary,
            profile_picture=reference,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        try:
            row = repository.insert_employee(db, row)
        except IntegrityError as e:
            _discard_artifact(store, reference)
            raise DuplicateEmail(payload.email) from e
        except StorageUnavailable as e:
            # a committed row already points at the picture, keep it
            if not e.committed:
                _discard_artifact(store, reference)
            raise

    logger.info("created employee %s (picture=%s)", row.id, reference or "none")
    return row


def _apply(row: Employee, patch: EmployeeUpdate) -> None:
    supplied = patch.model_fields_set
    if "first_name" in supplied:
        row.first_name = patch.first_name
    if "last_name" in supplied:
        row.last_name = patch.last_name
    if "email" in supplied:
        row.email = patch.email
    if "phone_number" in supplied:
        row.phone_number = patch.phone_number
    if "department" in supplied:
        row.department = patch.department
    if "position" in supplied:
        row.position = patch.position
    if "salary" in supplied and patch.salary is not None:
        row.salary = patch.salary


def update_employee(
    db: Session,
    store: ArtifactStore,
    employee_id: Any,
    data: Mapping[str, Any],
    *,
    upload: Optional[IncomingFile] = None,
) -> Employee:
    with _claimed(upload):
        row = _get_or_404(db, employee_id)
        patch = _validate(EmployeeUpdate, data)

        if "email" in patch.model_fields_set and patch.email != row.email:
            if repository.find_employee_by_email(db, patch.email) is not None:
                raise DuplicateEmail(patch.email)

        old_reference = row.profile_picture or ""
        new_reference = _store_upload(store, upload) if upload is not None else ""

        _apply(row, patch)
        if new_reference:
            row.profile_picture = new_reference
        row.updated_at = utcnow()

        try:
            row = repository.replace_employee(db, row)
        except IntegrityError as e:
            _discard_artifact(store, new_reference)
            raise DuplicateEmail(patch.email or "") from e
        except StorageUnavailable as e:
            if e.committed:
                # stored with the new picture, the old one is unreferenced now
                if new_reference and old_reference:
                    _discard_artifact(store, old_reference)
            else:
                _discard_artifact(store, new_reference)
            raise

    # the row now points at the new picture, so the old one is unreferenced
    if new_reference and old_reference:
        _discard_artifact(store, old_reference)

    logger.info("updated employee %s (fields=%s, picture replaced=%s)",
                row.id, sorted(patch.model_fields_set), bool(new_reference))
    return row


def delete_employee(db: Session, store: ArtifactStore, employee_id: Any) -> None:
    row = _get_or_404(db, employee_id)
    row_id = row.id

    # picture first: a crash in between leaves an orphan file, never a dangling reference
    if row.profile_picture:
        _discard_artifact(store, row.profile_picture)

    repository.delete_employee(db, row)
    logger.info("deleted employee %s", row_id)
