"""Persistence for employee rows.

Database failures that have nothing to do with the submitted data surface as
StorageUnavailable. IntegrityError is left to the caller, which knows what a
constraint violation means for the operation at hand.
"""
from __future__ import annotations
import logging
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StorageUnavailable
from .models import Employee

logger = logging.getLogger(__name__)

_NEWEST_FIRST = (Employee.created_at.desc(), Employee.id.desc())


def _unavailable(db: Session, action: str, committed: bool = False) -> StorageUnavailable:
    db.rollback()
    logger.exception("employee store failed while trying to %s", action)
    return StorageUnavailable(f"Employee store unavailable while trying to {action}", committed=committed)


def find_employee(db: Session, employee_id: int) -> Optional[Employee]:
    try:
        return db.get(Employee, employee_id)
    except SQLAlchemyError as e:
        raise _unavailable(db, "fetch an employee") from e


def find_employees(db: Session) -> List[Employee]:
    statement = select(Employee).order_by(*_NEWEST_FIRST)
    try:
        return list(db.scalars(statement))
    except SQLAlchemyError as e:
        raise _unavailable(db, "list employees") from e


def find_employees_by_filter(
    db: Session,
    *,
    department: Optional[str] = None,
    position: Optional[str] = None,
) -> List[Employee]:
    statement = select(Employee)
    if department:
        statement = statement.where(Employee.department.icontains(department, autoescape=True))
    if position:
        statement = statement.where(Employee.position.icontains(position, autoescape=True))
    statement = statement.order_by(*_NEWEST_FIRST)
    try:
        return list(db.scalars(statement))
    except SQLAlchemyError as e:
        raise _unavailable(db, "search employees") from e


def find_employee_by_email(db: Session, email: str) -> Optional[Employee]:
    statement = select(Employee).where(Employee.email == email)
    try:
        return db.scalars(statement).first()
    except SQLAlchemyError as e:
        raise _unavailable(db, "look up an email") from e


def _commit(db: Session, row: Employee, action: str) -> Employee:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _unavailable(db, action) from e

    # the row is stored from here on, a failed reload must not read as a failed write
    try:
        db.refresh(row)
    except SQLAlchemyError as e:
        raise _unavailable(db, f"reload a stored row after trying to {action}", committed=True) from e
    return row


def insert_employee(db: Session, row: Employee) -> Employee:
    db.add(row)
    return _commit(db, row, "insert an employee")


def replace_employee(db: Session, row: Employee) -> Employee:
    """Persist the pending changes of an already loaded row."""
    return _commit(db, row, "update an employee")


def delete_employee(db: Session, row: Employee) -> None:
    try:
        db.delete(row)
        db.commit()
    except SQLAlchemyError as e:
        raise _unavailable(db, "delete an employee") from e
