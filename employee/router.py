from typing import Optional
from fastapi import APIRouter, Depends, Form, HTTPException, Query, status
from sqlalchemy.orm import Session

from core.database import get_db
from core.exceptions import (
    ArtifactError,
    DuplicateEmail,
    EmployeeServiceError,
    NotFound,
    StorageUnavailable,
    ValidationFailed,
)
from auth.services.auth_service import CurrentUser, get_current_active_user
from uploads.deps import IncomingFile, profile_picture_upload
from uploads.storage import ArtifactStore, get_artifact_store
from .schema import EmployeeEnvelope, EmployeeSchema
from . import service

employee_router = APIRouter(prefix="/employees", tags=["Employees"])


def _http_error(e: EmployeeServiceError) -> HTTPException:
    if isinstance(e, ValidationFailed):
        return HTTPException(status_code=400, detail={"message": e.message, "errors": e.errors})
    if isinstance(e, DuplicateEmail):
        return HTTPException(status_code=409, detail=e.message)
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=e.message)
    if isinstance(e, StorageUnavailable) and e.committed:
        return HTTPException(status_code=503, detail="Employee was saved but could not be reloaded, fetch it again")
    if isinstance(e, StorageUnavailable):
        return HTTPException(status_code=503, detail="Employee store is unavailable, try again later")
    if isinstance(e, ArtifactError):
        return HTTPException(status_code=500, detail="Could not store profile picture")
    return HTTPException(status_code=500, detail=e.message)


def _form_data(**fields: Optional[str]) -> dict:
    # fields the client did not send stay out of the payload
    return {k: v for k, v in fields.items() if v is not None}


# List all employees, newest first
@employee_router.get("", response_model=list[EmployeeSchema])
def list_employees(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_active_user)):
    try:
        return service.list_employees(db)
    except EmployeeServiceError as e:
        raise _http_error(e)

# Search by department and/or position (case-insensitive substring)
@employee_router.get("/search", response_model=list[EmployeeSchema])
def search_employees(
    department: Optional[str] = Query(None),
    position: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_active_user),
):
    try:
        return service.search_employees(db, department=department, position=position)
    except EmployeeServiceError as e:
        raise _http_error(e)

# Get employee by id
@employee_router.get("/{employee_id}", response_model=EmployeeSchema)
def employee_detail(employee_id: str, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_active_user)):
    try:
        return service.get_employee(db, employee_id)
    except EmployeeServiceError as e:
        raise _http_error(e)

# Create employee (multipart form, optional profile_picture file)
@employee_router.post("", response_model=EmployeeEnvelope, status_code=status.HTTP_201_CREATED)
def employee_post(
    first_name: Optional[str] = Form(None),
    last_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone_number: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    position: Optional[str] = Form(None),
    salary: Optional[str] = Form(None),
    upload: Optional[IncomingFile] = Depends(profile_picture_upload),
    db: Session = Depends(get_db),
    store: ArtifactStore = Depends(get_artifact_store),
    user: CurrentUser = Depends(get_current_active_user),
):
    data = _form_data(
        first_name=first_name, last_name=last_name, email=email, phone_number=phone_number,
        department=department, position=position, salary=salary,
    )
    try:
        created = service.create_employee(db, store, data, created_by=user.id, upload=upload)
    except EmployeeServiceError as e:
        raise _http_error(e)
    return {"message": "Employee created successfully", "employee": created}

# Update employee, only submitted fields change
@employee_router.put("/{employee_id}", response_model=EmployeeEnvelope)
def employee_put(
    employee_id: str,
    first_name: Optional[str] = Form(None),
    last_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone_number: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    position: Optional[str] = Form(None),
    salary: Optional[str] = Form(None),
    upload: Optional[IncomingFile] = Depends(profile_picture_upload),
    db: Session = Depends(get_db),
    store: ArtifactStore = Depends(get_artifact_store),
    user: CurrentUser = Depends(get_current_active_user),
):
    data = _form_data(
        first_name=first_name, last_name=last_name, email=email, phone_number=phone_number,
        department=department, position=position, salary=salary,
    )
    try:
        updated = service.update_employee(db, store, employee_id, data, upload=upload)
    except EmployeeServiceError as e:
        raise _http_error(e)
    return {"message": "Employee updated successfully", "employee": updated}

# Delete employee and its profile picture
@employee_router.delete("/{employee_id}")
def employee_delete(
    employee_id: str,
    db: Session = Depends(get_db),
    store: ArtifactStore = Depends(get_artifact_store),
    user: CurrentUser = Depends(get_current_active_user),
):
    try:
        service.delete_employee(db, store, employee_id)
    except EmployeeServiceError as e:
        raise _http_error(e)
    return {"message": "Employee deleted successfully"}
