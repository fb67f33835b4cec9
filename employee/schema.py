import math
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, ValidationError, ValidationInfo, field_validator

from .models import EMAIL_LENGTH, NAME_LENGTH, PHONE_LENGTH

FIELD_LABELS = {
    "first_name": "First name",
    "last_name": "Last name",
    "email": "Email",
    "phone_number": "Phone number",
    "department": "Department",
    "position": "Position",
    "salary": "Salary",
}

REQUIRED_TEXT_FIELDS = ("first_name", "last_name", "department", "position")


def _clean_text(value, label: str, empty_message: str):
    if value is None:
        raise ValueError(empty_message)
    if not isinstance(value, str):
        raise ValueError(f"{label} must be text")
    value = value.strip()
    if not value:
        raise ValueError(empty_message)
    if len(value) > NAME_LENGTH:
        raise ValueError(f"{label} must be at most {NAME_LENGTH} characters")
    return value


def _clean_salary(value) -> Optional[float]:
    # blank form values count as "not given"
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValueError("Salary must be a number")
    try:
        salary = float(value)
    except (TypeError, ValueError):
        raise ValueError("Salary must be a number")
    if not math.isfinite(salary):
        raise ValueError("Salary must be a number")
    if salary < 0:
        raise ValueError("Salary must be a positive number")
    return salary


def _clean_phone(value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("Phone number must be text")
    value = value.strip()
    if len(value) > PHONE_LENGTH:
        raise ValueError(f"Phone number must be at most {PHONE_LENGTH} characters")
    return value


def _strip_email(value):
    if not isinstance(value, str):
        return value
    value = value.strip()
    if len(value) > EMAIL_LENGTH:
        raise ValueError(f"Email must be at most {EMAIL_LENGTH} characters")
    return value


class EmployeeSchema(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: str = ""
    department: str
    position: str
    salary: float = 0
    profile_picture: str = ""
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class EmployeeEnvelope(BaseModel):
    message: str
    employee: EmployeeSchema


# INTERNAL DTO the service validates raw input into
class EmployeeCreate(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    phone_number: str = ""
    department: str
    position: str
    salary: float = 0

    model_config = ConfigDict(extra="forbid")

    @field_validator(*REQUIRED_TEXT_FIELDS, mode="before")
    @classmethod
    def required_text(cls, v, info: ValidationInfo):
        label = FIELD_LABELS[info.field_name]
        return _clean_text(v, label, f"{label} is required")

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return _strip_email(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("phone_number", mode="before")
    @classmethod
    def phone(cls, v):
        return _clean_phone(v)

    @field_validator("salary", mode="before")
    @classmethod
    def salary_default(cls, v):
        salary = _clean_salary(v)
        return 0.0 if salary is None else salary


class EmployeeUpdate(BaseModel):
    """Partial update: only fields that were actually supplied are applied.

    Use `model_fields_set` to tell "not supplied" apart from a supplied value.
    A supplied blank salary is treated as not supplied.
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    salary: Optional[float] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator(*REQUIRED_TEXT_FIELDS, mode="before")
    @classmethod
    def non_empty_text(cls, v, info: ValidationInfo):
        label = FIELD_LABELS[info.field_name]
        return _clean_text(v, label, f"{label} cannot be empty")

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        if v is None:
            raise ValueError("Email cannot be empty")
        return _strip_email(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v is not None else v

    @field_validator("phone_number", mode="before")
    @classmethod
    def phone(cls, v):
        return _clean_phone(v)

    @field_validator("salary", mode="before")
    @classmethod
    def salary_if_given(cls, v):
        return _clean_salary(v)


def errors_from(exc: ValidationError) -> dict[str, str]:
    """Flatten a pydantic ValidationError into one message per field."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__root__"
        if field in errors:
            continue
        label = FIELD_LABELS.get(field, field)
        if err["type"] == "missing":
            message = f"{label} is required"
        elif err["type"] == "extra_forbidden":
            message = f"Unknown field: {field}"
        elif err["type"] == "value_error" and "Value error, " in err["msg"]:
            message = err["msg"].split("Value error, ", 1)[1]
        elif field == "email":
            message = "Please enter a valid email"
        else:
            message = err["msg"]
        errors[field] = message
    return errors
