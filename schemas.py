import re
import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Any, Literal
from datetime import date, datetime
from errors import ValidationError
from utils.completion import is_completed

Priority = Literal["low", "medium", "high"]

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def describe_validation_error(exc) -> str:
    """
    Turn a pydantic (or FastAPI request) validation error into one line

    Args:
        exc: Exception exposing errors()

    Returns:
        Message such as "dueDate: Field required"
    """
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    msg = first.get("msg", "Invalid input")
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return f"{'.'.join(loc)}: {msg}" if loc else msg


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, ignores unknown ones"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class UserRegister(CamelModel):
    """Schema for registering a user"""
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=72)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v.lower()


class UserLogin(CamelModel):
    """Schema for logging in"""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """Public user profile (never includes the password hash)"""
    id: str
    name: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


def _date_part(v: Any) -> Any:
    # Numbers would otherwise be read as Unix timestamps
    if v is not None and not isinstance(v, (str, date)):
        raise ValueError("Expected an ISO date string (YYYY-MM-DD)")
    # Browsers often send "2026-10-19T00:00:00.000Z" for a date picker value
    if isinstance(v, str) and "T" in v:
        return v.split("T", 1)[0]
    return v


def _lower(v: Any) -> Any:
    return v.strip().lower() if isinstance(v, str) else v


class TaskCreate(CamelModel):
    """Schema for creating a new task"""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    priority: Priority
    due_date: date
    completed: bool = False

    normalize_priority = field_validator("priority", mode="before")(_lower)
    normalize_due_date = field_validator("due_date", mode="before")(_date_part)

    @field_validator("completed", mode="before")
    @classmethod
    def read_completed(cls, v: Any) -> bool:
        return is_completed(v)


class TaskUpdate(CamelModel):
    """Schema for updating a task; only fields that are sent get merged"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    priority: Optional[Priority] = None
    due_date: Optional[date] = None
    completed: Optional[bool] = None

    normalize_priority = field_validator("priority", mode="before")(_lower)
    normalize_due_date = field_validator("due_date", mode="before")(_date_part)

    @field_validator("completed", mode="before")
    @classmethod
    def read_completed(cls, v: Any) -> Optional[bool]:
        return None if v is None else is_completed(v)

    def changes(self) -> dict:
        """Fields explicitly provided; null is only meaningful for description"""
        data = self.model_dump(exclude_unset=True)
        return {
            key: value for key, value in data.items()
            if value is not None or key == "description"
        }


class TaskResponse(CamelModel):
    """Schema for task response"""
    id: str
    owner: str
    title: str
    description: Optional[str]
    priority: str
    due_date: date
    completed: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


def dump_task(task) -> dict:
    return TaskResponse.model_validate(task).model_dump(by_alias=True, mode="json")


def dump_user(user) -> dict:
    return UserResponse.model_validate(user).model_dump(by_alias=True, mode="json")


def validate_fields(schema, fields):
    """
    Validate a mapping of input fields against a schema

    Raises:
        ValidationError: With a one-line description of the first problem
    """
    if isinstance(fields, schema):
        return fields
    try:
        return schema.model_validate(dict(fields or {}))
    except pydantic.ValidationError as exc:
        raise ValidationError(describe_validation_error(exc)) from exc
