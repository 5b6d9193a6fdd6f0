from sqlmodel import SQLModel, Field
from datetime import date, datetime, timezone
from typing import Optional
from uuid import uuid4


def new_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """Registered account"""
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(max_length=255, unique=True, index=True)
    # bcrypt hash, see utils/security.py
    password_hash: str
    created_at: datetime = Field(default_factory=utcnow)


class Task(SQLModel, table=True):
    """Task owned by exactly one user"""
    __tablename__ = "tasks"

    id: str = Field(default_factory=new_id, primary_key=True)
    owner: str = Field(foreign_key="users.id", index=True)
    title: str = Field(max_length=200)
    description: Optional[str] = None
    priority: str = Field(max_length=10)
    due_date: date
    completed: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
