# hrms/models.py

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import SQLModel, Field

from hrms.clock import utcnow

TASK_STATUSES   = ("assigned", "in_progress", "completed")
TASK_PRIORITIES = ("low", "medium", "high")
TRENDS          = ("improving", "declining", "stable", "no_data")


def _timestamp(nullable: bool = False) -> Column:
    # Naive UTC, no tz conversion on bind or load
    return Column(DateTime(timezone=False), nullable=nullable)


def _new_id() -> str:
    return str(uuid.uuid4())


class Organization(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str
    org_code: str = Field(max_length=6, unique=True, index=True)
    description: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow, sa_column=_timestamp())


class Employee(SQLModel, table=True):
    # Identity
    id: str = Field(default_factory=_new_id, primary_key=True)
    email: str = Field(unique=True, index=True)
    name: str
    role: str = Field(default="employee")
    organization_id: Optional[str] = Field(default=None, foreign_key="organization.id", index=True)

    # Placement
    department: Optional[str] = Field(default=None)
    position: Optional[str] = Field(default=None)
    skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_column=_timestamp())


class Task(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    title: str
    description: Optional[str] = Field(default=None)
    assigned_to: Optional[str] = Field(default=None, foreign_key="employee.id", index=True)
    organization_id: Optional[str] = Field(default=None, foreign_key="organization.id", index=True)

    status: str = Field(default="assigned")        # TASK_STATUSES
    priority: str = Field(default="medium")        # TASK_PRIORITIES
    due_date: Optional[datetime] = Field(default=None, sa_column=_timestamp(nullable=True))
    completed_at: Optional[datetime] = Field(default=None, sa_column=_timestamp(nullable=True))   # set only while status == completed

    created_at: datetime = Field(default_factory=utcnow, sa_column=_timestamp())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=_timestamp())


class ProductivityScore(SQLModel, table=True):
    # One row per employee, replaced wholesale on every recomputation
    id: str = Field(default_factory=_new_id, primary_key=True)
    employee_id: str = Field(foreign_key="employee.id", unique=True, index=True)
    organization_id: Optional[str] = Field(default=None, foreign_key="organization.id")

    productivity_score: float = Field(default=0.0)
    task_completion_rate: float = Field(default=0.0)   # percent, 2 decimals
    on_time_rate: float = Field(default=0.0)           # percent, 2 decimals
    performance_trend: str = Field(default="stable")   # TRENDS
    recommendations: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    last_calculated: datetime = Field(default_factory=utcnow, sa_column=_timestamp())


class ActivityLog(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    employee_id: str = Field(foreign_key="employee.id", index=True)
    task_id: Optional[str] = Field(default=None)
    event_type: str                       # "task_completion"
    activity_hash: str = Field(max_length=64)
    created_at: datetime = Field(default_factory=utcnow, sa_column=_timestamp())
