# hrms/api/task_routes.py

from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import case
from sqlmodel import Session, select

from hrms.audit.activity_log import ActivityNotifier, get_activity_notifier
from hrms.clock import Clock, as_naive_utc, get_clock
from hrms.database import get_session
from hrms.errors import OrganizationNotFound
from hrms.models import Employee, Task
from hrms.scoring.assignment import rank_candidates

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])

Status   = Literal["assigned", "in_progress", "completed"]
Priority = Literal["low", "medium", "high"]

NULLABLE_FIELDS = {"description", "due_date", "assigned_to"}


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_to: str
    organization_id: str
    priority: Priority = "medium"
    due_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[Status] = None
    priority: Optional[Priority] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None


def parse_skills(skills: Optional[str]) -> List[str]:
    if not skills:
        return []
    return [s.strip() for s in skills.split(",") if s.strip()]


def require_assignable(session: Session, employee_id: str, organization_id: str) -> Employee:
    """Tasks may only go to active employees of the task's own organization."""
    employee = session.get(Employee, employee_id)
    if (employee is None or not employee.is_active or employee.role != "employee"
            or employee.organization_id != organization_id):
        raise HTTPException(status_code=400, detail="Employee not found in your organization")
    return employee


@router.get("")
def list_tasks(organization_id: Optional[str] = None,
               assigned_to: Optional[str] = None,
               status: Optional[Status] = None,
               priority: Optional[Priority] = None,
               session: Session = Depends(get_session)):
    if not organization_id and not assigned_to:
        raise HTTPException(status_code=400, detail="organization_id or assigned_to is required")

    stmt = select(Task)
    if organization_id:
        stmt = stmt.where(Task.organization_id == organization_id)
    if assigned_to:
        stmt = stmt.where(Task.assigned_to == assigned_to)
    if status:
        stmt = stmt.where(Task.status == status)
    if priority:
        stmt = stmt.where(Task.priority == priority)

    priority_rank = case((Task.priority == "high", 1), (Task.priority == "medium", 2), else_=3)
    stmt = stmt.order_by(
        priority_rank,
        Task.due_date.is_(None),
        Task.due_date.asc(),
        Task.created_at.desc(),
    )
    return {"success": True, "tasks": [t.model_dump() for t in session.exec(stmt).all()]}


@router.post("", status_code=201)
def create_task(payload: TaskCreate, session: Session = Depends(get_session)):
    employee = require_assignable(session, payload.assigned_to, payload.organization_id)

    data = payload.model_dump()
    data["due_date"] = as_naive_utc(data["due_date"])
    task = Task(**data)
    session.add(task)
    session.commit()
    session.refresh(task)

    print(f"📌 Task created: \"{task.title}\" assigned to {employee.name}")
    return {"success": True, "task": task.model_dump()}


# Registered before /{task_id} so "suggestions" is never read as an id
@router.get("/suggestions")
def task_suggestions(organization_id: str,
                     skills: Optional[str] = Query(default=None, description="Comma separated"),
                     session: Session = Depends(get_session)):
    try:
        suggestions = rank_candidates(session, organization_id, parse_skills(skills))
    except OrganizationNotFound:
        raise HTTPException(status_code=404, detail="Organization not found")
    return {"success": True, "suggestions": suggestions}


@router.put("/{task_id}")
def update_task(task_id: str,
                payload: TaskUpdate,
                background_tasks: BackgroundTasks,
                session: Session = Depends(get_session),
                notifier: ActivityNotifier = Depends(get_activity_notifier),
                clock: Clock = Depends(get_clock)):
    task = session.get(Task, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")

    changes = payload.model_dump(exclude_unset=True)
    # title, status and priority are NOT NULL; an explicit null means "leave as is"
    changes = {k: v for k, v in changes.items() if v is not None or k in NULLABLE_FIELDS}
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    if changes.get("assigned_to") is not None:
        require_assignable(session, changes["assigned_to"], task.organization_id)
    if "due_date" in changes:
        changes["due_date"] = as_naive_utc(changes["due_date"])
    for key, value in changes.items():
        setattr(task, key, value)

    now = clock()
    if "status" in changes:
        task.completed_at = now if changes["status"] == "completed" else None
    task.updated_at = now

    session.add(task)
    session.commit()
    session.refresh(task)

    activity = None
    if changes.get("status") == "completed" and notifier.is_active():
        employee_id = task.assigned_to
        if employee_id:
            # Runs after the response is sent
            background_tasks.add_task(notifier.notify_task_completed, task.id, employee_id)
            activity = {"status": "pending", "message": "Activity log submitted"}

    return {"success": True, "task": task.model_dump(), "activity": activity}


@router.delete("/{task_id}")
def delete_task(task_id: str, session: Session = Depends(get_session)):
    task = session.get(Task, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    title = task.title
    session.delete(task)
    session.commit()
    return {"success": True, "message": f"Task \"{title}\" deleted"}
