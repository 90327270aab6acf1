# hrms/dashboard.py
#
# Read-only rollups for the admin and employee dashboards.

from datetime import datetime
from typing import List

from sqlalchemy import case, func
from sqlmodel import Session, select

from hrms.errors import EmployeeNotFound, OrganizationNotFound
from hrms.models import Employee, Organization, ProductivityScore, Task
from hrms.scoring.productivity import get_latest_score
from hrms.scoring.rounding import round_half_up

RECENT_ACTIVITY_LIMIT = 5
RECENT_TASKS_LIMIT    = 10


def task_counts(session: Session, condition, now: datetime) -> dict:
    """Status breakdown of the tasks matching `condition`; overdue means open past its due date."""
    row = session.exec(
        select(
            func.count(Task.id),
            func.count(Task.id).filter(Task.status == "completed"),
            func.count(Task.id).filter(Task.status == "in_progress"),
            func.count(Task.id).filter(Task.status == "assigned"),
            func.count(Task.id).filter(Task.due_date < now, Task.status != "completed"),
        ).where(condition)
    ).one()
    total, done, in_progress, assigned, overdue = (int(v or 0) for v in row)
    return {
        "total":       total,
        "completed":   done,
        "in_progress": in_progress,
        "assigned":    assigned,
        "overdue":     overdue,
    }


def organization_stats(session: Session, organization_id: str, now: datetime) -> dict:
    if session.get(Organization, organization_id) is None:
        raise OrganizationNotFound(organization_id)

    active, total = session.exec(
        select(
            func.count(Employee.id).filter(Employee.is_active == True),  # noqa: E712
            func.count(Employee.id),
        ).where(Employee.organization_id == organization_id, Employee.role == "employee")
    ).one()

    tasks = task_counts(session, Task.organization_id == organization_id, now)
    tasks["completion_rate"] = (
        round_half_up(tasks["completed"] / tasks["total"] * 100) if tasks["total"] else 0
    )

    avg = session.exec(
        select(func.avg(ProductivityScore.productivity_score))
        .join(Employee, Employee.id == ProductivityScore.employee_id)
        .where(Employee.organization_id == organization_id, Employee.is_active == True)  # noqa: E712
    ).one()

    recent = session.exec(
        select(Task.title, Task.completed_at, Task.priority, Employee.name)
        .join(Employee, Employee.id == Task.assigned_to)
        .where(Task.organization_id == organization_id, Task.status == "completed")
        .order_by(Task.completed_at.is_(None), Task.completed_at.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
    ).all()

    return {
        "employees": {"active": int(active or 0), "total": int(total or 0)},
        "tasks": tasks,
        "avg_productivity": round_half_up(float(avg or 0), 1),
        "recent_activity": [
            {"title": title, "completed_at": completed_at, "priority": priority, "employee_name": name}
            for title, completed_at, priority, name in recent
        ],
    }


def productivity_table(session: Session, organization_id: str) -> List[dict]:
    """Every active employee with their persisted score (zeros when never scored), best first."""
    if session.get(Organization, organization_id) is None:
        raise OrganizationNotFound(organization_id)

    per_employee = (
        select(
            Task.assigned_to,
            func.count(Task.id).filter(Task.status == "completed").label("tasks_completed"),
            func.count(Task.id).filter(Task.status != "completed").label("tasks_pending"),
        )
        .group_by(Task.assigned_to)
        .subquery()
    )
    score = func.coalesce(ProductivityScore.productivity_score, 0.0)

    rows = session.exec(
        select(
            Employee.id, Employee.name, Employee.department, Employee.position,
            score.label("productivity_score"),
            func.coalesce(ProductivityScore.task_completion_rate, 0.0).label("task_completion_rate"),
            func.coalesce(ProductivityScore.on_time_rate, 0.0).label("on_time_rate"),
            func.coalesce(ProductivityScore.performance_trend, "no_data").label("performance_trend"),
            ProductivityScore.recommendations,
            ProductivityScore.last_calculated,
            func.coalesce(per_employee.c.tasks_completed, 0).label("tasks_completed"),
            func.coalesce(per_employee.c.tasks_pending, 0).label("tasks_pending"),
        )
        .outerjoin(ProductivityScore, ProductivityScore.employee_id == Employee.id)
        .outerjoin(per_employee, per_employee.c.assigned_to == Employee.id)
        .where(
            Employee.organization_id == organization_id,
            Employee.role == "employee",
            Employee.is_active == True,  # noqa: E712
        )
        .order_by(score.desc(), Employee.id.asc())
    ).all()

    table = []
    for row in rows:
        entry = dict(row._mapping)
        entry["productivity_score"] = float(entry["productivity_score"])
        entry["recommendations"] = entry["recommendations"] or []
        table.append(entry)
    return table


def employee_stats(session: Session, employee_id: str, now: datetime) -> dict:
    if session.get(Employee, employee_id) is None:
        raise EmployeeNotFound(employee_id)

    status_rank = case((Task.status == "in_progress", 1), (Task.status == "assigned", 2), else_=3)
    recent = session.exec(
        select(Task)
        .where(Task.assigned_to == employee_id)
        .order_by(status_rank, Task.due_date.is_(None), Task.due_date.asc())
        .limit(RECENT_TASKS_LIMIT)
    ).all()

    score = get_latest_score(session, employee_id)
    return {
        "tasks": task_counts(session, Task.assigned_to == employee_id, now),
        "productivity": score.model_dump(exclude={"id", "employee_id", "organization_id"}) if score else None,
        "recent_tasks": [
            t.model_dump(include={"id", "title", "status", "priority", "due_date", "completed_at", "created_at"})
            for t in recent
        ],
    }
