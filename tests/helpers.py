from datetime import datetime, timedelta

from hrms.models import Employee, Task

FIXED_NOW = datetime(2025, 6, 16, 12, 0, 0)


def days_ago(days: float, now: datetime = FIXED_NOW) -> datetime:
    return now - timedelta(days=days)


def add_employee(session, employee_id: str, org_id: str = "org-1", **fields) -> Employee:
    fields.setdefault("email", f"{employee_id}@acme.test")
    fields.setdefault("name", employee_id.replace("-", " ").title())
    employee = Employee(id=employee_id, organization_id=org_id, **fields)
    session.add(employee)
    session.commit()
    return employee


def add_tasks(session, employee_id: str, specs: list[dict], org_id: str = "org-1") -> list[Task]:
    """specs: Task field overrides (status, priority, due_date, completed_at)."""
    tasks = [
        Task(title=f"task {i}", assigned_to=employee_id, organization_id=org_id, **spec)
        for i, spec in enumerate(specs)
    ]
    session.add_all(tasks)
    session.commit()
    return tasks


def completed(days: float, priority: str = "low", due_in: float = None) -> dict:
    """A completed task spec, finished `days` before FIXED_NOW."""
    done = days_ago(days)
    spec = {"status": "completed", "priority": priority, "completed_at": done}
    if due_in is not None:
        spec["due_date"] = done + timedelta(days=due_in)
    return spec


def open_task(status: str = "assigned", priority: str = "medium") -> dict:
    return {"status": status, "priority": priority}
