# hrms/api/activity_routes.py

from fastapi import APIRouter, Depends
from sqlmodel import Session

from hrms.audit.activity_log import ActivityNotifier, get_activity_notifier, list_employee_activity
from hrms.database import get_session

router = APIRouter(prefix="/api/activity", tags=["Activity Log"])


@router.get("/status")
def activity_status(notifier: ActivityNotifier = Depends(get_activity_notifier)):
    return {"success": True, "activity_log": notifier.status()}


@router.get("/employees/{employee_id}")
def employee_activity(employee_id: str, session: Session = Depends(get_session)):
    events = list_employee_activity(session, employee_id)
    return {
        "success": True,
        "events": [e.model_dump() for e in events],
        "total_completed": len(events),
    }
