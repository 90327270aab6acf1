# hrms/api/dashboard_routes.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from hrms.clock import Clock, get_clock
from hrms.dashboard import employee_stats, organization_stats, productivity_table
from hrms.database import get_session
from hrms.errors import EmployeeNotFound, OrganizationNotFound

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/organizations/{organization_id}/stats")
def org_stats(organization_id: str,
              session: Session = Depends(get_session),
              clock: Clock = Depends(get_clock)):
    try:
        stats = organization_stats(session, organization_id, clock())
    except OrganizationNotFound:
        raise HTTPException(status_code=404, detail="Organization not found")
    return {"success": True, "stats": stats}


@router.get("/organizations/{organization_id}/productivity")
def org_productivity(organization_id: str, session: Session = Depends(get_session)):
    try:
        employees = productivity_table(session, organization_id)
    except OrganizationNotFound:
        raise HTTPException(status_code=404, detail="Organization not found")
    return {"success": True, "employees": employees}


@router.get("/employees/{employee_id}/stats")
def my_stats(employee_id: str,
             session: Session = Depends(get_session),
             clock: Clock = Depends(get_clock)):
    try:
        stats = employee_stats(session, employee_id, clock())
    except EmployeeNotFound:
        raise HTTPException(status_code=404, detail="Employee not found")
    return {"success": True, "stats": stats}
