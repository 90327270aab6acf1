# hrms/api/score_routes.py

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from hrms.clock import Clock, get_clock
from hrms.database import get_engine, get_session
from hrms.errors import EmployeeNotFound, OrganizationNotFound, UnsupportedBackend
from hrms.scoring.insights import build_org_insights
from hrms.scoring.productivity import calculate_productivity_score, get_latest_score
from hrms.scoring.recalculate import recalculate_organization

router = APIRouter(prefix="/api/ai", tags=["AI Scores"])


@router.get("/score/{employee_id}")
def score_employee(employee_id: str,
                   session: Session = Depends(get_session),
                   clock: Clock = Depends(get_clock)):
    try:
        result = calculate_productivity_score(session, employee_id, clock=clock)
    except EmployeeNotFound:
        raise HTTPException(status_code=404, detail="Employee not found")
    except (SQLAlchemyError, UnsupportedBackend) as e:
        print(f"❌ AI score error: {e}")
        raise HTTPException(status_code=500, detail="Failed to calculate score")

    return {"success": True, "score": asdict(result)}


@router.get("/score/{employee_id}/latest")
def latest_score(employee_id: str, session: Session = Depends(get_session)):
    record = get_latest_score(session, employee_id)
    if record is None:
        raise HTTPException(status_code=404, detail="No score calculated yet")
    return {"success": True, "score": record.model_dump()}


@router.post("/organizations/{organization_id}/recalculate-all")
def recalculate_all(organization_id: str,
                    engine=Depends(get_engine),
                    clock: Clock = Depends(get_clock)):
    try:
        outcome = recalculate_organization(engine, organization_id, clock=clock)
    except OrganizationNotFound:
        raise HTTPException(status_code=404, detail="Organization not found")

    message = f"Scores recalculated for {outcome['updated']} employees"
    if outcome["failed"]:
        message += f", {outcome['failed']} failed"

    return {
        "success": True,
        "message": message,
        "updated": outcome["updated"],
        "failed":  outcome["failed"],
    }


@router.get("/organizations/{organization_id}/insights")
def org_insights(organization_id: str, session: Session = Depends(get_session)):
    try:
        insights = build_org_insights(session, organization_id)
    except OrganizationNotFound:
        raise HTTPException(status_code=404, detail="Organization not found")
    return {"success": True, "insights": insights}
