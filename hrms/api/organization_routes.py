# hrms/api/organization_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlmodel import Session, select

from hrms.database import get_session
from hrms.models import Employee, Organization
from hrms.organizations import find_by_code, generate_org_code

router = APIRouter(prefix="/api/organizations", tags=["Organizations"])


class OrganizationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


class JoinRequest(BaseModel):
    org_code: str = Field(min_length=6, max_length=6)
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    department: Optional[str] = None
    position: Optional[str] = None
    skills: List[str] = Field(default_factory=list)


class EmployeeUpdate(BaseModel):
    department: Optional[str] = None
    position: Optional[str] = None
    skills: Optional[List[str]] = None
    is_active: Optional[bool] = None


@router.post("", status_code=201)
def create_organization(payload: OrganizationCreate, session: Session = Depends(get_session)):
    org = Organization(
        name=payload.name,
        description=payload.description,
        org_code=generate_org_code(session),
    )
    session.add(org)
    session.commit()
    session.refresh(org)

    print(f"🏢 Organization created: {org.name} ({org.org_code})")
    return {"success": True, "organization": org.model_dump()}


@router.post("/join", status_code=201)
def join_organization(payload: JoinRequest, session: Session = Depends(get_session)):
    org = find_by_code(session, payload.org_code)
    if org is None:
        raise HTTPException(status_code=404, detail="Invalid organization code")

    email = payload.email.strip().lower()
    if session.exec(select(Employee.id).where(Employee.email == email)).first():
        raise HTTPException(status_code=409, detail="Email already registered")

    employee = Employee(
        email=email,
        name=payload.name,
        organization_id=org.id,
        department=payload.department,
        position=payload.position,
        skills=[s.strip() for s in payload.skills if s.strip()],
    )
    session.add(employee)
    session.commit()
    session.refresh(employee)

    print(f"👤 {employee.name} joined {org.name}")
    return {"success": True, "employee": employee.model_dump()}


@router.get("/{organization_id}/employees")
def list_employees(organization_id: str, session: Session = Depends(get_session)):
    if session.get(Organization, organization_id) is None:
        raise HTTPException(status_code=404, detail="Organization not found")
    employees = session.exec(
        select(Employee)
        .where(Employee.organization_id == organization_id)
        .order_by(Employee.name)
    ).all()
    return {"success": True, "employees": [e.model_dump() for e in employees]}


def _org_member(session: Session, organization_id: str, employee_id: str) -> Employee:
    employee = session.get(Employee, employee_id)
    if employee is None or employee.organization_id != organization_id or employee.role != "employee":
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


@router.put("/{organization_id}/employees/{employee_id}")
def update_employee(organization_id: str, employee_id: str, payload: EmployeeUpdate,
                    session: Session = Depends(get_session)):
    employee = _org_member(session, organization_id, employee_id)

    # Omitted or null fields keep their current value
    changes = {k: v for k, v in payload.model_dump().items() if v is not None}
    if "skills" in changes:
        changes["skills"] = [s.strip() for s in changes["skills"] if s.strip()]
    for key, value in changes.items():
        setattr(employee, key, value)

    session.add(employee)
    session.commit()
    session.refresh(employee)
    return {"success": True, "employee": employee.model_dump()}


@router.delete("/{organization_id}/employees/{employee_id}")
def deactivate_employee(organization_id: str, employee_id: str,
                        session: Session = Depends(get_session)):
    employee = _org_member(session, organization_id, employee_id)
    employee.is_active = False
    session.add(employee)
    session.commit()

    print(f"🚫 {employee.name} deactivated")
    return {"success": True, "message": f"{employee.name} has been deactivated"}
