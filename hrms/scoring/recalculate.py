# hrms/scoring/recalculate.py
#
# Recompute every active employee's score in an organization.
# Each employee runs in its own session: one failure is counted, never fatal.
# Usage: python -m hrms.scoring.recalculate <organization_id>

import argparse

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from hrms.clock import Clock, utcnow
from hrms.errors import HRMSError, OrganizationNotFound
from hrms.models import Employee, Organization
from hrms.scoring.productivity import calculate_productivity_score


def active_employee_ids(session: Session, organization_id: str) -> list[str]:
    if session.get(Organization, organization_id) is None:
        raise OrganizationNotFound(organization_id)
    return list(session.exec(
        select(Employee.id).where(
            Employee.organization_id == organization_id,
            Employee.role == "employee",
            Employee.is_active == True,  # noqa: E712
        ).order_by(Employee.id)
    ).all())


def recalculate_organization(engine, organization_id: str, clock: Clock = utcnow) -> dict:
    with Session(engine) as session:
        employee_ids = active_employee_ids(session, organization_id)

    print(f"🔁 Recalculating scores for {len(employee_ids)} employees...")

    updated  = 0
    failures = []

    for employee_id in employee_ids:
        try:
            with Session(engine) as session:
                calculate_productivity_score(session, employee_id, clock=clock)
            updated += 1
        except (SQLAlchemyError, HRMSError) as e:
            print(f"⚠️ Score failed for {employee_id}: {e}")
            failures.append({"employee_id": employee_id, "error": str(e)})

    print(f"✅ Recalculate: {updated} succeeded, {len(failures)} failed")
    return {"updated": updated, "failed": len(failures), "failures": failures}


if __name__ == "__main__":
    from hrms.database import engine, init_db

    parser = argparse.ArgumentParser(description="Recalculate productivity scores for an organization")
    parser.add_argument("organization_id")
    args = parser.parse_args()

    init_db()
    recalculate_organization(engine, args.organization_id)
