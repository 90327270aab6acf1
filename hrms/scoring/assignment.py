# hrms/scoring/assignment.py
#
# Rank an organization's employees for a new task by skill match,
# current workload and their last persisted productivity score.

from typing import List

from sqlalchemy import func
from sqlmodel import Session, select

from hrms.errors import OrganizationNotFound
from hrms.models import Employee, Organization, ProductivityScore, Task
from hrms.scoring.rounding import round_half_up

MAX_SUGGESTIONS      = 5
NEUTRAL_SKILL_MATCH  = 0.5
WORKLOAD_SATURATION  = 10    # active tasks at which the workload score hits 0

RANKING_WEIGHTS = {
    "skill":    0.40,
    "workload": 0.35,
    "ai":       0.25,
}


def skill_match(candidate_skills: List[str], required_skills: List[str]) -> float:
    """
    Fraction of required skills covered by the candidate. A required skill is
    covered when any candidate skill contains it, ignoring case
    ("react" is covered by "React.js").
    """
    if not required_skills:
        return NEUTRAL_SKILL_MATCH

    lowered = [s.lower() for s in candidate_skills or []]
    matched = sum(
        1 for required in required_skills
        if any(required.lower() in skill for skill in lowered)
    )
    return matched / len(required_skills)


def workload_score(active_tasks: int) -> float:
    return max(0.0, 1 - active_tasks / WORKLOAD_SATURATION)


def load_candidates(session: Session, organization_id: str) -> list:
    """
    Active employees with their open task count and latest score.
    Ordered by lightest workload, then best score, then id so ties are stable.
    """
    active_tasks = (
        select(Task.assigned_to, func.count(Task.id).label("active_tasks"))
        .where(Task.status != "completed")
        .group_by(Task.assigned_to)
        .subquery()
    )
    active_count = func.coalesce(active_tasks.c.active_tasks, 0)
    score = func.coalesce(ProductivityScore.productivity_score, 0)

    stmt = (
        select(Employee, active_count.label("active_tasks"), score.label("productivity_score"))
        .outerjoin(active_tasks, active_tasks.c.assigned_to == Employee.id)
        .outerjoin(ProductivityScore, ProductivityScore.employee_id == Employee.id)
        .where(
            Employee.organization_id == organization_id,
            Employee.role == "employee",
            Employee.is_active == True,  # noqa: E712
        )
        .order_by(active_count.asc(), score.desc(), Employee.id.asc())
    )
    return session.exec(stmt).all()


def rank_candidates(session: Session, organization_id: str,
                    required_skills: List[str] = None) -> List[dict]:
    if session.get(Organization, organization_id) is None:
        raise OrganizationNotFound(organization_id)

    required_skills = required_skills or []
    scored = []

    for employee, active_tasks, productivity_score in load_candidates(session, organization_id):
        match    = skill_match(employee.skills, required_skills)
        workload = workload_score(int(active_tasks))
        ai_score = float(productivity_score) / 100

        total = (
            match    * RANKING_WEIGHTS["skill"] +
            workload * RANKING_WEIGHTS["workload"] +
            ai_score * RANKING_WEIGHTS["ai"]
        )

        scored.append({
            "id":                   employee.id,
            "name":                 employee.name,
            "department":           employee.department,
            "skills":               list(employee.skills or []),
            "active_tasks":         int(active_tasks),
            "productivity_score":   float(productivity_score),
            "skill_match":          match,
            "recommendation_score": round_half_up(total * 100),
        })

    # sorted() is stable, so equal scores keep the retrieval order above
    ranked = sorted(scored, key=lambda c: c["recommendation_score"], reverse=True)
    return ranked[:MAX_SUGGESTIONS]
