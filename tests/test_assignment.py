import pytest

from hrms.errors import OrganizationNotFound
from hrms.models import Organization, ProductivityScore
from hrms.scoring.assignment import rank_candidates, skill_match, workload_score

from helpers import add_employee, add_tasks, completed, open_task


def _score(session, employee_id, value):
    session.add(ProductivityScore(employee_id=employee_id, organization_id="org-1", productivity_score=value))
    session.commit()


def test_no_required_skills_is_neutral():
    assert skill_match(["python"], []) == 0.5
    assert skill_match([], []) == 0.5


def test_skill_match_is_case_insensitive_substring():
    assert skill_match(["react.js"], ["React"]) == 1.0
    assert skill_match(["React.js"], ["react"]) == 1.0
    assert skill_match(["Go"], ["golang"]) == 0.0


def test_each_required_skill_counts_once():
    assert skill_match(["python", "pytorch"], ["py"]) == 1.0
    assert skill_match(["React"], ["react", "go"]) == 0.5
    assert skill_match(None, ["react"]) == 0.0


def test_workload_decays_to_zero_at_ten_tasks():
    assert workload_score(0) == 1.0
    assert workload_score(5) == 0.5
    assert workload_score(10) == 0.0
    assert workload_score(14) == 0.0


def test_recommendation_score_combines_skill_workload_and_score(session, org):
    add_employee(session, "emp-a", skills=["React.js", "CSS"])
    add_tasks(session, "emp-a", [open_task(), open_task("in_progress"), completed(3)])
    _score(session, "emp-a", 80)

    [candidate] = rank_candidates(session, "org-1", ["react"])

    assert candidate["id"] == "emp-a"
    assert candidate["active_tasks"] == 2
    assert candidate["productivity_score"] == 80.0
    assert candidate["skill_match"] == 1.0
    # 1.0*0.4 + 0.8*0.35 + 0.8*0.25
    assert candidate["recommendation_score"] == 88


def test_unscored_idle_employee_with_no_skill_filter(session, org):
    add_employee(session, "emp-a")
    [candidate] = rank_candidates(session, "org-1", [])
    assert candidate["skill_match"] == 0.5
    assert candidate["productivity_score"] == 0.0
    assert candidate["recommendation_score"] == 55


def test_returns_at_most_five_in_descending_order(session, org):
    for i in range(7):
        add_employee(session, f"emp-{i}", skills=["python"] if i % 2 else ["excel"])
        add_tasks(session, f"emp-{i}", [open_task() for _ in range(i)])
        _score(session, f"emp-{i}", 10 * i)

    ranked = rank_candidates(session, "org-1", ["python"])

    assert len(ranked) == 5
    scores = [c["recommendation_score"] for c in ranked]
    assert scores == sorted(scores, reverse=True)


def test_only_active_employees_of_the_organization(session, org):
    session.add(Organization(id="org-2", name="Other", org_code="OTHERS"))
    session.commit()
    add_employee(session, "emp-active")
    add_employee(session, "emp-inactive", is_active=False)
    add_employee(session, "admin-1", role="admin")
    add_employee(session, "emp-elsewhere", org_id="org-2")

    ids = [c["id"] for c in rank_candidates(session, "org-1", [])]

    assert ids == ["emp-active"]


def test_ties_keep_retrieval_order_by_employee_id(session, org):
    for employee_id in ("emp-c", "emp-a", "emp-b"):
        add_employee(session, employee_id)

    ranked = rank_candidates(session, "org-1", [])

    assert [c["id"] for c in ranked] == ["emp-a", "emp-b", "emp-c"]
    assert len({c["recommendation_score"] for c in ranked}) == 1


def test_completed_tasks_do_not_count_as_workload(session, org):
    add_employee(session, "emp-busy")
    add_employee(session, "emp-done")
    add_tasks(session, "emp-busy", [open_task() for _ in range(4)])
    add_tasks(session, "emp-done", [completed(1) for _ in range(4)])

    ranked = rank_candidates(session, "org-1", [])

    assert [c["id"] for c in ranked] == ["emp-done", "emp-busy"]
    assert ranked[1]["active_tasks"] == 4


def test_unknown_organization_raises(session):
    with pytest.raises(OrganizationNotFound):
        rank_candidates(session, "nope", [])
