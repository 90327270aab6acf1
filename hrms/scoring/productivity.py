# hrms/scoring/productivity.py
#
# Rule-based productivity score for one employee.
#   - Task completion rate      (40%)
#   - On-time completion rate   (30%)
#   - Task complexity bonus     (20%)
#   - Recent activity bonus     (10%)
# The score is a pure function of the employee's current task list and "now";
# the result is upserted into productivityscore (one row per employee).

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from hrms.clock import Clock, utcnow, as_naive_utc
from hrms.errors import EmployeeNotFound, UnsupportedBackend
from hrms.models import Employee, ProductivityScore, Task
from hrms.scoring.rounding import round_half_up

WEIGHTS = {
    "completion": 40,
    "on_time":    30,
    "complexity": 20,
    "recent":     10,
}
PRIORITY_WEIGHTS = {"high": 1.0, "medium": 0.6, "low": 0.0}

RECENT_WINDOW      = timedelta(days=7)
RECENT_SATURATION  = 3     # completions in the window that max the bonus
TREND_MARGIN       = 1     # week-over-week difference that still counts as stable

NO_DATA_RECOMMENDATION = "Get started by completing your first task!"
MSG_COMPLETION = "Focus on completing assigned tasks"
MSG_ON_TIME    = "Improve time management to meet deadlines"
MSG_PRIORITY   = "Take on higher priority tasks to boost score"
MSG_ACTIVITY   = "Stay active — complete tasks regularly"
MSG_GREAT_WORK = "Great work! Keep up the momentum!"


@dataclass
class ScoreBreakdown:
    """Unrounded sub-metrics on a 0-1 scale, plus the final 0-100 score."""
    score:            float
    completion_rate:  float
    on_time_rate:     float
    complexity_score: float
    recent_bonus:     float
    recent_completed: int
    prev_completed:   int
    trend:            str
    recommendations:  List[str]
    total_tasks:      int
    completed_tasks:  int


@dataclass
class ScoreResult:
    score:                 float
    task_completion_rate:  int
    on_time_rate:          int
    complexity_score:      int
    recent_activity_bonus: int
    trend:                 str
    recommendations:       List[str] = field(default_factory=list)
    total_tasks:           int = 0
    completed_tasks:       int = 0


def _no_data_result() -> ScoreResult:
    return ScoreResult(
        score=0,
        task_completion_rate=0,
        on_time_rate=0,
        complexity_score=0,
        recent_activity_bonus=0,
        trend="no_data",
        recommendations=[NO_DATA_RECOMMENDATION],
        total_tasks=0,
        completed_tasks=0,
    )


def _is_on_time(task) -> bool:
    due = as_naive_utc(task.due_date)
    done = as_naive_utc(task.completed_at)
    if due is None or done is None:
        return True  # no deadline (or no stamp) is never late
    return done <= due


def _completed_between(completed: list, start: datetime, end: datetime, include_end: bool) -> int:
    count = 0
    for task in completed:
        done = as_naive_utc(task.completed_at)
        if done is None or done < start:
            continue
        if done < end or (include_end and done == end):
            count += 1
    return count


def _trend(recent: int, previous: int) -> str:
    if recent > previous + TREND_MARGIN:
        return "improving"
    if recent < previous - TREND_MARGIN:
        return "declining"
    return "stable"


def _recommendations(completion_rate: float, on_time_rate: float,
                     high_priority: int, recent: int) -> List[str]:
    recs = []
    if completion_rate < 0.5:
        recs.append(MSG_COMPLETION)
    if on_time_rate < 0.6:
        recs.append(MSG_ON_TIME)
    if high_priority == 0:
        recs.append(MSG_PRIORITY)
    if recent == 0:
        recs.append(MSG_ACTIVITY)
    if not recs:
        recs.append(MSG_GREAT_WORK)
    return recs


def score_task_history(tasks: list, now: datetime) -> Optional[ScoreBreakdown]:
    """
    Compute the score breakdown for a task snapshot at `now`.
    Returns None for an empty snapshot (the caller reports "no_data").
    """
    total = len(tasks)
    if total == 0:
        return None

    now = as_naive_utc(now)
    completed = [t for t in tasks if t.status == "completed"]
    n_completed = len(completed)

    completion_rate = n_completed / total

    on_time = sum(1 for t in completed if _is_on_time(t))
    on_time_rate = on_time / n_completed if n_completed else 0.0

    high_priority = sum(1 for t in completed if t.priority == "high")
    medium_priority = sum(1 for t in completed if t.priority == "medium")
    complexity = (
        (high_priority * PRIORITY_WEIGHTS["high"] + medium_priority * PRIORITY_WEIGHTS["medium"]) / n_completed
        if n_completed else 0.0
    )

    week_ago = now - RECENT_WINDOW
    two_weeks_ago = now - 2 * RECENT_WINDOW
    recent = _completed_between(completed, week_ago, now, include_end=True)
    previous = _completed_between(completed, two_weeks_ago, week_ago, include_end=False)
    recent_bonus = min(recent / RECENT_SATURATION, 1.0)

    raw_score = (
        completion_rate * WEIGHTS["completion"] +
        on_time_rate    * WEIGHTS["on_time"] +
        complexity      * WEIGHTS["complexity"] +
        recent_bonus    * WEIGHTS["recent"]
    )

    return ScoreBreakdown(
        score=round_half_up(min(raw_score, 100.0), 2),
        completion_rate=completion_rate,
        on_time_rate=on_time_rate,
        complexity_score=complexity,
        recent_bonus=recent_bonus,
        recent_completed=recent,
        prev_completed=previous,
        trend=_trend(recent, previous),
        recommendations=_recommendations(completion_rate, on_time_rate, high_priority, recent),
        total_tasks=total,
        completed_tasks=n_completed,
    )


def _upsert_statement(session: Session, values: dict):
    """INSERT ... ON CONFLICT (employee_id) DO UPDATE for the bound dialect."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise UnsupportedBackend(dialect)

    stmt = insert(ProductivityScore).values(**values)
    updated = {k: stmt.excluded[k] for k in values if k not in ("id", "employee_id")}
    return stmt.on_conflict_do_update(index_elements=["employee_id"], set_=updated)


def persist_score(session: Session, employee: Employee, breakdown: ScoreBreakdown,
                  calculated_at: datetime) -> None:
    """
    Replace the employee's score row. Last write wins: there is no version
    check, so two concurrent recomputations keep whichever commits last.
    """
    values = {
        "id":                   str(uuid.uuid4()),
        "employee_id":          employee.id,
        "organization_id":      employee.organization_id,
        "productivity_score":   breakdown.score,
        "task_completion_rate": round_half_up(breakdown.completion_rate * 100, 2),
        "on_time_rate":         round_half_up(breakdown.on_time_rate * 100, 2),
        "performance_trend":    breakdown.trend,
        "recommendations":      list(breakdown.recommendations),
        "last_calculated":      calculated_at,
    }
    try:
        session.exec(_upsert_statement(session, values))
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise


def calculate_productivity_score(session: Session, employee_id: str,
                                 clock: Clock = utcnow) -> ScoreResult:
    employee = session.get(Employee, employee_id)
    if employee is None:
        raise EmployeeNotFound(employee_id)

    tasks = session.exec(select(Task).where(Task.assigned_to == employee_id)).all()

    now = clock()
    breakdown = score_task_history(tasks, now)
    if breakdown is None:
        return _no_data_result()

    persist_score(session, employee, breakdown, as_naive_utc(now))

    return ScoreResult(
        score=breakdown.score,
        task_completion_rate=round_half_up(breakdown.completion_rate * 100),
        on_time_rate=round_half_up(breakdown.on_time_rate * 100),
        complexity_score=round_half_up(breakdown.complexity_score * 100),
        recent_activity_bonus=round_half_up(breakdown.recent_bonus * 100),
        trend=breakdown.trend,
        recommendations=breakdown.recommendations,
        total_tasks=breakdown.total_tasks,
        completed_tasks=breakdown.completed_tasks,
    )


def get_latest_score(session: Session, employee_id: str) -> Optional[ProductivityScore]:
    return session.exec(
        select(ProductivityScore).where(ProductivityScore.employee_id == employee_id)
    ).first()
