# hrms/scoring/insights.py

import numpy as np
import pandas as pd
from sqlmodel import Session, select

from hrms.errors import OrganizationNotFound
from hrms.models import Employee, Organization, ProductivityScore
from hrms.scoring.rounding import round_half_up

TOP_N = 3

_COLUMNS = [
    "employee_id", "name", "department",
    "productivity_score", "performance_trend", "recommendations",
]


def load_score_frame(session: Session, organization_id: str) -> pd.DataFrame:
    rows = session.exec(
        select(
            Employee.id, Employee.name, Employee.department,
            ProductivityScore.productivity_score,
            ProductivityScore.performance_trend,
            ProductivityScore.recommendations,
        )
        .join(ProductivityScore, ProductivityScore.employee_id == Employee.id)
        .where(
            Employee.organization_id == organization_id,
            Employee.is_active == True,  # noqa: E712
        )
    ).all()
    return pd.DataFrame([tuple(r) for r in rows], columns=_COLUMNS)


def _records(df: pd.DataFrame, columns: list[str]) -> list[dict]:
    return [
        {col: (float(row[col]) if col == "productivity_score" else row[col]) for col in columns}
        for _, row in df.iterrows()
    ]


def build_org_insights(session: Session, organization_id: str) -> dict:
    """
    Org-wide view of persisted scores:
      - top performers (highest 3)
      - needs attention (lowest 3, with their recommendations)
      - trend distribution
    """
    if session.get(Organization, organization_id) is None:
        raise OrganizationNotFound(organization_id)

    df = load_score_frame(session, organization_id)
    if df.empty:
        return {
            "top_performers":     [],
            "needs_attention":    [],
            "trend_distribution": [],
            "avg_productivity":   0.0,
            "scored_employees":   0,
        }

    # Ties resolve by employee id so repeated calls agree
    df = df.sort_values(["productivity_score", "employee_id"], ascending=[False, True])
    top = df.head(TOP_N)
    bottom = df.sort_values(["productivity_score", "employee_id"], ascending=[True, True]).head(TOP_N)

    trends = (
        df.groupby("performance_trend").size()
        .sort_values(ascending=False, kind="stable")
        .reset_index(name="count")
    )

    return {
        "top_performers":  _records(top, ["name", "department", "productivity_score", "performance_trend"]),
        "needs_attention": _records(bottom, ["name", "department", "productivity_score",
                                             "performance_trend", "recommendations"]),
        "trend_distribution": [
            {"performance_trend": row["performance_trend"], "count": int(row["count"])}
            for _, row in trends.iterrows()
        ],
        "avg_productivity": round_half_up(float(np.mean(df["productivity_score"])), 1),
        "scored_employees": int(len(df)),
    }
