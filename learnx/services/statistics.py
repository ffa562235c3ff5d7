"""Per-course enrollment statistics.

The ``statistics`` table is a materialised view of ``enrollments``: every row is
produced by :func:`compute_course_statistics` from the full enrollment set of
one course and is overwritten, never incremented, whenever that set changes.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from learnx.models import Course, CourseStatistics, Enrollment
from learnx.models.enrollment import ACTIVE, COMPLETED
from learnx.services.orm_utils import upsert
from learnx.utils import ensure_utc, round_half_up, utcnow

log = logging.getLogger(__name__)

# A "month" in completion-time figures is a flat 30 days.
SECONDS_PER_MONTH = 2_592_000

STATISTICS_FIELDS = (
    "total_enrollments",
    "active_enrollments",
    "completion_rate",
    "avg_completion_time",
)


@dataclass(frozen=True)
class StatisticsSnapshot:
    total_enrollments: int = 0
    active_enrollments: int = 0
    completion_rate: float = 0.0
    avg_completion_time: float = 0.0


def compute_course_statistics(enrollments: Iterable[Any], now: datetime) -> StatisticsSnapshot:
    """
    Derive the aggregate for one course from its enrollments.

    ``enrollments`` may be ORM rows or result tuples; only ``status`` and
    ``created_at`` are read. ``avg_completion_time`` is the mean age, in months,
    of the completed enrollments at ``now``.
    """
    now = ensure_utc(now)
    total = active = 0
    completed_months: list[float] = []

    for row in enrollments:
        total += 1
        if row.status == ACTIVE:
            active += 1
        elif row.status == COMPLETED:
            elapsed = (now - ensure_utc(row.created_at)).total_seconds()
            completed_months.append(elapsed / SECONDS_PER_MONTH)

    if total == 0:
        return StatisticsSnapshot()

    completion_rate = round_half_up(100.0 * len(completed_months) / total)
    avg_completion_time = (
        round_half_up(sum(completed_months) / len(completed_months)) if completed_months else 0.0
    )
    return StatisticsSnapshot(
        total_enrollments=total,
        active_enrollments=active,
        completion_rate=completion_rate,
        avg_completion_time=avg_completion_time,
    )


def recompute_course_statistics(
    session: Session, course_id: int, now: Optional[datetime] = None
) -> CourseStatistics:
    """Rewrite the statistics row of ``course_id``. Joins the caller's transaction."""
    rows = session.execute(
        select(Enrollment.status, Enrollment.created_at).where(Enrollment.course_id == course_id)
    ).all()
    snapshot = compute_course_statistics(rows, now or utcnow())
    log.debug("Recomputed statistics for course %s: %s", course_id, snapshot)
    return upsert(
        session,
        CourseStatistics,
        {"course_id": course_id, **asdict(snapshot)},
        conflict_columns=("course_id",),
        update_columns=STATISTICS_FIELDS,
    )


def analytics_overview(session: Session) -> dict[str, Any]:
    """Platform-wide enrollment figures, read from the materialised statistics rows."""
    completed_expr = func.coalesce(
        func.sum(CourseStatistics.total_enrollments * CourseStatistics.completion_rate / 100.0), 0
    )
    totals = session.execute(
        select(
            func.coalesce(func.sum(CourseStatistics.total_enrollments), 0),
            func.coalesce(func.sum(CourseStatistics.active_enrollments), 0),
            completed_expr,
            func.coalesce(func.avg(CourseStatistics.avg_completion_time), 0),
        )
    ).one()
    total_enrollments = int(totals[0])
    active_enrollments = int(totals[1])
    completed_enrollments = int(round_half_up(float(totals[2]), 0))
    avg_completion = float(totals[3] or 0)

    completion_rate = (
        completed_enrollments * 100.0 / total_enrollments if total_enrollments > 0 else 0
    )

    course_rows = session.execute(
        select(Course, CourseStatistics)
        .outerjoin(CourseStatistics, CourseStatistics.course_id == Course.id)
        .order_by(Course.id)
    ).all()

    course_stats = []
    for course, stats in course_rows:
        stats = stats or StatisticsSnapshot()
        course_stats.append(
            {
                "id": course.id,
                "name": course.name,
                "university": course.university,
                "totalEnrollments": stats.total_enrollments,
                "activeStudents": stats.active_enrollments,
                "completedStudents": int(
                    round_half_up(stats.total_enrollments * stats.completion_rate / 100.0, 0)
                ),
                "completionRate": round_half_up(stats.completion_rate),
                "avgTimeMonths": round_half_up(stats.avg_completion_time),
                "rating": course.rating or 0,
            }
        )

    return {
        "totalEnrollments": total_enrollments,
        "activeEnrollments": active_enrollments,
        "completionRate": completion_rate,
        "avgCompletionTime": avg_completion,
        "enrollmentTrend": [
            {"month": "All", "enrollments": total_enrollments, "completions": completed_enrollments}
        ],
        "courseStats": course_stats,
    }
