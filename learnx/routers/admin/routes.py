from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, inspect, or_, select

from learnx.dependencies import DbSession, UserManagerDep, require_role
from learnx.exceptions import InvalidInputError, NotFoundError
from learnx.extensions import Base
from learnx.models import Course, CourseStatistics, Enrollment, User
from learnx.schemas.auth import UserOut
from learnx.schemas.course import PendingCourseOut
from learnx.schemas.enrollment import CourseStatisticsOut
from learnx.services.statistics import analytics_overview

router = APIRouter(prefix="/admin", tags=["admin"])

admin_required = require_role("administrator")
analyst_required = require_role("administrator", "data_analyst")

# Tables an administrator may page through; statistics is derived and stays internal.
BROWSABLE_TABLES = {"users", "courses", "course_topics", "course_contents", "enrollments"}
HIDDEN_COLUMNS = {"password_hash"}
DEFAULT_ROW_LIMIT = 50
MAX_ROW_LIMIT = 200


@router.get("/stats", name="admin.stats", dependencies=[Depends(admin_required)])
def stats(session: DbSession):
    approved = or_(Course.status == "approved", Course.status.is_(None))
    return {
        "totalUsers": session.scalar(select(func.count(User.id))) or 0,
        "totalCourses": session.scalar(select(func.count(Course.id)).where(approved)) or 0,
        "totalEnrollments": session.scalar(select(func.count(Enrollment.id))) or 0,
        "pendingCourses": session.scalar(
            select(func.count(Course.id)).where(Course.status == "pending")
        ) or 0,
    }


@router.get("/analytics/overview", name="admin.analytics_overview", dependencies=[Depends(analyst_required)])
def analytics(session: DbSession):
    return analytics_overview(session)


@router.get(
    "/courses/{course_id}/statistics",
    response_model=CourseStatisticsOut,
    name="admin.course_statistics",
    dependencies=[Depends(analyst_required)],
)
def course_statistics(course_id: int, session: DbSession):
    if session.get(Course, course_id) is None:
        raise NotFoundError("Course")
    stats = session.get(CourseStatistics, course_id)
    if stats is None:
        # No enrollment has touched this course yet.
        return CourseStatisticsOut(
            course_id=course_id,
            total_enrollments=0,
            active_enrollments=0,
            completion_rate=0,
            avg_completion_time=0,
        )
    return stats


@router.get(
    "/courses/pending",
    response_model=list[PendingCourseOut],
    name="admin.pending_courses",
    dependencies=[Depends(admin_required)],
)
def pending_courses(session: DbSession):
    return session.execute(
        select(Course)
        .where(Course.status == "pending")
        .order_by(Course.created_at.desc(), Course.id.desc())
    ).scalars().all()


@router.patch("/courses/{course_id}/approve", name="admin.approve_course", dependencies=[Depends(admin_required)])
def approve_course(course_id: int, session: DbSession):
    course = session.get(Course, course_id)
    if course is None:
        raise NotFoundError("Course")
    course.status = "approved"
    session.commit()
    return {
        "message": "Course approved.",
        "course": {"id": course.id, "title": course.name, "status": course.status},
    }


@router.get("/db/tables", name="admin.db_tables", dependencies=[Depends(admin_required)])
def db_tables(session: DbSession):
    return sorted(inspect(session.get_bind()).get_table_names())


@router.get("/db/{table}", name="admin.db_table_rows", dependencies=[Depends(admin_required)])
def db_table_rows(
    table: str,
    session: DbSession,
    limit: str | None = Query(default=None),
):
    if table not in BROWSABLE_TABLES:
        raise InvalidInputError("Table not allowed.")
    try:
        limit_value = int(limit) if limit else DEFAULT_ROW_LIMIT
    except ValueError:
        limit_value = DEFAULT_ROW_LIMIT
    limit_value = max(1, min(limit_value or DEFAULT_ROW_LIMIT, MAX_ROW_LIMIT))

    model_table = Base.metadata.tables[table]
    columns = [column for column in model_table.columns if column.name not in HIDDEN_COLUMNS]
    first_pk = list(model_table.primary_key.columns)[0]
    rows = session.execute(
        select(*columns).order_by(first_pk.desc()).limit(limit_value)
    ).mappings().all()
    return [dict(row) for row in rows]


@router.get("/users", response_model=list[UserOut], name="admin.users", dependencies=[Depends(admin_required)])
def list_users(manager: UserManagerDep):
    return manager.list_users()


@router.delete("/users/{user_id}", name="admin.delete_user", dependencies=[Depends(admin_required)])
def delete_user(user_id: int, manager: UserManagerDep):
    deleted = manager.delete_user(user_id)
    return {"message": "User deleted.", "user": deleted}
