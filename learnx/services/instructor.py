from __future__ import annotations

import logging
import math
from typing import Any, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from learnx.exceptions import (
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
    StorageFailureError,
)
from learnx.models import Course, CourseContent, Enrollment, User
from learnx.utils import utcnow

log = logging.getLogger(__name__)

DEFAULT_COURSE_ICON = "📘"


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def duration_label(item_count: int) -> str:
    return f"{item_count} item{'' if item_count == 1 else 's'}"


class InstructorManager:
    """Course authoring for instructors: submit for approval, add content, delete."""

    def __init__(self, session: Session):
        self.session = session

    def dashboard(self, userid: str) -> dict:
        enrollment_counts = (
            select(Enrollment.course_id, func.count(Enrollment.id).label("cnt"))
            .group_by(Enrollment.course_id)
            .subquery()
        )
        rows = self.session.execute(
            select(Course, func.coalesce(enrollment_counts.c.cnt, 0))
            .outerjoin(enrollment_counts, enrollment_counts.c.course_id == Course.id)
            .where(Course.instructor_userid == userid)
            .order_by(Course.created_at.desc(), Course.id.desc())
        ).all()

        total_students = sum(count for _, count in rows)
        total_earnings = sum((course.fee or 0) * count for course, count in rows)
        return {
            "stats": {
                "totalCourses": len(rows),
                "totalStudents": int(total_students),
                "totalEarnings": round(total_earnings, 2),
            },
            "courses": [course for course, _ in rows],
        }

    def submit_course(
        self,
        userid: str,
        title: Any,
        price: Any,
        description: Any = None,
        level: Any = None,
        university: Any = None,
    ) -> Course:
        """Create a course in ``pending`` status, awaiting administrator approval."""
        title = _clean(title)
        if not title:
            raise InvalidInputError("Course title is required.")
        try:
            numeric_price = float(price)
        except (TypeError, ValueError):
            numeric_price = math.nan
        if isinstance(price, bool) or not math.isfinite(numeric_price) or numeric_price <= 0:
            raise InvalidInputError("Valid positive course price is required.")

        user = self.session.execute(select(User).where(User.userid == userid)).scalar_one_or_none()
        if user is None:
            raise NotFoundError("Instructor")
        if user.role != "instructor":
            raise PermissionDeniedError("Only instructors can create courses.")

        course = Course(
            name=title,
            description=_clean(description),
            instructor=user.name,
            instructor_userid=user.userid,
            university=_clean(university),
            level=_clean(level),
            fee=numeric_price,
            original_price=numeric_price,
            rating=0,
            students=0,
            icon=DEFAULT_COURSE_ICON,
            is_new=True,
            status="pending",
            created_at=utcnow(),
        )
        self.session.add(course)
        self._commit(f"submitting course {title!r} for {userid}")
        self.session.refresh(course)
        log.info("Instructor %s submitted course %s for approval", userid, course.id)
        return course

    def add_content(
        self,
        userid: str,
        course_id: int,
        title: Any,
        content_type: Any = None,
        description: Any = None,
        link: Any = None,
    ) -> tuple[CourseContent, str]:
        """Append a content item and relabel the course duration by item count."""
        title = _clean(title)
        if not title:
            raise InvalidInputError("Content title is required.")
        course = self._owned_course(userid, course_id)

        kind = (_clean(content_type) or "").lower()
        next_order = self.session.execute(
            select(func.coalesce(func.max(CourseContent.order_index), 0) + 1).where(
                CourseContent.course_id == course.id
            )
        ).scalar_one()

        content = CourseContent(
            course_id=course.id,
            title=title,
            content_type="video" if kind == "video" else "note",
            url=_clean(link),
            note_text=_clean(description),
            order_index=next_order,
        )
        self.session.add(content)
        self.session.flush()

        item_count = self.session.execute(
            select(func.count(CourseContent.id)).where(CourseContent.course_id == course.id)
        ).scalar_one()
        course.duration = duration_label(item_count)
        self._commit(f"adding content to course {course_id}")
        self.session.refresh(content)
        return content, course.duration

    def delete_course(self, userid: str, course_id: int) -> None:
        """Unenroll everyone and remove the course; topics, contents and statistics cascade."""
        course = self._owned_course(userid, course_id)
        self.session.execute(delete(Enrollment).where(Enrollment.course_id == course.id))
        self.session.delete(course)
        self._commit(f"deleting course {course_id}")
        log.info("Instructor %s deleted course %s", userid, course_id)

    def _owned_course(self, userid: str, course_id: int) -> Course:
        course = self.session.get(Course, course_id)
        if course is None:
            raise NotFoundError("Course")
        if course.instructor_userid != userid:
            raise PermissionDeniedError("You do not own this course.")
        return course

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.exception("Failed %s", action)
            raise StorageFailureError() from exc
