from typing import Optional

from fastapi import APIRouter, Body, Query, status
from sqlalchemy import or_, select

from learnx.dependencies import DbSession, EnrollmentManagerDep
from learnx.exceptions import InvalidInputError, NotFoundError
from learnx.models import Course, CourseContent, CourseTopic
from learnx.schemas.course import ContentOut, CourseCard, CourseDetail, TopicOut
from learnx.schemas.enrollment import (
    EnrollmentOut,
    EnrollmentResponse,
    EnrollmentUpdateRequest,
    EnrollRequest,
)

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=list[CourseCard], name="courses.list_courses")
def list_courses(session: DbSession):
    """Approved courses for the public catalog."""
    return session.execute(
        select(Course)
        .where(or_(Course.status == "approved", Course.status.is_(None)))
        .order_by(Course.id)
    ).scalars().all()


@router.get("/{course_id}", response_model=CourseDetail, name="courses.course_detail")
def course_detail(course_id: int, session: DbSession):
    course = session.get(Course, course_id)
    if course is None:
        raise NotFoundError("Course")
    return course


@router.get("/{course_id}/contents", response_model=list[ContentOut], name="courses.course_contents")
def course_contents(course_id: int, session: DbSession):
    return session.execute(
        select(CourseContent)
        .where(CourseContent.course_id == course_id)
        .order_by(CourseContent.order_index)
    ).scalars().all()


@router.get("/{course_id}/topics", response_model=list[TopicOut], name="courses.course_topics")
def course_topics(course_id: int, session: DbSession):
    return session.execute(
        select(CourseTopic)
        .where(CourseTopic.course_id == course_id)
        .order_by(CourseTopic.order_index)
    ).scalars().all()


# --- Enrollment ---

@router.post(
    "/{course_id}/enroll",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    name="courses.enroll",
)
def enroll(
    course_id: int,
    manager: EnrollmentManagerDep,
    payload: Optional[EnrollRequest] = Body(default=None),
):
    enrollment = manager.enroll(course_id, payload.userid if payload else None)
    return {"message": "Enrolled successfully.", "enrollment": enrollment}


@router.get(
    "/{course_id}/enrollment",
    response_model=Optional[EnrollmentOut],
    name="courses.get_enrollment",
)
def get_enrollment(
    course_id: int,
    manager: EnrollmentManagerDep,
    userid: Optional[str] = Query(default=None),
):
    """The caller's enrollment in this course, or ``null`` when not enrolled."""
    if not userid:
        raise InvalidInputError("userid is required.")
    return manager.get_enrollment(course_id, userid)


@router.patch(
    "/{course_id}/enrollment",
    response_model=EnrollmentResponse,
    name="courses.update_enrollment",
)
def update_enrollment(
    course_id: int,
    manager: EnrollmentManagerDep,
    payload: Optional[EnrollmentUpdateRequest] = Body(default=None),
):
    payload = payload or EnrollmentUpdateRequest()
    enrollment = manager.update_enrollment(
        course_id, payload.userid, progress=payload.progress, status=payload.status
    )
    return {"message": "Enrollment updated.", "enrollment": enrollment}
