from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from learnx.dependencies import InstructorManagerDep, require_self
from learnx.schemas.course import (
    ContentCreateRequest,
    ContentOut,
    CourseSubmitRequest,
    InstructorCourseOut,
)

router = APIRouter(prefix="/instructors", tags=["instructors"], dependencies=[Depends(require_self)])


@router.get("/{userid}/dashboard", name="instructors.dashboard")
def dashboard(userid: str, manager: InstructorManagerDep):
    """Totals plus every course the instructor owns, pending ones included."""
    data = manager.dashboard(userid)
    return {
        "stats": data["stats"],
        "courses": [
            InstructorCourseOut.model_validate(course).model_dump(mode="json", by_alias=True)
            for course in data["courses"]
        ],
    }


@router.post("/{userid}/courses", status_code=status.HTTP_201_CREATED, name="instructors.submit_course")
def submit_course(
    userid: str,
    manager: InstructorManagerDep,
    payload: Optional[CourseSubmitRequest] = Body(default=None),
):
    payload = payload or CourseSubmitRequest()
    course = manager.submit_course(
        userid,
        title=payload.title,
        price=payload.price,
        description=payload.description,
        level=payload.level,
        university=payload.university,
    )
    return {
        "message": "Course submitted for approval.",
        "course": InstructorCourseOut.model_validate(course).model_dump(mode="json", by_alias=True),
    }


@router.post(
    "/{userid}/courses/{course_id}/contents",
    status_code=status.HTTP_201_CREATED,
    name="instructors.add_content",
)
def add_content(
    userid: str,
    course_id: int,
    manager: InstructorManagerDep,
    payload: Optional[ContentCreateRequest] = Body(default=None),
):
    payload = payload or ContentCreateRequest()
    content, duration = manager.add_content(
        userid,
        course_id,
        title=payload.title,
        content_type=payload.type,
        description=payload.description,
        link=payload.link,
    )
    return {
        "message": "Content added and duration updated.",
        "content": ContentOut.model_validate(content).model_dump(mode="json", by_alias=True),
        "duration": duration,
    }


@router.delete("/{userid}/courses/{course_id}", name="instructors.delete_course")
def delete_course(userid: str, course_id: int, manager: InstructorManagerDep):
    manager.delete_course(userid, course_id)
    return {"message": "Course deleted successfully."}
