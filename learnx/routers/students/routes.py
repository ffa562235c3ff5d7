from fastapi import APIRouter

from learnx.dependencies import EnrollmentManagerDep
from learnx.schemas.enrollment import EnrollmentOut

router = APIRouter(prefix="/students", tags=["students"])


@router.get(
    "/{userid}/enrollments",
    response_model=list[EnrollmentOut],
    name="students.list_enrollments",
)
def list_enrollments(userid: str, manager: EnrollmentManagerDep):
    """A student's enrollments with progress and status, newest first."""
    return manager.list_student_enrollments(userid)
