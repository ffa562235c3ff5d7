from __future__ import annotations

import logging
import math
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from learnx.exceptions import InvalidInputError, NotFoundError, StorageFailureError
from learnx.models import Course, Enrollment, User
from learnx.models.enrollment import ACTIVE, COMPLETED, STATUS_MAX_LENGTH
from learnx.services.orm_utils import upsert
from learnx.services.statistics import recompute_course_statistics
from learnx.utils import utcnow

log = logging.getLogger(__name__)

T = TypeVar("T")


def normalize_userid(userid: Any) -> str:
    if userid is None or (isinstance(userid, str) and not userid.strip()):
        raise InvalidInputError("userid is required.")
    if isinstance(userid, bool) or not isinstance(userid, (str, int)):
        raise InvalidInputError("userid must be a string.")
    return str(userid).strip()


def normalize_progress(progress: Any) -> int:
    """Numbers in [0, 100] round half up; anything else becomes 0 rather than an error."""
    if isinstance(progress, bool) or not isinstance(progress, (int, float)):
        return 0
    if math.isnan(progress) or progress < 0 or progress > 100:
        return 0
    return int(math.floor(progress + 0.5))


def resolve_status(status: Any, progress: int) -> str:
    if isinstance(status, str) and status.strip():
        status = status.strip()
        if len(status) > STATUS_MAX_LENGTH:
            raise InvalidInputError(f"status must be at most {STATUS_MAX_LENGTH} characters.")
        return status
    return COMPLETED if progress >= 100 else ACTIVE


class EnrollmentManager:
    """
    Creates and updates the single enrollment row of a (user, course) pair.

    Every mutation recomputes the course's statistics row and commits both writes
    together; on any failure the session is rolled back so neither is persisted.
    """

    def __init__(self, session: Session):
        self.session = session

    # --- reads ---

    def get_enrollment(self, course_id: int, userid: Any) -> Optional[Enrollment]:
        userid = normalize_userid(userid)
        return self.session.execute(
            select(Enrollment).where(Enrollment.course_id == course_id, Enrollment.userid == userid)
        ).scalar_one_or_none()

    def list_student_enrollments(self, userid: Any) -> list[Enrollment]:
        userid = normalize_userid(userid)
        return list(
            self.session.execute(
                select(Enrollment)
                .where(Enrollment.userid == userid)
                .order_by(Enrollment.created_at.desc(), Enrollment.id.desc())
            ).scalars()
        )

    # --- mutations ---

    def enroll(self, course_id: int, userid: Any) -> Enrollment:
        """Enroll ``userid`` in ``course_id``. A repeat call re-activates the existing row."""
        userid = normalize_userid(userid)
        values = {
            "userid": userid,
            "course_id": course_id,
            "progress": 0,
            "status": ACTIVE,
            "created_at": utcnow(),
        }
        enrollment = self._mutate(
            course_id,
            userid,
            lambda: upsert(
                self.session,
                Enrollment,
                values,
                conflict_columns=("userid", "course_id"),
                update_columns=("status",),
            ),
        )
        log.info("User %s enrolled in course %s (status=%s)", userid, course_id, enrollment.status)
        return enrollment

    def update_enrollment(
        self, course_id: int, userid: Any, progress: Any = None, status: Any = None
    ) -> Enrollment:
        """Overwrite progress and status, creating the enrollment if it does not exist yet."""
        userid = normalize_userid(userid)
        progress = normalize_progress(progress)
        status = resolve_status(status, progress)
        values = {
            "userid": userid,
            "course_id": course_id,
            "progress": progress,
            "status": status,
            "created_at": utcnow(),
        }
        enrollment = self._mutate(
            course_id,
            userid,
            lambda: upsert(
                self.session,
                Enrollment,
                values,
                conflict_columns=("userid", "course_id"),
                update_columns=("progress", "status"),
            ),
        )
        log.info(
            "Enrollment %s@%s updated to progress=%s status=%s",
            userid, course_id, enrollment.progress, enrollment.status,
        )
        return enrollment

    def _mutate(self, course_id: int, userid: str, write: Callable[[], T]) -> T:
        """Run ``write`` and the statistics recompute as one transaction."""
        if self.session.get(Course, course_id) is None:
            raise NotFoundError("Course")
        user = self.session.execute(select(User.id).where(User.userid == userid)).first()
        if user is None:
            raise NotFoundError("User")

        try:
            result = write()
            recompute_course_statistics(self.session, course_id)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.exception("Enrollment write for %s@%s rolled back", userid, course_id)
            raise StorageFailureError() from exc
        except Exception:
            self.session.rollback()
            raise
        return result
