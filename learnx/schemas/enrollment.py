from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from learnx.utils import ensure_utc


class EnrollRequest(BaseModel):
    # Left loose so a missing userid reaches the manager and is reported as InvalidInput.
    userid: Any = None


class EnrollmentUpdateRequest(BaseModel):
    userid: Any = None
    # Out-of-range or non-numeric progress is coerced to 0, not rejected.
    progress: Any = None
    status: Any = None


class EnrollmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    userid: str
    course_id: int
    progress: int
    status: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class EnrollmentResponse(BaseModel):
    message: str
    enrollment: EnrollmentOut


class CourseStatisticsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: int
    total_enrollments: int
    active_enrollments: int
    completion_rate: float
    avg_completion_time: float
