# Re-export models so external code can keep using: from learnx.models import User, Course, ...
from .user import User, ROLES
from .course import Course, CourseTopic, CourseContent, COURSE_STATUSES
from .enrollment import Enrollment
from .statistics import CourseStatistics

__all__ = [
    # identity
    "User", "ROLES",
    # catalog
    "Course", "CourseTopic", "CourseContent", "COURSE_STATUSES",
    # enrollment & derived stats
    "Enrollment", "CourseStatistics",
]
