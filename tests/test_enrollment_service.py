import math

import pytest
from sqlalchemy.exc import OperationalError

from learnx.exceptions import InvalidInputError, NotFoundError, StorageFailureError
from learnx.models import CourseStatistics, Enrollment
from learnx.services import enrollment as enrollment_service
from learnx.services.enrollment import (
    EnrollmentManager,
    normalize_progress,
    normalize_userid,
    resolve_status,
)
from learnx.services.statistics import compute_course_statistics
from learnx.utils import utcnow


@pytest.mark.parametrize(
    "raw, expected",
    [
        (0, 0),
        (42, 42),
        (100, 100),
        (49.5, 50),
        (12.4, 12),
        (150, 0),
        (-5, 0),
        ("abc", 0),
        ("50", 0),
        (None, 0),
        (True, 0),
        (math.nan, 0),
        (math.inf, 0),
    ],
)
def test_normalize_progress(raw, expected):
    assert normalize_progress(raw) == expected


@pytest.mark.parametrize("userid, expected", [(" u1 ", "u1"), (42, "42")])
def test_normalize_userid(userid, expected):
    assert normalize_userid(userid) == expected


@pytest.mark.parametrize("userid", [None, "  ", {"a": 1}, ["u1"], True, 1.5])
def test_normalize_userid_rejects_missing_or_malformed(userid):
    with pytest.raises(InvalidInputError):
        normalize_userid(userid)


def test_resolve_status_derives_from_progress():
    assert resolve_status(None, 100) == "completed"
    assert resolve_status("", 100) == "completed"
    assert resolve_status(None, 99) == "active"
    assert resolve_status("  paused ", 10) == "paused"


def test_resolve_status_rejects_overlong_status():
    with pytest.raises(InvalidInputError):
        resolve_status("x" * 21, 0)


def assert_statistics_consistent(session, course_id):
    """The stored row must equal a fresh derivation from the enrollment table."""
    stored = session.get(CourseStatistics, course_id)
    expected = compute_course_statistics(
        session.query(Enrollment).filter_by(course_id=course_id).all(), utcnow()
    )
    assert stored is not None
    assert stored.total_enrollments == expected.total_enrollments
    assert stored.active_enrollments == expected.active_enrollments
    assert stored.completion_rate == expected.completion_rate
    assert stored.avg_completion_time == pytest.approx(expected.avg_completion_time, abs=0.01)


def test_enroll_creates_active_enrollment(session, make_user, make_course):
    make_user("u1")
    course = make_course()

    enrollment = EnrollmentManager(session).enroll(course.id, "u1")

    assert (enrollment.userid, enrollment.course_id) == ("u1", course.id)
    assert enrollment.progress == 0
    assert enrollment.status == "active"
    assert enrollment.created_at is not None
    assert_statistics_consistent(session, course.id)


def test_enroll_twice_keeps_single_row(session, make_user, make_course):
    make_user("u1")
    course = make_course()
    manager = EnrollmentManager(session)

    first = manager.enroll(course.id, "u1")
    second = manager.enroll(course.id, "u1")

    assert first.id == second.id
    assert session.query(Enrollment).filter_by(userid="u1", course_id=course.id).count() == 1
    assert session.get(CourseStatistics, course.id).total_enrollments == 1


def test_reenroll_resets_status_but_keeps_progress(session, make_user, make_course):
    make_user("u1")
    course = make_course()
    manager = EnrollmentManager(session)
    manager.update_enrollment(course.id, "u1", progress=100)

    enrollment = manager.enroll(course.id, "u1")

    assert enrollment.status == "active"
    assert enrollment.progress == 100
    assert_statistics_consistent(session, course.id)


def test_update_replaces_progress_and_status(session, make_user, make_course):
    make_user("u1")
    course = make_course()
    manager = EnrollmentManager(session)
    manager.update_enrollment(course.id, "u1", progress=80, status="completed")

    enrollment = manager.update_enrollment(course.id, "u1", progress=30)

    assert enrollment.progress == 30
    assert enrollment.status == "active"


def test_update_creates_missing_enrollment(session, make_user, make_course):
    make_user("u1")
    course = make_course()

    enrollment = EnrollmentManager(session).update_enrollment(course.id, "u1", progress=100)

    assert enrollment.status == "completed"
    stats = session.get(CourseStatistics, course.id)
    assert (stats.total_enrollments, stats.active_enrollments, stats.completion_rate) == (1, 0, 100.0)


def test_statistics_track_every_mutation(session, make_user, make_course):
    course = make_course()
    other = make_course("Other course")
    manager = EnrollmentManager(session)
    for n in range(4):
        make_user(f"s{n}")
        manager.enroll(course.id, f"s{n}")
        assert_statistics_consistent(session, course.id)

    manager.update_enrollment(course.id, "s0", progress=100)
    manager.update_enrollment(course.id, "s1", progress=100)
    manager.update_enrollment(course.id, "s2", status="dropped")
    manager.enroll(other.id, "s3")

    assert_statistics_consistent(session, course.id)
    assert_statistics_consistent(session, other.id)
    stats = session.get(CourseStatistics, course.id)
    assert (stats.total_enrollments, stats.active_enrollments, stats.completion_rate) == (4, 1, 50.0)
    assert session.get(CourseStatistics, other.id).total_enrollments == 1


@pytest.mark.parametrize("userid", [None, "", "   "])
def test_missing_userid_is_rejected_before_any_write(session, make_course, userid):
    course = make_course()
    manager = EnrollmentManager(session)

    with pytest.raises(InvalidInputError):
        manager.enroll(course.id, userid)
    with pytest.raises(InvalidInputError):
        manager.update_enrollment(course.id, userid, progress=10)

    assert session.query(Enrollment).count() == 0
    assert session.get(CourseStatistics, course.id) is None


def test_unknown_course_or_user_is_not_found(session, make_user, make_course):
    make_user("u1")
    course = make_course()
    manager = EnrollmentManager(session)

    with pytest.raises(NotFoundError):
        manager.enroll(course.id + 1, "u1")
    with pytest.raises(NotFoundError):
        manager.enroll(course.id, "ghost")
    with pytest.raises(NotFoundError):
        manager.update_enrollment(course.id + 1, "u1", progress=50)
    with pytest.raises(NotFoundError):
        manager.update_enrollment(course.id, "ghost", progress=50)
    assert session.query(Enrollment).count() == 0
    assert session.get(CourseStatistics, course.id) is None


def test_failed_recompute_rolls_back_enrollment(session, make_user, make_course, monkeypatch):
    make_user("u1")
    course = make_course()

    def broken_recompute(session, course_id, now=None):
        raise OperationalError("UPDATE statistics", {}, Exception("disk I/O error"))

    monkeypatch.setattr(enrollment_service, "recompute_course_statistics", broken_recompute)

    with pytest.raises(StorageFailureError):
        EnrollmentManager(session).enroll(course.id, "u1")

    assert session.query(Enrollment).count() == 0
    assert session.get(CourseStatistics, course.id) is None


def test_get_enrollment_returns_none_when_absent(session, make_user, make_course):
    make_user("u1")
    course = make_course()

    assert EnrollmentManager(session).get_enrollment(course.id, "u1") is None


def test_list_student_enrollments_newest_first(session, make_user, make_course):
    make_user("u1")
    courses = [make_course(f"Course {n}") for n in range(3)]
    manager = EnrollmentManager(session)
    for course in courses:
        manager.enroll(course.id, "u1")

    listed = manager.list_student_enrollments("u1")

    assert [e.course_id for e in listed] == [c.id for c in reversed(courses)]
