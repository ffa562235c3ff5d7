import pytest

from learnx.models import CourseStatistics, Enrollment, User
from learnx.services.enrollment import EnrollmentManager


@pytest.fixture
def admin(make_user):
    return make_user("admin1", role="administrator")


@pytest.fixture
def analyst(make_user):
    return make_user("analyst1", role="data_analyst")


@pytest.fixture
def cohort(session, make_user, make_course):
    """Two courses: three students in the first (one finished), one in the second."""
    first = make_course("First", university="MIT", rating=4.5)
    second = make_course("Second")
    manager = EnrollmentManager(session)
    for userid in ("a", "b", "c"):
        make_user(userid)
        manager.enroll(first.id, userid)
    manager.update_enrollment(first.id, "a", progress=100)
    manager.enroll(second.id, "b")
    return first, second


@pytest.mark.asyncio
async def test_admin_routes_require_login(client):
    response = await client.get("/admin/stats")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_students_are_forbidden(client, make_user, auth_headers):
    student = make_user("stu")
    response = await client.get("/admin/stats", headers=auth_headers(student))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_stats(client, admin, make_course, cohort, auth_headers):
    make_course("Waiting", status="pending")

    response = await client.get("/admin/stats", headers=auth_headers(admin))

    assert response.json() == {
        "totalUsers": 4,
        "totalCourses": 2,
        "totalEnrollments": 4,
        "pendingCourses": 1,
    }


@pytest.mark.asyncio
async def test_pending_course_approval(client, admin, make_course, auth_headers):
    course = make_course("Waiting", status="pending")
    headers = auth_headers(admin)

    pending = await client.get("/admin/courses/pending", headers=headers)
    assert [c["title"] for c in pending.json()] == ["Waiting"]

    response = await client.patch(f"/admin/courses/{course.id}/approve", headers=headers)
    assert response.status_code == 200
    assert response.json()["course"]["status"] == "approved"

    catalog = await client.get("/courses")
    assert [c["title"] for c in catalog.json()] == ["Waiting"]
    assert (await client.get("/admin/courses/pending", headers=headers)).json() == []


@pytest.mark.asyncio
async def test_approve_missing_course(client, admin, auth_headers):
    response = await client.patch("/admin/courses/404/approve", headers=auth_headers(admin))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_analytics_overview(client, analyst, cohort, auth_headers):
    first, second = cohort

    response = await client.get("/admin/analytics/overview", headers=auth_headers(analyst))

    assert response.status_code == 200
    body = response.json()
    assert body["totalEnrollments"] == 4
    assert body["activeEnrollments"] == 3
    assert body["completionRate"] == 25.0
    assert body["enrollmentTrend"] == [{"month": "All", "enrollments": 4, "completions": 1}]

    by_id = {c["id"]: c for c in body["courseStats"]}
    assert by_id[first.id]["totalEnrollments"] == 3
    assert by_id[first.id]["completedStudents"] == 1
    assert by_id[first.id]["completionRate"] == 33.33
    assert by_id[first.id]["university"] == "MIT"
    assert by_id[second.id]["activeStudents"] == 1


@pytest.mark.asyncio
async def test_analytics_overview_empty(client, analyst, make_course, auth_headers):
    course = make_course()

    body = (await client.get("/admin/analytics/overview", headers=auth_headers(analyst))).json()

    assert body["totalEnrollments"] == 0
    assert body["completionRate"] == 0
    assert body["courseStats"][0]["id"] == course.id
    assert body["courseStats"][0]["totalEnrollments"] == 0


@pytest.mark.asyncio
async def test_course_statistics(client, analyst, cohort, make_course, auth_headers):
    first, _ = cohort
    untouched = make_course("Untouched")
    headers = auth_headers(analyst)

    stats = (await client.get(f"/admin/courses/{first.id}/statistics", headers=headers)).json()
    empty = (await client.get(f"/admin/courses/{untouched.id}/statistics", headers=headers)).json()
    missing = await client.get("/admin/courses/999/statistics", headers=headers)

    assert (stats["total_enrollments"], stats["active_enrollments"], stats["completion_rate"]) == (3, 2, 33.33)
    assert empty["total_enrollments"] == 0
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_analysts_cannot_manage_users(client, analyst, auth_headers):
    response = await client.get("/admin/users", headers=auth_headers(analyst))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_users_hides_password(client, admin, auth_headers):
    response = await client.get("/admin/users", headers=auth_headers(admin))

    assert response.status_code == 200
    assert [u["userid"] for u in response.json()] == ["admin1"]
    assert "password_hash" not in response.json()[0]


@pytest.mark.asyncio
async def test_delete_user_recomputes_statistics(client, session, admin, cohort, auth_headers):
    first, second = cohort
    user_pk = session.query(User).filter_by(userid="b").one().id

    response = await client.delete(f"/admin/users/{user_pk}", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["user"]["userid"] == "b"
    session.expire_all()
    assert session.query(Enrollment).filter_by(userid="b").count() == 0
    first_stats = session.get(CourseStatistics, first.id)
    second_stats = session.get(CourseStatistics, second.id)
    assert (first_stats.total_enrollments, first_stats.completion_rate) == (2, 50.0)
    assert second_stats.total_enrollments == 0


@pytest.mark.asyncio
async def test_delete_missing_user(client, admin, auth_headers):
    response = await client.delete("/admin/users/999", headers=auth_headers(admin))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_db_browser(client, admin, cohort, auth_headers):
    headers = auth_headers(admin)

    tables = (await client.get("/admin/db/tables", headers=headers)).json()
    users = await client.get("/admin/db/users", params={"limit": "2"}, headers=headers)
    forbidden = await client.get("/admin/db/statistics", headers=headers)

    assert "enrollments" in tables
    assert len(users.json()) == 2
    assert all("password_hash" not in row for row in users.json())
    assert forbidden.status_code == 400


@pytest.mark.asyncio
async def test_db_browser_clamps_limit(client, admin, auth_headers):
    response = await client.get("/admin/db/users", params={"limit": "-3"}, headers=auth_headers(admin))
    assert len(response.json()) == 1
