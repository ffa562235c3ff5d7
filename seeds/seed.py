"""Demo data: staff accounts, instructors and a starter catalog.

Run ``python -m seeds.seed`` to reset the database, or set ``SEED_ON_STARTUP``
to fill an empty database when the API boots.
"""
from __future__ import annotations

import logging
from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from learnx.extensions import db
from learnx.models import Course, CourseContent, CourseTopic, User
from learnx.utils import utcnow

from seeds.utils import get_or_create, instructor_userid

log = logging.getLogger(__name__)

# Demo credentials, printed at the end of main().
ADMIN_PASSWORD = "123"
ANALYST_PASSWORD = "456"
INSTRUCTOR_PASSWORD = "123"

STAFF = [
    *[
        {"userid": f"admin{n}", "name": f"Admin {word}", "role": "administrator"}
        for n, word in enumerate(["One", "Two", "Three", "Four", "Five"], start=1)
    ],
    *[
        {"userid": f"analyst{n}", "name": f"Data Analyst {word}", "role": "data_analyst"}
        for n, word in enumerate(["One", "Two", "Three", "Four", "Five"], start=1)
    ],
]

COURSES: List[Dict] = [
    {
        "name": "Complete Web Development Bootcamp",
        "university": "Stanford University",
        "instructor": "Dr. Angela Yu",
        "category": "technology",
        "fee": 599,
        "original_price": 3999,
        "rating": 4.8,
        "students": 245682,
        "icon": "💻",
        "bestseller": True,
        "featured": True,
        "trending": True,
        "duration": "12 weeks",
    },
    {
        "name": "Digital Marketing Masterclass",
        "university": "Harvard Business School",
        "instructor": "Prof. John Smith",
        "category": "marketing",
        "fee": 549,
        "original_price": 3499,
        "rating": 4.7,
        "students": 189321,
        "icon": "📱",
        "bestseller": True,
        "featured": True,
        "duration": "8 weeks",
    },
    {
        "name": "Data Science & Machine Learning",
        "university": "MIT",
        "instructor": "Dr. Andrew Ng",
        "category": "technology",
        "fee": 699,
        "original_price": 4499,
        "rating": 4.9,
        "students": 312456,
        "icon": "🤖",
        "bestseller": True,
        "featured": True,
        "trending": True,
        "duration": "10 weeks",
    },
    {
        "name": "Python for Data Analysis",
        "university": "UC Berkeley",
        "instructor": "Dr. Sarah Johnson",
        "category": "technology",
        "fee": 479,
        "original_price": 2999,
        "rating": 4.6,
        "students": 156782,
        "icon": "🐍",
        "featured": True,
        "trending": True,
        "duration": "8 weeks",
    },
    {
        "name": "Financial Accounting Essentials",
        "university": "Wharton School",
        "instructor": "Prof. Emily Carter",
        "category": "business",
        "fee": 399,
        "original_price": 2499,
        "rating": 4.5,
        "students": 84210,
        "icon": "📊",
        "is_new": True,
        "duration": "6 weeks",
    },
]

TOPICS_BY_CATEGORY = {
    "technology": [
        ("Foundations", "Core syntax, tooling and development workflow"),
        ("Building Projects", "Apply concepts in guided, real-world projects"),
        ("Best Practices", "Testing, debugging and maintainable code"),
    ],
    "marketing": [
        ("Audience & Positioning", "Identify customers and craft your message"),
        ("Channels", "SEO, social, email and paid acquisition"),
        ("Measurement", "Analytics, attribution and experimentation"),
    ],
}

DEFAULT_TOPICS = [
    ("Core Concepts", "Fundamental theories, tools, and terminology"),
    ("Practical Application", "Hands-on exercises and real-world use cases"),
    ("Advanced Techniques", "Deeper dive into more complex scenarios"),
]

DEFAULT_CONTENTS = [
    ("Welcome & Course Tour (Video)", "video", "https://www.youtube.com/watch?v=dQw4w9WgXcQ", None),
    ("Core Concepts Walkthrough (Video)", "video", "https://www.youtube.com/watch?v=3GwjfUFyY6M", None),
    ("Lecture Notes – Key Ideas", "note", None, "Summary of the most important concepts in this course."),
    ("Cheatsheet / Reference Guide", "note", None, "Quick reference for formulas, commands and patterns."),
]


def seed_users(session: Session) -> Dict[str, User]:
    users = {}
    passwords = {"administrator": ADMIN_PASSWORD, "data_analyst": ANALYST_PASSWORD}
    for entry in STAFF:
        user, created = get_or_create(
            session,
            User,
            userid=entry["userid"],
            defaults={
                "name": entry["name"],
                "email": f"{entry['userid']}@learnx.com",
                "role": entry["role"],
                "password_hash": "",
            },
        )
        if created:
            user.set_password(passwords[entry["role"]])
        users[user.userid] = user
    return users


def seed_courses(session: Session) -> List[Course]:
    now = utcnow()
    courses = []
    instructor_names = set()
    for entry in COURSES:
        course = Course(**entry, created_at=now, status="approved")
        session.add(course)
        session.flush()

        topics = TOPICS_BY_CATEGORY.get(entry["category"], DEFAULT_TOPICS)
        for index, (title, description) in enumerate(topics, start=1):
            session.add(CourseTopic(course_id=course.id, title=title, description=description, order_index=index))
        for index, (title, kind, url, note) in enumerate(DEFAULT_CONTENTS, start=1):
            session.add(
                CourseContent(
                    course_id=course.id, title=title, content_type=kind, url=url, note_text=note, order_index=index
                )
            )
        instructor_names.add(entry["instructor"])
        courses.append(course)

    # Instructor accounts for the seeded course authors; the seeded courses stay unowned.
    for name in sorted(instructor_names):
        userid = instructor_userid(name)
        user, created = get_or_create(
            session,
            User,
            userid=userid,
            defaults={"name": name, "email": f"{userid}@learnx.com", "role": "instructor", "password_hash": ""},
        )
        if created:
            user.set_password(INSTRUCTOR_PASSWORD)
    return courses


def seed_if_empty() -> bool:
    """Seed only when the course table is empty. Returns True if anything was written."""
    with db.session_scope() as session:
        if session.scalar(select(func.count(Course.id))):
            return False
        seed_users(session)
        seed_courses(session)
    log.info("Seeded demo users and %d courses", len(COURSES))
    return True


def main():
    db.drop_all()
    db.create_all()
    with db.session_scope() as session:
        seed_users(session)
        courses = seed_courses(session)
        course_count = len(courses)
    print(f"Database seeded with {course_count} courses.")
    print(f"Admin login: admin1 / {ADMIN_PASSWORD}; analyst login: analyst1 / {ANALYST_PASSWORD}")


if __name__ == "__main__":
    main()
