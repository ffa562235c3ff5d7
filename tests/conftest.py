import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from learnx.dependencies import get_db
from learnx.extensions import Base, enable_sqlite_foreign_keys
from learnx.main import app
from learnx.models import Course, User
from learnx.security import create_access_token

# One shared in-memory connection so the app and the test see the same database.
engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
enable_sqlite_foreign_keys(engine)
TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture(name="session")
def session_fixture():
    Base.metadata.create_all(engine)
    session = TestingSession()
    yield session
    session.close()
    Base.metadata.drop_all(engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_db_override():
        yield session

    app.dependency_overrides[get_db] = get_db_override
    client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session):
    def make_user(userid: str, role: str = "student", password: str | None = None) -> User:
        user = User(userid=userid, name=userid.title(), email=f"{userid}@example.com", role=role)
        if password:
            user.set_password(password)
        else:
            # Hashing is slow and most tests never log in.
            user.password_hash = "!"
        session.add(user)
        session.commit()
        return user
    return make_user


@pytest.fixture(name="make_course")
def make_course_fixture(session: Session):
    def make_course(name: str = "Intro to Python", **fields) -> Course:
        course = Course(name=name, **fields)
        session.add(course)
        session.commit()
        return course
    return make_course


@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    def auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.userid, user.role)}"}
    return auth_headers
