from typing import Annotated, Any, Iterator, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from learnx.config import settings
from learnx.exceptions import AuthenticationError, PermissionDeniedError
from learnx.extensions import db
from learnx.models import User
from learnx.security import decode_access_token
from learnx.services.enrollment import EnrollmentManager
from learnx.services.instructor import InstructorManager
from learnx.services.users import UserManager


def get_db() -> Iterator[Session]:
    """Dependency to provide a database session, closed when the request ends."""
    session = db.SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return None


def get_current_user(request: Request, session: Session = Depends(get_db)) -> Optional[User]:
    """Resolves the user from the auth cookie, falling back to an Authorization: Bearer header."""
    token = request.cookies.get(settings.AUTH_COOKIE_NAME) or _bearer_token(request)
    if not token:
        return None

    payload: Optional[dict[str, Any]] = decode_access_token(token)
    if not payload or not payload.get("sub"):
        return None

    return session.query(User).filter(User.userid == payload["sub"]).first()


def require_user(current_user: Optional[User] = Depends(get_current_user)) -> User:
    if current_user is None:
        raise AuthenticationError("Not authenticated.")
    return current_user


def require_role(*roles: str):
    """Dependency factory that ensures a user has one of the required roles."""
    def role_checker(user: User = Depends(require_user)) -> User:
        if user.role not in roles:
            raise PermissionDeniedError("Permission denied.")
        return user
    return role_checker


def require_self(userid: str, user: User = Depends(require_user)) -> User:
    """The ``{userid}`` path parameter must name the caller."""
    if user.userid != userid:
        raise PermissionDeniedError("You may only act on your own account.")
    return user


def get_enrollment_manager(session: Session = Depends(get_db)) -> EnrollmentManager:
    return EnrollmentManager(session)


def get_user_manager(session: Session = Depends(get_db)) -> UserManager:
    return UserManager(session)


def get_instructor_manager(session: Session = Depends(get_db)) -> InstructorManager:
    return InstructorManager(session)


DbSession = Annotated[Session, Depends(get_db)]
EnrollmentManagerDep = Annotated[EnrollmentManager, Depends(get_enrollment_manager)]
UserManagerDep = Annotated[UserManager, Depends(get_user_manager)]
InstructorManagerDep = Annotated[InstructorManager, Depends(get_instructor_manager)]
