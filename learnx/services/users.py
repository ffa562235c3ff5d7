"""Account management: signup, login and administrative deletion."""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from learnx.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    StorageFailureError,
)
from learnx.models import ROLES, Enrollment, User
from learnx.services.statistics import recompute_course_statistics

log = logging.getLogger(__name__)


class UserManager:
    """Manages user accounts using a request-scoped SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_userid(self, userid: str) -> Optional[User]:
        return self.session.execute(select(User).where(User.userid == userid)).scalar_one_or_none()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.session.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def signup(self, userid: str, name: str, email: str, password: str, role: str) -> User:
        """Create an account.

        Raises:
            InvalidInputError: A field is blank or ``role`` is unknown.
            ConflictError: ``userid`` or ``email`` is already registered.
        """
        userid = (userid or "").strip()
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not userid or not name or not email or not password or not role:
            raise InvalidInputError("userid, name, email, password and role are required.")
        if role not in ROLES:
            raise InvalidInputError("Invalid role.")

        if self.get_by_userid(userid):
            raise ConflictError("User ID already taken.")
        if self.get_by_email(email):
            raise ConflictError("Email already in use.")

        user = User(userid=userid, name=name, email=email, role=role)
        user.set_password(password)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent signup for the same userid/email.
            self.session.rollback()
            raise ConflictError("User ID or email already registered.") from exc
        self.session.refresh(user)
        log.info("Registered %s as %s", user.userid, user.role)
        return user

    def authenticate(self, userid: str, password: str, role: str) -> User:
        """Check credentials and the role the user claims to log in as.

        Raises:
            InvalidInputError: A field is missing.
            NotFoundError: No account with this ``userid``.
            AuthenticationError: Wrong password or role mismatch.
        """
        if not userid or not password or not role:
            raise InvalidInputError("userid, password and role are required.")

        user = self.get_by_userid(userid.strip())
        if user is None:
            raise NotFoundError("User", "Account not found. Please sign up first.")
        if not user.check_password(password):
            raise AuthenticationError("Incorrect password. Please try again.")
        if user.role != role:
            raise AuthenticationError(f"Role mismatch. Please select the correct role: {user.role}")

        # check_password may have upgraded a deprecated hash.
        if user in self.session.dirty:
            self.session.commit()
        return user

    def list_users(self) -> list[User]:
        return list(self.session.execute(select(User).order_by(User.id)).scalars())

    def delete_user(self, user_pk: int) -> dict:
        """Delete an account and its enrollments, then re-derive the affected course statistics."""
        user = self.session.get(User, user_pk)
        if user is None:
            raise NotFoundError("User")

        deleted = {"id": user.id, "userid": user.userid, "name": user.name, "role": user.role}
        course_ids = list(
            self.session.execute(
                select(Enrollment.course_id).where(Enrollment.userid == user.userid)
            ).scalars()
        )
        try:
            self.session.delete(user)
            self.session.flush()
            for course_id in course_ids:
                recompute_course_statistics(self.session, course_id)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.exception("Deleting user %s rolled back", user_pk)
            raise StorageFailureError() from exc
        log.info("Deleted user %s; recomputed statistics for %d course(s)", user_pk, len(course_ids))
        return deleted
