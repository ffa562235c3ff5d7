from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from learnx.config import settings

# Accounts migrated from the legacy database carry bcrypt hashes; they are
# upgraded to argon2 the next time the owner logs in.
pwd_context = CryptContext(schemes=["argon2", "bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_and_update_password(password: str, hashed_password: str) -> tuple[bool, str | None]:
    """Returns (valid, replacement_hash); the replacement is None unless the stored scheme is deprecated."""
    try:
        return pwd_context.verify_and_update(password, hashed_password)
    except ValueError:
        # Unrecognised hash format in the users table.
        return False, None


def create_access_token(userid: str, role: str, expires_delta: timedelta | None = None) -> str:
    """Signs a JWT whose subject is the external ``userid`` of the account."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {"sub": userid, "role": role, "exp": expire}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict[str, Any]]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
