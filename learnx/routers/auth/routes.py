from typing import Optional

from fastapi import APIRouter, Body, Response, status

from learnx.config import settings
from learnx.dependencies import UserManagerDep
from learnx.schemas.auth import LoginRequest, LoginResponse, SignupRequest, SignupResponse
from learnx.security import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    name="auth.signup",
)
def signup(manager: UserManagerDep, payload: Optional[SignupRequest] = Body(default=None)):
    """Registers a new account under one of the four roles."""
    payload = payload or SignupRequest()
    user = manager.signup(
        userid=payload.userid,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    return {"message": "Signup successful.", "user": user}


@router.post("/login", response_model=LoginResponse, name="auth.login")
def login(
    response: Response,
    manager: UserManagerDep,
    payload: Optional[LoginRequest] = Body(default=None),
):
    """Checks credentials and issues a JWT, both in the body and as an HTTP-only cookie."""
    payload = payload or LoginRequest()
    user = manager.authenticate(payload.userid, payload.password, payload.role)

    token = create_access_token(user.userid, user.role)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite=settings.SESSION_COOKIE_SAMESITE.lower(),
        secure=settings.SESSION_COOKIE_SECURE,
    )
    return {"message": "Login successful.", "user": user, "access_token": token}


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, name="auth.logout")
def logout(response: Response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
