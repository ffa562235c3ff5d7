from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SignupRequest(BaseModel):
    userid: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    userid: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    userid: str
    name: str
    email: str
    role: str
    created_at: datetime


class SignupResponse(BaseModel):
    message: str
    user: UserOut


class LoginResponse(BaseModel):
    message: str
    user: UserOut
    access_token: str
    token_type: str = "bearer"
