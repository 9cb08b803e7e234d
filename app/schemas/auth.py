from datetime import datetime

from pydantic import BaseModel, Field


class SignUpRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=128)
    confirm_password: str | None = None
    display_name: str = Field(default="", max_length=200)


class SignUpOut(BaseModel):
    uid: str


class SignInRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=128)


class SessionOut(BaseModel):
    uid: str
    email: str
    display_name: str
    is_admin: bool
    is_logged_in: bool
    login_time: datetime

    class Config:
        from_attributes = True


class SignInOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    session: SessionOut
