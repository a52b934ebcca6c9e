from datetime import datetime

from pydantic import BaseModel, Field

from pune_events.models.users import Role


class SignUpRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=6, max_length=128)
    role: Role = Role.ATTENDEE


class SignInRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class UserOut(BaseModel):
    id: int
    email: str
    role: Role


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    expires_at: datetime

    class Config:
        from_attributes = True
