from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    ADMIN = "admin"
    EMPLOYEE = "funcionario"


class LoginRequest(BaseModel):
    username: str
    password: str


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: str = Field(..., min_length=4, alias="newPassword")
    confirm_password: str = Field(..., alias="confirmPassword")


class SessionInfo(BaseModel):
    role: Role
