"""Pydantic schemas for registration, login and user profiles."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from app.models.role import RoleId


class RegisterRequest(BaseModel):
    first_name: str | None = Field(default=None, alias="nombre", max_length=100)
    last_name: str | None = Field(default=None, alias="apellido", max_length=100)
    national_id: str | None = Field(default=None, alias="cedula", max_length=20)
    email: str = Field(alias="correo_electronico", min_length=1, max_length=320)
    password: str = Field(alias="contrasena", min_length=1, max_length=72)
    role_id: RoleId = Field(alias="id_rol")

    model_config = {"populate_by_name": True}

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        # Case is preserved: emails are matched exactly as stored
        v = v.strip()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class RegisterResponse(BaseModel):
    message: str
    userId: int


class LoginRequest(BaseModel):
    email: str = Field(alias="correo_electronico", min_length=1, max_length=320)
    password: str = Field(alias="contrasena", min_length=1, max_length=72)

    model_config = {"populate_by_name": True}

    @field_validator("email")
    @classmethod
    def _strip_email(cls, v: str) -> str:
        # Same normalisation as registration
        return v.strip()


class PublicUser(BaseModel):
    id: int
    rol: str


class LoginResponse(BaseModel):
    message: str
    token: str
    usuario: PublicUser


class UserRead(BaseModel):
    id: int
    first_name: str | None = Field(serialization_alias="nombre")
    last_name: str | None = Field(serialization_alias="apellido")
    email: str = Field(serialization_alias="correo_electronico")
    role_id: int = Field(serialization_alias="id_rol")
    role_name: str = Field(serialization_alias="rol")

    model_config = {"from_attributes": True}
