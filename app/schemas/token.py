"""Pydantic schemas for bearer tokens and the identity they carry."""

from __future__ import annotations

from pydantic import BaseModel

from app.models.role import RoleId


class TokenIdentity(BaseModel):
    user_id: int
    role_id: RoleId

    model_config = {"frozen": True}
