# -*- coding: utf-8 -*-
"""Auth — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    username: str = Field(..., max_length=64)
    password: str = Field(..., max_length=128)


class LoginRequest(BaseModel):
    username: str = Field(..., max_length=64)
    password: str = Field(..., max_length=128)


class ChangePasswordRequest(BaseModel):
    new_password: str = Field(..., max_length=128)


class ResetPasswordRequest(BaseModel):
    username: str = Field(..., max_length=64)
    new_password: str = Field(..., max_length=128)


class AuthResponse(BaseModel):
    message: str
    user_id: str
    username: str


class SessionResponse(BaseModel):
    authenticated: bool
    user_id: Optional[str] = None
    username: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
