# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from ..config import settings
from .models import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    SessionResponse,
)
from .security import (
    TOKEN_COOKIE_NAME,
    create_access_token,
    get_current_user,
    get_optional_user,
    get_token_from_request,
    hash_password,
    verify_password,
)
from .storage import UsernameTakenError, create_user, get_user_by_username, normalize_username, update_password

router = APIRouter(prefix="/api/auth", tags=["Auth"])

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def _set_auth_cookie(resp: Response, token: str) -> None:
    max_age = int(settings.token_ttl_days) * 24 * 60 * 60
    resp.set_cookie(
        TOKEN_COOKIE_NAME,
        token,
        httponly=True,
        secure=bool(settings.cookie_secure),
        samesite="lax",
        max_age=max_age,
        path="/",
    )


def _check_new_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400, detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


@router.post("/register", response_model=AuthResponse, status_code=201, summary="Register a new user")
def register(request: RegisterRequest, response: Response):
    username = normalize_username(request.username)
    if not username or not request.password:
        raise HTTPException(status_code=400, detail="Username and password are required")
    if len(username) < MIN_USERNAME_LENGTH:
        raise HTTPException(
            status_code=400, detail=f"Username must be at least {MIN_USERNAME_LENGTH} characters"
        )
    _check_new_password(request.password)

    if get_user_by_username(username):
        raise HTTPException(status_code=409, detail="Username already exists")
    try:
        user = create_user(username=username, password_hash=hash_password(request.password))
    except UsernameTakenError as exc:
        # Lost a race with a concurrent registration.
        raise HTTPException(status_code=409, detail="Username already exists") from exc

    logger.info("registered user %s", user["id"])
    token = create_access_token(user_id=user["id"], username=user["username"])
    _set_auth_cookie(response, token)
    return AuthResponse(message="User created successfully", user_id=user["id"], username=user["username"])


@router.post("/login", response_model=AuthResponse, summary="Login")
def login(request: LoginRequest, response: Response):
    if not request.username.strip() or not request.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    user = get_user_by_username(request.username)
    if not user or not verify_password(request.password, user["password_hash"]):
        logger.warning("login failed for username %r", normalize_username(request.username))
        raise HTTPException(status_code=401, detail="Invalid username or password")

    token = create_access_token(user_id=user["id"], username=user["username"])
    _set_auth_cookie(response, token)
    return AuthResponse(message="Login successful", user_id=user["id"], username=user["username"])


@router.post("/logout", response_model=MessageResponse, summary="Logout")
def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out")


@router.get("/session", response_model=SessionResponse, summary="Current session state")
def session(request: Request, response: Response):
    user = get_optional_user(request)
    if not user:
        if get_token_from_request(request):
            # Stale or forged cookie.
            response.delete_cookie(TOKEN_COOKIE_NAME, path="/")
        return SessionResponse(authenticated=False)
    return SessionResponse(authenticated=True, user_id=user["id"], username=user["username"])


@router.post("/change-password", response_model=MessageResponse, summary="Change password")
def change_password(request: ChangePasswordRequest, user: dict = Depends(get_current_user)):
    if not request.new_password:
        raise HTTPException(status_code=400, detail="New password is required")
    _check_new_password(request.new_password)
    update_password(user["id"], hash_password(request.new_password))
    return MessageResponse(message="Password changed successfully")


@router.post("/reset-password", response_model=MessageResponse, summary="Reset password")
def reset_password(request: ResetPasswordRequest):
    if not request.username.strip() or not request.new_password:
        raise HTTPException(status_code=400, detail="Username and new password are required")
    _check_new_password(request.new_password)

    user = get_user_by_username(request.username)
    if not user:
        # Same answer either way so usernames can't be probed.
        return MessageResponse(message="If the username exists, password has been reset.")

    update_password(user["id"], hash_password(request.new_password))
    return MessageResponse(message="Password reset successfully. You can now login with your new password.")
