# -*- coding: utf-8 -*-
"""Auth — DB storage helpers."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings


class UsernameTakenError(ValueError):
    pass


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def normalize_username(username: str) -> str:
    return username.strip().lower()


def get_user_by_username(username: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.db_path) as conn:
        row = conn.execute("SELECT * FROM users WHERE username = ?", (normalize_username(username),)).fetchone()
        return dict(row) if row else None


def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.db_path) as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return dict(row) if row else None


def create_user(*, username: str, password_hash: str) -> Dict[str, Any]:
    user_id = str(uuid4())
    now = _utc_now()
    username_norm = normalize_username(username)
    try:
        with db_conn(settings.db_path) as conn:
            conn.execute(
                "INSERT INTO users (id, username, password_hash, created_at) VALUES (?, ?, ?, ?)",
                (user_id, username_norm, password_hash, now),
            )
    except sqlite3.IntegrityError as exc:
        raise UsernameTakenError(username_norm) from exc
    return {"id": user_id, "username": username_norm, "password_hash": password_hash, "created_at": now}


def update_password(user_id: str, password_hash: str) -> None:
    with db_conn(settings.db_path) as conn:
        conn.execute(
            "UPDATE users SET password_hash = ?, password_updated_at = ? WHERE id = ?",
            (password_hash, _utc_now(), user_id),
        )
