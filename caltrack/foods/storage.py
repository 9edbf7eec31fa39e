# -*- coding: utf-8 -*-
"""Foods — DB storage helpers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings
from .models import FoodEntry


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def from_epoch_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)


def to_epoch_ms(dt: datetime) -> int:
    return int(round(dt.timestamp() * 1000))


def food_entry_from_row(row: Dict[str, Any]) -> FoodEntry:
    return FoodEntry(
        id=row["id"],
        name=row["name"],
        calories=int(row["calories"]),
        protein=float(row["protein"]),
        timestamp=to_epoch_ms(parse_iso(row["eaten_at"])),
    )


def list_foods(user_id: str) -> List[Dict[str, Any]]:
    """All entries of a user, newest eaten_at first."""
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM foods WHERE user_id = ? ORDER BY eaten_at DESC, created_at DESC",
            (user_id,),
        ).fetchall()
        return [dict(r) for r in rows]


def get_food(user_id: str, food_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.db_path) as conn:
        row = conn.execute(
            "SELECT * FROM foods WHERE id = ? AND user_id = ?", (food_id, user_id)
        ).fetchone()
        return dict(row) if row else None


def create_food(
    *,
    user_id: str,
    name: str,
    calories: int,
    protein: float,
    eaten_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = _utc_now()
    row = {
        "id": str(uuid4()),
        "user_id": user_id,
        "name": name,
        "calories": int(calories),
        "protein": float(protein),
        "eaten_at": _iso(eaten_at or now),
        "created_at": _iso(now),
    }
    with db_conn(settings.db_path) as conn:
        conn.execute(
            """
            INSERT INTO foods (id, user_id, name, calories, protein, eaten_at, created_at)
            VALUES (:id, :user_id, :name, :calories, :protein, :eaten_at, :created_at)
            """,
            row,
        )
    return row


def update_food(
    *,
    user_id: str,
    food_id: str,
    name: str,
    calories: int,
    protein: float,
    eaten_at: Optional[datetime] = None,
) -> Optional[Dict[str, Any]]:
    with db_conn(settings.db_path) as conn:
        if eaten_at is None:
            cur = conn.execute(
                "UPDATE foods SET name = ?, calories = ?, protein = ? WHERE id = ? AND user_id = ?",
                (name, int(calories), float(protein), food_id, user_id),
            )
        else:
            cur = conn.execute(
                "UPDATE foods SET name = ?, calories = ?, protein = ?, eaten_at = ? WHERE id = ? AND user_id = ?",
                (name, int(calories), float(protein), _iso(eaten_at), food_id, user_id),
            )
        if cur.rowcount == 0:
            return None
    return get_food(user_id, food_id)


def delete_food(user_id: str, food_id: str) -> bool:
    """Delete only when the entry belongs to the user; False when nothing matched."""
    with db_conn(settings.db_path) as conn:
        cur = conn.execute("DELETE FROM foods WHERE id = ? AND user_id = ?", (food_id, user_id))
        return cur.rowcount > 0
