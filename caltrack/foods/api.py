# -*- coding: utf-8 -*-
"""Foods — API endpoints."""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user
from ..config import settings
from .insights import daily_summary, group_by_day, resolve_zone, weekly_summary
from .models import DailySummary, DaysResponse, DeleteFoodResponse, FoodCreateRequest, FoodEntry, WeeklySummary
from .storage import create_food, delete_food, food_entry_from_row, from_epoch_ms, list_foods, update_food

router = APIRouter(prefix="/api/foods", tags=["Foods"])


def _check_food_id(food_id: str) -> None:
    try:
        UUID(food_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid food ID format") from exc


def _zone_or_400(tz: Optional[str]) -> tzinfo:
    try:
        return resolve_zone(tz or settings.timezone)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _day_or_400(value: Optional[str], zone: tzinfo) -> date:
    if not value:
        return datetime.now(timezone.utc).astimezone(zone).date()
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value} (expected YYYY-MM-DD)") from exc


def _user_entries(user_id: str) -> List[FoodEntry]:
    return [food_entry_from_row(r) for r in list_foods(user_id)]


@router.get("", response_model=List[FoodEntry], summary="List food entries (newest first)")
def list_entries(user: dict = Depends(get_current_user)):
    return _user_entries(user["id"])


@router.post("", response_model=FoodEntry, status_code=201, summary="Add a food entry")
def create_entry(request: FoodCreateRequest, user: dict = Depends(get_current_user)):
    eaten_at = from_epoch_ms(request.timestamp) if request.timestamp is not None else None
    row = create_food(
        user_id=user["id"],
        name=request.name,
        calories=request.calories,
        protein=request.protein,
        eaten_at=eaten_at,
    )
    return food_entry_from_row(row)


@router.put("/{food_id}", response_model=FoodEntry, summary="Edit a food entry")
def update_entry(food_id: str, request: FoodCreateRequest, user: dict = Depends(get_current_user)):
    _check_food_id(food_id)
    eaten_at = from_epoch_ms(request.timestamp) if request.timestamp is not None else None
    row = update_food(
        user_id=user["id"],
        food_id=food_id,
        name=request.name,
        calories=request.calories,
        protein=request.protein,
        eaten_at=eaten_at,
    )
    if not row:
        raise HTTPException(status_code=404, detail="Food entry not found")
    return food_entry_from_row(row)


@router.delete("/{food_id}", response_model=DeleteFoodResponse, summary="Delete a food entry")
def delete_entry(food_id: str, user: dict = Depends(get_current_user)):
    _check_food_id(food_id)
    if not delete_food(user["id"], food_id):
        raise HTTPException(status_code=404, detail="Food entry not found")
    return DeleteFoodResponse(message="Food entry deleted successfully")


@router.get("/summary/daily", response_model=DailySummary, summary="Totals for one day")
def summary_daily(
    day: Optional[str] = Query(default=None, alias="date", description="YYYY-MM-DD (default: today)"),
    tz: Optional[str] = Query(default=None, description="IANA time zone, e.g. Asia/Kolkata"),
    user: dict = Depends(get_current_user),
):
    zone = _zone_or_400(tz)
    today = _day_or_400(None, zone)
    return daily_summary(
        _user_entries(user["id"]),
        day=_day_or_400(day, zone),
        today=today,
        zone=zone,
        goal=settings.daily_calorie_goal,
    )


@router.get("/summary/days", response_model=DaysResponse, summary="Entries grouped by day")
def summary_days(
    tz: Optional[str] = Query(default=None, description="IANA time zone, e.g. Asia/Kolkata"),
    user: dict = Depends(get_current_user),
):
    zone = _zone_or_400(tz)
    groups = group_by_day(
        _user_entries(user["id"]),
        today=_day_or_400(None, zone),
        zone=zone,
        goal=settings.daily_calorie_goal,
    )
    return DaysResponse(goal=settings.daily_calorie_goal, days=groups)


@router.get("/summary/weekly", response_model=WeeklySummary, summary="Monday-Sunday week insights")
def summary_weekly(
    day: Optional[str] = Query(default=None, alias="date", description="Any day in the week (default: today)"),
    tz: Optional[str] = Query(default=None, description="IANA time zone, e.g. Asia/Kolkata"),
    user: dict = Depends(get_current_user),
):
    zone = _zone_or_400(tz)
    return weekly_summary(
        _user_entries(user["id"]),
        day=_day_or_400(day, zone),
        today=_day_or_400(None, zone),
        zone=zone,
        goal=settings.daily_calorie_goal,
    )
