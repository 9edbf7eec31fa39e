# -*- coding: utf-8 -*-
"""Foods — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# 9999-12-31T23:59:59.999Z
MAX_TIMESTAMP_MS = 253_402_300_799_999


class FoodCreateRequest(BaseModel):
    name: str = Field(..., max_length=500)
    calories: int = Field(..., gt=0)
    protein: float = Field(..., ge=0, allow_inf_nan=False)
    timestamp: Optional[int] = Field(None, ge=0, le=MAX_TIMESTAMP_MS, description="Eaten-at time, epoch milliseconds (default: now)")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value


class FoodEntry(BaseModel):
    id: str
    name: str
    calories: int
    protein: float
    timestamp: int = Field(..., description="Eaten-at time, epoch milliseconds")


class DeleteFoodResponse(BaseModel):
    message: str


class DailySummary(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    label: str
    calories: int
    protein: float
    goal: int
    percentage: float = Field(..., description="Share of the daily goal, capped at 100")
    remaining: int
    within_goal: bool
    entry_count: int = Field(0, ge=0)


class DayGroup(BaseModel):
    date: str
    label: str
    calories: int
    protein: float
    percentage: float
    within_goal: bool
    entries: List[FoodEntry]


class DaysResponse(BaseModel):
    goal: int
    days: List[DayGroup]


class WeekDayStats(BaseModel):
    date: str
    label: str
    calories: int
    protein: float
    over_goal: int = Field(..., description="Calories above the goal (negative when under)")
    is_over_goal: bool


class WeeklySummary(BaseModel):
    week_start: str
    week_end: str
    label: str
    is_current_week: bool
    calories: int
    protein: float
    goal: int
    weekly_goal: int
    average_daily_calories: float
    days_over_goal: int
    days_under_goal: int
    highest_day: WeekDayStats
    days: List[WeekDayStats]
