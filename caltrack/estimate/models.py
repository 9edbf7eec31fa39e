# -*- coding: utf-8 -*-
"""Estimate — Pydantic models."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CalculateCaloriesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    meal_description: Optional[Any] = Field(None, alias="mealDescription")


class CalculateCaloriesResponse(BaseModel):
    calories: int
    protein: float
    # Passed through as the model returned it.
    breakdown: List[Any] = []
