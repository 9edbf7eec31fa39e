# -*- coding: utf-8 -*-
"""Estimate — API endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..auth.security import get_current_user
from .client import CompletionConfigError, CompletionError, request_meal_estimate
from .models import CalculateCaloriesRequest, CalculateCaloriesResponse
from .normalizer import NormalizationError, normalize_meal_estimate

router = APIRouter(prefix="/api", tags=["Estimate"])

logger = logging.getLogger(__name__)


@router.post(
    "/calculate-calories",
    response_model=CalculateCaloriesResponse,
    summary="Estimate calories and protein for a meal description",
)
def calculate_calories(request: CalculateCaloriesRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    description = request.meal_description
    if not isinstance(description, str) or not description.strip():
        raise HTTPException(status_code=400, detail="Meal description is required")

    try:
        raw = request_meal_estimate(description)
    except CompletionConfigError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except CompletionError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    result = normalize_meal_estimate(raw)
    estimate = result.estimate
    if estimate is None:
        error = result.error or NormalizationError.UNPARSEABLE_RESPONSE
        logger.warning("meal estimate rejected: %s", error.value)
        raise HTTPException(status_code=500, detail=error.message)

    return CalculateCaloriesResponse(
        calories=estimate.calories,
        protein=estimate.protein,
        breakdown=estimate.breakdown,
    )
