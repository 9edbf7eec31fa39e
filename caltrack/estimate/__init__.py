# -*- coding: utf-8 -*-
"""Meal nutrition estimates from a hosted language model.

`normalizer` is pure and does no I/O; `client` makes the completion call.
"""

from .normalizer import NormalizationError, NormalizationResult, NutritionEstimate, normalize_meal_estimate

__all__ = [
    "NormalizationError",
    "NormalizationResult",
    "NutritionEstimate",
    "normalize_meal_estimate",
]
