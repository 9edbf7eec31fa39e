# -*- coding: utf-8 -*-
"""Estimate — completion call to an OpenAI-compatible chat endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a nutrition expert specializing in Indian food composition data. "
    "You systematically calculate nutritional values by: (1) identifying each food item and quantity, "
    "(2) referencing standard Indian food composition values per 100g or per piece, "
    "(3) calculating per-item nutrition based on quantities, (4) providing a breakdown with totals. "
    "Respond with ONLY valid JSON in the exact format requested. "
    "No markdown, no code blocks, no explanations."
)


class CompletionConfigError(RuntimeError):
    """The completion service is not configured (e.g. no API key)."""


class CompletionError(RuntimeError):
    """The completion call failed (transport, HTTP status or non-JSON body)."""


@dataclass(frozen=True)
class CompletionSettings:
    base_url: str
    api_key: str
    model: str
    timeout: float
    temperature: float
    max_tokens: int


def resolve_completion_settings() -> CompletionSettings:
    if not settings.openai_api_key:
        raise CompletionConfigError("OpenAI API key not configured")
    return CompletionSettings(
        base_url=settings.openai_base_url.rstrip("/"),
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout=settings.openai_timeout,
        temperature=settings.openai_temperature,
        max_tokens=settings.openai_max_tokens,
    )


def build_user_prompt(meal_description: str) -> str:
    return (
        "For each food item in this meal/snack, look up its approximate nutritional values "
        "per 100g or per piece from standard Indian food composition data.\n"
        "\n"
        f"Meal/Snack: {meal_description}\n"
        "\n"
        "Provide a breakdown in this EXACT JSON format (no markdown, no code blocks):\n"
        "{\n"
        '  "items": [\n'
        "    {\n"
        '      "item": "food name",\n'
        '      "quantity": "quantity description",\n'
        '      "calories": number,\n'
        '      "protein": number\n'
        "    }\n"
        "  ],\n"
        '  "total": {\n'
        '    "calories": number,\n'
        '    "protein": number\n'
        "  }\n"
        "}\n"
        "\n"
        "Instructions:\n"
        "1. Identify each food item and its quantity\n"
        "2. Look up nutritional values per 100g or per standard serving from Indian food composition databases\n"
        "3. Calculate calories and protein for each item based on the specified quantities\n"
        "4. Include all items in the items array\n"
        "5. Sum all calories and protein in the total object"
    )


def build_messages(meal_description: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(meal_description)},
    ]


def extract_message_text(data: object) -> Optional[str]:
    """Return ``choices[0].message.content`` stripped, or None when absent/empty."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, str):
        return None
    content = content.strip()
    return content or None


def request_meal_estimate(meal_description: str) -> Optional[str]:
    """Run the completion call and return the raw reply text (None when the model said nothing)."""
    cfg = resolve_completion_settings()
    url = cfg.base_url if cfg.base_url.endswith("/chat/completions") else f"{cfg.base_url}/chat/completions"
    payload: Dict[str, Any] = {
        "model": cfg.model,
        "messages": build_messages(meal_description),
        "temperature": cfg.temperature,
        "max_tokens": cfg.max_tokens,
    }
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {cfg.api_key}",
    }

    try:
        with httpx.Client(timeout=cfg.timeout, follow_redirects=True) as client:
            resp = client.post(url, headers=headers, json=payload)
            resp.raise_for_status()
            data = resp.json()
    except httpx.HTTPStatusError as exc:
        logger.warning("completion API returned %s", exc.response.status_code)
        raise CompletionError(f"Completion API error: {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        logger.warning("completion API unreachable: %s", exc)
        raise CompletionError(f"Completion API unreachable: {exc}") from exc
    except ValueError as exc:
        raise CompletionError("Completion API returned non-JSON response") from exc

    return extract_message_text(data)
